# server/core/store.py

import logging
from passlib.context import CryptContext
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from core.errors import AuthFailure, DuplicateIdentity, InvalidReference, NotFound
from models.project import Project, Task
from models.user import User


logger = logging.getLogger(__name__)

pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")


def parse_id(raw) -> int:
    """
    Converts an id taken from a URL or form into an integer primary key.
    Raises InvalidReference for anything that cannot be a key.
    """
    if isinstance(raw, bool):
        raise InvalidReference(f"Invalid id: {raw!r}")
    try:
        value = int(raw)
    except (TypeError, ValueError):
        raise InvalidReference(f"Invalid id: {raw!r}")
    if value <= 0:
        raise InvalidReference(f"Invalid id: {raw!r}")
    return value


# -------------------------------
# Identity store
# -------------------------------

def get_password_hash(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    return pwd_context.verify(plain_password, hashed_password)


def find_user_by_email(db: Session, email: str) -> User | None:
    return db.query(User).filter(User.email == email).first()


def find_user_by_id(db: Session, user_id) -> User | None:
    return db.get(User, parse_id(user_id))


def create_user(db: Session, name: str, email: str, password_hash: str) -> User:
    if find_user_by_email(db, email):
        raise DuplicateIdentity(f"Email already registered: {email}")

    user = User(name=name, email=email, password_hash=password_hash)
    db.add(user)
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        raise DuplicateIdentity(f"Email already registered: {email}")
    db.refresh(user)
    logger.info("Registered user %s (id=%s)", email, user.id)
    return user


def authenticate_user(db: Session, email: str, password: str) -> User:
    user = find_user_by_email(db, email)
    if not user or not verify_password(password, user.password_hash):
        raise AuthFailure("Invalid email or password.")
    return user


# -------------------------------
# Domain store: projects
# -------------------------------

def list_projects(db: Session) -> list[Project]:
    return db.query(Project).order_by(Project.id.asc()).all()


def find_project(db: Session, project_id) -> Project | None:
    return db.get(Project, parse_id(project_id))


def get_project(db: Session, project_id) -> Project:
    project = find_project(db, project_id)
    if project is None:
        raise NotFound(f"Project not found: {project_id}")
    return project


def create_project(db: Session, title: str, description: str | None = None, progress: int = 0) -> Project:
    project = Project(
        title=title,
        description=description or None,
        progress=min(max(int(progress or 0), 0), 100)
    )
    db.add(project)
    db.commit()
    db.refresh(project)
    logger.info("Created project %r (id=%s)", project.title, project.id)
    return project


def project_summary(project: Project) -> dict:
    return {
        "id": project.id,
        "name": project.title,
        "description": project.description,
        "progress": project.progress or 0,
    }


# -------------------------------
# Domain store: tasks
# -------------------------------

def list_tasks(db: Session, project_id=None) -> list[Task]:
    query = db.query(Task)
    if project_id is not None:
        query = query.filter(Task.project_id == parse_id(project_id))
    return query.order_by(Task.id.asc()).all()


def list_task_rows(db: Session) -> list[dict]:
    """
    Lists every task with the title of its owning project.
    Tasks whose project no longer exists are reported under "Unknown".
    """
    rows = (
        db.query(Task, Project.title)
        .outerjoin(Project, Task.project_id == Project.id)
        .order_by(Task.id.asc())
        .all()
    )
    return [
        {
            "id": task.id,
            "title": task.title,
            "completed": task.completed,
            "projectId": task.project_id,
            "projectTitle": project_title if project_title is not None else "Unknown",
        }
        for task, project_title in rows
    ]


def find_task(db: Session, task_id) -> Task | None:
    return db.get(Task, parse_id(task_id))


def create_task(db: Session, title: str, project_id) -> Task:
    # The owning project is not looked up first.
    task = Task(title=title, completed=False, project_id=parse_id(project_id))
    db.add(task)
    db.commit()
    db.refresh(task)
    logger.info("Created task %r under project %s", task.title, task.project_id)
    return task


def set_task_completed(db: Session, task_id, completed: bool) -> Task:
    task = find_task(db, task_id)
    if task is None:
        raise NotFound(f"Task not found: {task_id}")
    task.completed = bool(completed)
    db.commit()
    db.refresh(task)
    return task


def toggle_task(db: Session, task_id) -> Task:
    task = find_task(db, task_id)
    if task is None:
        raise NotFound(f"Task not found: {task_id}")
    return set_task_completed(db, task.id, not task.completed)
