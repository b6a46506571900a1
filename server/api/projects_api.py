# server/api/projects_api.py

from fastapi import APIRouter, Depends, HTTPException, Request, status
from pydantic import BaseModel, Field
from sqlalchemy.orm import Session

from api.deps import broadcast_stats, require_auth
from core.stats import compute_stats
from core.store import create_project, get_project, list_projects, list_tasks, project_summary
from database import get_db


router = APIRouter(prefix="/api/projects", dependencies=[Depends(require_auth)])


class CreateProjectRequest(BaseModel):
    """
    Request schema for creating a project through the JSON API.
    """
    title: str
    description: str | None = None
    progress: int = Field(default=0, ge=0, le=100)


def task_payload(task) -> dict:
    return {"id": task.id, "title": task.title, "completed": task.completed, "projectId": task.project_id}


@router.get("")
def list_projects_api(db: Session = Depends(get_db)):
    return [project_summary(p) for p in list_projects(db)]


@router.post("", status_code=status.HTTP_201_CREATED)
def create_project_api(req: CreateProjectRequest, request: Request, db: Session = Depends(get_db)):
    title = req.title.strip()
    if not title:
        raise HTTPException(status_code=422, detail="Project title is required.")

    project = create_project(db, title, req.description, req.progress)
    broadcast_stats(request, db)
    return project_summary(project)


@router.get("/stats")
def stats_api(db: Session = Depends(get_db)):
    return compute_stats(db)


@router.get("/{project_id}")
def project_detail_api(project_id: str, db: Session = Depends(get_db)):
    project = get_project(db, project_id)
    return {
        **project_summary(project),
        "tasks": [task_payload(t) for t in list_tasks(db, project.id)],
    }
