# server/api/projects.py

from fastapi import APIRouter, Depends, Form, Request, status
from fastapi.responses import RedirectResponse
from sqlalchemy.orm import Session

from api.deps import broadcast_stats, require_auth, templates
from core.store import (
    create_project,
    create_task,
    get_project,
    list_projects,
    list_tasks,
    project_summary,
)
from database import get_db


# -------------------------------
# Router
# -------------------------------

router = APIRouter(prefix="/projects", dependencies=[Depends(require_auth)])


def render_project_detail(request: Request, db: Session, project_id: str, error: str | None = None):
    project = get_project(db, project_id)
    return templates.TemplateResponse(request, "project_detail.html", {
        "project": project_summary(project),
        "tasks": list_tasks(db, project.id),
        "error": error,
    })


# -------------------------------
# Project Endpoints
# -------------------------------

@router.get("")
def projects_page(request: Request, db: Session = Depends(get_db)):
    """
    Lists every project with its stored progress.
    """
    projects = [project_summary(p) for p in list_projects(db)]
    return templates.TemplateResponse(request, "projects.html", {"projects": projects})


@router.get("/new")
def new_project_form(request: Request):
    return templates.TemplateResponse(request, "new_project.html", {"error": None})


@router.post("")
def create_project_action(
    request: Request,
    title: str = Form(""),
    name: str = Form(""),
    description: str = Form(""),
    db: Session = Depends(get_db)
):
    """
    Creates a project from the form. The legacy "name" field is accepted in place of "title".
    """
    title = (title or name).strip()
    if not title:
        return templates.TemplateResponse(request, "new_project.html", {"error": "Project name is required."})

    create_project(db, title, description.strip() or None, progress=0)
    broadcast_stats(request, db)
    return RedirectResponse("/projects", status_code=status.HTTP_303_SEE_OTHER)


@router.get("/{project_id}")
def project_detail(project_id: str, request: Request, db: Session = Depends(get_db)):
    """
    Shows one project with its tasks. Unknown or malformed ids end on the error page.
    """
    return render_project_detail(request, db, project_id)


@router.post("/{project_id}/tasks")
def create_task_action(
    project_id: str,
    request: Request,
    title: str = Form(""),
    db: Session = Depends(get_db)
):
    title = title.strip()
    if not title:
        return render_project_detail(request, db, project_id, "Task title is required.")

    task = create_task(db, title, project_id)
    broadcast_stats(request, db)
    return RedirectResponse(f"/projects/{task.project_id}", status_code=status.HTTP_303_SEE_OTHER)
