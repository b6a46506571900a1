# server/api/tasks.py

from fastapi import APIRouter, Depends, Request, status
from fastapi.responses import RedirectResponse
from sqlalchemy.orm import Session

from api.deps import broadcast_stats, require_auth, templates
from core.store import list_task_rows, toggle_task
from database import get_db


router = APIRouter(prefix="/tasks", dependencies=[Depends(require_auth)])


@router.api_route("", methods=["GET", "POST"])
def tasks_page(request: Request, db: Session = Depends(get_db)):
    return templates.TemplateResponse(request, "tasks.html", {"tasks": list_task_rows(db)})


@router.post("/{task_id}/toggle")
def toggle_task_action(task_id: str, request: Request, db: Session = Depends(get_db)):
    """
    Flips a task's completion flag and sends the caller back where they came from.
    """
    toggle_task(db, task_id)
    broadcast_stats(request, db)
    return RedirectResponse(request.headers.get("referer", "/"), status_code=status.HTTP_303_SEE_OTHER)
