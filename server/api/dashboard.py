# server/api/dashboard.py

from fastapi import APIRouter, Depends, Request
from sqlalchemy.orm import Session

from api.deps import require_auth, templates
from core.stats import compute_stats
from database import get_db


router = APIRouter(dependencies=[Depends(require_auth)])


@router.get("/")
def dashboard(request: Request, db: Session = Depends(get_db)):
    return templates.TemplateResponse(request, "dashboard.html", compute_stats(db))
