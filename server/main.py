# server/main.py

import logging
from pathlib import Path
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse, RedirectResponse
from fastapi.staticfiles import StaticFiles
from sqlalchemy.exc import SQLAlchemyError

from api import auth, dashboard, projects, tasks, live, projects_api
from api.deps import RedirectRequired, auth_middleware, templates
from config import Settings, load_settings
from core.errors import WorkspaceError
from core.session import SessionCodec
from core.state import ViewerRegistry
from database import init_db


logger = logging.getLogger(__name__)

STATIC_DIR = Path(__file__).resolve().parent / "static"


def render_error(request: Request, exc: Exception):
    logger.exception("Request %s %s failed", request.method, request.url.path, exc_info=exc)
    if request.url.path.startswith("/api/"):
        return JSONResponse(status_code=500, content={"detail": str(exc)})
    return templates.TemplateResponse(request, "error.html", {"error": exc}, status_code=500)


async def redirect_handler(request: Request, exc: RedirectRequired):
    return RedirectResponse(exc.location, status_code=exc.status_code)


async def workspace_error_handler(request: Request, exc: Exception):
    return render_error(request, exc)


def create_app(settings: Settings | None = None) -> FastAPI:
    settings = settings or load_settings()

    init_db(settings.database_url)
    logger.info("Connected to database")

    app = FastAPI(title="Workspace Tracker")
    app.state.settings = settings
    app.state.codec = SessionCodec(settings.jwt_secret_key)
    app.state.viewers = ViewerRegistry()

    app.middleware("http")(auth_middleware)

    app.add_exception_handler(RedirectRequired, redirect_handler)
    app.add_exception_handler(WorkspaceError, workspace_error_handler)
    app.add_exception_handler(SQLAlchemyError, workspace_error_handler)
    app.add_exception_handler(Exception, workspace_error_handler)

    app.mount("/static", StaticFiles(directory=str(STATIC_DIR)), name="static")

    app.include_router(auth.router)
    app.include_router(dashboard.router)
    app.include_router(projects.router)
    app.include_router(tasks.router)
    app.include_router(projects_api.router)
    app.include_router(live.router)

    return app


if __name__ == "__main__":
    import uvicorn

    settings = load_settings()
    uvicorn.run(create_app(settings), host="0.0.0.0", port=settings.port)
