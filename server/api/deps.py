# server/api/deps.py

import logging
from pathlib import Path
from anyio import from_thread
from fastapi import Request
from fastapi.templating import Jinja2Templates
from sqlalchemy.orm import Session

from core.session import SESSION_LIFETIME, SessionCodec, SessionIdentity
from core.state import ViewerRegistry
from core.stats import compute_stats


logger = logging.getLogger(__name__)

TEMPLATES_DIR = Path(__file__).resolve().parent.parent / "templates"
templates = Jinja2Templates(directory=str(TEMPLATES_DIR))

SESSION_COOKIE = "token"


# -------------------------------
# Auth gate
# -------------------------------

class RedirectRequired(Exception):
    """
    Raised by route guards to short-circuit a request into a redirect.
    """
    def __init__(self, location: str, status_code: int = 302):
        super().__init__(location)
        self.location = location
        self.status_code = status_code


async def auth_middleware(request: Request, call_next):
    """
    Attaches the caller's identity to request.state.user, or None for anonymous requests.
    Never rejects a request.
    """
    codec: SessionCodec = request.app.state.codec
    request.state.user = codec.verify(request.cookies.get(SESSION_COOKIE))
    return await call_next(request)


def current_user(request: Request) -> SessionIdentity | None:
    return getattr(request.state, "user", None)


def require_auth(request: Request) -> SessionIdentity:
    user = current_user(request)
    if user is None:
        raise RedirectRequired("/login")
    return user


def anonymous_only(request: Request):
    if current_user(request) is not None:
        raise RedirectRequired("/")


def get_codec(request: Request) -> SessionCodec:
    return request.app.state.codec


def set_session_cookie(response, token: str):
    response.set_cookie(
        SESSION_COOKIE,
        token,
        max_age=int(SESSION_LIFETIME.total_seconds()),
        httponly=True,
        samesite="lax"
    )


def clear_session_cookie(response):
    response.delete_cookie(SESSION_COOKIE, httponly=True, samesite="lax")


# -------------------------------
# Live updates
# -------------------------------

def get_viewers(request: Request) -> ViewerRegistry:
    return request.app.state.viewers


def broadcast_stats(request: Request, db: Session) -> int:
    """
    Recomputes the stats snapshot and pushes it to every open viewer.
    Must be called from a sync route handler (a worker thread).
    """
    message = {"type": "stats", "data": compute_stats(db)}
    delivered = from_thread.run(get_viewers(request).broadcast, message)
    logger.debug("Broadcast stats to %s viewer(s)", delivered)
    return delivered
