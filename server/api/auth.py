# server/api/auth.py

import logging
from fastapi import APIRouter, Depends, Form, Request, status
from fastapi.responses import RedirectResponse
from sqlalchemy.orm import Session

from api.deps import (
    anonymous_only,
    clear_session_cookie,
    get_codec,
    set_session_cookie,
    templates,
)
from core.errors import AuthFailure, DuplicateIdentity, ValidationError
from core.session import SessionCodec
from core.store import authenticate_user, create_user, get_password_hash
from database import get_db


logger = logging.getLogger(__name__)

router = APIRouter()


def render_auth_form(request: Request, template: str, error: str | None = None):
    return templates.TemplateResponse(request, template, {"error": error})


def start_session(codec: SessionCodec, user) -> RedirectResponse:
    token = codec.issue(user.id, user.email)
    response = RedirectResponse("/", status_code=status.HTTP_303_SEE_OTHER)
    set_session_cookie(response, token)
    return response


def validate_registration(name: str, email: str, password: str, confirm_password: str):
    if not name or not email or not password:
        raise ValidationError("All fields are required.")
    if password != confirm_password:
        raise ValidationError("Passwords do not match.")


# -------------------------------
# Registration
# -------------------------------

@router.get("/register", dependencies=[Depends(anonymous_only)])
def register_form(request: Request):
    return render_auth_form(request, "register.html")


@router.post("/register")
def register(
    request: Request,
    name: str = Form(""),
    email: str = Form(""),
    password: str = Form(""),
    confirm_password: str = Form("", alias="confirmPassword"),
    db: Session = Depends(get_db),
    codec: SessionCodec = Depends(get_codec)
):
    name, email = name.strip(), email.strip()
    try:
        validate_registration(name, email, password, confirm_password)
        user = create_user(db, name, email, get_password_hash(password))
    except ValidationError as e:
        return render_auth_form(request, "register.html", str(e))
    except DuplicateIdentity:
        return render_auth_form(request, "register.html", "Email already registered.")

    return start_session(codec, user)


# -------------------------------
# Login / Logout
# -------------------------------

@router.get("/login", dependencies=[Depends(anonymous_only)])
def login_form(request: Request):
    return render_auth_form(request, "login.html")


@router.post("/login")
def login(
    request: Request,
    email: str = Form(""),
    password: str = Form(""),
    db: Session = Depends(get_db),
    codec: SessionCodec = Depends(get_codec)
):
    try:
        user = authenticate_user(db, email.strip(), password)
    except AuthFailure:
        logger.info("Failed login attempt for %s", email)
        return render_auth_form(request, "login.html", "Invalid email or password.")

    logger.info("User %s logged in", user.email)
    return start_session(codec, user)


@router.post("/logout")
def logout():
    response = RedirectResponse("/login", status_code=status.HTTP_303_SEE_OTHER)
    clear_session_cookie(response)
    return response
