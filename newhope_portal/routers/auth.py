import logging
from typing import Optional

from fastapi import APIRouter, Depends, Form, Request, status
from fastapi.responses import RedirectResponse, HTMLResponse
from sqlalchemy.orm import Session

from ..auth import get_db, start_session, end_session
from ..exceptions import PortalError, InvalidCredentials
from ..models import ROLE_ADMIN
from ..services.admissions import register_patient
from ..services.identities import IdentityStore

log = logging.getLogger("newhope-portal.auth")

router = APIRouter()

LANDING = {ROLE_ADMIN: "/admin/dashboard"}
PATIENT_LANDING = "/patient/dashboard"


def _render(request: Request, template: str, error: Optional[str] = None, form: Optional[dict] = None,
            status_code: int = 200) -> HTMLResponse:
    from ..templates_engine import templates
    return templates.TemplateResponse(
        request,
        template,
        {"user": None, "error": error, "form": form or {}},
        status_code=status_code,
    )


@router.get("/register", response_class=HTMLResponse)
def register_form(request: Request):
    return _render(request, "register.html")


@router.post("/register")
def register(
    request: Request,
    name: Optional[str] = Form(None),
    email: Optional[str] = Form(None),
    password: Optional[str] = Form(None),
    phone: Optional[str] = Form(None),
    address: Optional[str] = Form(None),
    reason: Optional[str] = Form(None),
    db: Session = Depends(get_db),
):
    form = {
        "name": (name or "").strip(),
        "email": (email or "").strip(),
        "phone": (phone or "").strip(),
        "address": (address or "").strip(),
        "reason": (reason or "").strip(),
    }
    try:
        identity, _ = register_patient(
            db,
            form["name"],
            form["email"],
            password or "",
            phone=form["phone"],
            address=form["address"],
            reason=form["reason"],
        )
    except PortalError as e:
        log.info("Registration rejected for %r: %s", form["email"], e.message)
        return _render(request, "register.html", error=e.message, form=form, status_code=status.HTTP_400_BAD_REQUEST)

    resp = RedirectResponse(url=PATIENT_LANDING, status_code=302)
    start_session(request, resp, identity)
    return resp


@router.get("/login", response_class=HTMLResponse)
def login_form(request: Request):
    return _render(request, "login.html")


@router.post("/login")
def login(
    request: Request,
    email: Optional[str] = Form(None),
    password: Optional[str] = Form(None),
    db: Session = Depends(get_db),
):
    try:
        identity = IdentityStore(db).authenticate(email or "", password or "")
    except InvalidCredentials as e:
        log.info("Failed login for %r", email)
        return _render(request, "login.html", error=e.message, form={"email": email or ""},
                       status_code=status.HTTP_400_BAD_REQUEST)

    resp = RedirectResponse(url=LANDING.get(identity.role, PATIENT_LANDING), status_code=302)
    start_session(request, resp, identity)
    log.info("User %s logged in as %s", identity.id, identity.role)
    return resp


@router.post("/logout")
def logout(request: Request):
    resp = RedirectResponse(url="/", status_code=302)
    end_session(request, resp)
    return resp
