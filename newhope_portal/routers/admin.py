import logging
from typing import Optional

from fastapi import APIRouter, Depends, Form, Request
from fastapi.responses import HTMLResponse, RedirectResponse
from sqlalchemy.orm import Session

from ..auth import get_db, require_role
from ..exceptions import MissingField
from ..models import ROLE_ADMIN
from ..services import admissions
from ..services.announcements import AnnouncementBoard
from ..services.registry import PatientRegistry, STATUS_SUGGESTIONS
from ..sessions import SessionUser

log = logging.getLogger("newhope-portal.admin")

router = APIRouter(prefix="/admin")

DASHBOARD = "/admin/dashboard"


def _parse_id(raw: str) -> Optional[int]:
    """Path ids arrive as text; anything non-numeric is ignored."""
    try:
        return int(raw)
    except (TypeError, ValueError):
        return None


def _back() -> RedirectResponse:
    return RedirectResponse(url=DASHBOARD, status_code=302)


@router.get("/dashboard", response_class=HTMLResponse)
def dashboard(
    request: Request,
    db: Session = Depends(get_db),
    admin: SessionUser = Depends(require_role(ROLE_ADMIN)),
):
    from ..templates_engine import templates
    return templates.TemplateResponse(
        request,
        "admin_dashboard.html",
        {
            "user": admin,
            "patients": PatientRegistry(db).list_all(),
            "announcements": AnnouncementBoard(db).list_all(),
            "statuses": STATUS_SUGGESTIONS,
        },
    )


@router.post("/announcements")
def create_announcement(
    title: Optional[str] = Form(None),
    content: Optional[str] = Form(None),
    db: Session = Depends(get_db),
    admin: SessionUser = Depends(require_role(ROLE_ADMIN)),
):
    try:
        admissions.post_announcement(db, (title or "").strip(), (content or "").strip())
    except MissingField:
        # incomplete posts are dropped
        log.info("Announcement without title/content ignored")
    return _back()


@router.post("/announcements/{announcement_id}/delete")
def delete_announcement(
    announcement_id: str,
    db: Session = Depends(get_db),
    admin: SessionUser = Depends(require_role(ROLE_ADMIN)),
):
    parsed = _parse_id(announcement_id)
    if parsed is not None:
        admissions.remove_announcement(db, parsed)
    return _back()


@router.post("/patients/{patient_id}/status")
def update_patient_status(
    patient_id: str,
    status: Optional[str] = Form(None),
    db: Session = Depends(get_db),
    admin: SessionUser = Depends(require_role(ROLE_ADMIN)),
):
    parsed = _parse_id(patient_id)
    if parsed is not None:
        admissions.update_status(db, parsed, (status or "").strip())
    return _back()


@router.post("/patients/{patient_id}/delete")
def delete_patient(
    patient_id: str,
    db: Session = Depends(get_db),
    admin: SessionUser = Depends(require_role(ROLE_ADMIN)),
):
    parsed = _parse_id(patient_id)
    if parsed is not None:
        admissions.delete_patient(db, parsed)
    return _back()
