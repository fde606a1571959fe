from fastapi import APIRouter, Depends, Request
from fastapi.responses import HTMLResponse
from sqlalchemy.orm import Session

from ..auth import get_db, require_role
from ..models import ROLE_PATIENT
from ..services.announcements import AnnouncementBoard
from ..services.registry import PatientRegistry
from ..sessions import SessionUser

router = APIRouter(prefix="/patient")


@router.get("/dashboard", response_class=HTMLResponse)
def dashboard(
    request: Request,
    db: Session = Depends(get_db),
    user: SessionUser = Depends(require_role(ROLE_PATIENT)),
):
    """Own admission record plus the announcement board."""
    from ..templates_engine import templates
    patient = PatientRegistry(db).find_by_owner(user.id)
    announcements = AnnouncementBoard(db).list_all()
    return templates.TemplateResponse(
        request,
        "patient_dashboard.html",
        {"user": user, "patient": patient, "announcements": announcements},
    )
