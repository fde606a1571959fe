from typing import Optional

from fastapi import APIRouter, Depends, Request
from fastapi.responses import HTMLResponse
from sqlalchemy.orm import Session

from ..auth import get_db, get_optional_user
from ..services.announcements import AnnouncementBoard
from ..sessions import SessionUser

router = APIRouter()


@router.get("/", response_class=HTMLResponse)
def home(
    request: Request,
    db: Session = Depends(get_db),
    user: Optional[SessionUser] = Depends(get_optional_user),
):
    from ..templates_engine import templates
    announcements = AnnouncementBoard(db).list_all()
    return templates.TemplateResponse(request, "index.html", {"user": user, "announcements": announcements})


def _static_page(name: str):
    def page(request: Request, user: Optional[SessionUser] = Depends(get_optional_user)):
        from ..templates_engine import templates
        return templates.TemplateResponse(request, f"{name}.html", {"user": user})
    page.__name__ = f"{name}_page"
    return page


for _name in ("about", "services", "contact"):
    router.add_api_route(f"/{_name}", _static_page(_name), methods=["GET"], response_class=HTMLResponse)
