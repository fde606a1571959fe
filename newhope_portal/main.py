import logging
from typing import Optional

from fastapi import FastAPI, Request, HTTPException
from fastapi.exceptions import RequestValidationError
from fastapi.responses import RedirectResponse, JSONResponse, HTMLResponse
from fastapi.staticfiles import StaticFiles
from starlette.exceptions import HTTPException as StarletteHTTPException

from .config import Settings, get_settings
from .database import Base, make_engine, make_session_factory
from .routers import admin as admin_router
from .routers import auth as auth_router
from .routers import pages as pages_router
from .routers import patient as patient_router
from .services.identities import IdentityStore
from .sessions import SessionStore
from .templates_engine import BASE_DIR

log = logging.getLogger("newhope-portal")


def wants_html(request: Request) -> bool:
    accept = request.headers.get("accept", "")
    return "text/html" in accept.lower()


def render_error_page(request: Request, status_code: int, message: str) -> HTMLResponse:
    # error.html for browsers, JSON for everything else
    if wants_html(request):
        from .templates_engine import templates
        return templates.TemplateResponse(
            request,
            "error.html",
            {"status_code": status_code, "message": message, "user": None},
            status_code=status_code,
        )
    return JSONResponse(status_code=status_code, content={"detail": message})


async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    # 401: not logged in yet, send to the login page
    if exc.status_code == 401:
        return RedirectResponse(url="/login", status_code=302)
    # 403/404/etc
    return render_error_page(request, exc.status_code, str(exc.detail))


async def validation_exception_handler(request: Request, exc: RequestValidationError):
    log.warning("Validation error: %s", exc.errors())
    msg = "Invalid input. Please check the form and try again."
    return render_error_page(request, 422, msg)


async def unhandled_exception_handler(request: Request, exc: Exception):
    # never leak a stack trace to the client
    log.exception("Unhandled error: %s", exc)
    msg = "An unexpected server error occurred."
    return render_error_page(request, 500, msg)


def seed(app: FastAPI) -> None:
    settings: Settings = app.state.settings
    db = app.state.session_factory()
    try:
        IdentityStore(db).seed_admin(settings.admin_name, settings.admin_email, settings.admin_password)
        db.commit()
    finally:
        db.close()


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    settings = settings or get_settings()
    logging.basicConfig(level=settings.log_level.upper())

    app = FastAPI(title="New Hope Patient Portal")

    # One store per application: tables, session factory and live sessions
    engine = make_engine(settings.database_url)
    Base.metadata.create_all(bind=engine)
    app.state.settings = settings
    app.state.engine = engine
    app.state.session_factory = make_session_factory(engine)
    app.state.sessions = SessionStore(settings.session_expire_minutes)
    seed(app)

    app.add_exception_handler(HTTPException, http_exception_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)

    app.mount("/static", StaticFiles(directory=str(BASE_DIR / "static")), name="static")

    app.include_router(pages_router.router)
    app.include_router(auth_router.router)
    app.include_router(patient_router.router)
    app.include_router(admin_router.router)

    log.info("Portal ready (database=%s)", settings.database_url)
    return app
