from datetime import datetime, timedelta, timezone
from typing import Optional

from fastapi import Depends, HTTPException, Request, Response
from jose import jwt, JWTError
from sqlalchemy.orm import Session

from .models import Identity
from .sessions import SessionUser

ALGORITHM = "HS256"


def get_db(request: Request):
    db = request.app.state.session_factory()
    try:
        yield db
    finally:
        db.close()


def _encode_session_cookie(request: Request, token: str) -> str:
    settings = request.app.state.settings
    expire = datetime.now(timezone.utc) + timedelta(minutes=settings.session_expire_minutes)
    return jwt.encode({"sid": token, "exp": expire}, settings.secret_key, algorithm=ALGORITHM)


def _session_token(request: Request) -> Optional[str]:
    settings = request.app.state.settings
    raw = request.cookies.get(settings.session_cookie_name)
    if not raw:
        return None
    try:
        payload = jwt.decode(raw, settings.secret_key, algorithms=[ALGORITHM])
    except JWTError:
        return None
    return payload.get("sid")


def start_session(request: Request, response: Response, identity: Identity) -> SessionUser:
    """Anonymous -> AuthenticatedAs(identity.role)."""
    settings = request.app.state.settings
    user = SessionUser.from_identity(identity)
    # a fresh token on every login, never reuse the previous one
    request.app.state.sessions.destroy(_session_token(request))
    token = request.app.state.sessions.create(user)
    response.set_cookie(
        settings.session_cookie_name,
        _encode_session_cookie(request, token),
        max_age=settings.session_expire_minutes * 60,
        httponly=True,
        samesite="lax",
    )
    return user


def end_session(request: Request, response: Response) -> None:
    """AuthenticatedAs(*) -> Anonymous."""
    request.app.state.sessions.destroy(_session_token(request))
    response.delete_cookie(request.app.state.settings.session_cookie_name)


def get_optional_user(request: Request, db: Session = Depends(get_db)) -> Optional[SessionUser]:
    token = _session_token(request)
    user = request.app.state.sessions.get(token)
    if user is None:
        return None
    # the identity may have been deleted along with its patient record
    if db.get(Identity, user.id) is None:
        request.app.state.sessions.destroy(token)
        return None
    return user


def get_current_user(user: Optional[SessionUser] = Depends(get_optional_user)) -> SessionUser:
    if user is None:
        raise HTTPException(status_code=401, detail="Not authenticated")
    return user


def require_role(*roles):
    def wrapper(user: SessionUser = Depends(get_current_user)):
        if user.role not in roles:
            raise HTTPException(status_code=403, detail="Forbidden")
        return user
    return wrapper
