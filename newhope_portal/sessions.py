import secrets
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Dict, Optional, Tuple

from .models import Identity


@dataclass(frozen=True)
class SessionUser:
    """Public projection of an identity kept for a logged-in client."""
    id: int
    name: str
    email: str
    role: str

    @classmethod
    def from_identity(cls, identity: Identity) -> "SessionUser":
        return cls(id=identity.id, name=identity.name, email=identity.email, role=identity.role)


class SessionStore:
    """Process-local sessions keyed by an opaque token."""

    def __init__(self, expire_minutes: int):
        self.lifetime = timedelta(minutes=expire_minutes)
        self._sessions: Dict[str, Tuple[SessionUser, datetime]] = {}

    def purge_expired(self) -> int:
        now = datetime.now(timezone.utc)
        expired = [token for token, (_, expires_at) in self._sessions.items() if expires_at <= now]
        for token in expired:
            del self._sessions[token]
        return len(expired)

    def create(self, user: SessionUser) -> str:
        # abandoned sessions are never presented again, so sweep them here
        self.purge_expired()
        token = secrets.token_urlsafe(32)
        self._sessions[token] = (user, datetime.now(timezone.utc) + self.lifetime)
        return token

    def get(self, token: Optional[str]) -> Optional[SessionUser]:
        if not token:
            return None
        entry = self._sessions.get(token)
        if entry is None:
            return None
        user, expires_at = entry
        if expires_at <= datetime.now(timezone.utc):
            self._sessions.pop(token, None)
            return None
        return user

    def destroy(self, token: Optional[str]) -> None:
        if token:
            self._sessions.pop(token, None)

    def __len__(self) -> int:
        return len(self._sessions)
