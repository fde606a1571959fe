import logging
from typing import Optional

from sqlalchemy.orm import Session

from ..exceptions import DuplicateEmail, InvalidCredentials, MissingField
from ..models import Identity, ROLE_ADMIN, ROLE_PATIENT

log = logging.getLogger("newhope-portal.identities")


def credentials_match(stored: str, supplied: str) -> bool:
    """Compare a stored credential secret with the one supplied at login.

    Plain equality; every credential check goes through here so a hashed
    or constant-time comparison can replace it in one place.
    """
    return stored == supplied


def _blank(value: Optional[str]) -> bool:
    return not value or not value.strip()


class IdentityStore:
    """Credential records: registration, login lookup and removal."""

    def __init__(self, db: Session):
        self.db = db

    def find_by_email(self, email: str) -> Optional[Identity]:
        return self.db.query(Identity).filter(Identity.email == email).first()

    def find_by_id(self, identity_id: int) -> Optional[Identity]:
        return self.db.get(Identity, identity_id)

    def register(self, name: str, email: str, secret: str) -> Identity:
        """Create a patient identity. Flushes, does not commit."""
        if _blank(name) or _blank(email) or not secret:
            raise MissingField("Name, email and password are required.")
        if self.find_by_email(email) is not None:
            raise DuplicateEmail()
        identity = Identity(name=name, email=email, password=secret, role=ROLE_PATIENT)
        self.db.add(identity)
        self.db.flush()
        return identity

    def authenticate(self, email: str, secret: str) -> Identity:
        identity = self.find_by_email(email) if email else None
        if identity is None or not credentials_match(identity.password, secret or ""):
            raise InvalidCredentials()
        return identity

    def remove_by_owner(self, identity_id: int) -> None:
        identity = self.find_by_id(identity_id)
        if identity is not None:
            self.db.delete(identity)
            self.db.flush()

    def seed_admin(self, name: str, email: str, secret: str) -> Identity:
        identity = self.find_by_email(email)
        if identity is None:
            identity = Identity(name=name, email=email, password=secret, role=ROLE_ADMIN)
            self.db.add(identity)
            self.db.flush()
            log.info("Seeded admin identity %s", email)
        return identity
