"""
Operations that span more than one store, each run as a single transaction.

Handlers call these instead of the stores directly so that registration
(identity + admission record) and patient deletion (record + identity)
either happen completely or not at all.
"""
import logging
from typing import Optional, Tuple

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from ..exceptions import DuplicateEmail, PortalError
from ..models import Announcement, Identity, PatientRecord
from .announcements import AnnouncementBoard
from .identities import IdentityStore
from .registry import PatientRegistry

log = logging.getLogger("newhope-portal.admissions")


def register_patient(
    db: Session,
    name: str,
    email: str,
    secret: str,
    phone: Optional[str] = None,
    address: Optional[str] = None,
    reason: Optional[str] = None,
) -> Tuple[Identity, PatientRecord]:
    try:
        identity = IdentityStore(db).register(name, email, secret)
        record = PatientRegistry(db).admit(identity, name, phone, address, reason)
        db.commit()
    except IntegrityError:
        # users.email is the only unique column a new registration can collide on
        db.rollback()
        raise DuplicateEmail()
    except (PortalError, SQLAlchemyError):
        db.rollback()
        raise
    log.info("Registered patient identity=%s record=%s", identity.id, record.id)
    return identity, record


def delete_patient(db: Session, record_id: int) -> bool:
    """Remove a patient record together with its owning identity."""
    try:
        record = PatientRegistry(db).remove(record_id)
        if record is None:
            db.rollback()
            return False
        IdentityStore(db).remove_by_owner(record.user_id)
        db.commit()
    except SQLAlchemyError:
        db.rollback()
        raise
    log.info("Deleted patient record=%s identity=%s", record_id, record.user_id)
    return True


def update_status(db: Session, record_id: int, status: str) -> bool:
    try:
        changed = PatientRegistry(db).set_status(record_id, status)
        db.commit()
    except SQLAlchemyError:
        db.rollback()
        raise
    if changed:
        log.info("Patient record %s status -> %r", record_id, status)
    return changed


def post_announcement(db: Session, title: str, content: str) -> Announcement:
    try:
        announcement = AnnouncementBoard(db).post(title, content)
        db.commit()
    except (PortalError, SQLAlchemyError):
        db.rollback()
        raise
    log.info("Posted announcement %s", announcement.id)
    return announcement


def remove_announcement(db: Session, announcement_id: int) -> bool:
    try:
        removed = AnnouncementBoard(db).remove(announcement_id)
        db.commit()
    except SQLAlchemyError:
        db.rollback()
        raise
    if removed:
        log.info("Removed announcement %s", announcement_id)
    return removed
