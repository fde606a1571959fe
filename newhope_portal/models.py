from datetime import datetime, timezone

from sqlalchemy import Column, Integer, String, Text, ForeignKey
from sqlalchemy.sql.sqltypes import DateTime
from .database import Base

ROLE_ADMIN = "admin"
ROLE_PATIENT = "patient"

DEFAULT_STATUS = "Pending admission"


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


# sqlite_autoincrement keeps ids monotonic: a deleted id is never handed out again
class Identity(Base):
    __tablename__ = "users"
    __table_args__ = {"sqlite_autoincrement": True}
    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(120), nullable=False)
    email = Column(String(255), unique=True, index=True, nullable=False)
    password = Column(String(255), nullable=False)
    role = Column(String(20), nullable=False, default=ROLE_PATIENT)  # 'admin' or 'patient'

    def __repr__(self) -> str:
        return f"<Identity id={self.id} email={self.email!r} role={self.role}>"


class PatientRecord(Base):
    __tablename__ = "patients"
    __table_args__ = {"sqlite_autoincrement": True}
    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), unique=True, nullable=False)
    full_name = Column(String(120), nullable=False)
    phone = Column(String(50), nullable=True)
    address = Column(Text, nullable=True)
    reason = Column(Text, nullable=True)
    status = Column(String(120), nullable=False, default=DEFAULT_STATUS)

    def __repr__(self) -> str:
        return f"<PatientRecord id={self.id} user_id={self.user_id} status={self.status!r}>"


class Announcement(Base):
    __tablename__ = "announcements"
    __table_args__ = {"sqlite_autoincrement": True}
    id = Column(Integer, primary_key=True, index=True)
    title = Column(String(200), nullable=False)
    content = Column(Text, nullable=False)
    created_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow)
