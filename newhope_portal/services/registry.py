from typing import List, Optional

from sqlalchemy.orm import Session

from ..models import DEFAULT_STATUS, Identity, PatientRecord

# Offered by the admin dashboard; status itself stays free text
STATUS_SUGGESTIONS = ["Pending admission", "Admitted", "Under observation", "Discharged"]


class PatientRegistry:
    """One admission record per patient identity."""

    def __init__(self, db: Session):
        self.db = db

    def admit(self, identity: Identity, full_name: str, phone: Optional[str],
              address: Optional[str], reason: Optional[str]) -> PatientRecord:
        record = PatientRecord(
            user_id=identity.id,
            full_name=full_name,
            phone=phone,
            address=address,
            reason=reason,
            status=DEFAULT_STATUS,
        )
        self.db.add(record)
        self.db.flush()
        return record

    def find(self, record_id: int) -> Optional[PatientRecord]:
        return self.db.get(PatientRecord, record_id)

    def find_by_owner(self, identity_id: int) -> Optional[PatientRecord]:
        return self.db.query(PatientRecord).filter(PatientRecord.user_id == identity_id).first()

    def list_all(self) -> List[PatientRecord]:
        return self.db.query(PatientRecord).order_by(PatientRecord.id.asc()).all()

    def set_status(self, record_id: int, new_status: str) -> bool:
        """Unknown ids and empty statuses are dropped, not reported."""
        if not new_status or not new_status.strip():
            return False
        record = self.find(record_id)
        if record is None:
            return False
        record.status = new_status
        self.db.flush()
        return True

    def remove(self, record_id: int) -> Optional[PatientRecord]:
        record = self.find(record_id)
        if record is None:
            return None
        self.db.delete(record)
        self.db.flush()
        return record
