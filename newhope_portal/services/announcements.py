from typing import List

from sqlalchemy.orm import Session

from ..exceptions import MissingField
from ..models import Announcement


class AnnouncementBoard:
    def __init__(self, db: Session):
        self.db = db

    def post(self, title: str, content: str) -> Announcement:
        if not title or not title.strip() or not content or not content.strip():
            raise MissingField("Title and content are required.")
        announcement = Announcement(title=title, content=content)
        self.db.add(announcement)
        self.db.flush()
        return announcement

    def remove(self, announcement_id: int) -> bool:
        announcement = self.db.get(Announcement, announcement_id)
        if announcement is None:
            return False
        self.db.delete(announcement)
        self.db.flush()
        return True

    def list_all(self) -> List[Announcement]:
        # ids are monotonic, so newest first even when timestamps tie
        return self.db.query(Announcement).order_by(Announcement.id.desc()).all()
