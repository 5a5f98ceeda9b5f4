from typing import List, Protocol, Tuple

from sqlalchemy.orm import Session

from marketplace.models.notification import Notification
from marketplace.utils.transactions import smart_transaction


class NotificationSink(Protocol):
    def notify(self, user_id: int, title: str, message: str, type: str): ...


class NotificationService:
    def __init__(self, db: Session):
        self.db = db

    def notify(self, user_id: int, title: str, message: str, type: str) -> Notification:
        with smart_transaction(self.db):
            n = Notification(
                user_id=user_id, title=title, message=message, type=type, is_read=False
            )
            self.db.add(n)
            self.db.flush()
        return n

    def list_for_user(
        self, user_id: int, limit: int = 20, offset: int = 0
    ) -> Tuple[List[Notification], int]:
        qry = self.db.query(Notification).filter(Notification.user_id == user_id)
        total = qry.count()
        items = (
            qry.order_by(Notification.created_at.desc(), Notification.id.desc())
            .offset(offset)
            .limit(limit)
            .all()
        )
        return items, total

    def unread_count(self, user_id: int) -> int:
        return (
            self.db.query(Notification)
            .filter(Notification.user_id == user_id, Notification.is_read == False)  # noqa: E712
            .count()
        )
