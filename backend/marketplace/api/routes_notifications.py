from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from marketplace.api.deps import current_user_id
from marketplace.db import get_db
from marketplace.schemas.notification_schema import NotificationOut
from marketplace.services.notification_service import NotificationService

router = APIRouter(prefix="/api/notifications", tags=["notifications"])


@router.get("", summary="List my notifications")
def list_notifications(
    limit: int = Query(20, ge=1, le=100),
    offset: int = Query(0, ge=0),
    user_id: int = Depends(current_user_id),
    db: Session = Depends(get_db),
):
    svc = NotificationService(db)
    items, total = svc.list_for_user(user_id, limit=limit, offset=offset)
    return {
        "items": [NotificationOut.model_validate(n).model_dump() for n in items],
        "total": total,
        "unread": svc.unread_count(user_id),
    }
