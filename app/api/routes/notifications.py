from typing import List, Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from app.api.deps import get_db
from app.core import notifications
from app.core.auth import Principal, get_principal
from app.schemas.notification import MarkAllReadOut, NotificationOut

router = APIRouter(prefix="/notifications", tags=["notifications"])


@router.get("", response_model=List[NotificationOut])
def list_notifications(
    db: Session = Depends(get_db),
    principal: Principal = Depends(get_principal),
    limit: Optional[int] = Query(None, ge=1, le=200),
):
    return notifications.list_notifications(db, principal.id, limit)


@router.get("/unread", response_model=List[NotificationOut])
def list_unread(
    db: Session = Depends(get_db),
    principal: Principal = Depends(get_principal),
):
    return notifications.list_unread(db, principal.id)


@router.patch("/read-all", response_model=MarkAllReadOut)
def mark_all_as_read(
    db: Session = Depends(get_db),
    principal: Principal = Depends(get_principal),
):
    updated = notifications.mark_all_as_read(db, principal.id)
    return {"message": "All marked as read", "updated": updated}


@router.patch("/{notification_id}/read", response_model=NotificationOut)
def mark_as_read(
    notification_id: str,
    db: Session = Depends(get_db),
    principal: Principal = Depends(get_principal),
):
    return notifications.mark_as_read(db, notification_id, principal.id)
