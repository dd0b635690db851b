from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import get_db
from app.schemas.notifications import NotificationRead
from app.services.notifications import list_notifications, mark_read

router = APIRouter(prefix="/api/users/{user_id}/notifications", tags=["notifications"])


@router.get("", response_model=list[NotificationRead])
async def get_notifications(
    user_id: str,
    unread_only: bool = Query(default=False),
    limit: int = Query(default=50, ge=1, le=200),
    db: AsyncSession = Depends(get_db),
) -> list[NotificationRead]:
    notifications = await list_notifications(db, user_id, unread_only=unread_only, limit=limit)
    return [NotificationRead.model_validate(item) for item in notifications]


@router.patch("/{notification_id}/read", response_model=NotificationRead)
async def mark_notification_read(
    user_id: str,
    notification_id: int,
    db: AsyncSession = Depends(get_db),
) -> NotificationRead:
    notification = await mark_read(db, user_id, notification_id)
    if notification is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Notification not found")
    return NotificationRead.model_validate(notification)
