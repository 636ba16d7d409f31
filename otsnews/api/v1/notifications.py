"""
Notification inbox and digest preference endpoints.
"""

import uuid

from fastapi import APIRouter

from otsnews.api.deps import CurrentUser, DbSession
from otsnews.engines.digest.digest_service import DigestService
from otsnews.engines.notifications.notification_service import NotificationService
from otsnews.schemas.notifications import (
    DigestPreferenceResponse,
    DigestPreferenceUpdate,
    MarkAllReadResponse,
    NotificationListResponse,
    NotificationResponse,
)

router = APIRouter()


@router.post("/notifications/read-all", response_model=MarkAllReadResponse)
async def mark_all_read(user: CurrentUser, db: DbSession):
    """Mark every notification of the caller as read."""
    updated = await NotificationService(db).mark_all_read(user.id, requester=user)
    return MarkAllReadResponse(updated=updated)


@router.get("/notifications/{user_id}", response_model=NotificationListResponse)
async def list_notifications(user_id: uuid.UUID, user: CurrentUser, db: DbSession):
    """The caller's notifications, newest first."""
    service = NotificationService(db)
    items = await service.list_for_user(user_id, requester=user)
    return NotificationListResponse(
        items=[NotificationResponse.model_validate(n) for n in items],
        unread_count=sum(1 for n in items if not n.read),
    )


@router.put("/notifications/{notification_id}/read", response_model=NotificationResponse)
async def mark_read(notification_id: uuid.UUID, user: CurrentUser, db: DbSession):
    notification = await NotificationService(db).mark_read(notification_id, requester=user)
    return NotificationResponse.model_validate(notification)


@router.get("/digest/{user_id}", response_model=DigestPreferenceResponse)
async def get_digest_preference(user_id: uuid.UUID, user: CurrentUser, db: DbSession):
    """Digest settings; defaults to disabled/weekly when never saved."""
    preference = await DigestService(db).get(user_id, requester=user)
    return DigestPreferenceResponse.model_validate(preference)


@router.put("/digest/{user_id}", response_model=DigestPreferenceResponse)
async def set_digest_preference(
    user_id: uuid.UUID,
    data: DigestPreferenceUpdate,
    user: CurrentUser,
    db: DbSession,
):
    preference = await DigestService(db).set(
        user_id,
        enabled=data.enabled,
        frequency=data.frequency,
        requester=user,
    )
    return DigestPreferenceResponse.model_validate(preference)
