from fastapi import APIRouter, Depends, Header, HTTPException, Query, status as http_status
from fastapi.responses import StreamingResponse
from sqlalchemy.orm import Session
from typing import Optional
import logging

from app import config
from app.api.dependencies import get_db, get_current_user, get_session_factory
from app.database.models.users import Profile
from app.database.services.notification_service import NotificationService
from app.ReqResModels.notificationmodels import (
    NotificationResponse,
    NotificationListResponse,
    UnreadCountResponse,
    NotificationFeedResponse,
    NotificationErrorResponse,
)
from app.logic.exceptions import NotificationNotFoundError, DatabaseError

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/notifications",
    tags=["notifications"],
    responses={
        404: {"model": NotificationErrorResponse, "description": "Notification not found"},
        500: {"model": NotificationErrorResponse, "description": "Internal server error"}
    }
)

@router.get(
    "/",
    response_model=NotificationListResponse,
    summary="Get notifications",
    description="The acting user's notifications, newest first"
)
def get_notifications(
    limit: int = Query(50, ge=1, le=200, description="Maximum number of notifications"),
    unread_only: bool = Query(False, description="Only unread notifications"),
    current_user: Profile = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    return NotificationService.get_notifications(db, current_user.id, limit, unread_only)

@router.get(
    "/unread-count",
    response_model=UnreadCountResponse,
    summary="Get unread count"
)
def get_unread_count(
    current_user: Profile = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    return NotificationService.get_unread_count(db, current_user.id)

@router.put(
    "/read-all",
    summary="Mark all as read"
)
def mark_all_as_read(
    current_user: Profile = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    try:
        updated = NotificationService.mark_all_as_read(db, current_user.id)
        return {"message": "Notifications marked as read", "updated": updated}
    except DatabaseError as e:
        raise HTTPException(
            status_code=http_status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=e.message
        )

@router.put(
    "/{notification_id}/read",
    response_model=NotificationResponse,
    summary="Mark as read"
)
def mark_as_read(
    notification_id: int,
    current_user: Profile = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    try:
        return NotificationService.mark_as_read(db, current_user.id, notification_id)
    except NotificationNotFoundError as e:
        raise HTTPException(
            status_code=http_status.HTTP_404_NOT_FOUND,
            detail=e.message
        )
    except DatabaseError as e:
        raise HTTPException(
            status_code=http_status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=e.message
        )

@router.delete(
    "/{notification_id}",
    summary="Delete notification"
)
def delete_notification(
    notification_id: int,
    current_user: Profile = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    try:
        NotificationService.delete_notification(db, current_user.id, notification_id)
        return {"message": "Notification deleted successfully"}
    except NotificationNotFoundError as e:
        raise HTTPException(
            status_code=http_status.HTTP_404_NOT_FOUND,
            detail=e.message
        )
    except DatabaseError as e:
        raise HTTPException(
            status_code=http_status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=e.message
        )

@router.get(
    "/feed",
    response_model=NotificationFeedResponse,
    summary="Poll notification feed",
    description="Notifications newer than after_id, oldest first, with cache invalidation hints"
)
def get_feed(
    after_id: int = Query(0, ge=0, description="Last notification id the client has seen"),
    limit: int = Query(50, ge=1, le=200),
    current_user: Profile = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    return NotificationService.get_feed(db, current_user.id, after_id, limit)

@router.get(
    "/stream",
    summary="Notification stream",
    description="Server-sent events carrying new notifications as they are created"
)
def stream_notifications(
    after_id: int = Query(0, ge=0),
    last_event_id: Optional[str] = Header(None, alias="Last-Event-ID"),
    current_user: Profile = Depends(get_current_user),
    session_factory = Depends(get_session_factory)
):
    cursor = after_id
    if last_event_id and last_event_id.isdigit():
        cursor = max(cursor, int(last_event_id))
    logger.info(f"Notification stream opened for user {current_user.id} after {cursor}")

    frames = NotificationService.stream_events(
        session_factory, current_user.id, cursor, config.NOTIFICATION_POLL_SECONDS
    )
    headers = {
        "Cache-Control": "no-cache",
        "X-Accel-Buffering": "no",
    }
    return StreamingResponse(frames, media_type="text/event-stream", headers=headers)
