from typing import Iterator, Optional
from sqlalchemy.orm import Session
from sqlalchemy import and_
import json
import logging
import time

from app.database.models.notification import Notification
from app.ReqResModels.notificationmodels import (
    NotificationResponse,
    NotificationListResponse,
    UnreadCountResponse,
    FeedEvent,
    NotificationFeedResponse,
    INVALIDATING_TYPES,
)
from app.logic.exceptions import NotificationNotFoundError, DatabaseError

logger = logging.getLogger(__name__)

class NotificationService:

    @staticmethod
    def add_notification(
        db: Session,
        user_id: int,
        title: str,
        message: str,
        notification_type: str,
        action_url: Optional[str] = None,
    ) -> Notification:
        """Stage a notification in the caller's transaction.

        Does not commit: the notification is written together with the
        state change that caused it.
        """
        notification = Notification(
            user_id=user_id,
            title=title,
            message=message,
            type=notification_type,
            action_url=action_url,
            is_read=False,
        )
        db.add(notification)
        return notification

    @staticmethod
    def get_notifications(db: Session, user_id: int, limit: int = 50, unread_only: bool = False) -> NotificationListResponse:
        """Get a user's notifications, newest first"""
        query = db.query(Notification).filter(Notification.user_id == user_id)
        if unread_only:
            query = query.filter(Notification.is_read == False)

        total = query.count()
        notifications = query.order_by(Notification.created_at.desc(), Notification.id.desc()).limit(limit).all()

        return NotificationListResponse(
            notifications=[NotificationResponse.model_validate(n) for n in notifications],
            total=total,
            unread=NotificationService._unread(db, user_id),
        )

    @staticmethod
    def get_unread_count(db: Session, user_id: int) -> UnreadCountResponse:
        return UnreadCountResponse(unread=NotificationService._unread(db, user_id))

    @staticmethod
    def mark_as_read(db: Session, user_id: int, notification_id: int) -> NotificationResponse:
        """Mark one of the user's notifications as read"""
        try:
            notification = NotificationService._get_owned(db, user_id, notification_id)
            notification.is_read = True
            db.commit()
            db.refresh(notification)
            return NotificationResponse.model_validate(notification)
        except Exception as e:
            db.rollback()
            if isinstance(e, NotificationNotFoundError):
                raise e
            raise DatabaseError(f"Failed to mark notification as read: {str(e)}")

    @staticmethod
    def mark_all_as_read(db: Session, user_id: int) -> int:
        """Mark every unread notification of the user as read; returns how many changed"""
        try:
            updated = db.query(Notification).filter(
                and_(Notification.user_id == user_id, Notification.is_read == False)
            ).update({"is_read": True}, synchronize_session=False)
            db.commit()
            return updated
        except Exception as e:
            db.rollback()
            raise DatabaseError(f"Failed to mark notifications as read: {str(e)}")

    @staticmethod
    def delete_notification(db: Session, user_id: int, notification_id: int) -> bool:
        try:
            notification = NotificationService._get_owned(db, user_id, notification_id)
            db.delete(notification)
            db.commit()
            return True
        except Exception as e:
            db.rollback()
            if isinstance(e, NotificationNotFoundError):
                raise e
            raise DatabaseError(f"Failed to delete notification: {str(e)}")

    @staticmethod
    def get_feed(db: Session, user_id: int, after_id: int = 0, limit: int = 50) -> NotificationFeedResponse:
        """Notifications created after ``after_id``, oldest first.

        Role and account notifications are flagged so the client refetches
        its roles and profile instead of reloading the page.
        """
        notifications = db.query(Notification).filter(
            and_(Notification.user_id == user_id, Notification.id > after_id)
        ).order_by(Notification.id.asc()).limit(limit).all()

        events = [
            FeedEvent(
                notification=NotificationResponse.model_validate(n),
                invalidate=["roles", "profile"] if n.type in INVALIDATING_TYPES else [],
            )
            for n in notifications
        ]
        last_id = notifications[-1].id if notifications else after_id

        return NotificationFeedResponse(
            events=events,
            last_id=last_id,
            unread=NotificationService._unread(db, user_id),
        )

    @staticmethod
    def format_sse(event: FeedEvent) -> str:
        """Render a feed event as a server-sent-events frame"""
        name = "invalidate" if event.invalidate else "notification"
        payload = json.dumps(event.model_dump(mode="json"))
        return f"id: {event.notification.id}\nevent: {name}\ndata: {payload}\n\n"

    @staticmethod
    def stream_events(session_factory, user_id: int, after_id: int = 0, poll_seconds: float = 5) -> Iterator[str]:
        """Server-sent-events frames for notifications newer than ``after_id``.

        Polls with a fresh session each round and sends a keep-alive comment
        when nothing is new. Runs in a worker thread under StreamingResponse.
        """
        last_id = after_id
        while True:
            db = session_factory()
            try:
                feed = NotificationService.get_feed(db, user_id, last_id)
            finally:
                db.close()
            if feed.events:
                for event in feed.events:
                    yield NotificationService.format_sse(event)
                last_id = feed.last_id
            else:
                yield ": keep-alive\n\n"
            time.sleep(poll_seconds)

    @staticmethod
    def _unread(db: Session, user_id: int) -> int:
        return db.query(Notification).filter(
            and_(Notification.user_id == user_id, Notification.is_read == False)
        ).count()

    @staticmethod
    def _get_owned(db: Session, user_id: int, notification_id: int) -> Notification:
        notification = db.query(Notification).filter(
            and_(Notification.id == notification_id, Notification.user_id == user_id)
        ).first()
        if not notification:
            raise NotificationNotFoundError(f"Notification with ID {notification_id} not found")
        return notification
