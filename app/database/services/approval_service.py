from typing import Optional
from sqlalchemy.orm import Session, joinedload
from sqlalchemy import and_
from datetime import datetime
import logging

from app import config
from app.database.models.booking import FoodOrder, FoodOrderItem
from app.database.models.users import Profile
from app.database.services.notification_service import NotificationService
from app.database.services.user_service import role_names
from app.database.services.booking_service import (
    BOOKING_MODELS,
    booking_to_response,
    load_booking,
    can_review,
    format_date,
)
from app.logic.permissions import effective_permissions, ensure_permission
from app.logic.workflow import (
    BookingType,
    ApprovalStatus,
    Decision,
    BOOKING_LABELS,
    current_stage,
    plan_transition,
)
from app.ReqResModels.bookingmodels import (
    OrderStatus,
    PendingQueueResponse,
    DecisionResponse,
    FoodOrderResponse,
)
from app.ReqResModels.notificationmodels import NotificationType
from app.logic.exceptions import (
    ValidationError,
    BookingNotFoundError,
    BookingAlreadyDecidedError,
    PermissionDenied,
    DatabaseError
)

logger = logging.getLogger(__name__)

ORDER_STATUS_SEQUENCE = [
    OrderStatus.RECEIVED,
    OrderStatus.PREPARING,
    OrderStatus.READY,
    OrderStatus.DELIVERED,
]

class ApprovalService:

    @staticmethod
    def get_pending_queue(
        db: Session,
        approver: Profile,
        booking_type: BookingType,
        actionable_only: bool = True,
        limit: int = 100,
    ) -> PendingQueueResponse:
        """Pending bookings of one type, newest first.

        With ``actionable_only`` the queue holds only bookings whose current
        stage the approver may decide.
        """
        booking_type = BookingType(booking_type)
        if not can_review(approver, booking_type):
            raise PermissionDenied(f"Not allowed to review {booking_type.value} bookings")

        model = BOOKING_MODELS[booking_type]
        query = db.query(model).options(joinedload(model.requester))
        if model is FoodOrder:
            query = query.options(joinedload(FoodOrder.items).joinedload(FoodOrderItem.menu_item))

        records = query.filter(
            model.status == ApprovalStatus.PENDING.value
        ).order_by(model.created_at.desc(), model.id.desc()).limit(limit).all()

        if actionable_only:
            perms = effective_permissions(role_names(approver))
            actionable = []
            for record in records:
                stage = current_stage(booking_type, record)
                if stage is not None and getattr(perms, stage.permission):
                    actionable.append(record)
            records = actionable

        bookings = [booking_to_response(booking_type, record) for record in records]
        return PendingQueueResponse(booking_type=booking_type.value, bookings=bookings, total=len(bookings))

    @staticmethod
    def decide(
        db: Session,
        approver: Profile,
        booking_type: BookingType,
        booking_id: int,
        decision: Decision,
        notes: Optional[str] = None,
    ) -> DecisionResponse:
        """Approve or decline the current stage of a booking.

        The stage update is conditional on the booking and the stage still
        being pending, and it commits together with the requester's
        notification. A booking therefore ends in exactly one final status
        and is announced once, however many approvers act on it.
        """
        booking_type = BookingType(booking_type)
        decision = Decision(decision)
        notes = notes.strip() if notes else None

        try:
            booking = load_booking(db, booking_type, booking_id)

            if booking.user_id == approver.id:
                raise PermissionDenied("You cannot decide your own request")

            transition = plan_transition(booking_type, booking, decision)
            ensure_permission(
                role_names(approver),
                transition.stage.permission,
                f"decide the {transition.stage.label} stage of {booking_type.value} bookings",
            )

            if decision == Decision.DECLINE and config.REQUIRE_DECLINE_REASON and not notes:
                raise ValidationError("A reason is required to decline a request")

            values = dict(transition.updates)
            values["updated_at"] = datetime.utcnow()
            if notes:
                values["approval_notes"] = notes
            if transition.is_final:
                values["approved_by"] = approver.id

            model = BOOKING_MODELS[booking_type]
            stage_column = getattr(model, transition.stage.field)
            updated = db.query(model).filter(
                and_(
                    model.id == booking_id,
                    model.status == ApprovalStatus.PENDING.value,
                    stage_column == ApprovalStatus.PENDING.value,
                )
            ).update(values, synchronize_session=False)

            if updated != 1:
                logger.warning(
                    f"Decision by user {approver.id} on {booking_type.value} booking {booking_id} lost a race; "
                    f"stage {transition.stage.field} already decided"
                )
                raise BookingAlreadyDecidedError(
                    f"{BOOKING_LABELS[booking_type]} booking {booking_id} has already been decided"
                )

            title, message, notification_type = ApprovalService._outcome_message(
                booking_type, booking, transition, notes
            )
            notification = NotificationService.add_notification(
                db,
                booking.user_id,
                title,
                message,
                notification_type,
                action_url="/bookings",
            )

            db.commit()
            db.refresh(booking)
            logger.info(
                f"User {approver.id} {decision.status.value} {transition.stage.field} of "
                f"{booking_type.value} booking {booking_id}; status is now {booking.status}"
            )

            next_stage = current_stage(booking_type, booking)
            return DecisionResponse(
                booking_type=booking_type.value,
                booking_id=booking.id,
                decision=decision.value,
                stage=transition.stage.field,
                status=booking.status,
                is_final=transition.is_final,
                next_stage=next_stage.field if next_stage else None,
                notification_id=notification.id,
            )

        except Exception as e:
            db.rollback()
            if isinstance(e, (BookingNotFoundError, BookingAlreadyDecidedError, PermissionDenied, ValidationError)):
                raise e
            raise DatabaseError(f"Failed to record decision: {str(e)}")

    @staticmethod
    def update_order_status(db: Session, actor: Profile, order_id: int, order_status: OrderStatus) -> FoodOrderResponse:
        """Move an approved food order through the kitchen"""
        order_status = OrderStatus(order_status)
        try:
            ensure_permission(role_names(actor), "can_update_menu", "update food orders")
            order = load_booking(db, BookingType.FOOD, order_id)

            if order.status != ApprovalStatus.APPROVED.value:
                raise ValidationError(f"Food order {order_id} is not approved")

            current = OrderStatus(order.order_status)
            if current in (OrderStatus.DELIVERED, OrderStatus.CANCELLED):
                raise ValidationError(f"Food order {order_id} is already {current.value}")
            if order_status != OrderStatus.CANCELLED and (
                ORDER_STATUS_SEQUENCE.index(order_status) <= ORDER_STATUS_SEQUENCE.index(current)
            ):
                raise ValidationError(f"Food order {order_id} cannot move from {current.value} to {order_status.value}")

            order.order_status = order_status.value
            order.updated_at = datetime.utcnow()
            db.commit()
            db.refresh(order)
            logger.info(f"User {actor.id} moved food order {order_id} to {order_status.value}")
            return booking_to_response(BookingType.FOOD, order)

        except Exception as e:
            db.rollback()
            if isinstance(e, (BookingNotFoundError, PermissionDenied, ValidationError)):
                raise e
            raise DatabaseError(f"Failed to update food order: {str(e)}")

    @staticmethod
    def _outcome_message(booking_type: BookingType, booking, transition, notes: Optional[str]):
        """Title, message and type of the notification sent to the requester"""
        label = BOOKING_LABELS[booking_type]
        subject = ApprovalService._describe(booking_type, booking)

        if not transition.is_final:
            message = f"Your {subject} was approved at the {transition.stage.label} stage and is awaiting further approval."
            if notes:
                message += f" Notes: {notes}"
            return f"{label} Request Progressing", message, NotificationType.BOOKING_STAGE_APPROVED.value

        if transition.decision == Decision.APPROVE:
            message = f"Your {subject} has been approved."
            if notes:
                message += f" Notes: {notes}"
            return f"{label} Request Approved", message, NotificationType.BOOKING_APPROVED.value

        message = f"Your {subject} has been declined."
        if notes:
            message += f" Reason: {notes}"
        return f"{label} Request Declined", message, NotificationType.BOOKING_DECLINED.value

    @staticmethod
    def _describe(booking_type: BookingType, booking) -> str:
        if booking_type == BookingType.ACCOMMODATION:
            return (
                f"accommodation request for {booking.guest_name} "
                f"({format_date(booking.check_in_date)} to {format_date(booking.check_out_date)})"
            )
        if booking_type == BookingType.FACILITY:
            return f"facility request for {format_date(booking.booking_date)}"
        return f"{booking.meal_type} order for {format_date(booking.order_date)}"
