from typing import List, Optional
from sqlalchemy.orm import Session, joinedload
from datetime import datetime, date, time
from decimal import Decimal
import logging

from app import config
from app.database.models.booking import AccommodationBooking, FacilityBooking, FoodOrder, FoodOrderItem
from app.database.models.catalog import Accommodation, Facility, MenuItem
from app.database.models.users import Profile
from app.database.services.notification_service import NotificationService
from app.database.services.user_service import role_names
from app.logic.permissions import effective_permissions
from app.logic.workflow import (
    BookingType,
    ApprovalStatus,
    ALL_STAGES,
    approval_chain,
    initial_stage_values,
    current_stage,
)
from app.ReqResModels.bookingmodels import (
    AccommodationBookingRequest,
    FacilityBookingRequest,
    FoodOrderRequest,
    AccommodationBookingResponse,
    FacilityBookingResponse,
    FoodOrderResponse,
    FoodOrderItemResponse,
    MyBookingsResponse,
)
from app.ReqResModels.notificationmodels import NotificationType
from app.logic.exceptions import (
    ValidationError,
    AccountNotApprovedError,
    BookingNotFoundError,
    CatalogItemNotFoundError,
    PermissionDenied,
    DatabaseError
)

logger = logging.getLogger(__name__)

BOOKING_MODELS = {
    BookingType.ACCOMMODATION: AccommodationBooking,
    BookingType.FACILITY: FacilityBooking,
    BookingType.FOOD: FoodOrder,
}

def format_date(value: date) -> str:
    return f"{value:%b} {value.day}, {value.year}"

def format_time(value: time) -> str:
    return value.strftime("%H:%M")

def ensure_can_book(user: Profile):
    if not user.account_approved:
        raise AccountNotApprovedError("Your account is awaiting approval and cannot make bookings yet")

def can_review(user: Profile, booking_type: BookingType) -> bool:
    """Whether the user may decide any stage of this booking type"""
    perms = effective_permissions(role_names(user))
    if perms.has_unlimited_access:
        return True
    return any(getattr(perms, stage.permission) for stage in ALL_STAGES[BookingType(booking_type)])

class BookingService:

    @staticmethod
    def submit_accommodation(db: Session, user: Profile, request: AccommodationBookingRequest) -> AccommodationBookingResponse:
        """Create a pending accommodation request and confirm it to the requester"""
        ensure_can_book(user)
        BookingService._validate_accommodation(db, request)

        try:
            booking = AccommodationBooking(
                user_id=user.id,
                accommodation_id=request.accommodation_id,
                guest_name=request.guest_name,
                guest_address=request.guest_address,
                check_in_date=request.check_in_date,
                check_in_time=request.check_in_time,
                check_out_date=request.check_out_date,
                check_out_time=request.check_out_time,
                purpose_of_visit=request.purpose_of_visit,
                guests=request.guests,
                billing_to=request.billing_to.value,
                room_type_preference=request.room_type_preference,
                special_requests=request.special_requests,
                status=ApprovalStatus.PENDING.value,
                created_at=datetime.utcnow(),
                **initial_stage_values(BookingType.ACCOMMODATION)
            )
            db.add(booking)
            db.flush()

            NotificationService.add_notification(
                db,
                user.id,
                "Accommodation Request Submitted",
                f"Your accommodation request for {request.guest_name} from {format_date(request.check_in_date)} "
                f"to {format_date(request.check_out_date)} has been submitted and is pending "
                f"{BookingService._first_stage_label(BookingType.ACCOMMODATION)} approval.",
                NotificationType.BOOKING_SUBMITTED.value,
                action_url="/bookings",
            )

            db.commit()
            db.refresh(booking)
            logger.info(f"User {user.id} submitted accommodation booking {booking.id}")
            return booking_to_response(BookingType.ACCOMMODATION, booking)

        except Exception as e:
            db.rollback()
            raise DatabaseError(f"Failed to submit accommodation request: {str(e)}")

    @staticmethod
    def submit_facility(db: Session, user: Profile, request: FacilityBookingRequest) -> FacilityBookingResponse:
        """Create a pending facility reservation and confirm it to the requester"""
        ensure_can_book(user)
        BookingService._validate_facility(db, request)

        try:
            booking = FacilityBooking(
                user_id=user.id,
                facility_id=request.facility_id,
                facility_type_preference=request.facility_type_preference,
                booking_date=request.booking_date,
                start_time=request.start_time,
                end_time=request.end_time,
                purpose=request.purpose,
                attendees=request.attendees,
                status=ApprovalStatus.PENDING.value,
                created_at=datetime.utcnow(),
                **initial_stage_values(BookingType.FACILITY)
            )
            db.add(booking)
            db.flush()

            NotificationService.add_notification(
                db,
                user.id,
                "Facility Request Submitted",
                f"Your facility request for {format_date(request.booking_date)} from {format_time(request.start_time)} "
                f"to {format_time(request.end_time)} has been submitted and is pending approval.",
                NotificationType.BOOKING_SUBMITTED.value,
                action_url="/bookings",
            )

            db.commit()
            db.refresh(booking)
            logger.info(f"User {user.id} submitted facility booking {booking.id}")
            return booking_to_response(BookingType.FACILITY, booking)

        except Exception as e:
            db.rollback()
            raise DatabaseError(f"Failed to submit facility request: {str(e)}")

    @staticmethod
    def submit_food_order(db: Session, user: Profile, request: FoodOrderRequest) -> FoodOrderResponse:
        """Create a pending food order priced from the current menu"""
        ensure_can_book(user)
        menu_items = BookingService._validate_food_order(db, request)

        try:
            total = sum(
                (Decimal(menu_items[item.menu_item_id].price) * item.quantity for item in request.items),
                Decimal("0"),
            )
            order = FoodOrder(
                user_id=user.id,
                order_date=request.order_date,
                delivery_time=datetime.combine(request.order_date, request.delivery_time),
                meal_type=request.meal_type.value,
                total_amount=total,
                special_requests=request.special_requests,
                order_status="received",
                status=ApprovalStatus.PENDING.value,
                created_at=datetime.utcnow(),
                **initial_stage_values(BookingType.FOOD)
            )
            db.add(order)
            db.flush()

            for item in request.items:
                db.add(FoodOrderItem(
                    order_id=order.id,
                    menu_item_id=item.menu_item_id,
                    quantity=item.quantity,
                    price=menu_items[item.menu_item_id].price,
                    notes=item.notes,
                ))

            NotificationService.add_notification(
                db,
                user.id,
                "Food Order Placed",
                f"Your {request.meal_type.value} order for {format_date(request.order_date)} "
                f"({sum(i.quantity for i in request.items)} items, total {total:.2f}) has been placed and is pending approval.",
                NotificationType.BOOKING_SUBMITTED.value,
                action_url="/bookings",
            )

            db.commit()
            db.refresh(order)
            logger.info(f"User {user.id} placed food order {order.id}")
            return booking_to_response(BookingType.FOOD, order)

        except Exception as e:
            db.rollback()
            raise DatabaseError(f"Failed to place food order: {str(e)}")

    @staticmethod
    def get_my_bookings(
        db: Session,
        user: Profile,
        status: Optional[ApprovalStatus] = None,
        booking_type: Optional[BookingType] = None,
    ) -> MyBookingsResponse:
        """The requester's own bookings, newest first; status is read straight from the record"""
        result = {}
        total = 0
        for kind, model in BOOKING_MODELS.items():
            if booking_type is not None and kind != booking_type:
                result[kind.value] = []
                continue
            query = db.query(model).filter(model.user_id == user.id)
            if status is not None:
                query = query.filter(model.status == status.value)
            records = query.order_by(model.created_at.desc(), model.id.desc()).all()
            result[kind.value] = [booking_to_response(kind, record) for record in records]
            total += len(records)

        return MyBookingsResponse(**result, total=total)

    @staticmethod
    def get_booking(db: Session, user: Profile, booking_type: BookingType, booking_id: int):
        """A single booking, visible to its requester and to reviewers of its type"""
        booking = load_booking(db, booking_type, booking_id)
        if booking.user_id != user.id and not can_review(user, booking_type):
            raise PermissionDenied(f"Not allowed to view {booking_type.value} booking {booking_id}")
        return booking_to_response(booking_type, booking)

    @staticmethod
    def _validate_accommodation(db: Session, request: AccommodationBookingRequest):
        now = datetime.now()
        if request.check_in_date < now.date() or (
            request.check_in_date == now.date() and request.check_in_time and request.check_in_time < now.time()
        ):
            raise ValidationError("Check-in cannot be in the past")

        if request.check_in_time is not None and request.check_out_time is not None:
            check_in = datetime.combine(request.check_in_date, request.check_in_time)
            check_out = datetime.combine(request.check_out_date, request.check_out_time)
            if check_out <= check_in:
                raise ValidationError("Check-out must be after check-in")
        elif request.check_out_date <= request.check_in_date:
            raise ValidationError("Check-out date must be after check-in date")

        if request.guests < 1 or request.guests > config.MAX_GUESTS:
            raise ValidationError(f"Number of guests must be between 1 and {config.MAX_GUESTS}")

        if request.accommodation_id is not None:
            room = db.query(Accommodation).filter(Accommodation.id == request.accommodation_id).first()
            if not room:
                raise CatalogItemNotFoundError(f"Room with ID {request.accommodation_id} not found")
            if not room.is_available:
                raise ValidationError(f"Room '{room.name}' is not available")
            if room.capacity and request.guests > room.capacity:
                raise ValidationError(f"Room '{room.name}' holds at most {room.capacity} guests")

    @staticmethod
    def _validate_facility(db: Session, request: FacilityBookingRequest):
        if request.end_time <= request.start_time:
            raise ValidationError("End time must be after start time")

        if datetime.combine(request.booking_date, request.start_time) < datetime.now():
            raise ValidationError("Booking cannot start in the past")

        if request.attendees < 1 or request.attendees > config.MAX_ATTENDEES:
            raise ValidationError(f"Number of attendees must be between 1 and {config.MAX_ATTENDEES}")

        if request.facility_id is not None:
            facility = db.query(Facility).filter(Facility.id == request.facility_id).first()
            if not facility:
                raise CatalogItemNotFoundError(f"Facility with ID {request.facility_id} not found")
            if not facility.is_available:
                raise ValidationError(f"Facility '{facility.name}' is not available")
            if facility.capacity and request.attendees > facility.capacity:
                raise ValidationError(f"Facility '{facility.name}' holds at most {facility.capacity} attendees")

    @staticmethod
    def _validate_food_order(db: Session, request: FoodOrderRequest) -> dict:
        if not request.items:
            raise ValidationError("A food order needs at least one item")

        if datetime.combine(request.order_date, request.delivery_time) < datetime.now():
            raise ValidationError("Delivery time cannot be in the past")

        for item in request.items:
            if item.quantity < 1 or item.quantity > config.MAX_ITEM_QUANTITY:
                raise ValidationError(f"Item quantity must be between 1 and {config.MAX_ITEM_QUANTITY}")

        ids = {item.menu_item_id for item in request.items}
        menu_items = {m.id: m for m in db.query(MenuItem).filter(MenuItem.id.in_(ids)).all()}
        missing = ids - set(menu_items)
        if missing:
            raise CatalogItemNotFoundError(f"Menu items with IDs {sorted(missing)} not found")

        for menu_item in menu_items.values():
            if not menu_item.is_available:
                raise ValidationError(f"'{menu_item.name}' is not available")
            if menu_item.meal_type != request.meal_type.value:
                raise ValidationError(f"'{menu_item.name}' is not served for {request.meal_type.value}")

        return menu_items

    @staticmethod
    def _first_stage_label(booking_type: BookingType) -> str:
        return approval_chain(booking_type)[0].label


def load_booking(db: Session, booking_type: BookingType, booking_id: int):
    booking_type = BookingType(booking_type)
    model = BOOKING_MODELS[booking_type]
    query = db.query(model).options(joinedload(model.requester))
    if model is FoodOrder:
        query = query.options(joinedload(FoodOrder.items).joinedload(FoodOrderItem.menu_item))
    booking = query.filter(model.id == booking_id).first()
    if not booking:
        raise BookingNotFoundError(f"{booking_type.value.capitalize()} booking with ID {booking_id} not found")
    return booking


def booking_to_response(booking_type: BookingType, booking):
    """Convert a booking record to its response model"""
    booking_type = BookingType(booking_type)
    stage = current_stage(booking_type, booking)
    data = {
        "id": booking.id,
        "booking_type": booking_type.value,
        "user_id": booking.user_id,
        "requester_name": booking.requester.full_name if booking.requester else None,
        "status": booking.status,
        "stages": {s.field: getattr(booking, s.field) for s in ALL_STAGES[booking_type]},
        "current_stage": stage.field if stage else None,
        "approved_by": booking.approved_by,
        "approval_notes": booking.approval_notes,
        "created_at": booking.created_at or datetime.utcnow(),
        "updated_at": booking.updated_at,
    }

    if booking_type == BookingType.ACCOMMODATION:
        data.update({
            "accommodation_id": booking.accommodation_id,
            "guest_name": booking.guest_name,
            "guest_address": booking.guest_address,
            "check_in_date": booking.check_in_date,
            "check_in_time": booking.check_in_time,
            "check_out_date": booking.check_out_date,
            "check_out_time": booking.check_out_time,
            "purpose_of_visit": booking.purpose_of_visit,
            "guests": booking.guests,
            "billing_to": booking.billing_to,
            "room_type_preference": booking.room_type_preference,
            "special_requests": booking.special_requests,
        })
        return AccommodationBookingResponse(**data)

    if booking_type == BookingType.FACILITY:
        data.update({
            "facility_id": booking.facility_id,
            "facility_type_preference": booking.facility_type_preference,
            "booking_date": booking.booking_date,
            "start_time": booking.start_time,
            "end_time": booking.end_time,
            "purpose": booking.purpose,
            "attendees": booking.attendees,
        })
        return FacilityBookingResponse(**data)

    data.update({
        "order_date": booking.order_date,
        "delivery_time": booking.delivery_time,
        "meal_type": booking.meal_type,
        "total_amount": booking.total_amount,
        "special_requests": booking.special_requests,
        "order_status": booking.order_status,
        "items": [
            FoodOrderItemResponse(
                id=item.id,
                menu_item_id=item.menu_item_id,
                menu_item_name=item.menu_item.name if item.menu_item else None,
                quantity=item.quantity,
                price=item.price,
                notes=item.notes,
            )
            for item in booking.items
        ],
    })
    return FoodOrderResponse(**data)
