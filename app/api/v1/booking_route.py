from fastapi import APIRouter, Depends, HTTPException, Query, status as http_status
from sqlalchemy.orm import Session
from typing import Optional, Union

from app.api.dependencies import get_db, get_current_user
from app.database.models.users import Profile
from app.database.services.booking_service import BookingService
from app.logic.workflow import BookingType, ApprovalStatus
from app.ReqResModels.bookingmodels import (
    AccommodationBookingRequest,
    FacilityBookingRequest,
    FoodOrderRequest,
    AccommodationBookingResponse,
    FacilityBookingResponse,
    FoodOrderResponse,
    MyBookingsResponse,
    BookingErrorResponse,
)
from app.logic.exceptions import (
    ValidationError,
    AccountNotApprovedError,
    BookingNotFoundError,
    CatalogItemNotFoundError,
    PermissionDenied,
    DatabaseError
)

router = APIRouter(
    prefix="/bookings",
    tags=["bookings"],
    responses={
        404: {"model": BookingErrorResponse, "description": "Booking or catalog item not found"},
        400: {"model": BookingErrorResponse, "description": "Bad request"},
        403: {"model": BookingErrorResponse, "description": "Permission denied"},
        500: {"model": BookingErrorResponse, "description": "Internal server error"}
    }
)

def _submission_error(e: Exception):
    if isinstance(e, ValidationError):
        return HTTPException(status_code=http_status.HTTP_400_BAD_REQUEST, detail=e.message)
    if isinstance(e, CatalogItemNotFoundError):
        return HTTPException(status_code=http_status.HTTP_404_NOT_FOUND, detail=e.message)
    if isinstance(e, AccountNotApprovedError):
        return HTTPException(status_code=http_status.HTTP_403_FORBIDDEN, detail=e.message)
    return HTTPException(status_code=http_status.HTTP_500_INTERNAL_SERVER_ERROR, detail=e.message)

@router.post(
    "/accommodation",
    response_model=AccommodationBookingResponse,
    status_code=http_status.HTTP_201_CREATED,
    summary="Request accommodation",
    description="Submit a guest accommodation request; it starts pending approval"
)
def submit_accommodation(
    request: AccommodationBookingRequest,
    current_user: Profile = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    try:
        return BookingService.submit_accommodation(db, current_user, request)
    except (ValidationError, CatalogItemNotFoundError, AccountNotApprovedError, DatabaseError) as e:
        raise _submission_error(e)

@router.post(
    "/facility",
    response_model=FacilityBookingResponse,
    status_code=http_status.HTTP_201_CREATED,
    summary="Request a facility",
    description="Submit a facility reservation; it starts pending approval"
)
def submit_facility(
    request: FacilityBookingRequest,
    current_user: Profile = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    try:
        return BookingService.submit_facility(db, current_user, request)
    except (ValidationError, CatalogItemNotFoundError, AccountNotApprovedError, DatabaseError) as e:
        raise _submission_error(e)

@router.post(
    "/food",
    response_model=FoodOrderResponse,
    status_code=http_status.HTTP_201_CREATED,
    summary="Place a food order",
    description="Order menu items for a meal; the order starts pending approval"
)
def submit_food_order(
    request: FoodOrderRequest,
    current_user: Profile = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    try:
        return BookingService.submit_food_order(db, current_user, request)
    except (ValidationError, CatalogItemNotFoundError, AccountNotApprovedError, DatabaseError) as e:
        raise _submission_error(e)

@router.get(
    "/mine",
    response_model=MyBookingsResponse,
    summary="Get my bookings",
    description="All bookings submitted by the acting user"
)
def get_my_bookings(
    status: Optional[ApprovalStatus] = Query(None, description="Filter by status"),
    booking_type: Optional[BookingType] = Query(None, alias="type", description="Filter by booking type"),
    current_user: Profile = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    return BookingService.get_my_bookings(db, current_user, status, booking_type)

@router.get(
    "/{booking_type}/{booking_id}",
    response_model=Union[AccommodationBookingResponse, FacilityBookingResponse, FoodOrderResponse],
    summary="Get a booking",
    description="A single booking, visible to its requester and its reviewers"
)
def get_booking(
    booking_type: BookingType,
    booking_id: int,
    current_user: Profile = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    try:
        return BookingService.get_booking(db, current_user, booking_type, booking_id)
    except BookingNotFoundError as e:
        raise HTTPException(
            status_code=http_status.HTTP_404_NOT_FOUND,
            detail=e.message
        )
    except PermissionDenied as e:
        raise HTTPException(
            status_code=http_status.HTTP_403_FORBIDDEN,
            detail=e.message
        )
