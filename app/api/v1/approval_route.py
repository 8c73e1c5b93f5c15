from fastapi import APIRouter, Depends, HTTPException, Query, status as http_status
from sqlalchemy.orm import Session
from typing import Optional

from app.api.dependencies import get_db, get_current_user
from app.database.models.users import Profile
from app.database.services.approval_service import ApprovalService
from app.logic.workflow import BookingType, Decision
from app.ReqResModels.bookingmodels import (
    DecisionRequest,
    UpdateOrderStatusRequest,
    PendingQueueResponse,
    DecisionResponse,
    FoodOrderResponse,
    BookingErrorResponse,
)
from app.logic.exceptions import (
    ValidationError,
    BookingNotFoundError,
    BookingAlreadyDecidedError,
    PermissionDenied,
    DatabaseError
)

router = APIRouter(
    prefix="/approvals",
    tags=["approvals"],
    responses={
        404: {"model": BookingErrorResponse, "description": "Booking not found"},
        400: {"model": BookingErrorResponse, "description": "Bad request"},
        403: {"model": BookingErrorResponse, "description": "Permission denied"},
        409: {"model": BookingErrorResponse, "description": "Booking already decided"},
        500: {"model": BookingErrorResponse, "description": "Internal server error"}
    }
)

def _decide(db: Session, approver: Profile, booking_type: BookingType, booking_id: int,
            decision: Decision, notes: Optional[str]) -> DecisionResponse:
    try:
        return ApprovalService.decide(db, approver, booking_type, booking_id, decision, notes)
    except BookingNotFoundError as e:
        raise HTTPException(
            status_code=http_status.HTTP_404_NOT_FOUND,
            detail=e.message
        )
    except BookingAlreadyDecidedError as e:
        raise HTTPException(
            status_code=http_status.HTTP_409_CONFLICT,
            detail=e.message
        )
    except PermissionDenied as e:
        raise HTTPException(
            status_code=http_status.HTTP_403_FORBIDDEN,
            detail=e.message
        )
    except ValidationError as e:
        raise HTTPException(
            status_code=http_status.HTTP_400_BAD_REQUEST,
            detail=e.message
        )
    except DatabaseError as e:
        raise HTTPException(
            status_code=http_status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=e.message
        )

@router.get(
    "/{booking_type}/pending",
    response_model=PendingQueueResponse,
    summary="Get pending queue",
    description="Pending bookings of a type, newest first"
)
def get_pending_queue(
    booking_type: BookingType,
    actionable_only: bool = Query(True, description="Only bookings whose current stage the caller may decide"),
    current_user: Profile = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    try:
        return ApprovalService.get_pending_queue(db, current_user, booking_type, actionable_only)
    except PermissionDenied as e:
        raise HTTPException(
            status_code=http_status.HTTP_403_FORBIDDEN,
            detail=e.message
        )

@router.post(
    "/{booking_type}/{booking_id}/approve",
    response_model=DecisionResponse,
    summary="Approve booking stage",
    description="Approve the current stage; the last stage approves the booking"
)
def approve_booking(
    booking_type: BookingType,
    booking_id: int,
    request: Optional[DecisionRequest] = None,
    current_user: Profile = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    notes = request.notes if request else None
    return _decide(db, current_user, booking_type, booking_id, Decision.APPROVE, notes)

@router.post(
    "/{booking_type}/{booking_id}/decline",
    response_model=DecisionResponse,
    summary="Decline booking",
    description="Decline the booking at its current stage, with a reason"
)
def decline_booking(
    booking_type: BookingType,
    booking_id: int,
    request: Optional[DecisionRequest] = None,
    current_user: Profile = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    notes = request.notes if request else None
    return _decide(db, current_user, booking_type, booking_id, Decision.DECLINE, notes)

@router.put(
    "/food/{order_id}/order-status",
    response_model=FoodOrderResponse,
    summary="Update food order status",
    description="Move an approved order through preparation and delivery"
)
def update_order_status(
    order_id: int,
    request: UpdateOrderStatusRequest,
    current_user: Profile = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    try:
        return ApprovalService.update_order_status(db, current_user, order_id, request.order_status)
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
    except ValidationError as e:
        raise HTTPException(
            status_code=http_status.HTTP_400_BAD_REQUEST,
            detail=e.message
        )
    except DatabaseError as e:
        raise HTTPException(
            status_code=http_status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=e.message
        )
