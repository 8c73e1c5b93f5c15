from pydantic import BaseModel, Field, ConfigDict, field_validator
from datetime import date, time, datetime
from decimal import Decimal
from typing import Optional, List, Dict, Union
from enum import Enum

class BillingTo(str, Enum):
    GUEST = "guest"
    DEPARTMENT = "department"

class MealType(str, Enum):
    BREAKFAST = "breakfast"
    LUNCH = "lunch"
    SUPPER = "supper"

class OrderStatus(str, Enum):
    RECEIVED = "received"
    PREPARING = "preparing"
    READY = "ready"
    DELIVERED = "delivered"
    CANCELLED = "cancelled"


def _reject_blank(v):
    if isinstance(v, str):
        v = v.strip()
        if not v:
            raise ValueError("must not be blank")
    return v


# Request Models
class AccommodationBookingRequest(BaseModel):
    guest_name: str = Field(..., max_length=255, description="Name of the guest staying")
    guest_address: str = Field(..., max_length=1000, description="Guest home address")
    check_in_date: date = Field(..., description="Arrival date")
    check_in_time: Optional[time] = Field(None, description="Arrival time")
    check_out_date: date = Field(..., description="Departure date")
    check_out_time: Optional[time] = Field(None, description="Departure time")
    purpose_of_visit: str = Field(..., max_length=1000)
    guests: int = Field(default=1, ge=1, description="Number of guests")
    billing_to: BillingTo = Field(default=BillingTo.DEPARTMENT)
    room_type_preference: Optional[str] = Field(None, max_length=100)
    special_requests: Optional[str] = Field(None, max_length=1000)
    accommodation_id: Optional[int] = Field(None, gt=0, description="Specific room, if already chosen")

    @field_validator('guest_name', 'guest_address', 'purpose_of_visit', mode='before')
    @classmethod
    def required_text(cls, v):
        return _reject_blank(v)

class FacilityBookingRequest(BaseModel):
    facility_id: Optional[int] = Field(None, gt=0, description="Specific facility, if already chosen")
    facility_type_preference: Optional[str] = Field(None, max_length=100)
    booking_date: date = Field(..., description="Day of the reservation")
    start_time: time
    end_time: time
    purpose: str = Field(..., max_length=1000)
    attendees: int = Field(default=1, ge=1, description="Expected number of attendees")

    @field_validator('purpose', mode='before')
    @classmethod
    def required_text(cls, v):
        return _reject_blank(v)

class FoodOrderItemRequest(BaseModel):
    menu_item_id: int = Field(..., gt=0)
    quantity: int = Field(default=1, ge=1)
    notes: Optional[str] = Field(None, max_length=500)

class FoodOrderRequest(BaseModel):
    order_date: date
    delivery_time: time
    meal_type: MealType
    items: List[FoodOrderItemRequest] = Field(..., min_length=1)
    special_requests: Optional[str] = Field(None, max_length=1000)

class DecisionRequest(BaseModel):
    notes: Optional[str] = Field(None, max_length=1000, description="Approval notes or decline reason")

class UpdateOrderStatusRequest(BaseModel):
    order_status: OrderStatus

# Response Models
class BookingResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    booking_type: str
    user_id: int
    requester_name: Optional[str] = None
    status: str
    stages: Dict[str, Optional[str]] = {}
    current_stage: Optional[str] = None
    approved_by: Optional[int] = None
    approval_notes: Optional[str] = None
    created_at: datetime
    updated_at: Optional[datetime] = None

class AccommodationBookingResponse(BookingResponse):
    accommodation_id: Optional[int] = None
    guest_name: str
    guest_address: str
    check_in_date: date
    check_in_time: Optional[time] = None
    check_out_date: date
    check_out_time: Optional[time] = None
    purpose_of_visit: str
    guests: int
    billing_to: str
    room_type_preference: Optional[str] = None
    special_requests: Optional[str] = None

class FacilityBookingResponse(BookingResponse):
    facility_id: Optional[int] = None
    facility_type_preference: Optional[str] = None
    booking_date: date
    start_time: time
    end_time: time
    purpose: str
    attendees: int

class FoodOrderItemResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    menu_item_id: int
    menu_item_name: Optional[str] = None
    quantity: int
    price: Decimal
    notes: Optional[str] = None

class FoodOrderResponse(BookingResponse):
    order_date: date
    delivery_time: datetime
    meal_type: str
    total_amount: Decimal
    special_requests: Optional[str] = None
    order_status: str
    items: List[FoodOrderItemResponse] = []

class MyBookingsResponse(BaseModel):
    accommodation: List[AccommodationBookingResponse] = []
    facility: List[FacilityBookingResponse] = []
    food: List[FoodOrderResponse] = []
    total: int

class PendingQueueResponse(BaseModel):
    booking_type: str
    bookings: List[Union[AccommodationBookingResponse, FacilityBookingResponse, FoodOrderResponse]]
    total: int

class DecisionResponse(BaseModel):
    booking_type: str
    booking_id: int
    decision: str
    stage: str
    status: str
    is_final: bool
    next_stage: Optional[str] = None
    notification_id: int

class BookingErrorResponse(BaseModel):
    error: str
    message: str
    details: Optional[dict] = None
