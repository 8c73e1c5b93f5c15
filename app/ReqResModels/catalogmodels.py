from pydantic import BaseModel, Field, ConfigDict
from datetime import datetime
from decimal import Decimal
from typing import Optional, List

from app.ReqResModels.bookingmodels import MealType

# Request Models
class CreateRoomRequest(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)
    description: Optional[str] = None
    room_type: str = Field(..., min_length=1, max_length=100)
    capacity: int = Field(default=1, ge=1)
    amenities: Optional[List[str]] = None
    price_per_night: Decimal = Field(default=Decimal("0"), ge=0)
    is_available: bool = True

class UpdateRoomRequest(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=255)
    description: Optional[str] = None
    room_type: Optional[str] = Field(None, min_length=1, max_length=100)
    capacity: Optional[int] = Field(None, ge=1)
    amenities: Optional[List[str]] = None
    price_per_night: Optional[Decimal] = Field(None, ge=0)
    is_available: Optional[bool] = None

class CreateFacilityRequest(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)
    description: Optional[str] = None
    facility_type: str = Field(..., min_length=1, max_length=100)
    capacity: Optional[int] = Field(None, ge=1)
    amenities: Optional[List[str]] = None
    hourly_rate: Decimal = Field(default=Decimal("0"), ge=0)
    requires_approval: bool = True
    is_available: bool = True

class UpdateFacilityRequest(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=255)
    description: Optional[str] = None
    facility_type: Optional[str] = Field(None, min_length=1, max_length=100)
    capacity: Optional[int] = Field(None, ge=1)
    amenities: Optional[List[str]] = None
    hourly_rate: Optional[Decimal] = Field(None, ge=0)
    requires_approval: Optional[bool] = None
    is_available: Optional[bool] = None

class CreateMenuItemRequest(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)
    description: Optional[str] = None
    meal_type: MealType
    price: Decimal = Field(..., ge=0)
    image_url: Optional[str] = Field(None, max_length=500)
    is_vegetarian: bool = False
    is_vegan: bool = False
    allergens: Optional[List[str]] = None
    is_available: bool = True

class UpdateMenuItemRequest(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=255)
    description: Optional[str] = None
    meal_type: Optional[MealType] = None
    price: Optional[Decimal] = Field(None, ge=0)
    image_url: Optional[str] = Field(None, max_length=500)
    is_vegetarian: Optional[bool] = None
    is_vegan: Optional[bool] = None
    allergens: Optional[List[str]] = None
    is_available: Optional[bool] = None

class AvailabilityRequest(BaseModel):
    is_available: bool

# Response Models
class RoomResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    description: Optional[str] = None
    room_type: str
    capacity: int
    amenities: Optional[List[str]] = None
    price_per_night: Decimal
    is_available: bool
    created_at: datetime
    updated_at: Optional[datetime] = None

class FacilityResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    description: Optional[str] = None
    facility_type: str
    capacity: Optional[int] = None
    amenities: Optional[List[str]] = None
    hourly_rate: Decimal
    requires_approval: bool
    is_available: bool
    created_at: datetime
    updated_at: Optional[datetime] = None

class MenuItemResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    description: Optional[str] = None
    meal_type: str
    price: Decimal
    image_url: Optional[str] = None
    is_vegetarian: bool
    is_vegan: bool
    allergens: Optional[List[str]] = None
    is_available: bool
    created_at: datetime
    updated_at: Optional[datetime] = None

class CatalogErrorResponse(BaseModel):
    error: str
    message: str
    details: Optional[dict] = None
