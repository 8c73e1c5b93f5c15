from fastapi import APIRouter, Depends, HTTPException, Query, status as http_status
from sqlalchemy.orm import Session
from typing import Optional, List

from app.api.dependencies import get_db, get_current_user, get_approved_user
from app.database.models.users import Profile
from app.database.services.catalog_service import CatalogService, CatalogKind
from app.ReqResModels.bookingmodels import MealType
from app.ReqResModels.catalogmodels import (
    CreateRoomRequest,
    UpdateRoomRequest,
    CreateFacilityRequest,
    UpdateFacilityRequest,
    CreateMenuItemRequest,
    UpdateMenuItemRequest,
    AvailabilityRequest,
    RoomResponse,
    FacilityResponse,
    MenuItemResponse,
    CatalogErrorResponse,
)
from app.logic.exceptions import (
    ValidationError,
    CatalogItemNotFoundError,
    PermissionDenied,
    DatabaseError
)

router = APIRouter(
    prefix="/catalog",
    tags=["catalog"],
    responses={
        404: {"model": CatalogErrorResponse, "description": "Catalog item not found"},
        400: {"model": CatalogErrorResponse, "description": "Bad request"},
        403: {"model": CatalogErrorResponse, "description": "Permission denied"},
        500: {"model": CatalogErrorResponse, "description": "Internal server error"}
    }
)

def _run(action, *args):
    try:
        return action(*args)
    except CatalogItemNotFoundError as e:
        raise HTTPException(
            status_code=http_status.HTTP_404_NOT_FOUND,
            detail=e.message
        )
    except ValidationError as e:
        raise HTTPException(
            status_code=http_status.HTTP_400_BAD_REQUEST,
            detail=e.message
        )
    except PermissionDenied as e:
        raise HTTPException(
            status_code=http_status.HTTP_403_FORBIDDEN,
            detail=e.message
        )
    except DatabaseError as e:
        raise HTTPException(
            status_code=http_status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=e.message
        )

# Rooms

@router.get("/rooms", response_model=List[RoomResponse], summary="List guest rooms")
def list_rooms(
    available_only: bool = Query(False, description="Only rooms open for booking"),
    current_user: Profile = Depends(get_approved_user),
    db: Session = Depends(get_db)
):
    return CatalogService.list_items(db, CatalogKind.ROOMS, available_only)

@router.get("/rooms/{item_id}", response_model=RoomResponse, summary="Get a guest room")
def get_room(
    item_id: int,
    current_user: Profile = Depends(get_approved_user),
    db: Session = Depends(get_db)
):
    return _run(CatalogService.get_item, db, CatalogKind.ROOMS, item_id)

@router.post("/rooms", response_model=RoomResponse, status_code=http_status.HTTP_201_CREATED, summary="Add a guest room")
def create_room(
    request: CreateRoomRequest,
    current_user: Profile = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    return _run(CatalogService.create_item, db, current_user, CatalogKind.ROOMS, request)

@router.put("/rooms/{item_id}", response_model=RoomResponse, summary="Update a guest room")
def update_room(
    item_id: int,
    request: UpdateRoomRequest,
    current_user: Profile = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    return _run(CatalogService.update_item, db, current_user, CatalogKind.ROOMS, item_id, request)

@router.put(
    "/rooms/{item_id}/availability",
    response_model=RoomResponse,
    summary="Set room availability",
    description="Open or close a room; room-availability managers may do this without full room management"
)
def set_room_availability(
    item_id: int,
    request: AvailabilityRequest,
    current_user: Profile = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    return _run(CatalogService.set_availability, db, current_user, CatalogKind.ROOMS, item_id, request.is_available)

@router.delete("/rooms/{item_id}", summary="Delete a guest room")
def delete_room(
    item_id: int,
    current_user: Profile = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    _run(CatalogService.delete_item, db, current_user, CatalogKind.ROOMS, item_id)
    return {"message": "Room deleted successfully"}

# Facilities

@router.get("/facilities", response_model=List[FacilityResponse], summary="List club facilities")
def list_facilities(
    available_only: bool = Query(False, description="Only facilities open for booking"),
    current_user: Profile = Depends(get_approved_user),
    db: Session = Depends(get_db)
):
    return CatalogService.list_items(db, CatalogKind.FACILITIES, available_only)

@router.get("/facilities/{item_id}", response_model=FacilityResponse, summary="Get a club facility")
def get_facility(
    item_id: int,
    current_user: Profile = Depends(get_approved_user),
    db: Session = Depends(get_db)
):
    return _run(CatalogService.get_item, db, CatalogKind.FACILITIES, item_id)

@router.post("/facilities", response_model=FacilityResponse, status_code=http_status.HTTP_201_CREATED, summary="Add a club facility")
def create_facility(
    request: CreateFacilityRequest,
    current_user: Profile = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    return _run(CatalogService.create_item, db, current_user, CatalogKind.FACILITIES, request)

@router.put("/facilities/{item_id}", response_model=FacilityResponse, summary="Update a club facility")
def update_facility(
    item_id: int,
    request: UpdateFacilityRequest,
    current_user: Profile = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    return _run(CatalogService.update_item, db, current_user, CatalogKind.FACILITIES, item_id, request)

@router.put("/facilities/{item_id}/availability", response_model=FacilityResponse, summary="Set facility availability")
def set_facility_availability(
    item_id: int,
    request: AvailabilityRequest,
    current_user: Profile = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    return _run(CatalogService.set_availability, db, current_user, CatalogKind.FACILITIES, item_id, request.is_available)

@router.delete("/facilities/{item_id}", summary="Delete a club facility")
def delete_facility(
    item_id: int,
    current_user: Profile = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    _run(CatalogService.delete_item, db, current_user, CatalogKind.FACILITIES, item_id)
    return {"message": "Facility deleted successfully"}

# Menu items

@router.get("/menu-items", response_model=List[MenuItemResponse], summary="List menu items")
def list_menu_items(
    available_only: bool = Query(False, description="Only items that can be ordered"),
    meal_type: Optional[MealType] = Query(None, description="Filter by meal"),
    current_user: Profile = Depends(get_approved_user),
    db: Session = Depends(get_db)
):
    return CatalogService.list_items(
        db, CatalogKind.MENU_ITEMS, available_only, meal_type.value if meal_type else None
    )

@router.get("/menu-items/{item_id}", response_model=MenuItemResponse, summary="Get a menu item")
def get_menu_item(
    item_id: int,
    current_user: Profile = Depends(get_approved_user),
    db: Session = Depends(get_db)
):
    return _run(CatalogService.get_item, db, CatalogKind.MENU_ITEMS, item_id)

@router.post("/menu-items", response_model=MenuItemResponse, status_code=http_status.HTTP_201_CREATED, summary="Add a menu item")
def create_menu_item(
    request: CreateMenuItemRequest,
    current_user: Profile = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    return _run(CatalogService.create_item, db, current_user, CatalogKind.MENU_ITEMS, request)

@router.put("/menu-items/{item_id}", response_model=MenuItemResponse, summary="Update a menu item")
def update_menu_item(
    item_id: int,
    request: UpdateMenuItemRequest,
    current_user: Profile = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    return _run(CatalogService.update_item, db, current_user, CatalogKind.MENU_ITEMS, item_id, request)

@router.put("/menu-items/{item_id}/availability", response_model=MenuItemResponse, summary="Set menu item availability")
def set_menu_item_availability(
    item_id: int,
    request: AvailabilityRequest,
    current_user: Profile = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    return _run(CatalogService.set_availability, db, current_user, CatalogKind.MENU_ITEMS, item_id, request.is_available)

@router.delete("/menu-items/{item_id}", summary="Delete a menu item")
def delete_menu_item(
    item_id: int,
    current_user: Profile = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    _run(CatalogService.delete_item, db, current_user, CatalogKind.MENU_ITEMS, item_id)
    return {"message": "Menu item deleted successfully"}
