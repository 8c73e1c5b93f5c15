from dataclasses import dataclass
from typing import Any, List, Optional, Tuple
from sqlalchemy.orm import Session
from datetime import datetime
from enum import Enum
import logging

from app.database.models.catalog import Accommodation, Facility, MenuItem
from app.database.models.booking import AccommodationBooking, FacilityBooking, FoodOrderItem
from app.database.models.users import Profile
from app.database.services.user_service import role_names
from app.logic.permissions import effective_permissions, ensure_permission
from app.ReqResModels.catalogmodels import RoomResponse, FacilityResponse, MenuItemResponse
from app.logic.exceptions import (
    ValidationError,
    CatalogItemNotFoundError,
    PermissionDenied,
    DatabaseError
)

logger = logging.getLogger(__name__)


class CatalogKind(str, Enum):
    ROOMS = "rooms"
    FACILITIES = "facilities"
    MENU_ITEMS = "menu-items"


@dataclass(frozen=True)
class CatalogEntry:
    model: Any
    response: Any
    label: str
    manage_permission: str
    # Bookings referencing the item: (model, foreign key column name)
    referenced_by: Tuple[Tuple[Any, str], ...]
    # Extra permissions that may only toggle availability
    availability_permissions: Tuple[str, ...] = ()


CATALOG = {
    CatalogKind.ROOMS: CatalogEntry(
        model=Accommodation,
        response=RoomResponse,
        label="Room",
        manage_permission="can_manage_accommodations",
        referenced_by=((AccommodationBooking, "accommodation_id"),),
        availability_permissions=("can_manage_room_availability",),
    ),
    CatalogKind.FACILITIES: CatalogEntry(
        model=Facility,
        response=FacilityResponse,
        label="Facility",
        manage_permission="can_manage_facilities",
        referenced_by=((FacilityBooking, "facility_id"),),
    ),
    CatalogKind.MENU_ITEMS: CatalogEntry(
        model=MenuItem,
        response=MenuItemResponse,
        label="Menu item",
        manage_permission="can_update_menu",
        referenced_by=((FoodOrderItem, "menu_item_id"),),
    ),
}


class CatalogService:

    @staticmethod
    def list_items(
        db: Session,
        kind: CatalogKind,
        available_only: bool = False,
        meal_type: Optional[str] = None,
    ) -> List[Any]:
        kind = CatalogKind(kind)
        entry = CATALOG[kind]
        query = db.query(entry.model)
        if available_only:
            query = query.filter(entry.model.is_available == True)
        if meal_type and entry.model is MenuItem:
            query = query.filter(MenuItem.meal_type == meal_type)
        items = query.order_by(entry.model.name.asc()).all()
        return [entry.response.model_validate(item) for item in items]

    @staticmethod
    def get_item(db: Session, kind: CatalogKind, item_id: int):
        kind = CatalogKind(kind)
        entry = CATALOG[kind]
        return entry.response.model_validate(CatalogService._get(db, entry, item_id))

    @staticmethod
    def create_item(db: Session, actor: Profile, kind: CatalogKind, request):
        kind = CatalogKind(kind)
        entry = CATALOG[kind]
        ensure_permission(role_names(actor), entry.manage_permission, f"manage {kind.value}")
        try:
            data = {
                field: value.value if isinstance(value, Enum) else value
                for field, value in request.model_dump().items()
            }
            item = entry.model(**data, created_at=datetime.utcnow())
            db.add(item)
            db.commit()
            db.refresh(item)
            logger.info(f"User {actor.id} created {entry.label.lower()} {item.id}")
            return entry.response.model_validate(item)
        except Exception as e:
            db.rollback()
            raise DatabaseError(f"Failed to create {entry.label.lower()}: {str(e)}")

    @staticmethod
    def update_item(db: Session, actor: Profile, kind: CatalogKind, item_id: int, request):
        kind = CatalogKind(kind)
        entry = CATALOG[kind]
        ensure_permission(role_names(actor), entry.manage_permission, f"manage {kind.value}")
        try:
            item = CatalogService._get(db, entry, item_id)
            update_data = request.model_dump(exclude_unset=True)
            columns = entry.model.__table__.columns
            for field, value in update_data.items():
                if field not in columns:
                    continue
                if value is None and not columns[field].nullable:
                    raise ValidationError(f"{field} cannot be null")
                setattr(item, field, value.value if isinstance(value, Enum) else value)
            item.updated_at = datetime.utcnow()
            db.commit()
            db.refresh(item)
            return entry.response.model_validate(item)
        except Exception as e:
            db.rollback()
            if isinstance(e, (CatalogItemNotFoundError, ValidationError)):
                raise e
            raise DatabaseError(f"Failed to update {entry.label.lower()}: {str(e)}")

    @staticmethod
    def set_availability(db: Session, actor: Profile, kind: CatalogKind, item_id: int, is_available: bool):
        kind = CatalogKind(kind)
        entry = CATALOG[kind]
        perms = effective_permissions(role_names(actor))
        allowed = (entry.manage_permission,) + entry.availability_permissions
        if not any(getattr(perms, name) for name in allowed):
            raise PermissionDenied(f"Not allowed to change availability of {kind.value}")
        try:
            item = CatalogService._get(db, entry, item_id)
            item.is_available = is_available
            item.updated_at = datetime.utcnow()
            db.commit()
            db.refresh(item)
            logger.info(f"User {actor.id} set {entry.label.lower()} {item_id} available={is_available}")
            return entry.response.model_validate(item)
        except Exception as e:
            db.rollback()
            if isinstance(e, CatalogItemNotFoundError):
                raise e
            raise DatabaseError(f"Failed to update availability: {str(e)}")

    @staticmethod
    def delete_item(db: Session, actor: Profile, kind: CatalogKind, item_id: int) -> bool:
        """Delete an item no booking refers to; referenced items should be made unavailable instead"""
        kind = CatalogKind(kind)
        entry = CATALOG[kind]
        ensure_permission(role_names(actor), entry.manage_permission, f"manage {kind.value}")
        try:
            item = CatalogService._get(db, entry, item_id)
            for model, column in entry.referenced_by:
                if db.query(model).filter(getattr(model, column) == item_id).first():
                    raise ValidationError(
                        f"{entry.label} {item_id} is used by existing bookings; mark it unavailable instead"
                    )
            db.delete(item)
            db.commit()
            return True
        except Exception as e:
            db.rollback()
            if isinstance(e, (CatalogItemNotFoundError, ValidationError)):
                raise e
            raise DatabaseError(f"Failed to delete {entry.label.lower()}: {str(e)}")

    @staticmethod
    def _get(db: Session, entry: CatalogEntry, item_id: int):
        item = db.query(entry.model).filter(entry.model.id == item_id).first()
        if not item:
            raise CatalogItemNotFoundError(f"{entry.label} with ID {item_id} not found")
        return item
