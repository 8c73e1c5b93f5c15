from sqlalchemy import Column, Integer, Numeric, String, Text, Boolean, JSON, TIMESTAMP
from app.database.database import Base
from datetime import datetime


class Accommodation(Base):
    __tablename__ = "accommodations"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)
    room_type = Column(String(100), nullable=False)
    capacity = Column(Integer, nullable=False, default=1)
    amenities = Column(JSON, nullable=True)
    price_per_night = Column(Numeric(12, 2), nullable=False, default=0)
    is_available = Column(Boolean, nullable=False, default=True)
    created_at = Column(TIMESTAMP, default=datetime.utcnow)
    updated_at = Column(TIMESTAMP, nullable=True)


class Facility(Base):
    __tablename__ = "facilities"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)
    facility_type = Column(String(100), nullable=False)
    capacity = Column(Integer, nullable=True)
    amenities = Column(JSON, nullable=True)
    hourly_rate = Column(Numeric(12, 2), nullable=False, default=0)
    requires_approval = Column(Boolean, nullable=False, default=True)
    is_available = Column(Boolean, nullable=False, default=True)
    created_at = Column(TIMESTAMP, default=datetime.utcnow)
    updated_at = Column(TIMESTAMP, nullable=True)


class MenuItem(Base):
    __tablename__ = "menu_items"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)
    meal_type = Column(String(20), nullable=False)  # breakfast, lunch, supper
    price = Column(Numeric(12, 2), nullable=False)
    image_url = Column(String(500), nullable=True)
    is_vegetarian = Column(Boolean, nullable=False, default=False)
    is_vegan = Column(Boolean, nullable=False, default=False)
    allergens = Column(JSON, nullable=True)
    is_available = Column(Boolean, nullable=False, default=True)
    created_at = Column(TIMESTAMP, default=datetime.utcnow)
    updated_at = Column(TIMESTAMP, nullable=True)
