from sqlalchemy import Column, Integer, Numeric, String, ForeignKey, Text, Date, Time, TIMESTAMP
from sqlalchemy.orm import relationship
from app.database.database import Base
from datetime import datetime


class AccommodationBooking(Base):
    __tablename__ = "accommodation_bookings"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("profiles.id", ondelete="CASCADE"), nullable=False, index=True)
    accommodation_id = Column(Integer, ForeignKey("accommodations.id"), nullable=True)
    guest_name = Column(String(255), nullable=False)
    guest_address = Column(Text, nullable=False)
    check_in_date = Column(Date, nullable=False)
    check_in_time = Column(Time, nullable=True)
    check_out_date = Column(Date, nullable=False)
    check_out_time = Column(Time, nullable=True)
    purpose_of_visit = Column(Text, nullable=False)
    guests = Column(Integer, nullable=False, default=1)
    billing_to = Column(String(20), nullable=False, default="department")  # guest, department
    room_type_preference = Column(String(100), nullable=True)
    special_requests = Column(Text, nullable=True)

    status = Column(String(20), nullable=False, default="pending", index=True)  # pending, approved, declined
    department_approval = Column(String(20), nullable=True)
    hr_approval = Column(String(20), nullable=True)
    md_approval = Column(String(20), nullable=True)
    approved_by = Column(Integer, ForeignKey("profiles.id"), nullable=True)
    approval_notes = Column(Text, nullable=True)
    created_at = Column(TIMESTAMP, default=datetime.utcnow)
    updated_at = Column(TIMESTAMP, nullable=True)

    requester = relationship("Profile", foreign_keys=[user_id])
    approver = relationship("Profile", foreign_keys=[approved_by])
    accommodation = relationship("Accommodation")


class FacilityBooking(Base):
    __tablename__ = "facility_bookings"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("profiles.id", ondelete="CASCADE"), nullable=False, index=True)
    facility_id = Column(Integer, ForeignKey("facilities.id"), nullable=True)
    facility_type_preference = Column(String(100), nullable=True)
    booking_date = Column(Date, nullable=False)
    start_time = Column(Time, nullable=False)
    end_time = Column(Time, nullable=False)
    purpose = Column(Text, nullable=False)
    attendees = Column(Integer, nullable=False, default=1)

    status = Column(String(20), nullable=False, default="pending", index=True)
    club_manager_approval = Column(String(20), nullable=True)
    md_approval = Column(String(20), nullable=True)
    approved_by = Column(Integer, ForeignKey("profiles.id"), nullable=True)
    approval_notes = Column(Text, nullable=True)
    created_at = Column(TIMESTAMP, default=datetime.utcnow)
    updated_at = Column(TIMESTAMP, nullable=True)

    requester = relationship("Profile", foreign_keys=[user_id])
    approver = relationship("Profile", foreign_keys=[approved_by])
    facility = relationship("Facility")


class FoodOrder(Base):
    __tablename__ = "food_orders"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("profiles.id", ondelete="CASCADE"), nullable=False, index=True)
    order_date = Column(Date, nullable=False)
    delivery_time = Column(TIMESTAMP, nullable=False)
    meal_type = Column(String(20), nullable=False)  # breakfast, lunch, supper
    total_amount = Column(Numeric(12, 2), nullable=False, default=0)
    special_requests = Column(Text, nullable=True)
    order_status = Column(String(20), nullable=False, default="received")  # received, preparing, ready, delivered, cancelled

    status = Column(String(20), nullable=False, default="pending", index=True)
    admin_approval = Column(String(20), nullable=True)
    approved_by = Column(Integer, ForeignKey("profiles.id"), nullable=True)
    approval_notes = Column(Text, nullable=True)
    created_at = Column(TIMESTAMP, default=datetime.utcnow)
    updated_at = Column(TIMESTAMP, nullable=True)

    requester = relationship("Profile", foreign_keys=[user_id])
    approver = relationship("Profile", foreign_keys=[approved_by])
    items = relationship("FoodOrderItem", back_populates="order", cascade="all, delete-orphan", order_by="FoodOrderItem.id")


class FoodOrderItem(Base):
    __tablename__ = "food_order_items"

    id = Column(Integer, primary_key=True, index=True)
    order_id = Column(Integer, ForeignKey("food_orders.id", ondelete="CASCADE"), nullable=False)
    menu_item_id = Column(Integer, ForeignKey("menu_items.id"), nullable=False)
    quantity = Column(Integer, nullable=False, default=1)
    price = Column(Numeric(12, 2), nullable=False)  # unit price at time of order
    notes = Column(Text, nullable=True)
    created_at = Column(TIMESTAMP, default=datetime.utcnow)

    order = relationship("FoodOrder", back_populates="items")
    menu_item = relationship("MenuItem")
