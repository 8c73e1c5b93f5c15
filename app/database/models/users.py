from sqlalchemy import Column, Integer, String, ForeignKey, Text, Boolean, TIMESTAMP
from sqlalchemy.orm import relationship
from app.database.database import Base
from datetime import datetime


class Profile(Base):
    __tablename__ = "profiles"

    id = Column(Integer, primary_key=True, index=True)
    email = Column(String(255), unique=True, index=True, nullable=False)
    full_name = Column(String(255), nullable=False)
    password_hash = Column(Text, nullable=False)
    phone = Column(String(50), nullable=True)
    department = Column(String(255), nullable=True)
    employee_id = Column(String(100), nullable=True)
    is_third_party = Column(Boolean, nullable=False, default=False)
    account_approved = Column(Boolean, nullable=False, default=False)  # gate for the whole portal
    created_at = Column(TIMESTAMP, default=datetime.utcnow)
    updated_at = Column(TIMESTAMP, nullable=True)

    roles = relationship(
        "UserRole",
        back_populates="user",
        cascade="all, delete-orphan",
        foreign_keys="UserRole.user_id",
    )
    notifications = relationship("Notification", back_populates="user", cascade="all, delete-orphan")


class UserRole(Base):
    __tablename__ = "user_roles"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("profiles.id", ondelete="CASCADE"), nullable=False, index=True)
    role = Column(String(50), nullable=False)  # superadmin, managing_director, hr_office, club_house_manager, employee, third_party
    assigned_by = Column(Integer, ForeignKey("profiles.id"), nullable=True)
    created_at = Column(TIMESTAMP, default=datetime.utcnow)

    user = relationship("Profile", foreign_keys=[user_id], back_populates="roles")
