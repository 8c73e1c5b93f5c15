from fastapi import Depends, Header, HTTPException, status as http_status
from sqlalchemy.orm import Session
from typing import Optional

from app.database.database import SessionLocal
from app.database.models.users import Profile
from app.database.services.user_service import UserService
from app.logic.exceptions import UserNotFoundError

def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()

def get_session_factory():
    """Session factory for long-lived responses that open their own sessions"""
    return SessionLocal

def get_current_user(
    x_user_id: Optional[str] = Header(None, alias="X-User-Id", description="ID of the acting user"),
    db: Session = Depends(get_db)
) -> Profile:
    """Resolve the acting user from the X-User-Id header set by the upstream auth layer"""
    if not x_user_id:
        raise HTTPException(
            status_code=http_status.HTTP_401_UNAUTHORIZED,
            detail="Missing X-User-Id header"
        )
    try:
        user_id = int(x_user_id)
    except ValueError:
        raise HTTPException(
            status_code=http_status.HTTP_401_UNAUTHORIZED,
            detail="Invalid X-User-Id header"
        )
    try:
        return UserService.get_profile(db, user_id)
    except UserNotFoundError:
        raise HTTPException(
            status_code=http_status.HTTP_401_UNAUTHORIZED,
            detail=f"Unknown user {user_id}"
        )

def get_approved_user(current_user: Profile = Depends(get_current_user)) -> Profile:
    """Acting user whose account has been approved"""
    if not current_user.account_approved:
        raise HTTPException(
            status_code=http_status.HTTP_403_FORBIDDEN,
            detail="Your account is awaiting approval"
        )
    return current_user
