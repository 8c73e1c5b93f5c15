from fastapi import APIRouter, Depends, HTTPException, Query, status as http_status
from sqlalchemy.orm import Session
from typing import Optional, List

from app.api.dependencies import get_db, get_current_user
from app.database.models.users import Profile
from app.database.services.user_service import UserService
from app.logic.permissions import ROLE_LABELS, permissions_for, parse_role
from app.ReqResModels.usermodels import (
    RegisterUserRequest,
    UpdateProfileRequest,
    ApproveAccountRequest,
    AssignRoleRequest,
    UserQueryParams,
    RegisterUserResponse,
    UserResponse,
    UserListResponse,
    UserRolesResponse,
    UserPermissionsResponse,
    RolePermissionsResponse,
    UserErrorResponse,
)
from app.logic.exceptions import (
    UserNotFoundError,
    UserAlreadyExistsError,
    ValidationError,
    PermissionDenied,
    DatabaseError
)

router = APIRouter(
    prefix="/users",
    tags=["users"],
    responses={
        404: {"model": UserErrorResponse, "description": "User not found"},
        400: {"model": UserErrorResponse, "description": "Bad request"},
        403: {"model": UserErrorResponse, "description": "Permission denied"},
        500: {"model": UserErrorResponse, "description": "Internal server error"}
    }
)

permissions_router = APIRouter(prefix="/permissions", tags=["permissions"])

@router.post(
    "/register",
    response_model=RegisterUserResponse,
    status_code=http_status.HTTP_201_CREATED,
    summary="Register a new user",
    description="Create a profile that stays blocked until an approver approves the account"
)
def register_user(
    request: RegisterUserRequest,
    db: Session = Depends(get_db)
):
    """Register a new user"""
    try:
        return UserService.register_user(db, request)
    except UserAlreadyExistsError as e:
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
    "/me",
    response_model=UserResponse,
    summary="Get current user",
    description="Profile and roles of the acting user"
)
def get_me(
    current_user: Profile = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    return UserService.get_user_by_id(db, current_user.id)

@router.put(
    "/me",
    response_model=UserResponse,
    summary="Update current user's profile",
    description="Edit full name, phone and department of the acting user"
)
def update_me(
    request: UpdateProfileRequest,
    current_user: Profile = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    try:
        return UserService.update_profile(db, current_user.id, request)
    except UserNotFoundError as e:
        raise HTTPException(
            status_code=http_status.HTTP_404_NOT_FOUND,
            detail=e.message
        )
    except DatabaseError as e:
        raise HTTPException(
            status_code=http_status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=e.message
        )

@router.get(
    "/me/permissions",
    response_model=UserPermissionsResponse,
    summary="Get current user's permissions",
    description="Capabilities granted by all of the acting user's roles"
)
def get_my_permissions(
    current_user: Profile = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    return UserService.get_user_permissions(db, current_user.id)

@router.get(
    "/pending",
    response_model=List[UserResponse],
    summary="Get pending registrations",
    description="Accounts waiting for approval that the acting user may review"
)
def get_pending_accounts(
    current_user: Profile = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    try:
        return UserService.get_pending_accounts(db, current_user)
    except PermissionDenied as e:
        raise HTTPException(
            status_code=http_status.HTTP_403_FORBIDDEN,
            detail=e.message
        )

@router.get(
    "/",
    response_model=UserListResponse,
    summary="Get users",
    description="Retrieve a paginated list of users with optional filtering"
)
def get_users(
    page: int = Query(1, ge=1, description="Page number"),
    limit: int = Query(10, ge=1, le=100, description="Items per page"),
    search: Optional[str] = Query(None, description="Search term"),
    role_filter: Optional[str] = Query(None, alias="role", description="Filter by role"),
    account_approved: Optional[bool] = Query(None, description="Filter by account approval"),
    current_user: Profile = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Get paginated list of users"""
    role_enum = None
    if role_filter:
        role_enum = parse_role(role_filter)
        if role_enum is None:
            raise HTTPException(
                status_code=http_status.HTTP_400_BAD_REQUEST,
                detail=f"Invalid role value: {role_filter}"
            )
    try:
        params = UserQueryParams(
            page=page,
            limit=limit,
            search=search,
            role=role_enum,
            account_approved=account_approved,
        )
        return UserService.get_users(db, current_user, params)
    except PermissionDenied as e:
        raise HTTPException(
            status_code=http_status.HTTP_403_FORBIDDEN,
            detail=e.message
        )

@router.post(
    "/{user_id}/approve",
    response_model=UserResponse,
    summary="Approve account",
    description="Approve a pending registration and assign its role"
)
def approve_account(
    user_id: int,
    request: Optional[ApproveAccountRequest] = None,
    current_user: Profile = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    try:
        role = request.role if request else None
        return UserService.approve_account(db, current_user, user_id, role)
    except UserNotFoundError as e:
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

@router.post(
    "/{user_id}/decline",
    status_code=http_status.HTTP_200_OK,
    summary="Decline account",
    description="Delete a registration that has not been approved"
)
def decline_account(
    user_id: int,
    current_user: Profile = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    try:
        UserService.decline_account(db, current_user, user_id)
        return {"message": "Registration declined"}
    except UserNotFoundError as e:
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

@router.get(
    "/{user_id}/roles",
    response_model=UserRolesResponse,
    summary="Get user roles"
)
def get_user_roles(
    user_id: int,
    current_user: Profile = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    try:
        return UserService.get_user_roles(db, user_id)
    except UserNotFoundError as e:
        raise HTTPException(
            status_code=http_status.HTTP_404_NOT_FOUND,
            detail=e.message
        )

@router.put(
    "/{user_id}/role",
    response_model=UserRolesResponse,
    summary="Assign role",
    description="Replace all of the user's roles with the given one"
)
def assign_role(
    user_id: int,
    request: AssignRoleRequest,
    current_user: Profile = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    try:
        return UserService.assign_role(db, current_user, user_id, request.role)
    except UserNotFoundError as e:
        raise HTTPException(
            status_code=http_status.HTTP_404_NOT_FOUND,
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

@router.delete(
    "/{user_id}/roles/{role}",
    response_model=UserRolesResponse,
    summary="Remove role",
    description="Delete one role from the user, including legacy role values"
)
def remove_role(
    user_id: int,
    role: str,
    current_user: Profile = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    try:
        return UserService.remove_role(db, current_user, user_id, role)
    except UserNotFoundError as e:
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

@permissions_router.get(
    "/{role}",
    response_model=RolePermissionsResponse,
    summary="Get role permissions",
    description="Capability table entry for a role; unknown roles have no capabilities"
)
def get_role_permissions(role: str):
    parsed = parse_role(role)
    return RolePermissionsResponse(
        role=role,
        label=ROLE_LABELS.get(parsed) if parsed else None,
        permissions=permissions_for(role),
    )
