from pydantic import BaseModel, Field, EmailStr, ConfigDict, field_validator
from datetime import datetime
from typing import Optional, List

from app.logic.permissions import Role, RolePermissions

# Request Models
class RegisterUserRequest(BaseModel):
    email: EmailStr = Field(..., description="User email address")
    full_name: str = Field(..., min_length=1, max_length=255, description="User full name")
    password: str = Field(..., min_length=5, max_length=100, description="User password")
    phone: Optional[str] = Field(None, max_length=50)
    department: Optional[str] = Field(None, max_length=255)
    employee_id: Optional[str] = Field(None, max_length=100)
    is_third_party: bool = Field(default=False, description="External guest or contractor account")

class UpdateProfileRequest(BaseModel):
    full_name: Optional[str] = Field(None, min_length=1, max_length=255)
    phone: Optional[str] = Field(None, max_length=50)
    department: Optional[str] = Field(None, max_length=255)

    @field_validator('full_name', mode='before')
    @classmethod
    def full_name_not_null(cls, v):
        if v is None:
            raise ValueError("full_name cannot be null")
        return v

class ApproveAccountRequest(BaseModel):
    role: Optional[Role] = Field(None, description="Role granted on approval; defaults per account type")

class AssignRoleRequest(BaseModel):
    role: Role = Field(..., description="The single role the user will hold")

class UserQueryParams(BaseModel):
    page: int = Field(default=1, ge=1, description="Page number")
    limit: int = Field(default=10, ge=1, le=100, description="Items per page")
    search: Optional[str] = Field(None, max_length=255, description="Search term")
    role: Optional[Role] = Field(None, description="Filter by role")
    account_approved: Optional[bool] = Field(None, description="Filter by account approval")

# Response Models
class UserResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    email: str
    full_name: str
    phone: Optional[str] = None
    department: Optional[str] = None
    employee_id: Optional[str] = None
    is_third_party: bool
    account_approved: bool
    roles: List[str] = []
    created_at: datetime
    updated_at: Optional[datetime] = None

class RegisterUserResponse(UserResponse):
    pass

class UserListResponse(BaseModel):
    users: List[UserResponse]
    total: int
    page: int
    limit: int
    total_pages: int

class UserRolesResponse(BaseModel):
    user_id: int
    roles: List[str]

class UserPermissionsResponse(BaseModel):
    user_id: int
    roles: List[str]
    permissions: RolePermissions
    can_access_admin_panel: bool

class RolePermissionsResponse(BaseModel):
    role: str
    label: Optional[str] = None
    permissions: RolePermissions

# Error Response Models
class UserErrorResponse(BaseModel):
    error: str
    message: str
    details: Optional[dict] = None
