from typing import Optional

class BaseCustomError(Exception):
    """Base exception class for custom errors"""
    def __init__(self, message: str, error_code: Optional[str] = None):
        self.message = message
        self.error_code = error_code
        super().__init__(self.message)

class DatabaseError(BaseCustomError):
    """Raised when database operations fail"""
    def __init__(self, message: str):
        super().__init__(message, "DATABASE_ERROR")

class ValidationError(BaseCustomError):
    """Raised when validation fails"""
    def __init__(self, message: str):
        super().__init__(message, "VALIDATION_ERROR")

class AuthenticationError(BaseCustomError):
    """Raised when the acting user cannot be identified"""
    def __init__(self, message: str):
        super().__init__(message, "AUTHENTICATION_ERROR")

class AuthorizationError(BaseCustomError):
    """Raised when the acting user lacks the capability for an action"""
    def __init__(self, message: str):
        super().__init__(message, "PERMISSION_DENIED")

PermissionDenied = AuthorizationError

class AccountNotApprovedError(AuthorizationError):
    """Raised when an account still awaiting approval tries to use the portal"""
    def __init__(self, message: str):
        BaseCustomError.__init__(self, message, "ACCOUNT_NOT_APPROVED")

class NotFoundError(BaseCustomError):
    """Base class for missing records"""
    def __init__(self, message: str, error_code: str = "NOT_FOUND"):
        super().__init__(message, error_code)

class UserNotFoundError(NotFoundError):
    """Raised when a user is not found"""
    def __init__(self, message: str):
        super().__init__(message, "USER_NOT_FOUND")

class BookingNotFoundError(NotFoundError):
    """Raised when a booking request is not found"""
    def __init__(self, message: str):
        super().__init__(message, "BOOKING_NOT_FOUND")

class NotificationNotFoundError(NotFoundError):
    """Raised when a notification is not found or not owned by the caller"""
    def __init__(self, message: str):
        super().__init__(message, "NOTIFICATION_NOT_FOUND")

class CatalogItemNotFoundError(NotFoundError):
    """Raised when a room, facility or menu item is not found"""
    def __init__(self, message: str):
        super().__init__(message, "CATALOG_ITEM_NOT_FOUND")

class UserAlreadyExistsError(BaseCustomError):
    """Raised when trying to register an email that already exists"""
    def __init__(self, message: str):
        super().__init__(message, "USER_ALREADY_EXISTS")

class BookingAlreadyDecidedError(BaseCustomError):
    """Raised when a decision targets a booking or stage that is no longer pending"""
    def __init__(self, message: str):
        super().__init__(message, "BOOKING_ALREADY_DECIDED")
