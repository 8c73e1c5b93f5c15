from typing import List, Optional
from sqlalchemy.orm import Session, joinedload
from sqlalchemy import or_, and_
from datetime import datetime
import logging
import bcrypt

from app import config
from app.database.models.users import Profile, UserRole
from app.database.services.notification_service import NotificationService
from app.logic.permissions import (
    Role,
    ROLE_LABELS,
    ADMIN_PANEL_ROLES,
    effective_permissions,
    ensure_permission,
    can_access_admin_panel,
    parse_role,
)
from app.ReqResModels.usermodels import (
    RegisterUserRequest,
    UpdateProfileRequest,
    UserQueryParams,
    UserResponse,
    RegisterUserResponse,
    UserListResponse,
    UserRolesResponse,
    UserPermissionsResponse,
)
from app.ReqResModels.notificationmodels import NotificationType
from app.logic.exceptions import (
    UserNotFoundError,
    UserAlreadyExistsError,
    ValidationError,
    PermissionDenied,
    DatabaseError
)

logger = logging.getLogger(__name__)

def role_names(user: Profile) -> List[str]:
    return [r.role for r in sorted(user.roles, key=lambda r: r.id or 0)]

class UserService:

    @staticmethod
    def register_user(db: Session, request: RegisterUserRequest) -> RegisterUserResponse:
        """Create a profile awaiting account approval, with its initial role"""
        try:
            existing_user = db.query(Profile).filter(Profile.email == request.email).first()
            if existing_user:
                raise UserAlreadyExistsError(f"User with email '{request.email}' already exists")

            password_hash = bcrypt.hashpw(request.password.encode('utf-8'), bcrypt.gensalt()).decode('utf-8')

            user = Profile(
                email=request.email,
                full_name=request.full_name,
                password_hash=password_hash,
                phone=request.phone,
                department=request.department,
                employee_id=request.employee_id,
                is_third_party=request.is_third_party,
                account_approved=False,
                created_at=datetime.utcnow()
            )
            db.add(user)
            db.flush()

            initial_role = Role.THIRD_PARTY.value if request.is_third_party else UserService._default_role().value
            db.add(UserRole(user_id=user.id, role=initial_role))

            db.commit()
            db.refresh(user)
            logger.info(f"Registered user {user.id} ({initial_role}), awaiting approval")

            return UserService._model_to_response(user, RegisterUserResponse)

        except Exception as e:
            db.rollback()
            if isinstance(e, UserAlreadyExistsError):
                raise e
            raise DatabaseError(f"Failed to register user: {str(e)}")

    @staticmethod
    def get_profile(db: Session, user_id: int) -> Profile:
        """Load a profile with its roles"""
        user = db.query(Profile).options(joinedload(Profile.roles)).filter(Profile.id == user_id).first()
        if not user:
            raise UserNotFoundError(f"User with ID {user_id} not found")
        return user

    @staticmethod
    def get_user_by_id(db: Session, user_id: int) -> UserResponse:
        return UserService._model_to_response(UserService.get_profile(db, user_id), UserResponse)

    @staticmethod
    def update_profile(db: Session, user_id: int, request: UpdateProfileRequest) -> UserResponse:
        """Self-service edit of contact details; roles and account flags are not touched"""
        try:
            user = UserService.get_profile(db, user_id)
            update_data = request.model_dump(exclude_unset=True)
            for field, value in update_data.items():
                setattr(user, field, value)
            user.updated_at = datetime.utcnow()
            db.commit()
            db.refresh(user)
            logger.info(f"User {user_id} updated profile fields {sorted(update_data)}")
            return UserService._model_to_response(user, UserResponse)
        except Exception as e:
            db.rollback()
            if isinstance(e, UserNotFoundError):
                raise e
            raise DatabaseError(f"Failed to update profile: {str(e)}")

    @staticmethod
    def get_user_roles(db: Session, user_id: int) -> UserRolesResponse:
        user = UserService.get_profile(db, user_id)
        return UserRolesResponse(user_id=user.id, roles=role_names(user))

    @staticmethod
    def get_user_permissions(db: Session, user_id: int) -> UserPermissionsResponse:
        user = UserService.get_profile(db, user_id)
        roles = role_names(user)
        return UserPermissionsResponse(
            user_id=user.id,
            roles=roles,
            permissions=effective_permissions(roles),
            can_access_admin_panel=can_access_admin_panel(roles),
        )

    @staticmethod
    def get_users(db: Session, actor: Profile, params: UserQueryParams) -> UserListResponse:
        """Get paginated list of users; restricted to admin panel roles"""
        if not can_access_admin_panel(role_names(actor)):
            raise PermissionDenied("Not allowed to list users")

        query = db.query(Profile).options(joinedload(Profile.roles))

        if params.search:
            search_term = f"%{params.search}%"
            query = query.filter(
                or_(
                    Profile.full_name.ilike(search_term),
                    Profile.email.ilike(search_term),
                    Profile.department.ilike(search_term)
                )
            )

        if params.role:
            query = query.filter(Profile.roles.any(UserRole.role == params.role.value))

        if params.account_approved is not None:
            query = query.filter(Profile.account_approved == params.account_approved)

        total = query.count()

        offset = (params.page - 1) * params.limit
        users = query.order_by(Profile.created_at.desc(), Profile.id.desc()).offset(offset).limit(params.limit).all()

        return UserListResponse(
            users=[UserService._model_to_response(user, UserResponse) for user in users],
            total=total,
            page=params.page,
            limit=params.limit,
            total_pages=(total + params.limit - 1) // params.limit
        )

    @staticmethod
    def get_pending_accounts(db: Session, actor: Profile) -> List[UserResponse]:
        """Registrations still waiting for account approval"""
        perms = effective_permissions(role_names(actor))
        if not (perms.can_approve_users or perms.can_approve_third_party):
            raise PermissionDenied("Not allowed to review account registrations")

        query = db.query(Profile).options(joinedload(Profile.roles)).filter(Profile.account_approved == False)
        # Only show the kind of accounts the reviewer may approve
        if not perms.can_approve_third_party:
            query = query.filter(Profile.is_third_party == False)
        elif not perms.can_approve_users:
            query = query.filter(Profile.is_third_party == True)

        users = query.order_by(Profile.created_at.desc()).limit(50).all()
        return [UserService._model_to_response(user, UserResponse) for user in users]

    @staticmethod
    def approve_account(db: Session, actor: Profile, user_id: int, role: Optional[Role] = None) -> UserResponse:
        """Open the portal to a registered user and give them their role"""
        try:
            user = UserService.get_profile(db, user_id)
            actor_roles = role_names(actor)

            if user.is_third_party:
                ensure_permission(actor_roles, "can_approve_third_party", "approve third-party accounts")
            else:
                ensure_permission(actor_roles, "can_approve_users", "approve user accounts")

            if user.account_approved:
                raise ValidationError(f"Account of user {user_id} is already approved")

            if role is None:
                role = Role.THIRD_PARTY if user.is_third_party else UserService._default_role()
            if role in ADMIN_PANEL_ROLES:
                ensure_permission(actor_roles, "can_approve_admins", f"grant the {role.value} role")

            user.account_approved = True
            user.updated_at = datetime.utcnow()
            UserService._replace_roles(db, user.id, role, actor.id)
            NotificationService.add_notification(
                db,
                user.id,
                "Account Approved",
                f"Your account has been approved. You now have access as {ROLE_LABELS[role]}.",
                NotificationType.ACCOUNT_APPROVAL.value,
                action_url="/dashboard",
            )

            db.commit()
            db.refresh(user)
            logger.info(f"User {actor.id} approved account {user.id} as {role.value}")
            return UserService._model_to_response(user, UserResponse)

        except Exception as e:
            db.rollback()
            if isinstance(e, (UserNotFoundError, ValidationError, PermissionDenied)):
                raise e
            raise DatabaseError(f"Failed to approve account: {str(e)}")

    @staticmethod
    def decline_account(db: Session, actor: Profile, user_id: int) -> bool:
        """Remove a registration that has not been approved"""
        try:
            user = UserService.get_profile(db, user_id)
            actor_roles = role_names(actor)

            if user.is_third_party:
                ensure_permission(actor_roles, "can_approve_third_party", "decline third-party accounts")
            else:
                ensure_permission(actor_roles, "can_approve_users", "decline user accounts")

            if user.account_approved:
                raise ValidationError(f"Account of user {user_id} is already approved and cannot be declined")

            db.delete(user)
            db.commit()
            logger.info(f"User {actor.id} declined registration {user_id}")
            return True

        except Exception as e:
            db.rollback()
            if isinstance(e, (UserNotFoundError, ValidationError, PermissionDenied)):
                raise e
            raise DatabaseError(f"Failed to decline account: {str(e)}")

    @staticmethod
    def assign_role(db: Session, actor: Profile, user_id: int, role: Role) -> UserRolesResponse:
        """Replace every role the user holds with ``role``"""
        try:
            ensure_permission(role_names(actor), "can_approve_admins", "assign roles")
            user = UserService.get_profile(db, user_id)

            UserService._replace_roles(db, user.id, role, actor.id)
            NotificationService.add_notification(
                db,
                user.id,
                "Role Updated",
                f"Your role has been changed to {ROLE_LABELS[role]}.",
                NotificationType.ROLE_ASSIGNMENT.value,
            )

            db.commit()
            logger.info(f"User {actor.id} assigned role {role.value} to user {user.id}")
            return UserRolesResponse(user_id=user.id, roles=UserService._stored_roles(db, user.id))

        except Exception as e:
            db.rollback()
            if isinstance(e, (UserNotFoundError, PermissionDenied)):
                raise e
            raise DatabaseError(f"Failed to assign role: {str(e)}")

    @staticmethod
    def remove_role(db: Session, actor: Profile, user_id: int, role: str) -> UserRolesResponse:
        """Delete the user's rows for one role (legacy values included)"""
        try:
            ensure_permission(role_names(actor), "can_approve_admins", "remove roles")
            user = UserService.get_profile(db, user_id)

            deleted = db.query(UserRole).filter(
                and_(UserRole.user_id == user.id, UserRole.role == role)
            ).delete(synchronize_session=False)
            if not deleted:
                raise ValidationError(f"User {user_id} does not hold the role '{role}'")

            db.commit()
            logger.info(f"User {actor.id} removed role {role} from user {user.id}")
            return UserRolesResponse(user_id=user.id, roles=UserService._stored_roles(db, user.id))

        except Exception as e:
            db.rollback()
            if isinstance(e, (UserNotFoundError, ValidationError, PermissionDenied)):
                raise e
            raise DatabaseError(f"Failed to remove role: {str(e)}")

    @staticmethod
    def _replace_roles(db: Session, user_id: int, role: Role, assigned_by: Optional[int]):
        """Delete then insert inside the caller's transaction"""
        db.query(UserRole).filter(UserRole.user_id == user_id).delete(synchronize_session=False)
        db.add(UserRole(user_id=user_id, role=role.value, assigned_by=assigned_by))
        db.flush()
        db.expire_all()

    @staticmethod
    def _stored_roles(db: Session, user_id: int) -> List[str]:
        rows = db.query(UserRole).filter(UserRole.user_id == user_id).order_by(UserRole.id).all()
        return [row.role for row in rows]

    @staticmethod
    def _default_role() -> Role:
        role = parse_role(config.DEFAULT_ROLE)
        if role is None or role in ADMIN_PANEL_ROLES:
            logger.warning(f"DEFAULT_ROLE '{config.DEFAULT_ROLE}' is not a plain member role, using employee")
            return Role.EMPLOYEE
        return role

    @staticmethod
    def _model_to_response(user: Profile, response_type):
        """Convert SQLAlchemy model to Pydantic response model"""
        data = {
            "id": user.id,
            "email": user.email,
            "full_name": user.full_name,
            "phone": user.phone,
            "department": user.department,
            "employee_id": user.employee_id,
            "is_third_party": bool(user.is_third_party),
            "account_approved": bool(user.account_approved),
            "roles": role_names(user),
            "created_at": user.created_at or datetime.utcnow(),
            "updated_at": user.updated_at,
        }
        return response_type(**data)
