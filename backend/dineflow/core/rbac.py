"""Role-Based Access Control (RBAC) dependencies for route handlers."""

from typing import Annotated, Optional

from fastapi import Depends, HTTPException, Request, status

from dineflow.core.cache import CacheKeys, cache
from dineflow.core.exceptions import BusinessSetupRequired
from dineflow.core.policy import Permission, RBACPolicy, UserRole
from dineflow.core.security import decode_access_token
from dineflow.db.session import DbSession


class TokenData:
    """Authenticated caller.

    Role and business are taken from the stored user record rather than the
    token, so a role change or business setup applies on the next request.

    Attributes:
        user_id: The user's database ID.
        email: The user's email address.
        role: The user's current role.
        business_id: Tenant the user belongs to, or None before setup.
        name: Display name.
    """

    def __init__(self, user_id: int, email: str, role: UserRole,
                 business_id: Optional[int] = None, name: str = ""):
        self.user_id = user_id
        self.id = user_id
        self.email = email
        self.role = role
        self.business_id = business_id
        self.name = name or email.split("@")[0]

    def require_business(self) -> int:
        """Return the caller's business id or raise BusinessSetupRequired."""
        if self.business_id is None:
            raise BusinessSetupRequired()
        return self.business_id


def load_user_record(db, user_id: int) -> Optional[dict]:
    """Read the user record through the cache."""
    key = CacheKeys.user(user_id)
    record = cache.get(key)
    if record is not None:
        return record

    from dineflow.models.user import User
    user = db.get(User, user_id)
    if user is None:
        return None
    record = {
        "id": user.id,
        "email": user.email,
        "name": user.display_name,
        "role": user.role.value,
        "business_id": user.business_id,
        "is_active": user.is_active,
    }
    cache.set(key, record)
    return record


def _token_from_request(request: Request) -> Optional[str]:
    auth_header = request.headers.get("Authorization", "")
    if auth_header.startswith("Bearer "):
        token = auth_header.split(" ", 1)[1]
        if token:
            return token
    return None


def get_current_user(request: Request, db: DbSession) -> TokenData:
    """Get the current authenticated user from the bearer token."""
    token = _token_from_request(request)
    payload = decode_access_token(token) if token else None

    if payload is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authenticated",
            headers={"WWW-Authenticate": "Bearer"},
        )

    user_id = payload.get("sub")
    if user_id is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid token payload",
        )

    try:
        record = load_user_record(db, int(user_id))
    except ValueError:
        record = None
    if record is None or not record["is_active"]:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="User account is disabled",
        )

    return TokenData(
        user_id=record["id"],
        email=record["email"],
        role=UserRole(record["role"]),
        business_id=record["business_id"],
        name=record["name"],
    )


CurrentUser = Annotated[TokenData, Depends(get_current_user)]


def require_permission(permission: Permission):
    """Dependency requiring the caller's role to hold ``permission``."""

    def permission_checker(current_user: CurrentUser) -> TokenData:
        if not RBACPolicy.has_permission(current_user.role, permission):
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail="Insufficient permissions",
            )
        return current_user

    return permission_checker


def get_business_id(current_user: CurrentUser) -> int:
    """Tenant scope of the caller."""
    return current_user.require_business()


BusinessId = Annotated[int, Depends(get_business_id)]
