"""
Accounts and tenancy: owner registration, sign-in, business setup.

Federated sign-in resolves the local user by identity uid first, then by
email. A pre-registered staff member's first sign-in binds the uid and
activates the record.
"""

import logging
from typing import Optional

from sqlalchemy.orm import Session

from dineflow.core.cache import CacheKeys, cache
from dineflow.core.exceptions import (
    AuthorizationError, ConflictError, NotFoundError, ValidationError,
)
from dineflow.core.policy import Permission, RBACPolicy, UserRole
from dineflow.core.security import get_password_hash, verify_password
from dineflow.models.business import Business
from dineflow.models.user import StaffStatus, User
from dineflow.services.identity_service import FederatedIdentity

logger = logging.getLogger(__name__)


def _normalize_email(email: str) -> str:
    return email.strip().lower()


def invalidate_user(user_id: int) -> None:
    cache.delete(CacheKeys.user(user_id))


def register_owner(db: Session, email: str, password: str, name: Optional[str] = None) -> User:
    """Create an owner account with a password. The business is set up afterwards."""
    email = _normalize_email(email)
    existing = db.query(User).filter(
        User.email == email,
        User.role == UserRole.OWNER,
    ).first()
    if existing is not None:
        raise ConflictError("An owner account with this email already exists")

    user = User(
        email=email,
        name=name,
        password_hash=get_password_hash(password),
        role=UserRole.OWNER,
        status=StaffStatus.ACTIVE,
    )
    db.add(user)
    db.commit()
    db.refresh(user)
    logger.info(f"Owner account registered: {email}")
    return user


def authenticate(db: Session, email: str, password: str) -> Optional[User]:
    """Return the user for valid email/password credentials, else None."""
    email = _normalize_email(email)
    candidates = db.query(User).filter(
        User.email == email,
        User.password_hash.is_not(None),
        User.is_active.is_(True),
    ).all()
    for user in candidates:
        if verify_password(password, user.password_hash):
            return user
    return None


def federated_sign_in(db: Session, identity: FederatedIdentity, register_owner: bool = False) -> User:
    """Resolve or create the local user for a verified federated identity."""
    user = db.query(User).filter(User.firebase_uid == identity.uid).first()
    if user is not None:
        if not user.is_active:
            raise AuthorizationError("This account has been disabled")
        return user

    user = db.query(User).filter(
        User.email == identity.email,
        User.firebase_uid.is_(None),
        User.is_active.is_(True),
    ).order_by(User.id.asc()).first()
    if user is not None:
        user.firebase_uid = identity.uid
        if user.status == StaffStatus.PENDING:
            user.status = StaffStatus.ACTIVE
            logger.info(f"Staff member {user.email} activated on first sign-in")
        if not user.name and identity.name:
            user.name = identity.name
        db.commit()
        db.refresh(user)
        invalidate_user(user.id)
        return user

    if not register_owner:
        logger.warning(f"Federated sign-in refused: no account for {identity.email}")
        raise AuthorizationError(
            "No account found for this email. Ask your manager to add you as staff."
        )

    user = User(
        email=identity.email,
        name=identity.name,
        firebase_uid=identity.uid,
        role=UserRole.OWNER,
        status=StaffStatus.ACTIVE,
    )
    db.add(user)
    db.commit()
    db.refresh(user)
    logger.info(f"Owner account created via federated sign-in: {identity.email}")
    return user


def business_to_dict(business: Business) -> dict:
    return {
        "id": business.id,
        "name": business.name,
        "business_type": business.business_type,
        "address": business.address,
        "phone": business.phone,
        "owner_id": business.owner_id,
    }


def get_business(db: Session, business_id: int) -> dict:
    """Business document, read through the cache."""
    key = CacheKeys.business(business_id)
    record = cache.get(key)
    if record is None:
        business = db.get(Business, business_id)
        if business is None:
            raise NotFoundError("Business not found")
        record = business_to_dict(business)
        cache.set(key, record)
    return record


def setup_business(db: Session, actor, data) -> Business:
    """Create the caller's business and link the owner record to it."""
    if actor.role != UserRole.OWNER:
        raise AuthorizationError("Only an owner can set up a business")
    if actor.business_id is not None:
        raise ConflictError("Business is already set up")
    if not data.name.strip() or not data.business_type.strip():
        raise ValidationError("Business name and type are required")

    business = Business(
        name=data.name.strip(),
        business_type=data.business_type.strip(),
        address=data.address,
        phone=data.phone,
        owner_id=actor.user_id,
    )
    db.add(business)
    db.flush()

    owner = db.get(User, actor.user_id)
    owner.business_id = business.id
    db.commit()
    db.refresh(business)
    invalidate_user(actor.user_id)
    logger.info(f"Business {business.id} '{business.name}' set up by {actor.email}")
    return business


def update_business(db: Session, actor, business_id: int, data) -> Business:
    RBACPolicy.require(actor.role, Permission.BUSINESS_MANAGE)
    business = db.get(Business, business_id)
    if business is None:
        raise NotFoundError("Business not found")
    for field, value in data.model_dump(exclude_unset=True).items():
        if isinstance(value, str):
            value = value.strip()
        if field in ("name", "business_type") and not value:
            raise ValidationError(f"{field} cannot be empty")
        setattr(business, field, value)
    db.commit()
    db.refresh(business)
    cache.delete(CacheKeys.business(business_id))
    logger.info(f"Business {business_id} updated by {actor.email}")
    return business
