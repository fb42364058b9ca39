"""Authentication routes."""

import logging
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, Request, status

from dineflow.core.policy import RBACPolicy
from dineflow.core.rate_limit import limiter
from dineflow.core.rbac import CurrentUser
from dineflow.core.security import token_for_user
from dineflow.db.session import DbSession
from dineflow.models.user import User
from dineflow.schemas.auth import (
    FederatedLoginRequest, LoginRequest, RegisterRequest, Token, UserProfile,
)
from dineflow.services import account_service
from dineflow.services.identity_service import FirebaseIdentityProvider, get_identity_provider

logger = logging.getLogger("auth")

router = APIRouter()

IdentityProvider = Annotated[FirebaseIdentityProvider, Depends(get_identity_provider)]


def user_profile(user: User) -> UserProfile:
    return UserProfile(
        id=user.id,
        email=user.email,
        name=user.display_name,
        role=user.role.value,
        status=user.status.value,
        employee_id=user.employee_id,
        business_id=user.business_id,
        pages=[p.value for p in RBACPolicy.visible_pages(user.role)],
        dashboard=RBACPolicy.dashboard_for(user.role).value,
    )


def _token_response(user: User) -> Token:
    return Token(access_token=token_for_user(user), user=user_profile(user))


@router.post("/register", response_model=Token, status_code=status.HTTP_201_CREATED)
@limiter.limit("5/minute")
def register(request: Request, body: RegisterRequest, db: DbSession):
    """Create an owner account. Business setup follows as a separate step."""
    user = account_service.register_owner(db, body.email, body.password, body.name)
    return _token_response(user)


@router.post("/login", response_model=Token)
@limiter.limit("5/minute")
def login(request: Request, body: LoginRequest, db: DbSession):
    """Authenticate with email and password and return a JWT token."""
    client_ip = request.client.host if request.client else "unknown"
    user = account_service.authenticate(db, body.email, body.password)
    if user is None:
        logger.warning(f"Failed login attempt for email: {body.email} from IP: {client_ip}")
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid email or password",
        )
    logger.info(f"Successful login: {user.email} (ID: {user.id}, role: {user.role.value}) from IP: {client_ip}")
    return _token_response(user)


@router.post("/federated", response_model=Token)
@limiter.limit("10/minute")
def federated_login(request: Request, body: FederatedLoginRequest, db: DbSession,
                    provider: IdentityProvider):
    """Exchange an identity-provider ID token for a session token."""
    identity = provider.verify(body.id_token)
    user = account_service.federated_sign_in(db, identity, register_owner=body.register_owner)
    logger.info(f"Federated login: {user.email} (ID: {user.id}, role: {user.role.value})")
    return _token_response(user)


@router.get("/me", response_model=UserProfile)
def get_current_user_info(current_user: CurrentUser, db: DbSession):
    """Profile of the caller with the pages their role can see."""
    user = db.get(User, current_user.user_id)
    return user_profile(user)
