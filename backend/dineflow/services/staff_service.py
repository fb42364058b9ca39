"""Staff roster management within a business."""

import logging
from typing import List

from sqlalchemy.orm import Session

from dineflow.core.exceptions import AuthorizationError, ConflictError, NotFoundError
from dineflow.core.policy import Permission, RBACPolicy, UserRole
from dineflow.models.user import StaffStatus, User
from dineflow.services.account_service import invalidate_user

logger = logging.getLogger(__name__)


class StaffService:
    def __init__(self, db: Session, business_id: int):
        self.db = db
        self.business_id = business_id

    def _members(self):
        return self.db.query(User).filter(User.business_id == self.business_id)

    def list_staff(self) -> List[User]:
        return self._members().order_by(User.created_at.desc(), User.id.desc()).all()

    def next_employee_id(self) -> str:
        """EMP-NNN numbered from the count of members that already have one."""
        count = self._members().filter(User.employee_id.is_not(None)).count()
        return f"EMP-{count + 1:03d}"

    def _check_rank(self, actor, target_role: UserRole, action: str) -> None:
        try:
            RBACPolicy.require_manage_role(actor.role, target_role)
        except AuthorizationError as e:
            logger.warning(
                f"Staff {action} refused for {actor.email} ({actor.role.value}): {e.message}"
            )
            raise

    def add_staff(self, actor, email: str, name: str, role: UserRole) -> User:
        """Pre-register a staff member; they become active on first sign-in.

        Duplicate emails are caught by a read before the insert, not by a
        storage constraint.
        """
        RBACPolicy.require(actor.role, Permission.STAFF_MANAGE)
        role = UserRole(role)
        if role == UserRole.OWNER:
            raise AuthorizationError("Owner accounts cannot be created as staff")
        self._check_rank(actor, role, "add")

        email = email.strip().lower()
        if self._members().filter(User.email == email).first() is not None:
            raise ConflictError("A staff member with this email already exists")

        member = User(
            email=email,
            name=name.strip(),
            role=role,
            status=StaffStatus.PENDING,
            employee_id=self.next_employee_id(),
            business_id=self.business_id,
            created_by_id=actor.user_id,
        )
        self.db.add(member)
        self.db.commit()
        self.db.refresh(member)
        logger.info(
            f"Staff {member.employee_id} {email} ({role.value}) added by {actor.email}"
        )
        return member

    def remove_staff(self, actor, user_id: int) -> None:
        RBACPolicy.require(actor.role, Permission.STAFF_MANAGE)
        member = self._members().filter(User.id == user_id).first()
        if member is None:
            raise NotFoundError("Staff member not found")
        if member.role == UserRole.OWNER:
            raise AuthorizationError("The owner cannot be removed")
        if member.id == actor.user_id:
            raise AuthorizationError("You cannot remove yourself")
        self._check_rank(actor, member.role, "remove")
        self.db.delete(member)
        self.db.commit()
        invalidate_user(user_id)
        logger.info(f"Staff {member.email} removed by {actor.email}")
