"""User model."""

from __future__ import annotations

from enum import Enum
from typing import Optional

from sqlalchemy import Boolean, Enum as SQLEnum, ForeignKey, String
from sqlalchemy.orm import Mapped, mapped_column

from dineflow.core.policy import UserRole
from dineflow.db.base import Base, TimestampMixin


class StaffStatus(str, Enum):
    """Onboarding state of a user record."""

    PENDING = "pending"
    ACTIVE = "active"


class User(Base, TimestampMixin):
    """User account: owners sign up directly, staff are pre-registered by email.

    Email is not unique at the storage layer; duplicates within a business
    are rejected by a pre-check read when staff are added.
    """

    __tablename__ = "users"

    id: Mapped[int] = mapped_column(primary_key=True)
    email: Mapped[str] = mapped_column(String(255), index=True, nullable=False)
    name: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    password_hash: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    firebase_uid: Mapped[Optional[str]] = mapped_column(
        String(128), unique=True, index=True, nullable=True
    )
    role: Mapped[UserRole] = mapped_column(
        SQLEnum(UserRole),
        default=UserRole.STAFF,
        nullable=False,
    )
    status: Mapped[StaffStatus] = mapped_column(
        SQLEnum(StaffStatus),
        default=StaffStatus.ACTIVE,
        nullable=False,
    )
    employee_id: Mapped[Optional[str]] = mapped_column(String(20), nullable=True)
    business_id: Mapped[Optional[int]] = mapped_column(
        ForeignKey("businesses.id", ondelete="CASCADE"), nullable=True, index=True
    )
    created_by_id: Mapped[Optional[int]] = mapped_column(nullable=True)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)

    @property
    def display_name(self) -> str:
        return self.name or self.email.split("@")[0]
