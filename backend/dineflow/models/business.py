"""Business (tenant) model."""

from __future__ import annotations

from typing import Optional

from sqlalchemy import String
from sqlalchemy.orm import Mapped, mapped_column

from dineflow.db.base import Base, TimestampMixin


class Business(Base, TimestampMixin):
    """A restaurant, cafe or bar. Every other record is scoped to one."""

    __tablename__ = "businesses"

    id: Mapped[int] = mapped_column(primary_key=True)
    name: Mapped[str] = mapped_column(String(200), nullable=False)
    business_type: Mapped[str] = mapped_column(String(50), nullable=False)
    address: Mapped[Optional[str]] = mapped_column(String(500), nullable=True)
    phone: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)
    # Plain reference; users.business_id already points the other way.
    owner_id: Mapped[Optional[int]] = mapped_column(nullable=True, index=True)
