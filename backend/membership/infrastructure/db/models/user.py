"""
User SQLModel

Member record keyed by the identity provider's user id.
"""

from typing import Optional

from sqlalchemy import Column, JSON
from sqlmodel import Field

from membership.infrastructure.db.models.base import TimestampMixin


class UserModel(TimestampMixin, table=True):
    """
    Users table.

    `active_subscription_id` is the only field concurrent approvals race
    on; writers lock the row first.
    """

    __tablename__ = "users"

    id: str = Field(primary_key=True, max_length=128, description="Identity provider user id")
    email: Optional[str] = Field(default=None, max_length=255)
    display_name: Optional[str] = Field(default=None, max_length=255)
    photo_url: Optional[str] = Field(default=None)

    active_subscription_id: Optional[str] = Field(default=None, max_length=36, index=True)
    subscription_history: list[str] = Field(
        default_factory=list,
        sa_column=Column(JSON, nullable=False, default=list),
        description="Ordered subscription ids, append-only"
    )
