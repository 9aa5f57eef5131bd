"""
Subscription Database Model

SQLModel table for dated member subscriptions.
"""

from datetime import datetime
from typing import Any, Optional

from sqlalchemy import Column, DateTime, JSON
from sqlmodel import Field

from membership.infrastructure.db.models.base import TimestampMixin


class SubscriptionModel(TimestampMixin, table=True):
    """
    Subscription table.

    Rows are created on approval and never deleted; superseded rows stay
    as history.
    """

    __tablename__ = "subscriptions"

    id: str = Field(primary_key=True, max_length=36)
    user_id: str = Field(max_length=128, index=True)
    user_email: str = Field(max_length=255)
    user_display_name: str = Field(max_length=255)

    # Plan snapshot at approval time
    plan_id: str = Field(max_length=64)
    plan_name: str = Field(max_length=100)
    price: float

    status: str = Field(default="active", max_length=20, index=True)
    start_date: datetime = Field(sa_type=DateTime(timezone=True))
    end_date: datetime = Field(sa_type=DateTime(timezone=True))

    # Session allowance
    max_sessions: Optional[int] = Field(default=None)
    used_sessions: int = Field(default=0)

    payment_method: str = Field(default="counter", max_length=50)
    approved_at: Optional[datetime] = Field(default=None, sa_type=DateTime(timezone=True))
    approved_by: Optional[str] = Field(default=None, max_length=128)

    extension_log: list[dict[str, Any]] = Field(
        default_factory=list,
        sa_column=Column(JSON, nullable=False, default=list)
    )
