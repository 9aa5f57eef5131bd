"""
Pending Subscription Request Model

SQLModel table for member plan requests awaiting an admin decision.
"""

from datetime import datetime
from typing import Optional

from sqlalchemy import DateTime
from sqlmodel import Field

from membership.infrastructure.db.models.base import TimestampMixin


class PendingSubscriptionRequestModel(TimestampMixin, table=True):
    """
    Pending subscriptions table.

    `status` leaves 'pending' exactly once, through a conditional UPDATE.
    """

    __tablename__ = "pending_subscriptions"

    id: str = Field(primary_key=True, max_length=36)
    user_id: str = Field(max_length=128, index=True)
    user_email: str = Field(max_length=255)
    user_display_name: str = Field(max_length=255)

    # Plan snapshot at submission time
    plan_id: str = Field(max_length=64)
    plan_name: str = Field(max_length=100)
    price: float

    status: str = Field(default="pending", max_length=20, index=True)
    payment_method: str = Field(default="counter", max_length=50)
    request_date: datetime = Field(sa_type=DateTime(timezone=True), index=True)

    approved_at: Optional[datetime] = Field(default=None, sa_type=DateTime(timezone=True))
    rejected_at: Optional[datetime] = Field(default=None, sa_type=DateTime(timezone=True))
    subscription_id: Optional[str] = Field(default=None, max_length=36)
