"""
Subscription Plan SQLModel

Catalog of purchasable plans.
"""

from typing import Optional

from sqlalchemy import Column, JSON
from sqlmodel import Field

from membership.infrastructure.db.models.base import TimestampMixin


class SubscriptionPlanModel(TimestampMixin, table=True):
    """Subscription plans table (the Plan Catalog)."""

    __tablename__ = "subscription_plans"

    id: str = Field(primary_key=True, max_length=64)
    name: str = Field(max_length=100)
    price: float = Field(ge=0)
    period: str = Field(max_length=20, description="'per session' or 'per month'")
    period_length_days: Optional[int] = Field(default=None)
    description: Optional[str] = Field(default=None)
    features: list[str] = Field(
        default_factory=list,
        sa_column=Column(JSON, nullable=False, default=list)
    )
    max_sessions: Optional[int] = Field(default=None, description="None = unlimited")
    is_active: bool = Field(default=True, index=True)
