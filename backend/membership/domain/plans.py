"""
Plan Catalog Domain Models

Plan metadata, plan families and the tier classifier.
Tiers rank plans by relative value and drive upgrade/downgrade legality.
"""

from enum import Enum
from typing import Optional
from pydantic import BaseModel, Field


class PlanPeriod(str, Enum):
    """Billing period as stored in the catalog."""
    PER_SESSION = "per session"
    PER_MONTH = "per month"


class PlanFamily(str, Enum):
    """Plan families. Plans of one family may extend each other."""
    WALK_IN = "walkin"
    MONTHLY = "monthly"
    COACHING_GROUP = "coaching-group"
    COACHING_SOLO = "coaching-solo"
    UNKNOWN = "unknown"


class SubscriptionPlan(BaseModel):
    """Read-only plan metadata from the catalog."""
    id: str
    name: str
    price: float = Field(ge=0)
    period: PlanPeriod
    period_length_days: Optional[int] = Field(default=None, ge=1)
    description: Optional[str] = None
    features: list[str] = Field(default_factory=list)
    max_sessions: Optional[int] = None  # None = unlimited
    is_active: bool = True


# =============================================================================
# Tier Classifier
# =============================================================================

TIER_BY_FAMILY = {
    PlanFamily.WALK_IN: 1,
    PlanFamily.MONTHLY: 2,
    PlanFamily.COACHING_GROUP: 3,
    PlanFamily.COACHING_SOLO: 4,
    PlanFamily.UNKNOWN: 1,
}


def match_family(text: Optional[object]) -> Optional[PlanFamily]:
    """
    Keyword match of a plan name or id, first rule wins.

    Returns None for text that names no known family.
    """
    if text is None:
        return None

    value = str(text).lower()

    if "walk-in" in value or "walkin" in value:
        return PlanFamily.WALK_IN
    if "monthly" in value:
        return PlanFamily.MONTHLY
    if "coaching" in value:
        if "group" in value:
            return PlanFamily.COACHING_GROUP
        if "solo" in value:
            return PlanFamily.COACHING_SOLO
        # "Coaching Program" without a qualifier
        return PlanFamily.COACHING_GROUP
    return None


def tier_of(plan_name_or_id: Optional[object]) -> int:
    """
    Rank a plan by name or id: 1=walk-in, 2=monthly, 3=group, 4=solo.

    Never raises. Unrecognized input ranks as the lowest tier.
    """
    family = match_family(plan_name_or_id)
    if family is None:
        return 1
    return TIER_BY_FAMILY[family]


def family_of(plan_name: Optional[str], plan_id: Optional[str] = None) -> PlanFamily:
    """
    Resolve a plan's family, preferring the id over the display name.

    Group and solo coaching share the display name "Coaching Program",
    so only the id tells them apart.
    """
    return match_family(plan_id) or match_family(plan_name) or PlanFamily.UNKNOWN


# =============================================================================
# Default Catalog
# =============================================================================

DEFAULT_PLANS = [
    SubscriptionPlan(
        id="walkin",
        name="Walk-in Session",
        price=100,
        period=PlanPeriod.PER_SESSION,
        period_length_days=1,
        description="Pay as you go",
        features=[
            "Single gym session",
            "Basic equipment access",
            "Locker room access",
            "Water station access",
        ],
        max_sessions=1,
    ),
    SubscriptionPlan(
        id="monthly",
        name="Monthly Plan",
        price=850,
        period=PlanPeriod.PER_MONTH,
        period_length_days=31,
        description="Best value for regular gym-goers",
        features=[
            "Unlimited gym access",
            "All equipment included",
            "Locker room access",
            "Water station access",
            "Mobile app features",
            "Progress tracking",
        ],
    ),
    SubscriptionPlan(
        id="coaching-group",
        name="Coaching Program",
        price=2500,
        period=PlanPeriod.PER_MONTH,
        period_length_days=31,
        description="Group coaching - unlimited sessions",
        features=[
            "Everything in Monthly",
            "Personal coaching sessions",
            "Group training classes",
            "Nutrition guidance",
            "Workout plans",
            "Progress monitoring",
            "Unlimited sessions",
        ],
    ),
    SubscriptionPlan(
        id="coaching-solo",
        name="Coaching Program",
        price=2500,
        period=PlanPeriod.PER_MONTH,
        period_length_days=31,
        description="Solo coaching - 10 sessions limit",
        features=[
            "Everything in Monthly",
            "Personal coaching sessions",
            "One-on-one training",
            "Nutrition guidance",
            "Custom workout plans",
            "Progress monitoring",
            "10 sessions per month",
        ],
        max_sessions=10,
    ),
]
