"""
Subscription Domain Models

Domain models for the member subscription lifecycle.
Enums, DTOs, and domain entities for the subscription bounded context.
"""

from datetime import datetime, timedelta
from enum import Enum
from typing import Any, Optional
from pydantic import BaseModel, Field, field_validator

from membership.domain.plans import PlanPeriod, SubscriptionPlan
from membership.domain.transitions import TransitionDecision


UNKNOWN_EMAIL = "unknown@example.com"
UNKNOWN_DISPLAY_NAME = "Unknown User"


class SubscriptionStatus(str, Enum):
    """Subscription lifecycle status."""
    ACTIVE = "active"
    EXPIRED = "expired"
    CANCELLED = "cancelled"


class RequestStatus(str, Enum):
    """Pending request status. Leaves PENDING exactly once."""
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


# =============================================================================
# Domain Entities
# =============================================================================

class UserContext(BaseModel):
    """Caller identity as supplied by the identity provider or the client."""
    user_id: Optional[str] = None
    email: Optional[str] = None
    display_name: Optional[str] = None
    photo_url: Optional[str] = None


class User(BaseModel):
    """Member record. Points at zero or one active subscription."""
    id: str
    email: Optional[str] = None
    display_name: Optional[str] = None
    photo_url: Optional[str] = None
    active_subscription_id: Optional[str] = None
    subscription_history: list[str] = Field(default_factory=list)
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @classmethod
    def from_context(cls, user_id: str, context: UserContext, now: datetime) -> "User":
        return cls(
            id=user_id,
            email=context.email,
            display_name=context.display_name,
            photo_url=context.photo_url,
            created_at=now,
            updated_at=now,
        )


class ExtensionLogEntry(BaseModel):
    """Records which still-current subscription an approval superseded."""
    type: str
    previous_subscription_id: str
    previous_plan_name: Optional[str] = None
    previous_end_date: Optional[datetime] = None
    reason: str


class Subscription(BaseModel):
    """A dated, approved subscription. Never deleted once created."""
    id: str
    user_id: str
    user_email: str = UNKNOWN_EMAIL
    user_display_name: str = UNKNOWN_DISPLAY_NAME
    plan_id: str
    plan_name: str
    price: float
    status: SubscriptionStatus = SubscriptionStatus.ACTIVE
    start_date: datetime
    end_date: datetime
    max_sessions: Optional[int] = None
    used_sessions: int = 0
    payment_method: str = "counter"
    approved_at: Optional[datetime] = None
    approved_by: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    extension_log: list[ExtensionLogEntry] = Field(default_factory=list)

    def is_current(self, now: datetime) -> bool:
        """Active and not yet past its end date."""
        return self.status == SubscriptionStatus.ACTIVE and self.end_date > now


class PendingSubscriptionRequest(BaseModel):
    """A member's intent to buy a plan, awaiting an admin decision."""
    id: str
    user_id: str
    user_email: str = UNKNOWN_EMAIL
    user_display_name: str = UNKNOWN_DISPLAY_NAME
    plan_id: str
    plan_name: str
    price: float
    status: RequestStatus = RequestStatus.PENDING
    payment_method: str = "counter"
    request_date: datetime
    approved_at: Optional[datetime] = None
    rejected_at: Optional[datetime] = None
    subscription_id: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @property
    def is_pending(self) -> bool:
        return self.status == RequestStatus.PENDING


# =============================================================================
# Service Results
# =============================================================================

class SubmissionOutcome(str, Enum):
    """Result of a submission attempt."""
    CREATED = "created"
    BLOCKED = "blocked"
    NEEDS_CONFIRMATION = "needs_confirmation"


class SubmissionResult(BaseModel):
    """Typed outcome of submit(). Blocked and confirmation are not errors."""
    outcome: SubmissionOutcome
    request_id: Optional[str] = None
    decision: Optional[TransitionDecision] = None

    @property
    def created(self) -> bool:
        return self.outcome == SubmissionOutcome.CREATED


class ApprovalResult(BaseModel):
    """Result of approving a request."""
    request_id: str
    subscription_id: str


class SubscriptionStatusView(BaseModel):
    """Whether a user currently holds a usable subscription."""
    has_active_subscription: bool
    subscription_id: Optional[str] = None
    subscription: Optional[Subscription] = None


# =============================================================================
# Request/Response DTOs
# =============================================================================

class SubmitSubscriptionRequest(BaseModel):
    """Request DTO for submitting a new plan request."""
    plan_id: str = Field(..., min_length=1, description="Catalog plan id")
    payment_method: Optional[str] = Field(
        default=None,
        description="How the member will pay; the configured default when omitted",
    )
    bypass_check: bool = Field(
        default=False,
        description="Set only after the member confirmed a displayed warning",
    )
    profile: Optional[UserContext] = Field(
        default=None,
        description="Profile used when the member record does not exist yet",
    )

    @field_validator("plan_id", "payment_method")
    @classmethod
    def validate_not_empty(cls, v: Optional[str]) -> Optional[str]:
        if v is None:
            return v
        if not v.strip():
            raise ValueError("Field cannot be empty or whitespace only")
        return v.strip()


class SubmissionResponse(BaseModel):
    """Response DTO for plan request submission."""
    outcome: SubmissionOutcome
    request_id: Optional[str] = None
    title: Optional[str] = None
    message: Optional[str] = None
    allowed: Optional[bool] = None
    requires_confirmation: Optional[bool] = None

    @classmethod
    def from_result(cls, result: SubmissionResult) -> "SubmissionResponse":
        data: dict[str, Any] = {
            "outcome": result.outcome,
            "request_id": result.request_id,
        }
        if result.decision is not None:
            data.update(
                title=result.decision.title,
                message=result.decision.message,
                allowed=result.decision.allowed,
                requires_confirmation=result.decision.requires_confirmation,
            )
        return cls(**data)


# =============================================================================
# Period Rules (Business Logic)
# =============================================================================

def compute_end_date(
    start_date: datetime,
    plan: SubscriptionPlan,
    default_period_days: int = 31,
    session_period_days: int = 1,
) -> datetime:
    """
    End date for a subscription starting at start_date.

    Per-session plans last one day; per-month plans last the plan's
    period_length_days, falling back to the configured default.
    """
    if plan.period == PlanPeriod.PER_SESSION:
        return start_date + timedelta(days=session_period_days)
    return start_date + timedelta(days=plan.period_length_days or default_period_days)
