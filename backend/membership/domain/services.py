"""
Subscription Services

Turns a member's plan request into a pending request record, and an
admin's decision into a dated subscription (or a rejection).

Every operation runs inside one unit of work: either all of its writes
land or none do, so a failed call can be retried as a whole.
"""

import logging
from datetime import datetime, timedelta, timezone
from typing import Callable, List, Optional
from uuid import uuid4

from membership.domain.interfaces import UnitOfWork
from membership.domain.plans import SubscriptionPlan, family_of
from membership.domain.subscription import (
    UNKNOWN_DISPLAY_NAME,
    UNKNOWN_EMAIL,
    ApprovalResult,
    ExtensionLogEntry,
    PendingSubscriptionRequest,
    RequestStatus,
    SubmissionOutcome,
    SubmissionResult,
    Subscription,
    SubscriptionStatus,
    SubscriptionStatusView,
    User,
    UserContext,
    compute_end_date,
)
from membership.domain.transitions import (
    TransitionDecision,
    TransitionKind,
    resolve_transition,
)
from membership.infrastructure.exceptions import (
    AlreadyResolvedError,
    IdentityUnavailableError,
    PlanNotFoundError,
    RequestNotFoundError,
    ValidationError,
)


logger = logging.getLogger(__name__)

Clock = Callable[[], datetime]
UnitOfWorkFactory = Callable[[], UnitOfWork]
IdentityProvider = Callable[[], Optional[UserContext]]


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def new_id() -> str:
    return str(uuid4())


def _require_id(value: Optional[str], field: str) -> str:
    if not value or not str(value).strip() or value == "undefined":
        raise ValidationError(f"Invalid {field} provided", {field: value})
    return str(value).strip()


async def _current_subscription(
    uow: UnitOfWork,
    user: Optional[User],
    now: datetime,
) -> Optional[Subscription]:
    """The user's active subscription, if it has not ended yet."""
    if user is None or not user.active_subscription_id:
        return None

    subscription = await uow.subscriptions.get(user.active_subscription_id)
    if subscription is None or not subscription.is_current(now):
        return None
    return subscription


# =============================================================================
# Request Submission
# =============================================================================

class SubmissionService:
    """
    Member-facing plan request submission.

    Args:
        uow_factory: Creates a fresh unit of work per call
        identity_provider: Returns the current session's identity, used
            only when the caller supplies no profile of its own
        clock: Source of "now"
    """

    def __init__(
        self,
        uow_factory: UnitOfWorkFactory,
        identity_provider: Optional[IdentityProvider] = None,
        clock: Clock = utc_now,
    ):
        self._uow_factory = uow_factory
        self._identity_provider = identity_provider
        self._clock = clock

    async def submit(
        self,
        user_id: str,
        plan_id: str,
        payment_method: str = "counter",
        user_context: Optional[UserContext] = None,
        bypass_check: bool = False,
    ) -> SubmissionResult:
        """
        Submit a request for a plan.

        Blocked transitions are refused even when bypass_check is set;
        bypass only skips the confirmation step.

        Returns:
            SubmissionResult with outcome CREATED (and the request id),
            BLOCKED or NEEDS_CONFIRMATION (with the resolver's decision)

        Raises:
            ValidationError: Missing user or plan id
            PlanNotFoundError: plan_id is not in the catalog
            IdentityUnavailableError: No record, no context, no session
        """
        user_id = _require_id(user_id, "user_id")
        plan_id = _require_id(plan_id, "plan_id")
        now = self._clock()

        async with self._uow_factory() as uow:
            plan = await uow.plans.get(plan_id)
            if plan is None:
                raise PlanNotFoundError(plan_id)

            user = await self._ensure_user(uow, user_id, user_context, now)

            current = await _current_subscription(uow, user, now)
            if current is not None:
                decision = resolve_transition(
                    current.plan_name, current.plan_id, plan.name, plan.id
                )

                if not decision.allowed:
                    await uow.commit()
                    logger.info(
                        f"Blocked {plan_id} request for user {user_id}: {decision.title}"
                    )
                    return SubmissionResult(
                        outcome=SubmissionOutcome.BLOCKED, decision=decision
                    )

                if decision.requires_confirmation and not bypass_check:
                    await uow.commit()
                    logger.info(
                        f"Request for {plan_id} by user {user_id} needs confirmation"
                    )
                    return SubmissionResult(
                        outcome=SubmissionOutcome.NEEDS_CONFIRMATION, decision=decision
                    )

            request = await uow.requests.create(
                self._build_request(user, plan, payment_method, now)
            )
            await uow.commit()

        logger.info(f"Created pending request {request.id} for user {user_id} ({plan_id})")
        return SubmissionResult(outcome=SubmissionOutcome.CREATED, request_id=request.id)

    async def preview(self, user_id: str, plan_id: str) -> Optional[TransitionDecision]:
        """
        Resolve the transition a submission would face, without writing.

        Returns None when the user holds no current subscription.
        """
        user_id = _require_id(user_id, "user_id")
        plan_id = _require_id(plan_id, "plan_id")
        now = self._clock()

        async with self._uow_factory() as uow:
            plan = await uow.plans.get(plan_id)
            if plan is None:
                raise PlanNotFoundError(plan_id)

            user = await uow.users.get(user_id)
            current = await _current_subscription(uow, user, now)

        if current is None:
            return None
        return resolve_transition(current.plan_name, current.plan_id, plan.name, plan.id)

    async def _ensure_user(
        self,
        uow: UnitOfWork,
        user_id: str,
        user_context: Optional[UserContext],
        now: datetime,
    ) -> User:
        # Row lock serializes concurrent submissions for one member
        user = await uow.users.get_for_update(user_id)
        if user is not None:
            return user

        # Exactly one source: the caller's context, else the session
        context = user_context
        if context is None and self._identity_provider is not None:
            context = self._identity_provider()
        if context is None:
            raise IdentityUnavailableError(user_id)

        logger.info(f"Creating user record for {user_id}")
        return await uow.users.create(User.from_context(user_id, context, now))

    @staticmethod
    def _build_request(
        user: User,
        plan: SubscriptionPlan,
        payment_method: str,
        now: datetime,
    ) -> PendingSubscriptionRequest:
        return PendingSubscriptionRequest(
            id=new_id(),
            user_id=user.id,
            user_email=user.email or UNKNOWN_EMAIL,
            user_display_name=user.display_name or UNKNOWN_DISPLAY_NAME,
            plan_id=plan.id,
            plan_name=plan.name,
            price=plan.price,
            status=RequestStatus.PENDING,
            payment_method=payment_method or "counter",
            request_date=now,
            created_at=now,
            updated_at=now,
        )


# =============================================================================
# Approval / Rejection
# =============================================================================

class _RequestJudge:
    """Shared guards for the admin-side services."""

    def __init__(self, uow_factory: UnitOfWorkFactory, clock: Clock = utc_now):
        self._uow_factory = uow_factory
        self._clock = clock

    @staticmethod
    async def _load_pending(uow: UnitOfWork, request_id: str) -> PendingSubscriptionRequest:
        request = await uow.requests.get(request_id)
        if request is None:
            raise RequestNotFoundError(request_id)
        if not request.is_pending:
            logger.warning(
                f"Request {request_id} already {request.status.value}, ignoring"
            )
            raise AlreadyResolvedError(request_id, request.status.value)
        return request


class ApprovalService(_RequestJudge):
    """
    Converts a pending request into an active, dated subscription.

    Approval is one transaction: subscription insert, user repoint and
    request status change commit together or not at all.
    """

    def __init__(
        self,
        uow_factory: UnitOfWorkFactory,
        clock: Clock = utc_now,
        default_period_days: int = 31,
        session_period_days: int = 1,
    ):
        super().__init__(uow_factory, clock)
        self._default_period_days = default_period_days
        self._session_period_days = session_period_days

    async def approve(self, request_id: str, approved_by: str = "admin") -> ApprovalResult:
        """
        Approve a pending request.

        Returns:
            ApprovalResult linking the request to its new subscription

        Raises:
            RequestNotFoundError: Unknown request id
            AlreadyResolvedError: Request is no longer pending
            PlanNotFoundError: The requested plan left the catalog
        """
        request_id = _require_id(request_id, "request_id")
        now = self._clock()

        async with self._uow_factory() as uow:
            request = await self._load_pending(uow, request_id)

            plan = await uow.plans.get(request.plan_id)
            if plan is None:
                raise PlanNotFoundError(request.plan_id)

            user = await uow.users.get_for_update(request.user_id)
            if user is None:
                user = await uow.users.create(
                    User(
                        id=request.user_id,
                        email=request.user_email,
                        display_name=request.user_display_name,
                        created_at=now,
                        updated_at=now,
                    )
                )

            previous = await _current_subscription(uow, user, now)
            subscription = self._build_subscription(request, plan, previous, approved_by, now)

            await uow.subscriptions.create(subscription)
            await uow.users.set_active_subscription(user.id, subscription.id, now)

            applied = await uow.requests.mark_resolved(
                request.id, RequestStatus.APPROVED, now, subscription.id
            )
            if not applied:
                logger.warning(f"Request {request_id} was resolved concurrently")
                raise AlreadyResolvedError(request_id)

            await uow.commit()

        logger.info(
            f"Approved request {request_id}: subscription {subscription.id} "
            f"for user {request.user_id} until {subscription.end_date.isoformat()}"
        )
        return ApprovalResult(request_id=request_id, subscription_id=subscription.id)

    def _build_subscription(
        self,
        request: PendingSubscriptionRequest,
        plan: SubscriptionPlan,
        previous: Optional[Subscription],
        approved_by: str,
        now: datetime,
    ) -> Subscription:
        # Name and price come from the request snapshot, never the live plan
        extension_log = []
        start_date = now
        carried_over = timedelta(0)

        if previous is not None:
            decision = resolve_transition(
                previous.plan_name, previous.plan_id, request.plan_name, request.plan_id
            )
            if decision.kind == TransitionKind.EXTEND:
                # Remaining time of the current plan is added on top
                carried_over = max(timedelta(0), previous.end_date - now)
            elif decision.kind == TransitionKind.QUEUE:
                start_date = previous.end_date
            extension_log.append(self._extension_entry(previous, request, decision))

        end_date = compute_end_date(
            start_date,
            plan,
            default_period_days=self._default_period_days,
            session_period_days=self._session_period_days,
        ) + carried_over

        return Subscription(
            id=new_id(),
            user_id=request.user_id,
            user_email=request.user_email,
            user_display_name=request.user_display_name,
            plan_id=request.plan_id,
            plan_name=request.plan_name,
            price=request.price,
            status=SubscriptionStatus.ACTIVE,
            start_date=start_date,
            end_date=end_date,
            max_sessions=plan.max_sessions,
            used_sessions=0,
            payment_method=request.payment_method,
            approved_at=now,
            approved_by=approved_by,
            created_at=now,
            updated_at=now,
            extension_log=extension_log,
        )

    @staticmethod
    def _extension_entry(
        previous: Subscription,
        request: PendingSubscriptionRequest,
        decision: TransitionDecision,
    ) -> ExtensionLogEntry:
        old_family = family_of(previous.plan_name, previous.plan_id)
        new_family = family_of(request.plan_name, request.plan_id)

        if decision.kind == TransitionKind.EXTEND:
            reason = f"Additional {request.plan_name} purchased"
        elif decision.kind in (TransitionKind.UPGRADE, TransitionKind.GENERIC_UPGRADE):
            reason = f"Upgraded from {previous.plan_name} to {request.plan_name}"
        elif decision.kind == TransitionKind.QUEUE:
            reason = f"{request.plan_name} queued after {previous.plan_name}"
        else:
            reason = f"Replaced {previous.plan_name} with {request.plan_name}"

        return ExtensionLogEntry(
            type=f"{old_family.value}_to_{new_family.value}",
            previous_subscription_id=previous.id,
            previous_plan_name=previous.plan_name,
            previous_end_date=previous.end_date,
            reason=reason,
        )


class RejectionService(_RequestJudge):
    """Terminates a pending request. Touches no subscription or user."""

    async def reject(self, request_id: str) -> None:
        """
        Reject a pending request.

        Raises:
            RequestNotFoundError: Unknown request id
            AlreadyResolvedError: Request is no longer pending
        """
        request_id = _require_id(request_id, "request_id")
        now = self._clock()

        async with self._uow_factory() as uow:
            await self._load_pending(uow, request_id)

            applied = await uow.requests.mark_resolved(
                request_id, RequestStatus.REJECTED, now
            )
            if not applied:
                logger.warning(f"Request {request_id} was resolved concurrently")
                raise AlreadyResolvedError(request_id)

            await uow.commit()

        logger.info(f"Rejected request {request_id}")


# =============================================================================
# Read Side
# =============================================================================

class MembershipQueryService:
    """Read-only views over plans, requests and member subscriptions."""

    def __init__(self, uow_factory: UnitOfWorkFactory, clock: Clock = utc_now):
        self._uow_factory = uow_factory
        self._clock = clock

    async def list_plans(self) -> List[SubscriptionPlan]:
        async with self._uow_factory() as uow:
            return await uow.plans.list_active()

    async def get_plan(self, plan_id: str) -> SubscriptionPlan:
        plan_id = _require_id(plan_id, "plan_id")
        async with self._uow_factory() as uow:
            plan = await uow.plans.get(plan_id)
        if plan is None:
            raise PlanNotFoundError(plan_id)
        return plan

    async def list_requests(
        self,
        status: Optional[RequestStatus] = None,
    ) -> List[PendingSubscriptionRequest]:
        async with self._uow_factory() as uow:
            return await uow.requests.list(status)

    async def get_request(self, request_id: str) -> PendingSubscriptionRequest:
        request_id = _require_id(request_id, "request_id")
        async with self._uow_factory() as uow:
            request = await uow.requests.get(request_id)
        if request is None:
            raise RequestNotFoundError(request_id)
        return request

    async def get_status(self, user_id: str) -> SubscriptionStatusView:
        """Whether the user holds an active subscription that has not ended."""
        user_id = _require_id(user_id, "user_id")
        now = self._clock()

        async with self._uow_factory() as uow:
            user = await uow.users.get(user_id)
            if user is None or not user.active_subscription_id:
                return SubscriptionStatusView(has_active_subscription=False)

            subscription = await uow.subscriptions.get(user.active_subscription_id)

        if subscription is None:
            return SubscriptionStatusView(has_active_subscription=False)

        return SubscriptionStatusView(
            has_active_subscription=subscription.is_current(now),
            subscription_id=subscription.id,
            subscription=subscription,
        )

    async def get_history(self, user_id: str) -> List[Subscription]:
        """All of the user's subscriptions, newest start date first."""
        user_id = _require_id(user_id, "user_id")

        async with self._uow_factory() as uow:
            user = await uow.users.get(user_id)
            if user is None or not user.subscription_history:
                return []
            subscriptions = await uow.subscriptions.list_by_ids(user.subscription_history)

        return sorted(subscriptions, key=lambda s: s.start_date, reverse=True)
