"""
Subscription API Routes

Member-facing endpoints: plan request submission, transition preview,
current status and history.
"""

import logging
from typing import List, Optional

from fastapi import APIRouter, Query, status
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from membership.api.dependencies import (
    CurrentUserIdDep,
    QueryServiceDep,
    SubmissionServiceDep,
)
from membership.config.settings import get_settings
from membership.domain.subscription import (
    SubmissionOutcome,
    SubmissionResponse,
    SubmitSubscriptionRequest,
    Subscription,
    SubscriptionStatusView,
)
from membership.domain.transitions import TransitionDecision


logger = logging.getLogger(__name__)

router = APIRouter()


# Non-created outcomes are expected business results, not errors
_OUTCOME_STATUS = {
    SubmissionOutcome.CREATED: status.HTTP_201_CREATED,
    SubmissionOutcome.BLOCKED: status.HTTP_403_FORBIDDEN,
    SubmissionOutcome.NEEDS_CONFIRMATION: status.HTTP_409_CONFLICT,
}


class TransitionPreviewResponse(BaseModel):
    """What a submission for plan_id would run into."""
    plan_id: str
    has_current_subscription: bool
    decision: Optional[TransitionDecision] = None


# =============================================================================
# Submission
# =============================================================================

@router.post(
    "/subscriptions/requests",
    response_model=SubmissionResponse,
    status_code=status.HTTP_201_CREATED,
    responses={
        403: {"model": SubmissionResponse, "description": "Transition blocked"},
        409: {"model": SubmissionResponse, "description": "Confirmation required"},
    },
)
async def submit_subscription_request(
    request: SubmitSubscriptionRequest,
    user_id: CurrentUserIdDep,
    service: SubmissionServiceDep,
):
    """
    Submit a request for a plan.

    A blocked transition answers 403 and a transition needing confirmation
    answers 409; both carry the title and message to show the member.
    Re-submit with bypass_check=true once the member has confirmed.
    """
    result = await service.submit(
        user_id=user_id,
        plan_id=request.plan_id,
        payment_method=request.payment_method or get_settings().default_payment_method,
        user_context=request.profile,
        bypass_check=request.bypass_check,
    )

    response = SubmissionResponse.from_result(result)
    if result.created:
        return response

    return JSONResponse(
        status_code=_OUTCOME_STATUS[result.outcome],
        content=response.model_dump(mode="json"),
    )


@router.get("/subscriptions/transition", response_model=TransitionPreviewResponse)
async def preview_transition(
    user_id: CurrentUserIdDep,
    service: SubmissionServiceDep,
    plan_id: str = Query(..., min_length=1, description="Plan the member is considering"),
):
    """Resolve the transition a request for plan_id would face, without submitting."""
    decision = await service.preview(user_id, plan_id)
    return TransitionPreviewResponse(
        plan_id=plan_id,
        has_current_subscription=decision is not None,
        decision=decision,
    )


# =============================================================================
# Status & History
# =============================================================================

@router.get("/subscriptions/status", response_model=SubscriptionStatusView)
async def get_subscription_status(
    user_id: CurrentUserIdDep,
    service: QueryServiceDep,
):
    """Get the current user's active subscription, if it has not ended."""
    return await service.get_status(user_id)


@router.get("/subscriptions/history", response_model=List[Subscription])
async def get_subscription_history(
    user_id: CurrentUserIdDep,
    service: QueryServiceDep,
):
    """All of the current user's subscriptions, newest first."""
    return await service.get_history(user_id)
