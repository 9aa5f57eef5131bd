"""
Admin Routes for Subscription Requests

Lists pending plan requests and approves or rejects them.
Protected by API key authentication.
"""

import logging
import secrets
from typing import List, Optional

from fastapi import APIRouter, Depends, Header, HTTPException, status
from pydantic import BaseModel

from membership.api.dependencies import (
    ApprovalServiceDep,
    QueryServiceDep,
    RejectionServiceDep,
)
from membership.domain.subscription import (
    ApprovalResult,
    PendingSubscriptionRequest,
    RequestStatus,
)

logger = logging.getLogger(__name__)


# =============================================================================
# Admin API Key Authentication
# =============================================================================

async def verify_admin_api_key(
    x_admin_key: str = Header(..., description="Admin API key for protected operations")
) -> bool:
    """
    Verify admin API key from header.

    The admin key should be set in environment variable ADMIN_API_KEY.
    """
    from membership.config.settings import get_settings

    expected_key = get_settings().admin_api_key

    if not expected_key:
        logger.error("ADMIN_API_KEY environment variable not set")
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Admin authentication not configured"
        )

    # Use secrets.compare_digest for timing-attack resistance
    if not secrets.compare_digest(x_admin_key, expected_key):
        logger.warning("Invalid admin API key attempt")
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Invalid admin API key"
        )

    return True


router = APIRouter(
    prefix="/api/admin",
    tags=["admin"],
    dependencies=[Depends(verify_admin_api_key)]  # Protect ALL admin routes
)


class RejectionResult(BaseModel):
    """Response from the reject endpoint."""
    request_id: str
    status: RequestStatus


@router.get("/requests", response_model=List[PendingSubscriptionRequest])
async def list_requests(
    service: QueryServiceDep,
    status: Optional[RequestStatus] = None,
):
    """List subscription requests, newest first, optionally by status."""
    return await service.list_requests(status)


@router.get("/requests/{request_id}", response_model=PendingSubscriptionRequest)
async def get_request(request_id: str, service: QueryServiceDep):
    """Get one subscription request."""
    return await service.get_request(request_id)


@router.post("/requests/{request_id}/approve", response_model=ApprovalResult)
async def approve_request(request_id: str, service: ApprovalServiceDep):
    """
    Approve a pending request.

    Creates an active subscription starting now and points the member at it.
    A request that was already approved or rejected answers 409 and
    nothing is written.
    """
    return await service.approve(request_id)


@router.post("/requests/{request_id}/reject", response_model=RejectionResult)
async def reject_request(request_id: str, service: RejectionServiceDep):
    """Reject a pending request. Subscriptions and users are untouched."""
    await service.reject(request_id)
    return RejectionResult(request_id=request_id, status=RequestStatus.REJECTED)
