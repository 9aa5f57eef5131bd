"""
API Dependencies

FastAPI dependency injection for authentication and subscription services.

Security: identity tokens are verified cryptographically with the shared
secret. Never decode without verification.
"""

import logging
from typing import Annotated, Optional

import jwt
from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials

from membership.config.settings import get_settings
from membership.domain.services import (
    ApprovalService,
    MembershipQueryService,
    RejectionService,
    SubmissionService,
)
from membership.domain.subscription import UserContext
from membership.infrastructure.db.dependencies import UowFactoryDep


logger = logging.getLogger(__name__)

security = HTTPBearer(auto_error=False)


def _decode_token(token: str) -> dict:
    """Verify a JWT with the configured secret and optional audience/issuer."""
    settings = get_settings()
    options = {"require": ["sub"]}
    if not settings.auth_jwt_audience:
        options["verify_aud"] = False

    return jwt.decode(
        token,
        settings.auth_jwt_secret,
        algorithms=[settings.auth_jwt_algorithm],
        audience=settings.auth_jwt_audience,
        issuer=settings.auth_jwt_issuer,
        options=options,
    )


async def get_current_identity(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
) -> UserContext:
    """
    Extract and verify the caller's identity from a bearer JWT.

    Returns:
        UserContext built from the sub, email, name and picture claims

    Raises:
        HTTPException 401: token missing, expired, or invalid
        HTTPException 503: token verification is not configured
    """
    if not credentials:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Missing authorization token",
            headers={"WWW-Authenticate": "Bearer"},
        )

    if not get_settings().auth_jwt_secret:
        logger.error("AUTH_JWT_SECRET not configured, cannot verify tokens")
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Authentication not configured",
        )

    try:
        payload = _decode_token(credentials.credentials)
    except jwt.ExpiredSignatureError:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Token has expired",
        )
    except jwt.InvalidTokenError as e:
        logger.warning("JWT verification failed: %s", e)
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid or unverifiable token",
        )

    user_id = payload.get("sub")
    if not user_id:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid token: missing user ID",
        )

    return UserContext(
        user_id=user_id,
        email=payload.get("email"),
        display_name=payload.get("name"),
        photo_url=payload.get("picture"),
    )


IdentityDep = Annotated[UserContext, Depends(get_current_identity)]


async def get_current_user_id(identity: IdentityDep) -> str:
    """Authenticated user ID (``sub`` claim)."""
    return identity.user_id


CurrentUserIdDep = Annotated[str, Depends(get_current_user_id)]


# =============================================================================
# Service Providers
# =============================================================================

def get_submission_service(
    uow_factory: UowFactoryDep,
    identity: IdentityDep,
) -> SubmissionService:
    """Submission service whose fallback identity is the token's claims."""
    return SubmissionService(uow_factory, identity_provider=lambda: identity)


def get_approval_service(uow_factory: UowFactoryDep) -> ApprovalService:
    settings = get_settings()
    return ApprovalService(
        uow_factory,
        default_period_days=settings.default_period_length_days,
        session_period_days=settings.session_period_days,
    )


def get_rejection_service(uow_factory: UowFactoryDep) -> RejectionService:
    return RejectionService(uow_factory)


def get_query_service(uow_factory: UowFactoryDep) -> MembershipQueryService:
    return MembershipQueryService(uow_factory)


SubmissionServiceDep = Annotated[SubmissionService, Depends(get_submission_service)]
ApprovalServiceDep = Annotated[ApprovalService, Depends(get_approval_service)]
RejectionServiceDep = Annotated[RejectionService, Depends(get_rejection_service)]
QueryServiceDep = Annotated[MembershipQueryService, Depends(get_query_service)]
