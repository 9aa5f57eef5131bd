"""
Custom Exceptions for the Membership Backend

Hierarchical exception classes for proper error handling across layers.
Every operation either returns a typed outcome or raises one of these.
"""

from typing import Optional, Dict, Any


class MembershipError(Exception):
    """Base exception for all membership backend errors."""

    def __init__(
        self,
        message: str,
        details: Optional[Dict[str, Any]] = None,
        original_error: Optional[Exception] = None
    ):
        super().__init__(message)
        self.message = message
        self.details = details or {}
        self.original_error = original_error

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to dictionary for API responses."""
        return {
            "error": self.__class__.__name__,
            "message": self.message,
            "details": self.details
        }


class ValidationError(MembershipError):
    """Raised when input validation fails."""
    pass


class IdentityUnavailableError(ValidationError):
    """Raised when neither a caller context nor a session identity exists."""

    def __init__(self, user_id: Optional[str] = None):
        details = {"user_id": user_id} if user_id else {}
        super().__init__(
            "No authenticated user found and no user context provided",
            details,
        )


class DatabaseError(MembershipError):
    """Raised when database operations fail."""

    def __init__(
        self,
        message: str,
        operation: Optional[str] = None,
        table: Optional[str] = None,
        original_error: Optional[Exception] = None
    ):
        details = {}
        if operation:
            details["operation"] = operation
        if table:
            details["table"] = table
        super().__init__(message, details, original_error)


class NotFoundError(DatabaseError):
    """Raised when a requested resource is not found."""
    pass


class PlanNotFoundError(NotFoundError):
    """Raised when a plan id does not resolve in the catalog."""

    def __init__(self, plan_id: str):
        super().__init__(
            f"Subscription plan not found: {plan_id}",
            operation="get",
            table="subscription_plans",
        )
        self.plan_id = plan_id


class RequestNotFoundError(NotFoundError):
    """Raised when a pending subscription request id does not exist."""

    def __init__(self, request_id: str):
        super().__init__(
            f"Subscription request not found: {request_id}",
            operation="get",
            table="pending_subscriptions",
        )
        self.request_id = request_id


class TransientStoreError(DatabaseError):
    """Raised when the underlying store call fails. Safe to retry."""
    pass


class AlreadyResolvedError(MembershipError):
    """Raised when a request was already approved or rejected."""

    def __init__(self, request_id: str, status: Optional[str] = None):
        details = {"request_id": request_id}
        if status:
            details["status"] = status
        super().__init__(
            f"Subscription request {request_id} is already resolved",
            details,
        )
        self.request_id = request_id
        self.status = status


class ConfigurationError(MembershipError):
    """Raised when configuration is missing or invalid."""

    def __init__(
        self,
        message: str,
        missing_keys: Optional[list] = None,
        original_error: Optional[Exception] = None
    ):
        details = {}
        if missing_keys:
            details["missing_keys"] = missing_keys
        super().__init__(message, details, original_error)
