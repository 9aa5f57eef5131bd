# API Routes Module
from membership.api.routes import (
    plans,
    subscriptions,
    admin,
)

__all__ = [
    "plans",
    "subscriptions",
    "admin",
]
