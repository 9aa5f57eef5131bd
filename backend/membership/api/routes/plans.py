"""
Plan Catalog API Routes

Public, read-only listing of purchasable plans.
"""

import logging
from typing import List

from fastapi import APIRouter

from membership.api.dependencies import QueryServiceDep
from membership.domain.plans import SubscriptionPlan


logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/plans", response_model=List[SubscriptionPlan])
async def list_plans(service: QueryServiceDep):
    """List active plans, cheapest first."""
    return await service.list_plans()


@router.get("/plans/{plan_id}", response_model=SubscriptionPlan)
async def get_plan(plan_id: str, service: QueryServiceDep):
    """
    Get one plan by id.

    Raises PlanNotFoundError (404) for unknown ids.
    """
    return await service.get_plan(plan_id)
