#!/usr/bin/env python3
"""
Seed script to populate the subscription plan catalog.

Upserts the default walk-in, monthly and coaching plans by id, so it is
safe to run repeatedly.

Run: python scripts/seed_subscription_plans.py
"""

import asyncio
import sys
from pathlib import Path

# Add backend to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from membership.domain.plans import DEFAULT_PLANS
from membership.infrastructure.db.database import get_session_context
from membership.infrastructure.db.repositories import PlanRepository


async def seed_subscription_plans():
    """Insert or refresh the default plans."""

    async with get_session_context() as session:
        repo = PlanRepository(session)

        for plan in DEFAULT_PLANS:
            await repo.upsert(plan)
            sessions = plan.max_sessions if plan.max_sessions is not None else "unlimited"
            print(f"✓ {plan.id}: {plan.name} ({plan.price:g} {plan.period.value}, sessions: {sessions})")

        print(f"\n✅ Seeded {len(DEFAULT_PLANS)} subscription plans")


if __name__ == "__main__":
    print("🏋️ Seeding Subscription Plans...")
    print("=" * 50)
    asyncio.run(seed_subscription_plans())
