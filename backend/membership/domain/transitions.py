"""
Transition Resolver

Decides whether a member holding a current plan may request a new plan
directly, must confirm first, or is blocked until the current plan ends.

The rules are data: an explicit table keyed by (current family, new family).
Tiers are a function of family, so the family pair fixes both tiers; pairs
absent from the table fall back to a tier comparison.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional

from pydantic import BaseModel

from membership.domain.plans import PlanFamily, TIER_BY_FAMILY, family_of


class TransitionKind(str, Enum):
    """Which rule produced a decision."""
    EXTEND = "extend"
    UPGRADE = "upgrade"
    FORBIDDEN = "forbidden"
    QUEUE = "queue"
    GENERIC_UPGRADE = "generic_upgrade"


class TransitionDecision(BaseModel):
    """Outcome of resolving a plan change, shown verbatim to the member."""
    title: str
    message: str
    allowed: bool
    requires_confirmation: bool
    kind: TransitionKind


@dataclass(frozen=True)
class TransitionRule:
    kind: TransitionKind
    title: str
    message: str

    @property
    def allowed(self) -> bool:
        return self.kind != TransitionKind.FORBIDDEN

    def decide(self, current_name: str, new_name: str) -> TransitionDecision:
        return TransitionDecision(
            title=self.title,
            message=self.message.format(current=current_name, new=new_name),
            allowed=self.allowed,
            requires_confirmation=self.allowed,
            kind=self.kind,
        )


# =============================================================================
# Rule Templates
# =============================================================================

_EXTEND_MESSAGE = (
    "You already have an active {current}. If you continue, the remaining "
    "period of your current subscription and the new {new} period will be "
    "combined into one extended subscription."
)

_UPGRADE_MESSAGE = (
    "You currently have an active {current}. If you continue, your new {new} "
    "will replace your current subscription immediately once approved."
)


def _extend(title: str) -> TransitionRule:
    return TransitionRule(TransitionKind.EXTEND, title, _EXTEND_MESSAGE)


def _upgrade(title: str) -> TransitionRule:
    return TransitionRule(TransitionKind.UPGRADE, title, _UPGRADE_MESSAGE)


def _forbid(title: str, current_label: str, new_action: str) -> TransitionRule:
    message = (
        f"You have an active {current_label}. Please wait until your "
        f"{current_label} ends before {new_action}."
    )
    return TransitionRule(TransitionKind.FORBIDDEN, title, message)


_QUEUE_RULE = TransitionRule(
    TransitionKind.QUEUE,
    "Active Subscription Found",
    "You already have an active {current}. Your new {new} will start "
    "automatically after your current subscription ends.",
)

_GENERIC_UPGRADE_RULE = TransitionRule(
    TransitionKind.GENERIC_UPGRADE,
    "Upgrade Your Plan?",
    "You currently have an active {current}. You can start your new {new} "
    "immediately, replacing your current subscription, or have it begin "
    "after your current subscription ends.",
)


W = PlanFamily.WALK_IN
M = PlanFamily.MONTHLY
G = PlanFamily.COACHING_GROUP
S = PlanFamily.COACHING_SOLO

TRANSITION_TABLE: dict[tuple[PlanFamily, PlanFamily], TransitionRule] = {
    # Same-family re-purchase
    (W, W): _extend("Extend Walk-in Session?"),
    (M, M): _extend("Extend Monthly Subscription?"),
    (G, G): _extend("Extend Group Coaching Program?"),
    (S, S): _extend("Extend Solo Coaching Program?"),
    # Cross-family upgrade
    (W, M): _upgrade("Upgrade to Monthly Subscription!"),
    (W, G): _upgrade("Upgrade to Coaching Program!"),
    (W, S): _upgrade("Upgrade to Coaching Program!"),
    (M, G): _upgrade("Upgrade to Coaching Program!"),
    (M, S): _upgrade("Upgrade to Coaching Program!"),
    # Downward and sideways moves
    (M, W): _forbid(
        "Cannot Add Walk-in to Monthly Subscription",
        "monthly subscription", "purchasing walk-in sessions",
    ),
    (G, W): _forbid(
        "Cannot Add Walk-in to Coaching Program",
        "coaching program", "purchasing walk-in sessions",
    ),
    (S, W): _forbid(
        "Cannot Add Walk-in to Coaching Program",
        "coaching program", "purchasing walk-in sessions",
    ),
    (G, M): _forbid(
        "Cannot Add Monthly to Coaching Program",
        "coaching program", "purchasing a monthly plan",
    ),
    (S, M): _forbid(
        "Cannot Add Monthly to Coaching Program",
        "coaching program", "purchasing a monthly plan",
    ),
    (G, S): _forbid(
        "Cannot Switch to Solo Coaching",
        "group coaching program", "switching to solo coaching",
    ),
    (S, G): _forbid(
        "Cannot Switch to Group Coaching",
        "solo coaching program", "switching to group coaching",
    ),
}


def find_rule(current: PlanFamily, new: PlanFamily) -> TransitionRule:
    """Look up the rule for a family pair, falling back on tier order."""
    rule = TRANSITION_TABLE.get((current, new))
    if rule is not None:
        return rule

    if TIER_BY_FAMILY[new] <= TIER_BY_FAMILY[current]:
        return _QUEUE_RULE
    return _GENERIC_UPGRADE_RULE


def resolve_transition(
    current_plan_name: Optional[str],
    current_plan_id: Optional[str],
    new_plan_name: Optional[str],
    new_plan_id: Optional[str],
) -> TransitionDecision:
    """
    Decide how a request for a new plan relates to the current plan.

    Pure and total: any combination of names/ids yields a decision.
    """
    current = family_of(current_plan_name, current_plan_id)
    new = family_of(new_plan_name, new_plan_id)

    rule = find_rule(current, new)
    return rule.decide(
        current_name=current_plan_name or current_plan_id or "plan",
        new_name=new_plan_name or new_plan_id or "plan",
    )
