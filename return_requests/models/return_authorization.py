"""Return authorization model and its lifecycle"""

from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum
from typing import Dict, FrozenSet, List, Optional, Tuple

from pydantic import BaseModel, Field

from return_requests.models.common import Money, PyObjectId


class ReturnAuthorizationState(str, Enum):
    """Return authorization state enumeration"""
    AUTHORIZED = "authorized"
    RECEIVED = "received"
    CANCELED = "canceled"


class SideEffect(str, Enum):
    """Work the caller must perform after a transition"""
    NOTIFY_AUTHORIZED = "notify_authorized"


class InvalidTransitionError(ValueError):
    """Raised when a return authorization cannot move to the requested state"""

    def __init__(self, current: Optional[ReturnAuthorizationState], target: ReturnAuthorizationState):
        self.current = current
        self.target = target
        source = current.value if current else "new"
        super().__init__(f"Cannot transition return authorization from '{source}' to '{target.value}'")


ALLOWED_TRANSITIONS: Dict[ReturnAuthorizationState, FrozenSet[ReturnAuthorizationState]] = {
    ReturnAuthorizationState.AUTHORIZED: frozenset({
        ReturnAuthorizationState.RECEIVED,
        ReturnAuthorizationState.CANCELED,
    }),
    ReturnAuthorizationState.RECEIVED: frozenset(),
    ReturnAuthorizationState.CANCELED: frozenset(),
}


@dataclass(frozen=True)
class Transition:
    """Resulting state plus the side effects owed for reaching it"""
    state: ReturnAuthorizationState
    effects: Tuple[SideEffect, ...] = ()


def transition(
    current: Optional[ReturnAuthorizationState],
    target: ReturnAuthorizationState,
) -> Transition:
    """
    Compute the move from ``current`` to ``target``.

    ``current`` is None for an authorization that is being created, which may
    start in any state. Re-applying the current state is a no-op and owes no
    side effects, so a notification is only requested on a real entry into
    the authorized state.

    Raises:
        InvalidTransitionError: If the move is not allowed
    """
    if current == target:
        return Transition(state=target)

    if current is not None and target not in ALLOWED_TRANSITIONS[current]:
        raise InvalidTransitionError(current, target)

    effects: Tuple[SideEffect, ...] = ()
    if target == ReturnAuthorizationState.AUTHORIZED:
        effects = (SideEffect.NOTIFY_AUTHORIZED,)

    return Transition(state=target, effects=effects)


class ReturnAuthorization(BaseModel):
    """Return authorization (RMA) model"""
    id: Optional[PyObjectId] = Field(None, alias="_id")
    number: str
    order_id: str
    reason: str
    amount: Money
    state: ReturnAuthorizationState
    inventory_unit_ids: List[str] = []
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    updated_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    class Config:
        populate_by_name = True
        json_schema_extra = {
            "example": {
                "number": "RA-20240101-1A2B3C4D",
                "order_id": "507f1f77bcf86cd799439011",
                "reason": "Other: Caused a rift in the Space/Time continuum.",
                "amount": "66.31",
                "state": "authorized",
                "inventory_unit_ids": ["iu-1", "iu-2", "iu-3"]
            }
        }
