"""MongoDB models using Pydantic"""

from return_requests.models.common import Money, PyObjectId
from return_requests.models.order import Order, LineItem, InventoryUnit, InventoryUnitState, Adjustment
from return_requests.models.return_authorization import (
    ReturnAuthorization,
    ReturnAuthorizationState,
    SideEffect,
    Transition,
    InvalidTransitionError,
    transition,
)

__all__ = [
    "Money",
    "PyObjectId",
    "Order",
    "LineItem",
    "InventoryUnit",
    "InventoryUnitState",
    "Adjustment",
    "ReturnAuthorization",
    "ReturnAuthorizationState",
    "SideEffect",
    "Transition",
    "InvalidTransitionError",
    "transition",
]
