"""
Pytest configuration and fixtures for return request tests.
"""
import os
import pytest
from datetime import datetime, timedelta, timezone
from decimal import Decimal
from typing import Dict, List, Optional
from unittest.mock import AsyncMock

# Set test environment before importing app modules
os.environ["MONGODB_URL"] = "mongodb://localhost:27017"
os.environ["JWT_SECRET"] = "test-secret-key-for-unit-tests-only"

from return_requests.config import ReturnRequestsConfig  # noqa: E402
from return_requests.core.workflow import ReturnRequestWorkflow  # noqa: E402
from return_requests.models.order import (  # noqa: E402
    Adjustment,
    InventoryUnit,
    InventoryUnitState,
    LineItem,
    Order,
)
from return_requests.models.return_authorization import (  # noqa: E402
    ReturnAuthorization,
    ReturnAuthorizationState,
)

NOW = datetime(2024, 6, 15, 12, 0, 0, tzinfo=timezone.utc)
ORDER_ID = "507f1f77bcf86cd799439011"


class InMemoryStore:
    """Stand-in for ReturnRequestStore backed by plain lists"""

    def __init__(self):
        self.orders: List[Order] = []
        self.return_authorizations: List[ReturnAuthorization] = []
        self.saved_config: Optional[ReturnRequestsConfig] = None

    async def find_order_by_number(self, number: str) -> Optional[Order]:
        return next((order for order in self.orders if order.number == number), None)

    async def find_order(self, order_id: str) -> Optional[Order]:
        return next((order for order in self.orders if order.id == order_id), None)

    async def find_return_authorization(self, number: str) -> Optional[ReturnAuthorization]:
        return next((ra for ra in self.return_authorizations if ra.number == number), None)

    async def list_return_authorizations_for_order(self, order_id: str) -> List[ReturnAuthorization]:
        return [ra for ra in self.return_authorizations if ra.order_id == order_id]

    async def list_return_authorizations(self, state=None, skip: int = 0, limit: int = 20):
        matching = [ra for ra in self.return_authorizations if state is None or ra.state == state]
        return matching[skip:skip + limit]

    async def find_authorized_and_expired(self, cutoff: datetime) -> List[ReturnAuthorization]:
        return [
            ra for ra in self.return_authorizations
            if ra.state == ReturnAuthorizationState.AUTHORIZED and ra.created_at < cutoff
        ]

    async def insert_return_authorization(self, return_authorization: ReturnAuthorization) -> ReturnAuthorization:
        stored = return_authorization.model_copy(update={"id": f"ra-{len(self.return_authorizations) + 1}"})
        self.return_authorizations.append(stored)
        return stored

    async def update_return_authorization_state(self, return_authorization: ReturnAuthorization) -> None:
        self.return_authorizations = [
            return_authorization if ra.number == return_authorization.number else ra
            for ra in self.return_authorizations
        ]

    async def load_config(self) -> Optional[ReturnRequestsConfig]:
        return self.saved_config

    async def save_config(self, config: ReturnRequestsConfig) -> None:
        self.saved_config = config


def build_order(
    number: str = "R100",
    order_id: str = ORDER_ID,
    user_id: Optional[str] = "user-1",
    token: str = "tok-abc123",
    email: str = "shopper@example.com",
    completed_at: Optional[datetime] = NOW - timedelta(days=1),
    line_items: Optional[List[dict]] = None,
    order_adjustments: Optional[List[str]] = None,
    unit_state: InventoryUnitState = InventoryUnitState.SHIPPED,
) -> Order:
    """
    Build an order with one inventory unit per purchased quantity.

    ``line_items`` entries are dicts of variant_id, price, quantity and an
    optional list of adjustment amounts.
    """
    if line_items is None:
        line_items = [
            {"variant_id": "var-10", "price": "10.00", "quantity": 1},
            {"variant_id": "var-30", "price": "30.00", "quantity": 2},
            {"variant_id": "var-120", "price": "120.00", "quantity": 1},
        ]

    items = []
    units = []
    unit_counter = 0
    for index, item in enumerate(line_items, start=1):
        line_item_id = f"li-{index}"
        items.append(LineItem(
            id=line_item_id,
            variant_id=item["variant_id"],
            name=f"Item {item['variant_id']}",
            quantity=item["quantity"],
            price=item["price"],
            adjustments=[
                Adjustment(label="Promotion", amount=amount)
                for amount in item.get("adjustments", [])
            ],
        ))
        for _ in range(item["quantity"]):
            unit_counter += 1
            units.append(InventoryUnit(
                id=f"iu-{unit_counter:02d}",
                line_item_id=line_item_id,
                variant_id=item["variant_id"],
                state=unit_state,
            ))

    return Order(
        _id=order_id,
        number=number,
        email=email,
        user_id=user_id,
        token=token,
        completed_at=completed_at,
        line_items=items,
        inventory_units=units,
        adjustments=[Adjustment(label="Order promotion", amount=amount) for amount in order_adjustments or []],
    )


def build_return_authorization(
    number: str,
    state: ReturnAuthorizationState = ReturnAuthorizationState.AUTHORIZED,
    created_at: datetime = NOW,
    order_id: str = ORDER_ID,
    inventory_unit_ids: Optional[List[str]] = None,
) -> ReturnAuthorization:
    return ReturnAuthorization(
        number=number,
        order_id=order_id,
        reason="Changed Mind",
        amount=Decimal("10.00"),
        state=state,
        inventory_unit_ids=inventory_unit_ids or [],
        created_at=created_at,
        updated_at=created_at,
    )


@pytest.fixture
def config() -> ReturnRequestsConfig:
    return ReturnRequestsConfig()


@pytest.fixture
def order() -> Order:
    return build_order()


@pytest.fixture
def store(order) -> InMemoryStore:
    store = InMemoryStore()
    store.orders.append(order)
    return store


@pytest.fixture
def notifier() -> AsyncMock:
    notifier = AsyncMock()
    notifier.notify_authorized = AsyncMock()
    return notifier


@pytest.fixture
def workflow(store, notifier, config) -> ReturnRequestWorkflow:
    return ReturnRequestWorkflow(store=store, notifier=notifier, config=config, clock=lambda: NOW)


@pytest.fixture
def sample_return_quantity() -> Dict[str, int]:
    return {"var-10": 1, "var-30": 2}
