"""Order, line item and inventory unit models"""

from pydantic import BaseModel, Field
from datetime import datetime, timezone
from decimal import Decimal
from typing import Optional, List
from enum import Enum
from return_requests.models.common import Money, PyObjectId


class InventoryUnitState(str, Enum):
    """Inventory unit state enumeration"""
    ON_HAND = "on_hand"
    BACKORDERED = "backordered"
    SHIPPED = "shipped"
    RETURNED = "returned"


class Adjustment(BaseModel):
    """Promotion adjustment; discounts carry a negative amount"""
    label: str
    amount: Money


class InventoryUnit(BaseModel):
    """One physical unit of a line item"""
    id: str
    line_item_id: str
    variant_id: str
    state: InventoryUnitState = InventoryUnitState.ON_HAND

    @property
    def shipped(self) -> bool:
        return self.state == InventoryUnitState.SHIPPED


class LineItem(BaseModel):
    """Line item model"""
    id: str
    variant_id: str
    name: str
    quantity: int = Field(ge=1)
    price: Money = Field(ge=0)
    adjustments: List[Adjustment] = []

    @property
    def amount(self) -> Decimal:
        return self.price * self.quantity

    class Config:
        json_schema_extra = {
            "example": {
                "id": "li-1",
                "variant_id": "var-10",
                "name": "Premium Widget",
                "quantity": 2,
                "price": "30.00",
                "adjustments": [{"label": "Promotion (Widget Week)", "amount": "-5.00"}]
            }
        }


class Order(BaseModel):
    """Order model"""
    id: Optional[PyObjectId] = Field(None, alias="_id")
    number: str
    email: Optional[str] = None
    user_id: Optional[str] = None
    token: str
    completed_at: Optional[datetime] = None
    line_items: List[LineItem] = []
    inventory_units: List[InventoryUnit] = []
    adjustments: List[Adjustment] = []
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    updated_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    class Config:
        populate_by_name = True

    @property
    def completed(self) -> bool:
        return self.completed_at is not None

    @property
    def shipped_units(self) -> List[InventoryUnit]:
        return [unit for unit in self.inventory_units if unit.shipped]

    def find_line_item(self, line_item_id: str) -> Optional[LineItem]:
        for line_item in self.line_items:
            if line_item.id == line_item_id:
                return line_item
        return None

    def find_line_item_by_variant(self, variant_id: str) -> Optional[LineItem]:
        for line_item in self.line_items:
            if line_item.variant_id == variant_id:
                return line_item
        return None

    def units_for(self, line_item_id: str) -> List[InventoryUnit]:
        """Inventory units of a line item, in stable id order"""
        units = [unit for unit in self.inventory_units if unit.line_item_id == line_item_id]
        return sorted(units, key=lambda unit: unit.id)
