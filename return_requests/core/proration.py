"""
Discount proration for returned inventory units.

A unit's refundable value is its line item price minus two shares:

* the discounts attached to its line item, split evenly across the line
  item's units, and
* the order-level discounts, split across every unit in the order in
  proportion to unit price.

Each share is rounded to cents and the last unit (in stable order) absorbs
the rounding remainder, so the shares of a discount always add up to the
discount itself.
"""

from decimal import Decimal, ROUND_HALF_UP
from typing import Dict, Iterable, List, Sequence

from return_requests.models.common import CENTS
from return_requests.models.order import Adjustment, InventoryUnit, Order

ZERO = Decimal("0.00")


def _discount_total(adjustments: Iterable[Adjustment]) -> Decimal:
    """Positive amount taken off by a set of adjustments"""
    return -sum((adjustment.amount for adjustment in adjustments), ZERO)


def allocate(total: Decimal, weights: Sequence[Decimal]) -> List[Decimal]:
    """
    Split ``total`` into cent amounts proportional to ``weights``.

    The last slot takes whatever rounding left over. Zero total weight
    falls back to an even split.
    """
    if not weights:
        return []

    weight_sum = sum(weights, Decimal(0))
    if weight_sum == 0:
        weights = [Decimal(1)] * len(weights)
        weight_sum = Decimal(len(weights))

    shares = [
        (total * weight / weight_sum).quantize(CENTS, rounding=ROUND_HALF_UP)
        for weight in weights[:-1]
    ]
    shares.append(total - sum(shares, ZERO))
    return shares


def ordered_units(order: Order) -> List[InventoryUnit]:
    """All inventory units of the order by line item position, then unit id"""
    positions = {line_item.id: index for index, line_item in enumerate(order.line_items)}
    for unit in order.inventory_units:
        if unit.line_item_id not in positions:
            raise ValueError(f"Inventory unit {unit.id} references unknown line item {unit.line_item_id}")
    return sorted(order.inventory_units, key=lambda unit: (positions[unit.line_item_id], unit.id))


def discount_shares(order: Order) -> Dict[str, Decimal]:
    """Map of inventory unit id to the total discount that unit absorbs"""
    units = ordered_units(order)
    shares: Dict[str, Decimal] = {unit.id: ZERO for unit in units}

    # Line item promotions stay within their own units
    for line_item in order.line_items:
        line_units = [unit for unit in units if unit.line_item_id == line_item.id]
        line_discount = _discount_total(line_item.adjustments)
        if line_discount and not line_units:
            raise ValueError(f"Line item {line_item.id} has a discount but no inventory units")
        line_shares = allocate(line_discount, [Decimal(1)] * len(line_units))
        for unit, share in zip(line_units, line_shares):
            shares[unit.id] += share

    # Order promotions are weighted by price
    order_discount = _discount_total(order.adjustments)
    if order_discount and not units:
        raise ValueError(f"Order {order.number} has a discount but no inventory units")
    prices = [order.find_line_item(unit.line_item_id).price for unit in units]
    order_shares = allocate(order_discount, prices)
    for unit, share in zip(units, order_shares):
        shares[unit.id] += share

    return shares


def price_after_discounts(order: Order, unit: InventoryUnit) -> Decimal:
    """Line price of one unit minus its share of every discount"""
    shares = discount_shares(order)
    if unit.id not in shares:
        raise ValueError(f"Inventory unit {unit.id} does not belong to order {order.number}")
    return order.find_line_item(unit.line_item_id).price - shares[unit.id]


def compute_returned_amount(order: Order, units: Iterable[InventoryUnit]) -> Decimal:
    """Refundable value of the given units of ``order``"""
    shares = discount_shares(order)
    total = ZERO
    for unit in units:
        if unit.id not in shares:
            raise ValueError(f"Inventory unit {unit.id} does not belong to order {order.number}")
        total += order.find_line_item(unit.line_item_id).price - shares[unit.id]
    return total
