"""Cart totals.

``summarize`` is a pure function over line items and the bound merchant; it
never touches the database session beyond attribute access on the objects
it is given.
"""
from dataclasses import dataclass
from decimal import Decimal, ROUND_HALF_UP
from typing import Iterable, Optional

TAX_RATE = Decimal("0.165")
CENTS = Decimal("0.01")
ZERO = Decimal("0.00")


def to_money(value) -> Decimal:
    if value is None:
        return ZERO
    if not isinstance(value, Decimal):
        value = Decimal(str(value))
    return value.quantize(CENTS, rounding=ROUND_HALF_UP)


def line_total(quantity: int, unit_price) -> Decimal:
    return to_money(to_money(unit_price) * quantity)


@dataclass
class CartSummary:
    subtotal: Decimal = ZERO
    delivery_fee: Decimal = ZERO
    tax_amount: Decimal = ZERO
    total: Decimal = ZERO
    item_count: int = 0
    unique_item_count: int = 0
    min_order: Decimal = ZERO
    meets_min_order: bool = True


def _merchant_terms(items: list, merchant) -> tuple[Decimal, Decimal]:
    # bound merchant first, else the merchant joined through the first item
    if merchant is None and items:
        menu_item = getattr(items[0], "menu_item", None)
        merchant = getattr(menu_item, "merchant", None)
    if merchant is None:
        return ZERO, ZERO
    return to_money(merchant.delivery_fee), to_money(merchant.min_order_amount)


def summarize(items: Iterable, merchant: Optional[object] = None) -> CartSummary:
    items = list(items)
    if not items:
        return CartSummary()

    subtotal = to_money(sum((to_money(i.total_price) for i in items), ZERO))
    delivery_fee, min_order = _merchant_terms(items, merchant)
    tax_amount = to_money(subtotal * TAX_RATE)

    return CartSummary(
        subtotal=subtotal,
        delivery_fee=delivery_fee,
        tax_amount=tax_amount,
        total=subtotal + delivery_fee + tax_amount,
        item_count=sum(int(i.quantity) for i in items),
        unique_item_count=len(items),
        min_order=min_order,
        meets_min_order=subtotal >= min_order,
    )
