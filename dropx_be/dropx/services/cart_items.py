from decimal import Decimal
from typing import List, Optional
import logging

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, joinedload

from dropx.models.cart import CartSession, CartLineItem
from dropx.models.merchant import MenuItem
from dropx.services.cart_sessions import touch
from dropx.services.pricing import line_total, to_money
from dropx.utils.errors import NotFoundError, ValidationError

logger = logging.getLogger(__name__)

MIN_QUANTITY = 1
MAX_QUANTITY = 50
# fits cart_line_items.total_price, Numeric(10, 2)
MAX_LINE_TOTAL = Decimal("99999999.99")


def clamp_quantity(quantity: int) -> int:
    return max(MIN_QUANTITY, min(MAX_QUANTITY, int(quantity)))


def list_items(db: Session, session: Optional[CartSession]) -> List[CartLineItem]:
    if session is None:
        return []
    return (
        db.query(CartLineItem)
        .options(joinedload(CartLineItem.menu_item).joinedload(MenuItem.merchant))
        .filter(CartLineItem.cart_session_id == session.id)
        .order_by(CartLineItem.created_at.desc(), CartLineItem.id.desc())
        .all()
    )


def _find_line(db: Session, session_id: int, menu_item_id: int) -> Optional[CartLineItem]:
    return (
        db.query(CartLineItem)
        .filter(CartLineItem.cart_session_id == session_id, CartLineItem.menu_item_id == menu_item_id)
        .first()
    )


def _owned_line(db: Session, session: Optional[CartSession], item_id: int) -> CartLineItem:
    line = None
    if session is not None:
        line = (
            db.query(CartLineItem)
            .filter(CartLineItem.id == item_id, CartLineItem.cart_session_id == session.id)
            .first()
        )
    if not line:
        raise NotFoundError("Cart item not found")
    return line


def _merge(line: CartLineItem, quantity: int, customizations: Optional[dict], special_instructions: Optional[str]) -> CartLineItem:
    old_quantity = line.quantity
    line.quantity = min(old_quantity + clamp_quantity(quantity), MAX_QUANTITY)
    line.total_price = line_total(line.quantity, line.unit_price)
    if customizations is not None:
        line.customizations = customizations
    if special_instructions:
        line.special_instructions = special_instructions
    logger.info("Cart item %s quantity %s -> %s", line.id, old_quantity, line.quantity)
    return line


def add_item(
    db: Session,
    session: CartSession,
    menu_item_id: int,
    quantity: int = 1,
    customizations: Optional[dict] = None,
    special_instructions: Optional[str] = None,
) -> CartLineItem:
    menu_item = (
        db.query(MenuItem)
        .filter(
            MenuItem.id == menu_item_id,
            MenuItem.merchant_id == session.merchant_id,
            MenuItem.is_active == True,
        )
        .first()
    )
    if not menu_item:
        raise NotFoundError("Menu item not found for this merchant")

    special_instructions = (special_instructions or "").strip() or None

    existing = _find_line(db, session.id, menu_item.id)
    if existing:
        line = _merge(existing, quantity, customizations, special_instructions)
    else:
        unit_price = to_money(
            menu_item.discounted_price if menu_item.discounted_price is not None else menu_item.price
        )
        qty = clamp_quantity(quantity)
        line = CartLineItem(
            cart_session_id=session.id,
            menu_item_id=menu_item.id,
            name=menu_item.name,
            description=menu_item.description,
            image_url=menu_item.image_url,
            quantity=qty,
            unit_price=unit_price,
            total_price=line_total(qty, unit_price),
            customizations=customizations or {},
            special_instructions=special_instructions,
            in_stock=bool(menu_item.in_stock),
        )
        try:
            with db.begin_nested():
                db.add(line)
        except IntegrityError:
            # Same menu item inserted by a concurrent request: merge into that row
            existing = _find_line(db, session.id, menu_item.id)
            if existing is None:
                raise
            line = _merge(existing, quantity, customizations, special_instructions)
        else:
            logger.info("Added menu item %s to cart session %s", menu_item.id, session.uuid)

    touch(session)
    db.flush()
    return line


def update_item(
    db: Session,
    session: Optional[CartSession],
    item_id: int,
    quantity: int = 1,
    special_instructions: Optional[str] = None,
) -> Optional[CartLineItem]:
    """Set a line's quantity; 0 removes the line and returns None.

    The quantity is always applied, so an update that only changes the
    instructions still sets the quantity (1 when the client omits it).
    Unlike add_item there is no 50 cap here; the only bound is that the
    line total must fit its column.
    """
    line = _owned_line(db, session, item_id)

    if quantity < 0:
        raise ValidationError("Quantity cannot be negative")
    if quantity == 0:
        db.delete(line)
        touch(session)
        db.flush()
        logger.info("Removed cart item %s (quantity set to 0)", item_id)
        return None

    total = line_total(quantity, line.unit_price)
    if total > MAX_LINE_TOTAL:
        raise ValidationError("Quantity too large")
    line.quantity = quantity
    line.total_price = total

    if special_instructions is not None:
        line.special_instructions = special_instructions.strip() or None

    touch(session)
    db.flush()
    return line


def remove_item(db: Session, session: Optional[CartSession], item_id: int) -> CartLineItem:
    line = _owned_line(db, session, item_id)
    db.delete(line)
    touch(session)
    db.flush()
    logger.info("Removed cart item %s from cart session %s", item_id, session.uuid)
    return line


def clear(db: Session, session: Optional[CartSession]) -> int:
    if session is None:
        return 0
    removed = (
        db.query(CartLineItem)
        .filter(CartLineItem.cart_session_id == session.id)
        .delete(synchronize_session="fetch")
    )
    touch(session)
    db.flush()
    logger.info("Cleared %s item(s) from cart session %s", removed, session.uuid)
    return removed
