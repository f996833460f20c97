from dataclasses import dataclass
from typing import Optional

from fastapi import APIRouter, Depends, Query, Request, Response
from sqlalchemy.orm import Session

from dropx.config import get_settings
from dropx.models.user import get_db
from dropx.models.cart import CartSession, CartLineItem
from dropx.models.merchant import MenuItem
from dropx.schemas.cart import (
    CartAddIn,
    CartUpdateIn,
    CartDeleteIn,
    CartOut,
    CartItemOut,
    CartSessionOut,
    CartSummaryOut,
)
from dropx.services import cart_items, cart_sessions
from dropx.services.pricing import CartSummary, summarize
from dropx.utils.activity import log_user_activity
from dropx.utils.errors import NotFoundError, ValidationError
from dropx.utils.responses import ok
from dropx.utils.security import get_current_user_id
from dropx.utils.session_key import resolve_session_key
from dropx.utils.storage import resolve_image_url


router = APIRouter()


@dataclass
class CartContext:
    user_id: int
    session_key: str
    ip_address: str = ""
    user_agent: str = ""


def get_cart_context(request: Request, user_id: int = Depends(get_current_user_id)) -> CartContext:
    return CartContext(
        user_id=user_id,
        session_key=resolve_session_key(request, user_id),
        ip_address=request.client.host if request.client else "",
        user_agent=request.headers.get("user-agent", ""),
    )


def _iso(value) -> Optional[str]:
    return value.isoformat() if value else None


def _item_to_out(line: CartLineItem) -> CartItemOut:
    return CartItemOut(
        id=line.id,
        menuItemId=line.menu_item_id,
        name=line.name,
        description=line.description,
        imageUrl=resolve_image_url(line.image_url, "menu_items"),
        quantity=line.quantity,
        unitPrice=float(line.unit_price),
        totalPrice=float(line.total_price),
        subtotal=float(line.total_price),
        customizations=line.customizations or {},
        specialInstructions=line.special_instructions,
        inStock=bool(line.in_stock),
        createdAt=_iso(line.created_at),
        updatedAt=_iso(line.updated_at),
    )


def _session_to_out(session: CartSession) -> CartSessionOut:
    return CartSessionOut(
        id=session.id,
        uuid=session.uuid,
        merchantId=session.merchant_id,
        merchantName=session.merchant.name if session.merchant else None,
        status=session.status,
        expiresAt=_iso(session.expires_at),
        createdAt=_iso(session.created_at),
        updatedAt=_iso(session.updated_at),
    )


def _summary_to_out(summary: CartSummary) -> CartSummaryOut:
    return CartSummaryOut(
        subtotal=float(summary.subtotal),
        deliveryFee=float(summary.delivery_fee),
        taxAmount=float(summary.tax_amount),
        total=float(summary.total),
        itemCount=summary.item_count,
        uniqueItemCount=summary.unique_item_count,
        minOrder=float(summary.min_order),
        meetsMinOrder=summary.meets_min_order,
    )


def build_snapshot(db: Session, session: Optional[CartSession]) -> CartOut:
    items = cart_items.list_items(db, session)
    summary = summarize(items, session.merchant if session else None)
    return CartOut(
        session=_session_to_out(session) if session else None,
        items=[_item_to_out(i) for i in items],
        summary=_summary_to_out(summary),
    )


def _respond(response: Response, ctx: CartContext, snapshot: CartOut, message: str, **extra) -> dict:
    settings = get_settings()
    response.headers[settings.CART_SESSION_HEADER] = ctx.session_key
    response.set_cookie(
        settings.CART_SESSION_COOKIE,
        ctx.session_key,
        max_age=int(cart_sessions.CART_SESSION_TTL.total_seconds()),
        httponly=True,
        samesite="lax",
    )
    data = snapshot.model_dump()
    data.update(extra)
    return ok(data, message)


# Get Cart
@router.get("")
def get_cart(
    response: Response,
    merchant_id: Optional[int] = Query(default=None),
    ctx: CartContext = Depends(get_cart_context),
    db: Session = Depends(get_db),
):
    session = cart_sessions.resolve(db, ctx.user_id, ctx.session_key, merchant_id, create=False)
    return _respond(response, ctx, build_snapshot(db, session), "Cart retrieved")


# Add Cart Item
@router.post("")
def add_to_cart(
    payload: CartAddIn,
    response: Response,
    ctx: CartContext = Depends(get_cart_context),
    db: Session = Depends(get_db),
):
    if payload.action != "add":
        raise ValidationError("Invalid action")

    merchant_id = payload.merchant_id
    if merchant_id is None:
        menu_item = db.query(MenuItem).filter(MenuItem.id == payload.menu_item_id).first()
        if not menu_item:
            raise NotFoundError("Menu item not found")
        merchant_id = menu_item.merchant_id

    session = cart_sessions.resolve(db, ctx.user_id, ctx.session_key, merchant_id)
    if session is None:
        # current cart is bound to another merchant: start a fresh one
        session = cart_sessions.create_session(db, ctx.user_id, ctx.session_key, merchant_id)

    line = cart_items.add_item(
        db,
        session,
        payload.menu_item_id,
        payload.quantity,
        customizations=payload.customizations,
        special_instructions=payload.special_instructions,
    )
    log_user_activity(
        db,
        ctx.user_id,
        "cart_update",
        f"Added item {payload.menu_item_id} to cart",
        {"menu_item_id": payload.menu_item_id, "quantity": payload.quantity, "merchant_id": merchant_id},
        ctx.ip_address,
        ctx.user_agent,
    )
    line_id = line.id
    db.commit()

    return _respond(response, ctx, build_snapshot(db, session), "Item added to cart", cartItemId=line_id)


# Update Cart Item
@router.put("")
def update_cart_item(
    payload: CartUpdateIn,
    response: Response,
    ctx: CartContext = Depends(get_cart_context),
    db: Session = Depends(get_db),
):
    session = cart_sessions.resolve(db, ctx.user_id, ctx.session_key, create=False)
    line = cart_items.update_item(
        db,
        session,
        payload.item_id,
        payload.quantity,
        special_instructions=payload.special_instructions,
    )
    log_user_activity(
        db,
        ctx.user_id,
        "cart_item_updated" if line is not None else "cart_item_removed",
        f"Updated cart item {payload.item_id}",
        {"cart_item_id": payload.item_id, "new_quantity": payload.quantity},
        ctx.ip_address,
        ctx.user_agent,
    )
    db.commit()

    message = "Cart item updated" if line is not None else "Item removed from cart"
    return _respond(response, ctx, build_snapshot(db, session), message)


# Remove Cart Item / Clear Cart
@router.delete("")
def delete_from_cart(
    response: Response,
    payload: Optional[CartDeleteIn] = None,
    item_id: Optional[int] = Query(default=None),
    merchant_id: Optional[int] = Query(default=None),
    ctx: CartContext = Depends(get_cart_context),
    db: Session = Depends(get_db),
):
    if payload is not None:
        item_id = payload.item_id if payload.item_id is not None else item_id
        merchant_id = payload.merchant_id if payload.merchant_id is not None else merchant_id

    if item_id is not None:
        session = cart_sessions.resolve(db, ctx.user_id, ctx.session_key, create=False)
        line = cart_items.remove_item(db, session, item_id)
        log_user_activity(
            db,
            ctx.user_id,
            "cart_item_removed",
            "Removed item from cart",
            {"cart_item_id": item_id, "menu_item_id": line.menu_item_id, "item_name": line.name},
            ctx.ip_address,
            ctx.user_agent,
        )
        db.commit()
        return _respond(response, ctx, build_snapshot(db, session), "Item removed from cart")

    if merchant_id is not None:
        session = cart_sessions.resolve(db, ctx.user_id, ctx.session_key, merchant_id, create=False)
        removed = cart_items.clear(db, session)
        if session is not None:
            log_user_activity(
                db,
                ctx.user_id,
                "cart_cleared",
                f"Cleared cart of {removed} items",
                {"cart_session": session.uuid, "items_cleared": removed},
                ctx.ip_address,
                ctx.user_agent,
            )
        db.commit()
        return _respond(response, ctx, build_snapshot(db, session), "Cart cleared")

    raise ValidationError("item_id or merchant_id is required")
