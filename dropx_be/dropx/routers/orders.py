from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session, selectinload, joinedload
from typing import Optional
import math

from dropx.models.user import get_db
from dropx.models.order import Order
from dropx.schemas.order import OrderOut, OrderItemOut, OrderListOut, OrderStatus, Pagination
from dropx.utils.errors import NotFoundError
from dropx.utils.responses import ok
from dropx.utils.security import get_current_user_id


router = APIRouter()


def map_order_to_out(order: Order) -> OrderOut:
    items = [
        OrderItemOut(
            id=i.id,
            menuItemId=i.menu_item_id,
            name=i.name,
            quantity=i.quantity,
            price=float(i.price),
            total=float(i.price) * i.quantity,
        )
        for i in order.items
    ]
    return OrderOut(
        id=order.id,
        orderNumber=order.order_number,
        merchantId=order.merchant_id,
        merchantName=order.merchant.name if order.merchant else None,
        status=order.status,
        paymentMethod=order.payment_method,
        subtotal=float(order.subtotal or 0),
        deliveryFee=float(order.delivery_fee or 0),
        taxAmount=float(order.tax_amount or 0),
        totalAmount=float(order.total_amount or 0),
        deliveryAddress=order.delivery_address,
        items=items,
        createdAt=order.created_at.isoformat(),
        updatedAt=order.updated_at.isoformat(),
    )


# Order History
@router.get("")
def list_my_orders(
    status: Optional[OrderStatus] = Query(default=None),
    page: int = Query(default=1, ge=1),
    limit: int = Query(default=20, ge=1, le=100),
    user_id: int = Depends(get_current_user_id),
    db: Session = Depends(get_db),
):
    query = db.query(Order).filter(Order.user_id == user_id)
    if status:
        query = query.filter(Order.status == status)
    total = query.count()
    orders = (
        query.options(selectinload(Order.items), joinedload(Order.merchant))
        .order_by(Order.created_at.desc(), Order.id.desc())
        .offset((page - 1) * limit)
        .limit(limit)
        .all()
    )
    data = OrderListOut(
        orders=[map_order_to_out(o) for o in orders],
        pagination=Pagination(
            currentPage=page,
            perPage=limit,
            total=total,
            lastPage=max(1, math.ceil(total / limit)),
        ),
    )
    return ok(data, "Orders retrieved")


# Order Detail
@router.get("/{order_id}")
def get_my_order(order_id: int, user_id: int = Depends(get_current_user_id), db: Session = Depends(get_db)):
    order = db.query(Order).filter(Order.id == order_id, Order.user_id == user_id).first()
    if not order:
        raise NotFoundError("Order not found")
    return ok(map_order_to_out(order), "Order retrieved")
