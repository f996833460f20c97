from pydantic import BaseModel
from typing import List, Optional, Literal


OrderStatus = Literal["pending", "confirmed", "preparing", "delivering", "delivered", "cancelled"]


class OrderItemOut(BaseModel):
    id: int
    menuItemId: Optional[int] = None
    name: str
    quantity: int
    price: float
    total: float


class OrderOut(BaseModel):
    id: int
    orderNumber: str
    merchantId: int
    merchantName: Optional[str] = None
    status: str
    paymentMethod: Optional[str] = None
    subtotal: float
    deliveryFee: float
    taxAmount: float
    totalAmount: float
    deliveryAddress: Optional[str] = None
    items: List[OrderItemOut]
    createdAt: str
    updatedAt: str


class Pagination(BaseModel):
    currentPage: int
    perPage: int
    total: int
    lastPage: int


class OrderListOut(BaseModel):
    orders: List[OrderOut]
    pagination: Pagination
