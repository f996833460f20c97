from pydantic import BaseModel, Field, AliasChoices
from typing import List, Optional, Dict, Any


class CartAddIn(BaseModel):
    action: str = "add"
    menu_item_id: int = Field(validation_alias=AliasChoices("menu_item_id", "menuItemId"))
    merchant_id: Optional[int] = Field(default=None, validation_alias=AliasChoices("merchant_id", "merchantId"))
    quantity: int = 1
    customizations: Optional[Dict[str, Any]] = None
    special_instructions: Optional[str] = Field(
        default=None, max_length=500, validation_alias=AliasChoices("special_instructions", "specialInstructions")
    )


class CartUpdateIn(BaseModel):
    item_id: int = Field(validation_alias=AliasChoices("item_id", "cartItemId"))
    # cart_line_items.quantity is a 32-bit Integer
    quantity: int = Field(default=1, le=2_147_483_647)
    special_instructions: Optional[str] = Field(
        default=None, max_length=500, validation_alias=AliasChoices("special_instructions", "specialInstructions")
    )


class CartDeleteIn(BaseModel):
    item_id: Optional[int] = Field(default=None, validation_alias=AliasChoices("item_id", "cartItemId"))
    merchant_id: Optional[int] = Field(default=None, validation_alias=AliasChoices("merchant_id", "merchantId"))


class CartSessionOut(BaseModel):
    id: int
    uuid: str
    merchantId: int
    merchantName: Optional[str] = None
    status: str
    expiresAt: str
    createdAt: str
    updatedAt: str


class CartItemOut(BaseModel):
    id: int
    menuItemId: int
    name: str
    description: Optional[str] = None
    imageUrl: str = ""
    quantity: int
    unitPrice: float
    totalPrice: float
    subtotal: float
    customizations: Dict[str, Any] = Field(default_factory=dict)
    specialInstructions: Optional[str] = None
    inStock: bool = True
    createdAt: Optional[str] = None
    updatedAt: Optional[str] = None


class CartSummaryOut(BaseModel):
    subtotal: float = 0.0
    deliveryFee: float = 0.0
    taxAmount: float = 0.0
    total: float = 0.0
    itemCount: int = 0
    uniqueItemCount: int = 0
    minOrder: float = 0.0
    meetsMinOrder: bool = True


class CartOut(BaseModel):
    session: Optional[CartSessionOut] = None
    items: List[CartItemOut]
    summary: CartSummaryOut
