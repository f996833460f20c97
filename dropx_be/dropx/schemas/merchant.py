from pydantic import BaseModel
from typing import List, Optional

from dropx.schemas.order import Pagination


class CategoryOut(BaseModel):
    id: str
    name: str
    icon: str


class MerchantOut(BaseModel):
    id: int
    name: str
    description: Optional[str] = None
    category: Optional[str] = None
    imageUrl: str = ""
    rating: float = 0.0
    isOpen: bool = True
    isPromoted: bool = False
    deliveryFee: float = 0.0
    minOrderAmount: float = 0.0
    deliveryTime: Optional[str] = None
    menuItemsCount: int = 0


class MerchantListOut(BaseModel):
    merchants: List[MerchantOut]
    pagination: Pagination
