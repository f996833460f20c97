from pydantic import BaseModel, Field
from typing import Optional


class AddressBase(BaseModel):
    label: Optional[str] = None
    fullName: str
    phone: str
    addressLine1: str
    addressLine2: Optional[str] = None
    city: str
    neighborhood: Optional[str] = None
    landmark: Optional[str] = None
    latitude: Optional[float] = Field(default=None, ge=-90, le=90)
    longitude: Optional[float] = Field(default=None, ge=-180, le=180)
    isDefault: bool = Field(default=False)


class AddressCreate(AddressBase):
    pass


class AddressUpdate(AddressBase):
    pass


class AddressOut(AddressBase):
    id: int
