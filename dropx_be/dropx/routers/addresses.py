from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from dropx.models.user import get_db
from dropx.models.address import Address
from dropx.schemas.address import AddressOut, AddressCreate, AddressUpdate
from dropx.utils.errors import NotFoundError
from dropx.utils.responses import ok
from dropx.utils.security import get_current_user_id


router = APIRouter()


def _to_out(a: Address) -> AddressOut:
    return AddressOut(
        id=a.id,
        label=a.label,
        fullName=a.full_name,
        phone=a.phone,
        addressLine1=a.address_line1,
        addressLine2=a.address_line2,
        city=a.city,
        neighborhood=a.neighborhood,
        landmark=a.landmark,
        latitude=a.latitude,
        longitude=a.longitude,
        isDefault=bool(a.is_default),
    )


def _apply(address: Address, payload: AddressCreate) -> None:
    address.label = payload.label
    address.full_name = payload.fullName
    address.phone = payload.phone
    address.address_line1 = payload.addressLine1
    address.address_line2 = payload.addressLine2
    address.city = payload.city
    address.neighborhood = payload.neighborhood
    address.landmark = payload.landmark
    address.latitude = payload.latitude
    address.longitude = payload.longitude
    address.is_default = payload.isDefault


def _maybe_clear_default(db: Session, user_id: int):
    db.query(Address).filter(Address.user_id == user_id, Address.is_default == True).update({Address.is_default: False})


def _owned(db: Session, user_id: int, id: int) -> Address:
    address = db.query(Address).filter(Address.id == id, Address.user_id == user_id).first()
    if not address:
        raise NotFoundError("Address not found")
    return address


# Get User Addresses
@router.get("")
def get_user_addresses(user_id: int = Depends(get_current_user_id), db: Session = Depends(get_db)):
    addresses = (
        db.query(Address)
        .filter(Address.user_id == user_id)
        .order_by(Address.is_default.desc(), Address.created_at.desc(), Address.id.desc())
        .all()
    )
    return ok([_to_out(a) for a in addresses], "Addresses retrieved")


# Create Address
@router.post("", status_code=201)
def create_address(payload: AddressCreate, user_id: int = Depends(get_current_user_id), db: Session = Depends(get_db)):
    # the first address becomes the default
    has_any = db.query(Address.id).filter(Address.user_id == user_id).first() is not None
    if payload.isDefault:
        _maybe_clear_default(db, user_id)

    address = Address(user_id=user_id)
    _apply(address, payload)
    if not has_any:
        address.is_default = True
    db.add(address)
    db.commit()
    db.refresh(address)
    return ok(_to_out(address), "Address created")


# Update Address
@router.put("/{id}")
def update_address(id: int, payload: AddressUpdate, user_id: int = Depends(get_current_user_id), db: Session = Depends(get_db)):
    address = _owned(db, user_id, id)

    if payload.isDefault:
        _maybe_clear_default(db, user_id)

    _apply(address, payload)
    db.commit()
    db.refresh(address)
    return ok(_to_out(address), "Address updated")


# Delete Address
@router.delete("/{id}")
def delete_address(id: int, user_id: int = Depends(get_current_user_id), db: Session = Depends(get_db)):
    address = _owned(db, user_id, id)
    db.delete(address)
    db.commit()
    return ok({"id": id}, "Address deleted")
