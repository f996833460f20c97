from fastapi import APIRouter, Depends, Query
from sqlalchemy import func
from sqlalchemy.orm import Session
import math

from dropx.models.user import get_db
from dropx.models.merchant import Merchant, MenuItem
from dropx.schemas.merchant import CategoryOut, MerchantOut, MerchantListOut
from dropx.schemas.order import Pagination
from dropx.utils.responses import ok
from dropx.utils.security import get_current_user_id
from dropx.utils.storage import resolve_image_url


router = APIRouter()


def category_slug(name: str) -> str:
    return name.strip().lower().replace(" ", "_")


def category_search_term(category_id: str) -> str:
    """Map a category slug back to the display name merchants are stored under."""
    return category_id.replace("_", " ").strip().title()


def _merchant_to_out(m: Merchant, menu_items_count: int) -> MerchantOut:
    return MerchantOut(
        id=m.id,
        name=m.name,
        description=m.description,
        category=m.category,
        imageUrl=resolve_image_url(m.image_url, "merchants"),
        rating=float(m.rating or 0),
        isOpen=bool(m.is_open),
        isPromoted=bool(m.is_promoted),
        deliveryFee=float(m.delivery_fee or 0),
        minOrderAmount=float(m.min_order_amount or 0),
        deliveryTime=m.delivery_time,
        menuItemsCount=int(menu_items_count or 0),
    )


@router.get("")
def get_main_categories(user_id: int = Depends(get_current_user_id), db: Session = Depends(get_db)):
    rows = (
        db.query(Merchant.category)
        .filter(Merchant.is_active == True, Merchant.category.isnot(None), Merchant.category != "")
        .distinct()
        .order_by(Merchant.category)
        .all()
    )
    categories = [CategoryOut(id="all", name="All", icon="all")]
    seen = {"all"}
    for (name,) in rows:
        slug = category_slug(name)
        if slug in seen:
            continue
        seen.add(slug)
        categories.append(CategoryOut(id=slug, name=name, icon=slug))
    return ok(categories, "Categories retrieved")


@router.get("/{category_id}/merchants")
def get_merchants_by_category(
    category_id: str,
    page: int = Query(default=1, ge=1),
    limit: int = Query(default=20, ge=1, le=100),
    user_id: int = Depends(get_current_user_id),
    db: Session = Depends(get_db),
):
    query = db.query(Merchant).filter(Merchant.is_active == True)
    if category_id != "all":
        query = query.filter(Merchant.category.ilike(f"%{category_search_term(category_id)}%"))

    total = query.count()
    merchants = (
        query.order_by(Merchant.is_promoted.desc(), Merchant.rating.desc(), Merchant.id)
        .offset((page - 1) * limit)
        .limit(limit)
        .all()
    )

    counts = {}
    if merchants:
        counts = dict(
            db.query(MenuItem.merchant_id, func.count(MenuItem.id))
            .filter(MenuItem.merchant_id.in_([m.id for m in merchants]), MenuItem.is_active == True)
            .group_by(MenuItem.merchant_id)
            .all()
        )

    data = MerchantListOut(
        merchants=[_merchant_to_out(m, counts.get(m.id, 0)) for m in merchants],
        pagination=Pagination(
            currentPage=page,
            perPage=limit,
            total=total,
            lastPage=max(1, math.ceil(total / limit)),
        ),
    )
    return ok(data, "Merchants retrieved")
