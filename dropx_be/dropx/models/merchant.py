from sqlalchemy import Column, Integer, String, Float, Numeric, Boolean, ForeignKey, DateTime
from sqlalchemy.orm import relationship
from datetime import datetime
from dropx.models.user import Base


class Merchant(Base):
    __tablename__ = "merchants"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(255), nullable=False)
    description = Column(String(1000))
    category = Column(String(100), index=True)
    image_url = Column(String(255))
    rating = Column(Float, default=0.0)
    delivery_fee = Column(Numeric(10, 2), default=0)
    min_order_amount = Column(Numeric(10, 2), default=0)
    delivery_time = Column(String(50))
    is_active = Column(Boolean, default=True)
    is_open = Column(Boolean, default=True)
    is_promoted = Column(Boolean, default=False)
    created_at = Column(DateTime, default=datetime.utcnow)

    menu_items = relationship("MenuItem", back_populates="merchant")


class MenuItem(Base):
    __tablename__ = "menu_items"

    id = Column(Integer, primary_key=True, index=True)
    merchant_id = Column(Integer, ForeignKey("merchants.id"), nullable=False, index=True)
    name = Column(String(255), nullable=False)
    description = Column(String(1000))
    price = Column(Numeric(10, 2), nullable=False)
    discounted_price = Column(Numeric(10, 2))
    image_url = Column(String(255))
    in_stock = Column(Boolean, default=True)
    is_active = Column(Boolean, default=True)

    merchant = relationship("Merchant", back_populates="menu_items")
