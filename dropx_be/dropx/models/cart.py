from sqlalchemy import (
    Column,
    Integer,
    String,
    Boolean,
    Numeric,
    JSON,
    ForeignKey,
    DateTime,
    Index,
    UniqueConstraint,
    text,
)
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import relationship
from datetime import datetime
from dropx.models.user import Base


CART_STATUS_ACTIVE = "active"
CART_STATUS_ABANDONED = "abandoned"


class CartSession(Base):
    __tablename__ = "cart_sessions"
    __table_args__ = (
        # One active cart per client session key
        Index(
            "uq_cart_sessions_active_key",
            "user_id",
            "session_key",
            unique=True,
            postgresql_where=text("status = 'active'"),
            sqlite_where=text("status = 'active'"),
        ),
    )

    id = Column(Integer, primary_key=True, index=True)
    uuid = Column(String(32), unique=True, nullable=False)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    merchant_id = Column(Integer, ForeignKey("merchants.id"), nullable=False)
    session_key = Column(String(128), nullable=False, index=True)
    status = Column(String(20), nullable=False, default=CART_STATUS_ACTIVE)
    expires_at = Column(DateTime, nullable=False)
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    merchant = relationship("Merchant")
    items = relationship(
        "CartLineItem",
        back_populates="cart_session",
        cascade="all, delete-orphan",
    )


class CartLineItem(Base):
    __tablename__ = "cart_line_items"
    __table_args__ = (
        UniqueConstraint("cart_session_id", "menu_item_id", name="uq_cart_session_menu_item"),
    )

    id = Column(Integer, primary_key=True, index=True)
    cart_session_id = Column(Integer, ForeignKey("cart_sessions.id", ondelete="CASCADE"), nullable=False, index=True)
    menu_item_id = Column(Integer, ForeignKey("menu_items.id"), nullable=False)
    # captured at add-time so later catalog edits don't change the cart
    name = Column(String(255), nullable=False)
    description = Column(String(1000))
    image_url = Column(String(255))
    quantity = Column(Integer, nullable=False, default=1)
    unit_price = Column(Numeric(10, 2), nullable=False)
    total_price = Column(Numeric(10, 2), nullable=False)
    customizations = Column(JSON().with_variant(JSONB, "postgresql"))
    special_instructions = Column(String(500))
    in_stock = Column(Boolean, default=True)
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    cart_session = relationship("CartSession", back_populates="items")
    menu_item = relationship("MenuItem")
