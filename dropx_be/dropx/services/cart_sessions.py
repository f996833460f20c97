from datetime import datetime, timedelta
from typing import Optional
import logging
import uuid

from sqlalchemy.orm import Session

from dropx.models.cart import CartSession, CART_STATUS_ACTIVE, CART_STATUS_ABANDONED
from dropx.models.merchant import Merchant
from dropx.utils.errors import NotFoundError

logger = logging.getLogger(__name__)

# Fixed lifetime from creation, not extended by later activity
CART_SESSION_TTL = timedelta(days=7)


def find_active(db: Session, user_id: int, session_key: str) -> Optional[CartSession]:
    """Newest active, unexpired session of the user for this key."""
    return (
        db.query(CartSession)
        .filter(
            CartSession.user_id == user_id,
            CartSession.session_key == session_key,
            CartSession.status == CART_STATUS_ACTIVE,
            CartSession.expires_at > datetime.utcnow(),
        )
        .order_by(CartSession.updated_at.desc(), CartSession.id.desc())
        .first()
    )


def resolve(
    db: Session,
    user_id: int,
    session_key: str,
    merchant_id: Optional[int] = None,
    create: bool = True,
) -> Optional[CartSession]:
    session = find_active(db, user_id, session_key)
    if session is not None:
        if merchant_id is not None and session.merchant_id != merchant_id:
            # a cart bound to another merchant is never handed out
            return None
        return session
    if merchant_id is None or not create:
        return None
    return create_session(db, user_id, session_key, merchant_id)


def create_session(db: Session, user_id: int, session_key: str, merchant_id: int) -> CartSession:
    merchant = (
        db.query(Merchant)
        .filter(Merchant.id == merchant_id, Merchant.is_active == True)
        .first()
    )
    if not merchant:
        raise NotFoundError("Merchant not found or inactive")

    # keeps the one-active-cart-per-key index satisfied, expired rows included
    abandoned = (
        db.query(CartSession)
        .filter(
            CartSession.user_id == user_id,
            CartSession.session_key == session_key,
            CartSession.status == CART_STATUS_ACTIVE,
        )
        .update({CartSession.status: CART_STATUS_ABANDONED}, synchronize_session="fetch")
    )
    if abandoned:
        logger.info("Abandoned %s previous cart session(s) for user %s", abandoned, user_id)

    now = datetime.utcnow()
    session = CartSession(
        uuid=uuid.uuid4().hex,
        user_id=user_id,
        merchant_id=merchant.id,
        session_key=session_key,
        status=CART_STATUS_ACTIVE,
        expires_at=now + CART_SESSION_TTL,
        created_at=now,
        updated_at=now,
    )
    db.add(session)
    db.flush()
    logger.info("Created cart session %s for user %s at merchant %s", session.uuid, user_id, merchant.id)
    return session


def touch(session: CartSession) -> None:
    session.updated_at = datetime.utcnow()
