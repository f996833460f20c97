from fastapi import APIRouter, Depends
from fastapi.security import HTTPAuthorizationCredentials
from sqlalchemy.orm import Session
import logging

from dropx.config import get_settings
from dropx.models.user import User, get_db
from dropx.schemas.user import RegisterSchema, LoginSchema
from dropx.utils.errors import AuthError, ConflictError
from dropx.utils.responses import ok
from dropx.utils.security import (
    blacklist_token,
    create_access_token,
    decode_access_token,
    hash_password,
    http_bearer,
    verify_password,
)

logger = logging.getLogger(__name__)

router = APIRouter()


def _token_payload(user: User) -> dict:
    return {
        "access_token": create_access_token(subject=user.id),
        "token_type": "bearer",
        "expires_in_minutes": get_settings().ACCESS_TOKEN_EXPIRE_MINUTES,
        "user": {"id": user.id, "fullName": user.full_name, "email": user.email},
    }


@router.post("/register")
def register(payload: RegisterSchema, db: Session = Depends(get_db)):
    email = payload.email.lower()
    phone = (payload.phone or "").strip() or None
    existing = db.query(User).filter(User.email == email).first()
    if not existing and phone:
        existing = db.query(User).filter(User.phone == phone).first()
    if existing:
        raise ConflictError("User already exists with this email or phone")
    user = User(
        full_name=payload.fullName.strip(),
        email=email,
        phone=phone,
        password=hash_password(payload.password),
    )
    db.add(user)
    db.commit()
    db.refresh(user)
    logger.info("Registered user %s", user.id)
    return ok(_token_payload(user), "Registration successful")


@router.post("/login")
def login(credentials: LoginSchema, db: Session = Depends(get_db)):
    user = db.query(User).filter(User.email == credentials.email.lower()).first()
    if not user or not verify_password(credentials.password, user.password):
        raise AuthError("Invalid email or password")
    return ok(_token_payload(user), "Login successful")


@router.post("/logout")
def logout(creds: HTTPAuthorizationCredentials = Depends(http_bearer), db: Session = Depends(get_db)):
    if not creds or not creds.credentials:
        raise AuthError("Not authenticated")
    try:
        payload = decode_access_token(creds.credentials)
    except AuthError:
        # Even if token invalid, respond 200 to avoid token probing
        return ok(None, "Logged out")
    jti = payload.get("jti")
    if jti:
        blacklist_token(db, jti)
    return ok(None, "Logged out")
