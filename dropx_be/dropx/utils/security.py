from datetime import datetime, timedelta, timezone
from typing import Optional
from fastapi import Depends
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from passlib.context import CryptContext
from sqlalchemy.orm import Session
import logging
import uuid

from jose import jwt, JWTError

from dropx.config import get_settings
from dropx.models.user import TokenBlacklist, get_db
from dropx.utils.errors import AuthError

logger = logging.getLogger(__name__)

settings = get_settings()
SECRET_KEY = settings.SECRET_KEY
ALGORITHM = settings.ALGORITHM
ACCESS_TOKEN_EXPIRE_MINUTES = settings.ACCESS_TOKEN_EXPIRE_MINUTES

http_bearer = HTTPBearer(auto_error=False)
_pwd_context = CryptContext(schemes=["pbkdf2_sha256"], deprecated="auto")


def hash_password(password: str) -> str:
    return _pwd_context.hash(password)


def verify_password(plain: str, hashed: str) -> bool:
    if not hashed:
        return False
    return _pwd_context.verify(plain, hashed)


# ===== JWT helpers =====
def create_access_token(subject: str, expires_delta: Optional[timedelta] = None) -> str:
    jti = uuid.uuid4().hex
    now = datetime.now(timezone.utc)
    expire = now + (expires_delta or timedelta(minutes=ACCESS_TOKEN_EXPIRE_MINUTES))
    payload = {"sub": str(subject), "exp": expire, "iat": now, "nbf": now, "jti": jti}
    token = jwt.encode(payload, SECRET_KEY, algorithm=ALGORITHM)
    return token


def decode_access_token(token: str) -> dict:
    try:
        return jwt.decode(token, SECRET_KEY, algorithms=[ALGORITHM])
    except JWTError:
        raise AuthError("Invalid or expired token")


def is_token_blacklisted(db: Session, jti: str) -> bool:
    return db.query(TokenBlacklist).filter(TokenBlacklist.jti == jti).first() is not None


def blacklist_token(db: Session, jti: str) -> None:
    if not is_token_blacklisted(db, jti):
        db.add(TokenBlacklist(jti=jti))
        db.commit()


def get_current_user_id(
    token: HTTPAuthorizationCredentials = Depends(http_bearer),
    db: Session = Depends(get_db),
) -> int:
    """Resolve the authenticated user id from the bearer token or fail with 401."""
    if not token or not token.credentials:
        raise AuthError("Authentication required")
    payload = decode_access_token(token.credentials)
    jti = payload.get("jti")
    if not jti or is_token_blacklisted(db, jti):
        raise AuthError("Token revoked")
    sub = payload.get("sub")
    try:
        return int(sub)
    except (TypeError, ValueError):
        raise AuthError("Invalid token payload")
