from fastapi import APIRouter, Depends, File, UploadFile
from sqlalchemy.orm import Session
import logging

from dropx.models.user import User, get_db
from dropx.schemas.user import ProfileUpdate, ProfileOut, PasswordChange
from dropx.utils.errors import AuthError, ConflictError, NotFoundError, ValidationError
from dropx.utils.responses import ok
from dropx.utils.security import get_current_user_id, hash_password, verify_password
from dropx.utils.storage import (
    AVATAR_CONTENT_TYPES,
    AVATAR_MAX_BYTES,
    delete_media_file,
    resolve_image_url,
    save_upload_file,
    upload_size,
)

logger = logging.getLogger(__name__)

router = APIRouter()


def _load_user(db: Session, user_id: int) -> User:
    user = db.query(User).filter(User.id == user_id).first()
    if not user:
        raise NotFoundError("User not found")
    return user


def _to_out(user: User) -> ProfileOut:
    return ProfileOut(
        id=user.id,
        fullName=user.full_name,
        email=user.email,
        phone=user.phone,
        avatarUrl=resolve_image_url(user.avatar_url, "avatars") or None,
        createdAt=user.created_at.isoformat() if user.created_at else None,
    )


@router.get("")
def get_profile(user_id: int = Depends(get_current_user_id), db: Session = Depends(get_db)):
    user = _load_user(db, user_id)
    return ok(_to_out(user), "Profile retrieved")


@router.put("")
def update_profile(payload: ProfileUpdate, user_id: int = Depends(get_current_user_id), db: Session = Depends(get_db)):
    user = _load_user(db, user_id)

    email = payload.email.lower() if payload.email is not None else None
    phone = payload.phone.strip() if payload.phone is not None else None

    # email and phone stay unique across accounts
    if email and email != user.email:
        if db.query(User).filter(User.email == email, User.id != user.id).first():
            raise ConflictError("Email or phone already in use")
        user.email = email
    if phone and phone != user.phone:
        if db.query(User).filter(User.phone == phone, User.id != user.id).first():
            raise ConflictError("Email or phone already in use")
        user.phone = phone
    if payload.fullName is not None:
        user.full_name = payload.fullName.strip()

    db.commit()
    db.refresh(user)
    return ok(_to_out(user), "Profile updated")


@router.put("/password")
def change_password(payload: PasswordChange, user_id: int = Depends(get_current_user_id), db: Session = Depends(get_db)):
    user = _load_user(db, user_id)
    if payload.newPassword != payload.confirmPassword:
        raise ValidationError("New passwords do not match")
    if len(payload.newPassword) < 6:
        raise ValidationError("Password must be at least 6 characters")
    if not verify_password(payload.currentPassword, user.password):
        raise AuthError("Current password is incorrect")
    user.password = hash_password(payload.newPassword)
    db.commit()
    logger.info("Password changed for user %s", user.id)
    return ok(None, "Password updated")


@router.post("/avatar")
def upload_avatar(
    avatar: UploadFile = File(...),
    user_id: int = Depends(get_current_user_id),
    db: Session = Depends(get_db),
):
    user = _load_user(db, user_id)
    content_type = (avatar.content_type or "").split(";")[0].strip()
    if content_type not in AVATAR_CONTENT_TYPES:
        raise ValidationError("Only JPEG, PNG, GIF, and WebP images are allowed")
    if upload_size(avatar) > AVATAR_MAX_BYTES:
        raise ValidationError("File size must be less than 5MB")

    old_url = user.avatar_url
    user.avatar_url = save_upload_file(avatar, subdir="avatars")
    db.commit()
    delete_media_file(old_url)
    db.refresh(user)
    return ok(_to_out(user), "Avatar uploaded")


@router.delete("/avatar")
def remove_avatar(user_id: int = Depends(get_current_user_id), db: Session = Depends(get_db)):
    user = _load_user(db, user_id)
    old_url = user.avatar_url
    user.avatar_url = None
    db.commit()
    delete_media_file(old_url)
    db.refresh(user)
    return ok(_to_out(user), "Avatar removed")
