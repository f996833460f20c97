from pathlib import Path
import os
import uuid
import shutil
from typing import Optional
from fastapi import UploadFile

from dropx.config import get_settings

BASE_DIR = Path(__file__).resolve().parents[2]
MEDIA_ROOT = Path(os.getenv("MEDIA_ROOT", str(BASE_DIR / "media")))

AVATAR_CONTENT_TYPES = {
    "image/jpeg": ".jpg",
    "image/png": ".png",
    "image/gif": ".gif",
    "image/webp": ".webp",
}
AVATAR_MAX_BYTES = 5 * 1024 * 1024


def _ensure_dir(path: Path) -> None:
    path.mkdir(parents=True, exist_ok=True)


def save_upload_file(upload_file: UploadFile, subdir: str = "avatars") -> str:
    """Save a single UploadFile to media/subdir and return its URL path (/media/subdir/filename)."""
    if not upload_file or not upload_file.filename:
        raise ValueError("No file provided")
    ext = os.path.splitext(upload_file.filename)[1].lower()
    if not ext:
        ext = AVATAR_CONTENT_TYPES.get((upload_file.content_type or "").split(";")[0].strip(), "")
    filename = f"{uuid.uuid4().hex}{ext}"
    dst_dir = MEDIA_ROOT / subdir
    _ensure_dir(dst_dir)
    file_path = dst_dir / filename
    upload_file.file.seek(0)
    with file_path.open("wb") as buffer:
        shutil.copyfileobj(upload_file.file, buffer)
    return f"/media/{subdir}/{filename}"


def upload_size(upload_file: UploadFile) -> int:
    f = upload_file.file
    f.seek(0, os.SEEK_END)
    size = f.tell()
    f.seek(0)
    return size


def delete_media_file(rel_url: Optional[str]) -> bool:
    """Delete a single media file by its stored relative URL (e.g. /media/avatars/<file>). Returns True if removed.

    Only operates inside MEDIA_ROOT; ignores None/empty or non /media/ prefixed inputs.
    """
    if not rel_url or not isinstance(rel_url, str):
        return False
    if not rel_url.startswith('/media/'):
        return False
    parts = rel_url.strip('/').split('/')  # [media, subdir, filename]
    if len(parts) < 3 or '..' in parts:
        return False
    target_path = MEDIA_ROOT / '/'.join(parts[1:])  # skip leading 'media'
    if target_path.is_file():
        target_path.unlink()
        return True
    return False


def resolve_image_url(value: Optional[str], subdir: str) -> str:
    """Absolute URL for a stored image: full URLs pass through, bare file names live under /uploads/<subdir>/."""
    if not value:
        return ""
    if value.startswith("http"):
        return value
    if value.startswith("/media/"):
        return get_settings().BASE_URL.rstrip("/") + value
    return f"{get_settings().BASE_URL.rstrip('/')}/uploads/{subdir}/{value}"
