import os
from functools import lru_cache

# Prefer loading environment variables from a .env file if python-dotenv is available
from dotenv import load_dotenv, find_dotenv

_env_path = find_dotenv(usecwd=True)
if _env_path:
    load_dotenv(_env_path, override=False)


class Settings:
    DATABASE_URL: str = os.getenv("DATABASE_URL")
    SECRET_KEY: str = os.getenv("SECRET_KEY", "change_me_secret")
    ALGORITHM: str = os.getenv("ALGORITHM", "HS256")
    # Default to 7 days so users stay logged in for a week
    ACCESS_TOKEN_EXPIRE_MINUTES: int = int(os.getenv("ACCESS_TOKEN_EXPIRE_MINUTES", str(7 * 24 * 60)))
    # Public origin used to build absolute image URLs for relative file names
    BASE_URL: str = os.getenv("BASE_URL", "http://localhost:8000")
    CART_SESSION_HEADER: str = os.getenv("CART_SESSION_HEADER", "X-Cart-Session")
    CART_SESSION_COOKIE: str = os.getenv("CART_SESSION_COOKIE", "cart_session")
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO").upper()


@lru_cache
def get_settings():
    return Settings()
