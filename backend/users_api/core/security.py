from datetime import datetime, timedelta, timezone

import bcrypt
from jose import jwt

from users_api.core.config import Settings

MAX_PASSWORD_BYTES = 72


def password_too_long(raw: str) -> bool:
    # bcrypt solo admite 72 bytes
    return len(raw.encode("utf-8")) > MAX_PASSWORD_BYTES


def hash_password(raw: str, rounds: int = 10) -> str:
    return bcrypt.hashpw(raw.encode("utf-8"), bcrypt.gensalt(rounds=rounds)).decode("utf-8")


def verify_password(raw: str, hashed: str) -> bool:
    if not hashed or not hashed.startswith("$2"):
        return False
    try:
        return bcrypt.checkpw(raw.encode("utf-8"), hashed.encode("utf-8"))
    except ValueError:
        return False


def create_access_token(settings: Settings, *, sub: str) -> str:
    expire = datetime.now(timezone.utc) + timedelta(minutes=settings.access_token_expire_minutes)
    payload = {"sub": sub, "exp": expire}
    return jwt.encode(payload, settings.jwt_secret, algorithm=settings.jwt_algorithm)


def decode_token(settings: Settings, token: str) -> dict:
    return jwt.decode(token, settings.jwt_secret, algorithms=[settings.jwt_algorithm])
