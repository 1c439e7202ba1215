import hashlib
import hmac
import secrets
from datetime import datetime, timedelta, timezone

from tifpoint.core.config import settings


def generate_reset_token() -> str:
    # 32 random bytes, hex encoded; only the raw value is sent to the user
    return secrets.token_hex(32)


def hash_token(token: str) -> str:
    # Store only hash in DB
    return hashlib.sha256(token.encode("utf-8")).hexdigest()


def reset_expiry_dt(now: datetime | None = None) -> datetime:
    now = now or datetime.now(timezone.utc)
    return now + timedelta(minutes=settings.RESET_TOKEN_EXPIRE_MINUTES)


def constant_time_equals(a: str, b: str) -> bool:
    return hmac.compare_digest(a, b)


def is_reset_token_valid(
    token: str,
    stored_hash: str | None,
    expires_at: datetime | None,
    now: datetime | None = None,
) -> bool:
    """
    True when `token` hashes to `stored_hash` and `expires_at` is still in the future.
    Naive datetimes (SQLite drops tzinfo) are treated as UTC.
    """
    if not token or not stored_hash or expires_at is None:
        return False

    now = now or datetime.now(timezone.utc)
    if expires_at.tzinfo is None:
        expires_at = expires_at.replace(tzinfo=timezone.utc)
    if expires_at <= now:
        return False

    return constant_time_equals(hash_token(token), stored_hash)
