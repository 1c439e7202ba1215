from datetime import datetime, timedelta, timezone
from jose import jwt
from passlib.context import CryptContext
from tifpoint.core.config import settings

# ── Bcrypt Password Hashing ───────────────────────────────────────────
# "deprecated=auto" → old hashes are silently re-hashed on next login
pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")

# Dummy hash verified when no real hash exists, keeps response time
# identical for unknown emails.
_DUMMY_HASH = pwd_context.hash("tifpoint-dummy-password")


def hash_password(plain: str) -> str:
    """
    Hash a plaintext password with bcrypt via passlib.
    bcrypt generates a unique salt, so the same password gives
    a different hash each time.
    """
    return pwd_context.hash(plain)


def verify_password(plain: str, hashed: str | None) -> bool:
    """
    Timing-safe bcrypt comparison via passlib.

    Handles:
      - None hash  (unknown user)
      - Truncated / malformed hash  (passlib raises ValueError)
    In both cases a dummy verify still runs before returning False.
    """
    if not hashed or len(hashed) < 59:
        pwd_context.verify(plain, _DUMMY_HASH)
        return False
    try:
        return pwd_context.verify(plain, hashed)
    except ValueError:
        pwd_context.verify(plain, _DUMMY_HASH)
        return False


# ── JWT Token ─────────────────────────────────────────────────────────
def create_access_token(user_id: int, username: str, email: str, role: str) -> str:
    """
    Creates a signed JWT. Change SECRET_KEY in .env to invalidate all tokens.

    Payload contains:
      sub     : user ID (standard JWT claim)
      username: for frontend display
      email   : for frontend display
      role    : ADMIN or MAHASISWA, checked by the route guards
      type    : guards against using wrong token types
      iat     : issued at
      exp     : expiry (ACCESS_TOKEN_EXPIRE_MINUTES)
    """
    now = datetime.now(timezone.utc)
    payload = {
        "sub":      str(user_id),
        "username": username,
        "email":    email,
        "role":     role,
        "type":     "access",
        "iat":      now,
        "exp":      now + timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES),
    }
    return jwt.encode(payload, settings.SECRET_KEY, algorithm=settings.ALGORITHM)


def decode_access_token(token: str) -> dict:
    """
    Decodes and verifies JWT signature + expiry.
    Raises jose.JWTError on any failure.
    """
    return jwt.decode(token, settings.SECRET_KEY, algorithms=[settings.ALGORITHM])
