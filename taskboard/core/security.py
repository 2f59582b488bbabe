import hashlib
from datetime import datetime, timedelta, timezone
from typing import Optional

import jwt
from passlib.context import CryptContext
from passlib.exc import PasswordValueError

from .config import Settings
from .errors import Forbidden, InvalidTokenError, ValidationError

ACCESS_TOKEN_TYPE = "access"
RESET_TOKEN_TYPE = "password_reset"

# Password hashing context
pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")


def verify_password(plain_password: str, hashed_password: str) -> bool:
    try:
        return pwd_context.verify(plain_password, hashed_password)
    except PasswordValueError:
        # bcrypt cannot hash it (e.g. a NUL byte), so it never matched
        return False


def get_password_hash(password: str) -> str:
    """Hash a new password; raises ValidationError when bcrypt rejects it."""
    try:
        return pwd_context.hash(password)
    except PasswordValueError as exc:
        raise ValidationError(f"Password is not allowed: {exc}")


def password_fingerprint(password_hash: str) -> str:
    """Short digest of a stored hash; changes whenever the password does."""
    return hashlib.sha256(password_hash.encode()).hexdigest()[:16]


# JWT token functions
def _encode(data: dict, settings: Settings, expires_delta: timedelta) -> str:
    now = datetime.now(timezone.utc)
    to_encode = data.copy()
    to_encode.update({"iat": now, "exp": now + expires_delta})
    return jwt.encode(to_encode, settings.SECRET_KEY, algorithm=settings.ALGORITHM)


def create_access_token(
    user_id: int, username: str, settings: Settings, expires_delta: Optional[timedelta] = None
) -> str:
    if expires_delta is None:
        expires_delta = timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)
    data = {"sub": str(user_id), "id": user_id, "username": username, "type": ACCESS_TOKEN_TYPE}
    return _encode(data, settings, expires_delta)


def decode_access_token(token: str, settings: Settings) -> dict:
    """Return the claims of a valid access token or raise :class:`Forbidden`."""
    try:
        payload = jwt.decode(token, settings.SECRET_KEY, algorithms=[settings.ALGORITHM])
    except jwt.exceptions.PyJWTError:
        raise Forbidden()

    if payload.get("type") != ACCESS_TOKEN_TYPE or not isinstance(payload.get("id"), int):
        raise Forbidden()
    return payload


def create_reset_token(
    email: str, password_hash: str, settings: Settings, expires_delta: Optional[timedelta] = None
) -> str:
    if expires_delta is None:
        expires_delta = timedelta(minutes=settings.RESET_TOKEN_EXPIRE_MINUTES)
    data = {
        "email": email,
        "fp": password_fingerprint(password_hash),
        "type": RESET_TOKEN_TYPE,
    }
    return _encode(data, settings, expires_delta)


def decode_reset_token(token: str, settings: Settings) -> dict:
    """Return the claims of a valid reset token or raise :class:`InvalidTokenError`.

    The fingerprint claim is not checked here; the caller compares it to the
    account's current hash so a token stops working once it has been used.
    """
    try:
        payload = jwt.decode(token, settings.SECRET_KEY, algorithms=[settings.ALGORITHM])
    except jwt.exceptions.PyJWTError:
        raise InvalidTokenError()

    if payload.get("type") != RESET_TOKEN_TYPE or not payload.get("email") or not payload.get("fp"):
        raise InvalidTokenError()
    return payload
