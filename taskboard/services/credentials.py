"""Credential service: registration, login, bearer tokens and password resets."""

import logging
from typing import Optional, Tuple

from sqlalchemy.exc import IntegrityError
from sqlmodel import Session, select, or_

from ..core.config import Settings
from ..core.errors import (
    AuthError, ConflictError, Forbidden, InternalError, InvalidTokenError, ValidationError,
)
from ..core.security import (
    create_access_token,
    create_reset_token,
    decode_access_token,
    decode_reset_token,
    get_password_hash,
    password_fingerprint,
    verify_password,
)
from ..models.user import User
from .mailer import Mailer, MailDeliveryError, reset_password_email

logger = logging.getLogger(__name__)

RESET_REQUESTED_MESSAGE = "If that email is registered, a reset link has been sent to it."


def _clean(value: Optional[str]) -> str:
    return value.strip() if value else ""


def _find_conflict(session: Session, username: str, email: str) -> Optional[ConflictError]:
    if session.exec(select(User).where(User.username == username)).first():
        return ConflictError("Username already exists", field="username")
    if session.exec(select(User).where(User.email == email)).first():
        return ConflictError("Email already exists", field="email")
    return None


def register_user(session: Session, username: Optional[str], email: Optional[str],
                  password: Optional[str]) -> User:
    username, email = _clean(username), _clean(email)
    if not username or not email or not password:
        raise ValidationError("Username, email and password are required")

    conflict = _find_conflict(session, username, email)
    if conflict:
        raise conflict

    user = User(username=username, email=email, password_hash=get_password_hash(password))
    session.add(user)
    try:
        session.commit()
    except IntegrityError:
        # Lost a race with a concurrent registration
        session.rollback()
        raise _find_conflict(session, username, email) or ConflictError()
    session.refresh(user)
    logger.info("Registered user %s (id=%s)", user.username, user.id)
    return user


def authenticate_user(session: Session, identifier: Optional[str], password: Optional[str],
                      settings: Settings) -> Tuple[str, User]:
    """Check credentials and return a fresh access token with its user."""
    identifier = _clean(identifier)
    if not identifier or not password:
        raise ValidationError("Username and password are required")

    statement = select(User).where(or_(User.username == identifier, User.email == identifier))
    user = session.exec(statement).first()
    if user is None:
        logger.info("Login failed: no user matches %r", identifier)
        raise AuthError("User not found")

    if not verify_password(password, user.password_hash):
        logger.info("Login failed: wrong password for user id=%s", user.id)
        raise AuthError("Incorrect password")

    token = create_access_token(user.id, user.username, settings)
    return token, user


def verify_token(session: Session, token: str, settings: Settings) -> User:
    """Resolve a bearer token to its user. Raises Forbidden when it does not verify."""
    payload = decode_access_token(token, settings)
    user = session.get(User, payload["id"])
    if user is None:
        raise Forbidden()
    return user


def request_password_reset(session: Session, email: Optional[str], settings: Settings,
                           mailer: Mailer) -> str:
    email = _clean(email)
    if not email:
        raise ValidationError("Email is required")

    user = session.exec(select(User).where(User.email == email)).first()
    if user is not None:
        token = create_reset_token(user.email, user.password_hash, settings)
        link = f"{settings.FRONTEND_URL.rstrip('/')}/reset-password?token={token}"
        html = reset_password_email(link, settings.RESET_TOKEN_EXPIRE_MINUTES)
        try:
            mailer.send(user.email, f"Reset Password - {settings.PROJECT_NAME}", html)
        except MailDeliveryError as exc:
            logger.error("Could not send reset email for user id=%s: %s", user.id, exc)
            raise InternalError("Failed to send the reset email")
        logger.info("Password reset link sent for user id=%s", user.id)

    return RESET_REQUESTED_MESSAGE


def complete_password_reset(session: Session, token: Optional[str], new_password: Optional[str],
                            settings: Settings) -> None:
    if not token or not new_password:
        raise ValidationError("Token and new password are required")

    payload = decode_reset_token(token, settings)
    user = session.exec(select(User).where(User.email == payload["email"])).first()
    # A used token no longer matches the account's current hash
    if user is None or payload["fp"] != password_fingerprint(user.password_hash):
        raise InvalidTokenError()

    user.password_hash = get_password_hash(new_password)
    session.add(user)
    session.commit()
    logger.info("Password reset completed for user id=%s", user.id)
