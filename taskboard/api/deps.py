from typing import Optional

from fastapi import Depends, Request
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlmodel import Session

from taskboard.core.config import Settings
from taskboard.core.errors import Unauthorized
from taskboard.db.session import get_session
from taskboard.models.user import User
from taskboard.services.credentials import verify_token
from taskboard.services.mailer import Mailer

# Missing credentials are reported by get_current_user, not by the scheme
security = HTTPBearer(auto_error=False)


def get_app_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_mailer(request: Request) -> Mailer:
    return request.app.state.mailer


def get_current_user(
    token: Optional[HTTPAuthorizationCredentials] = Depends(security),
    session: Session = Depends(get_session),
    settings: Settings = Depends(get_app_settings),
) -> User:
    if token is None or not token.credentials:
        raise Unauthorized(headers={"WWW-Authenticate": "Bearer"})
    return verify_token(session, token.credentials, settings)
