from fastapi import APIRouter, Depends, status
from sqlmodel import Session

from taskboard.api.deps import get_app_settings, get_mailer
from taskboard.core.config import Settings
from taskboard.db.session import get_session
from taskboard.schemas.user import (
    ForgotPasswordRequest,
    LoginResponse,
    MessageResponse,
    RegisterResponse,
    ResetPasswordRequest,
    UserCreate,
    UserLogin,
    UserRead,
    UserSummary,
)
from taskboard.services import credentials
from taskboard.services.mailer import Mailer

router = APIRouter()


@router.post("/register", response_model=RegisterResponse, status_code=status.HTTP_201_CREATED)
def register(user_create: UserCreate, session: Session = Depends(get_session)):
    user = credentials.register_user(
        session, user_create.username, user_create.email, user_create.password
    )
    return RegisterResponse(
        message="Registration successful",
        user=UserRead(id=user.id, username=user.username, email=user.email),
    )


@router.post("/login", response_model=LoginResponse)
def login(
    user_credentials: UserLogin,
    session: Session = Depends(get_session),
    settings: Settings = Depends(get_app_settings),
):
    token, user = credentials.authenticate_user(
        session, user_credentials.username, user_credentials.password, settings
    )
    return LoginResponse(token=token, user=UserSummary(id=user.id, username=user.username))


@router.post("/forgot-password", response_model=MessageResponse)
def forgot_password(
    body: ForgotPasswordRequest,
    session: Session = Depends(get_session),
    settings: Settings = Depends(get_app_settings),
    mailer: Mailer = Depends(get_mailer),
):
    message = credentials.request_password_reset(session, body.email, settings, mailer)
    return MessageResponse(message=message)


@router.put("/reset-password", response_model=MessageResponse)
def reset_password(
    body: ResetPasswordRequest,
    session: Session = Depends(get_session),
    settings: Settings = Depends(get_app_settings),
):
    credentials.complete_password_reset(session, body.token, body.newPassword, settings)
    return MessageResponse(message="Password has been reset")
