from sqlmodel import SQLModel
from typing import Optional


# Request bodies keep every field optional so missing input is reported as
# a 400 with a readable message instead of a schema error.
class UserCreate(SQLModel):
    username: Optional[str] = None
    email: Optional[str] = None
    password: Optional[str] = None


class UserLogin(SQLModel):
    # Either the username or the email address
    username: Optional[str] = None
    password: Optional[str] = None


class ForgotPasswordRequest(SQLModel):
    email: Optional[str] = None


class ResetPasswordRequest(SQLModel):
    token: Optional[str] = None
    newPassword: Optional[str] = None


class UserSummary(SQLModel):
    id: int
    username: str


class UserRead(UserSummary):
    email: str


class RegisterResponse(SQLModel):
    message: str
    user: UserRead


class LoginResponse(SQLModel):
    token: str
    user: UserSummary


class MessageResponse(SQLModel):
    message: str
