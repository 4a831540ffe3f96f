from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from repairhub.database import get_db
from repairhub.dependencies import get_current_user
from repairhub.models.user import User
from repairhub.schemas.auth import (
    LoginRequest, RegisterRequest, ForgotPasswordRequest, ResetPasswordRequest,
)
from repairhub.schemas.common import success_response
from repairhub.services.auth_service import auth_service
from repairhub.services.user_service import serialize_user

router = APIRouter(prefix="/auth")


# ─── POST /auth/register ──────────────────────────────────────────────────────
@router.post(
    "/register",
    status_code=status.HTTP_201_CREATED,
    summary="Register a new account",
)
def register(data: RegisterRequest, db: Session = Depends(get_db)):
    """
    Register a new account with role `general`.
    - Email and phone must be unique.
    - Password minimum 8 characters, 1 uppercase, 1 number.
    """
    return success_response("Registration successful", auth_service.register(db, data))


# ─── POST /auth/login ─────────────────────────────────────────────────────────
@router.post("/login", status_code=status.HTTP_200_OK, summary="Login and receive an access token")
def login(data: LoginRequest, db: Session = Depends(get_db)):
    return success_response("Login successful", auth_service.login(db, data))


# ─── GET /auth/me ─────────────────────────────────────────────────────────────
@router.get("/me", status_code=status.HTTP_200_OK, summary="Get the authenticated account")
def me(current_user: User = Depends(get_current_user)):
    return success_response("Profile retrieved", serialize_user(current_user))


# ─── POST /auth/password-reset/request ────────────────────────────────────────
@router.post("/password-reset/request", status_code=status.HTTP_200_OK, summary="Request a password reset code")
def request_reset_code(data: ForgotPasswordRequest, db: Session = Depends(get_db)):
    """
    Sends a 6-digit code valid for 5 minutes.
    Always returns 200 to prevent email enumeration.
    """
    auth_service.forgot_password(db, data)
    return success_response("If that email is registered, a reset code has been sent.")


# ─── POST /auth/password-reset/verify ─────────────────────────────────────────
@router.post("/password-reset/verify", status_code=status.HTTP_200_OK, summary="Reset password with a code")
def reset_password(data: ResetPasswordRequest, db: Session = Depends(get_db)):
    auth_service.reset_password(db, data)
    return success_response("Password reset successful. Please log in with your new password.")
