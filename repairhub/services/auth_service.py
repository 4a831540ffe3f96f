from datetime import datetime, timezone

from sqlalchemy.orm import Session

from repairhub.config import settings
from repairhub.models.role import UserRole
from repairhub.models.user import User
from repairhub.schemas.auth import (
    LoginRequest, RegisterRequest, ForgotPasswordRequest, ResetPasswordRequest,
)
from repairhub.services.user_service import serialize_user
from repairhub.utils.security import (
    verify_password, hash_password, create_access_token,
    generate_reset_code, reset_code_expiry,
)
from repairhub.utils.email import send_reset_code_email
from repairhub.utils.audit import log_action
from repairhub.utils.exceptions import (
    UnauthorizedException, AccountInactiveException,
    DuplicateEntryException, ResetCodeInvalidException,
)


class AuthService:

    # ─── Register ─────────────────────────────────────────────────────────────
    def register(self, db: Session, data: RegisterRequest) -> dict:
        if db.query(User).filter(User.email == data.email).first():
            raise DuplicateEntryException("Email already registered", field="email")
        if db.query(User).filter(User.phone == data.phone).first():
            raise DuplicateEntryException("Phone number already registered", field="phone")

        user = User(
            name=data.name,
            email=data.email,
            phone=data.phone,
            password=hash_password(data.password),
            role=UserRole.GENERAL,
            isActive=True,
        )
        db.add(user)
        db.flush()  # Get user.id without committing

        log_action(db, user.id, "REGISTER", "User", user.id, f"New account registered: {user.email}")
        db.commit()
        db.refresh(user)
        return self._token_payload(user)

    # ─── Login ────────────────────────────────────────────────────────────────
    def login(self, db: Session, data: LoginRequest) -> dict:
        user = db.query(User).filter(User.email == data.email).first()

        if not user or not verify_password(data.password, user.password):
            raise UnauthorizedException("Invalid email or password")

        if not user.isActive:
            raise AccountInactiveException()

        log_action(db, user.id, "LOGIN", "User", user.id, f"{user.email} logged in")
        db.commit()
        return self._token_payload(user)

    # ─── Forgot Password ──────────────────────────────────────────────────────
    def forgot_password(self, db: Session, data: ForgotPasswordRequest) -> None:
        """
        Always returns success (HTTP 200) to prevent email enumeration.
        The reset code is only issued if the email actually exists.
        """
        user = db.query(User).filter(User.email == data.email).first()
        if not user or not user.isActive:
            return  # Silent - don't reveal whether email exists

        code = generate_reset_code(settings.RESET_CODE_LENGTH)
        user.resetCode        = hash_password(code)
        user.resetCodeExpires = reset_code_expiry()
        log_action(db, user.id, "PASSWORD_RESET_REQUEST", "User", user.id, "Reset code issued")
        db.commit()

        send_reset_code_email(user.email, user.name, code)

    # ─── Reset Password ───────────────────────────────────────────────────────
    def reset_password(self, db: Session, data: ResetPasswordRequest) -> None:
        user = db.query(User).filter(User.email == data.email).first()
        if not user or not user.resetCode or not user.resetCodeExpires:
            raise ResetCodeInvalidException()

        expires = user.resetCodeExpires
        if expires.tzinfo is None:
            expires = expires.replace(tzinfo=timezone.utc)
        if expires < datetime.now(timezone.utc) or not verify_password(data.resetCode, user.resetCode):
            raise ResetCodeInvalidException()

        user.password         = hash_password(data.newPassword)
        user.resetCode        = None
        user.resetCodeExpires = None
        log_action(db, user.id, "PASSWORD_RESET", "User", user.id, "Password reset with code")
        db.commit()

    # ─── Helpers ──────────────────────────────────────────────────────────────
    @staticmethod
    def _token_payload(user: User) -> dict:
        return {
            "accessToken": create_access_token(user.id, user.role.value, user.email),
            "tokenType":   "Bearer",
            "expiresIn":   settings.ACCESS_TOKEN_EXPIRE_MINUTES * 60,
            "user":        serialize_user(user),
        }


auth_service = AuthService()
