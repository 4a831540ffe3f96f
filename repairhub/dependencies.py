from fastapi import Depends, Request
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlalchemy.orm import Session

from repairhub.config import settings
from repairhub.database import get_db
from repairhub.models.company import Company, ProfileStatus
from repairhub.models.role import UserRole
from repairhub.models.user import User
from repairhub.schemas.caller import CallerContext
from repairhub.services.company_service import missing_profile_fields
from repairhub.utils.security import verify_access_token
from repairhub.utils.exceptions import (
    UnauthorizedException,
    ForbiddenException,
    AccountInactiveException,
    NotFoundException,
    ProfileIncompleteException,
)

# Bearer token extractor
bearer_scheme = HTTPBearer(auto_error=False)

COMPLETE_PROFILE_SUFFIX = "/complete-profile"


# ─── Get Current User ─────────────────────────────────────────────────────────
def get_current_user(
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
    db: Session = Depends(get_db),
) -> User:
    """
    Validate JWT Bearer token and return the current User.
    Raises 401 if token is missing, invalid, or expired.
    Raises 403 if account is inactive.
    """
    if not credentials:
        raise UnauthorizedException("No authentication token provided")

    payload = verify_access_token(credentials.credentials)
    user_id: str | None = payload.get("sub")

    if user_id is None:
        raise UnauthorizedException("Invalid token payload")

    user = db.query(User).filter(User.id == int(user_id)).first()
    if not user:
        raise NotFoundException("User")

    if not user.isActive:
        raise AccountInactiveException()

    return user


def get_caller(current_user: User = Depends(get_current_user)) -> CallerContext:
    """Any authenticated account regardless of role."""
    return CallerContext(id=current_user.id, role=current_user.role, companyId=current_user.companyId)


# ─── Role Guards ──────────────────────────────────────────────────────────────
def require_roles(*roles: UserRole):
    """
    Factory that returns a FastAPI dependency requiring one of the given roles.

    Usage:
        @router.delete("/{company_id}")
        def delete_company(caller: CallerContext = Depends(require_roles(UserRole.ADMIN))):
            ...
    """
    def dependency(caller: CallerContext = Depends(get_caller)) -> CallerContext:
        if caller.role not in roles:
            raise ForbiddenException(
                f"This action requires one of these roles: {[r.value for r in roles]}"
            )
        return caller
    return dependency


# ─── Pre-built role dependencies ─────────────────────────────────────────────
get_admin          = require_roles(UserRole.ADMIN)
get_staff          = require_roles(UserRole.ADMIN, UserRole.EMPLOYEE)
get_company_staff  = require_roles(UserRole.ADMIN, UserRole.EMPLOYEE, UserRole.COMPANY)
get_company_admin  = require_roles(UserRole.ADMIN, UserRole.COMPANY)


# ─── Profile Completion Gate ──────────────────────────────────────────────────
def enforce_complete_profile(db: Session, company_id: int | None, path: str) -> Company:
    """
    Resolve the company and refuse to continue while its profile is not complete.
    The completion endpoint itself is always let through.
    """
    company = db.query(Company).filter(Company.id == company_id).first() if company_id else None
    if not company:
        raise NotFoundException("Company")

    if company.profileStatus != ProfileStatus.COMPLETE and not path.rstrip("/").endswith(COMPLETE_PROFILE_SUFFIX):
        raise ProfileIncompleteException(
            company_id=company.id,
            required_fields=missing_profile_fields(company),
            completion_endpoint=f"{settings.API_PREFIX}/companies/{company.id}{COMPLETE_PROFILE_SUFFIX}",
        )
    return company


def require_own_company(
    company_id: int,
    caller: CallerContext = Depends(get_caller),
) -> CallerContext:
    """A company account may only address its own `{company_id}`."""
    if caller.role == UserRole.COMPANY and caller.companyId != company_id:
        raise ForbiddenException("You can only manage your own company")
    return caller


def require_complete_profile(
    company_id: int,
    request: Request,
    caller: CallerContext = Depends(get_caller),
    db: Session = Depends(get_db),
) -> Company:
    """
    Gate for company-scoped routes with a `{company_id}` path parameter.
    A company account is always checked against its own company.
    """
    target = caller.companyId if caller.role == UserRole.COMPANY else company_id
    return enforce_complete_profile(db, target, request.url.path)


def gate_company_caller(
    request: Request,
    caller: CallerContext = Depends(get_caller),
    db: Session = Depends(get_db),
) -> Company | None:
    """Gate for create routes: only company accounts are held to a complete profile."""
    if caller.role != UserRole.COMPANY:
        return None
    return enforce_complete_profile(db, caller.companyId, request.url.path)
