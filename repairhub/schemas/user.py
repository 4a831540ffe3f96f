from pydantic import BaseModel, EmailStr, Field, field_validator, model_validator
from enum import Enum
from typing import Optional

from repairhub.models.role import UserRole, ADMIN_ASSIGNABLE
from repairhub.schemas.auth import validate_password_strength
from repairhub.utils.validators import normalize_phone_number, validate_license_plate


# ─── Request ──────────────────────────────────────────────────────────────────
class UserCreateRequest(BaseModel):
    """Admin-created account. Role transitions are the only way into the other roles."""
    name:     Optional[str] = None
    email:    EmailStr
    phone:    Optional[str] = None
    password: str
    role:     UserRole = UserRole.GENERAL

    @field_validator("password")
    @classmethod
    def check_password(cls, v): return validate_password_strength(v)

    @field_validator("email")
    @classmethod
    def lower_email(cls, v): return v.lower()

    @field_validator("phone")
    @classmethod
    def check_phone(cls, v):
        return normalize_phone_number(v) if v is not None else v

    @field_validator("role")
    @classmethod
    def check_role(cls, v):
        if v not in ADMIN_ASSIGNABLE:
            raise ValueError(f"Role must be one of: {sorted(r.value for r in ADMIN_ASSIGNABLE)}")
        return v

    @model_validator(mode="after")
    def name_phone_for_non_admin(self) -> "UserCreateRequest":
        if self.role != UserRole.ADMIN:
            if not self.name or not self.name.strip():
                raise ValueError("Name is required for non-admin accounts")
            if not self.phone:
                raise ValueError("Phone is required for non-admin accounts")
        return self


class UserUpdateRequest(BaseModel):
    # role, companyId and truckOwnerId only change through a role transition
    name:         Optional[str] = None
    email:        Optional[EmailStr] = None
    phone:        Optional[str] = None
    licensePlate: Optional[str] = None

    @field_validator("name")
    @classmethod
    def check_name(cls, v):
        if v is not None and not v.strip(): raise ValueError("Name cannot be empty")
        return v.strip() if v else v

    @field_validator("email")
    @classmethod
    def lower_email(cls, v): return v.lower() if v else v

    @field_validator("phone")
    @classmethod
    def check_phone(cls, v):
        return normalize_phone_number(v) if v is not None else v

    @field_validator("licensePlate")
    @classmethod
    def check_plate(cls, v):
        return validate_license_plate(v) if v is not None else v


class BulkOperation(str, Enum):
    ACTIVATE    = "activate"
    DEACTIVATE  = "deactivate"
    DELETE      = "delete"
    UPDATE_ROLE = "updateRole"


class BulkUserData(BaseModel):
    role: Optional[UserRole] = None

    @field_validator("role")
    @classmethod
    def check_role(cls, v):
        if v is not None and v not in ADMIN_ASSIGNABLE:
            raise ValueError(f"Role must be one of: {sorted(r.value for r in ADMIN_ASSIGNABLE)}")
        return v


class BulkUserRequest(BaseModel):
    operation: BulkOperation
    userIds:   list[int] = Field(min_length=1)
    data:      Optional[BulkUserData] = None

    @model_validator(mode="after")
    def role_for_update(self) -> "BulkUserRequest":
        if self.operation == BulkOperation.UPDATE_ROLE and (self.data is None or self.data.role is None):
            raise ValueError("Role is required for role update operation")
        return self
