from datetime import date, datetime, timezone
from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field, field_validator, model_validator

from repairhub.schemas.role_transition import ExternalCompanyInfo
from repairhub.utils.validators import normalize_phone_number, validate_license_plate, not_blank


class Relationship(str, Enum):
    SPOUSE  = "spouse"
    PARENT  = "parent"
    SIBLING = "sibling"
    CHILD   = "child"
    FRIEND  = "friend"
    OTHER   = "other"


class DriverLicenseType(str, Enum):
    LIGHT      = "light"
    HEAVY      = "heavy"
    COMMERCIAL = "commercial"


class EmergencyContact(BaseModel):
    name:         str
    phone:        str
    relationship: Relationship

    @field_validator("name")
    @classmethod
    def check_name(cls, v): return not_blank(v, "Emergency contact name")

    @field_validator("phone")
    @classmethod
    def check_phone(cls, v): return normalize_phone_number(v)


class LicenseInfo(BaseModel):
    licenseNumber: str
    licenseExpiry: date
    licenseType:   DriverLicenseType

    @field_validator("licenseExpiry")
    @classmethod
    def in_future(cls, v):
        if v <= datetime.now(timezone.utc).date():
            raise ValueError("License expiry date must be in the future.")
        return v


# ─── Requests ─────────────────────────────────────────────────────────────────
class DriverCreateRequest(BaseModel):
    driverName:             str = Field(min_length=2, max_length=50)
    driverPhone:            str
    driverIdNumber:         str
    licensePlate:           str
    truckNumber:            str
    emergencyContact:       EmergencyContact
    licenseInfo:            LicenseInfo
    associatedCompany:      Optional[int] = None
    externalCompanyDetails: Optional[ExternalCompanyInfo] = None

    @field_validator("driverName")
    @classmethod
    def check_name(cls, v): return not_blank(v, "Driver name")

    @field_validator("driverPhone")
    @classmethod
    def check_phone(cls, v): return normalize_phone_number(v)

    @field_validator("driverIdNumber", "truckNumber")
    @classmethod
    def not_empty(cls, v): return not_blank(v)

    @field_validator("licensePlate")
    @classmethod
    def check_plate(cls, v): return validate_license_plate(v)

    @model_validator(mode="after")
    def one_employer(self) -> "DriverCreateRequest":
        if (self.associatedCompany is None) == (self.externalCompanyDetails is None):
            raise ValueError("Provide exactly one of associatedCompany or externalCompanyDetails")
        return self


class DriverUpdateRequest(BaseModel):
    driverName:             Optional[str] = Field(None, min_length=2, max_length=50)
    driverPhone:            Optional[str] = None
    licensePlate:           Optional[str] = None
    truckNumber:            Optional[str] = None
    emergencyContact:       Optional[EmergencyContact] = None
    externalCompanyDetails: Optional[ExternalCompanyInfo] = None
    isActive:               Optional[bool] = None
    rating:                 Optional[int] = Field(None, ge=1, le=5)

    @field_validator("driverPhone")
    @classmethod
    def check_phone(cls, v):
        return normalize_phone_number(v) if v is not None else v

    @field_validator("licensePlate")
    @classmethod
    def check_plate(cls, v):
        return validate_license_plate(v) if v is not None else v
