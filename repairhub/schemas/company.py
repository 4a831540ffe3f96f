from datetime import date, datetime, timezone
from enum import Enum
from typing import Optional
import re

from pydantic import BaseModel, EmailStr, Field, field_validator

from repairhub.utils.validators import validate_local_phone, not_blank

IBAN_RE     = re.compile(r"^[A-Z0-9]{15,34}$")
SWIFT_RE    = re.compile(r"^[A-Z]{4}[A-Z]{2}[A-Z0-9]{2}([A-Z0-9]{3})?$")
OWNER_ID_RE = re.compile(r"^[0-9]{8,15}$")


class CurrencyType(str, Enum):
    AED    = "AED"
    USD    = "USD"
    EUR    = "EUR"
    GBP    = "GBP"
    OTHERS = "Others"


class LicenseType(str, Enum):
    COMMERCIAL = "Commercial"
    INDUSTRIAL = "Industrial"
    SERVICE    = "Service"
    OTHER      = "Other"


# ─── Profile detail records ───────────────────────────────────────────────────
class BankDetails(BaseModel):
    bankName:     str
    branchName:   Optional[str] = None
    address:      Optional[str] = None
    accountName:  str
    currencyType: CurrencyType = CurrencyType.AED
    iban:         str
    swiftCode:    str

    @field_validator("bankName", "accountName")
    @classmethod
    def not_empty(cls, v): return not_blank(v)

    @field_validator("iban")
    @classmethod
    def check_iban(cls, v):
        v = v.strip()
        if not IBAN_RE.match(v): raise ValueError(f"{v} is not a valid IBAN!")
        return v

    @field_validator("swiftCode")
    @classmethod
    def check_swift(cls, v):
        v = v.strip()
        if not SWIFT_RE.match(v): raise ValueError(f"{v} is not a valid SWIFT code!")
        return v


class LicenseDetails(BaseModel):
    companyFullName:      str
    companyLicenseNumber: str
    licenseType:          LicenseType
    issuingAuthority:     str
    TRN:                  str
    creationDate:         date
    expiryDate:           date

    @field_validator("companyFullName", "companyLicenseNumber", "issuingAuthority", "TRN")
    @classmethod
    def not_empty(cls, v): return not_blank(v)

    @field_validator("creationDate")
    @classmethod
    def not_in_future(cls, v):
        if v > datetime.now(timezone.utc).date():
            raise ValueError("License creation date cannot be in the future!")
        return v

    @field_validator("expiryDate")
    @classmethod
    def not_expired(cls, v):
        if v <= datetime.now(timezone.utc).date():
            raise ValueError("License has already expired!")
        return v


class OwnerDetails(BaseModel):
    ownerFullName:       str
    ownerIdNumber:       str
    ownerPassportNumber: Optional[str] = None
    ownerAddress:        Optional[str] = None
    ownerPhone:          str
    ownerEmail:          EmailStr

    @field_validator("ownerFullName")
    @classmethod
    def not_empty(cls, v): return not_blank(v, "Owner name")

    @field_validator("ownerIdNumber")
    @classmethod
    def check_id(cls, v):
        if not OWNER_ID_RE.match(v): raise ValueError(f"{v} is not a valid ID number!")
        return v

    @field_validator("ownerPhone")
    @classmethod
    def check_phone(cls, v): return validate_local_phone(v)


# ─── Requests ─────────────────────────────────────────────────────────────────
class CompanyCreateRequest(BaseModel):
    companyName:  str
    contactEmail: EmailStr
    truckOwnerId: Optional[int] = None

    @field_validator("companyName")
    @classmethod
    def check_name(cls, v): return not_blank(v, "Company name")

    @field_validator("contactEmail")
    @classmethod
    def lower_email(cls, v): return v.lower()


class CompleteProfileRequest(BaseModel):
    """
    `bankDetails` omitted (None) keeps what is stored; an explicit `[]`
    clears it and regresses a complete profile to basic.
    """
    bankDetails:    Optional[list[BankDetails]] = None
    licenseDetails: list[LicenseDetails] = Field(min_length=1)
    ownerDetails:   list[OwnerDetails]   = Field(min_length=1)


class CompanyUpdateRequest(BaseModel):
    companyName:  Optional[str] = None
    contactEmail: Optional[EmailStr] = None

    @field_validator("companyName")
    @classmethod
    def check_name(cls, v):
        if v is not None and not v.strip(): raise ValueError("Company name cannot be empty")
        return v.strip() if v else v

    @field_validator("contactEmail")
    @classmethod
    def lower_email(cls, v): return v.lower() if v else v


class AddAssociationsRequest(BaseModel):
    drivers:          list[int] = []
    associatedTrucks: list[int] = []
