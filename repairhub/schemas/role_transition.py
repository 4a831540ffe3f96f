"""
Role-transition request variants.

One model per target role, each carrying exactly the fields that role needs.
`RoleTransitionRequest` is a union discriminated on `role`, so a payload is
fully typed before anything is written.
"""
from typing import Annotated, Literal, Optional, Union

from pydantic import BaseModel, Field, TypeAdapter, field_validator

from repairhub.utils.validators import normalize_phone_number, validate_license_plate, not_blank


# ─── Nested ───────────────────────────────────────────────────────────────────
class DriverInfo(BaseModel):
    name:         str
    phoneNumber:  str
    idNumber:     Optional[str] = None
    licensePlate: Optional[str] = None

    @field_validator("name")
    @classmethod
    def check_name(cls, v): return not_blank(v, "Driver name")

    @field_validator("phoneNumber")
    @classmethod
    def check_phone(cls, v): return normalize_phone_number(v)

    @field_validator("licensePlate")
    @classmethod
    def check_plate(cls, v):
        return validate_license_plate(v) if v else None


class ExternalCompanyInfo(BaseModel):
    companyName:   str
    contactPerson: str
    contactPhone:  Optional[str] = None

    @field_validator("companyName")
    @classmethod
    def check_company(cls, v): return not_blank(v, "Company name")

    @field_validator("contactPerson")
    @classmethod
    def check_contact(cls, v): return not_blank(v, "Contact person")


# ─── Variants ─────────────────────────────────────────────────────────────────
class CompanyTransition(BaseModel):
    role:        Literal["company"]
    companyName: Optional[str] = None

    @field_validator("companyName")
    @classmethod
    def strip_name(cls, v):
        return v.strip() or None if v is not None else None


class CompanyDriverTransition(BaseModel):
    role:       Literal["company_driver"]
    companyId:  Union[int, str]
    driverInfo: DriverInfo


class UnregisteredDriverTransition(BaseModel):
    role:           Literal["unregistered_driver"]
    driverInfo:     DriverInfo
    companyDetails: ExternalCompanyInfo


class TruckOwnerTransition(BaseModel):
    role:         Literal["truck_owner"]
    licensePlate: str
    brand:        str

    @field_validator("licensePlate")
    @classmethod
    def check_plate(cls, v): return validate_license_plate(v)

    @field_validator("brand")
    @classmethod
    def check_brand(cls, v): return not_blank(v, "Brand")


RoleTransitionRequest = Annotated[
    Union[CompanyTransition, CompanyDriverTransition, UnregisteredDriverTransition, TruckOwnerTransition],
    Field(discriminator="role"),
]

role_transition_adapter = TypeAdapter(RoleTransitionRequest)
