from typing import Optional

from pydantic import BaseModel, Field, field_validator, model_validator

from repairhub.models.job_card import JobCardStatus
from repairhub.utils.validators import validate_local_phone, not_blank


class RepairLineItem(BaseModel):
    partName:  str
    partCost:  float = Field(ge=0)
    repairFee: float = Field(ge=0)

    @field_validator("partName")
    @classmethod
    def check_name(cls, v): return not_blank(v, "Part name")


def check_driver_company_fields(name, phone, company_id) -> None:
    """driverName, driverPhone and companyId go together: all three or none."""
    given = [f is not None for f in (name, phone, company_id)]
    if any(given) and not all(given):
        raise ValueError("driverName, driverPhone and companyId must be provided together")


# ─── Requests ─────────────────────────────────────────────────────────────────
class JobCardCreateRequest(BaseModel):
    truckId:     int
    description: list[RepairLineItem] = Field(min_length=1)
    status:      JobCardStatus = JobCardStatus.IN_PROGRESS
    driverName:  Optional[str] = None
    driverPhone: Optional[str] = None
    companyId:   Optional[int] = None

    @field_validator("driverPhone")
    @classmethod
    def check_phone(cls, v):
        return validate_local_phone(v) if v is not None else v

    @model_validator(mode="after")
    def driver_and_company(self) -> "JobCardCreateRequest":
        check_driver_company_fields(self.driverName, self.driverPhone, self.companyId)
        return self


class JobCardUpdateRequest(BaseModel):
    # Driver/company fields are checked against the merged record in the service
    description: Optional[list[RepairLineItem]] = Field(None, min_length=1)
    status:      Optional[JobCardStatus] = None
    driverName:  Optional[str] = None
    driverPhone: Optional[str] = None
    companyId:   Optional[int] = None

    @field_validator("driverPhone")
    @classmethod
    def check_phone(cls, v):
        return validate_local_phone(v) if v is not None else v
