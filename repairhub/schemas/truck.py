from typing import Optional

from pydantic import BaseModel, field_validator

from repairhub.models.truck import RepairStage, TruckStatus
from repairhub.utils.validators import validate_license_plate, not_blank


# ─── Requests ─────────────────────────────────────────────────────────────────
class TruckCreateRequest(BaseModel):
    licensePlate: str
    brand:        str
    ownerId:      Optional[int] = None    # admin/company may register on behalf of an account
    companyId:    Optional[int] = None

    @field_validator("licensePlate")
    @classmethod
    def check_plate(cls, v): return validate_license_plate(v)

    @field_validator("brand")
    @classmethod
    def check_brand(cls, v): return not_blank(v, "Brand")


class TruckUpdateRequest(BaseModel):
    licensePlate: Optional[str] = None
    brand:        Optional[str] = None
    status:       Optional[TruckStatus] = None

    @field_validator("licensePlate")
    @classmethod
    def check_plate(cls, v):
        return validate_license_plate(v) if v is not None else v

    @field_validator("brand")
    @classmethod
    def check_brand(cls, v):
        return not_blank(v, "Brand") if v is not None else v


class RepairStatusRequest(BaseModel):
    stage: RepairStage
