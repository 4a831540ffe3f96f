from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session
from typing import Optional

from repairhub.database import get_db
from repairhub.dependencies import (
    get_admin, get_staff, get_company_staff, require_complete_profile, require_own_company,
)
from repairhub.models.company import Company, ProfileStatus
from repairhub.schemas.caller import CallerContext
from repairhub.schemas.company import (
    CompanyCreateRequest, CompleteProfileRequest, CompanyUpdateRequest, AddAssociationsRequest,
)
from repairhub.schemas.common import success_response, paginated_response
from repairhub.services.company_service import company_service

router = APIRouter(prefix="/companies")


@router.get("", summary="List companies (Admin, Employee)")
def list_companies(
    page:          int                     = Query(1, ge=1),
    limit:         int                     = Query(20, ge=1, le=100),
    search:        Optional[str]           = Query(None, description="Search by name or contact email"),
    profileStatus: Optional[ProfileStatus] = Query(None),
    db:            Session                 = Depends(get_db),
    _:             CallerContext           = Depends(get_staff),
):
    data, total = company_service.list_companies(
        db, page, limit, search, profileStatus.value if profileStatus else None,
    )
    return paginated_response("Companies retrieved successfully", data, total, page, limit)


@router.get("/{company_id}", summary="Get company by ID (Admin, Employee)")
def get_company(company_id: int, db: Session = Depends(get_db), _: CallerContext = Depends(get_staff)):
    return success_response("Company retrieved", company_service.get_company(db, company_id))


@router.post("", status_code=status.HTTP_201_CREATED, summary="Register a company (Admin, Employee)")
def create_company(
    body:   CompanyCreateRequest,
    db:     Session       = Depends(get_db),
    caller: CallerContext = Depends(get_staff),
):
    data = company_service.create_company(db, body, caller)
    return success_response(
        "Company registered successfully. Please complete the company profile.",
        data["company"],
        nextSteps=data["nextSteps"],
    )


@router.put("/{company_id}/complete-profile", summary="Complete the company profile")
def complete_profile(
    company_id: int,
    body:       CompleteProfileRequest,
    db:         Session       = Depends(get_db),
    caller:     CallerContext = Depends(get_company_staff),
):
    """
    License and owner details are required; bank details are optional.
    - license + owner → `basic`
    - license + owner + bank → `complete`
    - `bankDetails: []` clears stored bank details.
    """
    data = company_service.complete_profile(db, company_id, body, caller)
    return success_response(
        "Company profile updated successfully",
        data["company"],
        profileStatus=data["profileStatus"],
        nextSteps=data["nextSteps"],
    )


@router.put("/{company_id}/add-associations", summary="Associate drivers and trucks with a company")
def add_associations(
    company_id: int,
    body:       AddAssociationsRequest,
    caller:     CallerContext = Depends(get_company_staff),
    _owner:     CallerContext = Depends(require_own_company),
    company:    Company       = Depends(require_complete_profile),
    db:         Session       = Depends(get_db),
):
    data = company_service.add_associations(db, company_id, company, body, caller)
    return success_response("Associations added successfully", data)


@router.put("/{company_id}", summary="Update company (Admin)")
def update_company(
    body:    CompanyUpdateRequest,
    caller:  CallerContext = Depends(get_admin),
    company: Company       = Depends(require_complete_profile),
    db:      Session       = Depends(get_db),
):
    data = company_service.update_company(db, company, body, caller)
    return success_response("Company updated successfully", data)


@router.delete("/{company_id}", summary="Delete company (Admin)")
def delete_company(
    company_id: int,
    db:         Session       = Depends(get_db),
    caller:     CallerContext = Depends(get_admin),
):
    company_service.delete_company(db, company_id, caller)
    return success_response("Company deleted successfully")
