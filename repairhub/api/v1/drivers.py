from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session
from typing import Optional

from repairhub.database import get_db
from repairhub.dependencies import get_company_admin, get_company_staff, gate_company_caller
from repairhub.models.company import Company
from repairhub.schemas.caller import CallerContext
from repairhub.schemas.driver import DriverCreateRequest, DriverUpdateRequest
from repairhub.schemas.common import success_response, paginated_response
from repairhub.services.driver_service import driver_service

router = APIRouter(prefix="/drivers")


@router.get("", summary="List drivers")
def list_drivers(
    page:     int            = Query(1, ge=1),
    limit:    int            = Query(20, ge=1, le=100),
    search:   Optional[str]  = Query(None, description="Search by name, phone, or plate"),
    isActive: Optional[bool] = Query(None),
    db:       Session        = Depends(get_db),
    caller:   CallerContext  = Depends(get_company_staff),
):
    data, total = driver_service.list_drivers(db, caller, page, limit, search, isActive)
    return paginated_response("Drivers retrieved successfully", data, total, page, limit)


@router.get("/company/{company_id}", summary="List the registered drivers of a company")
def company_drivers(
    company_id: int,
    db:         Session       = Depends(get_db),
    caller:     CallerContext = Depends(get_company_staff),
):
    return success_response("Drivers retrieved", driver_service.company_drivers(db, company_id, caller))


@router.get("/{driver_id}", summary="Get driver by ID")
def get_driver(driver_id: int, db: Session = Depends(get_db), caller: CallerContext = Depends(get_company_staff)):
    return success_response("Driver retrieved", driver_service.get_driver(db, driver_id, caller))


@router.post("", status_code=status.HTTP_201_CREATED, summary="Register a driver (Admin, Company)")
def create_driver(
    body:    DriverCreateRequest,
    db:      Session           = Depends(get_db),
    caller:  CallerContext     = Depends(get_company_admin),
    company: Optional[Company] = Depends(gate_company_caller),
):
    """
    A driver belongs either to a registered company (`associatedCompany`)
    or to an outside one (`externalCompanyDetails`), never both.
    Company accounts need a complete profile and can only register their own drivers.
    """
    data = driver_service.create_driver(db, body, caller, company)
    return success_response("Driver registered successfully", data)


@router.put("/{driver_id}", summary="Update driver (Admin, Company)")
def update_driver(
    driver_id: int,
    body:      DriverUpdateRequest,
    db:        Session       = Depends(get_db),
    caller:    CallerContext = Depends(get_company_admin),
):
    data = driver_service.update_driver(db, driver_id, body, caller)
    return success_response("Driver updated successfully", data)


@router.delete("/{driver_id}", summary="Delete driver (Admin, Company)")
def delete_driver(
    driver_id: int,
    db:        Session       = Depends(get_db),
    caller:    CallerContext = Depends(get_company_admin),
):
    driver_service.delete_driver(db, driver_id, caller)
    return success_response("Driver deleted successfully")
