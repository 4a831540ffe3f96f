from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session
from typing import Optional

from repairhub.database import get_db
from repairhub.dependencies import require_roles, get_staff, get_company_staff, gate_company_caller
from repairhub.models.company import Company
from repairhub.models.role import UserRole
from repairhub.models.truck import TruckStatus
from repairhub.schemas.caller import CallerContext
from repairhub.schemas.truck import TruckCreateRequest, TruckUpdateRequest, RepairStatusRequest
from repairhub.schemas.common import success_response, paginated_response
from repairhub.services.truck_service import truck_service

router = APIRouter(prefix="/trucks")

get_truck_manager = require_roles(UserRole.ADMIN, UserRole.COMPANY, UserRole.TRUCK_OWNER)


@router.get("", summary="List trucks")
def list_trucks(
    page:   int                   = Query(1, ge=1),
    limit:  int                   = Query(20, ge=1, le=100),
    search: Optional[str]         = Query(None, description="Search by plate or brand"),
    status: Optional[TruckStatus] = Query(None),
    db:     Session               = Depends(get_db),
    caller: CallerContext         = Depends(get_company_staff),
):
    data, total = truck_service.list_trucks(db, caller, page, limit, search, status.value if status else None)
    return paginated_response("Trucks retrieved successfully", data, total, page, limit)


@router.get("/{truck_id}", summary="Get truck by ID")
def get_truck(truck_id: int, db: Session = Depends(get_db), caller: CallerContext = Depends(get_company_staff)):
    return success_response("Truck retrieved", truck_service.get_truck(db, truck_id, caller))


@router.post("", status_code=status.HTTP_201_CREATED, summary="Register a truck")
def create_truck(
    body:    TruckCreateRequest,
    db:      Session           = Depends(get_db),
    caller:  CallerContext     = Depends(get_truck_manager),
    company: Optional[Company] = Depends(gate_company_caller),
):
    data = truck_service.create_truck(db, body, caller, company)
    return success_response("Truck registered successfully", data)


@router.put("/{truck_id}", summary="Update truck")
def update_truck(
    truck_id: int,
    body:     TruckUpdateRequest,
    db:       Session       = Depends(get_db),
    caller:   CallerContext = Depends(get_truck_manager),
):
    data = truck_service.update_truck(db, truck_id, body, caller)
    return success_response("Truck updated successfully", data)


@router.patch("/{truck_id}/repair-status", summary="Record a repair milestone (Admin, Employee)")
def repair_status(
    truck_id: int,
    body:     RepairStatusRequest,
    db:       Session       = Depends(get_db),
    caller:   CallerContext = Depends(get_staff),
):
    """Recording `ready for pick-up` finalizes the truck and notifies its owner."""
    data = truck_service.add_milestone(db, truck_id, body, caller)
    return success_response(f"Repair status updated to '{body.stage.value}'", data)


@router.delete("/{truck_id}", summary="Delete truck")
def delete_truck(
    truck_id: int,
    db:       Session       = Depends(get_db),
    caller:   CallerContext = Depends(get_truck_manager),
):
    truck_service.delete_truck(db, truck_id, caller)
    return success_response("Truck deleted successfully")
