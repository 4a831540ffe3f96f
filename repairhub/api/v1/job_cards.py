from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session
from typing import Optional

from repairhub.database import get_db
from repairhub.dependencies import get_admin, get_staff
from repairhub.models.job_card import JobCardStatus
from repairhub.schemas.caller import CallerContext
from repairhub.schemas.job_card import JobCardCreateRequest, JobCardUpdateRequest
from repairhub.schemas.common import success_response, paginated_response
from repairhub.services.job_card_service import job_card_service

router = APIRouter(prefix="/job-cards")


@router.get("", summary="List job cards (Admin, Employee)")
def list_job_cards(
    page:      int                     = Query(1, ge=1),
    limit:     int                     = Query(20, ge=1, le=100),
    truckId:   Optional[int]           = Query(None),
    companyId: Optional[int]           = Query(None),
    status:    Optional[JobCardStatus] = Query(None),
    db:        Session                 = Depends(get_db),
    _:         CallerContext           = Depends(get_staff),
):
    data, total = job_card_service.list_job_cards(
        db, page, limit, truckId, companyId, status.value if status else None,
    )
    return paginated_response("Job cards retrieved successfully", data, total, page, limit)


@router.get("/{job_card_id}", summary="Get job card by ID (Admin, Employee)")
def get_job_card(job_card_id: int, db: Session = Depends(get_db), _: CallerContext = Depends(get_staff)):
    return success_response("Job card retrieved", job_card_service.get_job_card(db, job_card_id))


@router.post("", status_code=status.HTTP_201_CREATED, summary="Open a job card (Admin, Employee)")
def create_job_card(
    body:   JobCardCreateRequest,
    db:     Session       = Depends(get_db),
    caller: CallerContext = Depends(get_staff),
):
    """
    The new job card becomes the truck's current one.
    `driverName`, `driverPhone` and `companyId` are given together or not at all.
    """
    data = job_card_service.create_job_card(db, body, caller)
    return success_response("Job card created successfully", data)


@router.put("/{job_card_id}", summary="Update job card (Admin, Employee)")
def update_job_card(
    job_card_id: int,
    body:        JobCardUpdateRequest,
    db:          Session       = Depends(get_db),
    caller:      CallerContext = Depends(get_staff),
):
    data = job_card_service.update_job_card(db, job_card_id, body, caller)
    return success_response("Job card updated successfully", data)


@router.delete("/{job_card_id}", summary="Delete job card (Admin)")
def delete_job_card(
    job_card_id: int,
    db:          Session       = Depends(get_db),
    caller:      CallerContext = Depends(get_admin),
):
    job_card_service.delete_job_card(db, job_card_id, caller)
    return success_response("Job card deleted successfully")
