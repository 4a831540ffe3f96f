import logging
from datetime import datetime, timezone

from sqlalchemy.orm import Session

from repairhub.models.company import Company
from repairhub.models.job_card import JobCard, JobCardStatus
from repairhub.models.truck import Truck
from repairhub.schemas.caller import CallerContext
from repairhub.schemas.common import iso
from repairhub.schemas.job_card import (
    JobCardCreateRequest, JobCardUpdateRequest, check_driver_company_fields,
)
from repairhub.utils.audit import log_action
from repairhub.utils.exceptions import NotFoundException, ValidationException

logger = logging.getLogger(__name__)


def _serialize(j: JobCard) -> dict:
    return {
        "id":            j.id,
        "truckId":       j.truckId,
        "entryDate":     iso(j.entryDate),
        "description":   j.description or [],
        "totalCost":     j.totalCost,
        "status":        j.status.value,
        "completedDate": iso(j.completedDate),
        "driverName":    j.driverName,
        "driverPhone":   j.driverPhone,
        "companyId":     j.companyId,
        "createdAt":     iso(j.createdAt),
        "updatedAt":     iso(j.updatedAt),
    }


class JobCardService:

    def _get(self, db: Session, job_card_id: int) -> JobCard:
        j = db.query(JobCard).filter(JobCard.id == job_card_id).first()
        if not j:
            raise NotFoundException("Job card")
        return j

    @staticmethod
    def _apply_status(j: JobCard, status: JobCardStatus) -> None:
        j.status = status
        if status == JobCardStatus.COMPLETED:
            j.completedDate = datetime.now(timezone.utc)
            if j.truck is not None and j.truck.currentJobCardId == j.id:
                j.truck.currentJobCardId = None

    def list_job_cards(
        self, db: Session, page: int, limit: int,
        truck_id: int | None, company_id: int | None, status: str | None,
    ) -> tuple[list[dict], int]:
        q = db.query(JobCard)
        if truck_id:
            q = q.filter(JobCard.truckId == truck_id)
        if company_id:
            q = q.filter(JobCard.companyId == company_id)
        if status:
            q = q.filter(JobCard.status == JobCardStatus(status))

        total = q.count()
        items = q.order_by(JobCard.id.desc()).offset((page - 1) * limit).limit(limit).all()
        return [_serialize(j) for j in items], total

    def get_job_card(self, db: Session, job_card_id: int) -> dict:
        return _serialize(self._get(db, job_card_id))

    def create_job_card(self, db: Session, data: JobCardCreateRequest, caller: CallerContext) -> dict:
        truck = db.query(Truck).filter(Truck.id == data.truckId).first()
        if not truck:
            raise NotFoundException("Truck")
        if data.companyId is not None and not db.query(Company).filter(Company.id == data.companyId).first():
            raise NotFoundException("Company")

        j = JobCard(
            truckId=truck.id,
            description=[item.model_dump() for item in data.description],
            status=JobCardStatus.IN_PROGRESS,
            driverName=data.driverName,
            driverPhone=data.driverPhone,
            companyId=data.companyId,
        )
        db.add(j)
        db.flush()
        truck.currentJobCardId = j.id
        if data.status != JobCardStatus.IN_PROGRESS:
            self._apply_status(j, data.status)

        log_action(db, caller.id, "CREATE", "JobCard", j.id, f"Opened job card for truck {truck.licensePlate}")
        db.commit()
        db.refresh(j)
        logger.info(f"Job card {j.id} created for truck {truck.id}")
        return _serialize(j)

    def update_job_card(
        self, db: Session, job_card_id: int, data: JobCardUpdateRequest, caller: CallerContext,
    ) -> dict:
        j = self._get(db, job_card_id)

        name    = data.driverName  if data.driverName  is not None else j.driverName
        phone   = data.driverPhone if data.driverPhone is not None else j.driverPhone
        company = data.companyId   if data.companyId   is not None else j.companyId
        try:
            check_driver_company_fields(name, phone, company)
        except ValueError as e:
            raise ValidationException(str(e), details=[
                {"field": f, "message": str(e)} for f in ("driverName", "driverPhone", "companyId")
            ])
        if data.companyId is not None and not db.query(Company).filter(Company.id == data.companyId).first():
            raise NotFoundException("Company")

        if data.description is not None:
            j.description = [item.model_dump() for item in data.description]
        j.driverName, j.driverPhone, j.companyId = name, phone, company
        if data.status is not None and data.status != j.status:
            self._apply_status(j, data.status)

        log_action(db, caller.id, "UPDATE", "JobCard", j.id, f"Updated job card ({j.status.value})")
        db.commit()
        db.refresh(j)
        return _serialize(j)

    def delete_job_card(self, db: Session, job_card_id: int, caller: CallerContext) -> None:
        j = self._get(db, job_card_id)
        if j.truck is not None and j.truck.currentJobCardId == j.id:
            j.truck.currentJobCardId = None
            db.flush()
        log_action(db, caller.id, "DELETE", "JobCard", job_card_id, f"Deleted job card of truck {j.truckId}")
        db.delete(j)
        db.commit()


job_card_service = JobCardService()
