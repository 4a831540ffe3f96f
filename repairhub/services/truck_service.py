import logging
from datetime import datetime, timezone

from sqlalchemy import or_
from sqlalchemy.orm import Session

from repairhub.models.company import Company
from repairhub.models.notification import Notification
from repairhub.models.role import UserRole
from repairhub.models.truck import Truck, TruckMilestone, TruckStatus, RepairStage
from repairhub.models.user import User
from repairhub.schemas.caller import CallerContext
from repairhub.schemas.common import iso
from repairhub.schemas.truck import TruckCreateRequest, TruckUpdateRequest, RepairStatusRequest
from repairhub.utils.audit import log_action
from repairhub.utils.email import send_truck_ready_email
from repairhub.utils.exceptions import (
    NotFoundException, DuplicateEntryException, ForbiddenException, ConflictException,
)

logger = logging.getLogger(__name__)


def serialize_truck(t: Truck) -> dict:
    return {
        "id":               t.id,
        "licensePlate":     t.licensePlate,
        "brand":            t.brand,
        "owner":            t.ownerId,
        "companyId":        t.companyId,
        "status":           t.status.value,
        "currentJobCard":   t.currentJobCardId,
        "repairHistory":    [j.id for j in t.repairHistory],
        "repairMilestones": [
            {"stage": m.stage.value, "completedAt": iso(m.completedAt)}
            for m in t.repairMilestones
        ],
        "createdAt":        iso(t.createdAt),
        "updatedAt":        iso(t.updatedAt),
    }


class TruckService:

    def _get(self, db: Session, truck_id: int) -> Truck:
        t = db.query(Truck).filter(Truck.id == truck_id).first()
        if not t:
            raise NotFoundException("Truck")
        return t

    @staticmethod
    def _assert_can_manage(t: Truck, caller: CallerContext) -> None:
        if caller.is_admin or t.ownerId == caller.id:
            return
        if caller.role == UserRole.COMPANY and caller.companyId and t.companyId == caller.companyId:
            return
        raise ForbiddenException("Not authorized to manage this truck.")

    # ─── Queries ──────────────────────────────────────────────────────────────
    def list_trucks(
        self, db: Session, caller: CallerContext, page: int, limit: int,
        search: str | None, status: str | None,
    ) -> tuple[list[dict], int]:
        q = db.query(Truck)
        if caller.role == UserRole.COMPANY:
            q = q.filter(or_(Truck.companyId == caller.companyId, Truck.ownerId == caller.id))
        if search:
            kw = f"%{search}%"
            q = q.filter(or_(Truck.licensePlate.ilike(kw), Truck.brand.ilike(kw)))
        if status:
            q = q.filter(Truck.status == TruckStatus(status))

        total = q.count()
        items = q.order_by(Truck.id.desc()).offset((page - 1) * limit).limit(limit).all()
        return [serialize_truck(t) for t in items], total

    def get_truck(self, db: Session, truck_id: int, caller: CallerContext) -> dict:
        t = self._get(db, truck_id)
        if caller.role == UserRole.COMPANY:
            self._assert_can_manage(t, caller)
        return serialize_truck(t)

    # ─── Create ───────────────────────────────────────────────────────────────
    def create_truck(
        self, db: Session, data: TruckCreateRequest, caller: CallerContext, company: Company | None = None,
    ) -> dict:
        if db.query(Truck).filter(Truck.licensePlate == data.licensePlate).first():
            raise DuplicateEntryException("Truck with this license plate already exists.", field="licensePlate")

        owner_id = caller.id
        if data.ownerId is not None and data.ownerId != caller.id:
            if not caller.is_admin:
                raise ForbiddenException("Only admins can register trucks for another account")
            if not db.query(User).filter(User.id == data.ownerId).first():
                raise NotFoundException("Owner")
            owner_id = data.ownerId

        company_id = data.companyId
        if company is not None:
            if company_id is not None and company_id != company.id:
                raise ForbiddenException("Company accounts can only register trucks for their own company")
            company_id = company.id
        elif company_id is not None and not db.query(Company).filter(Company.id == company_id).first():
            raise NotFoundException("Company")

        t = Truck(
            licensePlate=data.licensePlate,
            brand=data.brand,
            ownerId=owner_id,
            companyId=company_id,
            status=TruckStatus.PENDING,
        )
        db.add(t)
        db.flush()
        log_action(db, caller.id, "CREATE", "Truck", t.id, f"Registered truck {t.licensePlate} ({t.brand})")
        db.commit()
        db.refresh(t)
        return serialize_truck(t)

    # ─── Update ───────────────────────────────────────────────────────────────
    def update_truck(self, db: Session, truck_id: int, data: TruckUpdateRequest, caller: CallerContext) -> dict:
        t = self._get(db, truck_id)
        self._assert_can_manage(t, caller)

        if data.licensePlate and data.licensePlate != t.licensePlate:
            if db.query(Truck).filter(Truck.licensePlate == data.licensePlate, Truck.id != truck_id).first():
                raise DuplicateEntryException("License plate already used", field="licensePlate")

        if data.licensePlate: t.licensePlate = data.licensePlate
        if data.brand:        t.brand        = data.brand
        if data.status:       t.status       = data.status

        log_action(db, caller.id, "UPDATE", "Truck", t.id, f"Updated truck {t.licensePlate}")
        db.commit()
        db.refresh(t)
        return serialize_truck(t)

    # ─── Repair milestones ────────────────────────────────────────────────────
    def add_milestone(self, db: Session, truck_id: int, data: RepairStatusRequest, caller: CallerContext) -> dict:
        t = self._get(db, truck_id)
        t.repairMilestones.append(
            TruckMilestone(stage=data.stage, completedAt=datetime.now(timezone.utc))
        )

        ready = data.stage == RepairStage.READY_FOR_PICKUP
        if ready:
            t.status = TruckStatus.FINALIZED
            db.add(Notification(
                userId=t.ownerId,
                message=f"Your truck {t.licensePlate} is ready for pick-up.",
                type="truck_ready",
            ))

        log_action(db, caller.id, "REPAIR_STATUS", "Truck", t.id, f"Milestone '{data.stage.value}'")
        db.commit()
        db.refresh(t)

        if ready:
            send_truck_ready_email(t.owner.email, t.owner.name, t.licensePlate)
            logger.info(f"Truck {t.id} finalized")
        return serialize_truck(t)

    # ─── Delete ───────────────────────────────────────────────────────────────
    def delete_truck(self, db: Session, truck_id: int, caller: CallerContext) -> None:
        """
        Job cards and milestones of the truck are deleted with it.
        A truck owner cannot remove their last truck; an admin can, which
        is how a truck owner account is cleared for deletion.
        """
        t = self._get(db, truck_id)
        self._assert_can_manage(t, caller)

        owner = t.owner
        if caller.role != UserRole.ADMIN and owner.role == UserRole.TRUCK_OWNER and len(owner.trucks) <= 1:
            raise ConflictException("A truck owner must keep at least one truck", field="trucks")

        log_action(db, caller.id, "DELETE", "Truck", truck_id, f"Deleted truck {t.licensePlate}")
        t.currentJobCardId = None
        db.flush()
        db.delete(t)
        db.commit()


truck_service = TruckService()
