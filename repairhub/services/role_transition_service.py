"""
Role transition: moves a `general` account into one of the self-service
roles and creates the records that role depends on.

Validation happens up front (`parse_transition`), so the executors only ever
see a fully typed request. Each executor adds its writes to the session and
the whole transition commits once; any failure rolls every write back.
"""
import logging

from pydantic import ValidationError
from sqlalchemy.orm import Session

from repairhub.models.company import Company, ProfileStatus
from repairhub.models.driver import Driver
from repairhub.models.notification import Notification
from repairhub.models.role import UserRole, TRANSITION_TARGETS
from repairhub.models.truck import Truck, TruckStatus
from repairhub.models.truck_owner import TruckOwner
from repairhub.models.user import User
from repairhub.schemas.caller import CallerContext
from repairhub.schemas.role_transition import (
    CompanyTransition, CompanyDriverTransition,
    UnregisteredDriverTransition, TruckOwnerTransition,
    role_transition_adapter,
)
from repairhub.services.company_service import serialize_company
from repairhub.services.user_service import serialize_user
from repairhub.utils.audit import log_action
from repairhub.utils.exceptions import (
    InvalidRoleException, ValidationException, NotFoundException,
    CompanyNotFoundForDriverException, CompanyAlreadyLinkedException,
    DuplicateEntryException, ForbiddenException,
)

logger = logging.getLogger(__name__)

_TARGET_VALUES = {r.value for r in TRANSITION_TARGETS}


# ─── Validator ────────────────────────────────────────────────────────────────
def parse_transition(payload: dict):
    """
    Turn a raw request body into one of the transition variants.

    Raises InvalidRoleException for a missing or non-transitionable role and
    ValidationException listing every failing field otherwise.
    """
    role = payload.get("role") if isinstance(payload, dict) else None
    if role not in _TARGET_VALUES:
        raise InvalidRoleException(role)

    try:
        return role_transition_adapter.validate_python(payload)
    except ValidationError as e:
        details = []
        for err in e.errors():
            # loc starts with the discriminator tag, e.g. ("truck_owner", "brand")
            loc = err.get("loc", ())[1:]
            details.append({
                "field":   ".".join(str(part) for part in loc) or "body",
                "message": err.get("msg", "Invalid value"),
            })
        fields = ", ".join(d["field"] for d in details)
        raise ValidationException(f"Missing or invalid fields for role {role}: {fields}", details=details)


def _resolve_company(db: Session, company_id) -> Company | None:
    if isinstance(company_id, str):
        if not company_id.strip().isdigit():
            return None
        company_id = int(company_id)
    return db.query(Company).filter(Company.id == company_id).first()


class RoleTransitionService:

    # ─── Entry point ──────────────────────────────────────────────────────────
    def transition(self, db: Session, payload: dict, caller: CallerContext) -> dict:
        request = parse_transition(payload)

        user = db.query(User).filter(User.id == caller.id).first()
        if not user:
            raise NotFoundException("User")
        if user.role in (UserRole.ADMIN, UserRole.EMPLOYEE):
            raise ForbiddenException("Staff accounts cannot change role through a transition")

        handler = {
            CompanyTransition:            self._to_company,
            CompanyDriverTransition:      self._to_company_driver,
            UnregisteredDriverTransition: self._to_unregistered_driver,
            TruckOwnerTransition:         self._to_truck_owner,
        }[type(request)]

        previous = user.role
        try:
            result = handler(db, user, request)
            db.add(Notification(userId=user.id, message="Role transition successful.", type="role_transition"))
            log_action(db, user.id, "ROLE_TRANSITION", "User", user.id,
                       f"Role {previous.value} -> {user.role.value}")
            db.commit()
        except Exception:
            db.rollback()
            raise

        db.refresh(user)
        logger.info(f"User {user.id} transitioned {previous.value} -> {user.role.value}")

        response = {"message": "Role transition successful.", "user": serialize_user(user)}
        company = result.get("company")
        if company is not None:
            db.refresh(company)
            response["company"] = serialize_company(company)
            response["needsProfileCompletion"] = True
            response["message"] += " Please complete your company profile with additional details."
        return response

    # ─── Executors ────────────────────────────────────────────────────────────
    def _to_company(self, db: Session, user: User, request: CompanyTransition) -> dict:
        if user.companyId is not None:
            raise CompanyAlreadyLinkedException()
        if db.query(Company).filter(Company.contactEmail == user.email).first():
            raise DuplicateEntryException("A company with this contact email already exists",
                                          field="contactEmail")

        company = Company(
            companyName=request.companyName or f"Company-{user.email}",
            contactEmail=user.email,
            profileStatus=ProfileStatus.INITIAL,
            bankDetails=[],
            licenseDetails=[],
            ownerDetails=[],
        )
        db.add(company)
        db.flush()

        # Link only if still unlinked; a concurrent transition that got there
        # first leaves rowcount at 0 and this one is rolled back.
        linked = (
            db.query(User)
            .filter(User.id == user.id, User.companyId.is_(None))
            .update({User.companyId: company.id, User.role: UserRole.COMPANY}, synchronize_session=False)
        )
        if linked == 0:
            raise CompanyAlreadyLinkedException()
        db.refresh(user)
        return {"company": company}

    def _to_company_driver(self, db: Session, user: User, request: CompanyDriverTransition) -> dict:
        company = _resolve_company(db, request.companyId)
        if not company:
            raise CompanyNotFoundForDriverException()

        driver = self._create_driver(db, user, request.driverInfo)
        driver.isRegisteredCompanyDriver = True
        driver.associatedCompanyId       = company.id

        user.role       = UserRole.COMPANY_DRIVER
        user.driverInfo = request.driverInfo.model_dump()
        db.flush()
        return {"driver": driver}

    def _to_unregistered_driver(self, db: Session, user: User, request: UnregisteredDriverTransition) -> dict:
        details = request.companyDetails.model_dump()
        driver = self._create_driver(db, user, request.driverInfo)
        driver.isRegisteredCompanyDriver = False
        driver.externalCompanyDetails    = details

        user.role           = UserRole.UNREGISTERED_DRIVER
        user.driverInfo     = request.driverInfo.model_dump()
        user.companyDetails = details
        db.flush()
        return {"driver": driver}

    def _to_truck_owner(self, db: Session, user: User, request: TruckOwnerTransition) -> dict:
        if db.query(Truck).filter(Truck.licensePlate == request.licensePlate).first():
            raise DuplicateEntryException("Truck with this license plate already exists", field="licensePlate")

        truck = Truck(
            licensePlate=request.licensePlate,
            brand=request.brand,
            ownerId=user.id,
            status=TruckStatus.PENDING,
        )
        db.add(truck)

        owner = db.query(TruckOwner).filter(TruckOwner.userId == user.id).first()
        if owner is None:
            owner = TruckOwner(userId=user.id, licensePlate=request.licensePlate)
            db.add(owner)
        db.flush()

        user.role         = UserRole.TRUCK_OWNER
        user.licensePlate = request.licensePlate
        user.truckOwnerId = owner.id
        db.flush()
        return {"truck": truck}

    # ─── Helpers ──────────────────────────────────────────────────────────────
    @staticmethod
    def _create_driver(db: Session, user: User, info) -> Driver:
        # Re-submitting for the same account adds another Driver record
        others = db.query(Driver).filter(Driver.userId != user.id)
        if others.filter(Driver.driverPhone == info.phoneNumber).first():
            raise DuplicateEntryException("Driver with this phone number already exists", field="driverPhone")
        if info.idNumber and others.filter(Driver.driverIdNumber == info.idNumber).first():
            raise DuplicateEntryException("Driver with this ID number already exists", field="driverIdNumber")

        # An ID number is held once; an earlier record of this account keeps it
        id_number = info.idNumber
        if id_number and db.query(Driver).filter(Driver.driverIdNumber == id_number).first():
            id_number = None

        driver = Driver(
            driverName=info.name,
            driverPhone=info.phoneNumber,
            driverIdNumber=id_number,
            licensePlate=info.licensePlate,
            userId=user.id,
        )
        db.add(driver)
        return driver


role_transition_service = RoleTransitionService()
