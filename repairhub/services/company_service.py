import logging

from sqlalchemy import or_
from sqlalchemy.orm import Session

from repairhub.config import settings
from repairhub.models.company import Company, ProfileStatus
from repairhub.models.driver import Driver
from repairhub.models.job_card import JobCard
from repairhub.models.role import UserRole
from repairhub.models.truck import Truck
from repairhub.models.user import User
from repairhub.schemas.caller import CallerContext
from repairhub.schemas.common import iso
from repairhub.schemas.company import (
    CompanyCreateRequest, CompanyUpdateRequest,
    CompleteProfileRequest, AddAssociationsRequest,
)
from repairhub.utils.audit import log_action
from repairhub.utils.exceptions import (
    NotFoundException, DuplicateEntryException, ConflictException,
    ForbiddenException, ValidationException,
)

logger = logging.getLogger(__name__)

# Profile sections in the order a company is asked to fill them in.
# licenseDetails + ownerDetails reach `basic`; all three reach `complete`.
BASIC_SECTIONS    = ("licenseDetails", "ownerDetails")
PROFILE_SECTIONS  = BASIC_SECTIONS + ("bankDetails",)


def derive_profile_status(bank_details: list, license_details: list, owner_details: list) -> ProfileStatus:
    """The only place profile status is computed; it is never set directly."""
    if license_details and owner_details:
        return ProfileStatus.COMPLETE if bank_details else ProfileStatus.BASIC
    return ProfileStatus.INITIAL


def missing_profile_fields(company: Company) -> list[str]:
    return [name for name in PROFILE_SECTIONS if not getattr(company, name)]


def completion_endpoint(company_id: int) -> str:
    return f"{settings.API_PREFIX}/companies/{company_id}/complete-profile"


def serialize_company(c: Company) -> dict:
    return {
        "id":               c.id,
        "companyName":      c.companyName,
        "contactEmail":     c.contactEmail,
        "truckOwnerId":     c.truckOwnerId,
        "profileStatus":    c.profileStatus.value,
        "bankDetails":      c.bankDetails or [],
        "licenseDetails":   c.licenseDetails or [],
        "ownerDetails":     c.ownerDetails or [],
        "drivers":          [d.id for d in c.drivers],
        "associatedTrucks": [t.id for t in c.associatedTrucks],
        "createdAt":        iso(c.createdAt),
        "updatedAt":        iso(c.updatedAt),
    }


class CompanyService:

    def _get(self, db: Session, company_id: int) -> Company:
        company = db.query(Company).filter(Company.id == company_id).first()
        if not company:
            raise NotFoundException("Company")
        return company

    @staticmethod
    def _assert_own_company(caller: CallerContext, company_id: int) -> None:
        if caller.role == UserRole.COMPANY and caller.companyId != company_id:
            raise ForbiddenException("You can only manage your own company")

    # ─── Queries ──────────────────────────────────────────────────────────────
    def list_companies(
        self, db: Session, page: int, limit: int,
        search: str | None, profile_status: str | None,
    ) -> tuple[list[dict], int]:
        q = db.query(Company)
        if search:
            kw = f"%{search}%"
            q = q.filter(or_(Company.companyName.ilike(kw), Company.contactEmail.ilike(kw)))
        if profile_status:
            q = q.filter(Company.profileStatus == ProfileStatus(profile_status))

        total = q.count()
        items = q.order_by(Company.id).offset((page - 1) * limit).limit(limit).all()
        return [serialize_company(c) for c in items], total

    def get_company(self, db: Session, company_id: int) -> dict:
        return serialize_company(self._get(db, company_id))

    # ─── Create ───────────────────────────────────────────────────────────────
    def create_company(self, db: Session, data: CompanyCreateRequest, caller: CallerContext) -> dict:
        if db.query(Company).filter(Company.contactEmail == data.contactEmail).first():
            raise DuplicateEntryException("A company with this contact email already exists",
                                          field="contactEmail")
        if db.query(Company).filter(Company.companyName == data.companyName).first():
            raise DuplicateEntryException("A company with this name already exists", field="companyName")

        company = Company(
            companyName=data.companyName,
            contactEmail=data.contactEmail,
            truckOwnerId=data.truckOwnerId,
            profileStatus=ProfileStatus.INITIAL,
            bankDetails=[],
            licenseDetails=[],
            ownerDetails=[],
        )
        db.add(company)
        db.flush()
        log_action(db, caller.id, "CREATE", "Company", company.id, f"Registered company {company.companyName}")
        db.commit()
        db.refresh(company)
        return {
            "company": serialize_company(company),
            "nextSteps": {
                "requiredFields": list(BASIC_SECTIONS),
                "endpoint":       completion_endpoint(company.id),
            },
        }

    # ─── Profile completion ───────────────────────────────────────────────────
    def complete_profile(
        self, db: Session, company_id: int, data: CompleteProfileRequest, caller: CallerContext,
    ) -> dict:
        self._assert_own_company(caller, company_id)
        company = self._get(db, company_id)

        company.licenseDetails = [d.model_dump(mode="json") for d in data.licenseDetails]
        company.ownerDetails   = [d.model_dump(mode="json") for d in data.ownerDetails]
        if data.bankDetails is not None:
            company.bankDetails = [d.model_dump(mode="json") for d in data.bankDetails]

        previous = company.profileStatus
        company.profileStatus = derive_profile_status(
            company.bankDetails, company.licenseDetails, company.ownerDetails,
        )
        log_action(db, caller.id, "COMPLETE_PROFILE", "Company", company.id,
                   f"Profile status {previous.value} -> {company.profileStatus.value}")
        db.commit()
        db.refresh(company)
        logger.info(f"Company {company.id} profile is now {company.profileStatus.value}")

        next_steps = None
        if company.profileStatus == ProfileStatus.BASIC:
            next_steps = {"optionalFields": ["bankDetails"], "endpoint": completion_endpoint(company.id)}
        return {
            "company":       serialize_company(company),
            "profileStatus": company.profileStatus.value,
            "nextSteps":     next_steps,
        }

    # ─── Associations ─────────────────────────────────────────────────────────
    def add_associations(
        self, db: Session, company_id: int, company: Company, data: AddAssociationsRequest, caller: CallerContext,
    ) -> dict:
        """`company` is the gated company resolved for `company_id`."""
        self._assert_own_company(caller, company_id)
        if not data.drivers and not data.associatedTrucks:
            raise ValidationException("Driver information or truck details are required.")

        for driver_id in data.drivers:
            driver = db.query(Driver).filter(Driver.id == driver_id).first()
            if not driver:
                raise NotFoundException(f"Driver {driver_id}")
            driver.associatedCompanyId       = company.id
            driver.isRegisteredCompanyDriver = True
            driver.externalCompanyDetails    = None
            # The linked account follows its record into the company
            account = driver.user
            if account is not None and account.role == UserRole.UNREGISTERED_DRIVER:
                account.role           = UserRole.COMPANY_DRIVER
                account.companyDetails = None

        for truck_id in data.associatedTrucks:
            truck = db.query(Truck).filter(Truck.id == truck_id).first()
            if not truck:
                raise NotFoundException(f"Truck {truck_id}")
            truck.companyId = company.id

        log_action(db, caller.id, "UPDATE", "Company", company.id,
                   f"Associated drivers={data.drivers} trucks={data.associatedTrucks}")
        db.commit()
        db.refresh(company)
        return serialize_company(company)

    # ─── Update ───────────────────────────────────────────────────────────────
    def update_company(
        self, db: Session, company: Company, data: CompanyUpdateRequest, caller: CallerContext,
    ) -> dict:
        if data.contactEmail and data.contactEmail != company.contactEmail:
            if db.query(Company).filter(Company.contactEmail == data.contactEmail,
                                        Company.id != company.id).first():
                raise DuplicateEntryException("Contact email already used", field="contactEmail")

        if data.companyName:  company.companyName  = data.companyName
        if data.contactEmail: company.contactEmail = data.contactEmail

        log_action(db, caller.id, "UPDATE", "Company", company.id, f"Updated company {company.companyName}")
        db.commit()
        db.refresh(company)
        return serialize_company(company)

    # ─── Delete ───────────────────────────────────────────────────────────────
    def delete_company(self, db: Session, company_id: int, caller: CallerContext) -> None:
        """
        Detach everything that points at the company, then delete it.
        Job cards are history and block deletion.
        """
        company = self._get(db, company_id)
        if db.query(JobCard).filter(JobCard.companyId == company.id).count():
            raise ConflictException("Company has job cards and cannot be deleted", field="jobCards")

        for account in db.query(User).filter(User.companyId == company.id).all():
            account.companyId = None
            if account.role == UserRole.COMPANY:
                account.role = UserRole.GENERAL

        external = {"companyName": company.companyName, "contactPerson": None, "contactPhone": None}
        for driver in company.drivers:
            driver.associatedCompanyId       = None
            driver.isRegisteredCompanyDriver = False
            driver.externalCompanyDetails    = external
            if driver.user and driver.user.role == UserRole.COMPANY_DRIVER:
                driver.user.role           = UserRole.UNREGISTERED_DRIVER
                driver.user.companyDetails = external

        for truck in company.associatedTrucks:
            truck.companyId = None

        log_action(db, caller.id, "DELETE", "Company", company.id, f"Deleted company {company.companyName}")
        db.flush()
        db.delete(company)
        db.commit()


company_service = CompanyService()
