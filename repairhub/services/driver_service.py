from sqlalchemy import or_
from sqlalchemy.orm import Session

from repairhub.models.company import Company
from repairhub.models.driver import Driver
from repairhub.models.role import UserRole
from repairhub.schemas.caller import CallerContext
from repairhub.schemas.common import iso
from repairhub.schemas.driver import DriverCreateRequest, DriverUpdateRequest
from repairhub.utils.audit import log_action
from repairhub.utils.exceptions import (
    NotFoundException, DuplicateEntryException, ForbiddenException, ValidationException,
)


def _serialize(d: Driver) -> dict:
    return {
        "id":                        d.id,
        "driverName":                d.driverName,
        "driverPhone":               d.driverPhone,
        "driverIdNumber":            d.driverIdNumber,
        "licensePlate":              d.licensePlate,
        "truckNumber":               d.truckNumber,
        "userId":                    d.userId,
        "isRegisteredCompanyDriver": d.isRegisteredCompanyDriver,
        "associatedCompany":         d.associatedCompanyId,
        "externalCompanyDetails":    d.externalCompanyDetails,
        "emergencyContact": {
            "name":         d.emergencyContactName,
            "phone":        d.emergencyContactPhone,
            "relationship": d.emergencyContactRelationship,
        } if d.emergencyContactName else None,
        "licenseInfo": {
            "licenseNumber": d.licenseNumber,
            "licenseExpiry": iso(d.licenseExpiry),
            "licenseType":   d.licenseType,
        } if d.licenseNumber else None,
        "isActive":   d.isActive,
        "rating":     d.rating,
        "totalJobs":  d.totalJobs,
        "createdAt":  iso(d.createdAt),
    }


class DriverService:

    def _get(self, db: Session, driver_id: int) -> Driver:
        d = db.query(Driver).filter(Driver.id == driver_id).first()
        if not d: raise NotFoundException("Driver")
        return d

    @staticmethod
    def _assert_can_manage(d: Driver, caller: CallerContext) -> None:
        if caller.role == UserRole.COMPANY and d.associatedCompanyId != caller.companyId:
            raise ForbiddenException("Not authorized to manage this driver")

    def list_drivers(
        self, db: Session, caller: CallerContext, page: int, limit: int,
        search: str | None, is_active: bool | None,
    ) -> tuple[list[dict], int]:
        q = db.query(Driver)
        if caller.role == UserRole.COMPANY:
            q = q.filter(Driver.associatedCompanyId == caller.companyId)
        if search:
            kw = f"%{search}%"
            q = q.filter(or_(Driver.driverName.ilike(kw), Driver.driverPhone.ilike(kw),
                             Driver.licensePlate.ilike(kw)))
        if is_active is not None:
            q = q.filter(Driver.isActive == is_active)
        total = q.count()
        items = q.order_by(Driver.id.desc()).offset((page - 1) * limit).limit(limit).all()
        return [_serialize(d) for d in items], total

    def get_driver(self, db: Session, driver_id: int, caller: CallerContext) -> dict:
        d = self._get(db, driver_id)
        self._assert_can_manage(d, caller)
        return _serialize(d)

    def company_drivers(self, db: Session, company_id: int, caller: CallerContext) -> list[dict]:
        if caller.role == UserRole.COMPANY and caller.companyId != company_id:
            raise ForbiddenException("You can only view your own company's drivers")
        drivers = (
            db.query(Driver)
            .filter(Driver.associatedCompanyId == company_id, Driver.isRegisteredCompanyDriver.is_(True))
            .order_by(Driver.id)
            .all()
        )
        return [_serialize(d) for d in drivers]

    def create_driver(
        self, db: Session, data: DriverCreateRequest, caller: CallerContext, company: Company | None = None,
    ) -> dict:
        """`company` is the caller's own (gated) company when a company account registers a driver."""
        if db.query(Driver).filter(Driver.driverIdNumber == data.driverIdNumber).first():
            raise DuplicateEntryException("Driver with this ID number already exists.", field="driverIdNumber")
        if db.query(Driver).filter(Driver.driverPhone == data.driverPhone).first():
            raise DuplicateEntryException("Driver with this phone number already exists.", field="driverPhone")

        company_id = data.associatedCompany
        if company is not None:
            if company_id is not None and company_id != company.id:
                raise ForbiddenException("Company accounts can only register their own drivers")
            if data.externalCompanyDetails is not None:
                raise ValidationException("Company accounts can only register their own drivers")
            company_id = company.id
        elif company_id is not None and not db.query(Company).filter(Company.id == company_id).first():
            raise NotFoundException("Associated company")

        d = Driver(
            driverName=data.driverName,
            driverPhone=data.driverPhone,
            driverIdNumber=data.driverIdNumber,
            licensePlate=data.licensePlate,
            truckNumber=data.truckNumber,
            userId=caller.id,
            isRegisteredCompanyDriver=company_id is not None,
            associatedCompanyId=company_id,
            externalCompanyDetails=(
                data.externalCompanyDetails.model_dump() if company_id is None else None
            ),
            emergencyContactName=data.emergencyContact.name,
            emergencyContactPhone=data.emergencyContact.phone,
            emergencyContactRelationship=data.emergencyContact.relationship.value,
            licenseNumber=data.licenseInfo.licenseNumber,
            licenseExpiry=data.licenseInfo.licenseExpiry,
            licenseType=data.licenseInfo.licenseType.value,
            isActive=True,
        )
        db.add(d)
        db.flush()
        log_action(db, caller.id, "CREATE", "Driver", d.id,
                   f"Registered driver {d.driverName} ({d.driverPhone})")
        db.commit()
        db.refresh(d)
        return _serialize(d)

    def update_driver(self, db: Session, driver_id: int, data: DriverUpdateRequest, caller: CallerContext) -> dict:
        d = self._get(db, driver_id)
        self._assert_can_manage(d, caller)

        if data.driverPhone and data.driverPhone != d.driverPhone:
            if db.query(Driver).filter(Driver.driverPhone == data.driverPhone, Driver.id != driver_id).first():
                raise DuplicateEntryException("Phone number already used by another driver", field="driverPhone")
        if data.externalCompanyDetails is not None and d.isRegisteredCompanyDriver:
            raise ValidationException("Registered company drivers have no external company details")

        if data.driverName:   d.driverName   = data.driverName
        if data.driverPhone:  d.driverPhone  = data.driverPhone
        if data.licensePlate: d.licensePlate = data.licensePlate
        if data.truckNumber:  d.truckNumber  = data.truckNumber
        if data.emergencyContact:
            d.emergencyContactName         = data.emergencyContact.name
            d.emergencyContactPhone        = data.emergencyContact.phone
            d.emergencyContactRelationship = data.emergencyContact.relationship.value
        if data.externalCompanyDetails is not None:
            d.externalCompanyDetails = data.externalCompanyDetails.model_dump()
        if data.isActive is not None: d.isActive = data.isActive
        if data.rating is not None:   d.rating   = data.rating

        log_action(db, caller.id, "UPDATE", "Driver", d.id, f"Updated driver {d.driverName}")
        db.commit()
        db.refresh(d)
        return _serialize(d)

    def delete_driver(self, db: Session, driver_id: int, caller: CallerContext) -> None:
        d = self._get(db, driver_id)
        self._assert_can_manage(d, caller)
        log_action(db, caller.id, "DELETE", "Driver", driver_id, f"Deleted driver {d.driverName}")
        db.delete(d)
        db.commit()


driver_service = DriverService()
