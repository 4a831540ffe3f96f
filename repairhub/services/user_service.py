from sqlalchemy.orm import Session
from sqlalchemy import or_

from repairhub.models.company import Company
from repairhub.models.driver import Driver
from repairhub.models.role import UserRole, ADMIN_ASSIGNABLE
from repairhub.models.truck import Truck
from repairhub.models.truck_owner import TruckOwner
from repairhub.models.user import User
from repairhub.schemas.common import iso
from repairhub.schemas.user import UserCreateRequest, UserUpdateRequest, BulkUserRequest, BulkOperation
from repairhub.utils.security import hash_password
from repairhub.utils.audit import log_action
from repairhub.utils.exceptions import (
    NotFoundException, DuplicateEntryException, ForbiddenException, ConflictException, ValidationException,
)


def serialize_user(u: User) -> dict:
    return {
        "id":               u.id,
        "name":             u.name,
        "email":            u.email,
        "phone":            u.phone,
        "role":             u.role.value,
        "isActive":         u.isActive,
        "licensePlate":     u.licensePlate,
        "companyId":        u.companyId,
        "truckOwnerId":     u.truckOwnerId,
        "driverInfo":       u.driverInfo,
        "companyDetails":   u.companyDetails,
        "associatedTrucks": [t.id for t in u.trucks],
        "createdAt":        iso(u.createdAt),
        "updatedAt":        iso(u.updatedAt),
    }


class UserService:

    # ─── List ─────────────────────────────────────────────────────────────────
    def list_users(
        self, db: Session,
        page: int, limit: int,
        search: str | None,
        role: str | None,
        is_active: bool | None,
    ) -> tuple[list[dict], int]:
        q = db.query(User)

        if search:
            kw = f"%{search}%"
            q = q.filter(or_(
                User.name.ilike(kw),
                User.email.ilike(kw),
                User.phone.ilike(kw),
            ))
        if role is not None:
            q = q.filter(User.role == UserRole(role))
        if is_active is not None:
            q = q.filter(User.isActive == is_active)

        total = q.count()
        users = q.order_by(User.id.desc()).offset((page - 1) * limit).limit(limit).all()
        return [serialize_user(u) for u in users], total

    # ─── Get by ID ────────────────────────────────────────────────────────────
    def get_user(self, db: Session, user_id: int) -> dict:
        u = db.query(User).filter(User.id == user_id).first()
        if not u:
            raise NotFoundException("User")
        return serialize_user(u)

    # ─── Create ───────────────────────────────────────────────────────────────
    def create_user(self, db: Session, data: UserCreateRequest, actor_id: int) -> dict:
        if db.query(User).filter(User.email == data.email).first():
            raise DuplicateEntryException("Email already registered", field="email")
        if data.phone and db.query(User).filter(User.phone == data.phone).first():
            raise DuplicateEntryException("Phone number already registered", field="phone")

        u = User(
            name=data.name.strip() if data.name else None,
            email=data.email,
            phone=data.phone,
            password=hash_password(data.password),
            role=data.role,
            isActive=True,
        )
        db.add(u)
        db.flush()
        log_action(db, actor_id, "CREATE", "User", u.id,
                   f"Admin created {u.role.value} account {u.email}")
        db.commit()
        db.refresh(u)
        return serialize_user(u)

    # ─── Update ───────────────────────────────────────────────────────────────
    def update_user(self, db: Session, user_id: int, data: UserUpdateRequest, actor_id: int) -> dict:
        u = db.query(User).filter(User.id == user_id).first()
        if not u:
            raise NotFoundException("User")

        if data.email and data.email != u.email:
            if db.query(User).filter(User.email == data.email, User.id != user_id).first():
                raise DuplicateEntryException("Email already used by another user", field="email")
        if data.phone and data.phone != u.phone:
            if db.query(User).filter(User.phone == data.phone, User.id != user_id).first():
                raise DuplicateEntryException("Phone already used by another user", field="phone")

        if data.name:         u.name         = data.name
        if data.email:        u.email        = data.email
        if data.phone:        u.phone        = data.phone
        if data.licensePlate: u.licensePlate = data.licensePlate

        log_action(db, actor_id, "UPDATE", "User", u.id, f"Admin updated user {u.email}")
        db.commit()
        db.refresh(u)
        return serialize_user(u)

    # ─── Toggle Active ────────────────────────────────────────────────────────
    def toggle_active(self, db: Session, user_id: int, actor_id: int) -> dict:
        u = db.query(User).filter(User.id == user_id).first()
        if not u:
            raise NotFoundException("User")
        if u.id == actor_id:
            raise ForbiddenException("You cannot deactivate your own account")

        u.isActive = not u.isActive
        action = "ACTIVATE" if u.isActive else "DEACTIVATE"
        log_action(db, actor_id, action, "User", u.id,
                   f"Admin {action.lower()}d user {u.email}")
        db.commit()
        db.refresh(u)
        return serialize_user(u)

    # ─── Delete ───────────────────────────────────────────────────────────────
    def delete_user(self, db: Session, user_id: int, actor_id: int) -> None:
        """
        Trucks must be deleted or handed over first. Driver and truck-owner
        records go with the account; a linked company stays.
        """
        u = db.query(User).filter(User.id == user_id).first()
        if not u:
            raise NotFoundException("User")
        if u.id == actor_id:
            raise ForbiddenException("You cannot delete your own account")

        self._remove(db, u, actor_id)
        db.commit()

    def _remove(self, db: Session, u: User, actor_id: int) -> None:
        if db.query(Truck).filter(Truck.ownerId == u.id).count():
            raise ConflictException("Account still owns trucks and cannot be deleted", field="trucks")

        for driver in db.query(Driver).filter(Driver.userId == u.id).all():
            db.delete(driver)
        db.flush()

        owner = db.query(TruckOwner).filter(TruckOwner.userId == u.id).first()
        if owner:
            u.truckOwnerId = None
            db.query(Company).filter(Company.truckOwnerId == owner.id).update(
                {Company.truckOwnerId: None}, synchronize_session=False)
            db.flush()
            db.delete(owner)

        log_action(db, actor_id, "DELETE", "User", u.id, f"Admin deleted user {u.email}")
        db.delete(u)
        db.flush()

    # ─── Bulk ─────────────────────────────────────────────────────────────────
    def bulk_operation(self, db: Session, data: BulkUserRequest, actor_id: int) -> int:
        """
        Apply one operation to many accounts in a single transaction; any
        refused account leaves every account untouched. Returns how many
        accounts changed.
        """
        ids = list(dict.fromkeys(data.userIds))
        if actor_id in ids:
            raise ForbiddenException("You cannot include your own account in a bulk operation")

        users = db.query(User).filter(User.id.in_(ids)).all()
        missing = sorted(set(ids) - {u.id for u in users})
        if missing:
            raise ValidationException(details=[{"field": "userIds", "message": f"Unknown user ids: {missing}"}])

        op = data.operation
        if op == BulkOperation.DELETE:
            for u in users:
                self._remove(db, u, actor_id)
            affected = len(users)
        elif op == BulkOperation.UPDATE_ROLE:
            linked = [u.id for u in users if u.role not in ADMIN_ASSIGNABLE]
            if linked:
                raise ConflictException(
                    f"Accounts {linked} hold a role-transition role and keep it", field="userIds")
            affected = (
                db.query(User)
                .filter(User.id.in_(ids), User.role != data.data.role)
                .update({User.role: data.data.role}, synchronize_session=False)
            )
        else:
            active = op == BulkOperation.ACTIVATE
            affected = (
                db.query(User)
                .filter(User.id.in_(ids), User.isActive != active)
                .update({User.isActive: active}, synchronize_session=False)
            )

        log_action(db, actor_id, f"BULK_{op.name}", "User", None,
                   f"Bulk {op.value} on users {ids}: {affected} changed")
        db.commit()
        return affected


user_service = UserService()
