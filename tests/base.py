import os

os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("SECRET_KEY", "repairhub-test-secret")
os.environ.setdefault("APP_ENV", "testing")

import itertools
import unittest
from datetime import date, timedelta

from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

import repairhub.models  # noqa: F401  registers models on Base.metadata
from repairhub.database import Base, get_db
from repairhub.main import app
from repairhub.models.company import Company, ProfileStatus
from repairhub.models.role import UserRole
from repairhub.models.truck import Truck, TruckStatus
from repairhub.models.user import User
from repairhub.utils.security import hash_password, create_access_token

PASSWORD = "Secret123"
PASSWORD_HASH = hash_password(PASSWORD)

NEXT_YEAR = (date.today() + timedelta(days=365)).isoformat()

LICENSE = {
    "companyFullName":      "Acme Repairs LLC",
    "companyLicenseNumber": "CN-1234567",
    "licenseType":          "Commercial",
    "issuingAuthority":     "Dubai Economy",
    "TRN":                  "100200300400003",
    "creationDate":         "2020-01-15",
    "expiryDate":           NEXT_YEAR,
}
OWNER = {
    "ownerFullName": "Sara Ahmed",
    "ownerIdNumber": "784198712345",
    "ownerPhone":    "0501234567",
    "ownerEmail":    "sara@acme-repairs.ae",
}
BANK = {
    "bankName":     "Emirates NBD",
    "accountName":  "Acme Repairs LLC",
    "currencyType": "AED",
    "iban":         "AE070331234567890123456",
    "swiftCode":    "EBILAEAD",
}


class ApiTestCase(unittest.TestCase):
    """Fresh in-memory database and API client for every test."""

    def setUp(self):
        self.engine = create_engine(
            "sqlite://",
            connect_args={"check_same_thread": False},
            poolclass=StaticPool,
        )
        Base.metadata.create_all(bind=self.engine)
        self.Session = sessionmaker(bind=self.engine, autoflush=False, expire_on_commit=False)

        def override_get_db():
            db = self.Session()
            try:
                yield db
            finally:
                db.close()

        app.dependency_overrides[get_db] = override_get_db
        self.client = TestClient(app)
        self._seq = itertools.count(1)

    def tearDown(self):
        app.dependency_overrides.clear()
        Base.metadata.drop_all(bind=self.engine)
        self.engine.dispose()

    # ─── Data helpers ─────────────────────────────────────────────────────────
    def make_user(self, role: UserRole = UserRole.GENERAL, company_id: int | None = None, **fields) -> User:
        n = next(self._seq)
        with self.Session() as db:
            user = User(
                name=fields.pop("name", f"User {n}"),
                email=fields.pop("email", f"user{n}@repairhub.ae"),
                phone=fields.pop("phone", f"+97150{n:07d}"),
                password=PASSWORD_HASH,
                role=role,
                companyId=company_id,
                isActive=True,
                **fields,
            )
            db.add(user)
            db.commit()
            db.refresh(user)
            return user

    def make_company(self, status: ProfileStatus = ProfileStatus.INITIAL, **fields) -> Company:
        n = next(self._seq)
        details = {
            ProfileStatus.INITIAL:  ([], [], []),
            ProfileStatus.BASIC:    ([], [LICENSE], [OWNER]),
            ProfileStatus.COMPLETE: ([BANK], [LICENSE], [OWNER]),
        }[status]
        with self.Session() as db:
            company = Company(
                companyName=fields.pop("companyName", f"Company {n}"),
                contactEmail=fields.pop("contactEmail", f"company{n}@repairhub.ae"),
                profileStatus=status,
                bankDetails=details[0],
                licenseDetails=details[1],
                ownerDetails=details[2],
                **fields,
            )
            db.add(company)
            db.commit()
            db.refresh(company)
            return company

    def make_company_account(self, status: ProfileStatus = ProfileStatus.COMPLETE) -> tuple[User, Company]:
        company = self.make_company(status)
        return self.make_user(UserRole.COMPANY, company_id=company.id), company

    def make_truck(self, owner: User, plate: str | None = None, company_id: int | None = None) -> Truck:
        n = next(self._seq)
        with self.Session() as db:
            truck = Truck(
                licensePlate=plate or f"DXB-{n:04d}",
                brand="Volvo",
                ownerId=owner.id,
                companyId=company_id,
                status=TruckStatus.PENDING,
            )
            db.add(truck)
            db.commit()
            db.refresh(truck)
            return truck

    def auth(self, user: User) -> dict:
        token = create_access_token(user.id, user.role.value, user.email)
        return {"Authorization": f"Bearer {token}"}

    # ─── Query helpers ────────────────────────────────────────────────────────
    def count(self, model, *criteria) -> int:
        with self.Session() as db:
            return db.query(model).filter(*criteria).count()

    def fetch(self, model, pk):
        with self.Session() as db:
            return db.get(model, pk)
