from sqlalchemy import Column, Integer, String, Boolean, ForeignKey, TIMESTAMP, Enum, JSON
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from repairhub.database import Base
from repairhub.models.role import UserRole


class User(Base):
    __tablename__ = "users"

    id               = Column(Integer, primary_key=True, index=True)
    name             = Column(String(150), nullable=True)       # NULL only for admin accounts
    email            = Column(String(255), unique=True, nullable=False, index=True)
    phone            = Column(String(20), unique=True, nullable=True, index=True)
    password         = Column(String(255), nullable=False)
    role             = Column(Enum(UserRole), default=UserRole.GENERAL, nullable=False, index=True)

    # ─── Role-specific ─────────────────────────────────────────────────────────
    licensePlate     = Column(String(11), nullable=True)
    companyId        = Column(Integer, ForeignKey("companies.id", ondelete="SET NULL",
                                                  use_alter=True, name="fk_users_company"),
                              unique=True, nullable=True)
    truckOwnerId     = Column(Integer, ForeignKey("truck_owners.id", ondelete="SET NULL",
                                                  use_alter=True, name="fk_users_truck_owner"),
                              nullable=True)
    driverInfo       = Column(JSON, nullable=True)
    companyDetails   = Column(JSON, nullable=True)

    # ─── Account status ────────────────────────────────────────────────────────
    isActive         = Column(Boolean, default=True, nullable=False)
    resetCode        = Column(String(255), nullable=True)      # bcrypt hash of the code
    resetCodeExpires = Column(TIMESTAMP(timezone=True), nullable=True)
    createdAt        = Column(TIMESTAMP(timezone=True), server_default=func.now(), nullable=False)
    updatedAt        = Column(TIMESTAMP(timezone=True), server_default=func.now(),
                              onupdate=func.now(), nullable=False)

    # ─── Relationships ─────────────────────────────────────────────────────────
    company          = relationship("Company", foreign_keys=[companyId], back_populates="accounts")
    truck_owner      = relationship("TruckOwner", foreign_keys=[truckOwnerId])
    trucks           = relationship("Truck", back_populates="owner", order_by="Truck.id")
    driver_profiles  = relationship("Driver", back_populates="user")
    notifications    = relationship("Notification", back_populates="user", cascade="all, delete-orphan")
    carts            = relationship("Cart", back_populates="user", cascade="all, delete-orphan")
    audit_logs       = relationship("AuditLog", back_populates="user")

    def __repr__(self):
        return f"<User id={self.id} email={self.email} role={self.role}>"
