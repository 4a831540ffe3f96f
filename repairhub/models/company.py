import enum
from sqlalchemy import Column, Integer, String, ForeignKey, TIMESTAMP, Enum, JSON
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from repairhub.database import Base


class ProfileStatus(str, enum.Enum):
    INITIAL  = "initial"
    BASIC    = "basic"
    COMPLETE = "complete"


class Company(Base):
    __tablename__ = "companies"

    id             = Column(Integer, primary_key=True, index=True)
    truckOwnerId   = Column(Integer, ForeignKey("truck_owners.id", ondelete="SET NULL"), nullable=True)
    companyName    = Column(String(200), nullable=False)
    contactEmail   = Column(String(255), unique=True, nullable=False, index=True)
    profileStatus  = Column(Enum(ProfileStatus), default=ProfileStatus.INITIAL, nullable=False)

    # Embedded detail lists (see schemas/company.py for their shape)
    bankDetails    = Column(JSON, default=list, nullable=False)
    licenseDetails = Column(JSON, default=list, nullable=False)
    ownerDetails   = Column(JSON, default=list, nullable=False)

    createdAt      = Column(TIMESTAMP(timezone=True), server_default=func.now(), nullable=False)
    updatedAt      = Column(TIMESTAMP(timezone=True), server_default=func.now(),
                            onupdate=func.now(), nullable=False)

    # ─── Relationships ─────────────────────────────────────────────────────────
    accounts         = relationship("User", foreign_keys="User.companyId", back_populates="company")
    drivers          = relationship("Driver", back_populates="company", order_by="Driver.id")
    associatedTrucks = relationship("Truck", back_populates="company", order_by="Truck.id")
    job_cards        = relationship("JobCard", back_populates="company")
    truck_owner      = relationship("TruckOwner", foreign_keys=[truckOwnerId])

    def __repr__(self):
        return f"<Company id={self.id} name={self.companyName} status={self.profileStatus}>"
