from sqlalchemy import Column, Integer, String, Boolean, ForeignKey, TIMESTAMP, JSON, Date
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from repairhub.database import Base


class Driver(Base):
    __tablename__ = "drivers"

    id                        = Column(Integer, primary_key=True, index=True)
    driverName                = Column(String(50), nullable=False)
    driverPhone               = Column(String(20), nullable=False, index=True)   # one account per phone (services)
    driverIdNumber            = Column(String(50), unique=True, nullable=True, index=True)
    licensePlate              = Column(String(11), nullable=True)
    truckNumber               = Column(String(50), nullable=True)
    userId                    = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"),
                                       nullable=False, index=True)

    # ─── Employer: exactly one of these is set ─────────────────────────────────
    isRegisteredCompanyDriver = Column(Boolean, default=False, nullable=False)
    associatedCompanyId       = Column(Integer, ForeignKey("companies.id"), nullable=True, index=True)
    externalCompanyDetails    = Column(JSON, nullable=True)   # {companyName, contactPerson, contactPhone}

    # ─── Emergency contact ─────────────────────────────────────────────────────
    emergencyContactName         = Column(String(100), nullable=True)
    emergencyContactPhone        = Column(String(20), nullable=True)
    emergencyContactRelationship = Column(String(20), nullable=True)

    # ─── License ───────────────────────────────────────────────────────────────
    licenseNumber = Column(String(50), nullable=True)
    licenseExpiry = Column(Date, nullable=True)
    licenseType   = Column(String(20), nullable=True)

    isActive   = Column(Boolean, default=True, nullable=False)
    rating     = Column(Integer, nullable=True)
    totalJobs  = Column(Integer, default=0, nullable=False)
    createdAt  = Column(TIMESTAMP(timezone=True), server_default=func.now(), nullable=False)
    updatedAt  = Column(TIMESTAMP(timezone=True), server_default=func.now(),
                        onupdate=func.now(), nullable=False)

    # ─── Relationships ─────────────────────────────────────────────────────────
    user    = relationship("User", back_populates="driver_profiles")
    company = relationship("Company", back_populates="drivers")

    def __repr__(self):
        return f"<Driver id={self.id} phone={self.driverPhone} registered={self.isRegisteredCompanyDriver}>"
