import enum
from sqlalchemy import Column, Integer, String, ForeignKey, TIMESTAMP, Enum, JSON
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from repairhub.database import Base


class JobCardStatus(str, enum.Enum):
    IN_PROGRESS = "in-progress"
    COMPLETED   = "completed"
    ARCHIVED    = "archived"


class JobCard(Base):
    __tablename__ = "job_cards"

    id            = Column(Integer, primary_key=True, index=True)
    truckId       = Column(Integer, ForeignKey("trucks.id", ondelete="CASCADE"), nullable=False, index=True)
    entryDate     = Column(TIMESTAMP(timezone=True), server_default=func.now(), nullable=False)
    description   = Column(JSON, default=list, nullable=False)   # [{partName, partCost, repairFee}]
    status        = Column(Enum(JobCardStatus), default=JobCardStatus.IN_PROGRESS, nullable=False)
    completedDate = Column(TIMESTAMP(timezone=True), nullable=True)

    # All three set together, or none of them
    driverName    = Column(String(100), nullable=True)
    driverPhone   = Column(String(10), nullable=True)
    companyId     = Column(Integer, ForeignKey("companies.id"), nullable=True, index=True)

    createdAt     = Column(TIMESTAMP(timezone=True), server_default=func.now(), nullable=False)
    updatedAt     = Column(TIMESTAMP(timezone=True), server_default=func.now(),
                           onupdate=func.now(), nullable=False)

    # ─── Relationships ─────────────────────────────────────────────────────────
    truck   = relationship("Truck", foreign_keys=[truckId], back_populates="repairHistory")
    company = relationship("Company", back_populates="job_cards")

    @property
    def totalCost(self) -> float:
        return round(sum(float(i["partCost"]) + float(i["repairFee"]) for i in self.description or []), 2)

    def __repr__(self):
        return f"<JobCard id={self.id} truckId={self.truckId} status={self.status}>"
