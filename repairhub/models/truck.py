import enum
from sqlalchemy import Column, Integer, String, ForeignKey, TIMESTAMP, Enum
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from repairhub.database import Base


class TruckStatus(str, enum.Enum):
    PENDING   = "pending"
    FINALIZED = "finalized"


class RepairStage(str, enum.Enum):
    INSPECTION         = "inspection"
    REPAIR_IN_PROGRESS = "repair in progress"
    QUALITY_CHECK      = "quality check"
    READY_FOR_PICKUP   = "ready for pick-up"


class Truck(Base):
    __tablename__ = "trucks"

    id               = Column(Integer, primary_key=True, index=True)
    licensePlate     = Column(String(11), unique=True, nullable=False, index=True)
    brand            = Column(String(100), nullable=False)
    ownerId          = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    companyId        = Column(Integer, ForeignKey("companies.id"), nullable=True, index=True)
    currentJobCardId = Column(Integer, ForeignKey("job_cards.id", use_alter=True,
                                                  name="fk_trucks_current_job_card"),
                              nullable=True)
    status           = Column(Enum(TruckStatus), default=TruckStatus.PENDING, nullable=False)
    createdAt        = Column(TIMESTAMP(timezone=True), server_default=func.now(), nullable=False)
    updatedAt        = Column(TIMESTAMP(timezone=True), server_default=func.now(),
                              onupdate=func.now(), nullable=False)

    # ─── Relationships ─────────────────────────────────────────────────────────
    owner            = relationship("User", back_populates="trucks")
    company          = relationship("Company", back_populates="associatedTrucks")
    repairHistory    = relationship("JobCard", foreign_keys="JobCard.truckId", back_populates="truck",
                                    order_by="JobCard.id", cascade="all, delete-orphan")
    currentJobCard   = relationship("JobCard", foreign_keys=[currentJobCardId], post_update=True)
    repairMilestones = relationship("TruckMilestone", back_populates="truck",
                                    order_by="TruckMilestone.id", cascade="all, delete-orphan")

    def __repr__(self):
        return f"<Truck id={self.id} plate={self.licensePlate} status={self.status}>"


class TruckMilestone(Base):
    __tablename__ = "truck_milestones"

    id          = Column(Integer, primary_key=True, index=True)
    truckId     = Column(Integer, ForeignKey("trucks.id", ondelete="CASCADE"), nullable=False, index=True)
    stage       = Column(Enum(RepairStage), nullable=False)
    completedAt = Column(TIMESTAMP(timezone=True), nullable=True)

    # ─── Relationships ─────────────────────────────────────────────────────────
    truck = relationship("Truck", back_populates="repairMilestones")

    def __repr__(self):
        return f"<TruckMilestone id={self.id} truckId={self.truckId} stage={self.stage}>"
