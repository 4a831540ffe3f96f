import enum
from sqlalchemy import Column, Integer, String, Text, Boolean, ForeignKey, TIMESTAMP, Enum, Numeric
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from repairhub.database import Base


class StoreCategory(str, enum.Enum):
    ENGINE_PARTS  = "Engine Parts"
    BRAKE_SYSTEM  = "Brake System"
    TRANSMISSION  = "Transmission"
    ELECTRICAL    = "Electrical"
    BODY_PARTS    = "Body Parts"
    FILTERS       = "Filters"
    FLUIDS        = "Fluids"
    TOOLS         = "Tools"
    ACCESSORIES   = "Accessories"
    OTHER         = "Other"


class StoreItemStatus(str, enum.Enum):
    ACTIVE       = "active"
    INACTIVE     = "inactive"
    DISCONTINUED = "discontinued"


class StoreItem(Base):
    __tablename__ = "store_items"

    id                = Column(Integer, primary_key=True, index=True)
    name              = Column(String(100), nullable=False)
    description       = Column(Text, nullable=False)
    price             = Column(Numeric(12, 2), nullable=False)
    originalPrice     = Column(Numeric(12, 2), nullable=True)
    discount          = Column(Integer, default=0, nullable=False)
    stock             = Column(Integer, default=0, nullable=False)
    lowStockThreshold = Column(Integer, default=10, nullable=False)
    category          = Column(Enum(StoreCategory), nullable=False, index=True)
    brand             = Column(String(100), nullable=True)
    partNumber        = Column(String(100), unique=True, nullable=True)
    imageUrl          = Column(String(500), nullable=True)
    status            = Column(Enum(StoreItemStatus), default=StoreItemStatus.ACTIVE, nullable=False)
    isAvailable       = Column(Boolean, default=True, nullable=False)
    salesCount        = Column(Integer, default=0, nullable=False)
    createdById       = Column(Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True)
    lastUpdatedById   = Column(Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True)
    createdAt         = Column(TIMESTAMP(timezone=True), server_default=func.now(), nullable=False)
    updatedAt         = Column(TIMESTAMP(timezone=True), server_default=func.now(),
                               onupdate=func.now(), nullable=False)

    # ─── Relationships ─────────────────────────────────────────────────────────
    created_by = relationship("User", foreign_keys=[createdById])

    def refresh_availability(self) -> None:
        self.isAvailable = self.stock > 0 and self.status == StoreItemStatus.ACTIVE

    @property
    def stockStatus(self) -> str:
        if self.stock == 0:
            return "out-of-stock"
        if self.stock <= self.lowStockThreshold:
            return "low-stock"
        return "in-stock"

    def __repr__(self):
        return f"<StoreItem id={self.id} name={self.name} stock={self.stock}>"
