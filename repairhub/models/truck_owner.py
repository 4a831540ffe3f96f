from sqlalchemy import Column, Integer, String, ForeignKey, TIMESTAMP
from sqlalchemy.sql import func
from repairhub.database import Base


class TruckOwner(Base):
    __tablename__ = "truck_owners"

    id           = Column(Integer, primary_key=True, index=True)
    userId       = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"),
                          unique=True, nullable=False)
    licensePlate = Column(String(11), nullable=False, index=True)
    createdAt    = Column(TIMESTAMP(timezone=True), server_default=func.now(), nullable=False)

    def __repr__(self):
        return f"<TruckOwner id={self.id} userId={self.userId} plate={self.licensePlate}>"
