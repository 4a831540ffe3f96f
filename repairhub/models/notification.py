import enum
from sqlalchemy import Column, Integer, String, Text, ForeignKey, TIMESTAMP, Enum
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from repairhub.database import Base


class NotificationStatus(str, enum.Enum):
    UNREAD = "unread"
    READ   = "read"


class Notification(Base):
    __tablename__ = "notifications"

    id        = Column(Integer, primary_key=True, index=True)
    userId    = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    message   = Column(Text, nullable=False)
    type      = Column(String(50), default="general", nullable=False)
    status    = Column(Enum(NotificationStatus), default=NotificationStatus.UNREAD, nullable=False)
    createdAt = Column(TIMESTAMP(timezone=True), server_default=func.now(), nullable=False)

    # ─── Relationships ─────────────────────────────────────────────────────────
    user = relationship("User", back_populates="notifications")

    def __repr__(self):
        return f"<Notification id={self.id} userId={self.userId} status={self.status}>"
