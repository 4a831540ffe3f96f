import enum
from sqlalchemy import Column, Integer, ForeignKey, TIMESTAMP, Enum, Numeric
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from repairhub.database import Base


class CartStatus(str, enum.Enum):
    ACTIVE      = "active"
    CHECKED_OUT = "checked-out"
    CANCELLED   = "cancelled"


class Cart(Base):
    __tablename__ = "carts"

    id         = Column(Integer, primary_key=True, index=True)
    userId     = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    status     = Column(Enum(CartStatus), default=CartStatus.ACTIVE, nullable=False)
    totalPrice = Column(Numeric(12, 2), default=0, nullable=False)
    createdAt  = Column(TIMESTAMP(timezone=True), server_default=func.now(), nullable=False)
    updatedAt  = Column(TIMESTAMP(timezone=True), server_default=func.now(),
                        onupdate=func.now(), nullable=False)

    # ─── Relationships ─────────────────────────────────────────────────────────
    user  = relationship("User", back_populates="carts")
    items = relationship("CartItem", back_populates="cart", order_by="CartItem.id",
                         cascade="all, delete-orphan")

    def recalculate(self) -> None:
        self.totalPrice = sum((i.totalPrice for i in self.items), 0)

    def __repr__(self):
        return f"<Cart id={self.id} userId={self.userId} status={self.status}>"


class CartItem(Base):
    __tablename__ = "cart_items"

    id         = Column(Integer, primary_key=True, index=True)
    cartId     = Column(Integer, ForeignKey("carts.id", ondelete="CASCADE"), nullable=False, index=True)
    productId  = Column(Integer, ForeignKey("store_items.id", ondelete="CASCADE"), nullable=False)
    quantity   = Column(Integer, nullable=False)
    totalPrice = Column(Numeric(12, 2), nullable=False)

    # ─── Relationships ─────────────────────────────────────────────────────────
    cart    = relationship("Cart", back_populates="items")
    product = relationship("StoreItem")

    def __repr__(self):
        return f"<CartItem id={self.id} productId={self.productId} qty={self.quantity}>"
