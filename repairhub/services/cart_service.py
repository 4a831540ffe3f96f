import logging
from decimal import Decimal

from sqlalchemy.orm import Session

from repairhub.models.cart import Cart, CartItem, CartStatus
from repairhub.models.store_item import StoreItem, StoreItemStatus
from repairhub.schemas.caller import CallerContext
from repairhub.schemas.common import iso
from repairhub.schemas.store import CartItemRequest
from repairhub.utils.audit import log_action
from repairhub.utils.exceptions import (
    NotFoundException, InsufficientStockException, ValidationException,
)

logger = logging.getLogger(__name__)


def _serialize(c: Cart | None) -> dict:
    if c is None:
        return {"id": None, "status": CartStatus.ACTIVE.value, "items": [], "totalPrice": 0.0}
    return {
        "id":     c.id,
        "status": c.status.value,
        "items": [
            {
                "productId":  i.productId,
                "name":       i.product.name,
                "unitPrice":  float(i.product.price),
                "quantity":   i.quantity,
                "totalPrice": float(i.totalPrice),
            }
            for i in c.items
        ],
        "totalPrice": float(c.totalPrice or 0),
        "updatedAt":  iso(c.updatedAt),
    }


class CartService:

    @staticmethod
    def _active_cart(db: Session, user_id: int) -> Cart | None:
        return db.query(Cart).filter(Cart.userId == user_id, Cart.status == CartStatus.ACTIVE).first()

    @staticmethod
    def _product(db: Session, product_id: int) -> StoreItem:
        product = db.query(StoreItem).filter(StoreItem.id == product_id).first()
        if not product or product.status != StoreItemStatus.ACTIVE:
            raise NotFoundException("Product")
        return product

    def get_cart(self, db: Session, caller: CallerContext) -> dict:
        return _serialize(self._active_cart(db, caller.id))

    def add_item(self, db: Session, data: CartItemRequest, caller: CallerContext) -> dict:
        product = self._product(db, data.productId)

        cart = self._active_cart(db, caller.id)
        if cart is None:
            cart = Cart(userId=caller.id, status=CartStatus.ACTIVE, totalPrice=0)
            db.add(cart)

        line = next((i for i in cart.items if i.productId == product.id), None)
        quantity = data.quantity + (line.quantity if line else 0)
        if product.stock < quantity:
            raise InsufficientStockException(product.stock)

        if line is None:
            line = CartItem(productId=product.id, quantity=0, totalPrice=0)
            cart.items.append(line)
        line.product    = product
        line.quantity   = quantity
        line.totalPrice = Decimal(str(product.price)) * quantity
        cart.recalculate()

        db.commit()
        db.refresh(cart)
        logger.info(f"User {caller.id} added product {product.id} x{data.quantity} to cart {cart.id}")
        return _serialize(cart)

    def update_item(self, db: Session, data: CartItemRequest, caller: CallerContext) -> dict:
        cart = self._active_cart(db, caller.id)
        line = next((i for i in cart.items if i.productId == data.productId), None) if cart else None
        if line is None:
            raise NotFoundException("Cart item")

        product = self._product(db, data.productId)
        if product.stock < data.quantity:
            raise InsufficientStockException(product.stock)

        line.quantity   = data.quantity
        line.totalPrice = Decimal(str(product.price)) * data.quantity
        cart.recalculate()
        db.commit()
        db.refresh(cart)
        return _serialize(cart)

    def remove_item(self, db: Session, product_id: int, caller: CallerContext) -> dict:
        cart = self._active_cart(db, caller.id)
        line = next((i for i in cart.items if i.productId == product_id), None) if cart else None
        if line is None:
            raise NotFoundException("Cart item")

        cart.items.remove(line)
        cart.recalculate()
        db.commit()
        db.refresh(cart)
        return _serialize(cart)

    def clear(self, db: Session, caller: CallerContext) -> dict:
        cart = self._active_cart(db, caller.id)
        if cart is None:
            raise NotFoundException("Cart")
        cart.items.clear()
        cart.recalculate()
        db.commit()
        db.refresh(cart)
        return _serialize(cart)

    def checkout(self, db: Session, caller: CallerContext) -> dict:
        """
        Reserve stock for every line and close the cart, all or nothing.
        Each decrement only applies while enough stock is left.
        """
        cart = self._active_cart(db, caller.id)
        if cart is None or not cart.items:
            raise ValidationException("Cart is empty or not found.")

        try:
            for line in cart.items:
                taken = (
                    db.query(StoreItem)
                    .filter(StoreItem.id == line.productId, StoreItem.stock >= line.quantity)
                    .update({
                        StoreItem.stock:      StoreItem.stock - line.quantity,
                        StoreItem.salesCount: StoreItem.salesCount + line.quantity,
                    }, synchronize_session=False)
                )
                if taken == 0:
                    db.refresh(line.product)
                    raise InsufficientStockException(line.product.stock)
                db.refresh(line.product)
                line.product.refresh_availability()

            cart.status = CartStatus.CHECKED_OUT
            log_action(db, caller.id, "CHECKOUT", "Cart", cart.id, f"Checked out {float(cart.totalPrice):.2f}")
            db.commit()
        except Exception:
            db.rollback()
            raise

        logger.info(f"Cart {cart.id} checked out by user {caller.id}")
        return {"orderId": cart.id, "totalPrice": float(cart.totalPrice)}


cart_service = CartService()
