from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from repairhub.database import get_db
from repairhub.dependencies import get_caller
from repairhub.schemas.caller import CallerContext
from repairhub.schemas.store import CartItemRequest
from repairhub.schemas.common import success_response
from repairhub.services.cart_service import cart_service

router = APIRouter(prefix="/cart")


@router.get("", summary="Get the caller's active cart")
def get_cart(db: Session = Depends(get_db), caller: CallerContext = Depends(get_caller)):
    return success_response("Cart retrieved", cart_service.get_cart(db, caller))


@router.post("/add", summary="Add a product to the cart")
def add_item(body: CartItemRequest, db: Session = Depends(get_db), caller: CallerContext = Depends(get_caller)):
    return success_response("Item added to cart", cart_service.add_item(db, body, caller))


@router.put("/update", summary="Change the quantity of a cart line")
def update_item(body: CartItemRequest, db: Session = Depends(get_db), caller: CallerContext = Depends(get_caller)):
    return success_response("Cart updated", cart_service.update_item(db, body, caller))


@router.delete("/remove/{product_id}", summary="Remove a product from the cart")
def remove_item(product_id: int, db: Session = Depends(get_db), caller: CallerContext = Depends(get_caller)):
    return success_response("Item removed from cart", cart_service.remove_item(db, product_id, caller))


@router.delete("/clear", summary="Empty the cart")
def clear_cart(db: Session = Depends(get_db), caller: CallerContext = Depends(get_caller)):
    return success_response("Cart cleared", cart_service.clear(db, caller))


@router.post("/checkout", summary="Check out the cart")
def checkout(db: Session = Depends(get_db), caller: CallerContext = Depends(get_caller)):
    """Stock is reserved for every line or for none of them."""
    return success_response("Checkout successful", cart_service.checkout(db, caller))
