from sqlalchemy import or_
from sqlalchemy.orm import Session

from repairhub.models.cart import CartItem, CartStatus
from repairhub.models.store_item import StoreItem, StoreItemStatus, StoreCategory
from repairhub.schemas.caller import CallerContext
from repairhub.schemas.common import iso
from repairhub.schemas.store import StoreItemCreateRequest, StoreItemUpdateRequest
from repairhub.utils.audit import log_action
from repairhub.utils.exceptions import NotFoundException, DuplicateEntryException, ConflictException


def serialize_item(i: StoreItem) -> dict:
    return {
        "id":                i.id,
        "name":              i.name,
        "description":       i.description,
        "price":             float(i.price),
        "originalPrice":     float(i.originalPrice) if i.originalPrice is not None else None,
        "discount":          i.discount,
        "stock":             i.stock,
        "stockStatus":       i.stockStatus,
        "lowStockThreshold": i.lowStockThreshold,
        "category":          i.category.value,
        "brand":             i.brand,
        "partNumber":        i.partNumber,
        "imageUrl":          i.imageUrl,
        "status":            i.status.value,
        "isAvailable":       i.isAvailable,
        "salesCount":        i.salesCount,
        "createdAt":         iso(i.createdAt),
    }


class StoreService:

    def _get(self, db: Session, item_id: int) -> StoreItem:
        i = db.query(StoreItem).filter(StoreItem.id == item_id).first()
        if not i:
            raise NotFoundException("Store item")
        return i

    def list_items(
        self, db: Session, page: int, limit: int,
        search: str | None, category: str | None, available_only: bool,
    ) -> tuple[list[dict], int]:
        q = db.query(StoreItem)
        if search:
            kw = f"%{search}%"
            q = q.filter(or_(StoreItem.name.ilike(kw), StoreItem.description.ilike(kw),
                             StoreItem.brand.ilike(kw), StoreItem.partNumber.ilike(kw)))
        if category:
            q = q.filter(StoreItem.category == StoreCategory(category))
        if available_only:
            q = q.filter(StoreItem.isAvailable.is_(True))

        total = q.count()
        items = q.order_by(StoreItem.name).offset((page - 1) * limit).limit(limit).all()
        return [serialize_item(i) for i in items], total

    def get_item(self, db: Session, item_id: int) -> dict:
        return serialize_item(self._get(db, item_id))

    def trending(self, db: Session, limit: int = 10) -> list[dict]:
        """Best sellers first, newest first among equals; discontinued items are left out."""
        items = (
            db.query(StoreItem)
            .filter(StoreItem.status != StoreItemStatus.DISCONTINUED)
            .order_by(StoreItem.salesCount.desc(), StoreItem.createdAt.desc(), StoreItem.id.desc())
            .limit(limit)
            .all()
        )
        return [serialize_item(i) for i in items]

    def low_stock(self, db: Session) -> list[dict]:
        items = (
            db.query(StoreItem)
            .filter(StoreItem.stock <= StoreItem.lowStockThreshold)
            .order_by(StoreItem.stock)
            .all()
        )
        return [serialize_item(i) for i in items]

    def create_item(self, db: Session, data: StoreItemCreateRequest, caller: CallerContext) -> dict:
        if data.partNumber and db.query(StoreItem).filter(StoreItem.partNumber == data.partNumber).first():
            raise DuplicateEntryException("Part number already exists", field="partNumber")

        i = StoreItem(
            **data.model_dump(),
            status=StoreItemStatus.ACTIVE,
            createdById=caller.id,
            lastUpdatedById=caller.id,
        )
        i.refresh_availability()
        db.add(i)
        db.flush()
        log_action(db, caller.id, "CREATE", "StoreItem", i.id, f"Added store item {i.name}")
        db.commit()
        db.refresh(i)
        return serialize_item(i)

    def update_item(self, db: Session, item_id: int, data: StoreItemUpdateRequest, caller: CallerContext) -> dict:
        i = self._get(db, item_id)
        changes = data.model_dump(exclude_none=True)

        part_number = changes.get("partNumber")
        if part_number and part_number != i.partNumber:
            if db.query(StoreItem).filter(StoreItem.partNumber == part_number, StoreItem.id != item_id).first():
                raise DuplicateEntryException("Part number already exists", field="partNumber")

        for field, value in changes.items():
            setattr(i, field, value)
        i.lastUpdatedById = caller.id
        i.refresh_availability()

        log_action(db, caller.id, "UPDATE", "StoreItem", i.id, f"Updated store item {i.name}")
        db.commit()
        db.refresh(i)
        return serialize_item(i)

    def delete_item(self, db: Session, item_id: int, caller: CallerContext) -> None:
        """Active carts lose the item. Sold items can only be discontinued, not deleted."""
        i = self._get(db, item_id)
        lines = db.query(CartItem).filter(CartItem.productId == item_id).all()
        if any(line.cart.status == CartStatus.CHECKED_OUT for line in lines):
            raise ConflictException("Item has been sold; set its status to discontinued instead",
                                    field="status")

        for line in lines:
            cart = line.cart
            cart.items.remove(line)
            cart.recalculate()

        log_action(db, caller.id, "DELETE", "StoreItem", item_id, f"Deleted store item {i.name}")
        db.delete(i)
        db.commit()


store_service = StoreService()
