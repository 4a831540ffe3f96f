from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session
from typing import Optional

from repairhub.database import get_db
from repairhub.dependencies import get_caller, get_staff
from repairhub.models.store_item import StoreCategory
from repairhub.schemas.caller import CallerContext
from repairhub.schemas.store import StoreItemCreateRequest, StoreItemUpdateRequest
from repairhub.schemas.common import success_response, paginated_response
from repairhub.services.store_service import store_service

router = APIRouter(prefix="/store")


@router.get("", summary="Browse store items")
def list_items(
    page:          int                     = Query(1, ge=1),
    limit:         int                     = Query(20, ge=1, le=100),
    search:        Optional[str]           = Query(None, description="Search by name, brand, or part number"),
    category:      Optional[StoreCategory] = Query(None),
    availableOnly: bool                    = Query(False),
    db:            Session                 = Depends(get_db),
    _:             CallerContext           = Depends(get_caller),
):
    data, total = store_service.list_items(
        db, page, limit, search, category.value if category else None, availableOnly,
    )
    return paginated_response("Store items retrieved successfully", data, total, page, limit)


@router.get("/trending", summary="Best-selling store items")
def trending(
    limit: int           = Query(10, ge=1, le=50),
    db:    Session       = Depends(get_db),
    _:     CallerContext = Depends(get_caller),
):
    return success_response("Trending items retrieved", store_service.trending(db, limit))


@router.get("/low-stock", summary="Items at or below their low-stock threshold (Admin, Employee)")
def low_stock(db: Session = Depends(get_db), _: CallerContext = Depends(get_staff)):
    return success_response("Low stock items retrieved", store_service.low_stock(db))


@router.get("/{item_id}", summary="Get store item by ID")
def get_item(item_id: int, db: Session = Depends(get_db), _: CallerContext = Depends(get_caller)):
    return success_response("Store item retrieved", store_service.get_item(db, item_id))


@router.post("", status_code=status.HTTP_201_CREATED, summary="Add a store item (Admin, Employee)")
def create_item(
    body:   StoreItemCreateRequest,
    db:     Session       = Depends(get_db),
    caller: CallerContext = Depends(get_staff),
):
    return success_response("Store item created successfully", store_service.create_item(db, body, caller))


@router.put("/{item_id}", summary="Update a store item (Admin, Employee)")
def update_item(
    item_id: int,
    body:    StoreItemUpdateRequest,
    db:      Session       = Depends(get_db),
    caller:  CallerContext = Depends(get_staff),
):
    return success_response("Store item updated successfully", store_service.update_item(db, item_id, body, caller))


@router.delete("/{item_id}", summary="Delete a store item (Admin, Employee)")
def delete_item(
    item_id: int,
    db:      Session       = Depends(get_db),
    caller:  CallerContext = Depends(get_staff),
):
    store_service.delete_item(db, item_id, caller)
    return success_response("Store item deleted successfully")
