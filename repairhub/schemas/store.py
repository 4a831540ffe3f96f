from typing import Optional

from pydantic import BaseModel, Field, field_validator, model_validator

from repairhub.models.store_item import StoreCategory, StoreItemStatus
from repairhub.utils.validators import not_blank


# ─── Store items ──────────────────────────────────────────────────────────────
class StoreItemCreateRequest(BaseModel):
    name:              str = Field(max_length=100)
    description:       str = Field(max_length=1000)
    price:             float = Field(ge=0)
    originalPrice:     Optional[float] = Field(None, ge=0)
    discount:          int = Field(0, ge=0, le=100)
    stock:             int = Field(0, ge=0)
    lowStockThreshold: int = Field(10, ge=0)
    category:          StoreCategory
    brand:             Optional[str] = None
    partNumber:        Optional[str] = None
    imageUrl:          Optional[str] = None

    @field_validator("name", "description")
    @classmethod
    def not_empty(cls, v): return not_blank(v)

    @model_validator(mode="after")
    def price_not_above_original(self) -> "StoreItemCreateRequest":
        if self.originalPrice is not None and self.price > self.originalPrice:
            raise ValueError("price cannot exceed originalPrice")
        return self


class StoreItemUpdateRequest(BaseModel):
    name:              Optional[str] = Field(None, max_length=100)
    description:       Optional[str] = Field(None, max_length=1000)
    price:             Optional[float] = Field(None, ge=0)
    originalPrice:     Optional[float] = Field(None, ge=0)
    discount:          Optional[int] = Field(None, ge=0, le=100)
    stock:             Optional[int] = Field(None, ge=0)
    lowStockThreshold: Optional[int] = Field(None, ge=0)
    category:          Optional[StoreCategory] = None
    brand:             Optional[str] = None
    partNumber:        Optional[str] = None
    imageUrl:          Optional[str] = None
    status:            Optional[StoreItemStatus] = None


# ─── Cart ─────────────────────────────────────────────────────────────────────
class CartItemRequest(BaseModel):
    productId: int
    quantity:  int = Field(ge=1)
