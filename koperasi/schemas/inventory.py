from typing import Annotated, Literal, Optional, Union

from pydantic import Field, TypeAdapter, model_validator

from .common import NonNegativeAmount, Pagination, PartialUpdate, QuerySchema, RequestSchema, UtcDatetime


class ProductCreate(RequestSchema):
    sku: str = Field(..., min_length=1, max_length=64)
    name: str = Field(..., min_length=1, max_length=255)
    description: Optional[str] = Field(None, max_length=2000)
    category_id: Optional[int] = None
    supplier_id: Optional[int] = None
    purchase_price: NonNegativeAmount = 0
    selling_price: NonNegativeAmount
    # Opening stock, recorded as an IN movement
    stock: int = Field(0, ge=0)
    min_stock: int = Field(0, ge=0)
    is_active: bool = True


class ProductUpdate(PartialUpdate):
    not_nullable = ("sku", "name", "purchase_price", "selling_price", "min_stock", "is_active")

    sku: Optional[str] = Field(None, min_length=1, max_length=64)
    name: Optional[str] = Field(None, min_length=1, max_length=255)
    description: Optional[str] = Field(None, max_length=2000)
    category_id: Optional[int] = None
    supplier_id: Optional[int] = None
    purchase_price: Optional[NonNegativeAmount] = None
    selling_price: Optional[NonNegativeAmount] = None
    min_stock: Optional[int] = Field(None, ge=0)
    is_active: Optional[bool] = None
    # Optional optimistic-concurrency token from a previous read
    version_id: Optional[int] = None


class ProductFilter(Pagination):
    search: Optional[str] = Field(None, max_length=100)
    category_id: Optional[int] = None
    supplier_id: Optional[int] = None
    is_active: Optional[bool] = None
    low_stock: bool = False


class StockIn(RequestSchema):
    type: Literal["IN"]
    product_id: int
    quantity: int = Field(..., gt=0)
    notes: Optional[str] = Field(None, max_length=255)


class StockOut(RequestSchema):
    type: Literal["OUT"]
    product_id: int
    quantity: int = Field(..., gt=0)
    notes: Optional[str] = Field(None, max_length=255)


class StockAdjustment(RequestSchema):
    """Either a signed correction (`quantity`) or a counted level (`new_stock`)."""
    type: Literal["ADJUSTMENT"]
    product_id: int
    quantity: Optional[int] = None
    new_stock: Optional[int] = Field(None, ge=0)
    notes: Optional[str] = Field(None, max_length=255)

    @model_validator(mode="after")
    def _one_of_quantity_or_count(self):
        if (self.quantity is None) == (self.new_stock is None):
            raise ValueError("Provide exactly one of quantity or new_stock")
        if self.quantity == 0:
            raise ValueError("Adjustment quantity must not be zero")
        return self


StockMovementRequest = Annotated[Union[StockIn, StockOut, StockAdjustment], Field(discriminator="type")]
stock_movement_adapter = TypeAdapter(StockMovementRequest)


class StockMovementFilter(Pagination):
    product_id: Optional[int] = None
    type: Optional[Literal["IN", "OUT", "ADJUSTMENT"]] = None
    start_date: Optional[UtcDatetime] = None
    end_date: Optional[UtcDatetime] = None


class CategoryCreate(RequestSchema):
    name: str = Field(..., min_length=1, max_length=128)
    description: Optional[str] = Field(None, max_length=2000)


class CategoryQuery(QuerySchema):
    search: Optional[str] = None
