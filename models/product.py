from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field, field_validator
from sqlalchemy import Column, Integer, String, Float, DateTime, JSON, CheckConstraint, func

from models.base import Base


class Product(Base):
    __tablename__ = 'products'

    id = Column(Integer, primary_key=True)
    name = Column(String, nullable=False)
    description = Column(String, nullable=False, default="")
    price = Column(Float, nullable=False)
    # Only mutated by the verification workflow (floored decrement on approval)
    stock = Column(Integer, nullable=False, default=0)
    images = Column(JSON, nullable=False, default=list)
    created_at = Column(DateTime, default=func.now())

    __table_args__ = (
        CheckConstraint('price > 0', name='check_product_price_positive'),
        CheckConstraint('stock >= 0', name='check_product_stock_non_negative'),
    )


class ProductDTO(BaseModel):
    id: int | None = None
    name: str | None = None
    description: str | None = None
    price: float | None = None
    stock: int | None = Field(default=None, ge=0)
    images: list[str] = Field(default_factory=list)
    created_at: datetime | None = None


class StockAdjustmentDTO(BaseModel):
    """Result of one floored stock decrement during an approval."""
    product_id: int
    quantity: int
    new_stock: int


class ProductCreateRequestDTO(BaseModel):
    """Admin input for a new catalog entry; stock is the opening inventory."""
    name: str = Field(..., min_length=1)
    description: str = ""
    price: float = Field(..., gt=0)
    stock: int = Field(default=0, ge=0)
    images: list[str] = Field(default_factory=list)

    @field_validator('name')
    @classmethod
    def strip_name(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("name must not be blank")
        return v


class ProductUpdateRequestDTO(BaseModel):
    """
    Partial catalog update.

    Stock is absent: after creation it only changes through
    order approval. Unknown fields (including stock) are rejected.
    """
    model_config = ConfigDict(extra='forbid')

    name: str | None = Field(default=None, min_length=1)
    description: str | None = None
    price: float | None = Field(default=None, gt=0)
    images: list[str] | None = None
