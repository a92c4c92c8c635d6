from datetime import datetime

from pydantic import BaseModel, Field, field_validator
from sqlalchemy import Column, Integer, Float, DateTime, ForeignKey, String, Text, func, CheckConstraint, Index
from sqlalchemy.orm import relationship

from enums.document_status import DocumentStatus
from enums.order_decision import OrderDecision
from enums.order_status import OrderStatus
from enums.payment_status import PaymentStatus
from models.base import Base, enum_column
from models.orderItem import OrderItemDTO
from models.product import StockAdjustmentDTO


class Order(Base):
    __tablename__ = 'orders'

    id = Column(Integer, primary_key=True)
    user_id = Column(Integer, ForeignKey('users.id'), nullable=False)
    status = Column(enum_column(OrderStatus, 'order_status'), nullable=False, default=OrderStatus.PENDING)
    total_price = Column(Float, nullable=False)
    shipping_address = Column(Text, nullable=False)
    customer_mobile = Column(String(32), nullable=False)
    created_at = Column(DateTime, default=func.now())
    decided_at = Column(DateTime, nullable=True)  # Set by the verification workflow

    # Invoice + shipping label follow-up task (runs after approval, retried independently)
    documents_status = Column(enum_column(DocumentStatus, 'document_status'), nullable=False,
                              default=DocumentStatus.NOT_REQUESTED)
    documents_attempts = Column(Integer, nullable=False, default=0)
    documents_last_error = Column(Text, nullable=True)
    documents_updated_at = Column(DateTime, nullable=True)

    # Relations
    user = relationship('User', backref='orders')
    items = relationship('OrderItem', back_populates='order', cascade='all, delete-orphan')
    payment = relationship('Payment', back_populates='order', uselist=False, cascade='all, delete-orphan')
    invoice = relationship('Invoice', back_populates='order', uselist=False, cascade='all, delete-orphan')
    shipping_label = relationship('ShippingLabel', back_populates='order', uselist=False, cascade='all, delete-orphan')

    __table_args__ = (
        CheckConstraint('total_price > 0', name='check_order_total_price_positive'),
        CheckConstraint('documents_attempts >= 0', name='check_order_documents_attempts_non_negative'),
        Index('ix_orders_status_created', 'status', 'created_at'),
    )


class OrderDTO(BaseModel):
    id: int | None = None
    user_id: int | None = None
    status: OrderStatus | None = None
    total_price: float | None = None
    shipping_address: str | None = None
    customer_mobile: str | None = None
    created_at: datetime | None = None
    decided_at: datetime | None = None
    documents_status: DocumentStatus | None = None
    documents_attempts: int | None = None
    documents_last_error: str | None = None
    documents_updated_at: datetime | None = None


class CheckoutItemDTO(BaseModel):
    product_id: int
    quantity: int = Field(..., gt=0)


class CheckoutRequestDTO(BaseModel):
    """Everything the customer submits at checkout."""
    user_id: int
    items: list[CheckoutItemDTO]
    shipping_address: str = Field(..., min_length=1)
    customer_mobile: str = Field(..., min_length=1, max_length=32)
    transaction_id: str

    @field_validator('shipping_address', 'customer_mobile', 'transaction_id')
    @classmethod
    def strip_whitespace(cls, v: str) -> str:
        return v.strip()


class OrderLineDTO(BaseModel):
    """Line item joined with the product name, as printed on documents."""
    product_id: int
    product_name: str
    quantity: int
    price: float

    @property
    def line_total(self) -> float:
        return self.price * self.quantity


class OrderDetailsDTO(BaseModel):
    """
    Read model for document generation and the admin order list.

    Combines the order header, its line items (with product names),
    the owning user and the payment record.
    """
    order: OrderDTO
    lines: list[OrderLineDTO] = Field(default_factory=list)
    customer_name: str | None = None
    customer_email: str | None = None
    transaction_id: str | None = None
    screenshot_url: str | None = None
    payment_status: PaymentStatus | None = None
    invoice_number: str | None = None
    invoice_url: str | None = None
    tracking_number: str | None = None
    label_url: str | None = None


class OrderActionResultDTO(BaseModel):
    order_id: int
    decision: OrderDecision
    order_status: OrderStatus
    payment_status: PaymentStatus
    stock_adjustments: list[StockAdjustmentDTO] = Field(default_factory=list)
    skipped_product_ids: list[int] = Field(default_factory=list)


__all__ = [
    'Order',
    'OrderDTO',
    'OrderItemDTO',
    'CheckoutItemDTO',
    'CheckoutRequestDTO',
    'OrderLineDTO',
    'OrderDetailsDTO',
    'OrderActionResultDTO',
]
