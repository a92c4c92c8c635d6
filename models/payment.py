from datetime import datetime

from pydantic import BaseModel
from sqlalchemy import Column, Integer, String, ForeignKey, DateTime, func
from sqlalchemy.orm import relationship

from enums.payment_status import PaymentStatus
from models.base import Base, enum_column


class Payment(Base):
    __tablename__ = 'payments'

    id = Column(Integer, primary_key=True)
    order_id = Column(Integer, ForeignKey('orders.id', ondelete='CASCADE'), nullable=False, unique=True)
    transaction_id = Column(String, nullable=False)  # Customer-reported bank transfer reference (UTR)
    screenshot_url = Column(String, nullable=True)   # Proof of payment in the storage gateway
    status = Column(enum_column(PaymentStatus, 'payment_status'), nullable=False, default=PaymentStatus.PENDING)
    created_at = Column(DateTime, default=func.now())

    order = relationship('Order', back_populates='payment')


class PaymentDTO(BaseModel):
    id: int | None = None
    order_id: int | None = None
    transaction_id: str | None = None
    screenshot_url: str | None = None
    status: PaymentStatus | None = None
    created_at: datetime | None = None


class PaymentProofDTO(BaseModel):
    """Uploaded proof of payment (bank transfer screenshot)."""
    file_bytes: bytes
    filename: str | None = None
    content_type: str
