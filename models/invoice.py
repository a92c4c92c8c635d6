from datetime import datetime

from pydantic import BaseModel
from sqlalchemy import Column, Integer, String, ForeignKey, DateTime, func
from sqlalchemy.orm import relationship

from models.base import Base


class Invoice(Base):
    __tablename__ = 'invoices'

    id = Column(Integer, primary_key=True)
    order_id = Column(Integer, ForeignKey('orders.id', ondelete='CASCADE'), nullable=False, unique=True)
    invoice_number = Column(String, nullable=False, unique=True)  # INV-YYYY-XXXXXX
    invoice_url = Column(String, nullable=False)
    created_at = Column(DateTime, default=func.now())

    order = relationship('Order', back_populates='invoice')


class InvoiceDTO(BaseModel):
    id: int | None = None
    order_id: int | None = None
    invoice_number: str | None = None
    invoice_url: str | None = None
    created_at: datetime | None = None
