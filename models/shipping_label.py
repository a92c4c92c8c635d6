from datetime import datetime

from pydantic import BaseModel
from sqlalchemy import Column, Integer, String, ForeignKey, DateTime, func
from sqlalchemy.orm import relationship

from models.base import Base


class ShippingLabel(Base):
    __tablename__ = 'shipping_labels'

    id = Column(Integer, primary_key=True)
    order_id = Column(Integer, ForeignKey('orders.id', ondelete='CASCADE'), nullable=False, unique=True)
    tracking_number = Column(String, nullable=False, unique=True)
    label_url = Column(String, nullable=False)
    created_at = Column(DateTime, default=func.now())

    order = relationship('Order', back_populates='shipping_label')


class ShippingLabelDTO(BaseModel):
    id: int | None = None
    order_id: int | None = None
    tracking_number: str | None = None
    label_url: str | None = None
    created_at: datetime | None = None
