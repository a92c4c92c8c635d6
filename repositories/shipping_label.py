from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from db import session_execute, session_flush
from models.shipping_label import ShippingLabel, ShippingLabelDTO


class ShippingLabelRepository:

    @staticmethod
    async def get_by_order_id(order_id: int, session: AsyncSession) -> ShippingLabelDTO | None:
        stmt = select(ShippingLabel).where(ShippingLabel.order_id == order_id)
        result = await session_execute(stmt, session)
        label = result.scalar_one_or_none()
        if label:
            return ShippingLabelDTO.model_validate(label, from_attributes=True)
        return None

    @staticmethod
    async def upsert(order_id: int, tracking_number: str, label_url: str, session: AsyncSession) -> ShippingLabelDTO:
        stmt = select(ShippingLabel).where(ShippingLabel.order_id == order_id)
        result = await session_execute(stmt, session)
        label = result.scalar_one_or_none()

        if label is None:
            label = ShippingLabel(order_id=order_id, tracking_number=tracking_number, label_url=label_url)
            session.add(label)
        else:
            label.label_url = label_url
        await session_flush(session)
        return ShippingLabelDTO.model_validate(label, from_attributes=True)
