import random
from datetime import datetime

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from db import session_execute, session_flush
from models.invoice import Invoice, InvoiceDTO


class InvoiceRepository:

    @staticmethod
    async def get_by_order_id(order_id: int, session: AsyncSession) -> InvoiceDTO | None:
        stmt = select(Invoice).where(Invoice.order_id == order_id)
        result = await session_execute(stmt, session)
        invoice = result.scalar_one_or_none()

        if invoice:
            return InvoiceDTO.model_validate(invoice, from_attributes=True)
        return None

    @staticmethod
    async def upsert(order_id: int, invoice_number: str, invoice_url: str, session: AsyncSession) -> InvoiceDTO:
        """
        One invoice per order. A re-driven document task overwrites the URL
        and keeps the invoice number issued the first time.
        """
        stmt = select(Invoice).where(Invoice.order_id == order_id)
        result = await session_execute(stmt, session)
        invoice = result.scalar_one_or_none()

        if invoice is None:
            invoice = Invoice(order_id=order_id, invoice_number=invoice_number, invoice_url=invoice_url)
            session.add(invoice)
        else:
            invoice.invoice_url = invoice_url
        await session_flush(session)
        return InvoiceDTO.model_validate(invoice, from_attributes=True)

    @staticmethod
    async def get_next_invoice_number(session: AsyncSession) -> str:
        """
        Generate a unique invoice number in the format INV-YYYY-XXXXXX
        Example: INV-2025-AX7D8K

        6-character alphanumeric code (uppercase letters + digits without 0/O/1/I to avoid confusion)
        """
        year = datetime.now().year

        # Alphanumeric characters without confusing ones: 0, O, 1, I, l
        chars = '23456789ABCDEFGHJKLMNPQRSTUVWXYZ'

        # Try up to 10 times to generate a unique code
        for _ in range(10):
            code = ''.join(random.choices(chars, k=6))
            invoice_number = f"INV-{year}-{code}"

            stmt = select(Invoice.invoice_number).where(Invoice.invoice_number == invoice_number)
            result = await session_execute(stmt, session)
            existing = result.scalar_one_or_none()

            if not existing:
                return invoice_number

        # Fallback: should never happen (32^6 = ~1 billion combinations)
        raise RuntimeError("Could not generate unique invoice number after 10 attempts")
