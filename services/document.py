"""
Document Generator

Renders the invoice and the shipping label of an order as UTF-8 text.
Both are pure functions of the order data: the same order always yields
the same bytes, and any problem raises DocumentGenerationException instead
of returning a partial document.
"""

from datetime import datetime

import config
from exceptions.document import DocumentGenerationException
from models.order import OrderDetailsDTO

LINE_WIDTH = 64


class DocumentService:

    @staticmethod
    def tracking_number(order_id: int) -> str:
        return f"CHS{order_id:010d}"

    @staticmethod
    def _format_money(amount: float) -> str:
        return f"{config.CURRENCY_SYMBOL}{amount:,.2f}"

    @staticmethod
    def _validate(details: OrderDetailsDTO, document_type: str) -> int:
        order = details.order
        if order is None or order.id is None:
            raise DocumentGenerationException(0, document_type, "order id missing")
        if not details.lines:
            raise DocumentGenerationException(order.id, document_type, "order has no line items")
        if not (order.shipping_address or "").strip():
            raise DocumentGenerationException(order.id, document_type, "shipping address missing")
        return order.id

    @staticmethod
    def render_invoice(details: OrderDetailsDTO) -> bytes:
        """Invoice number is taken from details.invoice_number (issued before rendering)."""
        order_id = DocumentService._validate(details, "invoice")
        invoice_number = details.invoice_number
        if not invoice_number:
            raise DocumentGenerationException(order_id, "invoice", "invoice number missing")
        order = details.order
        issued = order.decided_at or order.created_at or datetime.now()

        lines = [
            config.COMPANY_NAME,
            config.COMPANY_ADDRESS,
            config.COMPANY_TAX_ID,
            "=" * LINE_WIDTH,
            f"INVOICE: {invoice_number}",
            f"Date: {issued.strftime('%d/%m/%Y')}",
            f"Order ID: #{order_id}",
            "",
            "BILL TO:",
            details.customer_name or "Valued Customer",
            order.shipping_address,
            f"Mobile: {order.customer_mobile or 'N/A'}",
            "",
            f"{'Product Name':<30}{'Qty':>6}{'Unit Price':>14}{'Total':>14}",
            "-" * LINE_WIDTH,
        ]
        for line in details.lines:
            lines.append(
                f"{line.product_name[:30]:<30}{line.quantity:>6}"
                f"{DocumentService._format_money(line.price):>14}"
                f"{DocumentService._format_money(line.line_total):>14}"
            )
        lines += [
            "-" * LINE_WIDTH,
            f"{'Grand Total:':<50}{DocumentService._format_money(order.total_price):>14}",
        ]
        if details.transaction_id:
            lines.append(f"Paid via bank transfer, reference {details.transaction_id}")
        return ("\n".join(lines) + "\n").encode("utf-8")

    @staticmethod
    def render_shipping_label(details: OrderDetailsDTO) -> bytes:
        order_id = DocumentService._validate(details, "shipping_label")
        order = details.order
        total_units = sum(line.quantity for line in details.lines)

        lines = [
            "ORDER ID",
            f"#{order_id}",
            f"TRACKING: {DocumentService.tracking_number(order_id)}",
            "-" * 40,
            "SHIP TO:",
            details.customer_name or "Customer",
            order.shipping_address,
            f"Mobile: {order.customer_mobile or 'N/A'}",
            "-" * 40,
            f"FROM: {config.COMPANY_NAME}",
            config.COMPANY_ADDRESS,
            f"Items: {total_units}",
        ]
        return ("\n".join(lines) + "\n").encode("utf-8")
