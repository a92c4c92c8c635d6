import logging
from datetime import datetime

import config
from bot_instance import get_bot, is_bot_configured
from utils.html_escape import safe_html

logger = logging.getLogger(__name__)


class NotificationService:
    """
    Operator alerts over Telegram.

    Sending never raises: an alert that cannot be delivered is logged and
    dropped so that it cannot fail the operation that triggered it.
    """

    @staticmethod
    async def send_to_admins(message: str):
        if not is_bot_configured():
            logger.debug("Operator alerts not configured, skipping admin notification")
            return
        bot = get_bot()
        for admin_id in config.ADMIN_ID_LIST:
            try:
                await bot.send_message(admin_id, message)
            except Exception as e:
                logger.error(f"Failed to notify admin {admin_id}: {e}")

    @staticmethod
    async def store_write_failure(order_id: int, step: str, reason: str):
        msg = (
            "🚨 <b>Order verification failed</b>\n\n"
            f"<b>Order:</b> #{order_id}\n"
            f"<b>Step:</b> {safe_html(step)}\n"
            f"<b>Error:</b> {safe_html(reason)}\n"
            f"<b>Time:</b> {datetime.now().strftime('%Y-%m-%d %H:%M:%S')}\n\n"
            "<i>The transaction was rolled back, the order is still pending.</i>"
        )
        await NotificationService.send_to_admins(msg)

    @staticmethod
    async def stock_adjustment_skipped(order_id: int, product_ids: list[int]):
        products = ", ".join(f"#{product_id}" for product_id in product_ids)
        msg = (
            "⚠️ <b>Stock not adjusted</b>\n\n"
            f"<b>Order:</b> #{order_id} (approved)\n"
            f"<b>Products:</b> {products}\n\n"
            "<i>Please correct the inventory manually.</i>"
        )
        await NotificationService.send_to_admins(msg)

    @staticmethod
    async def documents_failed(order_id: int, attempts: int, error: str):
        msg = (
            "📄 <b>Invoice / shipping label generation gave up</b>\n\n"
            f"<b>Order:</b> #{order_id}\n"
            f"<b>Attempts:</b> {attempts}\n"
            f"<b>Last error:</b> {safe_html(error)}\n\n"
            f"<i>Retry manually via POST /api/admin/order/{order_id}/documents.</i>"
        )
        await NotificationService.send_to_admins(msg)
