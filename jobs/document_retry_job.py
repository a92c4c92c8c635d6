"""Document Retry Job

Re-drives invoice / shipping label generation for approved orders:
- documents FAILED and still below DOCUMENT_MAX_ATTEMPTS
- documents PENDING for longer than DOCUMENT_STALE_PENDING_SECONDS
  (process stopped before the follow-up task finished)

Runs periodically as a background task started from the app lifespan.
"""

import asyncio
import logging
from datetime import datetime, timedelta

import config
from db import get_db_session
from repositories.order import OrderRepository
from services.document_fulfillment import DocumentFulfillmentService

logger = logging.getLogger(__name__)


async def run_retry_cycle() -> int:
    """Retry all due orders once.

    Returns:
        Number of orders whose documents were generated in this cycle
    """
    stale_before = datetime.now() - timedelta(seconds=config.DOCUMENT_STALE_PENDING_SECONDS)
    async with get_db_session() as session:
        order_ids = await OrderRepository.get_documents_due_for_retry(
            config.DOCUMENT_MAX_ATTEMPTS, stale_before, session
        )

    if not order_ids:
        logger.debug("[Document Retry] No orders due")
        return 0

    logger.info(f"[Document Retry] Retrying documents for {len(order_ids)} order(s)")
    generated = 0
    for order_id in order_ids:
        try:
            async with get_db_session() as session:
                if await DocumentFulfillmentService.generate_documents(order_id, session):
                    generated += 1
        except Exception as e:
            logger.error(f"[Document Retry] Order {order_id} failed: {e}", exc_info=True)

    logger.info(f"[Document Retry] Cycle complete: {generated}/{len(order_ids)} generated")
    return generated


async def document_retry_scheduler():
    """Scheduler that runs retry cycles at configured intervals.

    This function runs indefinitely and should be started as a background task.
    """
    if not config.DOCUMENT_RETRY_JOB_ENABLED:
        logger.info("[Document Retry] Scheduler disabled")
        return

    logger.info(
        f"[Document Retry] Scheduler started "
        f"(interval: {config.DOCUMENT_RETRY_INTERVAL_SECONDS}s, max attempts: {config.DOCUMENT_MAX_ATTEMPTS})"
    )

    while True:
        try:
            await asyncio.sleep(config.DOCUMENT_RETRY_INTERVAL_SECONDS)
            await run_retry_cycle()
        except asyncio.CancelledError:
            logger.info("[Document Retry] Scheduler stopped")
            break
        except Exception as e:
            logger.error(f"[Document Retry] Scheduler error: {e}", exc_info=True)
            await asyncio.sleep(60)
