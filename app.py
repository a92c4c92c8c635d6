import asyncio
import logging
import traceback
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

import config
from bot_instance import close_bot
from db import create_db_and_tables
from jobs.document_retry_job import document_retry_scheduler
from services.notification import NotificationService
from utils.html_escape import safe_html
from web.api_router import api_router

# Background tasks
document_retry_task = None


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Lifespan event handler for startup and shutdown."""
    global document_retry_task

    # Startup
    await create_db_and_tables()

    if config.DOCUMENT_RETRY_JOB_ENABLED:
        document_retry_task = asyncio.create_task(document_retry_scheduler())
        logging.info("[Startup] Document retry scheduler started")
    else:
        logging.info("[Startup] Document retry scheduler disabled")

    yield

    # Shutdown
    logging.warning('Shutting down..')

    if document_retry_task is not None:
        document_retry_task.cancel()
        try:
            await document_retry_task
        except asyncio.CancelledError:
            logging.info("[Shutdown] Document retry scheduler stopped")
        document_retry_task = None

    await close_bot()
    logging.warning('Bye!')


app = FastAPI(lifespan=lifespan)
app.include_router(api_router)


# Health check endpoint (for Docker container monitoring)
@app.get("/health")
async def health_check():
    return {"status": "healthy"}


@app.exception_handler(Exception)
async def exception_handler(request: Request, exc: Exception):
    traceback_str = traceback.format_exc()
    logging.error(f"Unhandled error on {request.method} {request.url.path}: {exc}\n{traceback_str}")
    # Telegram messages are limited to 4096 characters
    admin_notification = (
        f"Critical error on {safe_html(request.url.path)}: {safe_html(exc)}\n\n"
        f"<pre>{safe_html(traceback_str[-3000:])}</pre>"
    )
    await NotificationService.send_to_admins(admin_notification)
    return JSONResponse(
        status_code=500,
        content={"message": f"An error occurred: {str(exc)}"},
    )
