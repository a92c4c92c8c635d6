"""
HTTP API for the storefront.

Admin endpoints (payment verification, document retry, order list, catalog)
and the customer endpoints (catalog, checkout, proof of payment, order history).

Security:
- Admin endpoints require the X-Admin-Token header when ADMIN_API_TOKEN is set
- Token comparison is timing-safe
"""

import logging
import secrets
import uuid
from datetime import datetime

from fastapi import APIRouter, Depends, Header, HTTPException, Query, Request, status
from pydantic import BaseModel, ConfigDict, Field, ValidationError

import config
from db import get_db_session
from enums.document_status import DocumentStatus
from enums.order_decision import OrderDecision
from enums.order_status import OrderStatus
from exceptions.base import StorefrontException
from models.order import CheckoutRequestDTO
from models.payment import PaymentProofDTO
from models.product import ProductCreateRequestDTO, ProductUpdateRequestDTO
from repositories.order import OrderRepository
from services.checkout import CheckoutService
from services.document_fulfillment import DocumentFulfillmentService
from services.order import OrderService
from services.order_verification import OrderVerificationService
from services.payment import PaymentService
from services.product import ProductService
from utils.error_handler import handle_service_error, handle_unexpected_error

logger = logging.getLogger(__name__)

api_router = APIRouter(prefix="/api", tags=["api"])


def generate_correlation_id() -> str:
    """Generate unique correlation ID for request tracing."""
    return f"{datetime.now().strftime('%Y%m%d-%H%M%S')}-{uuid.uuid4().hex[:8]}"


async def require_admin_token(x_admin_token: str | None = Header(default=None)):
    if not config.ADMIN_API_TOKEN:
        return
    if x_admin_token is None or not secrets.compare_digest(x_admin_token, config.ADMIN_API_TOKEN):
        logger.warning("Admin API request rejected: missing or invalid X-Admin-Token")
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Unauthorized")


def _http_error(correlation_id: str, exception: Exception) -> HTTPException:
    if isinstance(exception, StorefrontException):
        status_code, message = handle_service_error(exception)
    else:
        status_code, message = handle_unexpected_error(exception)
    logger.info(f"[{correlation_id}] Responding {status_code}: {message}")
    return HTTPException(status_code=status_code, detail=message)


class OrderActionPayload(BaseModel):
    """Admin decision on a pending order."""
    model_config = ConfigDict(populate_by_name=True)

    order_id: int = Field(..., alias="orderId", gt=0)
    action: OrderDecision


@api_router.post("/admin/order/action", dependencies=[Depends(require_admin_token)])
async def order_action(request: Request):
    """
    Approve or reject a pending order.

    Request Body:
        {"orderId": 123, "action": "approve" | "reject"}

    Returns:
        200: {"success": true, "action": "approved" | "rejected", ...}
        400: orderId / action missing or invalid
        401: Missing or invalid admin token
        404: Order not found
        409: Order already processed
        500: Store write failure or unexpected error
    """
    correlation_id = generate_correlation_id()

    try:
        body = await request.json()
        payload = OrderActionPayload.model_validate(body)
    except (ValueError, ValidationError) as e:
        logger.warning(f"[{correlation_id}] Invalid order action payload: {e}")
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST,
                            detail="orderId and action are required")

    logger.info(f"[{correlation_id}] Admin {payload.action.value} requested for order {payload.order_id}")

    async with get_db_session() as session:
        try:
            result = await OrderVerificationService.process(payload.order_id, payload.action, session)
        except Exception as e:
            raise _http_error(correlation_id, e) from e

    logger.info(f"[{correlation_id}] ✅ Order {payload.order_id} {result.decision.past_tense}")
    return {
        "success": True,
        "action": result.decision.past_tense,
        "orderId": result.order_id,
        "orderStatus": result.order_status.value,
        "paymentStatus": result.payment_status.value,
        "stockAdjustments": [adjustment.model_dump() for adjustment in result.stock_adjustments],
        "skippedProductIds": result.skipped_product_ids,
    }


@api_router.post("/admin/order/{order_id}/documents", dependencies=[Depends(require_admin_token)])
async def retry_order_documents(order_id: int):
    """
    Re-run invoice and shipping label generation for an approved order.

    Returns:
        200: {"success": bool, "documentsStatus": ..., "invoiceUrl": ..., "labelUrl": ...}
        404: Order not found
        409: Order is not approved
    """
    correlation_id = generate_correlation_id()
    logger.info(f"[{correlation_id}] Manual document retry for order {order_id}")

    async with get_db_session() as session:
        try:
            details = await DocumentFulfillmentService.retry(order_id, session)
        except Exception as e:
            raise _http_error(correlation_id, e) from e

    return {
        "success": details.order.documents_status == DocumentStatus.GENERATED,
        "documentsStatus": details.order.documents_status.value,
        "documentsLastError": details.order.documents_last_error,
        "invoiceNumber": details.invoice_number,
        "invoiceUrl": details.invoice_url,
        "trackingNumber": details.tracking_number,
        "labelUrl": details.label_url,
    }


@api_router.get("/admin/orders", dependencies=[Depends(require_admin_token)])
async def list_orders(order_status: str | None = Query(default=None, alias="status")):
    """Admin order list (newest first) with customer, payment, items and documents."""
    status_filter = None
    if order_status:
        try:
            status_filter = OrderStatus(order_status)
        except ValueError:
            valid_values = ", ".join(s.value for s in OrderStatus)
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST,
                                detail=f"Invalid status '{order_status}', expected one of {valid_values}")

    async with get_db_session() as session:
        orders = await OrderRepository.get_all_details(session, status_filter)
    return [order.model_dump(mode="json") for order in orders]


@api_router.post("/checkout", status_code=status.HTTP_201_CREATED)
async def checkout(payload: CheckoutRequestDTO):
    """Place a pending order; the admin verifies the bank transfer later."""
    correlation_id = generate_correlation_id()

    async with get_db_session() as session:
        try:
            order = await CheckoutService.place_order(payload, session)
        except Exception as e:
            raise _http_error(correlation_id, e) from e

    logger.info(f"[{correlation_id}] ✅ Order {order.id} placed")
    return {"success": True, "order": order.model_dump(mode="json")}


@api_router.post("/orders/{order_id}/payment-proof")
async def upload_payment_proof(order_id: int, request: Request, filename: str | None = Query(default=None)):
    """
    Upload a proof-of-payment screenshot.

    The raw image is sent as the request body with its Content-Type header.
    """
    correlation_id = generate_correlation_id()
    proof = PaymentProofDTO(
        file_bytes=await request.body(),
        filename=filename,
        content_type=request.headers.get("content-type", "application/octet-stream"),
    )

    async with get_db_session() as session:
        try:
            url = await PaymentService.attach_proof(order_id, proof, session)
        except Exception as e:
            raise _http_error(correlation_id, e) from e

    return {"success": True, "screenshotUrl": url}


@api_router.post("/admin/products", status_code=status.HTTP_201_CREATED,
                 dependencies=[Depends(require_admin_token)])
async def create_product(payload: ProductCreateRequestDTO):
    """Add a catalog entry with its opening stock."""
    correlation_id = generate_correlation_id()

    async with get_db_session() as session:
        try:
            product = await ProductService.create(payload, session)
        except Exception as e:
            raise _http_error(correlation_id, e) from e

    logger.info(f"[{correlation_id}] ✅ Product {product.id} created")
    return {"success": True, "product": product.model_dump(mode="json")}


@api_router.patch("/admin/products/{product_id}", dependencies=[Depends(require_admin_token)])
async def update_product(product_id: int, payload: ProductUpdateRequestDTO):
    """
    Update name, description, price or images.

    Returns:
        200: {"success": true, "product": {...}}
        404: Product not found
        422: Unknown field (stock cannot be edited) or invalid value
    """
    correlation_id = generate_correlation_id()

    async with get_db_session() as session:
        try:
            product = await ProductService.update(product_id, payload, session)
        except Exception as e:
            raise _http_error(correlation_id, e) from e

    return {"success": True, "product": product.model_dump(mode="json")}


@api_router.delete("/admin/products/{product_id}", dependencies=[Depends(require_admin_token)])
async def delete_product(product_id: int):
    """Delete a product that no order refers to (409 otherwise)."""
    correlation_id = generate_correlation_id()

    async with get_db_session() as session:
        try:
            await ProductService.delete(product_id, session)
        except Exception as e:
            raise _http_error(correlation_id, e) from e

    return {"success": True}


@api_router.get("/products")
async def list_products():
    async with get_db_session() as session:
        products = await ProductService.get_all(session)
    return [product.model_dump(mode="json") for product in products]


@api_router.get("/products/{product_id}")
async def get_product(product_id: int):
    correlation_id = generate_correlation_id()

    async with get_db_session() as session:
        try:
            product = await ProductService.get(product_id, session)
        except Exception as e:
            raise _http_error(correlation_id, e) from e

    return product.model_dump(mode="json")


@api_router.get("/users/{user_id}/orders")
async def list_user_orders(user_id: int):
    """Customer order history with payment status and document links."""
    correlation_id = generate_correlation_id()

    async with get_db_session() as session:
        try:
            orders = await OrderService.get_user_orders(user_id, session)
        except Exception as e:
            raise _http_error(correlation_id, e) from e

    return [order.model_dump(mode="json") for order in orders]
