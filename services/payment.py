import logging
import mimetypes
import re
from datetime import datetime
from pathlib import PurePosixPath

from sqlalchemy.ext.asyncio import AsyncSession

import config
from db import session_commit
from enums.payment_status import PaymentStatus
from exceptions.payment import InvalidPaymentProofException, PaymentNotFoundException
from models.payment import PaymentProofDTO
from repositories.payment import PaymentRepository
from services.storage import get_storage_gateway

logger = logging.getLogger(__name__)

_EXTENSION_PATTERN = re.compile(r'^[a-z0-9]{1,8}$')


class PaymentService:

    @staticmethod
    def _file_extension(filename: str | None, content_type: str) -> str:
        if filename:
            suffix = PurePosixPath(filename).suffix.lower().lstrip(".")
            if _EXTENSION_PATTERN.match(suffix):
                return suffix
        guessed = mimetypes.guess_extension(content_type.split(";")[0].strip())
        if guessed:
            return guessed.lstrip(".")
        return "bin"

    @staticmethod
    async def attach_proof(order_id: int, proof: PaymentProofDTO, session: AsyncSession) -> str:
        """
        Upload a proof-of-payment screenshot and store its URL on the payment.

        Only accepted while the payment is still pending, so an admin never
        decides on a screenshot that was swapped afterwards.

        Returns:
            Public URL of the uploaded screenshot
        """
        payment = await PaymentRepository.get_by_order_id(order_id, session)
        if payment is None:
            raise PaymentNotFoundException(order_id)
        if payment.status != PaymentStatus.PENDING:
            raise InvalidPaymentProofException(order_id, f"payment is already {payment.status.value}")
        if not proof.content_type.lower().startswith("image/"):
            raise InvalidPaymentProofException(order_id, f"unsupported content type '{proof.content_type}'")
        if not proof.file_bytes:
            raise InvalidPaymentProofException(order_id, "file is empty")
        if len(proof.file_bytes) > config.PAYMENT_SCREENSHOT_MAX_BYTES:
            raise InvalidPaymentProofException(
                order_id, f"file exceeds {config.PAYMENT_SCREENSHOT_MAX_BYTES} bytes"
            )

        extension = PaymentService._file_extension(proof.filename, proof.content_type)
        timestamp = int(datetime.now().timestamp() * 1000)
        destination = f"{config.PAYMENT_SCREENSHOT_BUCKET}/pay_{order_id}_{timestamp}.{extension}"
        url = await get_storage_gateway().upload(proof.file_bytes, proof.content_type, destination)

        if not await PaymentRepository.update_screenshot_url(order_id, url, session):
            # Decided between the status check and the update, the upload stays unreferenced
            logger.warning(f"Orphaned proof of payment for order {order_id}: {destination}")
            raise InvalidPaymentProofException(order_id, "payment is no longer pending")
        await session_commit(session)
        logger.info(f"Proof of payment attached to order {order_id}")
        return url
