"""
Invoice / shipping label exceptions.

These never fail an approval. They are recorded on the order and retried.
"""

from .base import StorefrontException


class DocumentException(StorefrontException):
    """Base exception for document generation and storage errors."""
    pass


class DocumentGenerationException(DocumentException):
    """Raised when an invoice or shipping label cannot be rendered."""

    def __init__(self, order_id: int, document_type: str, reason: str):
        super().__init__(
            f"Failed to render {document_type} for order {order_id}: {reason}",
            details={'order_id': order_id, 'document_type': document_type, 'reason': reason}
        )
        self.order_id = order_id
        self.document_type = document_type
        self.reason = reason


class StorageUploadException(DocumentException):
    """Raised when the storage gateway rejects or fails an upload."""

    def __init__(self, destination_path: str, reason: str):
        super().__init__(
            f"Upload to '{destination_path}' failed: {reason}",
            details={'destination_path': destination_path, 'reason': reason}
        )
        self.destination_path = destination_path
        self.reason = reason
