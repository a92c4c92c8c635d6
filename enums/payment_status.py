from enum import Enum


class PaymentStatus(str, Enum):
    """
    Verification state of a customer-reported bank transfer.

    Always paired with the order status:
    PENDING <-> OrderStatus.PENDING
    VERIFIED <-> OrderStatus.APPROVED (and later fulfillment states)
    FAILED <-> OrderStatus.REJECTED
    """
    PENDING = "pending"
    VERIFIED = "verified"
    FAILED = "failed"
