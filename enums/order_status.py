from enum import Enum


class OrderStatus(str, Enum):
    PENDING = "pending"        # Awaiting manual payment verification
    APPROVED = "approved"      # Payment verified by admin, stock adjusted
    REJECTED = "rejected"      # Payment rejected by admin (final state)
    SHIPPED = "shipped"        # Handed to carrier
    DELIVERED = "delivered"    # Received by customer (final state)
