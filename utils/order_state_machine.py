"""
Order State Machine for validating order status transitions and maintaining consistency.

The verification workflow moves an order out of PENDING exactly once. Each
decision has a fixed order status and a paired payment status.
"""

import logging
from typing import Dict, List, Set

from enums.order_decision import OrderDecision
from enums.order_status import OrderStatus
from enums.payment_status import PaymentStatus

logger = logging.getLogger(__name__)


class OrderStatusTransition:
    """Represents a valid status transition with metadata"""

    def __init__(self, from_status: OrderStatus, to_status: OrderStatus, description: str = ""):
        self.from_status = from_status
        self.to_status = to_status
        self.description = description

    def __repr__(self):
        return f"{self.from_status.value} -> {self.to_status.value}"


class OrderStateMachine:
    """
    Finite state machine for order status transitions.

    Valid status transitions:
    - PENDING -> APPROVED (admin verifies the bank transfer)
    - PENDING -> REJECTED (admin rejects the bank transfer)
    - APPROVED -> SHIPPED (fulfilment)
    - SHIPPED -> DELIVERED (fulfilment)

    REJECTED and DELIVERED are final.
    """

    VALID_TRANSITIONS: List[OrderStatusTransition] = [
        OrderStatusTransition(
            OrderStatus.PENDING,
            OrderStatus.APPROVED,
            description="Payment verified by admin"
        ),
        OrderStatusTransition(
            OrderStatus.PENDING,
            OrderStatus.REJECTED,
            description="Payment rejected by admin"
        ),
        OrderStatusTransition(
            OrderStatus.APPROVED,
            OrderStatus.SHIPPED,
            description="Order handed to the carrier"
        ),
        OrderStatusTransition(
            OrderStatus.SHIPPED,
            OrderStatus.DELIVERED,
            description="Order delivered to the customer"
        ),
    ]

    # (order status, payment status) written together by each decision
    DECISION_OUTCOMES: Dict[OrderDecision, tuple[OrderStatus, PaymentStatus]] = {
        OrderDecision.APPROVE: (OrderStatus.APPROVED, PaymentStatus.VERIFIED),
        OrderDecision.REJECT: (OrderStatus.REJECTED, PaymentStatus.FAILED),
    }

    _transition_map: Dict[OrderStatus, Set[OrderStatus]] = {}
    _transition_descriptions: Dict[tuple, str] = {}

    @classmethod
    def _build_transition_map(cls):
        """Build internal transition maps for performance"""
        if cls._transition_map:
            return

        for transition in cls.VALID_TRANSITIONS:
            cls._transition_map.setdefault(transition.from_status, set()).add(transition.to_status)
            cls._transition_descriptions[(transition.from_status, transition.to_status)] = transition.description

    @classmethod
    def is_valid_transition(cls, from_status: OrderStatus, to_status: OrderStatus) -> bool:
        """
        Check if a status transition is valid according to the state machine.

        Staying in the same status is not a transition and is rejected.
        """
        cls._build_transition_map()
        return to_status in cls._transition_map.get(from_status, set())

    @classmethod
    def get_valid_transitions(cls, from_status: OrderStatus) -> List[OrderStatus]:
        cls._build_transition_map()
        return sorted(cls._transition_map.get(from_status, set()), key=lambda status: status.value)

    @classmethod
    def is_final_status(cls, status: OrderStatus) -> bool:
        cls._build_transition_map()
        return not cls._transition_map.get(status)

    @classmethod
    def outcome_for(cls, decision: OrderDecision) -> tuple[OrderStatus, PaymentStatus]:
        """Order status and paired payment status for an admin decision."""
        return cls.DECISION_OUTCOMES[decision]

    @classmethod
    def validate_and_log_transition(cls, order_id: int, from_status: OrderStatus, to_status: OrderStatus) -> bool:
        """
        Validate a status transition and write an audit log entry.

        Returns:
            True if transition is valid and logged, False otherwise
        """
        if not cls.is_valid_transition(from_status, to_status):
            logger.error(f"Invalid status transition for order {order_id}: {from_status.value} -> {to_status.value}")
            return False

        transition_desc = cls._transition_descriptions.get(
            (from_status, to_status),
            f"Transition from {from_status.value} to {to_status.value}"
        )
        logger.info(f"ORDER_STATUS_TRANSITION: Order {order_id} {from_status.value} -> {to_status.value}: {transition_desc}")
        return True
