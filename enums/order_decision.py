from enum import Enum


class OrderDecision(str, Enum):
    """Administrator decision on a pending order."""
    APPROVE = "approve"
    REJECT = "reject"

    @property
    def past_tense(self) -> str:
        """Label returned to API callers ("approved" / "rejected")."""
        return "approved" if self == OrderDecision.APPROVE else "rejected"
