from enum import Enum


class DocumentStatus(str, Enum):
    NOT_REQUESTED = "not_requested"   # Order not approved yet
    PENDING = "pending"               # Approved, invoice + label not generated yet
    GENERATED = "generated"           # Both documents uploaded and recorded
    FAILED = "failed"                 # Last attempt failed, eligible for retry
