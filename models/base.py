import enum


# ============================================================================
# ENUMS
# ============================================================================

class AttributeType(str, enum.Enum):
    """Literal quoting used when a value is written into a statement"""
    STRING = "STRING"
    NUMERICAL = "NUMERICAL"


class SyncStatus(str, enum.Enum):
    """Outcome of one synchronization pass"""
    SUCCESS = "success"
    PARTIAL = "partial"
    CANCELLED = "cancelled"
