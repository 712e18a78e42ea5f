from enum import Enum


class SubscriptionTier(str, Enum):
    """Named subscription levels; each maps to a row of the tier limits table."""

    FREE = "free"
    PRO = "pro"
    MAX = "max"


class TierSource(str, Enum):
    """Where a caller's resolved tier came from."""

    DEFAULT = "default"
    DATABASE = "database"
    BILLING = "billing"
    TEST_OVERRIDE = "test-override"
