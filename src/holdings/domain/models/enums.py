"""Enumerations for domain models."""

from enum import Enum


class PositionCategory(str, Enum):
    """User-assigned position categories (annotation only, never set by imports)."""

    CORE = "CORE"
    TITAN = "TITAN"
    CONSENSUS = "CONSENSUS"


class ApplyStep(str, Enum):
    """Ordered steps of an import apply."""

    DELETE_REMOVED = "DELETE_REMOVED"
    UPSERT_POSITIONS = "UPSERT_POSITIONS"
    UPSERT_CASH = "UPSERT_CASH"
    UPSERT_SUMMARY = "UPSERT_SUMMARY"
    APPEND_HISTORY = "APPEND_HISTORY"


class CashAction(str, Enum):
    """What the apply did with the CASH pseudo-position."""

    UPSERTED = "UPSERTED"
    DELETED = "DELETED"
    NONE = "NONE"
