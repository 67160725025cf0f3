"""Date/time and status normalization."""

from .dates import (
    DateNormalization,
    normalize_datetime,
    is_canonical_timestamp,
    to_canonical,
)
from .status import CANONICAL_STATUSES, canonicalize_status, is_canonical_status

__all__ = [
    "DateNormalization",
    "normalize_datetime",
    "is_canonical_timestamp",
    "to_canonical",
    "CANONICAL_STATUSES",
    "canonicalize_status",
    "is_canonical_status",
]
