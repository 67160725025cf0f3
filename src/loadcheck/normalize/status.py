"""Status vocabulary canonicalization."""

CANONICAL_STATUSES: tuple[str, ...] = (
    "IN_TRANSIT",
    "DELIVERED",
    "CANCELLED",
    "PENDING",
    "LOADING",
    "UNLOADING",
)

STATUS_SYNONYMS: dict[str, str] = {
    "in transit": "IN_TRANSIT",
    "rolling": "IN_TRANSIT",
    "en route": "IN_TRANSIT",
    "delivered": "DELIVERED",
    "complete": "DELIVERED",
    "canceled": "CANCELLED",
    "cancelled": "CANCELLED",
    "pending": "PENDING",
    "loading": "LOADING",
    "unloading": "UNLOADING",
}


def canonicalize_status(value: str) -> str:
    """Map free-text status to the canonical token; unknown text passes through."""
    return STATUS_SYNONYMS.get(value.strip().lower(), value)


def is_canonical_status(value: str) -> bool:
    return value.strip().upper() in CANONICAL_STATUSES
