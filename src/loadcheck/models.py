"""Shared domain models for shipment table analysis."""

from enum import Enum
from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field


class ShipmentField(str, Enum):
    """Canonical fields of a shipment record."""

    LOAD_ID = "load_id"
    FROM_ADDRESS = "from_address"
    FROM_APPOINTMENT = "from_appointment_utc"
    TO_ADDRESS = "to_address"
    TO_APPOINTMENT = "to_appointment_utc"
    STATUS = "status"
    DRIVER_NAME = "driver_name"
    DRIVER_PHONE = "driver_phone"
    UNIT_NUMBER = "unit_number"
    BROKER = "broker"


REQUIRED_FIELDS: tuple[str, ...] = tuple(
    f.value for f in ShipmentField if f is not ShipmentField.DRIVER_PHONE
)
DATETIME_FIELDS: tuple[str, ...] = (
    ShipmentField.FROM_APPOINTMENT.value,
    ShipmentField.TO_APPOINTMENT.value,
)


class Severity(str, Enum):
    """Issue severity."""

    ERROR = "error"
    WARN = "warn"


class IssueCode(str, Enum):
    """Diagnostic codes emitted by the pipeline."""

    NO_DATA = "NO_DATA"
    MISSING_COLUMN = "MISSING_COLUMN"
    NON_SCHEMA_FIELD = "NON_SCHEMA_FIELD"
    HEADER_AMBIGUITY = "HEADER_AMBIGUITY"
    EMPTY_REQUIRED_CELL = "EMPTY_REQUIRED_CELL"
    BAD_DATE_FORMAT = "BAD_DATE_FORMAT"
    DUPLICATE_ID = "DUPLICATE_ID"
    NON_ISO_OUTPUT = "NON_ISO_OUTPUT"
    VOCAB_STATUS = "VOCAB_STATUS"
    MAPPING_AMBIGUOUS = "MAPPING_AMBIGUOUS"
    MAPPING_UNCLEAR = "MAPPING_UNCLEAR"
    SUGGESTION_UNKNOWN_HEADER = "SUGGESTION_UNKNOWN_HEADER"
    MODEL_ERROR = "MODEL_ERROR"
    MODEL_TIMEOUT = "MODEL_TIMEOUT"
    MODEL_PARSE_ERROR = "MODEL_PARSE_ERROR"
    NO_VALID_LOADS = "NO_VALID_LOADS"


class Issue(BaseModel):
    """A single diagnostic produced by any pipeline stage."""

    model_config = ConfigDict(use_enum_values=True)

    code: IssueCode
    severity: Severity
    message: str
    rows: Optional[list[int]] = None  # 1-based, header is row 1
    column: Optional[str] = None
    suggestion: Optional[str] = None

    @property
    def is_error(self) -> bool:
        return self.severity == Severity.ERROR.value


class ShipmentRecord(BaseModel):
    """One fully validated shipment row in the output schema."""

    load_id: str
    from_address: str
    from_appointment_utc: str  # YYYY-MM-DDTHH:MM:SSZ
    to_address: str
    to_appointment_utc: str  # YYYY-MM-DDTHH:MM:SSZ
    status: str
    driver_name: str
    driver_phone: Optional[str] = None
    unit_number: str
    broker: str


class ChangeRecord(BaseModel):
    """A before/after entry in the change log."""

    model_config = ConfigDict(populate_by_name=True)

    type: Literal["mapping", "data", "format"]
    field: str
    from_value: str = Field(alias="from")
    to_value: str = Field(alias="to")
    reason: str
    row: Optional[int] = None


def humanize_field(field: str) -> str:
    """Turn a field name like 'driver_name' into 'driver name'."""
    return field.replace("_utc", "").replace("_", " ")
