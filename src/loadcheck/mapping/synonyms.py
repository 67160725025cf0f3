"""Synonym table used to match free-text headers to shipment fields."""

import logging
from typing import Mapping, Optional

from ..models import ShipmentField

logger = logging.getLogger(__name__)

SynonymTable = dict[str, list[str]]

# Field order here is the order fields are allocated during matching.
KNOWN_SYNONYMS: SynonymTable = {
    ShipmentField.LOAD_ID.value: [
        "load id", "loadid", "ref", "reference", "ref #", "vrid", "load number", "id", "load ref",
    ],
    ShipmentField.FROM_ADDRESS.value: [
        "from", "pu", "pickup", "origin", "pickup address", "origin address",
        "pickup location", "from address",
    ],
    ShipmentField.FROM_APPOINTMENT.value: [
        "pu time", "pickup appt", "pickup date/time", "pickup datetime", "pu datetime",
        "pu date", "pickup time", "from date", "from time", "pickup appointment",
    ],
    ShipmentField.TO_ADDRESS.value: [
        "to", "drop", "delivery", "destination", "delivery address", "destination address",
        "delivery location", "to address",
    ],
    ShipmentField.TO_APPOINTMENT.value: [
        "del time", "delivery appt", "delivery date/time", "delivery datetime", "drop time",
        "del date", "delivery time", "to date", "to time", "delivery appointment",
    ],
    ShipmentField.STATUS.value: ["status", "load status", "stage", "state", "condition"],
    ShipmentField.DRIVER_NAME.value: ["driver", "driver name", "driver/carrier", "carrier"],
    ShipmentField.DRIVER_PHONE.value: [
        "phone", "driver phone", "contact", "driver contact", "driver cell", "mobile",
    ],
    ShipmentField.UNIT_NUMBER.value: [
        "unit", "truck", "truck #", "tractor", "unit number", "equipment", "truck number",
    ],
    ShipmentField.BROKER.value: ["broker", "customer", "shipper", "client", "company"],
}

# Fragments used to find datetime fields sourced from separate date and time columns.
SPLIT_DATE_FRAGMENTS: dict[str, tuple[str, ...]] = {
    ShipmentField.FROM_APPOINTMENT.value: ("pu date", "pickup date", "from date", "origin date"),
    ShipmentField.TO_APPOINTMENT.value: ("del date", "delivery date", "to date", "destination date"),
}
SPLIT_TIME_FRAGMENTS: dict[str, tuple[str, ...]] = {
    ShipmentField.FROM_APPOINTMENT.value: ("pu time", "pickup time", "from time", "origin time"),
    ShipmentField.TO_APPOINTMENT.value: ("del time", "delivery time", "to time", "destination time"),
}


def build_synonym_table(extra: Optional[Mapping[str, list[str]]] = None) -> SynonymTable:
    """
    Build a synonym table from the stock phrases plus caller-supplied extras.

    Extra phrases are lowercased and appended after the stock phrases of
    their field. Phrases for fields outside the shipment schema are ignored.
    The stock table is never modified.
    """
    table = {field: list(phrases) for field, phrases in KNOWN_SYNONYMS.items()}
    if not extra:
        return table

    for field, phrases in extra.items():
        if field not in table:
            logger.info(f"Ignoring extra synonyms for unknown field '{field}'")
            continue
        for phrase in phrases or []:
            normalized = str(phrase).strip().lower()
            if normalized and normalized not in table[field]:
                table[field].append(normalized)

    return table
