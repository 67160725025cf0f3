"""Prompts for LLM-backed header mapping suggestions."""

import json

from ..models import ShipmentField
from .models import SuggestionRequest

SYSTEM_PROMPT = """You map spreadsheet column headers of trucking load lists to a fixed schema.

Schema fields:
- load_id: unique load identifier (Load ID, Ref, VRID, Load Number)
- from_address: pickup location (From, PU, Pickup, Origin)
- from_appointment_utc: pickup date/time (PU Time, Pickup Date, Pickup Appt)
- to_address: delivery location (To, Drop, Delivery, Destination)
- to_appointment_utc: delivery date/time (DEL Time, Delivery Date, Delivery Appt)
- status: load status (Status, Stage, State)
- driver_name: driver (Driver, Driver Name, Carrier)
- driver_phone: driver contact number (Phone, Driver Cell, Mobile), optional
- unit_number: truck/vehicle id (Unit, Truck, Tractor, Equipment)
- broker: broker or customer (Broker, Customer, Shipper, Client)

Rate each mapping with a confidence between 0 and 1:
- 0.9 or above only when the header meaning is unmistakable
- 0.6 to 0.89 when plausible; list the other fields it could be in "alternatives"
- below 0.6 when the header is unclear

Never invent headers. Respond with JSON only:
{"mapping": [{"header": "...", "field": "...", "confidence": 0.0, "alternatives": ["..."]}]}"""


def build_user_prompt(request: SuggestionRequest) -> str:
    """Build the user message carrying the table excerpt."""
    payload = {
        "fields": [f.value for f in ShipmentField],
        "headers": request.headers,
        "sample_rows": request.sample_rows,
        "assume_timezone": request.assume_timezone,
        "locale": request.locale,
    }
    return "Map these headers to the schema.\n\n" + json.dumps(payload, indent=2)
