"""Pytest configuration and shared fixtures."""

import pytest

from loadcheck.config import Settings
from loadcheck.suggestions import ConfidenceSuggestion, SuggestionProvider

HEADERS = [
    "Load ID",
    "PU",
    "PU Time",
    "Delivery",
    "DEL Time",
    "Status",
    "Driver",
    "Phone",
    "Truck",
    "Broker",
]


def make_row(
    load_id="L1",
    pickup="Dallas, TX",
    pickup_time="2025-09-08T10:00:00Z",
    drop="Houston, TX",
    drop_time="2025-09-09T15:00:00Z",
    status="IN_TRANSIT",
    driver="Sam Ortiz",
    phone="555-123-4567",
    truck="T-100",
    broker="Acme Logistics",
):
    """Build a data row matching HEADERS."""
    return [load_id, pickup, pickup_time, drop, drop_time, status, driver, phone, truck, broker]


class FakeSuggestionProvider(SuggestionProvider):
    """Returns canned suggestions, or raises a canned error."""

    def __init__(self, suggestions=None, error=None):
        self.suggestions = suggestions or []
        self.error = error
        self.requests = []

    def suggest(self, request):
        self.requests.append(request)
        if self.error is not None:
            raise self.error
        return list(self.suggestions)


class FakeClock:
    """Manually advanced clock in seconds."""

    def __init__(self, start: float = 1_000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def test_settings() -> Settings:
    """Settings with suggestions off and no secrets."""
    return Settings(
        llm_provider="anthropic",
        anthropic_api_key=None,
        openrouter_api_key=None,
        enable_suggestions=False,
        suggestion_timeout_seconds=2.0,
        hmac_secret=None,
        rate_limit_rpm=10,
        rate_limit_window_seconds=60.0,
        allowed_origins=[],
        cors_allow_origins=["*"],
        default_timezone="UTC",
        day_first=False,
        max_issues=100,
    )


@pytest.fixture
def headers() -> list[str]:
    return list(HEADERS)


@pytest.fixture
def valid_rows() -> list[list[str]]:
    return [
        make_row(),
        make_row(load_id="L2", status="Delivered", driver="Ana Ruiz", truck="T-200"),
    ]


@pytest.fixture
def fake_clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def suggestion():
    """Factory for ConfidenceSuggestion objects."""

    def _make(header, field, confidence, alternatives=None):
        return ConfidenceSuggestion(
            header=header, field=field, confidence=confidence, alternatives=alternatives
        )

    return _make
