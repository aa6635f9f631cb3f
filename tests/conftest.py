import pytest


OFFLINE_CONFIG = {
    "AIRTABLE_API_TOKEN": "test-airtable-token",
    "AIRTABLE_BASE_ID": "appTEST",
    "AIRTABLE_AGENTS_TABLE_ID": "tblAgents",
    "AIRTABLE_SPECIALIZATIONS_TABLE_ID": "tblSpecializations",
    "AIRTABLE_API_BASE_URL": "https://airtable.test/v0",
    "CALCOM_API_KEY": "test-calcom-key",
    "CALCOM_TEAM_ID": "42",
    "CALCOM_API_BASE_URL": "https://calcom.test/v2",
    "CALCOM_BOOKINGS_PAGE_SIZE": 100,
    "IDENTITY_CACHE_TTL_SECONDS": 300,
    "FAIRNESS_GAP": 3,
    "OPERATING_TIMEZONE": "Asia/Jerusalem",
    "RESOLVE_TIMEOUT_SECONDS": 5.0,
}


@pytest.fixture(autouse=True)
def _safe_test_config(monkeypatch):
    """Force deterministic, offline-safe config for tests.

    The repo loads .env on import; these overrides point every upstream at
    unroutable test hosts so a missing fake fails loudly instead of calling
    the real Airtable or Cal.com.
    """
    from meeting_router.config import config, Config

    for name, value in OFFLINE_CONFIG.items():
        monkeypatch.setattr(Config, name, value, raising=False)
        # Keep the instance in sync for any code that reads instance attributes directly.
        monkeypatch.setattr(config, name, value, raising=False)

    return config


@pytest.fixture(autouse=True)
def _fresh_singletons():
    """Drop process-wide clients/caches and dependency overrides between tests."""
    from meeting_router import dependencies
    from meeting_router.main import app

    factories = [
        dependencies.get_directory_client,
        dependencies.get_calcom_client,
        dependencies.get_identity_correlator,
        dependencies.get_resolver,
        dependencies.get_specializations_cache,
    ]
    for factory in factories:
        factory.cache_clear()
    app.dependency_overrides.clear()

    yield

    for factory in factories:
        factory.cache_clear()
    app.dependency_overrides.clear()


class FakeClock:
    """Manually advanced wall clock (seconds)."""

    def __init__(self, start: float = 1_700_000_000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def clock():
    return FakeClock()
