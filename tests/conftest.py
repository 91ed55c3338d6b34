import pytest
from opentelemetry import trace


@pytest.fixture(autouse=True, scope="session")
def disable_tracing():
    """Install a throwaway provider so recovery spans never export to pytest stdout."""
    from opentelemetry.sdk.trace import TracerProvider

    trace.set_tracer_provider(TracerProvider())
    yield


@pytest.fixture(autouse=True)
def _fresh_settings():
    """Settings are lru_cached; clear them so env overrides never leak between tests."""
    from jsonrescue.config import get_settings
    from jsonrescue.core.engine import get_engine

    get_settings.cache_clear()
    get_engine.cache_clear()
    yield
    get_settings.cache_clear()
    get_engine.cache_clear()
