import pytest

from collectors.http_cache import clear_cache


@pytest.fixture(autouse=True)
def _fresh_http_cache():
    """Every test starts without cached upstream responses."""
    clear_cache()
    yield
    clear_cache()
