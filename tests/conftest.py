import sys
from pathlib import Path

import pytest

ROOT = Path(__file__).resolve().parents[1]

# Prefer this checkout over any installed copy
root_str = str(ROOT)
if root_str not in sys.path:
    sys.path.insert(0, root_str)

from smartsearch.config.settings import Settings, clear_settings_cache  # noqa: E402
from smartsearch.search.hints import HintBundle, hint_composer  # noqa: E402


@pytest.fixture(autouse=True)
def _fresh_settings():
    """Settings are lru_cached; never leak environment changes between tests."""
    clear_settings_cache()
    yield
    clear_settings_cache()


@pytest.fixture
def settings():
    return Settings(llm_enabled=False, llm_timeout_seconds=0.5)


@pytest.fixture
def compose():
    """Compose hints for a query with the production extractors."""
    def _compose(query: str) -> HintBundle:
        return hint_composer.compose(query)
    return _compose
