"""Shared pytest fixtures for formable-wiki tests."""

from collections.abc import Callable
from pathlib import Path

import httpx
import pytest

from formable_wiki.config import FormableWikiConfig

FIXTURES_DIR = Path(__file__).parent / "fixtures"
MESSAGES_DIR = FIXTURES_DIR / "messages"
PAGES_DIR = FIXTURES_DIR / "pages"


@pytest.fixture
def fixtures_dir() -> Path:
    """Return path to fixtures directory."""
    return FIXTURES_DIR


@pytest.fixture
def load_fixture() -> callable:
    """Factory fixture to load fixture files.

    Usage:
        def test_something(load_fixture):
            content = load_fixture("messages", "great_kievan_rus.txt")
    """

    def _load(category: str, name: str) -> str:
        path = FIXTURES_DIR / category / name
        return path.read_text(encoding="utf-8")

    return _load


# =============================================================================
# MESSAGE FIXTURES
# =============================================================================


@pytest.fixture
def kievan_rus_message(load_fixture: callable) -> str:
    """Flat formable message with button and alert blocks, no tiles, no demonym."""
    return load_fixture("messages", "great_kievan_rus.txt")


@pytest.fixture
def iberia_mission_message(load_fixture: callable) -> str:
    """Mission message with tiles, CustomAttributes, modifier fields and a date."""
    return load_fixture("messages", "mission_iberia.txt")


@pytest.fixture
def smart_quotes_message(load_fixture: callable) -> str:
    """Formable pasted with curly quotes, a zero-width space and trailing chatter."""
    return load_fixture("messages", "smart_quotes.txt")


@pytest.fixture
def releasable_message(load_fixture: callable) -> str:
    """Releasable formable with repeated mentions and an AddModifiers table."""
    return load_fixture("messages", "releasable_with_modifier.txt")


@pytest.fixture
def unbalanced_message(load_fixture: callable) -> str:
    """Formable whose RequiredCountries block never closes."""
    return load_fixture("messages", "unbalanced.txt")


@pytest.fixture
def commentary_message(load_fixture: callable) -> str:
    """Chat message with a mention but no structured fields."""
    return load_fixture("messages", "commentary_only.txt")


@pytest.fixture
def rendered_page(load_fixture: callable) -> str:
    """A rendered ConsideredFormable page."""
    return load_fixture("pages", "rendered_formable.wiki")


# =============================================================================
# HTTP FIXTURES
# =============================================================================


@pytest.fixture
def test_config() -> FormableWikiConfig:
    """Config with instant retries so retry tests do not sleep."""
    return FormableWikiConfig(retry_delay=0.0, max_attempts=2)


@pytest.fixture
def mock_client() -> Callable[[Callable[[httpx.Request], httpx.Response]], httpx.Client]:
    """Factory fixture building an httpx client backed by a handler function.

    Usage:
        def test_something(mock_client):
            client = mock_client(lambda request: httpx.Response(200, json={}))
    """

    def _build(handler: Callable[[httpx.Request], httpx.Response]) -> httpx.Client:
        return httpx.Client(transport=httpx.MockTransport(handler))

    return _build
