"""Root pytest configuration for commitcache tests."""
import pytest

from commitcache.keys import KeyResolver
from commitcache.settings import Settings
from commitcache.storage.file_store import ContentAddressedFileStore

from .fakes.fake_history import FakeHistory
from .storage.fakes.fake_store import InMemoryStore

_ENV_VARS = (
    "GITHUB_REF",
    "COMMITCACHE_STORAGE_DIR",
    "COMMITCACHE_ZSTD_LEVEL",
    "COMMITCACHE_REPO_PATH",
    "COMMITCACHE_TRUNK_REFS",
    "COMMITCACHE_WALK_LIMIT",
    "COMMITCACHE_PR_MARKER",
)


# Configure pytest markers
def pytest_configure(config):
    """Configure pytest with custom markers."""
    config.addinivalue_line(
        "markers",
        "slow: mark test as slow (may take significant time)"
    )


@pytest.fixture(autouse=True)
def test_env(monkeypatch):
    """Keep the CI environment running the tests out of the settings under test."""
    for name in _ENV_VARS:
        monkeypatch.delenv(name, raising=False)


# Standardized test fixtures
@pytest.fixture
def settings(tmp_path):
    """Standard test settings with a per-test storage directory."""
    return Settings(storage_dir=str(tmp_path / "store"))


@pytest.fixture
def file_store(settings):
    """Content-addressed store rooted in the test's temporary directory."""
    return ContentAddressedFileStore(settings.storage_dir)


@pytest.fixture
def store():
    """Standard in-memory store for testing."""
    return InMemoryStore()


@pytest.fixture
def history():
    """Empty fake commit graph; tests add commits and refs."""
    return FakeHistory()


@pytest.fixture
def resolver(settings, history):
    """Key resolver reading the fake history."""
    return KeyResolver(settings, open_history=history.open)
