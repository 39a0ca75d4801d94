# tests/conftest.py
import sys
import pytest
from pathlib import Path

# Add the project root to Python path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from poemfinder.core.orchestrator import SearchOrchestrator
from poemfinder.data.poetry_client import MockPoetryClient, PoetryClientFactory
from poemfinder.models.poem import Poem


def pytest_configure(config):
    """Configure pytest markers."""
    config.addinivalue_line("markers", "integration: marks tests as integration tests")
    config.addinivalue_line("markers", "real_data: marks tests as hitting the live PoetryDB service")


@pytest.fixture(scope="session")
def project_root_path():
    """Return the project root path"""
    return Path(__file__).parent.parent


@pytest.fixture
def sample_poem_records():
    """Raw PoetryDB records as returned by the search endpoints"""
    return [
        {
            "title": "Fire and Ice",
            "author": "Robert Frost",
            "lines": [
                "Some say the world will end in fire,",
                "Some say in ice.",
                "From what I've tasted of desire",
                "I hold with those who favor fire.",
            ],
            "linecount": "9"
        },
        {
            "title": "Hope is the thing with feathers",
            "author": "Emily Dickinson",
            "lines": [
                "\"Hope\" is the thing with feathers -",
                "That perches in the soul -",
                "And sings the tune without the words -",
                "And never stops - at all -",
            ],
            "linecount": "12"
        },
        {
            "title": "Sonnet 18",
            "author": "William Shakespeare",
            "lines": [
                "Shall I compare thee to a summer's day?",
                "Thou art more lovely and more temperate:",
            ],
            "linecount": "14"
        }
    ]


@pytest.fixture
def sample_poems(sample_poem_records):
    return [Poem.from_dict(r) for r in sample_poem_records]


def make_poem(title: str, text: str, author: str = "Anon") -> Poem:
    """Poem whose lines are the newline-separated `text`"""
    return Poem(title=title, author=author, lines=tuple(text.split("\n")))


@pytest.fixture
def poem_factory():
    return make_poem


@pytest.fixture
def mock_client():
    """Mock poetry client with no queued responses"""
    return MockPoetryClient()


@pytest.fixture
def orchestrator(mock_client):
    """Orchestrator over the mock client with a short debounce"""
    return SearchOrchestrator(mock_client, debounce_seconds=0.01, pool_size=150, top_k=10)


@pytest.fixture(scope="session")
def real_client():
    """Live PoetryDB client when TEST_REAL_POETRYDB is set"""
    client = PoetryClientFactory.create_client_from_env()
    if client is None:
        pytest.skip("Live PoetryDB tests require TEST_REAL_POETRYDB=1")
    return client
