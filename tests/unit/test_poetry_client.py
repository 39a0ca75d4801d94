# tests/unit/test_poetry_client.py

import json
import pytest
import requests
from unittest.mock import Mock, patch
from poemfinder.data.poetry_client import (
    BasePoetryClient,
    PoetryDbClient,
    MockPoetryClient,
    PoetryClientFactory,
    PoetryClientError,
    TransportError
)
from poemfinder.models.poem import Poem, PoetryDbError


def ok_response(payload):
    response = Mock()
    response.status_code = 200
    response.json.return_value = payload
    response.raise_for_status.return_value = None
    return response


class TestBasePoetryClient:
    """Test BasePoetryClient abstract class"""

    def _client(self, payload):
        class TestClient(BasePoetryClient):
            def __init__(self, config=None):
                super().__init__(config)
                self.urls = []

            def _make_request(self, url):
                self.urls.append(url)
                return payload

            def is_available(self):
                return True

        return TestClient()

    def test_default_base_url(self):
        client = self._client([])
        assert client.query_builder.base_url == "https://poetrydb.org"
        assert client.logger is not None

    @pytest.mark.asyncio
    async def test_search_builds_url_and_decodes(self, sample_poem_records):
        client = self._client(sample_poem_records)

        poems = await client.search("Robert Frost", "Fire and Ice", exact=True)

        assert client.urls == ["https://poetrydb.org/author,title/Robert%20Frost:abs;Fire%20and%20Ice:abs"]
        assert len(poems) == 3
        assert isinstance(poems[0], Poem)

    @pytest.mark.asyncio
    async def test_search_without_filters_returns_author_listing(self):
        client = self._client({"authors": ["Adam Lindsay Gordon", "Alan Seeger"]})

        poems = await client.search()

        assert client.urls == ["https://poetrydb.org/author"]
        assert [p.author for p in poems] == ["Adam Lindsay Gordon", "Alan Seeger"]
        assert all(p.title == "(author listing)" for p in poems)

    @pytest.mark.asyncio
    async def test_random(self, sample_poem_records):
        client = self._client(sample_poem_records[:2])

        poems = await client.random(2)

        assert client.urls == ["https://poetrydb.org/random/2/author,title,lines"]
        assert len(poems) == 2


class TestPoetryDbClient:
    """Test the requests-backed client"""

    def test_initialization(self):
        client = PoetryDbClient({"base_url": "http://localhost:3000/", "timeout": 5,
                                 "user_agent": "tests/1.0"})

        assert client.base_url == "http://localhost:3000"
        assert client.timeout == 5.0
        assert client.headers["User-Agent"] == "tests/1.0"

    def test_defaults(self):
        client = PoetryDbClient()
        assert client.base_url == "https://poetrydb.org"
        assert client.timeout == 30.0

    def test_invalid_timeout(self):
        with pytest.raises(ValueError, match="timeout must be positive"):
            PoetryDbClient({"timeout": 0})

    @patch('poemfinder.data.poetry_client.requests.get')
    def test_make_request_success(self, mock_get):
        mock_get.return_value = ok_response([{"title": "T", "author": "A", "lines": []}])
        client = PoetryDbClient({"timeout": 7})

        result = client._make_request("https://poetrydb.org/author/frost")

        assert result == [{"title": "T", "author": "A", "lines": []}]
        mock_get.assert_called_once()
        call_args = mock_get.call_args
        assert call_args[0][0] == "https://poetrydb.org/author/frost"
        assert call_args[1]["timeout"] == 7.0
        assert call_args[1]["headers"]["Accept"] == "application/json"

    @patch('poemfinder.data.poetry_client.requests.get')
    def test_make_request_http_error(self, mock_get):
        response = Mock()
        response.status_code = 503
        response.reason = "Service Unavailable"
        response.raise_for_status.side_effect = requests.exceptions.HTTPError("503", response=response)
        mock_get.return_value = response
        client = PoetryDbClient()
        url = "https://poetrydb.org/title/ozymandias"

        with pytest.raises(TransportError) as exc_info:
            client._make_request(url)

        error = exc_info.value.error
        assert isinstance(error, PoetryDbError)
        assert error.status == 503
        assert error.url == url
        assert "Service Unavailable" in error.message

    @patch('poemfinder.data.poetry_client.requests.get')
    def test_make_request_connection_error(self, mock_get):
        mock_get.side_effect = requests.exceptions.ConnectionError("Connection refused")
        client = PoetryDbClient()

        with pytest.raises(TransportError) as exc_info:
            client._make_request("https://poetrydb.org/author")

        assert exc_info.value.error.status == 0
        assert "Connection refused" in exc_info.value.error.message
        assert isinstance(exc_info.value, PoetryClientError)

    @patch('poemfinder.data.poetry_client.requests.get')
    def test_make_request_timeout(self, mock_get):
        mock_get.side_effect = requests.exceptions.Timeout()
        client = PoetryDbClient({"timeout": 2})

        with pytest.raises(TransportError) as exc_info:
            client._make_request("https://poetrydb.org/author")

        assert exc_info.value.error.status == 0
        assert "timed out" in exc_info.value.error.message

    @patch('poemfinder.data.poetry_client.requests.get')
    def test_make_request_malformed_json(self, mock_get):
        response = ok_response(None)
        response.json.side_effect = json.JSONDecodeError("Expecting value", "", 0)
        mock_get.return_value = response
        client = PoetryDbClient()

        with pytest.raises(TransportError) as exc_info:
            client._make_request("https://poetrydb.org/author")

        assert exc_info.value.error.status == 200
        assert "Malformed response" in exc_info.value.error.message

    @patch('poemfinder.data.poetry_client.requests.get')
    @pytest.mark.asyncio
    async def test_search_failure_propagates_transport_error(self, mock_get):
        mock_get.side_effect = requests.exceptions.ConnectionError("down")
        client = PoetryDbClient()

        with pytest.raises(TransportError) as exc_info:
            await client.search("Frost")

        assert exc_info.value.error.url == "https://poetrydb.org/author/frost"

    @patch('poemfinder.data.poetry_client.requests.get')
    def test_is_available_success(self, mock_get):
        mock_get.return_value = ok_response([])
        assert PoetryDbClient().is_available() is True

    @patch('poemfinder.data.poetry_client.requests.get')
    def test_is_available_failure(self, mock_get):
        mock_get.side_effect = requests.exceptions.ConnectionError("Connection error")
        assert PoetryDbClient().is_available() is False


class TestMockPoetryClient:
    """Test the mock client used throughout the suite"""

    @pytest.mark.asyncio
    async def test_queued_responses_in_order(self, sample_poems):
        client = MockPoetryClient()
        client.add_response(sample_poems[:1])
        client.add_response({"authors": ["A"]})

        first = await client.random(1)
        second = await client.search()

        assert first == sample_poems[:1]
        assert second[0].author == "A"
        assert client.call_count == 2
        assert client.requested_urls[1] == "https://poetrydb.org/author"

    @pytest.mark.asyncio
    async def test_queued_error(self):
        client = MockPoetryClient()
        client.add_error(PoetryDbError(status=500, url="u", message="boom"))

        with pytest.raises(TransportError):
            await client.search("x")

    @pytest.mark.asyncio
    async def test_default_is_empty(self):
        client = MockPoetryClient()
        assert await client.random(3) == []

    def test_reset(self):
        client = MockPoetryClient()
        client.add_response([])
        client._make_request("u")
        client.reset()

        assert client.responses == []
        assert client.requested_urls == []
        assert client.call_count == 0


class TestPoetryClientFactory:
    """Test PoetryClientFactory class"""

    def test_create_poetrydb_client(self):
        client = PoetryClientFactory.create_client("poetrydb", {"timeout": 3})
        assert isinstance(client, PoetryDbClient)
        assert client.timeout == 3.0

    def test_create_mock_client(self):
        assert isinstance(PoetryClientFactory.create_client("MOCK"), MockPoetryClient)

    def test_create_unsupported_client(self):
        with pytest.raises(ValueError, match="Unsupported poetry client type"):
            PoetryClientFactory.create_client("unsupported", {})

    def test_create_client_from_env_disabled(self, monkeypatch):
        monkeypatch.delenv("TEST_REAL_POETRYDB", raising=False)
        assert PoetryClientFactory.create_client_from_env() is None

    def test_create_client_from_env_enabled(self, monkeypatch):
        monkeypatch.setenv("TEST_REAL_POETRYDB", "1")
        monkeypatch.setenv("POEMFINDER_BASE_URL", "http://localhost:3000")

        client = PoetryClientFactory.create_client_from_env()

        assert isinstance(client, PoetryDbClient)
        assert client.base_url == "http://localhost:3000"
