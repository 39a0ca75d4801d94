# poemfinder/data/poetry_client.py

import asyncio
import logging
import os
import time
from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional

import requests

from poemfinder.data.query_builder import DEFAULT_BASE_URL, QueryBuilder
from poemfinder.data.result_decoder import decode
from poemfinder.models.poem import Poem, PoetryDbError

DEFAULT_TIMEOUT = 30
DEFAULT_USER_AGENT = "poemfinder/1.0"


class PoetryClientError(Exception):
    """Base exception for poetry client errors"""
    pass


class TransportError(PoetryClientError):
    """
    Raised when a request fails: network error, timeout, non-2xx status
    or a body that is not valid JSON.

    The underlying requests exception is normalized into `error` so callers
    never depend on transport types.
    """

    def __init__(self, error: PoetryDbError):
        super().__init__(str(error))
        self.error = error


class BasePoetryClient(ABC):
    """
    Abstract base class for PoetryDB clients.

    Subclasses implement the blocking `_make_request`; the public coroutines
    run it off the event loop and decode the result.
    """

    def __init__(self, config: Optional[Dict[str, Any]] = None):
        """
        Initialize the client.

        Args:
            config: Client configuration with optional keys:
                - base_url: PoetryDB origin
                - timeout: Request timeout in seconds
        """
        self.config = config or {}
        self.logger = logging.getLogger(__name__)
        self.query_builder = QueryBuilder(self.config.get('base_url') or DEFAULT_BASE_URL)

    @abstractmethod
    def _make_request(self, url: str) -> Any:
        """
        Perform a GET request and return the parsed JSON body.

        Args:
            url: Fully built request URL

        Returns:
            Parsed JSON payload

        Raises:
            TransportError: If the request fails
        """
        pass

    @abstractmethod
    def is_available(self) -> bool:
        """
        Check if the service can be reached.

        Returns:
            True if the client can be used
        """
        pass

    async def _fetch(self, url: str) -> Any:
        start_time = time.time()
        self.logger.debug(f"GET {url}")
        raw = await asyncio.to_thread(self._make_request, url)
        self.logger.debug(f"GET {url} finished in {time.time() - start_time:.2f}s")
        return raw

    async def search(self, author: Optional[str] = None, title: Optional[str] = None,
                     exact: bool = False) -> List[Poem]:
        """
        Search poems by author and/or title.

        Args:
            author: Author filter
            title: Title filter
            exact: Case-literal matching

        Returns:
            Decoded poems; the author listing when no filter is given

        Raises:
            TransportError: If the request fails
        """
        url = self.query_builder.build_url(author, title, exact)
        raw = await self._fetch(url)
        return decode(raw)

    async def random(self, count: int = 1) -> List[Poem]:
        """
        Fetch `count` random poems.

        Raises:
            TransportError: If the request fails
        """
        url = self.query_builder.random_url(count)
        raw = await self._fetch(url)
        return decode(raw)


class PoetryDbClient(BasePoetryClient):
    """
    PoetryDB client backed by requests.

    Timeouts are delegated to requests; there is no retry policy.
    """

    def __init__(self, config: Optional[Dict[str, Any]] = None):
        super().__init__(config)
        self.base_url = self.query_builder.base_url
        self.timeout = float(self.config.get('timeout', DEFAULT_TIMEOUT))
        self.headers = {
            'Accept': 'application/json',
            'User-Agent': self.config.get('user_agent') or DEFAULT_USER_AGENT,
        }

        if self.timeout <= 0:
            raise ValueError("timeout must be positive")

    def is_available(self) -> bool:
        """Check availability with a one-poem random request"""
        try:
            self._make_request(self.query_builder.random_url(1))
            return True
        except TransportError as e:
            self.logger.error(f"PoetryDB availability check failed: {e}")
            return False

    def _make_request(self, url: str) -> Any:
        try:
            response = requests.get(url, headers=self.headers, timeout=self.timeout)
            response.raise_for_status()
        except requests.exceptions.HTTPError as e:
            status = e.response.status_code if e.response is not None else 0
            reason = getattr(e.response, 'reason', None) or str(e)
            self.logger.error(f"PoetryDB request failed with status {status}: {url}")
            raise TransportError(PoetryDbError(status=status, url=url,
                                               message=f"Http failure response for {url}: {status} {reason}")) from e
        except requests.exceptions.Timeout as e:
            self.logger.error(f"PoetryDB request timed out after {self.timeout}s: {url}")
            raise TransportError(PoetryDbError(status=0, url=url,
                                               message=f"Request timed out after {self.timeout}s")) from e
        except requests.exceptions.RequestException as e:
            self.logger.error(f"PoetryDB request failed: {e}")
            raise TransportError(PoetryDbError(status=0, url=url,
                                               message=str(e) or "Request failed")) from e

        try:
            return response.json()
        except ValueError as e:
            self.logger.error(f"Failed to parse PoetryDB response: {e}")
            raise TransportError(PoetryDbError(status=response.status_code or 0, url=url,
                                               message=f"Malformed response: {e}")) from e


class MockPoetryClient(BasePoetryClient):
    """Mock client for testing and offline runs"""

    def __init__(self, config: Optional[Dict[str, Any]] = None):
        super().__init__(config)
        self.responses: List[Any] = []
        self.requested_urls: List[str] = []
        self.call_count = 0

    def add_response(self, raw: Any):
        """Queue a raw JSON payload (or list of Poem objects) for the next request"""
        if isinstance(raw, list):
            raw = [p.to_dict() if isinstance(p, Poem) else p for p in raw]
        self.responses.append(raw)

    def add_error(self, error: PoetryDbError):
        """Queue a failure for the next request"""
        self.responses.append(TransportError(error))

    def reset(self):
        """Reset the mock client state"""
        self.responses = []
        self.requested_urls = []
        self.call_count = 0

    def is_available(self) -> bool:
        """Mock client is always available"""
        return True

    def _make_request(self, url: str) -> Any:
        self.call_count += 1
        self.requested_urls.append(url)
        self.logger.info(f"Mock request {self.call_count}: {url}")

        if not self.responses:
            return []
        response = self.responses.pop(0)
        if isinstance(response, TransportError):
            raise response
        return response


class PoetryClientFactory:
    """
    Factory class for creating poetry client instances.
    """

    @staticmethod
    def create_client(client_type: str, config: Optional[Dict[str, Any]] = None) -> BasePoetryClient:
        """
        Create a poetry client instance.

        Args:
            client_type: Type of client ('poetrydb' or 'mock')
            config: Client-specific configuration

        Returns:
            Configured client instance

        Raises:
            ValueError: If client type is not supported
        """
        if client_type.lower() == 'poetrydb':
            return PoetryDbClient(config)
        elif client_type.lower() == 'mock':
            return MockPoetryClient(config)
        else:
            raise ValueError(f"Unsupported poetry client type: {client_type}")

    @staticmethod
    def create_client_from_env() -> Optional[BasePoetryClient]:
        """
        Real client for live tests.

        Returns:
            PoetryDbClient if TEST_REAL_POETRYDB is set, None otherwise

        Environment Variables:
            TEST_REAL_POETRYDB: Must be set to enable the live client
            POEMFINDER_BASE_URL: Optional origin override
        """
        if not os.getenv("TEST_REAL_POETRYDB"):
            return None

        config = {'base_url': os.getenv("POEMFINDER_BASE_URL") or DEFAULT_BASE_URL}
        return PoetryClientFactory.create_client('poetrydb', config)
