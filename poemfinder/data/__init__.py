# poemfinder/data/__init__.py

from .query_builder import QueryBuilder, build_url, normalize, DEFAULT_BASE_URL
from .result_decoder import decode
from .poetry_client import (
    BasePoetryClient,
    PoetryDbClient,
    MockPoetryClient,
    PoetryClientFactory,
    PoetryClientError,
    TransportError
)

__all__ = [
    "QueryBuilder",
    "build_url",
    "normalize",
    "DEFAULT_BASE_URL",
    "decode",
    "BasePoetryClient",
    "PoetryDbClient",
    "MockPoetryClient",
    "PoetryClientFactory",
    "PoetryClientError",
    "TransportError"
]
