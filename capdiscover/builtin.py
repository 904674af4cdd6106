"""Candidates shipped with capdiscover itself."""

from typing import Any, List

from .candidates import Candidate
from .catalog import HTTP_CLIENT, LOG
from .extensions import Extension, ExtensionTable

PACKAGE = "capdiscover-runtime"


def _httpx_client() -> Any:
    import httpx

    return httpx.Client()


def _requests_session() -> Any:
    import requests

    return requests.Session()


def _aiohttp_session() -> Any:
    import aiohttp

    # needs a running event loop, so it is never built automatically
    return aiohttp.ClientSession()


def _structlog_logger() -> Any:
    import structlog

    return structlog.get_logger("capdiscover")


def _loguru_logger() -> Any:
    from loguru import logger

    return logger


def http_client_candidates() -> List[Candidate]:
    return [
        Candidate("httpx", ">=0.24", _httpx_client),
        Candidate("requests", "^2.0", _requests_session),
    ]


def http_client_all_candidates() -> List[Candidate]:
    return http_client_candidates() + [Candidate("aiohttp", ">=3.8", _aiohttp_session)]


def log_candidates() -> List[Candidate]:
    return [
        Candidate("structlog", ">=21.1", _structlog_logger),
        Candidate("loguru", "~0.5 || ~0.6 || ^0.7", _loguru_logger),
    ]


def register(table: ExtensionTable) -> None:
    table.register(Extension(HTTP_CLIENT.name, PACKAGE, http_client_candidates, http_client_all_candidates))
    table.register(Extension(LOG.name, PACKAGE, log_candidates))


__all__ = ["register", "http_client_candidates", "http_client_all_candidates", "log_candidates", "PACKAGE"]
