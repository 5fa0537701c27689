from __future__ import annotations

import asyncio
import logging
from typing import Any, Optional

import requests
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry


class CatalogFetchError(Exception):
    """HTTP failure while fetching a token or market catalog"""

    def __init__(self, url: str, reason: str):
        super().__init__(f"Failed to fetch {url}: {reason}")
        self.url = url


def build_http_session(retries: int = 3, backoff: float = 0.2) -> requests.Session:
    """Return a requests Session that retries idempotent GETs on transient statuses."""
    retry_strategy = Retry(
        total=retries,
        backoff_factor=backoff,
        status_forcelist=(429, 500, 502, 503, 504),
        allowed_methods=("GET",),
    )
    adapter = HTTPAdapter(max_retries=retry_strategy)
    session = requests.Session()
    session.mount("http://", adapter)
    session.mount("https://", adapter)
    session.headers.update({"Accept": "application/json"})
    return session


class CatalogFetcher:
    """
    Fetches JSON catalogs from the relay REST API.

    requests is blocking, so every call runs in a worker thread to keep the
    event loop free.
    """

    def __init__(self, logger: logging.Logger, session: Optional[requests.Session] = None, timeout: float = 10.0):
        self.logger = logger
        self.session = session or build_http_session()
        self.timeout = timeout

    async def get(self, url: str) -> Any:
        return await asyncio.to_thread(self._get, url)

    def _get(self, url: str) -> Any:
        self.logger.debug(f"GET {url}")
        try:
            response = self.session.get(url, timeout=self.timeout)
            response.raise_for_status()
        except requests.RequestException as e:
            self.logger.error(f"GET {url} failed: {e}")
            raise CatalogFetchError(url, str(e)) from e

        try:
            return response.json()
        except ValueError as e:
            raise CatalogFetchError(url, f"invalid JSON: {e}") from e

    def close(self):
        self.session.close()
