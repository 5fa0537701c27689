from unittest.mock import MagicMock

import pytest
import requests

from relay_trader.agents.fetcher import CatalogFetcher, CatalogFetchError
from relay_trader.agents.fetcher.catalog_fetcher import build_http_session


def make_session(json_payload=None, error=None, json_error=None):
    response = MagicMock()
    if error is not None:
        response.raise_for_status.side_effect = error
    if json_error is not None:
        response.json.side_effect = json_error
    else:
        response.json.return_value = json_payload
    session = MagicMock(spec=requests.Session)
    session.get.return_value = response
    return session


async def test_get_returns_decoded_json(logger):
    session = make_session(json_payload=[{"id": "WETH-DAI"}])
    fetcher = CatalogFetcher(logger, session=session, timeout=3.0)

    assert await fetcher.get("https://api.test.relay/v2/markets") == [{"id": "WETH-DAI"}]
    session.get.assert_called_once_with("https://api.test.relay/v2/markets", timeout=3.0)


async def test_http_error_is_wrapped(logger):
    error = requests.HTTPError("503 Server Error")
    fetcher = CatalogFetcher(logger, session=make_session(error=error))

    with pytest.raises(CatalogFetchError) as exc_info:
        await fetcher.get("https://api.test.relay/v2/tokens")

    assert exc_info.value.url == "https://api.test.relay/v2/tokens"
    assert exc_info.value.__cause__ is error


async def test_connection_error_is_wrapped(logger):
    session = MagicMock(spec=requests.Session)
    session.get.side_effect = requests.ConnectionError("refused")
    fetcher = CatalogFetcher(logger, session=session)

    with pytest.raises(CatalogFetchError, match="refused"):
        await fetcher.get("https://api.test.relay/v2/tokens")


async def test_invalid_json_is_wrapped(logger):
    fetcher = CatalogFetcher(logger, session=make_session(json_error=ValueError("Expecting value")))

    with pytest.raises(CatalogFetchError, match="invalid JSON"):
        await fetcher.get("https://api.test.relay/v2/tokens")


def test_close_closes_session(logger):
    session = make_session()
    CatalogFetcher(logger, session=session).close()
    session.close.assert_called_once()


def test_default_session_retries_gets():
    session = build_http_session(retries=5, backoff=0.5)
    try:
        retry = session.get_adapter("https://api.test.relay").max_retries
        assert retry.total == 5
        assert retry.backoff_factor == 0.5
        assert 503 in retry.status_forcelist
        assert session.headers["Accept"] == "application/json"
    finally:
        session.close()
