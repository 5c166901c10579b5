from unittest.mock import Mock

import pytest
import requests

from kiwi_mcp.config import Settings
from kiwi_mcp.kiwi_fetcher import KiwiFetcher, KiwiFetcherError
from kiwi_mcp.models import FlightQuery


def make_query(**overrides):
    fields = {
        "fly_from": "LHR",
        "fly_to": "BCN",
        "date_from": "01/06/2025",
        "date_to": "07/06/2025",
    }
    fields.update(overrides)
    return FlightQuery(**fields)


def make_session(payload=None, status_code=200):
    session = Mock()
    resp = Mock(status_code=status_code, text="upstream says no")
    resp.json.return_value = payload if payload is not None else {"data": []}
    session.get.return_value = resp
    return session


def test_search_sends_params_and_headers():
    session = make_session({"data": [{"price": 10}]})
    fetcher = KiwiFetcher("secret", "https://kiwi.test/v2/", timeout=7, session=session)

    body = fetcher.search(make_query(return_to="14/06/2025"))

    assert body == {"data": [{"price": 10}]}
    session.get.assert_called_once()
    args, kwargs = session.get.call_args
    assert args == ("https://kiwi.test/v2/search",)
    assert kwargs["headers"] == {"apikey": "secret", "Accept": "application/json"}
    assert kwargs["timeout"] == 7
    assert kwargs["params"]["fly_from"] == "LHR"
    assert kwargs["params"]["fly_to"] == "BCN"
    assert kwargs["params"]["return_to"] == "14/06/2025"
    assert "return_from" not in kwargs["params"]


def test_non_200_raises():
    fetcher = KiwiFetcher("secret", session=make_session(status_code=403))
    with pytest.raises(KiwiFetcherError, match="HTTP 403"):
        fetcher.search(make_query())


def test_invalid_json_raises():
    session = make_session()
    session.get.return_value.json.side_effect = ValueError("Expecting value")
    fetcher = KiwiFetcher("secret", session=session)

    with pytest.raises(KiwiFetcherError, match="Failed to parse API response"):
        fetcher.search(make_query())


def test_transport_error_raises():
    session = Mock()
    session.get.side_effect = requests.ConnectionError("connection refused")
    fetcher = KiwiFetcher("secret", session=session)

    with pytest.raises(KiwiFetcherError, match="connection refused"):
        fetcher.search(make_query())


def test_body_returned_as_is_for_formatter():
    fetcher = KiwiFetcher("secret", session=make_session({"error": "nope"}))
    assert fetcher.search(make_query()) == {"error": "nope"}


def test_from_settings():
    settings = Settings(
        KIWI_API_KEY="abc",
        KIWI_BASE_URL="https://kiwi.test/v2/",
        REQUEST_TIMEOUT=5,
    )
    session = make_session()
    fetcher = KiwiFetcher.from_settings(settings, session=session)

    assert fetcher.api_key == "abc"
    assert fetcher.base_url == "https://kiwi.test/v2"
    assert fetcher.timeout == 5
    assert fetcher.session is session
