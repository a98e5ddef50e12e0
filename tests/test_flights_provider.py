import time

import pytest
import requests

from flightwise.config import Settings
from flightwise.providers.base import FlightsProviderError
from flightwise.providers.mock_flights import MockFlightsProvider
from flightwise.providers.serpapi_flights import SerpApiFlightsProvider

from conftest import RecordingFlightsProvider


def test_mock_search_both_currencies_ok():
    results = MockFlightsProvider().search_flights("BOG", "MIA", "2025-03-10", None, 2)

    assert results["error"] is False
    assert results["flights_usd"]["currency"] == "USD"
    assert results["flights_cop"]["currency"] == "COP"
    assert results["search_info"] == {
        "origin": "BOG",
        "destination": "MIA",
        "outbound_date": "2025-03-10",
        "return_date": None,
        "adults": 2,
    }
    cheapest = results["flights_usd"]["data"]["best_flights"][0]
    assert cheapest["price"] == 360


@pytest.mark.parametrize("failing", ["USD", "COP"])
def test_one_currency_failing_is_isolated(failing):
    provider = RecordingFlightsProvider(fail={failing})
    results = provider.search_flights("BOG", "MIA", "2025-03-10")

    assert results["error"] is False
    bad = results[f"flights_{failing.lower()}"]
    assert bad == {"currency": failing, "error": True, "message": f"{failing} unavailable"}
    good = "COP" if failing == "USD" else "USD"
    assert "data" in results[f"flights_{good.lower()}"]


def test_both_currencies_failing_is_an_error():
    results = RecordingFlightsProvider(fail={"USD", "COP"}).search_flights("BOG", "MIA", "2025-03-10")
    assert results["error"] is True
    assert results["flights_usd"]["error"] is True
    assert results["flights_cop"]["error"] is True


@pytest.mark.parametrize("exc", [
    ValueError("bad json"),
    requests.ConnectionError("down"),
    FlightsProviderError("no results"),
])
def test_provider_exceptions_become_markers(exc):
    class Broken(MockFlightsProvider):
        def fetch_offers(self, *args, **kwargs):
            raise exc

    results = Broken().search_flights("BOG", "MIA", "2025-03-10")
    assert results["error"] is True
    assert results["flights_usd"]["message"] == str(exc)


def test_non_dict_payload_is_a_marker():
    class Weird(MockFlightsProvider):
        def fetch_offers(self, *args, **kwargs):
            return ["not", "a", "dict"]

    results = Weird().search_flights("BOG", "MIA", "2025-03-10")
    assert results["flights_cop"] == {"currency": "COP", "error": True, "message": "malformed payload"}


def test_currency_queries_run_in_parallel():
    provider = RecordingFlightsProvider(delay=0.3)

    started = time.monotonic()
    provider.search_flights("BOG", "MIA", "2025-03-10")
    elapsed = time.monotonic() - started

    assert elapsed < 0.55
    assert sorted(c[5] for c in provider.calls) == ["COP", "USD"]


# ---------------------------
# SerpAPI
# ---------------------------
class FakeResponse:
    def __init__(self, status_code=200, payload=None, text=""):
        self.status_code = status_code
        self.payload = payload
        self.text = text

    def json(self):
        if self.payload is None:
            raise ValueError("Expecting value: line 1 column 1 (char 0)")
        return self.payload


class FakeSession:
    def __init__(self, responder):
        self.responder = responder
        self.calls = []

    def get(self, url, params=None, timeout=None):
        self.calls.append({"url": url, "params": dict(params), "timeout": timeout})
        return self.responder(dict(params))


def serpapi(responder, **kwargs):
    session = FakeSession(responder)
    provider = SerpApiFlightsProvider(
        api_key="serp-key",
        base_url="https://serp.example/search",
        backoff_seconds=0,
        session=session,
        **kwargs,
    )
    return provider, session


def test_build_params_round_trip():
    provider, _ = serpapi(lambda p: None, language="en")
    params = dict(provider.build_params("BOG", "MAD", "2025-06-01", "2025-06-20", 2, "USD"))

    assert params == {
        "engine": "google_flights",
        "departure_id": "BOG",
        "arrival_id": "MAD",
        "adults": 2,
        "currency": "USD",
        "hl": "en",
        "api_key": "serp-key",
        "outbound_date": "2025-06-01",
        "return_date": "2025-06-20",
        "type": "1",
    }


def test_build_params_one_way():
    provider, _ = serpapi(lambda p: None)
    params = dict(provider.build_params("BOG", "MDE", "2025-06-01", None, 1, "COP"))

    assert params["type"] == "2"
    assert "return_date" not in params
    assert params["hl"] == "es"


def test_serpapi_search_ok():
    def responder(params):
        return FakeResponse(200, {
            "search_metadata": {"google_flights_url": f"https://g.example/?curr={params['currency']}"},
            "best_flights": [{"price": 100 if params["currency"] == "USD" else 400000}],
        })

    provider, session = serpapi(responder, timeout=7)
    results = provider.search_flights("BOG", "MIA", "2025-03-10")

    assert results["error"] is False
    assert results["flights_usd"]["data"]["best_flights"][0]["price"] == 100
    assert results["flights_cop"]["data"]["best_flights"][0]["price"] == 400000
    assert len(session.calls) == 2
    assert {c["timeout"] for c in session.calls} == {7}


def test_serpapi_server_error_becomes_marker():
    def responder(params):
        if params["currency"] == "COP":
            return FakeResponse(503, text="unavailable")
        return FakeResponse(200, {"best_flights": []})

    provider, _ = serpapi(responder)
    results = provider.search_flights("BOG", "MIA", "2025-03-10")

    assert results["error"] is False
    assert results["flights_cop"]["error"] is True
    assert "503" in results["flights_cop"]["message"]


def test_serpapi_server_error_retried_when_configured():
    outcomes = {"USD": [FakeResponse(500), FakeResponse(200, {"best_flights": []})]}

    def responder(params):
        queue = outcomes.get(params["currency"])
        if queue:
            return queue.pop(0)
        return FakeResponse(200, {"best_flights": []})

    provider, session = serpapi(responder, max_attempts=2)
    results = provider.search_flights("BOG", "MIA", "2025-03-10")

    assert results["error"] is False
    assert "data" in results["flights_usd"]
    assert len(session.calls) == 3


def test_serpapi_error_in_body():
    provider, _ = serpapi(lambda p: FakeResponse(200, {"error": "Google Flights hasn't returned any results."}))
    results = provider.search_flights("BOG", "MIA", "2025-03-10")

    assert results["error"] is True
    assert results["flights_usd"]["message"] == "Google Flights hasn't returned any results."


def test_serpapi_invalid_json():
    provider, _ = serpapi(lambda p: FakeResponse(200, None, text="<html>"))
    results = provider.search_flights("BOG", "MIA", "2025-03-10")
    assert results["error"] is True


def test_serpapi_client_error_is_not_retried():
    provider, session = serpapi(lambda p: FakeResponse(401, text="Invalid API key"), max_attempts=3)
    results = provider.search_flights("BOG", "MIA", "2025-03-10")

    assert results["error"] is True
    assert len(session.calls) == 2
    assert "401" in results["flights_usd"]["message"]


def test_backoff_comes_from_settings(monkeypatch):
    monkeypatch.setenv("FLIGHTS_BACKOFF_SECONDS", "3.5")
    monkeypatch.setenv("FLIGHTS_MAX_ATTEMPTS", "2")
    provider = SerpApiFlightsProvider.from_settings(Settings.from_env())

    assert provider.backoff_seconds == 3.5
    assert provider.max_attempts == 2
    assert SerpApiFlightsProvider(api_key="k").backoff_seconds == Settings.flights_backoff_seconds


def test_serpapi_retry_waits_use_configured_backoff(monkeypatch):
    sleeps = []
    monkeypatch.setattr(time, "sleep", sleeps.append)
    outcomes = [FakeResponse(503), FakeResponse(200, {"best_flights": []})]

    provider, _ = serpapi(lambda p: outcomes.pop(0), max_attempts=2)
    provider.backoff_seconds = 1.5
    provider.fetch_offers("BOG", "MIA", "2025-03-10", None, 1, "USD")

    assert sleeps == [1.5]
