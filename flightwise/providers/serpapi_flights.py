from typing import Any, Dict, List, Optional, Tuple

import requests

from flightwise.config import Settings
from flightwise.providers.base import FlightsProvider, FlightsProviderError
from flightwise.utils.log import get_logger
from flightwise.utils.retry import bounded_retry

logger = get_logger(__name__)

ROUND_TRIP = "1"
ONE_WAY = "2"


class SerpApiUnavailableError(FlightsProviderError):
    """429 / 5xx from SerpAPI."""


def _is_transient(exc: BaseException) -> bool:
    return isinstance(exc, (SerpApiUnavailableError, requests.Timeout, requests.ConnectionError))


class SerpApiFlightsProvider(FlightsProvider):
    """
    Google Flights results through SerpAPI (engine=google_flights).

    One query per currency; FlightsProvider.search_flights runs them in
    parallel and merges them.
    """

    def __init__(
        self,
        api_key: str,
        base_url: str = Settings.serpapi_base_url,
        language: str = Settings.serpapi_language,
        timeout: float = Settings.flights_timeout_seconds,
        max_attempts: int = Settings.flights_max_attempts,
        backoff_seconds: float = Settings.flights_backoff_seconds,
        session: Optional[requests.Session] = None,
    ):
        self.api_key = api_key
        self.base_url = base_url
        self.language = language
        self.timeout = timeout
        self.max_attempts = max_attempts
        self.backoff_seconds = backoff_seconds
        self.http = session or requests.Session()

    @classmethod
    def from_settings(cls, settings: Settings) -> "SerpApiFlightsProvider":
        return cls(
            api_key=settings.serpapi_api_key,
            base_url=settings.serpapi_base_url,
            language=settings.serpapi_language,
            timeout=settings.flights_timeout_seconds,
            max_attempts=settings.flights_max_attempts,
            backoff_seconds=settings.flights_backoff_seconds,
        )

    def build_params(
        self,
        origin: str,
        destination: str,
        date_iso: str,
        return_date: Optional[str],
        adults: int,
        currency: str,
    ) -> List[Tuple[str, Any]]:
        params: List[Tuple[str, Any]] = [
            ("engine", "google_flights"),
            ("departure_id", origin),
            ("arrival_id", destination),
            ("adults", adults),
            ("currency", currency),
            ("hl", self.language),
            ("api_key", self.api_key),
        ]
        if date_iso:
            params.append(("outbound_date", date_iso))
        if return_date:
            params.append(("return_date", return_date))
            params.append(("type", ROUND_TRIP))
        else:
            params.append(("type", ONE_WAY))
        return params

    def fetch_offers(
        self,
        origin: str,
        destination: str,
        date_iso: str,
        return_date: Optional[str],
        adults: int,
        currency: str,
    ) -> Dict[str, Any]:
        params = self.build_params(origin, destination, date_iso, return_date, adults, currency)
        logger.info(
            "searching flights (%s): %s -> %s on %s, %s",
            currency, origin, destination, date_iso, "round trip" if return_date else "one way",
        )
        retrying = bounded_retry(self.max_attempts, self.backoff_seconds, _is_transient)
        return retrying(self._get, params)

    def _get(self, params: List[Tuple[str, Any]]) -> Dict[str, Any]:
        r = self.http.get(self.base_url, params=params, timeout=self.timeout)
        if r.status_code == 429 or r.status_code >= 500:
            raise SerpApiUnavailableError(f"SerpAPI error {r.status_code}")
        if r.status_code >= 400:
            raise FlightsProviderError(f"SerpAPI error {r.status_code}: {r.text[:200]}")

        data = r.json()
        if isinstance(data, dict) and data.get("error"):
            # SerpAPI reports "no results" and bad airports as 200 + error
            raise FlightsProviderError(str(data["error"]))
        return data
