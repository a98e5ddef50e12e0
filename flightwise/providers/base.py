from abc import ABC, abstractmethod
from concurrent.futures import ThreadPoolExecutor
from typing import Any, Dict, Optional

import requests

from flightwise.utils.log import get_logger

logger = get_logger(__name__)

CURRENCIES = ("USD", "COP")


class FlightsProviderError(Exception):
    pass


def currency_error(currency: str, message: str) -> Dict[str, Any]:
    return {"currency": currency, "error": True, "message": message}


def combine_currency_results(usd: Dict[str, Any], cop: Dict[str, Any], search_info: Dict[str, Any]) -> Dict[str, Any]:
    """
    Merge both per-currency results. Only a failure on BOTH sides marks the
    whole search as an error.
    """
    return {
        "flights_usd": usd,
        "flights_cop": cop,
        "search_info": search_info,
        "error": bool(usd.get("error")) and bool(cop.get("error")),
    }


class FlightsProvider(ABC):
    @abstractmethod
    def fetch_offers(
        self,
        origin: str,
        destination: str,
        date_iso: str,
        return_date: Optional[str],
        adults: int,
        currency: str,
    ) -> Dict[str, Any]:
        """Raw provider payload for one currency. May raise."""

    def search_flights(
        self,
        origin: str,
        destination: str,
        date_iso: str,
        return_date: Optional[str] = None,
        adults: int = 1,
    ) -> Dict[str, Any]:
        """
        Query every currency in parallel and merge. Never raises for provider
        failures: each failing currency becomes an error marker instead.
        """
        with ThreadPoolExecutor(max_workers=len(CURRENCIES)) as pool:
            futures = {
                cur: pool.submit(self._search_in_currency, origin, destination, date_iso, return_date, adults, cur)
                for cur in CURRENCIES
            }
            results = {cur: f.result() for cur, f in futures.items()}

        search_info = {
            "origin": origin,
            "destination": destination,
            "outbound_date": date_iso,
            "return_date": return_date,
            "adults": adults,
        }
        return combine_currency_results(results["USD"], results["COP"], search_info)

    def _search_in_currency(
        self,
        origin: str,
        destination: str,
        date_iso: str,
        return_date: Optional[str],
        adults: int,
        currency: str,
    ) -> Dict[str, Any]:
        try:
            data = self.fetch_offers(origin, destination, date_iso, return_date, adults, currency)
        except (requests.RequestException, ValueError, FlightsProviderError) as e:
            logger.warning("flight search failed currency=%s %s->%s: %s", currency, origin, destination, e)
            return currency_error(currency, str(e))

        if not isinstance(data, dict):
            logger.warning("flight search returned %s for currency=%s", type(data).__name__, currency)
            return currency_error(currency, "malformed payload")
        return {"currency": currency, "data": data}
