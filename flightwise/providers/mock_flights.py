from typing import Any, Dict, Optional

from .base import FlightsProvider

# rough USD -> COP rate for fake prices
COP_PER_USD = 4000

AIRLINES = ["Avianca", "LATAM", "Copa Airlines", "JetSMART"]


class MockFlightsProvider(FlightsProvider):
    """Deterministic SerpAPI-shaped results for local runs and tests."""

    def fetch_offers(
        self,
        origin: str,
        destination: str,
        date_iso: str,
        return_date: Optional[str],
        adults: int,
        currency: str,
    ) -> Dict[str, Any]:
        flights = []
        for i, airline in enumerate(AIRLINES):
            usd = (180 + 45 * i) * max(1, adults)
            price = usd if currency == "USD" else usd * COP_PER_USD
            stops = i % 3
            flights.append({
                "flights": [
                    {
                        "airline": airline,
                        "departure_airport": {"id": origin, "time": f"{date_iso} {6 + 3 * i:02d}:15"},
                        "arrival_airport": {"id": destination},
                    }
                ],
                "layovers": [{"id": "PTY"}] * stops,
                "total_duration": 190 + 55 * i,
                "price": price,
            })

        return {
            "search_metadata": {
                "google_flights_url": (
                    f"https://www.google.com/travel/flights?hl=es&gl=co&curr={currency}"
                    f"&q=Flights+from+{origin}+to+{destination}+on+{date_iso}"
                ),
            },
            "best_flights": flights[:2],
            "other_flights": flights[2:],
        }
