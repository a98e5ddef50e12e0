from concurrent.futures import ThreadPoolExecutor
from typing import Any, Dict, List, Optional, Tuple

from flightwise.graph.intent import IntentResult
from flightwise.llm.dialogue_manager import TravelAssistant
from flightwise.llm.gemini import LLMError
from flightwise.providers.base import FlightsProvider
from flightwise.utils import airports
from flightwise.utils.log import get_logger

logger = get_logger(__name__)

NO_FLIGHTS_FOUND = (
    "I couldn't find available flights for those dates and cities. "
    "Would you like to try other dates?"
)


# ---------------------------
# Airport codes
# ---------------------------
def resolve_airports(assistant: TravelAssistant, origin: str, destination: str) -> Tuple[str, str]:
    """
    Static table first; the LLM only for legs the table can't answer.
    When both legs need the LLM the two lookups run concurrently, and a
    failed lookup leaves that leg unresolved instead of failing the search.
    """
    codes = {"origin": airports.resolve(origin), "destination": airports.resolve(destination)}
    names = {"origin": origin, "destination": destination}
    pending = [leg for leg, code in codes.items() if airports.needs_resolution(code)]

    if pending:
        with ThreadPoolExecutor(max_workers=len(pending)) as pool:
            futures = {leg: pool.submit(assistant.resolve_airport_code, names[leg]) for leg in pending}
            for leg, fut in futures.items():
                try:
                    code = fut.result()
                except LLMError as e:
                    logger.warning("airport lookup failed for %s=%r: %s", leg, names[leg], e)
                    continue
                if airports.is_iata_code(code):
                    codes[leg] = code
                else:
                    logger.warning("LLM gave no IATA code for %s=%r: %r", leg, names[leg], code)

    logger.info(
        "airport codes: %s -> %s, %s -> %s",
        origin, codes["origin"], destination, codes["destination"],
    )
    return codes["origin"], codes["destination"]


# ---------------------------
# Offer extraction
# ---------------------------
def format_usd(amount: Optional[float]) -> Optional[str]:
    if amount is None:
        return None
    return f"${int(round(amount))}"


def format_cop(amount: Optional[float]) -> Optional[str]:
    """1234567 -> "$1.234.567" (dot thousands separator)."""
    if amount is None:
        return None
    return "$" + f"{int(round(amount)):,}".replace(",", ".")


def format_duration(minutes: Optional[int]) -> Optional[str]:
    if minutes is None:
        return None
    h, m = divmod(int(minutes), 60)
    return f"{h}h{m}m"


def format_stops(stops: int) -> str:
    if stops <= 0:
        return "Direct"
    return "1 stop" if stops == 1 else f"{stops} stops"


def _is_usable_offer(offer: Any) -> bool:
    """Priced offer whose segments, layovers and duration have the expected shape."""
    if not isinstance(offer, dict) or not isinstance(offer.get("price"), (int, float)):
        return False
    segments = offer.get("flights") or []
    if not isinstance(segments, list) or not all(isinstance(s, dict) for s in segments):
        return False
    if segments and not isinstance(segments[0].get("departure_airport") or {}, dict):
        return False
    if not isinstance(offer.get("layovers") or [], list):
        return False
    duration = offer.get("total_duration")
    return duration is None or isinstance(duration, (int, float))


def _currency_offers(result: Dict[str, Any]) -> List[dict]:
    if not result or result.get("error"):
        return []
    data = result.get("data") or {}
    offers = []
    for key in ("best_flights", "other_flights"):
        group = data.get(key) or []
        if isinstance(group, list):
            offers.extend(group)
    usable = [o for o in offers if _is_usable_offer(o)]
    if len(usable) < len(offers):
        logger.warning("skipped %d malformed offers (%s)", len(offers) - len(usable), result.get("currency"))
    return usable


def _offer_key(offer: dict) -> Tuple[str, str]:
    segments = offer.get("flights") or []
    airlines = []
    for seg in segments:
        name = str(seg.get("airline") or "")
        if name and name not in airlines:
            airlines.append(name)
    departure = ""
    if segments:
        departure = str((segments[0].get("departure_airport") or {}).get("time") or "")
    return " / ".join(airlines) or "Unknown airline", departure


def extract_offers(combined: Dict[str, Any], limit: int = 3) -> List[Dict[str, Any]]:
    """
    Cheapest offers with USD and COP prices side by side, pre-rendered for
    the fixed reply layout. Offers are paired across currencies by airline
    and departure time.
    """
    usd = _currency_offers(combined.get("flights_usd") or {})
    cop = _currency_offers(combined.get("flights_cop") or {})
    base, base_currency = (usd, "USD") if usd else (cop, "COP")

    other = usd if base_currency == "COP" else cop
    other_by_key = {}
    for o in other:
        other_by_key.setdefault(_offer_key(o), o)

    out = []
    for offer in sorted(base, key=lambda o: float(o["price"])):
        key = _offer_key(offer)
        twin = other_by_key.get(key)
        twin_price = float(twin["price"]) if twin else None
        price_usd, price_cop = (float(offer["price"]), twin_price) if base_currency == "USD" else (twin_price, float(offer["price"]))

        airline, departure = key
        out.append({
            "airline": airline,
            "price_usd": format_usd(price_usd),
            "price_cop": format_cop(price_cop),
            "departure": departure.split(" ")[-1][:5] if departure else None,
            "duration": format_duration(offer.get("total_duration")),
            "stops": format_stops(len(offer.get("layovers") or [])),
        })
        if len(out) >= limit:
            break
    return out


def google_flights_url(combined: Dict[str, Any]) -> Optional[str]:
    for key in ("flights_usd", "flights_cop"):
        data = (combined.get(key) or {}).get("data") or {}
        url = (data.get("search_metadata") or {}).get("google_flights_url")
        if url:
            return url
    return None


# ---------------------------
# Agent
# ---------------------------
def run_flights_agent(provider: FlightsProvider, assistant: TravelAssistant, intent: IntentResult) -> dict:
    origin_code, dest_code = resolve_airports(assistant, intent.origin, intent.destination)

    results = provider.search_flights(
        origin_code,
        dest_code,
        intent.date,
        intent.return_date,
        intent.adults or 1,
    )

    if results.get("error"):
        logger.info("no flights for %s -> %s on %s", origin_code, dest_code, intent.date)
        return {"reply": NO_FLIGHTS_FOUND, "results": results}

    offers = extract_offers(results)
    reply = assistant.format_flight_offers(offers, results.get("search_info") or {})

    url = google_flights_url(results)
    if url:
        reply += f"\n\n🔗 **[See more options on Google Flights]({url})**"

    return {"reply": reply, "results": results, "offers": offers}
