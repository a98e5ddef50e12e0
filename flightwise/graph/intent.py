import json
import re
from dataclasses import dataclass, field
from typing import Any, List, Optional

from dateutil import parser as dtparser

from flightwise.utils.log import get_logger

logger = get_logger(__name__)

ASK_FLIGHTS = "ask_flights"
ASK_ACTIVITIES = "ask_activities"
CHAT = "chat"
INTENTS = {ASK_FLIGHTS, ASK_ACTIVITIES, CHAT}

FALLBACK_GREETING = "Hi! I'm FlightWise. How can I help you? 😊"

REQUIRED_FLIGHT_FIELDS = ("origin", "destination", "date")


@dataclass
class IntentResult:
    intent: str = CHAT
    origin: str = ""
    destination: str = ""
    date: str = ""
    return_date: Optional[str] = None
    adults: int = 1
    missing: List[str] = field(default_factory=list)
    city: str = ""
    response: str = ""

    @classmethod
    def fallback(cls) -> "IntentResult":
        return cls(intent=CHAT, response=FALLBACK_GREETING)


def parse_date_maybe(text: Optional[str]) -> Optional[str]:
    if not text or not str(text).strip():
        return None
    try:
        return dtparser.parse(str(text).strip()).date().isoformat()
    except (ValueError, OverflowError):
        return None


def coerce_adults(value: Any) -> int:
    # the model sometimes sends "2", 0 or null
    try:
        n = int(value)
    except (TypeError, ValueError):
        return 1
    return n if n > 0 else 1


def _text(value: Any) -> str:
    if value is None:
        return ""
    return str(value).strip()


def _safe_json_parse(txt: str) -> Optional[dict]:
    try:
        data = json.loads(txt)
    except ValueError:
        m = re.search(r"\{.*\}", txt or "", re.DOTALL)
        if not m:
            return None
        try:
            data = json.loads(m.group(0))
        except ValueError:
            return None
    return data if isinstance(data, dict) else None


def parse_intent(raw: str) -> IntentResult:
    """
    Turn the classifier's JSON into an IntentResult.
    Malformed output never raises; it becomes a plain chat greeting.
    """
    data = _safe_json_parse(raw)
    if data is None:
        logger.warning("could not parse intent JSON: %.200s", raw)
        return IntentResult.fallback()

    # keys are matched case-insensitively
    data = {str(k).lower(): v for k, v in data.items()}

    intent = _text(data.get("intent")).lower()
    if intent not in INTENTS:
        intent = CHAT

    result = IntentResult(
        intent=intent,
        response=_text(data.get("response")),
    )

    if intent == ASK_ACTIVITIES:
        result.city = _text(data.get("city"))
        return result

    if intent != ASK_FLIGHTS:
        return result

    result.origin = _text(data.get("origin"))
    result.destination = _text(data.get("destination"))
    result.adults = coerce_adults(data.get("adults"))

    missing = data.get("missing") or []
    if not isinstance(missing, list):
        missing = [missing]
    missing = [_text(m) for m in missing if _text(m)]

    for name in REQUIRED_FLIGHT_FIELDS:
        if not _text(data.get(name)) and name not in missing:
            missing.append(name)

    raw_date = _text(data.get("date"))
    if raw_date:
        result.date = parse_date_maybe(raw_date) or ""
        if not result.date and "date" not in missing:
            missing.append("date")

    raw_return = _text(data.get("returndate"))
    if raw_return:
        result.return_date = parse_date_maybe(raw_return)
        if result.return_date is None and "returnDate" not in missing:
            missing.append("returnDate")

    result.missing = missing
    return result
