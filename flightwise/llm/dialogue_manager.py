# flightwise/llm/dialogue_manager.py
import json
import re
from datetime import date
from typing import Any, Dict, List, Optional, Protocol

from flightwise.llm.prompts import (
    ACTIVITIES_PROMPT,
    AIRPORT_CODE_PROMPT,
    FLIGHT_OFFERS_PROMPT,
    INTENT_PROMPT,
)
from flightwise.utils.log import get_logger

logger = get_logger(__name__)

NO_OFFERS_TEXT = "No flights available. Would you like to try another date or destination?"

_FENCE_RE = re.compile(r"^```[a-zA-Z]*\s*|\s*```$")
_IATA_RE = re.compile(r"\b[A-Z]{3}\b")


class CompletionClient(Protocol):
    def complete(
        self,
        prompt: str,
        max_output_tokens: int = 800,
        temperature: float = 0.7,
        thinking_budget: int = 0,
    ) -> str:
        ...


def strip_code_fence(text: str) -> str:
    """Remove a surrounding ``` / ```json fence, if any."""
    t = (text or "").strip()
    if t.startswith("```"):
        t = _FENCE_RE.sub("", t).strip()
    return t


class TravelAssistant:
    """
    Every prompt FlightWise sends to the LLM.

    Tuning per call:
    - intent / chat: no thinking, moderate temperature
    - airport code: tiny output, near-zero temperature
    - flight offers: near-zero temperature so the layout stays fixed
    - activities: thinking budget + high temperature, quality over latency
    """

    def __init__(self, llm: CompletionClient):
        self.llm = llm

    def ask(self, prompt: str) -> str:
        return self.llm.complete(prompt)

    def detect_intent(self, message: str, history: str, today: Optional[date] = None) -> str:
        prompt = INTENT_PROMPT.format(
            today=(today or date.today()).isoformat(),
            history=history,
            message=message,
        )
        raw = self.llm.complete(prompt, max_output_tokens=500, temperature=0.4, thinking_budget=0)
        return strip_code_fence(raw)

    def resolve_airport_code(self, city: str) -> str:
        prompt = AIRPORT_CODE_PROMPT.format(city=city)
        raw = self.llm.complete(prompt, max_output_tokens=20, temperature=0.1, thinking_budget=0)
        code = raw.strip().strip(".").upper()
        if len(code) == 3 and code.isalpha():
            return code
        # tolerate chatty answers like "The code is BOG."
        m = _IATA_RE.search(raw)
        return m.group(0) if m else code

    def format_flight_offers(self, offers: List[Dict[str, Any]], search_info: Dict[str, Any]) -> str:
        payload = json.dumps({"search_info": search_info, "offers": offers}, ensure_ascii=False)
        prompt = FLIGHT_OFFERS_PROMPT.format(offers=payload, no_offers=NO_OFFERS_TEXT)
        return self.llm.complete(prompt, max_output_tokens=300, temperature=0.1, thinking_budget=0).strip()

    def recommend_activities(self, city: str) -> str:
        prompt = ACTIVITIES_PROMPT.format(city=city)
        return self.llm.complete(prompt, max_output_tokens=1200, temperature=0.8, thinking_budget=512).strip()
