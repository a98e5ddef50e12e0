import json
import re
import threading
import time

import pytest

from flightwise.graph.orchestrator import ChatOrchestrator
from flightwise.llm.dialogue_manager import TravelAssistant
from flightwise.memory.store import InMemoryConversationStore
from flightwise.providers.base import FlightsProviderError
from flightwise.providers.mock_flights import MockFlightsProvider

_AIRPORT_RE = re.compile(r"^IATA airport code for (.+?)\. Reply")


def prompt_kind(prompt: str) -> str:
    if prompt.startswith("IATA airport code"):
        return "airport"
    if prompt.startswith("Take the flight offers"):
        return "flights"
    if prompt.startswith("You are FlightWise, a travel guide"):
        return "activities"
    if prompt.startswith("You are FlightWise, a friendly travel assistant"):
        return "intent"
    return "ask"


class FakeLLM:
    """
    Scripted stand-in for GeminiClient.complete, answering by prompt kind.

    A scripted answer can be a string, a list (consumed in order), an
    exception instance (raised), or a callable taking the prompt.
    """

    def __init__(self, intent="", airports=None, flights="", activities="", ask="pong", airport_delay=0.0):
        self.script = {
            "intent": intent,
            "flights": flights,
            "activities": activities,
            "ask": ask,
        }
        self.airports = airports or {}
        self.airport_delay = airport_delay
        self.calls = []
        self._lock = threading.Lock()

    def complete(self, prompt, max_output_tokens=800, temperature=0.7, thinking_budget=0):
        kind = prompt_kind(prompt)
        with self._lock:
            self.calls.append({
                "kind": kind,
                "prompt": prompt,
                "max_output_tokens": max_output_tokens,
                "temperature": temperature,
                "thinking_budget": thinking_budget,
            })

        if kind == "airport":
            city = _AIRPORT_RE.match(prompt).group(1)
            if self.airport_delay:
                time.sleep(self.airport_delay)
            answer = self.airports.get(city, "???")
        else:
            with self._lock:
                answer = self.script[kind]
                if isinstance(answer, list):
                    answer = answer.pop(0)

        if isinstance(answer, Exception):
            raise answer
        if callable(answer):
            return answer(prompt)
        return answer

    def kinds(self):
        return [c["kind"] for c in self.calls]

    def calls_of(self, kind):
        return [c for c in self.calls if c["kind"] == kind]


class RecordingFlightsProvider(MockFlightsProvider):
    """Mock results, with per-currency failures and a call log."""

    def __init__(self, fail=(), delay=0.0):
        self.fail = set(fail)
        self.delay = delay
        self.calls = []
        self._lock = threading.Lock()

    def fetch_offers(self, origin, destination, date_iso, return_date, adults, currency):
        with self._lock:
            self.calls.append((origin, destination, date_iso, return_date, adults, currency))
        if self.delay:
            time.sleep(self.delay)
        if currency in self.fail:
            raise FlightsProviderError(f"{currency} unavailable")
        return super().fetch_offers(origin, destination, date_iso, return_date, adults, currency)

    def searches(self):
        """Distinct searches, ignoring the currency split."""
        seen = []
        for call in self.calls:
            key = call[:5]
            if key not in seen:
                seen.append(key)
        return seen


def intent_json(**fields) -> str:
    return json.dumps(fields, ensure_ascii=False)


@pytest.fixture
def store():
    return InMemoryConversationStore()


@pytest.fixture
def provider():
    return RecordingFlightsProvider()


@pytest.fixture
def make_orchestrator(store, provider):
    def _make(llm, flights_provider=None):
        return ChatOrchestrator(
            store=store,
            assistant=TravelAssistant(llm),
            flights_provider=flights_provider or provider,
        )
    return _make
