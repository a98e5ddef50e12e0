from __future__ import annotations

import uuid
from dataclasses import dataclass
from typing import List, Optional

from flightwise.graph.graph import build_graph
from flightwise.llm.dialogue_manager import TravelAssistant
from flightwise.memory.store import ConversationStore, Turn
from flightwise.providers.base import FlightsProvider
from flightwise.utils.log import get_logger

logger = get_logger(__name__)

ERROR_INTENT = "error"
ERROR_REPLY = "Sorry! I had a problem processing your request. Please try again 😊"


def new_session_id() -> str:
    return str(uuid.uuid4())


def resolve_session_id(session_id: Optional[str]) -> str:
    if session_id and session_id.strip():
        return session_id.strip()
    return new_session_id()


@dataclass
class ChatReply:
    session_id: str
    response: str
    intent: str
    is_flight_search: bool

    def to_dict(self) -> dict:
        return {
            "sessionId": self.session_id,
            "response": self.response,
            "intent": self.intent,
            "isFlightSearch": self.is_flight_search,
        }


class ChatOrchestrator:
    """
    One chat turn: history -> classify -> branch -> reply -> history.

    handle_message never raises; any failure becomes an apology tagged
    intent="error" so the chat UI never sees a raw error.
    """

    def __init__(
        self,
        store: ConversationStore,
        assistant: TravelAssistant,
        flights_provider: FlightsProvider,
        history_max_turns: int = 10,
    ):
        self.store = store
        self.assistant = assistant
        self.flights_provider = flights_provider
        self.history_max_turns = history_max_turns
        self.graph = build_graph()

    def handle_message(self, session_id: Optional[str], message: str) -> ChatReply:
        sid = None
        try:
            sid = resolve_session_id(session_id)
            logger.info("chat session=%s message=%r", sid, message)

            # history goes to the LLM without the message being answered
            history = self.store.formatted_history(sid, self.history_max_turns)
            self.store.append(sid, "user", message)

            out = self.graph.invoke(
                {
                    "user_input": message,
                    "history": history,
                    "trace": [],
                },
                config={"configurable": {
                    "assistant": self.assistant,
                    "flights_provider": self.flights_provider,
                }},
            )

            reply = out.get("reply") or ""
            intent = out["intent"].intent
            self.store.append(sid, "assistant", reply)
            logger.debug("chat session=%s trace=%s", sid, out.get("trace"))

            return ChatReply(
                session_id=sid,
                response=reply,
                intent=intent,
                is_flight_search=bool(out.get("is_flight_search")),
            )
        except Exception:
            logger.exception("chat failed session=%s", sid)
            return ChatReply(
                session_id=sid or new_session_id(),
                response=ERROR_REPLY,
                intent=ERROR_INTENT,
                is_flight_search=False,
            )

    def history(self, session_id: str) -> List[Turn]:
        return self.store.turns(session_id.strip())

    def clear_session(self, session_id: str) -> None:
        self.store.clear(session_id.strip())
