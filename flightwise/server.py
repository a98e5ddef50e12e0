from typing import Optional

from flask import Flask, request, jsonify
from dotenv import load_dotenv

from flightwise.config import Settings
from flightwise.db import init_db, make_engine, make_session_factory
from flightwise.graph.orchestrator import ChatOrchestrator
from flightwise.llm.dialogue_manager import TravelAssistant
from flightwise.llm.gemini import GeminiClient, LLMError
from flightwise.memory.sql_store import SqlConversationStore
from flightwise.memory.store import ConversationStore, InMemoryConversationStore
from flightwise.providers.base import FlightsProvider
from flightwise.providers.mock_flights import MockFlightsProvider
from flightwise.providers.serpapi_flights import SerpApiFlightsProvider
from flightwise.utils import airports
from flightwise.utils.log import configure_logging, get_logger

load_dotenv()

logger = get_logger(__name__)


def build_store(settings: Settings) -> ConversationStore:
    if settings.conversation_store == "sql":
        if not settings.database_url:
            raise RuntimeError("DATABASE_URL is required when CONVERSATION_STORE=sql")
        engine = make_engine(settings.database_url)
        init_db(engine)
        return SqlConversationStore(make_session_factory(engine))
    return InMemoryConversationStore()


def build_flights_provider(settings: Settings) -> FlightsProvider:
    if settings.flights_provider == "mock":
        return MockFlightsProvider()
    return SerpApiFlightsProvider.from_settings(settings)


def build_orchestrator(settings: Settings) -> ChatOrchestrator:
    return ChatOrchestrator(
        store=build_store(settings),
        assistant=TravelAssistant(GeminiClient.from_settings(settings)),
        flights_provider=build_flights_provider(settings),
        history_max_turns=settings.history_max_turns,
    )


def create_app(orchestrator: Optional[ChatOrchestrator] = None, settings: Optional[Settings] = None) -> Flask:
    settings = settings or Settings.from_env()
    configure_logging(settings.log_level)

    app = Flask(__name__)
    chat = orchestrator or build_orchestrator(settings)

    @app.get("/health")
    def health():
        return jsonify({"ok": True})

    @app.post("/api/chat")
    def post_chat():
        body = request.get_json(force=True, silent=True)
        if not isinstance(body, dict):
            body = {}
        message = body.get("message")
        if not isinstance(message, str) or not message.strip():
            return jsonify({"error": "message is required"}), 400

        session_id = body.get("sessionId")
        if not isinstance(session_id, str):
            session_id = None

        reply = chat.handle_message(session_id, message)
        return jsonify(reply.to_dict())

    @app.delete("/api/chat/<session_id>")
    def delete_chat(session_id: str):
        chat.clear_session(session_id)
        return "", 204

    @app.get("/api/chat/<session_id>/history")
    def get_history(session_id: str):
        turns = chat.history(session_id)
        return jsonify({
            "sessionId": session_id.strip(),
            "messages": [t.to_dict() for t in turns],
        })

    @app.post("/api/gemini")
    def ask_gemini():
        body = request.get_json(force=True, silent=True)
        if not isinstance(body, dict):
            body = {}
        prompt = body.get("prompt")
        if not isinstance(prompt, str) or not prompt.strip():
            return jsonify({"error": "prompt is required"}), 400
        try:
            text = chat.assistant.ask(prompt)
        except LLMError as e:
            logger.warning("gemini passthrough failed: %s", e)
            return jsonify({"error": str(e)}), 502
        return jsonify({"responseText": text})

    @app.get("/api/test/flights")
    def test_flights():
        results = chat.flights_provider.search_flights(
            request.args.get("origin", "BOG"),
            request.args.get("destination", "MDE"),
            request.args.get("date", ""),
            request.args.get("returnDate") or None,
            request.args.get("adults", 1, type=int) or 1,
        )
        return jsonify(results)

    @app.get("/api/test/airport-code")
    def test_airport_code():
        city = request.args.get("city", "")
        return jsonify({"city": city, "code": airports.resolve(city)})

    return app


app = create_app()


if __name__ == "__main__":
    app.run(host="0.0.0.0", port=5000, debug=True)
