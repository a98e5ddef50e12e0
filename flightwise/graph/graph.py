from langchain_core.runnables import RunnableConfig
from langgraph.graph import StateGraph, END

from flightwise.agents.activities import run_activities_agent
from flightwise.agents.flights import run_flights_agent
from flightwise.graph.intent import ASK_ACTIVITIES, ASK_FLIGHTS, CHAT, parse_intent
from flightwise.graph.state import ChatState

DEFAULT_REPLIES = {
    ASK_FLIGHTS: "To search for your flight I need the origin, destination and date. Could you tell me? 😊",
    ASK_ACTIVITIES: "Which city would you like to know what to do in? 😊",
    CHAT: "Hi! I'm FlightWise, your travel assistant. How can I help you? 😊",
}


def trace(node: str, detail: dict) -> dict:
    return {"trace": [{"node": node, "detail": detail}]}


# ---------------------------
# Classifier
# ---------------------------
def node_classify(state: ChatState, config: RunnableConfig) -> dict:
    """
    Single LLM call that classifies the message and, for every branch that
    needs no external data, already carries the final reply.
    """
    assistant = config["configurable"]["assistant"]
    raw = assistant.detect_intent(state["user_input"], state.get("history", ""))
    intent = parse_intent(raw)
    return {
        "intent": intent,
        **trace("classify", {"intent": intent.intent, "missing": intent.missing, "city": intent.city}),
    }


def node_route(state: ChatState) -> str:
    """
    Branch table. Only complete flight requests and activities for a known
    city need a second LLM call; everything else answers from the
    classifier's embedded response.
    """
    intent = state["intent"]
    if intent.intent == ASK_FLIGHTS:
        return "clarify" if intent.missing else "flights"
    if intent.intent == ASK_ACTIVITIES and intent.city:
        return "activities"
    return "clarify"


# ---------------------------
# Reply nodes
# ---------------------------
def node_clarify(state: ChatState) -> dict:
    intent = state["intent"]
    reply = intent.response or DEFAULT_REPLIES.get(intent.intent, DEFAULT_REPLIES[CHAT])
    return {
        "reply": reply,
        "is_flight_search": False,
        **trace("clarify", {"intent": intent.intent, "embedded": bool(intent.response)}),
    }


def node_flights(state: ChatState, config: RunnableConfig) -> dict:
    cfg = config["configurable"]
    data = run_flights_agent(cfg["flights_provider"], cfg["assistant"], state["intent"])
    results = data["results"]
    return {
        "reply": data["reply"],
        "is_flight_search": True,
        **trace("flights", {
            "search_info": results.get("search_info"),
            "error": results.get("error"),
            "offers": len(data.get("offers") or []),
        }),
    }


def node_activities(state: ChatState, config: RunnableConfig) -> dict:
    data = run_activities_agent(config["configurable"]["assistant"], state["intent"].city)
    return {
        "reply": data["reply"],
        "is_flight_search": False,
        **trace("activities", {"city": data["city"]}),
    }


# ---------------------------
# Build graph
# ---------------------------
def build_graph():
    g = StateGraph(ChatState)

    g.add_node("classify", node_classify)
    g.add_node("clarify", node_clarify)
    g.add_node("flights", node_flights)
    g.add_node("activities", node_activities)

    g.set_entry_point("classify")

    g.add_conditional_edges("classify", node_route, {
        "clarify": "clarify",
        "flights": "flights",
        "activities": "activities",
    })

    g.add_edge("clarify", END)
    g.add_edge("flights", END)
    g.add_edge("activities", END)

    return g.compile()
