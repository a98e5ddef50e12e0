import operator
from typing import Annotated, TypedDict

from flightwise.graph.intent import IntentResult


class ChatState(TypedDict, total=False):
    user_input: str
    history: str                    # formatted, excludes user_input

    # classifier output
    intent: IntentResult

    # outputs
    reply: str
    is_flight_search: bool
    trace: Annotated[list[dict], operator.add]
