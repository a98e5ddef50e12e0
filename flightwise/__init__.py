"""
FlightWise: conversational travel assistant backend.

- server.py       : Flask app and HTTP API
- graph/          : intent parsing + LangGraph chat orchestration
- llm/            : Gemini client and prompts
- providers/      : flight data (SerpAPI Google Flights, mock)
- memory/         : conversation stores
"""

__version__ = "0.1.0"
