from flightwise.llm.dialogue_manager import TravelAssistant


def run_activities_agent(assistant: TravelAssistant, city: str) -> dict:
    reply = assistant.recommend_activities(city.strip())
    return {"reply": reply, "city": city.strip()}
