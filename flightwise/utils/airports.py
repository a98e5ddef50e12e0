"""
Static city -> IATA airport code lookup.

Anything the table can't answer is returned as-is so the caller can ask
the LLM instead (see needs_resolution).
"""

# Iteration order matters: partial matches return the first hit.
CITY_TO_AIRPORT = {
    # Colombia
    "bogota": "BOG",
    "bogotá": "BOG",
    "medellin": "MDE",
    "medellín": "MDE",
    "cali": "CLO",
    "cartagena": "CTG",
    "barranquilla": "BAQ",
    "bucaramanga": "BGA",
    "pereira": "PEI",
    "santa marta": "SMR",
    "cucuta": "CUC",
    "cúcuta": "CUC",

    # United States
    "new york": "JFK",
    "nueva york": "JFK",
    "los angeles": "LAX",
    "chicago": "ORD",
    "miami": "MIA",
    "houston": "IAH",
    "san francisco": "SFO",
    "washington": "IAD",
    "boston": "BOS",
    "atlanta": "ATL",
    "dallas": "DFW",
    "orlando": "MCO",
    "seattle": "SEA",
    "las vegas": "LAS",

    # Mexico
    "mexico": "MEX",
    "méxico": "MEX",
    "ciudad de mexico": "MEX",
    "guadalajara": "GDL",
    "cancun": "CUN",
    "cancún": "CUN",
    "monterrey": "MTY",

    # Europe
    "madrid": "MAD",
    "barcelona": "BCN",
    "paris": "CDG",
    "parís": "CDG",
    "london": "LHR",
    "londres": "LHR",
    "rome": "FCO",
    "roma": "FCO",
    "amsterdam": "AMS",
    "berlin": "BER",
    "berlín": "BER",
    "lisbon": "LIS",
    "lisboa": "LIS",
    "milan": "MXP",
    "milán": "MXP",
    "frankfurt": "FRA",
    "zurich": "ZRH",

    # Latin America
    "buenos aires": "EZE",
    "santiago": "SCL",
    "lima": "LIM",
    "sao paulo": "GRU",
    "são paulo": "GRU",
    "rio de janeiro": "GIG",
    "quito": "UIO",
    "panama": "PTY",
    "panamá": "PTY",
    "san jose": "SJO",
    "san josé": "SJO",

    # Asia
    "tokyo": "NRT",
    "tokio": "NRT",
    "beijing": "PEK",
    "pekin": "PEK",
    "shanghai": "PVG",
    "dubai": "DXB",
    "singapore": "SIN",
    "singapur": "SIN",
    "hong kong": "HKG",
    "bangkok": "BKK",
    "seoul": "ICN",
    "seúl": "ICN",

    # Oceania
    "sydney": "SYD",
    "sídney": "SYD",
    "melbourne": "MEL",
    "auckland": "AKL",
}


def is_iata_code(code: str) -> bool:
    return len(code) == 3 and code.isalpha() and code == code.upper()


def resolve(name: str) -> str:
    if not name or not name.strip():
        return ""

    # already an IATA code
    if is_iata_code(name):
        return name

    key = name.strip().lower()
    if key in CITY_TO_AIRPORT:
        return CITY_TO_AIRPORT[key]

    for city, code in CITY_TO_AIRPORT.items():
        if city in key or key in city:
            return code

    return name


def needs_resolution(code: str) -> bool:
    """True when resolve() gave back free text rather than a code."""
    return len(code) != 3 or code != code.upper()
