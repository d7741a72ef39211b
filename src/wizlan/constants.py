from __future__ import annotations

BULB_PORT = 38899
LISTEN_PORT = 38900

DEFAULT_RESPONSE_TIMEOUT = 2.0
DEFAULT_DISCOVER_WAIT = 1.0

SCENES: dict[str, int] = {
    "Ocean": 1,
    "Romance": 2,
    "Sunset": 3,
    "Party": 4,
    "Fireplace": 5,
    "Cozy": 6,
    "Forest": 7,
    "Pastel Colors": 8,
    "Wake Up": 9,
    "Bedtime": 10,
    "Warm White": 11,
    "Daylight": 12,
    "Cool White": 13,
    "Night Light": 14,
    "Focus": 15,
    "Relax": 16,
    "True Colors": 17,
    "TV Time": 18,
    "Plant Growth": 19,
    "Spring": 20,
    "Summer": 21,
    "Fall": 22,
    "Deep Dive": 23,
    "Jungle": 24,
    "Mojito": 25,
    "Club": 26,
    "Christmas": 27,
    "Halloween": 28,
    "Candlelight": 29,
    "Golden White": 30,
    "Pulse": 31,
    "Steampunk": 32,
}

ADJUSTABLE_SPEED_SCENES = frozenset(
    {1, 2, 3, 4, 5, 6, 7, 8, 20, 21, 22, 23, 24, 25, 26, 27, 29, 30, 31, 32}
)

# Every scene except Night Light (14)
ADJUSTABLE_DIMMING_SCENES = frozenset(set(range(1, 33)) - {14})
