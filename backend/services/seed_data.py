"""
Fixture routes used by the reset/seed operation.

The two loops share Central Station, so a stop appears under one identity
in both routes.
"""

from typing import List

from models import Bus, GeoPoint, Route, Stop

CITY_CIRCLE_STOPS = [
    ("central-station", "Central Station", (77.446, 28.628)),
    ("city-hall", "City Hall", (77.45, 28.63)),
    ("midtown-library", "Midtown Library", (77.435, 28.635)),
    ("uptown-park", "Uptown Park", (77.44, 28.64)),
    ("north-bridge", "North Bridge", (77.448, 28.645)),
]

RIVERSIDE_STOPS = [
    ("central-station", "Central Station", (77.446, 28.628)),
    ("river-market", "River Market", (77.455, 28.622)),
    ("old-mill", "Old Mill", (77.462, 28.617)),
    ("east-depot", "East Depot", (77.458, 28.61)),
]


def _stops(rows) -> List[Stop]:
    return [Stop(id=stop_id, name=name, location=GeoPoint(lon=lon, lat=lat)) for stop_id, name, (lon, lat) in rows]


def _bus_at(stops: List[Stop], bus_number: str, stop_index: int, passengers: int) -> Bus:
    return Bus(
        bus_number=bus_number,
        current_location=stops[stop_index].location.model_copy(),
        next_stop_index=stop_index,
        passenger_count=passengers,
    )


def build_seed_routes() -> List[Route]:
    """Fresh fixture routes (new objects on every call)."""
    city_stops = _stops(CITY_CIRCLE_STOPS)
    riverside_stops = _stops(RIVERSIDE_STOPS)
    return [
        Route(
            route_name="Route 42 - City Circle",
            ideal_headway_minutes=8,
            stops=city_stops,
            buses=[
                _bus_at(city_stops, "A-101", 0, 15),
                _bus_at(city_stops, "A-102", 2, 25),
                _bus_at(city_stops, "A-103", 4, 10),
            ],
        ),
        Route(
            route_name="Route 7 - Riverside Loop",
            ideal_headway_minutes=12,
            stops=riverside_stops,
            buses=[
                _bus_at(riverside_stops, "R-201", 0, 8),
                _bus_at(riverside_stops, "R-202", 2, 12),
            ],
        ),
    ]
