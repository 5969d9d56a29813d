"""
Tests for Pydantic models (GeoPoint, Stop, Bus, Route)
"""
import pytest
from pydantic import ValidationError

from models import Bus, BusStatus, GeoPoint, Route, Stop


# ============================================================
# GEOPOINT TESTS
# ============================================================

class TestGeoPoint:

    def test_serializes_as_lon_lat_pair(self):
        assert GeoPoint(lon=77.446, lat=28.628).model_dump() == [77.446, 28.628]

    @pytest.mark.parametrize("raw", [
        [77.446, 28.628],
        (77.446, 28.628),
        {"type": "Point", "coordinates": [77.446, 28.628]},
        {"lon": 77.446, "lat": 28.628},
    ])
    def test_accepts_pair_and_point_shapes(self, raw):
        point = GeoPoint.model_validate(raw)
        assert point.as_tuple() == (77.446, 28.628)

    @pytest.mark.parametrize("raw", [
        [181, 0],
        [0, -91],
        [1, 2, 3],
        [float("nan"), 0],
    ])
    def test_rejects_invalid_coordinates(self, raw):
        with pytest.raises(ValidationError):
            GeoPoint.model_validate(raw)


# ============================================================
# BUS / ROUTE TESTS
# ============================================================

class TestBus:

    def test_defaults(self):
        bus = Bus(bus_number="A-1", current_location=[0, 0])
        assert bus.next_stop_index == 0
        assert bus.passenger_count == 0
        assert bus.status == BusStatus.ON_TIME
        assert bus.recommendation is None
        assert bus.last_updated is not None

    def test_camel_case_aliases(self):
        bus = Bus.model_validate({
            "busNumber": "A-1",
            "currentLocation": [1.0, 2.0],
            "nextStopIndex": 3,
            "passengerCount": 7,
            "status": "At Risk",
        })
        dumped = bus.model_dump(by_alias=True)
        assert dumped["busNumber"] == "A-1"
        assert dumped["currentLocation"] == [1.0, 2.0]
        assert dumped["status"] == BusStatus.AT_RISK

    @pytest.mark.parametrize("field", ["next_stop_index", "passenger_count"])
    def test_counts_never_negative(self, field):
        with pytest.raises(ValidationError):
            Bus(bus_number="A-1", current_location=[0, 0], **{field: -1})

    def test_unknown_status_rejected(self):
        with pytest.raises(ValidationError):
            Bus(bus_number="A-1", current_location=[0, 0], status="Lost")


class TestRoute:

    def test_stop_for_wraps_index(self):
        stops = [Stop(id=f"s{i}", name=f"Stop {i}", location=[i, 0]) for i in range(3)]
        bus = Bus(bus_number="A-1", current_location=[0, 0], next_stop_index=4)
        route = Route(route_name="Wrap", stops=stops, buses=[bus])
        assert route.stop_for(bus).id == "s1"

    def test_stop_ids_generated(self):
        first = Stop(name="One", location=[0, 0])
        second = Stop(name="Two", location=[0, 0])
        assert first.id and second.id and first.id != second.id

    def test_empty_name_rejected(self):
        with pytest.raises(ValidationError):
            Route(route_name="")
