from sqlalchemy import create_engine, func, select
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from db import RouteRepository, crud, models
from models import BusStatus, GeoPoint, Route, Stop
from services.seed_data import build_seed_routes


def _make_session_factory():
    engine = create_engine(
        "sqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    models.Base.metadata.create_all(bind=engine)
    return sessionmaker(bind=engine, autoflush=False, autocommit=False)


def test_replace_all_and_load_round_trip():
    Session = _make_session_factory()
    db = Session()
    try:
        seed = build_seed_routes()
        crud.replace_all_routes(db, seed)

        loaded = {r.route_name: r for r in crud.load_routes(db)}
        assert set(loaded) == {"Route 42 - City Circle", "Route 7 - Riverside Loop"}

        city = loaded["Route 42 - City Circle"]
        assert city.ideal_headway_minutes == 8
        assert [s.id for s in city.stops] == [s.id for s in seed[0].stops]
        assert [b.bus_number for b in city.buses] == ["A-101", "A-102", "A-103"]
        assert city.buses[1].next_stop_index == 2
        assert city.buses[1].current_location == seed[0].stops[2].location
        assert city.buses[1].status == BusStatus.ON_TIME
    finally:
        db.close()


def test_replace_all_discards_previous_fleet():
    Session = _make_session_factory()
    db = Session()
    try:
        crud.replace_all_routes(db, build_seed_routes())
        crud.replace_all_routes(db, build_seed_routes()[:1])

        assert [r.route_name for r in crud.load_routes(db)] == ["Route 42 - City Circle"]
        assert db.scalar(select(func.count()).select_from(models.BusModel)) == 3
        assert db.scalar(select(func.count()).select_from(models.BusStopModel)) == 5
    finally:
        db.close()


def test_save_route_persists_mutated_buses():
    Session = _make_session_factory()
    db = Session()
    try:
        seed = build_seed_routes()
        crud.replace_all_routes(db, seed)

        route = seed[0]
        bus = route.buses[0]
        bus.current_location = GeoPoint(lon=77.447, lat=28.629)
        bus.next_stop_index = 1
        bus.passenger_count = 21
        bus.status = BusStatus.AT_RISK
        bus.recommendation = "Risk of bunching. HOLD at next stop for 45s."
        crud.save_route(db, route)

        reloaded = next(r for r in crud.load_routes(db) if r.route_name == route.route_name)
        saved = reloaded.buses[0]
        assert saved.current_location.as_tuple() == (77.447, 28.629)
        assert saved.next_stop_index == 1
        assert saved.passenger_count == 21
        assert saved.status == BusStatus.AT_RISK
        assert saved.recommendation == "Risk of bunching. HOLD at next stop for 45s."
        assert db.scalar(select(func.count()).select_from(models.BusModel)) == 5
    finally:
        db.close()


def test_find_route_names_near_prefilters_by_box():
    Session = _make_session_factory()
    db = Session()
    try:
        crud.replace_all_routes(db, build_seed_routes())

        both = crud.find_route_names_near(db, GeoPoint(lon=77.446, lat=28.628), 200)
        assert sorted(both) == ["Route 42 - City Circle", "Route 7 - Riverside Loop"]

        north = crud.find_route_names_near(db, GeoPoint(lon=77.448, lat=28.645), 200)
        assert north == ["Route 42 - City Circle"]

        assert crud.find_route_names_near(db, GeoPoint(lon=0.0, lat=0.0), 2000) == []
    finally:
        db.close()


def test_repository_uses_fresh_sessions():
    repo = RouteRepository(_make_session_factory())
    seed = build_seed_routes()

    repo.replace_all(seed)
    seed[1].buses[0].passenger_count = 30
    repo.save_route(seed[1])

    loaded = {r.route_name: r for r in repo.load_routes()}
    assert loaded["Route 7 - Riverside Loop"].buses[0].passenger_count == 30
    assert repo.find_route_names_near(GeoPoint(lon=77.462, lat=28.617), 100) == ["Route 7 - Riverside Loop"]


def test_find_route_names_near_wraps_antimeridian():
    Session = _make_session_factory()
    db = Session()
    try:
        crud.replace_all_routes(db, [
            Route(
                route_name="Date Line",
                stops=[Stop(id="west", name="West Wharf", location=GeoPoint(lon=-179.995, lat=60.0))],
            ),
        ])

        assert crud.find_route_names_near(db, GeoPoint(lon=179.995, lat=60.0), 2000) == ["Date Line"]
        assert crud.find_route_names_near(db, GeoPoint(lon=179.0, lat=60.0), 2000) == []
    finally:
        db.close()
