"""
SQLAlchemy models for the bus system database.

These models define the database schema for:
- Bus routes
- Stops (with indexed lon/lat for proximity prefiltering)
- Buses and their simulated state
"""

import uuid
from datetime import datetime

from sqlalchemy import (
    Column, String, Integer, Float, DateTime, ForeignKey, Text, Index
)
from sqlalchemy.orm import declarative_base, relationship

Base = declarative_base()


class BusRouteModel(Base):
    """Ruta de autobús circular"""
    __tablename__ = "bus_routes"

    route_name = Column(String, primary_key=True)
    ideal_headway_minutes = Column(Float, default=10)
    created_at = Column(DateTime, default=datetime.utcnow)

    # Relaciones
    stops = relationship(
        "BusStopModel",
        back_populates="route",
        cascade="all, delete-orphan",
        order_by="BusStopModel.position",
    )
    buses = relationship(
        "BusModel",
        back_populates="route",
        cascade="all, delete-orphan",
        order_by="BusModel.position",
    )

    def __repr__(self):
        return f"<BusRouteModel(route_name='{self.route_name}', stops={len(self.stops)})>"


class BusStopModel(Base):
    """Parada de una ruta"""
    __tablename__ = "bus_stops"

    pk = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    stop_id = Column(String, nullable=False)
    route_name = Column(String, ForeignKey("bus_routes.route_name", ondelete="CASCADE"), nullable=False)
    position = Column(Integer, nullable=False)
    name = Column(String, nullable=False)
    lon = Column(Float, nullable=False)
    lat = Column(Float, nullable=False)

    route = relationship("BusRouteModel", back_populates="stops")

    __table_args__ = (
        Index("ix_bus_stops_lon_lat", "lon", "lat"),
        Index("ix_bus_stops_route_name", "route_name"),
    )

    def __repr__(self):
        return f"<BusStopModel(name='{self.name}', position={self.position})>"


class BusModel(Base):
    """Autobús simulado"""
    __tablename__ = "buses"

    pk = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    route_name = Column(String, ForeignKey("bus_routes.route_name", ondelete="CASCADE"), nullable=False)
    position = Column(Integer, nullable=False)
    bus_number = Column(String, nullable=False)
    lon = Column(Float, nullable=False)
    lat = Column(Float, nullable=False)
    next_stop_index = Column(Integer, default=0)
    passenger_count = Column(Integer, default=0)
    status = Column(String, default="On Time")
    recommendation = Column(Text, nullable=True)
    last_updated = Column(DateTime, default=datetime.utcnow)

    route = relationship("BusRouteModel", back_populates="buses")

    def __repr__(self):
        return f"<BusModel(bus_number='{self.bus_number}', status='{self.status}')>"
