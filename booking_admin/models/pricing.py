from sqlalchemy import Column, String, Numeric, ForeignKey, UniqueConstraint
from sqlalchemy.orm import relationship
from booking_admin.models.base import BaseModel


class Zone(BaseModel):
    __tablename__ = "zones"
    name = Column(String(120), nullable=False)


class VehicleBasePrice(BaseModel):
    __tablename__ = "vehicle_base_prices"

    vehicle_type = Column(String(50), unique=True, nullable=False)
    base_price_per_km = Column(Numeric(10, 2), nullable=False)


class ZoneMultiplier(BaseModel):
    __tablename__ = "zone_multipliers"

    zone_id = Column(ForeignKey("zones.id", ondelete="CASCADE"), unique=True, nullable=False)
    zone = relationship("Zone", backref="multipliers")
    multiplier = Column(Numeric(6, 3), nullable=False, default=1)


class FixedRoute(BaseModel):
    __tablename__ = "fixed_routes"
    __table_args__ = (
        UniqueConstraint("origin_name", "destination_name", "vehicle_type", name="uq_fixed_routes_route"),
    )

    origin_name = Column(String(255), nullable=False)
    destination_name = Column(String(255), nullable=False)
    vehicle_type = Column(String(50), nullable=False)
    fixed_price = Column(Numeric(10, 2), nullable=False)
