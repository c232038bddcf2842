from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from typing import Annotated, Any, List, Optional, Union
from pydantic import BaseModel, ConfigDict, Field, PlainSerializer, field_validator
from booking_admin.core.enums import PricingChangeType

# Decimals travel as JSON numbers
Money = Annotated[Decimal, PlainSerializer(float, return_type=float, when_used="json")]

PRICE_PLACES = Decimal("0.01")
MULTIPLIER_PLACES = Decimal("0.001")

NEW_ROW_PREFIX = "new_"


@dataclass(frozen=True)
class PendingRow:
    """A row created client-side that has not been stored yet."""
    temp_id: Optional[str] = None


@dataclass(frozen=True)
class PersistedRow:
    id: str


RowRef = Union[PendingRow, PersistedRow]


def parse_row_ref(raw_id: Optional[str]) -> RowRef:
    if not raw_id or raw_id.startswith(NEW_ROW_PREFIX):
        return PendingRow(temp_id=raw_id)
    return PersistedRow(id=raw_id)


def _quantize(value: Any, places: Decimal) -> Any:
    if value is None:
        return None
    try:
        return Decimal(value).quantize(places, rounding=ROUND_HALF_UP)
    except InvalidOperation:
        raise ValueError(f"{value} does not fit a {places} scale amount")


class PricingRowIn(BaseModel):
    """Base for incoming rows. Unset and null fields leave stored values untouched."""
    model_config = ConfigDict(extra="ignore")

    id: Optional[str] = None

    @field_validator("id", mode="before")
    @classmethod
    def _id_to_str(cls, value: Any) -> Optional[str]:
        return None if value is None else str(value)

    @property
    def ref(self) -> RowRef:
        return parse_row_ref(self.id)

    def values(self) -> dict:
        provided = self.model_dump(exclude_unset=True, exclude={"id"})
        return {field: value for field, value in provided.items() if value is not None}


class VehiclePriceIn(PricingRowIn):
    vehicle_type: Optional[str] = None
    base_price_per_km: Optional[Decimal] = None

    @field_validator("base_price_per_km")
    @classmethod
    def _price_scale(cls, value):
        return _quantize(value, PRICE_PLACES)


class ZoneMultiplierIn(PricingRowIn):
    zone_id: Optional[str] = None
    multiplier: Optional[Decimal] = None

    @field_validator("zone_id", mode="before")
    @classmethod
    def _zone_to_str(cls, value):
        return None if value is None else str(value)

    @field_validator("multiplier")
    @classmethod
    def _multiplier_scale(cls, value):
        return _quantize(value, MULTIPLIER_PLACES)


class FixedRouteIn(PricingRowIn):
    origin_name: Optional[str] = None
    destination_name: Optional[str] = None
    vehicle_type: Optional[str] = None
    fixed_price: Optional[Decimal] = None

    @field_validator("fixed_price")
    @classmethod
    def _price_scale(cls, value):
        return _quantize(value, PRICE_PLACES)


class PricingUpdateRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    vehicle_prices: List[Optional[VehiclePriceIn]] = Field(default_factory=list, alias="vehiclePrices")
    zone_multipliers: List[Optional[ZoneMultiplierIn]] = Field(default_factory=list, alias="zoneMultipliers")
    fixed_routes: List[Optional[FixedRouteIn]] = Field(default_factory=list, alias="fixedRoutes")

    @field_validator("vehicle_prices", "zone_multipliers", "fixed_routes", mode="before")
    @classmethod
    def _null_is_empty(cls, value):
        return [] if value is None else value

    def is_empty(self) -> bool:
        return not (self.vehicle_prices or self.zone_multipliers or self.fixed_routes)


class CollectionResult(BaseModel):
    success: int = 0
    error: int = 0


class PricingUpdateResults(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    vehicle_prices: CollectionResult = Field(default_factory=CollectionResult, alias="vehiclePrices")
    zone_multipliers: CollectionResult = Field(default_factory=CollectionResult, alias="zoneMultipliers")
    fixed_routes: CollectionResult = Field(default_factory=CollectionResult, alias="fixedRoutes")


class PricingUpdateResponse(BaseModel):
    success: bool = True
    message: str = "Pricing data updated successfully"
    results: PricingUpdateResults


class VehicleBasePriceOut(BaseModel):
    id: str
    vehicle_type: str
    base_price_per_km: Money
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class ZoneMultiplierOut(BaseModel):
    id: str
    zone_id: str
    multiplier: Money
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class FixedRouteOut(BaseModel):
    id: str
    origin_name: str
    destination_name: str
    vehicle_type: str
    fixed_price: Money
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class PricingTablesOut(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    vehicle_prices: List[VehicleBasePriceOut] = Field(default_factory=list, alias="vehiclePrices")
    zone_multipliers: List[ZoneMultiplierOut] = Field(default_factory=list, alias="zoneMultipliers")
    fixed_routes: List[FixedRouteOut] = Field(default_factory=list, alias="fixedRoutes")


class PricingChangeLogOut(BaseModel):
    id: str
    changed_by: str
    change_type: PricingChangeType
    record_id: Optional[str] = None
    previous_value: dict
    new_value: dict
    notes: Optional[str] = None
    created_at: datetime
