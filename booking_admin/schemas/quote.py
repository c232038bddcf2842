from decimal import Decimal
from typing import List
from pydantic import BaseModel, ConfigDict, Field
from booking_admin.schemas.pricing import Money

class QuoteRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True, str_strip_whitespace=True)

    origin: str = Field(min_length=1)
    destination: str = Field(min_length=1)
    vehicle_type: str = Field(min_length=1, alias="vehicleType")

class BreakdownLine(BaseModel):
    description: str
    amount: Money

class PriceQuote(BaseModel):
    distance_km: Money
    base_price: Money
    zone_multiplier: Money = Decimal("1")
    final_price: Money
    breakdown: List[BreakdownLine]
    is_fixed_route: bool = False
