"""
Watch Market - Report Models

Pydantic models for the structured report returned by the text-generation
service. Keys follow the camelCase JSON the frontend consumes; numbers the
generator emits for text fields are coerced to strings.
"""

from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal
from typing import Any, Mapping

from pydantic import BaseModel, ConfigDict, Field, ValidationInfo, field_validator

from watch_market.config import DataSource
from watch_market.engine.price import (
    CONDITION_FIELDS,
    DISPLAY_PRICE_FIELDS,
    LOCATION_FIELDS,
    YEAR_FIELDS,
    resolve_field,
)


class _ReportPart(BaseModel):
    model_config = ConfigDict(
        extra="allow",
        populate_by_name=True,
        coerce_numbers_to_str=True,
    )

    @field_validator("*", mode="before")
    @classmethod
    def _null_to_default(cls, value: Any, info: ValidationInfo) -> Any:
        # A null optional field reads like a missing one
        if value is not None:
            return value
        field = cls.model_fields.get(info.field_name)
        if field is not None and not field.is_required():
            return field.get_default(call_default_factory=True)
        return value


class WatchSpecs(_ReportPart):
    case_diameter: str = Field(default="", alias="caseDiameter")
    case_material: str = Field(default="", alias="caseMaterial")
    movement: str = ""
    power_reserve: str = Field(default="", alias="powerReserve")
    water_resistance: str = Field(default="", alias="waterResistance")
    year_introduced: str = Field(default="", alias="yearIntroduced")


class MarketPricing(_ReportPart):
    msrp: str = ""
    secondary_avg: str = Field(default="", alias="secondaryAvg")
    premium_discount: str = Field(default="", alias="premiumDiscount")
    trend_12m: str = Field(default="", alias="trend12m")
    liquidity: str = ""
    updated: str = ""
    listings_found: str = Field(default="", alias="listingsFound")


class ConditionBands(_ReportPart):
    """Price bands by watch condition."""

    mint: str = ""
    excellent: str = ""
    very_good: str = Field(default="", alias="veryGood")
    good: str = ""
    fair: str = ""


class InvestmentBar(_ReportPart):
    label: str
    value: int = Field(..., ge=0, le=100)

    @field_validator("value", mode="before")
    @classmethod
    def _round_fractional(cls, value: Any) -> Any:
        if isinstance(value, float):
            return int(Decimal(str(value)).quantize(Decimal("1"), rounding=ROUND_HALF_UP))
        return value


class Investment(_ReportPart):
    verdict: str
    analysis: str = ""
    bars: list[InvestmentBar] = Field(default_factory=list)


class WatchReport(_ReportPart):
    """Full market report. Extra keys from the generator are kept."""

    brand: str
    model: str
    reference: str = ""
    market_price: str = Field(default="", alias="marketPrice")
    price_range: str = Field(default="", alias="priceRange")
    specs: WatchSpecs = Field(default_factory=WatchSpecs)
    pricing: MarketPricing = Field(default_factory=MarketPricing)
    by_condition: ConditionBands = Field(default_factory=ConditionBands, alias="byCondition")
    investment: Investment
    data_source: DataSource | None = Field(default=None, alias="dataSource")
    listings_found: int | None = Field(default=None, alias="listingsFound")

    def to_response(self) -> dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


class ListingSample(BaseModel):
    """Display summary of one scraped listing."""

    price: Any = "N/A"
    condition: Any = "Unknown"
    year: Any = ""
    location: Any = ""

    @classmethod
    def from_listing(cls, listing: Mapping[str, Any]) -> ListingSample:
        return cls(
            price=resolve_field(listing, DISPLAY_PRICE_FIELDS, "N/A"),
            condition=resolve_field(listing, CONDITION_FIELDS, "Unknown"),
            year=resolve_field(listing, YEAR_FIELDS, ""),
            location=resolve_field(listing, LOCATION_FIELDS, ""),
        )

    def summary_line(self) -> str:
        parts = [str(self.price), str(self.condition)]
        if self.year:
            parts.append(str(self.year))
        if self.location:
            parts.append(str(self.location))
        return "- " + " | ".join(parts)
