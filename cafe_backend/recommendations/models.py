from __future__ import annotations

from typing import Annotated, Any, Literal

from pydantic import BaseModel, ConfigDict, Field

Temperature = Literal["hot", "iced", "either"]
CaffeineLevel = Literal["none", "low", "medium", "high"]
SweetnessLevel = Literal["low", "medium", "high"]
MilkPreference = Literal["no-milk", "dairy", "non-dairy"]
TimeOfDay = Literal["morning", "afternoon", "evening", "any"]
SizeName = Literal["Small", "Medium", "Large"]


class PreferenceInput(BaseModel):
    """What the customer is in the mood for. Every field has a default."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    temperature: Temperature = "either"
    caffeine: CaffeineLevel = "medium"
    sweetness: SweetnessLevel = "medium"
    milk: MilkPreference = "dairy"
    flavors: list[Annotated[str, Field(min_length=1)]] = Field(default_factory=list)
    budget: float | None = Field(default=None, gt=0)
    size_preference: SizeName | None = Field(default=None, alias="sizePreference")
    featured_boost: bool = Field(default=True, alias="featuredBoost")
    time_of_day: TimeOfDay = Field(default="any", alias="timeOfDay")


class DerivedAttributes(BaseModel):
    model_config = ConfigDict(frozen=True)

    is_milk_based: bool
    has_chocolate: bool
    is_tea: bool
    is_espresso: bool
    is_turkish: bool
    is_americano: bool
    supports_iced: bool
    hot_only: bool
    caffeine_level: CaffeineLevel
    sweetness_level: SweetnessLevel


class SuggestionResult(BaseModel):
    item: Any
    score: int
    reasons: list[str] = Field(default_factory=list)
    suggested_size: str | None = None
    suggested_flavors: list[str] = Field(default_factory=list)


class SuggestionResponse(BaseModel):
    top: SuggestionResult | None = None
    alternatives: list[SuggestionResult] = Field(default_factory=list)
