"""Itinerary schemas produced by the planner"""
from datetime import date as Date
from typing import List, Optional, Literal
from pydantic import BaseModel, Field

from ..models.museum import Museum


class OpenStatus(BaseModel):
    """Whether a museum is open on a given calendar day"""
    status: Literal["open", "closed", "unknown"]
    note: Optional[str] = None
    needs_confirmation: bool = Field(
        default=False,
        description="Set when hours are unknown and the visitor should confirm before going"
    )


class PriceResult(BaseModel):
    """Best admission price found for a museum / category / date"""
    price: Optional[float] = Field(None, description="None means the price is unknown, not free")
    savings: float = 0.0
    notes: List[str] = Field(default_factory=list)
    applied_rule_ids: List[str] = Field(default_factory=list)
    confidence: Literal["high", "low", "unknown"] = "high"

    @classmethod
    def unknown(cls, note: str = "Ticket rules not available yet") -> "PriceResult":
        return cls(price=None, savings=0.0, notes=[note], confidence="unknown")


class ItineraryMuseum(BaseModel):
    """A museum placed on an itinerary day"""
    museum: Museum
    open_status: OpenStatus
    suggested_duration: float = Field(..., gt=0, description="Hours")
    price_result: PriceResult


class ItineraryDay(BaseModel):
    """One calendar day of a visit; an empty museums list is a rest day"""
    date: Date
    museums: List[ItineraryMuseum] = Field(default_factory=list)

    @property
    def is_rest_day(self) -> bool:
        return not self.museums

    @property
    def total_hours(self) -> float:
        return sum(m.suggested_duration for m in self.museums)
