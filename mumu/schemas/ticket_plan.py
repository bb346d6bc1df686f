"""Ticket plan schemas"""
from datetime import date
from typing import List, Optional
from pydantic import BaseModel, Field

from ..models.museum import Museum
from .discount import DiscountRow
from .itinerary import PriceResult


class TicketPlanItem(BaseModel):
    """Price summary for one museum of the itinerary"""
    museum: Museum
    visit_date: Optional[date] = None
    ticket_category: str = "adult"
    base_price: Optional[float] = None
    best_price: PriceResult
    currency: str = "USD"
    pricing_notes: str = ""
    rules_available: bool = False
    discount_rows: List[DiscountRow] = Field(default_factory=list)


class TripTotals(BaseModel):
    """Trip-level cost summary over priced items only"""
    total_base: float = 0.0
    total_effective: float = 0.0
    total_savings: float = 0.0
    priced_count: int = 0
    unknown_count: int = Field(0, description="Museums whose price could not be determined")
    free_count: int = 0
    discounted_count: int = 0
    explanations: List[str] = Field(default_factory=list)

    @property
    def has_enough_data(self) -> bool:
        return self.priced_count > 0
