"""Response schemas for API endpoints"""
from typing import List, Optional
from pydantic import BaseModel, Field

from ..models.visit import Visit
from .discount import DiscountRow
from .itinerary import PriceResult
from .ticket_plan import TripTotals


class GeneratePlanResponse(BaseModel):
    """Response for /visits/{id}/generate"""
    visit: Visit = Field(..., description="Visit with itinerary, ticket plan and generated_at attached")
    totals: TripTotals = Field(..., description="Trip-level cost summary")


class DiscountRowsResponse(BaseModel):
    """Response for /museums/{museum_id}/discounts"""
    museum_id: str
    ticket_category: str
    rules_available: bool
    base_price: Optional[float] = None
    currency: str = "USD"
    best_price: PriceResult
    rows: List[DiscountRow] = Field(default_factory=list)


class ErrorResponse(BaseModel):
    """Error response"""
    error: str = Field(..., description="Error type")
    message: str = Field(..., description="Error message")
    details: Optional[dict] = Field(None, description="Additional error details")
