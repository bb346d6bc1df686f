"""Request schemas for API endpoints"""
from datetime import datetime
from typing import List, Optional
from pydantic import BaseModel, Field

from ..models.eligibility import UserLocation


class EligibilityContext(BaseModel):
    """The user's discount profile as stored in preferences"""
    discounts: List[str] = Field(
        default_factory=list,
        description="Preferences `discounts` column: JSON eligibility items or legacy labels"
    )
    home: Optional[UserLocation] = Field(None, description="Profile location for residency discounts")
    now: Optional[datetime] = Field(None, description="Evaluation time; defaults to the server clock")


class GeneratePlanRequest(EligibilityContext):
    """Request body for /visits/{id}/generate"""

    class Config:
        json_schema_extra = {
            "example": {
                "discounts": ['{"type": "snap_ebt", "lifetime": true}'],
                "home": {"city": "Chicago", "region": "Illinois", "country": "United States"},
                "now": "2026-03-04T09:00:00-06:00"
            }
        }


class DiscountRowsRequest(EligibilityContext):
    """Request body for /museums/{museum_id}/discounts"""
    ticket_category: Optional[str] = Field(None, description="Ticket category id, defaults to adult")
