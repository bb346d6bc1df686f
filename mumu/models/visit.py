"""Visit plan model"""
from datetime import date, datetime
from enum import Enum
from typing import Optional, List
from uuid import uuid4
from pydantic import BaseModel, Field, field_validator

from ..config import settings
from ..schemas.itinerary import ItineraryDay
from ..schemas.ticket_plan import TicketPlanItem


class DateMode(str, Enum):
    FIXED = "fixed"
    FLEXIBLE = "flexible"


class TimeBudgetMode(str, Enum):
    ALL_DAY = "all_day"
    TIME_WINDOW = "time_window"


class PlanMode(str, Enum):
    """Optimization goal: spend less, or see more"""
    MONEY = "money"
    TIME = "time"


class Stop(BaseModel):
    """Geographic anchor of a visit; the finest granularity given wins"""
    id: str = Field(default_factory=lambda: str(uuid4()))
    region: Optional[str] = None
    country: Optional[str] = None
    state: Optional[str] = None
    city: Optional[str] = None
    radius_km: float = Field(default_factory=lambda: settings.default_radius_km, ge=0)

    @property
    def label(self) -> Optional[str]:
        return self.city or self.state or self.country or self.region


class TimeWindow(BaseModel):
    """Daily visiting window, e.g. 14:00 - 17:00"""
    start: str = Field(..., pattern=r"^\d{1,2}:\d{2}$")
    end: str = Field(..., pattern=r"^\d{1,2}:\d{2}$")

    @staticmethod
    def _hours(value: str) -> float:
        hours, minutes = value.split(":")
        return int(hours) + int(minutes) / 60

    @property
    def duration_hours(self) -> float:
        return self._hours(self.end) - self._hours(self.start)


class Visit(BaseModel):
    """Visit plan as stored by the visit repository (visit_plans table)"""
    id: str = Field(default_factory=lambda: str(uuid4()))
    name: str = ""
    date_mode: DateMode = DateMode.FLEXIBLE
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    flexible_days: Optional[int] = Field(None, ge=1)

    time_budget_mode: TimeBudgetMode = TimeBudgetMode.ALL_DAY
    daily_time_window: Optional[TimeWindow] = None

    stops: List[Stop] = Field(default_factory=list)
    mode: PlanMode = PlanMode.MONEY
    ticket_category: str = Field(default_factory=lambda: settings.default_ticket_category)

    # Generated results, replaced together on every run
    generated_at: Optional[datetime] = None
    itinerary: Optional[List[ItineraryDay]] = None
    ticket_plan: Optional[List[TicketPlanItem]] = None

    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    model_config = {"from_attributes": True}

    @field_validator("flexible_days")
    @classmethod
    def flexible_days_limit(cls, v):
        """Flexible trips are capped at max_flexible_days"""
        if v is not None and v > settings.max_flexible_days:
            raise ValueError(f"Flexible trips cannot exceed {settings.max_flexible_days} days")
        return v

    @property
    def is_generated(self) -> bool:
        return self.generated_at is not None
