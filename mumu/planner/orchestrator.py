"""Plan orchestration - runs the itinerary builder and ticket plan aggregator for a visit"""
import logging
from datetime import date, datetime, timezone
from typing import Iterable, List, Optional, Union
from uuid import uuid4
from pydantic import BaseModel, Field

from ..models.eligibility import EligibilityItem, UserLocation
from ..models.museum import Museum
from ..models.visit import Visit
from ..schemas.itinerary import ItineraryDay
from ..schemas.ticket_plan import TicketPlanItem, TripTotals
from ..schemas.ticket_rules import TicketRules
from ..validators.input_validator import validate_visit
from .discounts import as_date
from .itinerary import build_itinerary
from .ticket_plan import build_ticket_plan, summarize_ticket_plan

logger = logging.getLogger(__name__)


class GeneratedPlan(BaseModel):
    """Result of one Generate run"""
    generated_at: datetime
    itinerary: List[ItineraryDay] = Field(default_factory=list)
    ticket_plan: List[TicketPlanItem] = Field(default_factory=list)
    totals: TripTotals = Field(default_factory=TripTotals)


def _as_datetime(now: Union[date, datetime]) -> datetime:
    if isinstance(now, datetime):
        return now
    return datetime(now.year, now.month, now.day, tzinfo=timezone.utc)


def generate_plan(
    visit: Visit,
    museums: List[Museum],
    now: Union[date, datetime],
    *,
    eligibilities: Iterable[EligibilityItem] = (),
    ticket_rules: Optional[TicketRules] = None,
    home: Optional[UserLocation] = None
) -> GeneratedPlan:
    """
    Generate the itinerary and ticket plan of a visit

    Pure: identical inputs and `now` give an identical plan. The caller
    persists the result (see apply_plan).

    Raises:
        ValidationError: If the visit's dates, time window or stops are invalid
    """
    validation = validate_visit(visit, as_date(now))
    logger.debug(f"Visit {visit.id} validated: {validation}")

    eligibilities = list(eligibilities)
    itinerary = build_itinerary(
        visit,
        museums,
        now,
        eligibilities=eligibilities,
        ticket_rules=ticket_rules,
        home=home,
    )
    ticket_plan = build_ticket_plan(
        itinerary,
        eligibilities,
        now,
        ticket_rules=ticket_rules,
        ticket_category=visit.ticket_category,
        home=home,
    )
    totals = summarize_ticket_plan(ticket_plan)

    logger.info(
        f"Generated plan for visit {visit.id}: {len(ticket_plan)} museums, "
        f"total {totals.total_effective:g} (saves {totals.total_savings:g}, {totals.unknown_count} unknown)"
    )
    return GeneratedPlan(
        generated_at=_as_datetime(now),
        itinerary=itinerary,
        ticket_plan=ticket_plan,
        totals=totals,
    )


def generate_visit_name(visit: Visit) -> str:
    """
    Default visit name from its stops and dates

    Examples:
        "Chicago · Milwaukee (Mar 6–Mar 8)"
        "New Visit"
    """
    parts = []
    for stop in visit.stops:
        label = stop.label
        if label and label not in parts:
            parts.append(label)
    location = ' · '.join(parts) if parts else 'New Visit'

    if visit.start_date and visit.end_date:
        start, end = visit.start_date, visit.end_date
        return f"{location} ({start:%b} {start.day}–{end:%b} {end.day})"
    return location


def apply_plan(visit: Visit, plan: GeneratedPlan) -> Visit:
    """Copy of the visit with all generated fields replaced by the plan"""
    return visit.model_copy(update={
        "name": visit.name.strip() or generate_visit_name(visit),
        "generated_at": plan.generated_at,
        "itinerary": plan.itinerary,
        "ticket_plan": plan.ticket_plan,
        "updated_at": plan.generated_at,
    })


def duplicate_visit(visit: Visit, now: datetime) -> Visit:
    """Copy of a visit under a new id, with generated results cleared"""
    return visit.model_copy(deep=True, update={
        "id": str(uuid4()),
        "name": f"{visit.name or generate_visit_name(visit)} (copy)",
        "generated_at": None,
        "itinerary": None,
        "ticket_plan": None,
        "created_at": now,
        "updated_at": now,
    })
