"""Ticket plan aggregator: per-museum best prices and trip totals for an itinerary"""
import logging
from datetime import date, datetime
from typing import Iterable, List, Optional, Union

from ..config import settings
from ..models.eligibility import EligibilityItem, UserLocation
from ..schemas.itinerary import ItineraryDay
from ..schemas.ticket_plan import TicketPlanItem, TripTotals
from ..schemas.ticket_rules import TicketRules
from .discounts import price_museum, pricing_date

logger = logging.getLogger(__name__)


def build_ticket_plan(
    itinerary: Iterable[ItineraryDay],
    eligibilities: Iterable[EligibilityItem],
    now: Union[date, datetime],
    *,
    ticket_rules: Optional[TicketRules],
    ticket_category: Optional[str] = None,
    home: Optional[UserLocation] = None
) -> List[TicketPlanItem]:
    """
    Price every distinct museum of an itinerary

    Each museum is evaluated on the day it is scheduled (or `now`, if that
    day is already past). Museums without ticket rules get
    rules_available=False and an unknown price.

    Args:
        itinerary: Built itinerary days
        eligibilities: User eligibility items
        now: Injected current date/time
        ticket_rules: Ticket-rule table keyed by museum_id
        ticket_category: Ticket category, defaults to settings.default_ticket_category
        home: User profile location for residency discounts

    Returns:
        One TicketPlanItem per museum, in itinerary order
    """
    category = ticket_category or settings.default_ticket_category
    eligibilities = list(eligibilities)

    items = []
    seen = set()
    for day in itinerary:
        for placed in day.museums:
            museum = placed.museum
            if museum.museum_id in seen:
                continue
            seen.add(museum.museum_id)

            on = pricing_date(day.date, now)
            pricing = price_museum(
                museum.museum_id,
                ticket_rules,
                eligibilities=eligibilities,
                ticket_category=category,
                on=on,
                hours=museum.opening_hours,
                home=home,
            )
            if not pricing.rules_available:
                logger.debug(f"No ticket rules for museum {museum.museum_id}")

            items.append(TicketPlanItem(
                museum=museum,
                visit_date=on,
                ticket_category=category,
                base_price=pricing.base_price,
                best_price=pricing.best,
                currency=pricing.currency,
                pricing_notes=pricing.pricing_notes,
                rules_available=pricing.rules_available,
                discount_rows=pricing.rows,
            ))

    return items


def _plural(count: int, singular: str, plural: str) -> str:
    return singular if count == 1 else plural


def summarize_ticket_plan(items: Iterable[TicketPlanItem]) -> TripTotals:
    """
    Trip-level totals

    Only items with a known price are summed; unknown prices are counted
    separately so the totals are never silently understated.
    """
    totals = TripTotals()
    for item in items:
        price = item.best_price.price
        if price is None:
            totals.unknown_count += 1
            continue
        base = item.base_price if item.base_price is not None else price
        totals.priced_count += 1
        totals.total_base += base
        totals.total_effective += price
        totals.total_savings += item.best_price.savings
        if price == 0:
            totals.free_count += 1
        elif item.best_price.savings > 0:
            totals.discounted_count += 1

    totals.total_base = round(totals.total_base, 2)
    totals.total_effective = round(totals.total_effective, 2)
    totals.total_savings = round(totals.total_savings, 2)

    if totals.free_count:
        totals.explanations.append(
            f"Matched {totals.free_count} free {_plural(totals.free_count, 'entry', 'entries')} during your dates"
        )
    if totals.discounted_count:
        totals.explanations.append(
            f"Applied discounts at {totals.discounted_count} {_plural(totals.discounted_count, 'museum', 'museums')}"
        )
    if totals.unknown_count:
        totals.explanations.append(
            f"{totals.unknown_count} {_plural(totals.unknown_count, 'museum', 'museums')} with unknown pricing"
        )
    return totals
