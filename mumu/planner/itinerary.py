"""
Itinerary builder

Selects museums around each stop of a visit and assigns them to the visit's
days, respecting opening days and the daily time budget.
"""
import logging
from datetime import date, datetime
from typing import Dict, Iterable, List, Optional, Tuple, Union

from ..config import settings
from ..models.eligibility import EligibilityItem, UserLocation
from ..models.museum import Museum
from ..models.visit import PlanMode, Stop, Visit
from ..schemas.itinerary import ItineraryDay, ItineraryMuseum
from ..schemas.ticket_rules import TicketRules
from ..tools.geo import haversine_km, museums_near_stop
from ..tools.opening_hours import open_status
from ..validators.input_validator import daily_budget_hours, resolve_visit_dates
from .discounts import MuseumPricing, as_date, price_museum, pricing_date

logger = logging.getLogger(__name__)


def suggested_duration(museum: Museum) -> float:
    """Hours to plan for a museum; museums with full guide content get longer"""
    if museum.has_full_content:
        return settings.full_content_visit_hours
    return settings.standard_visit_hours


def gather_candidates(stops: Iterable[Stop], museums: List[Museum]) -> List[Museum]:
    """
    Candidate museums of every stop, in stop order

    A museum near several stops belongs to the first one only.
    """
    seen = set()
    candidates = []
    for stop in stops:
        near = museums_near_stop(stop, museums)
        logger.debug(f"Stop {stop.label!r} ({stop.radius_km} km): {len(near)} museums in range")
        for museum in near:
            if museum.museum_id in seen:
                continue
            seen.add(museum.museum_id)
            candidates.append(museum)
    return candidates


class _PricingCache:
    """Memoizes museum pricing per (museum, pricing date) for one build"""

    def __init__(
        self,
        visit: Visit,
        eligibilities: List[EligibilityItem],
        ticket_rules: Optional[TicketRules],
        home: Optional[UserLocation],
        now: Union[date, datetime]
    ):
        self.visit = visit
        self.eligibilities = eligibilities
        self.ticket_rules = ticket_rules
        self.home = home
        self.now = now
        self._cache: Dict[Tuple[str, date], MuseumPricing] = {}

    def get(self, museum: Museum, day: date) -> MuseumPricing:
        on = pricing_date(day, self.now)
        key = (museum.museum_id, on)
        if key not in self._cache:
            self._cache[key] = price_museum(
                museum.museum_id,
                self.ticket_rules,
                eligibilities=self.eligibilities,
                ticket_category=self.visit.ticket_category,
                on=on,
                hours=museum.opening_hours,
                home=self.home,
            )
        return self._cache[key]

    def price(self, museum: Museum, day: date) -> Optional[float]:
        return self.get(museum, day).best.price

    def best_day(self, museum: Museum, days: List[date]) -> Optional[Tuple[date, float]]:
        """Cheapest day with a known price on which the museum is not closed; the earliest wins ties"""
        best = None
        for day in days:
            if open_status(museum.opening_hours, day).status == "closed":
                continue
            price = self.price(museum, day)
            if price is not None and (best is None or price < best[1]):
                best = (day, price)
        return best


def rank_candidates(
    candidates: List[Museum],
    mode: PlanMode,
    estimates: Optional[Dict[str, Optional[float]]] = None
) -> List[Museum]:
    """
    Order the candidate pool

    money: full-content museums first, then lower expected price (unknown
    prices last). time: must-visit museums first, then shorter visits.
    Ties fall back to name, then museum_id.
    """
    estimates = estimates or {}

    if mode == PlanMode.MONEY:
        def key(m: Museum):
            price = estimates.get(m.museum_id)
            return (not m.has_full_content, price is None, price or 0.0, m.name.lower(), m.museum_id)
    else:
        def key(m: Museum):
            return (not m.highlight, suggested_duration(m), m.name.lower(), m.museum_id)

    return sorted(candidates, key=key)


def order_by_proximity(stops: List[ItineraryMuseum]) -> List[ItineraryMuseum]:
    """Nearest-neighbour walk starting at the first (highest ranked) museum"""
    if len(stops) < 3:
        return stops
    remaining = stops[1:]
    route = [stops[0]]
    while remaining:
        last = route[-1].museum
        nearest = min(remaining, key=lambda s: haversine_km(last.lat, last.lng, s.museum.lat, s.museum.lng))
        remaining.remove(nearest)
        route.append(nearest)
    return route


def _reserve_best_days(
    pool: List[Museum],
    best_days: Dict[str, Tuple[date, float]],
    budget: float
) -> Dict[str, date]:
    """
    Hold each museum's cheapest day for it, in rank order, while that day has budget left

    Museums whose cheapest day is already full get no reservation and are
    placed first-fit.
    """
    reserved_hours: Dict[date, float] = {}
    reserved = {}
    for museum in pool:
        best = best_days.get(museum.museum_id)
        if best is None:
            continue
        day = best[0]
        duration = suggested_duration(museum)
        if reserved_hours.get(day, 0.0) + duration > budget:
            continue
        reserved_hours[day] = reserved_hours.get(day, 0.0) + duration
        reserved[museum.museum_id] = day
    return reserved


def _waits_for_best_day(
    pricing: _PricingCache,
    museum: Museum,
    day: date,
    reserved: Dict[str, date],
    best_days: Dict[str, Tuple[date, float]]
) -> bool:
    """True when the museum is cheaper on its reserved day later in the visit"""
    best_day = reserved.get(museum.museum_id)
    if best_day is None or best_day <= day:
        return False
    price = pricing.price(museum, day)
    return price is None or price > best_days[museum.museum_id][1]


def build_itinerary(
    visit: Visit,
    museums: List[Museum],
    now: Union[date, datetime],
    *,
    eligibilities: Iterable[EligibilityItem] = (),
    ticket_rules: Optional[TicketRules] = None,
    home: Optional[UserLocation] = None
) -> List[ItineraryDay]:
    """
    Build the day-by-day itinerary of a visit

    In money mode a museum waits for its cheapest day of the visit while that
    day still has room in the budget; otherwise museums go to the first day
    that is open and fits.

    Args:
        visit: Visit with stops, dates, time budget and mode
        museums: Museum catalog
        now: Injected current date/time (flexible visits start here)
        eligibilities: User eligibility items, used for price estimates
        ticket_rules: Ticket-rule table keyed by museum_id
        home: User profile location for residency discounts

    Returns:
        One ItineraryDay per calendar day of the visit; days with nothing
        open are kept as rest days. Empty when the visit has no stops.

    Raises:
        InvalidDateRangeError: If end_date is before start_date
        ValidationError: If dates or the time window are missing or invalid
    """
    days = resolve_visit_dates(visit, as_date(now))
    budget = daily_budget_hours(visit)

    if not visit.stops:
        return []

    pricing = _PricingCache(visit, list(eligibilities), ticket_rules, home, now)
    candidates = gather_candidates(visit.stops, museums)

    best_days: Dict[str, Tuple[date, float]] = {}
    if visit.mode == PlanMode.MONEY:
        for museum in candidates:
            best = pricing.best_day(museum, days)
            if best is not None:
                best_days[museum.museum_id] = best
    estimates = {m_id: price for m_id, (_, price) in best_days.items()}
    pool = rank_candidates(candidates, visit.mode, estimates)
    reserved = _reserve_best_days(pool, best_days, budget)

    itinerary = []
    for day in days:
        placed: List[ItineraryMuseum] = []
        used = 0.0
        # museums whose cheapest day is today go first so their reservation holds
        ordered = [m for m in pool if reserved.get(m.museum_id) == day]
        ordered += [m for m in pool if reserved.get(m.museum_id) != day]
        for museum in ordered:
            status = open_status(museum.opening_hours, day)
            if status.status == "closed":
                continue
            if _waits_for_best_day(pricing, museum, day, reserved, best_days):
                continue
            duration = suggested_duration(museum)
            if used + duration > budget:
                continue
            placed.append(ItineraryMuseum(
                museum=museum,
                open_status=status,
                suggested_duration=duration,
                price_result=pricing.get(museum, day).best,
            ))
            used += duration

        if visit.mode == PlanMode.TIME:
            placed = order_by_proximity(placed)
        else:
            rank = {m.museum_id: i for i, m in enumerate(pool)}
            placed.sort(key=lambda p: rank[p.museum.museum_id])

        placed_ids = {p.museum.museum_id for p in placed}
        pool = [m for m in pool if m.museum_id not in placed_ids]
        itinerary.append(ItineraryDay(date=day, museums=placed))

    if pool:
        logger.info(f"Visit {visit.id}: {len(pool)} candidate museums did not fit the dates")
        logger.debug(f"Dropped museums: {[m.museum_id for m in pool]}")

    placed_total = sum(len(d.museums) for d in itinerary)
    logger.info(
        f"Built itinerary for visit {visit.id}: {placed_total} museums over {len(itinerary)} days "
        f"(mode={visit.mode.value}, budget={budget:g}h/day)"
    )
    return itinerary
