"""
Discount rule evaluator

Turns a museum's ticket-rule entry and a user's eligibility profile into one
DiscountRow per discount definition for a ticket category and date, and picks
the best applicable price out of those rows.
"""
import logging
from datetime import date, datetime, timedelta
from typing import Iterable, List, Optional, Union
from pydantic import BaseModel, Field

from ..config import settings
from ..models.eligibility import (
    EligibilityItem,
    EligibilityType,
    UserLocation,
    item_validity,
    parse_iso_date,
)
from ..schemas.discount import DiscountRow, StatusVariant
from ..schemas.itinerary import PriceResult
from ..schemas.ticket_rules import DateConstraint, DiscountDefinition, TicketRuleEntry, TicketRules
from ..tools.eligibility_catalog import get_catalog_item
from ..tools.opening_hours import day_of_week, is_open_on_day, parse_opening_hours
from ..tools.recurrence import matches_week_rule

logger = logging.getLogger(__name__)

SENIOR_AGE = 65


def as_date(now: Union[date, datetime]) -> date:
    """Calendar date of an injected `now`"""
    return now.date() if isinstance(now, datetime) else now


def pricing_date(day: date, now: Union[date, datetime]) -> date:
    """Date a scheduled museum is priced on: its day, or today when that day is already past"""
    return max(day, as_date(now))


def age_on(date_of_birth: str, on: date) -> Optional[int]:
    """Age in whole years on a date, None if the date of birth cannot be read or is in the future"""
    born = parse_iso_date(date_of_birth)
    if born is None or born > on:
        return None
    return on.year - born.year - ((on.month, on.day) < (born.month, born.day))


def date_matches(constraint: DateConstraint, day: date) -> bool:
    """Whether a day satisfies every part of a date constraint"""
    if constraint.start_date and day < constraint.start_date:
        return False
    if constraint.end_date and day > constraint.end_date:
        return False
    if constraint.months and day.month not in constraint.months:
        return False
    if constraint.days_of_week and day_of_week(day) not in constraint.days_of_week:
        return False
    if constraint.week_rule and not matches_week_rule(constraint.week_rule, day):
        return False
    return True


def next_eligible_date(
    constraint: Optional[DateConstraint],
    after: date,
    hours: Optional[str] = None,
    lookahead_days: Optional[int] = None
) -> Optional[date]:
    """
    First day after `after` on which the constraint holds and the museum is not known to be closed

    Returns None when the window has ended or nothing matches within the lookahead.
    """
    lookahead_days = lookahead_days or settings.next_eligible_lookahead_days
    hours_known = bool(parse_opening_hours(hours))

    for offset in range(1, lookahead_days + 1):
        day = after + timedelta(days=offset)
        if constraint and constraint.end_date and day > constraint.end_date:
            return None
        if constraint and not date_matches(constraint, day):
            continue
        if hours_known and not is_open_on_day(hours, day_of_week(day)):
            continue
        return day
    return None


class _Match(BaseModel):
    """Outcome of the type-applicability check"""
    ok: bool
    any_of_items: List[EligibilityItem] = Field(default_factory=list, description="Matches for rule.types; one valid item is enough")
    program_items: List[EligibilityItem] = Field(default_factory=list)
    derived_items: List[EligibilityItem] = Field(default_factory=list)
    reason: Optional[str] = None
    expired_note: Optional[str] = None


class _Status(BaseModel):
    ok: bool
    variant: StatusVariant = "inactive"
    label: str = "Not eligible"
    note: Optional[str] = None
    next_eligible: Optional[date] = None


class DiscountRuleEvaluator:
    """Evaluates discount definitions for one user, museum and date"""

    def __init__(
        self,
        eligibilities: Iterable[EligibilityItem],
        on: date,
        museum_id: Optional[str] = None,
        hours: Optional[str] = None,
        home: Optional[UserLocation] = None
    ):
        self.eligibilities = list(eligibilities)
        self.by_type = {}
        for item in self.eligibilities:
            self.by_type.setdefault(item.type, item)
        self.on = on
        self.museum_id = museum_id
        self.hours = hours
        self.home = home or UserLocation()

    # ── type applicability ────────────────────────────────────────────────

    def _lives_in(self, place: str, home_value: str) -> Optional[EligibilityItem]:
        """Returns the item proving residence (or a placeholder for the profile location), else None"""
        wanted = place.strip().lower()
        resident = self.by_type.get(EligibilityType.LOCAL_RESIDENT)
        if resident and any(wanted in loc.lower() for loc in resident.locations or []):
            return resident
        if home_value and home_value.strip().lower() == wanted:
            return EligibilityItem(type=EligibilityType.LOCAL_RESIDENT, lifetime=True)
        return None

    def _detail_match(self, eligibility_type: EligibilityType, field: str, wanted: List[str]) -> Optional[EligibilityItem]:
        item = self.by_type.get(eligibility_type)
        if item is None:
            return None
        values = [v.lower() for v in getattr(item, field) or []]
        if any(w.lower() in v for w in wanted for v in values):
            return item
        return None

    def match_types(self, rule: DiscountDefinition) -> _Match:
        any_of_items = []
        if rule.types:
            any_of_items = [self.by_type[t] for t in rule.types if t in self.by_type]
            if not any_of_items:
                return _Match(ok=False, reason="Not eligible")

        program_items: List[EligibilityItem] = []
        derived: List[EligibilityItem] = []
        criteria = rule.eligibility
        if criteria is None:
            return _Match(ok=True, any_of_items=any_of_items)

        for place, home_value in (
            (criteria.resident_city, self.home.city),
            (criteria.resident_state, self.home.region),
            (criteria.resident_country, self.home.country),
        ):
            if place:
                proof = self._lives_in(place, home_value)
                if proof is None:
                    return _Match(ok=False, reason=f"Residents of {place} only")
                derived.append(proof)

        if criteria.min_age is not None or criteria.max_age is not None or criteria.is_senior:
            age_item = self.by_type.get(EligibilityType.AGE_BASED)
            age = age_on(age_item.date_of_birth, self.on) if age_item and age_item.date_of_birth else None
            if criteria.is_senior and age is None and EligibilityType.SENIOR in self.by_type:
                program_items.append(self.by_type[EligibilityType.SENIOR])
            elif age is None:
                reason = "Date of birth could not be read" if age_item and age_item.date_of_birth else "Add your date of birth"
                return _Match(ok=False, reason=reason)
            else:
                if criteria.min_age is not None and age < criteria.min_age:
                    return _Match(ok=False, reason=f"Ages {criteria.min_age}+ only")
                if criteria.max_age is not None and age > criteria.max_age:
                    return _Match(ok=False, reason=f"Ages {criteria.max_age} and under only")
                if criteria.is_senior and age < SENIOR_AGE:
                    return _Match(ok=False, reason=f"Ages {SENIOR_AGE}+ only")
                derived.append(age_item)

        required = []
        if criteria.is_student:
            required.append(EligibilityType.STUDENT)
        if criteria.has_program:
            required.append(criteria.has_program)
        for eligibility_type in required:
            item = self.by_type.get(eligibility_type)
            if item is None:
                return _Match(ok=False, reason="Not eligible")
            program_items.append(item)

        for eligibility_types, field, wanted in (
            ((EligibilityType.LIBRARY_PASS,), "libraries", criteria.libraries),
            ((EligibilityType.STUDENT,), "schools", criteria.schools),
            ((EligibilityType.EMPLOYER,), "companies", criteria.companies),
            ((EligibilityType.CITY_PASS, EligibilityType.CITY_ID), "cities", criteria.cities),
        ):
            if not wanted:
                continue
            item = next(
                (found for found in (self._detail_match(t, field, wanted) for t in eligibility_types) if found),
                None
            )
            if item is None:
                return _Match(ok=False, reason="Not eligible")
            program_items.append(item)

        expired_note = None
        if criteria.member_of_museum:
            item = self.by_type.get(EligibilityType.MUSEUM_MEMBERSHIP)
            membership = next(
                (m for m in (item.museum_memberships or []) if m.museum_id == self.museum_id),
                None
            ) if item else None
            if membership is None:
                return _Match(ok=False, reason="Members only")
            expires = parse_iso_date(membership.expires_on)
            if expires is not None and expires < self.on:
                expired_note = f"Membership expired on {expires.isoformat()}"
            derived.append(item)

        return _Match(
            ok=True,
            any_of_items=any_of_items,
            program_items=program_items,
            derived_items=derived,
            expired_note=expired_note,
        )

    # ── time applicability ────────────────────────────────────────────────

    def _next(self, constraint: Optional[DateConstraint]) -> Optional[date]:
        return next_eligible_date(constraint, self.on, self.hours)

    def check_time(self, rule: DiscountDefinition, match: _Match) -> _Status:
        constraint = rule.date_constraint

        # any-of items: expired ones drop out, and the rule needs one survivor
        unexpired = [i for i in match.any_of_items if item_validity(i, self.on) != "expired"]

        expired_notes = [match.expired_note] if match.expired_note else []
        expired_items = match.program_items + match.derived_items
        if match.any_of_items and not unexpired:
            expired_items = match.any_of_items + expired_items
        for item in expired_items:
            if item_validity(item, self.on) == "expired":
                expired_notes.append(f"{self._label(item)} expired on {item.expires_on}")
        if expired_notes:
            # no next date: an expired item stays expired until it is renewed
            return _Status(
                ok=False,
                label="Eligibility expired",
                note="; ".join(expired_notes) + ". Renew to use this discount",
            )

        if constraint is None:
            return _Status(ok=True)

        undated = [i for i in match.program_items if item_validity(i, self.on) == "undated"]
        if match.any_of_items and all(item_validity(i, self.on) == "undated" for i in unexpired):
            undated = unexpired[:1] + undated
        if undated:
            return _Status(
                ok=False,
                label="Add an expiration date",
                note=f"Mark {self._label(undated[0])} as lifetime or add its expiration date",
            )

        if constraint.start_date and self.on < constraint.start_date:
            return _Status(
                ok=False,
                variant="seasonal",
                label=f"Starts {constraint.start_date.isoformat()}",
                next_eligible=self._next(constraint),
            )
        if constraint.end_date and self.on > constraint.end_date:
            return _Status(ok=False, label="Program ended")
        if constraint.months and self.on.month not in constraint.months:
            return _Status(
                ok=False,
                variant="seasonal",
                label="Seasonal (not active now)",
                next_eligible=self._next(constraint),
            )
        if not date_matches(constraint, self.on):
            return _Status(ok=False, label="Not today", next_eligible=self._next(constraint))

        return _Status(ok=True)

    @staticmethod
    def _label(item: EligibilityItem) -> str:
        catalog_item = get_catalog_item(item.type)
        return catalog_item.label if catalog_item else item.type.value

    # ── rows ──────────────────────────────────────────────────────────────

    def _open_status(self, rule: DiscountDefinition) -> _Status:
        """Status of a qualifying rule given the museum's schedule for the day"""
        if parse_opening_hours(self.hours) and not is_open_on_day(self.hours, day_of_week(self.on)):
            return _Status(
                ok=True,
                label="Not today (museum closed)",
                next_eligible=self._next(rule.date_constraint),
            )
        if rule.requires_reservation:
            return _Status(ok=True, variant="info", label="Reserve in advance")
        return _Status(ok=True, variant="valid", label="Valid now")

    def evaluate(self, rule: DiscountDefinition, base_price: Optional[float]) -> DiscountRow:
        match = self.match_types(rule)
        if not match.ok:
            status = _Status(ok=False, label=match.reason or "Not eligible")
        else:
            status = self.check_time(rule, match)
            if status.ok:
                status = self._open_status(rule)

        if base_price is None:
            your_price = None
        elif status.ok:
            your_price = rule.value.apply(base_price)
        else:
            your_price = base_price

        return DiscountRow(
            id=rule.id,
            name=rule.display_name,
            icon=rule.icon,
            description=rule.description,
            qualifies=status.ok,
            your_price=your_price,
            base_price=base_price,
            status_variant=status.variant,
            status_label=status.label,
            note=status.note or rule.note,
            next_eligible=status.next_eligible.isoformat() if status.next_eligible else None,
        )


def compute_discount_rows(
    entry: Optional[TicketRuleEntry],
    *,
    eligibilities: Iterable[EligibilityItem],
    base_price: Optional[float],
    ticket_category: str,
    now: Union[date, datetime],
    hours: Optional[str] = None,
    museum_id: Optional[str] = None,
    home: Optional[UserLocation] = None
) -> List[DiscountRow]:
    """
    Evaluate every discount definition of a museum

    Args:
        entry: The museum's ticket-rule entry, None when it has no configuration
        eligibilities: The user's eligibility items
        base_price: Base price of the ticket category (None if unknown)
        ticket_category: Ticket category id, e.g. "adult"
        now: Evaluation date (or datetime)
        hours: Museum opening-hours text
        museum_id: Museum id, used by membership rules
        home: The user's profile location, used by residency rules

    Returns:
        One row per definition applicable to the category, in declaration
        order. No rows when the museum has no configuration.
    """
    if entry is None:
        return []

    evaluator = DiscountRuleEvaluator(eligibilities, as_date(now), museum_id=museum_id, hours=hours, home=home)
    rows = []
    for rule in entry.discounts:
        if not rule.applies_to_category(ticket_category):
            continue
        try:
            rows.append(evaluator.evaluate(rule, base_price))
        except (ValueError, TypeError, KeyError, AttributeError) as e:
            logger.warning(f"Could not evaluate discount '{rule.id}' for museum {museum_id}: {e}")
            rows.append(DiscountRow(
                id=rule.id,
                name=rule.display_name,
                icon=rule.icon,
                description=rule.description,
                qualifies=False,
                your_price=base_price,
                base_price=base_price,
                status_variant="info",
                status_label="Could not evaluate",
                note="This discount could not be checked; verify at the venue",
            ))
    return rows


def best_price(rows: Iterable[DiscountRow], base_price: Optional[float]) -> PriceResult:
    """
    Cheapest price over qualifying rows

    The base price (with no savings) when nothing qualifies; unknown when the
    base price itself is unknown.
    """
    if base_price is None:
        return PriceResult.unknown("No base price for this ticket category")

    qualifying = [r for r in rows if r.qualifies and r.your_price is not None]
    if not qualifying:
        return PriceResult(price=base_price, savings=0.0, confidence="high")

    best = min(qualifying, key=lambda r: r.your_price)
    return PriceResult(
        price=best.your_price,
        savings=round(base_price - best.your_price, 2),
        notes=[best.note or best.name],
        applied_rule_ids=[best.id],
        confidence="low" if best.status_variant == "info" else "high",
    )


class MuseumPricing(BaseModel):
    """Evaluated pricing of one museum for one category and date"""
    rules_available: bool
    base_price: Optional[float] = None
    currency: str = "USD"
    pricing_notes: str = ""
    rows: List[DiscountRow] = Field(default_factory=list)
    best: PriceResult


def price_museum(
    museum_id: str,
    ticket_rules: Optional[TicketRules],
    *,
    eligibilities: Iterable[EligibilityItem],
    ticket_category: str,
    on: Union[date, datetime],
    hours: Optional[str] = None,
    home: Optional[UserLocation] = None
) -> MuseumPricing:
    """Look up a museum's rules and evaluate them; missing rules give an unknown price"""
    entry = (ticket_rules or {}).get(museum_id)
    if entry is None:
        return MuseumPricing(rules_available=False, best=PriceResult.unknown())

    base_price = entry.base_price_for(ticket_category)
    rows = compute_discount_rows(
        entry,
        eligibilities=eligibilities,
        base_price=base_price,
        ticket_category=ticket_category,
        now=on,
        hours=hours,
        museum_id=museum_id,
        home=home,
    )
    return MuseumPricing(
        rules_available=True,
        base_price=base_price,
        currency=entry.currency,
        pricing_notes=entry.pricing_notes,
        rows=rows,
        best=best_price(rows, base_price),
    )
