"""Tests for plan generation and visit helpers"""
from datetime import date, datetime, timezone

import pytest

from mumu.models.visit import DateMode, Stop, Visit
from mumu.planner import apply_plan, duplicate_visit, generate_plan, generate_visit_name
from mumu.validators.input_validator import ValidationError, validate_visit


def test_generate_plan(now, chicago_visit, catalog, ticket_rules, snap_lifetime):
    plan = generate_plan(chicago_visit, catalog, now, eligibilities=[snap_lifetime], ticket_rules=ticket_rules)

    assert plan.generated_at == now
    assert len(plan.itinerary) == 3
    assert {i.museum.museum_id for i in plan.ticket_plan} == {
        m.museum.museum_id for day in plan.itinerary for m in day.museums
    }
    assert plan.totals.priced_count + plan.totals.unknown_count == len(plan.ticket_plan)


def test_generate_plan_is_deterministic(now, chicago_visit, catalog, ticket_rules, snap_lifetime):
    first = generate_plan(chicago_visit, catalog, now, eligibilities=[snap_lifetime], ticket_rules=ticket_rules)
    second = generate_plan(chicago_visit, catalog, now, eligibilities=[snap_lifetime], ticket_rules=ticket_rules)
    assert first == second


def test_generate_plan_accepts_a_date(chicago_visit, catalog):
    plan = generate_plan(chicago_visit, catalog, date(2026, 3, 4))
    assert plan.generated_at == datetime(2026, 3, 4, tzinfo=timezone.utc)


def test_stop_without_location_is_rejected(now, catalog):
    visit = Visit(date_mode=DateMode.FLEXIBLE, stops=[Stop()])
    with pytest.raises(ValidationError):
        generate_plan(visit, catalog, now)


def test_validate_visit(now, chicago_visit):
    assert validate_visit(chicago_visit, now.date()) == {"trip_duration_days": 3, "daily_budget_hours": 8}


def test_apply_plan_replaces_results_together(now, chicago_visit, catalog):
    plan = generate_plan(chicago_visit, catalog, now)
    visit = apply_plan(chicago_visit, plan)

    assert visit.is_generated
    assert visit.generated_at == now
    assert visit.itinerary == plan.itinerary
    assert visit.ticket_plan == plan.ticket_plan
    assert visit.name == "Chicago (Mar 5–Mar 7)"


def test_apply_plan_keeps_a_given_name(now, chicago_visit, catalog):
    named = chicago_visit.model_copy(update={"name": "Spring break"})
    assert apply_plan(named, generate_plan(named, catalog, now)).name == "Spring break"


def test_generate_visit_name():
    visit = Visit(stops=[Stop(city="Chicago"), Stop(state="Wisconsin"), Stop(city="Chicago")])
    assert generate_visit_name(visit) == "Chicago · Wisconsin"
    assert generate_visit_name(Visit()) == "New Visit"


def test_duplicate_clears_results(now, chicago_visit, catalog):
    generated = apply_plan(chicago_visit, generate_plan(chicago_visit, catalog, now))
    copy = duplicate_visit(generated, now)

    assert copy.id != generated.id
    assert copy.name == f"{generated.name} (copy)"
    assert copy.stops == generated.stops
    assert copy.generated_at is None
    assert copy.itinerary is None
    assert copy.ticket_plan is None
