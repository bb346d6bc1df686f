"""
Shared fixtures
===============
A small Chicago-area museum catalog, a ticket-rule table and fixed clocks.

Calendar anchors (2026): March 1 is a Sunday, so March 3 is a Tuesday,
March 4 a Wednesday and the first full weekend of March is the 7th/8th.
"""
from datetime import date, datetime, timezone

import pytest

from mumu.models.eligibility import EligibilityItem, EligibilityType
from mumu.models.museum import Museum
from mumu.models.visit import DateMode, PlanMode, Stop, Visit
from mumu.schemas.ticket_rules import TicketRuleEntry

TUESDAY = date(2026, 3, 3)
WEDNESDAY = date(2026, 3, 4)
MID_MONTH_WEDNESDAY = date(2026, 3, 18)


@pytest.fixture
def now():
    """Wednesday morning, March 4 2026"""
    return datetime(2026, 3, 4, 9, 0, tzinfo=timezone.utc)


@pytest.fixture
def art_institute():
    return Museum(
        museum_id="art-institute-of-chicago",
        name="Art Institute of Chicago",
        lat=41.8796,
        lng=-87.6237,
        city="Chicago",
        state="Illinois",
        country="United States",
        opening_hours="Mon 11-5; Thu 11-8; Fri-Sun 11-5",
        has_full_content=True,
    )


@pytest.fixture
def field_museum():
    return Museum(
        museum_id="field-museum",
        name="Field Museum",
        lat=41.8663,
        lng=-87.6170,
        city="Chicago",
        state="Illinois",
        country="United States",
        opening_hours="Mon-Sun 9-5",
    )


@pytest.fixture
def contemporary():
    return Museum(
        museum_id="mca-chicago",
        name="Museum of Contemporary Art Chicago",
        lat=41.8972,
        lng=-87.6217,
        city="Chicago",
        state="Illinois",
        country="United States",
        opening_hours="Tue 10-9; Wed-Sun 10-5",
        highlight=True,
    )


@pytest.fixture
def block_museum():
    """Evanston, outside Chicago proper but within 25 km; no hours on file"""
    return Museum(
        museum_id="block-museum",
        name="Block Museum of Art",
        lat=42.0519,
        lng=-87.6742,
        city="Evanston",
        state="Illinois",
        country="United States",
    )


@pytest.fixture
def milwaukee_art():
    return Museum(
        museum_id="milwaukee-art-museum",
        name="Milwaukee Art Museum",
        lat=43.0400,
        lng=-87.8970,
        city="Milwaukee",
        state="Wisconsin",
        country="United States",
        opening_hours="Tue-Sun 10-5",
    )


@pytest.fixture
def catalog(art_institute, field_museum, contemporary, block_museum, milwaukee_art):
    return [art_institute, field_museum, contemporary, block_museum, milwaukee_art]


@pytest.fixture
def ticket_rules():
    return {
        "art-institute-of-chicago": TicketRuleEntry.model_validate({
            "basePrices": {"adult": 32, "student": 26},
            "discounts": [
                {"id": "museums_for_all", "name": "Museums for All", "types": ["snap_ebt"], "value": "flat:3"},
                {
                    "id": "bofa_weekend",
                    "types": ["bofa_museums_on_us"],
                    "value": "free",
                    "dateConstraint": {"weekRule": "first_full_weekend"},
                },
            ],
        }),
        "field-museum": TicketRuleEntry.model_validate({
            "basePrice": 30,
            "rules": [{"id": "snap", "type": "snap_ebt", "value": "percent:50"}],
        }),
    }


@pytest.fixture
def snap_lifetime():
    return EligibilityItem(type=EligibilityType.SNAP_EBT, lifetime=True)


@pytest.fixture
def bofa_lifetime():
    return EligibilityItem(type=EligibilityType.BOFA_MUSEUMS_ON_US, lifetime=True)


@pytest.fixture
def chicago_stop():
    return Stop(city="Chicago", state="Illinois", country="United States", radius_km=25)


@pytest.fixture
def chicago_visit(chicago_stop):
    return Visit(
        id="visit-1",
        date_mode=DateMode.FIXED,
        start_date=date(2026, 3, 5),
        end_date=date(2026, 3, 7),
        stops=[chicago_stop],
        mode=PlanMode.MONEY,
    )
