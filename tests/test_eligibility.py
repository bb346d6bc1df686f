"""Tests for the eligibility model and the preferences (de)serialization"""
import json
from datetime import date

import pytest

from mumu.models.eligibility import (
    EligibilityItem,
    EligibilityType,
    MuseumMembership,
    item_validity,
    parse_iso_date,
)
from mumu.tools.eligibility_catalog import (
    ALL_CATALOG_ITEMS,
    LEGACY_DISCOUNT_MAPPING,
    deserialize_eligibilities,
    get_catalog_item,
    get_eligibility_display_label,
    serialize_eligibilities,
)


@pytest.fixture
def profile():
    return [
        EligibilityItem(type=EligibilityType.SNAP_EBT, lifetime=True),
        EligibilityItem(type=EligibilityType.STUDENT, schools=["UIC", "DePaul"], expires_on="2026-06-30"),
        EligibilityItem(type=EligibilityType.AGE_BASED, date_of_birth="1958-02-11"),
        EligibilityItem(
            type=EligibilityType.MUSEUM_MEMBERSHIP,
            museum_memberships=[MuseumMembership(museum_id="field-museum", museum_name="Field Museum", expires_on="2026-12-31")],
        ),
        EligibilityItem(type=EligibilityType.LOCAL_RESIDENT, locations=["Chicago, Illinois"]),
    ]


def test_round_trip(profile):
    assert deserialize_eligibilities(serialize_eligibilities(profile)) == profile


def test_serialized_items_are_json_documents(profile):
    serialized = serialize_eligibilities(profile)
    assert len(serialized) == len(profile)
    assert json.loads(serialized[0]) == {"type": "snap_ebt", "lifetime": True}


def test_serialize_rejects_duplicate_types():
    items = [
        EligibilityItem(type=EligibilityType.STUDENT, lifetime=True),
        EligibilityItem(type=EligibilityType.STUDENT, expires_on="2027-01-01"),
    ]
    with pytest.raises(ValueError):
        serialize_eligibilities(items)


def test_legacy_strings_are_migrated():
    items = deserialize_eligibilities(["Student (valid ID)", "Museums for All"])
    assert [i.type for i in items] == [EligibilityType.STUDENT, EligibilityType.SNAP_EBT]


def test_unknown_legacy_strings_and_invalid_json_are_dropped():
    items = deserialize_eligibilities([
        "Costco member",
        '{"type": "not_a_program"}',
        '{"type": "military", "lifetime": true}',
        "{broken",
    ])
    assert items == [EligibilityItem(type=EligibilityType.MILITARY, lifetime=True)]


def test_duplicate_types_keep_the_first():
    items = deserialize_eligibilities([
        '{"type": "student", "schools": ["UIC"]}',
        "Student (valid ID)",
    ])
    assert len(items) == 1
    assert items[0].schools == ["UIC"]


def test_empty_discounts():
    assert deserialize_eligibilities(None) == []
    assert deserialize_eligibilities([]) == []


def test_every_type_has_a_catalog_item():
    assert {item.type for item in ALL_CATALOG_ITEMS} == set(EligibilityType)
    assert set(LEGACY_DISCOUNT_MAPPING.values()) <= set(EligibilityType)


def test_display_label_includes_details():
    item = EligibilityItem(type=EligibilityType.STUDENT, schools=["UIC", "DePaul"])
    assert get_eligibility_display_label(item) == "Student ID — UIC, DePaul"
    assert get_eligibility_display_label(EligibilityItem(type=EligibilityType.ICOM)) == "ICOM Member"
    assert get_catalog_item(EligibilityType.ICOM).info_url


@pytest.mark.parametrize("value,expected", [
    ("2026-03-04", date(2026, 3, 4)),
    ("2026-03-04T10:00:00Z", date(2026, 3, 4)),
    ("03/04/2026", None),
    ("", None),
    (None, None),
])
def test_parse_iso_date(value, expected):
    assert parse_iso_date(value) == expected


def test_item_validity():
    on = date(2026, 3, 4)
    assert item_validity(EligibilityItem(type=EligibilityType.TEACHER, lifetime=True), on) == "lifetime"
    assert item_validity(EligibilityItem(type=EligibilityType.TEACHER, expires_on="2026-03-04"), on) == "active"
    assert item_validity(EligibilityItem(type=EligibilityType.TEACHER, expires_on="2026-03-03"), on) == "expired"
    assert item_validity(EligibilityItem(type=EligibilityType.TEACHER), on) == "undated"
    assert item_validity(EligibilityItem(type=EligibilityType.TEACHER, expires_on="soon"), on) == "undated"
