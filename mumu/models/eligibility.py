"""Eligibility (discount program) model stored in user preferences"""
from datetime import date
from enum import Enum
from typing import Optional, List
from pydantic import BaseModel, Field


class EligibilityType(str, Enum):
    """Discount / benefit programs a user can claim"""
    SNAP_EBT = "snap_ebt"
    BOFA_MUSEUMS_ON_US = "bofa_museums_on_us"
    CITY_PASS = "city_pass"
    STUDENT = "student"
    MILITARY = "military"
    BLUE_STAR = "blue_star"
    LIBRARY_PASS = "library_pass"
    CITY_ID = "city_id"
    ICOM = "icom"
    RECIPROCAL_MUSEUM = "reciprocal_museum"
    SCIENCE_RECIPROCITY = "science_reciprocity"
    EMPLOYER = "employer"
    TEACHER = "teacher"
    FIRST_RESPONDER = "first_responder"
    SENIOR = "senior"
    AGE_BASED = "age_based"
    LOCAL_RESIDENT = "local_resident"
    MUSEUM_MEMBERSHIP = "museum_membership"


class MuseumMembership(BaseModel):
    """Membership of a single museum"""
    museum_id: str
    museum_name: Optional[str] = None
    expires_on: Optional[str] = Field(None, description="ISO date (YYYY-MM-DD)")


class EligibilityItem(BaseModel):
    """
    One claimed eligibility, at most one per type.

    Dates stay as ISO text so a malformed value only disqualifies the rules
    that depend on it instead of failing the whole profile.
    """
    model_config = {"extra": "ignore", "use_enum_values": False}

    type: EligibilityType
    schools: Optional[List[str]] = None
    libraries: Optional[List[str]] = None
    companies: Optional[List[str]] = None
    cities: Optional[List[str]] = None
    locations: Optional[List[str]] = None
    date_of_birth: Optional[str] = None
    museum_memberships: Optional[List[MuseumMembership]] = None
    expires_on: Optional[str] = None
    lifetime: Optional[bool] = None


class UserLocation(BaseModel):
    """Home location from the user's profile (location_* preference columns)"""
    city: str = ""
    region: str = ""
    country: str = ""


def parse_iso_date(value: Optional[str]) -> Optional[date]:
    """Parse a YYYY-MM-DD (or longer ISO timestamp) string, None if it cannot be read"""
    if not value or not isinstance(value, str):
        return None
    try:
        return date.fromisoformat(value.strip()[:10])
    except ValueError:
        return None


def item_validity(item: EligibilityItem, on: date) -> str:
    """
    Classify an item's time validity on a date

    Returns:
        "lifetime", "active" (expires_on >= on), "expired", or "undated"
        when neither expires_on nor lifetime is usable
    """
    if item.lifetime:
        return "lifetime"
    expires = parse_iso_date(item.expires_on)
    if expires is None:
        return "undated"
    return "active" if expires >= on else "expired"
