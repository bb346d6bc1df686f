"""Eligibility catalog and (de)serialization of the preferences `discounts` field"""
import json
import logging
from enum import Enum
from typing import Dict, Iterable, List, Optional
from pydantic import BaseModel, Field, ValidationError

from ..models.eligibility import EligibilityItem, EligibilityType

logger = logging.getLogger(__name__)


class DetailKind(str, Enum):
    """Which detail payload a catalog item collects"""
    SCHOOLS = "schools"
    LIBRARIES = "libraries"
    COMPANIES = "companies"
    CITIES = "cities"
    LOCATIONS = "locations"
    DATE_OF_BIRTH = "date_of_birth"
    MUSEUM_MEMBERSHIPS = "museum_memberships"


class CatalogItem(BaseModel):
    type: EligibilityType
    label: str
    icon: str
    description: str
    has_details: Optional[DetailKind] = None
    info_url: Optional[str] = None
    suggestions: List[str] = Field(default_factory=list)


class CatalogCategory(BaseModel):
    id: str
    label: str
    items: List[CatalogItem]


CITYPASS_CITIES = [
    'Atlanta',
    'Boston',
    'Chicago',
    'Dallas',
    'Denver',
    'Houston',
    'Los Angeles',
    'New York',
    'Orlando',
    'Philadelphia',
    'San Antonio',
    'San Diego',
    'San Francisco',
    'Seattle',
    'Southern California',
    'Tampa Bay',
    'Toronto',
]

ELIGIBILITY_CATALOG: List[CatalogCategory] = [
    CatalogCategory(id='financial', label='Financial Assistance', items=[
        CatalogItem(
            type=EligibilityType.SNAP_EBT,
            label='SNAP / EBT Card Holder | Museums for All',
            icon='🏛️',
            description='Free or reduced admission at 900+ museums nationwide',
            info_url='https://museums4all.org/',
        ),
    ]),
    CatalogCategory(id='bank', label='Bank & Cardholder Programs', items=[
        CatalogItem(
            type=EligibilityType.BOFA_MUSEUMS_ON_US,
            label='Bank of America Card Holder | Museum on US',
            icon='💳',
            description='Free admission on the first full weekend of each month',
            info_url='https://about.bankofamerica.com/en/making-an-impact/museums-on-us-partners',
        ),
    ]),
    CatalogCategory(id='citypass', label='City Tourism Passes', items=[
        CatalogItem(
            type=EligibilityType.CITY_PASS,
            label='CityPass',
            icon='🏙️',
            description='Bundled admission to top attractions in major cities',
            has_details=DetailKind.CITIES,
            info_url='https://www.citypass.com/',
            suggestions=CITYPASS_CITIES,
        ),
        CatalogItem(
            type=EligibilityType.CITY_ID,
            label='Municipal ID',
            icon='🪪',
            description='City ID card programs with free museum memberships',
            has_details=DetailKind.CITIES,
        ),
    ]),
    CatalogCategory(id='student', label='Student', items=[
        CatalogItem(
            type=EligibilityType.STUDENT,
            label='Student ID',
            icon='🎓',
            description='Student discount with valid school ID',
            has_details=DetailKind.SCHOOLS,
        ),
    ]),
    CatalogCategory(id='military', label='Military & Service', items=[
        CatalogItem(
            type=EligibilityType.MILITARY,
            label='Active Duty / Veteran',
            icon='🎖️',
            description='Military discount for active duty and veterans',
        ),
        CatalogItem(
            type=EligibilityType.BLUE_STAR,
            label='Blue Star Museums',
            icon='⭐',
            description='Free admission for active duty military families',
            info_url='https://www.arts.gov/bluestarmuseums',
        ),
    ]),
    CatalogCategory(id='library', label='Library & City Programs', items=[
        CatalogItem(
            type=EligibilityType.LIBRARY_PASS,
            label='Local Library Card Holder',
            icon='📚',
            description='Free or discounted passes through your library',
            has_details=DetailKind.LIBRARIES,
        ),
    ]),
    CatalogCategory(id='membership', label='Memberships & Reciprocity', items=[
        CatalogItem(
            type=EligibilityType.MUSEUM_MEMBERSHIP,
            label='Museum Member',
            icon='🎟️',
            description='Memberships at individual museums',
            has_details=DetailKind.MUSEUM_MEMBERSHIPS,
        ),
        CatalogItem(
            type=EligibilityType.ICOM,
            label='ICOM Member',
            icon='🌐',
            description='International Council of Museums membership',
            info_url='https://icom.museum/en/get-involved/become-a-member/',
        ),
        CatalogItem(
            type=EligibilityType.RECIPROCAL_MUSEUM,
            label='Reciprocal Museum Membership',
            icon='🔄',
            description='Reciprocal admission at partner museums',
        ),
        CatalogItem(
            type=EligibilityType.SCIENCE_RECIPROCITY,
            label='Science Center Reciprocity',
            icon='🔬',
            description='ASTC-style reciprocal science center admission',
        ),
    ]),
    CatalogCategory(id='employer', label='Employer Benefits', items=[
        CatalogItem(
            type=EligibilityType.EMPLOYER,
            label='Company Employee',
            icon='🏢',
            description='Employee benefits or corporate museum partnerships',
            has_details=DetailKind.COMPANIES,
        ),
    ]),
    CatalogCategory(id='age', label='Age-Based Discounts', items=[
        CatalogItem(
            type=EligibilityType.AGE_BASED,
            label='Age Eligibility (Child/Youth/Senior)',
            icon='🎂',
            description='Age-based discounts calculated from your date of birth',
            has_details=DetailKind.DATE_OF_BIRTH,
        ),
        CatalogItem(
            type=EligibilityType.SENIOR,
            label='Senior (65+)',
            icon='🧓',
            description='Senior admission with valid ID',
        ),
    ]),
    CatalogCategory(id='other', label='Other Common Audiences', items=[
        CatalogItem(
            type=EligibilityType.TEACHER,
            label='Teacher / Educator',
            icon='📝',
            description='Educator discount with valid ID',
        ),
        CatalogItem(
            type=EligibilityType.FIRST_RESPONDER,
            label='First Responder',
            icon='🚒',
            description='Discount for first responders',
        ),
        CatalogItem(
            type=EligibilityType.LOCAL_RESIDENT,
            label='Local Resident',
            icon='🏠',
            description='Discounts for local residents',
            has_details=DetailKind.LOCATIONS,
        ),
    ]),
]

ALL_CATALOG_ITEMS: List[CatalogItem] = [item for category in ELIGIBILITY_CATALOG for item in category.items]

_CATALOG_BY_TYPE: Dict[EligibilityType, CatalogItem] = {item.type: item for item in ALL_CATALOG_ITEMS}

# Values written by the old single-select discounts setting
LEGACY_DISCOUNT_MAPPING: Dict[str, EligibilityType] = {
    'Student (valid ID)': EligibilityType.STUDENT,
    'Bank of America (Museums on Us)': EligibilityType.BOFA_MUSEUMS_ON_US,
    'ICOM Member': EligibilityType.ICOM,
    'Museums for All': EligibilityType.SNAP_EBT,
    'Military (active/veteran)': EligibilityType.MILITARY,
}


def get_catalog_item(eligibility_type: EligibilityType) -> Optional[CatalogItem]:
    return _CATALOG_BY_TYPE.get(eligibility_type)


def serialize_eligibilities(items: Iterable[EligibilityItem]) -> List[str]:
    """
    Serialize eligibility items for the preferences `discounts` string[] column

    Args:
        items: Eligibility items, at most one per type

    Returns:
        One JSON document per item, in the given order

    Raises:
        ValueError: If two items share a type
    """
    seen = set()
    serialized = []
    for item in items:
        if item.type in seen:
            raise ValueError(f"Duplicate eligibility type: {item.type.value}")
        seen.add(item.type)
        serialized.append(item.model_dump_json(exclude_none=True))
    return serialized


def migrate_legacy_discount(value: str) -> Optional[EligibilityItem]:
    """Map a pre-structured discount label to an item; unknown labels are dropped"""
    eligibility_type = LEGACY_DISCOUNT_MAPPING.get(value.strip())
    if eligibility_type is None:
        return None
    return EligibilityItem(type=eligibility_type)


def deserialize_eligibilities(discounts: Optional[Iterable[str]]) -> List[EligibilityItem]:
    """
    Deserialize the preferences `discounts` column

    JSON objects are validated as EligibilityItem; plain strings go through the
    legacy lookup table. Invalid entries are dropped, and only the first item
    of each type is kept.
    """
    items: List[EligibilityItem] = []
    seen = set()

    for raw in discounts or []:
        try:
            parsed = json.loads(raw)
        except (TypeError, ValueError):
            parsed = None

        item: Optional[EligibilityItem]
        if isinstance(parsed, dict) and parsed.get("type"):
            try:
                item = EligibilityItem.model_validate(parsed)
            except ValidationError as e:
                logger.warning(f"Dropping invalid eligibility entry {raw!r}: {e.error_count()} error(s)")
                continue
        elif isinstance(raw, str):
            item = migrate_legacy_discount(raw)
            if item is None:
                logger.debug(f"Dropping unrecognized legacy discount {raw!r}")
                continue
        else:
            continue

        if item.type in seen:
            logger.warning(f"Ignoring duplicate eligibility of type {item.type.value}")
            continue
        seen.add(item.type)
        items.append(item)

    return items


def get_eligibility_display_label(item: EligibilityItem) -> str:
    """Catalog label plus any detail values, e.g. 'Student ID — UIC, DePaul'"""
    catalog_item = get_catalog_item(item.type)
    base_label = catalog_item.label if catalog_item else item.type.value

    details = []
    for values in (item.schools, item.libraries, item.companies, item.cities, item.locations):
        if values:
            details.append(', '.join(values))
    if item.museum_memberships:
        details.append(', '.join(m.museum_name or m.museum_id for m in item.museum_memberships))

    if details:
        return f"{base_label} — {'; '.join(details)}"
    return base_label
