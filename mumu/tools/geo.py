"""Geographic helpers: distances, regions and stop centroids"""
import math
from typing import Iterable, List, Optional, Tuple

from ..models.museum import Museum
from ..models.visit import Stop

EARTH_RADIUS_KM = 6371.0

COUNTRY_REGION = {
    'United States': 'North America',
    'Canada': 'North America',
    'Mexico': 'North America',
    'United Kingdom': 'Europe',
    'France': 'Europe',
    'Germany': 'Europe',
    'Italy': 'Europe',
    'Spain': 'Europe',
    'Netherlands': 'Europe',
    'Austria': 'Europe',
    'Switzerland': 'Europe',
    'Belgium': 'Europe',
    'Denmark': 'Europe',
    'Sweden': 'Europe',
    'Norway': 'Europe',
    'Finland': 'Europe',
    'Ireland': 'Europe',
    'Portugal': 'Europe',
    'Greece': 'Europe',
    'Czech Republic': 'Europe',
    'Poland': 'Europe',
    'Hungary': 'Europe',
    'Russia': 'Europe',
    'Turkey': 'Europe',
    'Japan': 'Asia',
    'China': 'Asia',
    'South Korea': 'Asia',
    'India': 'Asia',
    'Taiwan': 'Asia',
    'Thailand': 'Asia',
    'Singapore': 'Asia',
    'Indonesia': 'Asia',
    'Malaysia': 'Asia',
    'Vietnam': 'Asia',
    'Philippines': 'Asia',
    'Israel': 'Asia',
    'Australia': 'Oceania',
    'New Zealand': 'Oceania',
    'Brazil': 'South America',
    'Argentina': 'South America',
    'Colombia': 'South America',
    'Chile': 'South America',
    'Peru': 'South America',
    'Egypt': 'Africa',
    'South Africa': 'Africa',
    'Morocco': 'Africa',
    'Nigeria': 'Africa',
    'Kenya': 'Africa',
    'UAE': 'Middle East',
    'Qatar': 'Middle East',
    'Saudi Arabia': 'Middle East',
}


def get_region(country: str) -> str:
    return COUNTRY_REGION.get(country, 'Other')


def haversine_km(lat1: float, lng1: float, lat2: float, lng2: float) -> float:
    """Great-circle distance in kilometers"""
    lat1, lng1, lat2, lng2 = map(math.radians, [lat1, lng1, lat2, lng2])
    dlat = lat2 - lat1
    dlng = lng2 - lng1
    a = math.sin(dlat / 2) ** 2 + math.cos(lat1) * math.cos(lat2) * math.sin(dlng / 2) ** 2
    return EARTH_RADIUS_KM * 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))


def _same(a: Optional[str], b: Optional[str]) -> bool:
    return (a or '').strip().lower() == (b or '').strip().lower()


def in_stop_area(museum: Museum, stop: Stop) -> bool:
    """
    Whether a museum lies in the administrative area a stop names

    Every level the stop gives must match, so "Springfield" with state
    "Illinois" does not pick up Springfield, Massachusetts.
    """
    if stop.label is None:
        return False
    if stop.city and not _same(museum.city, stop.city):
        return False
    if stop.state and not _same(museum.state, stop.state):
        return False
    if stop.country and not _same(museum.country, stop.country):
        return False
    if stop.region and not _same(get_region(museum.country), stop.region):
        return False
    return True


def resolve_stop_center(stop: Stop, museums: Iterable[Museum]) -> Optional[Tuple[float, float]]:
    """
    Representative center of a stop

    The centroid of the catalog museums inside the stop's area, at whatever
    granularity the stop gives (city, state, country or region). None when the
    catalog has no museum in that area.
    """
    members = [m for m in museums if in_stop_area(m, stop)]
    if not members:
        return None
    lat = sum(m.lat for m in members) / len(members)
    lng = sum(m.lng for m in members) / len(members)
    return lat, lng


def museums_near_stop(stop: Stop, museums: List[Museum]) -> List[Museum]:
    """Museums inside the stop's area or within its radius of the area centroid"""
    center = resolve_stop_center(stop, museums)
    if center is None:
        return []

    lat, lng = center
    return [
        m for m in museums
        if in_stop_area(m, stop) or haversine_km(lat, lng, m.lat, m.lng) <= stop.radius_km
    ]
