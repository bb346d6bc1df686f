"""Supabase database utility functions and the visit repository"""
import logging
from abc import ABC, abstractmethod
from datetime import datetime, timezone
from typing import Optional, Dict, Any, List, Tuple
from pydantic import ValidationError as PydanticValidationError
from supabase import create_client, Client

from ..config import settings
from ..models.eligibility import EligibilityItem, UserLocation
from ..models.museum import Museum
from ..models.visit import Visit
from ..planner.orchestrator import duplicate_visit
from ..tools.eligibility_catalog import deserialize_eligibilities

logger = logging.getLogger(__name__)


class SupabaseClient:
    """Singleton Supabase client wrapper"""
    _instance: Optional[Client] = None

    @classmethod
    def get_client(cls) -> Client:
        """Get or create Supabase client instance"""
        if cls._instance is None:
            if not settings.supabase_configured:
                raise RuntimeError("SUPABASE_URL and SUPABASE_KEY must be set")
            cls._instance = create_client(
                supabase_url=settings.supabase_url,
                supabase_key=settings.supabase_key
            )
        return cls._instance


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class VisitRepository(ABC):
    """Storage of visit plans; the planning core never touches it"""

    @abstractmethod
    def create(self, visit: Visit) -> Visit:
        ...

    @abstractmethod
    def update(self, visit_id: str, updates: Dict[str, Any]) -> Optional[Visit]:
        ...

    @abstractmethod
    def delete(self, visit_id: str) -> bool:
        ...

    @abstractmethod
    def list(self) -> List[Visit]:
        ...

    @abstractmethod
    def get(self, visit_id: str) -> Optional[Visit]:
        ...

    def save(self, visit: Visit) -> Visit:
        """Replace a stored visit wholesale (used to attach generated results)"""
        updated = self.update(visit.id, visit.model_dump(exclude={"id", "created_at"}))
        if updated is None:
            raise KeyError(visit.id)
        return updated

    def duplicate(self, visit_id: str) -> Optional[Visit]:
        """
        Copy a visit under a new id with its generated results cleared

        Returns:
            The stored copy, or None if the source visit does not exist
        """
        source = self.get(visit_id)
        if source is None:
            return None
        return self.create(duplicate_visit(source, _utcnow()))


class InMemoryVisitRepository(VisitRepository):
    """Visit repository kept in process memory, newest first"""

    def __init__(self):
        self._visits: Dict[str, Visit] = {}

    def create(self, visit: Visit) -> Visit:
        now = _utcnow()
        stored = visit.model_copy(update={
            "created_at": visit.created_at or now,
            "updated_at": visit.updated_at or now,
        })
        self._visits = {stored.id: stored, **self._visits}
        return stored

    def update(self, visit_id: str, updates: Dict[str, Any]) -> Optional[Visit]:
        current = self._visits.get(visit_id)
        if current is None:
            return None
        merged = current.model_dump()
        merged.update(updates)
        merged["updated_at"] = updates.get("updated_at") or _utcnow()
        stored = Visit.model_validate(merged)
        self._visits[visit_id] = stored
        return stored

    def delete(self, visit_id: str) -> bool:
        return self._visits.pop(visit_id, None) is not None

    def list(self) -> List[Visit]:
        return list(self._visits.values())

    def get(self, visit_id: str) -> Optional[Visit]:
        return self._visits.get(visit_id)


class SupabaseVisitRepository(VisitRepository):
    """
    Visit repository backed by the Supabase `visit_plans` table

    Rows hold the session id, the visit id and the full visit as JSON in `data`.
    """

    TABLE_NAME = "visit_plans"

    def __init__(self, session_id: str, client: Optional[Client] = None):
        self.session_id = session_id
        self.client = client or SupabaseClient.get_client()

    def _row(self, visit: Visit) -> Dict[str, Any]:
        return {
            "id": visit.id,
            "session_id": self.session_id,
            "data": visit.model_dump(mode="json"),
            "updated_at": visit.updated_at.isoformat() if visit.updated_at else None,
        }

    @staticmethod
    def _visit(row: Dict[str, Any]) -> Optional[Visit]:
        try:
            return Visit.model_validate(row["data"])
        except (KeyError, PydanticValidationError) as e:
            logger.error(f"Skipping unreadable visit row {row.get('id')}: {e}")
            return None

    def create(self, visit: Visit) -> Visit:
        now = _utcnow()
        visit = visit.model_copy(update={
            "created_at": visit.created_at or now,
            "updated_at": visit.updated_at or now,
        })
        result = self.client.table(self.TABLE_NAME).insert(self._row(visit)).execute()

        if not result.data:
            raise Exception("Failed to create visit")
        return visit

    def update(self, visit_id: str, updates: Dict[str, Any]) -> Optional[Visit]:
        current = self.get(visit_id)
        if current is None:
            return None

        merged = current.model_dump()
        merged.update(updates)
        merged["updated_at"] = updates.get("updated_at") or _utcnow()
        visit = Visit.model_validate(merged)

        result = self.client.table(self.TABLE_NAME)\
            .update(self._row(visit))\
            .eq('id', visit_id)\
            .eq('session_id', self.session_id)\
            .execute()

        if not result.data:
            raise Exception("Failed to update visit")
        return visit

    def delete(self, visit_id: str) -> bool:
        if self.get(visit_id) is None:
            return False

        self.client.table(self.TABLE_NAME)\
            .delete()\
            .eq('id', visit_id)\
            .eq('session_id', self.session_id)\
            .execute()
        return True

    def list(self) -> List[Visit]:
        result = self.client.table(self.TABLE_NAME)\
            .select('*')\
            .eq('session_id', self.session_id)\
            .order('updated_at', desc=True)\
            .execute()

        visits = [self._visit(row) for row in result.data or []]
        return [v for v in visits if v is not None]

    def get(self, visit_id: str) -> Optional[Visit]:
        result = self.client.table(self.TABLE_NAME)\
            .select('*')\
            .eq('id', visit_id)\
            .eq('session_id', self.session_id)\
            .execute()

        if result.data:
            return self._visit(result.data[0])
        return None


def get_museums(client: Optional[Client] = None) -> List[Museum]:
    """
    Load the museum catalog from the `museums` table

    Rows that fail validation are logged and skipped.

    Returns:
        Museums sorted by name
    """
    client = client or SupabaseClient.get_client()
    result = client.table('museums').select('*').execute()

    museums = []
    for row in result.data or []:
        try:
            museums.append(Museum.model_validate(row))
        except PydanticValidationError as e:
            logger.warning(f"Skipping museum row {row.get('museum_id')}: {e.error_count()} error(s)")
    return sorted(museums, key=lambda m: m.name)


def parse_user_preferences(row: Optional[Dict[str, Any]]) -> Tuple[List[EligibilityItem], UserLocation]:
    """Eligibility items and home location from a `user_preferences` row"""
    if not row:
        return [], UserLocation()
    eligibilities = deserialize_eligibilities(row.get('discounts') or [])
    home = UserLocation(
        city=row.get('location_city') or '',
        region=row.get('location_region') or '',
        country=row.get('location_country') or ''
    )
    return eligibilities, home


def get_user_eligibilities(
    session_id: str,
    client: Optional[Client] = None
) -> Tuple[List[EligibilityItem], UserLocation]:
    """
    Get a session's eligibility items and home location

    Args:
        session_id: Anonymous session id owning the preferences row

    Returns:
        (eligibility items, home location); empty when the session has no preferences
    """
    client = client or SupabaseClient.get_client()
    result = client.table('user_preferences')\
        .select('discounts, location_city, location_region, location_country')\
        .eq('session_id', session_id)\
        .execute()

    return parse_user_preferences(result.data[0] if result.data else None)
