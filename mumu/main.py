"""
mumu visit planner API

Thin HTTP shell around the planning core:
- Visit plans CRUD through an injected VisitRepository
  (Supabase when configured, in-memory otherwise)
- Generate: itinerary + ticket plan attached to the visit in one update
- Discount rows for a museum / ticket category / date

Run:
    uvicorn mumu.main:app --reload
"""
import logging
from datetime import datetime, timezone
from functools import lru_cache
from typing import Any, Dict, List, Optional, Tuple

from fastapi import Depends, FastAPI, Header, HTTPException
from pydantic import ValidationError as PydanticValidationError

from .config import configure_logging, settings
from .models.eligibility import EligibilityItem, UserLocation
from .models.museum import Museum
from .models.visit import Visit
from .planner import apply_plan, generate_plan, price_museum
from .schemas.request import DiscountRowsRequest, EligibilityContext, GeneratePlanRequest
from .schemas.response import DiscountRowsResponse, ErrorResponse, GeneratePlanResponse
from .schemas.ticket_rules import TicketRules
from .tools.eligibility_catalog import CatalogCategory, ELIGIBILITY_CATALOG, deserialize_eligibilities
from .utils.database import (
    InMemoryVisitRepository,
    SupabaseVisitRepository,
    VisitRepository,
    get_museums,
    get_user_eligibilities,
)
from .utils.ticket_rules import load_ticket_rules
from .validators.input_validator import ValidationError

configure_logging()
logger = logging.getLogger(__name__)

app = FastAPI(
    title="mumu visit planner API",
    description="Museum visit itineraries and ticket plans",
    version="1.0.0"
)

_memory_repository = InMemoryVisitRepository()


def get_repository(x_session_id: Optional[str] = Header(None)) -> VisitRepository:
    """Supabase-backed repository for a session, or the process-wide in-memory one"""
    if settings.supabase_configured and x_session_id:
        return SupabaseVisitRepository(x_session_id)
    return _memory_repository


@lru_cache
def get_catalog() -> List[Museum]:
    if not settings.supabase_configured:
        logger.warning("Supabase is not configured; the museum catalog is empty")
        return []
    return get_museums()


@lru_cache
def get_ticket_rules() -> TicketRules:
    return load_ticket_rules()


def _error(status_code: int, error: str, message: str, details: Optional[dict] = None) -> HTTPException:
    return HTTPException(
        status_code=status_code,
        detail={
            "error": error,
            "message": message,
            "details": details or {}
        }
    )


def _not_found(visit_id: str) -> HTTPException:
    return _error(404, "NotFound", "Visit not found", {"visit_id": visit_id})


def _now(context: EligibilityContext) -> datetime:
    return context.now or datetime.now(timezone.utc)


def _profile(
    context: EligibilityContext,
    session_id: Optional[str]
) -> Tuple[List[EligibilityItem], Optional[UserLocation]]:
    """Eligibility items and home from the request, else from the session's stored preferences"""
    if not context.discounts and settings.supabase_configured and session_id:
        return get_user_eligibilities(session_id)
    return deserialize_eligibilities(context.discounts), context.home


@app.get("/health")
async def health():
    """Health check endpoint"""
    return {"status": "healthy"}


@app.get("/eligibility/catalog", response_model=List[CatalogCategory])
async def eligibility_catalog():
    """Eligibility programs a user can add to their profile, grouped by category"""
    return ELIGIBILITY_CATALOG


@app.get("/visits", response_model=List[Visit])
async def list_visits(repository: VisitRepository = Depends(get_repository)):
    """List visit plans, newest first"""
    return repository.list()


@app.post("/visits", response_model=Visit, status_code=201)
async def create_visit(visit: Visit, repository: VisitRepository = Depends(get_repository)):
    """Create a visit plan"""
    return repository.create(visit)


@app.get("/visits/{visit_id}", response_model=Visit, responses={404: {"model": ErrorResponse}})
async def get_visit(visit_id: str, repository: VisitRepository = Depends(get_repository)):
    """Get a visit plan"""
    visit = repository.get(visit_id)
    if visit is None:
        raise _not_found(visit_id)
    return visit


@app.put(
    "/visits/{visit_id}",
    response_model=Visit,
    responses={400: {"model": ErrorResponse}, 404: {"model": ErrorResponse}}
)
async def update_visit(
    visit_id: str,
    updates: Dict[str, Any],
    repository: VisitRepository = Depends(get_repository)
):
    """
    Update fields of a visit plan

    Generated results are left as they are; run generate again to refresh them.
    """
    updates.pop("id", None)
    try:
        visit = repository.update(visit_id, updates)
    except PydanticValidationError as e:
        errors = [
            {"field": ".".join(str(part) for part in err["loc"]), "message": err["msg"]}
            for err in e.errors()
        ]
        raise _error(400, "ValidationError", "Invalid visit fields", {"errors": errors})
    if visit is None:
        raise _not_found(visit_id)
    return visit


@app.delete("/visits/{visit_id}", responses={404: {"model": ErrorResponse}})
async def delete_visit(visit_id: str, repository: VisitRepository = Depends(get_repository)):
    """Delete a visit plan and its generated results"""
    if not repository.delete(visit_id):
        raise _not_found(visit_id)
    return {"message": "Visit deleted successfully"}


@app.post(
    "/visits/{visit_id}/duplicate",
    response_model=Visit,
    status_code=201,
    responses={404: {"model": ErrorResponse}}
)
async def duplicate_visit(visit_id: str, repository: VisitRepository = Depends(get_repository)):
    """Copy a visit plan; the copy has no generated results"""
    visit = repository.duplicate(visit_id)
    if visit is None:
        raise _not_found(visit_id)
    return visit


@app.post(
    "/visits/{visit_id}/generate",
    response_model=GeneratePlanResponse,
    responses={400: {"model": ErrorResponse}, 404: {"model": ErrorResponse}}
)
async def generate_visit(
    visit_id: str,
    request: GeneratePlanRequest,
    repository: VisitRepository = Depends(get_repository),
    museums: List[Museum] = Depends(get_catalog),
    ticket_rules: TicketRules = Depends(get_ticket_rules),
    x_session_id: Optional[str] = Header(None)
):
    """
    Generate (or regenerate) the itinerary and ticket plan of a visit

    The three generated fields are written back in a single update.
    """
    visit = repository.get(visit_id)
    if visit is None:
        raise _not_found(visit_id)

    eligibilities, home = _profile(request, x_session_id)
    try:
        plan = generate_plan(
            visit,
            museums,
            _now(request),
            eligibilities=eligibilities,
            ticket_rules=ticket_rules,
            home=home,
        )
    except ValidationError as e:
        raise _error(400, "ValidationError", e.message, e.details)

    saved = repository.save(apply_plan(visit, plan))
    return GeneratePlanResponse(visit=saved, totals=plan.totals)


@app.post("/museums/{museum_id}/discounts", response_model=DiscountRowsResponse)
async def museum_discounts(
    museum_id: str,
    request: DiscountRowsRequest,
    museums: List[Museum] = Depends(get_catalog),
    ticket_rules: TicketRules = Depends(get_ticket_rules),
    x_session_id: Optional[str] = Header(None)
):
    """Evaluate every discount of a museum for the user's profile"""
    museum = next((m for m in museums if m.museum_id == museum_id), None)
    category = request.ticket_category or settings.default_ticket_category
    eligibilities, home = _profile(request, x_session_id)

    pricing = price_museum(
        museum_id,
        ticket_rules,
        eligibilities=eligibilities,
        ticket_category=category,
        on=_now(request),
        hours=museum.opening_hours if museum else None,
        home=home,
    )
    return DiscountRowsResponse(
        museum_id=museum_id,
        ticket_category=category,
        rules_available=pricing.rules_available,
        base_price=pricing.base_price,
        currency=pricing.currency,
        best_price=pricing.best,
        rows=pricing.rows,
    )
