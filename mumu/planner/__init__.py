"""
Visit planning core.

Pure, synchronous computations over already-fetched data: the museum
catalog, the user's eligibility items and the ticket-rule table. Nothing in
this package performs I/O; `now` is always passed in.

Usage:
    from mumu.planner import generate_plan, apply_plan
    plan = generate_plan(visit, museums, now, eligibilities=items, ticket_rules=rules)
    visit = apply_plan(visit, plan)
"""

from mumu.planner.discounts import (
    DiscountRuleEvaluator,
    MuseumPricing,
    best_price,
    compute_discount_rows,
    next_eligible_date,
    price_museum,
)

from mumu.planner.itinerary import (
    build_itinerary,
    gather_candidates,
    rank_candidates,
    suggested_duration,
)

from mumu.planner.ticket_plan import (
    build_ticket_plan,
    summarize_ticket_plan,
)

from mumu.planner.orchestrator import (
    GeneratedPlan,
    apply_plan,
    duplicate_visit,
    generate_plan,
    generate_visit_name,
)

__all__ = [
    # Discount rule evaluator
    "DiscountRuleEvaluator",
    "MuseumPricing",
    "best_price",
    "compute_discount_rows",
    "next_eligible_date",
    "price_museum",

    # Itinerary builder
    "build_itinerary",
    "gather_candidates",
    "rank_candidates",
    "suggested_duration",

    # Ticket plan aggregator
    "build_ticket_plan",
    "summarize_ticket_plan",

    # Orchestration
    "GeneratedPlan",
    "apply_plan",
    "duplicate_visit",
    "generate_plan",
    "generate_visit_name",
]
