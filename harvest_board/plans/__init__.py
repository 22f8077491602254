"""Harvest plans and their enrichment against reference data."""

from harvest_board.plans.enrich import (
    build_received_bins_map,
    enrich_plan,
    format_bin_info,
    is_placeholder_plan,
    parse_placeholder_note,
)
from harvest_board.plans.search import search_plans
from harvest_board.plans.types import EnrichedPlan, Plan, PlanCard, parse_plans

__all__ = [
    "EnrichedPlan",
    "Plan",
    "PlanCard",
    "build_received_bins_map",
    "enrich_plan",
    "format_bin_info",
    "is_placeholder_plan",
    "parse_placeholder_note",
    "parse_plans",
    "search_plans",
]
