"""Harvest planner board - day-bucket scheduling engine.

This package provides:
- Reference data ingestion and lookup indexes (blocks, contractors, commodities, pools)
- Plan enrichment into display-ready cards
- Deterministic per-day buckets for a board week
- Optimistic drag moves with rollback on persistence failure
- Stable commodity color assignment
"""

from harvest_board.board import (
    DragReassignmentController,
    MoveRequest,
    MoveResult,
    MoveState,
    PlanPersistence,
    schedule,
)
from harvest_board.colors import CommodityColorRegistry
from harvest_board.plans import EnrichedPlan, Plan, PlanCard, enrich_plan
from harvest_board.reference import ReferenceIndex, build_reference_index

__version__ = "0.1.0"

__all__ = [
    "CommodityColorRegistry",
    "DragReassignmentController",
    "EnrichedPlan",
    "MoveRequest",
    "MoveResult",
    "MoveState",
    "Plan",
    "PlanCard",
    "PlanPersistence",
    "ReferenceIndex",
    "build_reference_index",
    "enrich_plan",
    "schedule",
]
