"""Weekly board: day-bucket scheduling and drag moves."""

from harvest_board.board.moves import (
    DragReassignmentController,
    MoveCommand,
    MoveRequest,
    MoveResult,
    MoveState,
)
from harvest_board.board.persistence import PlanPersistence, extract_error_message
from harvest_board.board.scheduler import (
    Buckets,
    bucket_plan_ids,
    collect_commodity_names,
    schedule,
    sort_bucket,
)

__all__ = [
    "Buckets",
    "DragReassignmentController",
    "MoveCommand",
    "MoveRequest",
    "MoveResult",
    "MoveState",
    "PlanPersistence",
    "bucket_plan_ids",
    "collect_commodity_names",
    "extract_error_message",
    "schedule",
    "sort_bucket",
]
