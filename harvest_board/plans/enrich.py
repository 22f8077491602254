"""Plan enrichment: join a plan against a reference index snapshot.

Enrichment is a pure function of (plan, index). Missing references never
raise; display fields fall back to the raw block id or to empty strings so
sorting and rendering need no null checks.
"""

import re
from collections.abc import Iterable, Mapping
from typing import Any

from harvest_board.dates import to_day_key
from harvest_board.plans.types import EnrichedPlan, Plan, PlanCard
from harvest_board.reference.index import ReferenceIndex, normalize_entries
from harvest_board.reference.models import BinsReceived, Block, Contractor, key_str

PLACEHOLDER_SOURCE_DATABASE = "PLACEHOLDER"
PLACEHOLDER_BLOCK_ID = "999999"

# Growers not yet in the source database are recorded in the plan notes
PLACEHOLDER_NOTE_PATTERN = re.compile(r"PLACEHOLDER GROWER: ([^|]+) \| COMMODITY: ([^\n]+)")

ReceivedBinsMap = Mapping[tuple[str, str], float]


def build_received_bins_map(bins_received: Iterable[BinsReceived | Mapping[str, Any]] | None) -> dict[tuple[str, str], float]:
    """Total received bins per (block id, day key).

    Args:
        bins_received: Raw receiving records

    Returns:
        Mapping of (block id, day key) to summed quantity
    """
    totals: dict[tuple[str, str], float] = {}
    for record in normalize_entries(BinsReceived, bins_received):
        key = (record.block_id, to_day_key(record.receive_date))
        totals[key] = totals.get(key, 0) + (record.quantity or 0)
    return totals


def is_placeholder_plan(plan: Plan) -> bool:
    return (
        plan.grower_block_source_database == PLACEHOLDER_SOURCE_DATABASE
        and key_str(plan.grower_block_id) == PLACEHOLDER_BLOCK_ID
    )


def parse_placeholder_note(notes: str | None) -> tuple[str, str]:
    """Extract (grower name, commodity name) from placeholder plan notes.

    Returns:
        Tuple of names, empty strings when the note is absent
    """
    if not notes:
        return ("", "")
    match = PLACEHOLDER_NOTE_PATTERN.search(notes)
    if match is None:
        return ("", "")
    return (match.group(1).strip(), match.group(2).strip())


def resolve_commodity_idx(block: Block | None, plan: Plan) -> str | None:
    """Commodity index from the block if present, else from the plan."""
    if block is not None and block.commodity_idx is not None:
        return block.commodity_idx
    return plan.commodity_idx


def _estimated_bins(block: Block | None, day_key: str, received_bins: ReceivedBinsMap | None) -> float | None:
    if block is None:
        return None
    if received_bins:
        # Receivings reference either the block record id or its block index
        for block_ref in (block.block_id, block.block_idx):
            if block_ref is None:
                continue
            received = received_bins.get((block_ref, day_key))
            if received is not None:
                return received
    return block.acres


def _contractor_name(contractor: Contractor | None) -> str:
    return contractor.name if contractor is not None else ""


def enrich_plan(
    plan: Plan,
    index: ReferenceIndex,
    *,
    received_bins: ReceivedBinsMap | None = None,
) -> EnrichedPlan:
    """Join a plan with its block, commodity, contractors and pool.

    Args:
        plan: Plan to enrich (not modified)
        index: Reference index snapshot
        received_bins: Optional totals from build_received_bins_map

    Returns:
        EnrichedPlan wrapping the original plan and its card
    """
    block = index.block_for(plan.grower_block_source_database, plan.grower_block_id)
    commodity_idx = resolve_commodity_idx(block, plan)

    labor = index.contractor_for(plan.contractor_id)
    forklift = index.contractor_for(plan.forklift_contractor_id)
    hauler = index.contractor_for(plan.hauler_id)

    placeholder = is_placeholder_plan(plan)
    placeholder_grower, placeholder_commodity = parse_placeholder_note(plan.notes_general) if placeholder else ("", "")

    raw_block_id = key_str(plan.grower_block_id) or ""
    block_name = placeholder_grower or (block.name if block is not None and block.name else raw_block_id)
    grower_name = placeholder_grower or (block.grower_name if block is not None and block.grower_name else "")
    commodity_name = placeholder_commodity or index.commodity_name(commodity_idx)

    card = PlanCard(
        block_name=block_name,
        block_id=block.block_id if block is not None else None,
        grower_name=grower_name,
        commodity_name=commodity_name,
        commodity_idx=commodity_idx,
        labor_contractor=labor,
        forklift_contractor=forklift,
        hauler=hauler,
        labor_contractor_name=_contractor_name(labor),
        forklift_contractor_name=_contractor_name(forklift),
        hauler_name=_contractor_name(hauler),
        pool_name=index.pool_name(plan.pool_id),
        estimated_bins=_estimated_bins(block, plan.day_key, received_bins),
        is_placeholder=placeholder,
    )
    return EnrichedPlan(plan=plan, card=card)


def _format_count(value: int | float) -> str:
    if isinstance(value, int) or float(value).is_integer():
        return str(int(value))
    return f"{value:.2f}".rstrip("0").rstrip(".")


def format_bin_info(planned: int | float | None, actual: int | float | None, received: int | float | None) -> str:
    """Summarize bin counts for a card, e.g. ``Planned: 10 · Actual: 8``."""
    parts = []
    if planned is not None:
        parts.append(f"Planned: {_format_count(planned)}")
    if actual is not None:
        parts.append(f"Actual: {_format_count(actual)}")
    if received is not None:
        parts.append(f"Received: {_format_count(received)}")
    return " · ".join(parts)
