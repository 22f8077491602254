"""Day-bucket scheduling for the weekly board.

Buckets are a pure projection of the canonical plan list. ``schedule`` is
idempotent and is the authority used to rebuild state after a failed move.

Ordering within a day:
- Commodity display name, ascending, case- and accent-insensitive
- Planned bins, descending, so larger jobs surface first within a commodity
- Original order for full ties (stable sort)
"""

import unicodedata
from collections.abc import Iterable, Mapping, Sequence
from typing import Any

from loguru import logger

from harvest_board.plans.enrich import build_received_bins_map, enrich_plan
from harvest_board.plans.types import EnrichedPlan, Plan
from harvest_board.reference.index import ReferenceIndex
from harvest_board.reference.models import BinsReceived

Buckets = dict[str, list[EnrichedPlan]]


def collation_key(name: str) -> tuple[str, str]:
    """Accent-insensitive primary key with the casefolded name as tie-break.

    Orders "Évora" before "Fuji" without touching the process locale.
    """
    folded = name.casefold()
    decomposed = unicodedata.normalize("NFKD", folded)
    base = "".join(ch for ch in decomposed if not unicodedata.combining(ch))
    return (base, folded)


def bucket_sort_key(entry: EnrichedPlan) -> tuple[tuple[str, str], int]:
    return (
        collation_key(entry.card.commodity_name),
        -(entry.plan.planned_bins or 0),
    )


def sort_bucket(entries: Iterable[EnrichedPlan]) -> list[EnrichedPlan]:
    """Sort one day's plans by commodity, then planned bins descending."""
    return sorted(entries, key=bucket_sort_key)


def schedule(
    plans: Iterable[Plan],
    day_keys: Sequence[str],
    index: ReferenceIndex,
    *,
    received_bins: Iterable[BinsReceived | Mapping[str, Any]] | None = None,
) -> Buckets:
    """Partition plans into ordered per-day buckets for a week window.

    Args:
        plans: Canonical plan list
        day_keys: Day keys of the visible window, in display order
        index: Reference index snapshot used for enrichment
        received_bins: Optional receiving records for estimated bins

    Returns:
        Mapping of every requested day key to its ordered enriched plans.
        Plans dated outside the window appear in no bucket.
    """
    buckets: Buckets = {key: [] for key in day_keys}
    received_map = build_received_bins_map(received_bins) if received_bins else None

    dropped = 0
    for plan in plans:
        bucket = buckets.get(plan.day_key)
        if bucket is None:
            dropped += 1
            continue
        bucket.append(enrich_plan(plan, index, received_bins=received_map))

    for key in buckets:
        buckets[key] = sort_bucket(buckets[key])

    logger.debug(
        "Scheduled plans into day buckets",
        days=len(buckets),
        scheduled=sum(len(entries) for entries in buckets.values()),
        outside_window=dropped,
    )
    return buckets


def collect_commodity_names(buckets: Mapping[str, Iterable[EnrichedPlan]]) -> list[str]:
    """Distinct non-empty commodity names on the board, for seeding the color registry."""
    names = {entry.card.commodity_name for entries in buckets.values() for entry in entries}
    names.discard("")
    return sorted(names)


def bucket_plan_ids(buckets: Mapping[str, Iterable[EnrichedPlan]]) -> dict[str, list[int | str]]:
    """Plan ids per day, in display order."""
    return {key: [entry.id for entry in entries] for key, entries in buckets.items()}
