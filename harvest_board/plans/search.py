from collections.abc import Iterable

from harvest_board.plans.types import Plan
from harvest_board.reference.index import ReferenceIndex


def search_plans(plans: Iterable[Plan], search_term: str, index: ReferenceIndex) -> list[Plan]:
    """Filter plans by block name, labor contractor name, or notes.

    Matching is a case-insensitive substring test. A blank term keeps every plan.
    """
    plans = list(plans)
    needle = (search_term or "").strip().casefold()
    if not needle:
        return plans

    matches = []
    for plan in plans:
        block = index.block_for(plan.grower_block_source_database, plan.grower_block_id)
        contractor = index.contractor_for(plan.contractor_id)
        haystacks = (
            block.name if block is not None else None,
            contractor.name if contractor is not None else None,
            plan.notes_general,
        )
        if any(needle in (text or "").casefold() for text in haystacks):
            matches.append(plan)
    return matches
