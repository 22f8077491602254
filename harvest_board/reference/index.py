"""Reference-data lookup structures for plan enrichment.

The index is rebuilt wholesale whenever one of its input arrays changes.
Reference data only changes on data refresh, never during a drag, so a
rebuild is cheap relative to how often it is read.
"""

from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from typing import Any, TypeVar

from loguru import logger
from pydantic import BaseModel, ValidationError

from harvest_board.config.settings import settings
from harvest_board.reference.models import Block, Commodity, Contractor, Pool, block_key, key_str

ModelT = TypeVar("ModelT", bound=BaseModel)


def normalize_entries(model: type[ModelT], entries: Iterable[ModelT | Mapping[str, Any]] | None) -> list[ModelT]:
    """Convert raw reference mappings to canonical models, skipping malformed entries.

    Args:
        model: Canonical model class to validate into
        entries: Raw mappings or already-built models (None is treated as empty)

    Returns:
        List of valid models in input order
    """
    normalized: list[ModelT] = []
    skipped = 0
    for entry in entries or ():
        if isinstance(entry, model):
            normalized.append(entry)
            continue
        try:
            normalized.append(model.model_validate(entry))
        except ValidationError as e:
            skipped += 1
            logger.debug(
                f"Skipping malformed {model.__name__} entry",
                error_count=e.error_count(),
            )
    if skipped:
        logger.debug(f"Skipped {skipped} malformed {model.__name__} entries")
    return normalized


def _source_included(source_database: str | None, default_source_database: str, include_all_sources: bool) -> bool:
    if include_all_sources:
        return True
    source = (source_database or "").strip().lower()
    return not source or source == default_source_database.strip().lower()


def build_block_map(blocks: Iterable[Block | Mapping[str, Any]] | None) -> dict[tuple[str, str], Block]:
    """Map (source_database, block_idx) to Block."""
    return {block.key: block for block in normalize_entries(Block, blocks)}


def build_contractor_map(contractors: Iterable[Contractor | Mapping[str, Any]] | None) -> dict[int, Contractor]:
    """Map numeric contractor id to Contractor. Duplicate ids overwrite (last wins)."""
    return {contractor.id: contractor for contractor in normalize_entries(Contractor, contractors)}


def build_commodity_map(
    commodities: Iterable[Commodity | Mapping[str, Any]] | None,
    *,
    default_source_database: str | None = None,
    include_all_sources: bool | None = None,
) -> dict[str, str]:
    """Map commodity index to display name.

    Entries whose source database is set and differs from the default source
    are excluded unless ``include_all_sources`` is true.
    """
    default_source = settings.default_source_database if default_source_database is None else default_source_database
    include_all = settings.include_all_commodity_sources if include_all_sources is None else include_all_sources
    return {
        commodity.idx: commodity.name
        for commodity in normalize_entries(Commodity, commodities)
        if _source_included(commodity.source_database, default_source, include_all)
    }


def build_pool_map(
    pools: Iterable[Pool | Mapping[str, Any]] | None,
    *,
    default_source_database: str | None = None,
    include_all_sources: bool | None = None,
) -> dict[str, str]:
    """Map pool index to display name, filtered by source like commodities."""
    default_source = settings.default_source_database if default_source_database is None else default_source_database
    include_all = settings.include_all_commodity_sources if include_all_sources is None else include_all_sources
    return {
        pool.idx: pool.name
        for pool in normalize_entries(Pool, pools)
        if _source_included(pool.source_database, default_source, include_all)
    }


@dataclass(frozen=True)
class ReferenceIndex:
    """Snapshot of reference lookups used to enrich plans."""

    block_by_key: dict[tuple[str, str], Block] = field(default_factory=dict)
    contractor_by_id: dict[int, Contractor] = field(default_factory=dict)
    commodity_name_by_index: dict[str, str] = field(default_factory=dict)
    pool_name_by_index: dict[str, str] = field(default_factory=dict)

    def block_for(self, source_database: Any, block_idx: Any) -> Block | None:
        key = block_key(source_database, block_idx)
        if key is None:
            return None
        return self.block_by_key.get(key)

    def contractor_for(self, contractor_id: Any) -> Contractor | None:
        if contractor_id is None:
            return None
        try:
            return self.contractor_by_id.get(int(contractor_id))
        except (TypeError, ValueError):
            return None

    def commodity_name(self, commodity_idx: Any) -> str:
        idx = key_str(commodity_idx)
        if idx is None:
            return ""
        return self.commodity_name_by_index.get(idx, "")

    def pool_name(self, pool_idx: Any) -> str:
        idx = key_str(pool_idx)
        if idx is None:
            return ""
        return self.pool_name_by_index.get(idx, "")


def build_reference_index(
    blocks: Iterable[Block | Mapping[str, Any]] | None,
    contractors: Iterable[Contractor | Mapping[str, Any]] | None,
    commodities: Iterable[Commodity | Mapping[str, Any]] | None,
    pools: Iterable[Pool | Mapping[str, Any]] | None = None,
    *,
    default_source_database: str | None = None,
    include_all_sources: bool | None = None,
) -> ReferenceIndex:
    """Build a ReferenceIndex from raw reference arrays.

    Malformed entries are excluded without raising.

    Args:
        blocks: Raw block mappings
        contractors: Raw contractor mappings
        commodities: Raw commodity mappings
        pools: Raw pool mappings
        default_source_database: Source kept when filtering commodities and pools
        include_all_sources: Keep commodities and pools from every source

    Returns:
        Frozen ReferenceIndex
    """
    index = ReferenceIndex(
        block_by_key=build_block_map(blocks),
        contractor_by_id=build_contractor_map(contractors),
        commodity_name_by_index=build_commodity_map(
            commodities,
            default_source_database=default_source_database,
            include_all_sources=include_all_sources,
        ),
        pool_name_by_index=build_pool_map(
            pools,
            default_source_database=default_source_database,
            include_all_sources=include_all_sources,
        ),
    )
    logger.debug(
        "Built reference index",
        blocks=len(index.block_by_key),
        contractors=len(index.contractor_by_id),
        commodities=len(index.commodity_name_by_index),
        pools=len(index.pool_name_by_index),
    )
    return index


class ReferenceIndexCache:
    """Rebuilds the reference index only when an input array changes identity."""

    def __init__(self, *, default_source_database: str | None = None, include_all_sources: bool | None = None):
        self._default_source_database = default_source_database
        self._include_all_sources = include_all_sources
        self._inputs: tuple[Any, ...] | None = None
        self._index: ReferenceIndex | None = None
        self.rebuild_count = 0

    def get(
        self,
        blocks: Iterable[Block | Mapping[str, Any]] | None,
        contractors: Iterable[Contractor | Mapping[str, Any]] | None,
        commodities: Iterable[Commodity | Mapping[str, Any]] | None,
        pools: Iterable[Pool | Mapping[str, Any]] | None = None,
    ) -> ReferenceIndex:
        inputs = (blocks, contractors, commodities, pools)
        if self._index is not None and self._inputs is not None:
            if all(current is previous for current, previous in zip(inputs, self._inputs, strict=True)):
                return self._index

        self._index = build_reference_index(
            blocks,
            contractors,
            commodities,
            pools,
            default_source_database=self._default_source_database,
            include_all_sources=self._include_all_sources,
        )
        self._inputs = inputs
        self.rebuild_count += 1
        return self._index

    def clear(self) -> None:
        self._inputs = None
        self._index = None
