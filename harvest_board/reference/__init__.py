"""Reference data ingestion and lookup indexes."""

from harvest_board.reference.index import (
    ReferenceIndex,
    ReferenceIndexCache,
    build_block_map,
    build_commodity_map,
    build_contractor_map,
    build_pool_map,
    build_reference_index,
    normalize_entries,
)
from harvest_board.reference.models import BinsReceived, Block, Commodity, Contractor, Pool, block_key

__all__ = [
    "BinsReceived",
    "Block",
    "Commodity",
    "Contractor",
    "Pool",
    "ReferenceIndex",
    "ReferenceIndexCache",
    "block_key",
    "build_block_map",
    "build_commodity_map",
    "build_contractor_map",
    "build_pool_map",
    "build_reference_index",
    "normalize_entries",
]
