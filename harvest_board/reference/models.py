"""Canonical reference entities and the ingestion normalization adapter.

The reference loader hands over raw mappings straight from the source
databases, and the same attribute arrives under different spellings
(``GABLOCKIDX`` vs ``gablockidx``, ``NAME`` vs ``name``, ``DESCR`` for a
commodity name). Each model below declares the spellings it understands in
``key_aliases``; the first non-null spelling wins. Join logic downstream only
ever sees the canonical field names.
"""

from collections.abc import Mapping, Sequence
from datetime import datetime
from typing import Any, ClassVar

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from harvest_board.dates import coerce_datetime


def coalesce(raw: Mapping[str, Any], keys: Sequence[str]) -> Any:
    """Return the first non-null value among ``keys`` in ``raw``."""
    for key in keys:
        value = raw.get(key)
        if value is not None:
            return value
    return None


def key_str(value: Any) -> str | None:
    """Normalize a lookup key to a non-blank string, or None."""
    if value is None:
        return None
    text = str(value).strip()
    return text or None


def block_key(source_database: Any, block_idx: Any) -> tuple[str, str] | None:
    """Build the composite block key, or None when either half is missing."""
    source = key_str(source_database)
    idx = key_str(block_idx)
    if source is None or idx is None:
        return None
    return (source, idx)


class NormalizedModel(BaseModel):
    """Base for entities ingested from raw mappings with mixed key casing."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    key_aliases: ClassVar[dict[str, tuple[str, ...]]] = {}

    @model_validator(mode="before")
    @classmethod
    def _coalesce_key_spellings(cls, data: Any) -> Any:
        if not isinstance(data, Mapping):
            return data
        normalized = dict(data)
        for field_name, spellings in cls.key_aliases.items():
            value = coalesce(data, (field_name, *spellings))
            if value is None:
                normalized.pop(field_name, None)
            else:
                normalized[field_name] = value
        return normalized


class Block(NormalizedModel):
    """Grower field record, keyed by (source_database, block_idx)."""

    key_aliases: ClassVar[dict[str, tuple[str, ...]]] = {
        "source_database": ("sourceDatabase", "SOURCE_DATABASE"),
        "block_idx": ("GABLOCKIDX", "gablockidx", "id"),
        "block_id": ("ID", "id"),
        "name": ("NAME", "blockName"),
        "grower_name": ("growerName", "GrowerName", "GROWERNAME"),
        "commodity_idx": ("CMTYIDX", "cmtyidx", "VARIETYIDX", "varietyidx"),
        "acres": ("ACRES", "estimatedbins", "estimated_bins"),
    }

    source_database: str = Field(description="Source database the block was loaded from")
    block_idx: str = Field(description="Block index inside its source database")
    block_id: str | None = Field(default=None, description="Block record id")
    name: str | None = None
    grower_name: str | None = None
    commodity_idx: str | None = Field(default=None, description="Commodity or variety index")
    acres: float | None = None

    @field_validator("source_database", "block_idx", "block_id", "commodity_idx", mode="before")
    @classmethod
    def _normalize_keys(cls, value: Any) -> str | None:
        return key_str(value)

    @field_validator("name", "grower_name", mode="before")
    @classmethod
    def _stringify(cls, value: Any) -> str | None:
        return None if value is None else str(value)

    @property
    def key(self) -> tuple[str, str]:
        return (self.source_database, self.block_idx)


class Contractor(NormalizedModel):
    """Harvest contractor providing picking, trucking and/or forklift services."""

    key_aliases: ClassVar[dict[str, tuple[str, ...]]] = {
        "id": ("ID", "contractor_id"),
        "name": ("NAME",),
        "provides_picking": ("providesPicking",),
        "provides_trucking": ("providesTrucking",),
        "provides_forklift": ("providesForklift",),
        "primary_contact_name": ("primaryContactName",),
        "primary_contact_phone": ("primaryContactPhone",),
        "office_phone": ("officePhone",),
    }

    id: int
    name: str = ""
    provides_picking: bool = False
    provides_trucking: bool = False
    provides_forklift: bool = False
    primary_contact_name: str | None = None
    primary_contact_phone: str | None = None
    office_phone: str | None = None

    @field_validator("name", "primary_contact_name", "primary_contact_phone", "office_phone", mode="before")
    @classmethod
    def _stringify(cls, value: Any) -> str | None:
        return None if value is None else str(value)


class Commodity(NormalizedModel):
    """Commodity (or variety) reference entry."""

    key_aliases: ClassVar[dict[str, tuple[str, ...]]] = {
        "idx": ("commodityIDx", "commodityIdx", "COMMODITYIDX", "CMTYIDX", "cmtyidx", "id", "code"),
        "name": ("commodity", "DESCR", "descr", "NAME"),
        "source_database": ("SOURCE_DATABASE", "sourceDatabase"),
    }

    idx: str
    name: str = ""
    source_database: str | None = None

    @field_validator("idx", mode="before")
    @classmethod
    def _normalize_idx(cls, value: Any) -> str | None:
        return key_str(value)

    @field_validator("name", "source_database", mode="before")
    @classmethod
    def _stringify(cls, value: Any) -> str | None:
        return None if value is None else str(value)

    @model_validator(mode="after")
    def _default_name_to_idx(self) -> "Commodity":
        if not self.name:
            object.__setattr__(self, "name", self.idx)
        return self


class Pool(NormalizedModel):
    """Packing pool a plan delivers into."""

    key_aliases: ClassVar[dict[str, tuple[str, ...]]] = {
        "idx": ("poolIDx", "poolIdx", "POOLIDX", "id", "code"),
        "name": ("pool", "DESCR", "descr", "NAME"),
        "source_database": ("SOURCE_DATABASE", "sourceDatabase"),
    }

    idx: str
    name: str = ""
    source_database: str | None = None

    @field_validator("idx", mode="before")
    @classmethod
    def _normalize_idx(cls, value: Any) -> str | None:
        return key_str(value)

    @field_validator("name", "source_database", mode="before")
    @classmethod
    def _stringify(cls, value: Any) -> str | None:
        return None if value is None else str(value)

    @model_validator(mode="after")
    def _default_name_to_idx(self) -> "Pool":
        if not self.name:
            object.__setattr__(self, "name", self.idx)
        return self


class BinsReceived(NormalizedModel):
    """Bins received at the packing house for a block on a day."""

    key_aliases: ClassVar[dict[str, tuple[str, ...]]] = {
        "block_id": ("blockID", "blockId"),
        "receive_date": ("ReceiveDate", "receiveDate"),
        "quantity": ("RecvQnt", "recvQnt"),
    }

    block_id: str = Field(description="Matches either Block.block_id or Block.block_idx")
    receive_date: datetime
    quantity: float = 0

    @field_validator("block_id", mode="before")
    @classmethod
    def _normalize_block_id(cls, value: Any) -> str | None:
        return key_str(value)

    @field_validator("receive_date", mode="before")
    @classmethod
    def _parse_receive_date(cls, value: Any) -> datetime:
        return coerce_datetime(value)
