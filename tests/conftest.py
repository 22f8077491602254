"""Root conftest for all tests.

Shared reference data, plan factories and a fake persistence collaborator.
"""

import asyncio
from collections.abc import Mapping
from contextlib import suppress
from typing import Any

import pytest
from loguru import logger

from harvest_board.config.settings import settings
from harvest_board.plans.types import Plan
from harvest_board.reference.index import ReferenceIndex, build_reference_index


@pytest.fixture(autouse=True)
def pin_board_timezone(monkeypatch):
    """Run every test against a fixed board timezone so day boundaries are reproducible."""
    monkeypatch.setattr(settings, "timezone", "America/Los_Angeles")
    yield


@pytest.fixture(autouse=True)
def capture_warnings():
    """Collect WARNING+ log records emitted during a test."""
    records: list[str] = []
    handler_id = logger.add(lambda message: records.append(str(message)), level="WARNING", format="{message}")
    yield records
    # setup_logger may already have removed every handler
    with suppress(ValueError):
        logger.remove(handler_id)


@pytest.fixture
def raw_blocks() -> list[dict[str, Any]]:
    """Blocks as the loader returns them, with mixed key casing."""
    return [
        {"source_database": "cobblestone", "GABLOCKIDX": 101, "ID": "B-101", "NAME": "A", "GrowerName": "Sunny Acres", "CMTYIDX": 1, "acres": 12.5},
        {"sourceDatabase": "cobblestone", "gablockidx": "102", "id": "B-102", "name": "North 40", "growerName": "Hill Ranch", "cmtyidx": "2"},
        {"source_database": "legacy", "GABLOCKIDX": 101, "name": "Legacy A", "growerName": "Old Farm", "VARIETYIDX": 3},
        {"GABLOCKIDX": 999, "name": "No source"},
        {"source_database": "cobblestone", "name": "No index"},
    ]


@pytest.fixture
def raw_contractors() -> list[dict[str, Any]]:
    return [
        {"id": 7, "name": "Rivera Labor", "provides_picking": True},
        {"ID": "8", "NAME": "Valley Forklift", "provides_forklift": True},
        {"contractor_id": 9, "name": "Central Hauling", "provides_trucking": True},
        {"id": "not-a-number", "name": "Broken"},
        {"name": "Missing id"},
    ]


@pytest.fixture
def raw_commodities() -> list[dict[str, Any]]:
    return [
        {"CMTYIDX": 1, "DESCR": "Gala", "source_database": "cobblestone"},
        {"cmtyidx": "2", "descr": "Honeycrisp", "SOURCE_DATABASE": "COBBLESTONE"},
        {"id": 3, "name": "Legacy Fuji", "source_database": "legacy"},
        {"code": "4", "NAME": "Navel"},
        {"DESCR": "No index"},
    ]


@pytest.fixture
def raw_pools() -> list[dict[str, Any]]:
    return [
        {"POOLIDX": 11, "DESCR": "Early Navel Pool", "source_database": "cobblestone"},
        {"poolIdx": "12", "name": "Legacy Pool", "source_database": "legacy"},
    ]


@pytest.fixture
def reference_index(raw_blocks, raw_contractors, raw_commodities, raw_pools) -> ReferenceIndex:
    return build_reference_index(raw_blocks, raw_contractors, raw_commodities, raw_pools)


@pytest.fixture
def make_plan():
    """Factory for plans on cobblestone blocks."""

    def _make(plan_id: int | str, day: str, **fields: Any) -> Plan:
        data: dict[str, Any] = {
            "id": plan_id,
            "date": day,
            "grower_block_source_database": "cobblestone",
            "grower_block_id": 101,
        }
        data.update(fields)
        return Plan.model_validate(data)

    return _make


class FakePersistence:
    """In-memory stand-in for the plan service."""

    def __init__(self, error: Exception | None = None, delay: float = 0):
        self.error = error
        self.delay = delay
        self.calls: list[tuple[int | str, dict[str, Any]]] = []
        self.release = asyncio.Event()
        self.block = False

    async def update(self, plan_id: int | str, fields: Mapping[str, Any]) -> dict[str, Any]:
        self.calls.append((plan_id, dict(fields)))
        if self.block:
            await self.release.wait()
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.error is not None:
            raise self.error
        return {"id": plan_id, **fields}


@pytest.fixture
def fake_persistence_cls() -> type[FakePersistence]:
    return FakePersistence
