"""Drag-triggered date reassignment with optimistic update and rollback.

A move runs through a small state machine:

    IDLE -> OPTIMISTIC_APPLIED -> PERSISTING -> CONFIRMED
                                            \\-> ROLLED_BACK

and can stop early as NOOP (dropped where it started), ABORTED (the bucket
no longer matches the gesture) or REJECTED (the plan already has a move in
flight).

The optimistic bucket state is applied synchronously, before the
persistence call is issued, so the board reflects the move immediately. The
canonical plan list is only changed after persistence succeeds. Rolling back
is therefore a plain rebuild from canonical truth.
"""

import asyncio
from collections.abc import Callable, Iterable, Mapping, Sequence
from dataclasses import dataclass
from datetime import datetime
from enum import StrEnum
from typing import Any

from loguru import logger

from harvest_board.board.persistence import PlanPersistence, extract_error_message
from harvest_board.board.scheduler import Buckets, collect_commodity_names, schedule
from harvest_board.colors.registry import CommodityColorRegistry
from harvest_board.config.settings import settings
from harvest_board.dates import day_boundary, day_boundary_iso, day_keys_for_week, is_day_key
from harvest_board.plans.types import Plan
from harvest_board.reference.index import ReferenceIndex
from harvest_board.reference.models import BinsReceived


class MoveState(StrEnum):
    IDLE = "idle"
    NOOP = "noop"
    ABORTED = "aborted"
    REJECTED = "rejected"
    OPTIMISTIC_APPLIED = "optimistic_applied"
    PERSISTING = "persisting"
    CONFIRMED = "confirmed"
    ROLLED_BACK = "rolled_back"


TERMINAL_STATES = frozenset(
    {MoveState.NOOP, MoveState.ABORTED, MoveState.REJECTED, MoveState.CONFIRMED, MoveState.ROLLED_BACK}
)


@dataclass(frozen=True)
class MoveRequest:
    """A drag gesture: take the card at (source day, index) and drop it at (dest day, index)."""

    source_day_key: str
    source_index: int
    dest_day_key: str
    dest_index: int
    plan_id: int | str

    @property
    def is_noop(self) -> bool:
        return self.source_day_key == self.dest_day_key and self.source_index == self.dest_index

    @property
    def same_day(self) -> bool:
        return self.source_day_key == self.dest_day_key


@dataclass
class MoveCommand:
    """One move and everything needed to undo it.

    Attributes:
        request: The gesture that produced this move
        state: Current state of the move
        original_date: Plan date before the move (None unless applied)
        new_date: Day boundary of the destination day (None unless applied)
        new_date_iso: UTC instant sent to persistence (None unless applied)
        generation: Bucket rebuild generation the overlay was applied on
    """

    request: MoveRequest
    state: MoveState = MoveState.IDLE
    original_date: datetime | None = None
    new_date: datetime | None = None
    new_date_iso: str | None = None
    generation: int | None = None

    @property
    def plan_key(self) -> str:
        return str(self.request.plan_id)

    @property
    def done(self) -> bool:
        return self.state in TERMINAL_STATES

    @property
    def update_fields(self) -> dict[str, Any]:
        return {"date": self.new_date_iso}

    def inverse(self) -> MoveRequest:
        """The gesture that would put the card back where it came from."""
        return MoveRequest(
            source_day_key=self.request.dest_day_key,
            source_index=self.request.dest_index,
            dest_day_key=self.request.source_day_key,
            dest_index=self.request.source_index,
            plan_id=self.request.plan_id,
        )


@dataclass(frozen=True)
class MoveResult:
    state: MoveState
    request: MoveRequest
    error_message: str | None = None

    @property
    def ok(self) -> bool:
        return self.state in (MoveState.CONFIRMED, MoveState.NOOP)


ErrorNotifier = Callable[[str], None]
PlanUpdatedCallback = Callable[[int | str, Mapping[str, Any]], None]
BucketsListener = Callable[[Buckets], None]


class DragReassignmentController:
    """Owns the board's buckets and mediates drag moves against persistence.

    The controller keeps a snapshot of the canonical plan list (``load``) and
    derives buckets from it. During an in-flight move the buckets carry the
    optimistic overlay; ``rebuild`` always returns them to canonical form.

    At most one move per plan may be in flight. A second move of the same plan
    is rejected until the first resolves. Moves of different plans overlap
    freely and are last-writer-wins on the in-memory buckets.
    A rollback rebuilds every bucket from canonical truth, so it also drops the
    overlay of any other move still in flight; that move reappears when it
    confirms.
    """

    def __init__(
        self,
        persistence: PlanPersistence,
        *,
        on_error: ErrorNotifier | None = None,
        on_plan_updated: PlanUpdatedCallback | None = None,
        on_buckets_changed: BucketsListener | None = None,
        color_registry: CommodityColorRegistry | None = None,
        persist_same_day_moves: bool | None = None,
        timeout_seconds: float | None = None,
        fallback_error_message: str | None = None,
    ):
        self._persistence = persistence
        self._on_error = on_error
        self._on_plan_updated = on_plan_updated
        self._on_buckets_changed = on_buckets_changed
        self._color_registry = color_registry
        self._persist_same_day_moves = (
            settings.persist_same_day_moves if persist_same_day_moves is None else persist_same_day_moves
        )
        self._timeout_seconds = settings.move_timeout_seconds if timeout_seconds is None else timeout_seconds
        self._fallback_error_message = fallback_error_message or settings.move_error_fallback_message

        self._plans: list[Plan] = []
        self._day_keys: list[str] = []
        self._index = ReferenceIndex()
        self._received_bins: list[BinsReceived | Mapping[str, Any]] = []
        self._buckets: Buckets = {}
        self._in_flight: set[str] = set()
        self._generation = 0

    @property
    def buckets(self) -> Buckets:
        return self._buckets

    @property
    def plans(self) -> tuple[Plan, ...]:
        return tuple(self._plans)

    @property
    def day_keys(self) -> list[str]:
        return list(self._day_keys)

    @property
    def in_flight(self) -> frozenset[str]:
        return frozenset(self._in_flight)

    def load(
        self,
        plans: Iterable[Plan],
        day_keys: Sequence[str],
        index: ReferenceIndex,
        received_bins: Iterable[BinsReceived | Mapping[str, Any]] | None = None,
    ) -> Buckets:
        """Replace the canonical snapshot (data refresh) and rebuild buckets.

        When a color registry was injected it is re-seeded from the commodity
        names on the new board.
        """
        self._plans = list(plans)
        self._day_keys = list(day_keys)
        self._index = index
        self._received_bins = list(received_bins or ())
        buckets = self.rebuild()
        if self._color_registry is not None:
            self._color_registry.initialize(collect_commodity_names(buckets))
        return buckets

    def load_week(
        self,
        plans: Iterable[Plan],
        anchor: datetime | str,
        index: ReferenceIndex,
        received_bins: Iterable[BinsReceived | Mapping[str, Any]] | None = None,
        week_starts_on: int | None = None,
    ) -> Buckets:
        """Load the board week containing ``anchor``."""
        return self.load(plans, day_keys_for_week(anchor, week_starts_on), index, received_bins)

    def rebuild(self) -> Buckets:
        """Recompute buckets from the canonical snapshot, discarding any overlay."""
        self._generation += 1
        self._publish(schedule(self._plans, self._day_keys, self._index, received_bins=self._received_bins))
        return self._buckets

    def _publish(self, buckets: Buckets) -> None:
        self._buckets = buckets
        if self._on_buckets_changed is not None:
            self._on_buckets_changed(buckets)

    def apply(self, request: MoveRequest) -> MoveCommand:
        """Validate a gesture and apply its optimistic bucket state.

        Runs synchronously. Nothing changes unless the returned command is in
        OPTIMISTIC_APPLIED state.
        """
        command = MoveCommand(request=request)

        if request.is_noop:
            command.state = MoveState.NOOP
            return command

        source = self._buckets.get(request.source_day_key)
        if (
            source is None
            or request.dest_day_key not in self._buckets
            or not is_day_key(request.dest_day_key)
            or not 0 <= request.source_index < len(source)
            or request.dest_index < 0
        ):
            logger.debug(
                "Ignoring move against stale buckets",
                plan_id=request.plan_id,
                source_day_key=request.source_day_key,
                source_index=request.source_index,
                dest_day_key=request.dest_day_key,
            )
            command.state = MoveState.ABORTED
            return command

        moved = source[request.source_index]
        if str(moved.id) != command.plan_key:
            logger.debug(
                "Ignoring move: card at source index is a different plan",
                plan_id=request.plan_id,
                found_plan_id=moved.id,
            )
            command.state = MoveState.ABORTED
            return command

        if command.plan_key in self._in_flight:
            logger.info("Rejecting move: plan already has a move in flight", plan_id=request.plan_id)
            command.state = MoveState.REJECTED
            return command

        command.original_date = moved.date
        command.new_date = day_boundary(request.dest_day_key)
        command.new_date_iso = day_boundary_iso(request.dest_day_key)

        source_cards = list(source)
        source_cards.pop(request.source_index)
        dest_cards = source_cards if request.same_day else list(self._buckets[request.dest_day_key])
        dest_cards.insert(request.dest_index, moved.with_date(command.new_date))

        buckets = dict(self._buckets)
        buckets[request.source_day_key] = source_cards
        buckets[request.dest_day_key] = dest_cards

        self._in_flight.add(command.plan_key)
        command.generation = self._generation
        command.state = MoveState.OPTIMISTIC_APPLIED
        self._publish(buckets)
        logger.debug(
            "Applied optimistic move",
            plan_id=request.plan_id,
            source_day_key=request.source_day_key,
            dest_day_key=request.dest_day_key,
            dest_index=request.dest_index,
        )
        return command

    async def persist(self, command: MoveCommand) -> MoveResult:
        """Persist an applied move, then confirm it or roll it back.

        Commands that were never applied resolve immediately with their state.
        """
        if command.state is not MoveState.OPTIMISTIC_APPLIED:
            return MoveResult(state=command.state, request=command.request)

        command.state = MoveState.PERSISTING
        try:
            if command.request.same_day and not self._persist_same_day_moves:
                logger.debug("Same-day reorder kept local", plan_id=command.request.plan_id)
            else:
                await self._send_update(command)
        except asyncio.CancelledError:
            command.state = MoveState.ROLLED_BACK
            self.rebuild()
            logger.warning("Plan move cancelled, rolled back", plan_id=command.request.plan_id)
            raise
        except Exception as e:
            result = self._roll_back(command, e)
        else:
            result = self._confirm(command)
        finally:
            self._in_flight.discard(command.plan_key)
        return result

    async def move(self, request: MoveRequest) -> MoveResult:
        """Apply a move optimistically and persist it."""
        return await self.persist(self.apply(request))

    async def _send_update(self, command: MoveCommand) -> None:
        pending = self._persistence.update(command.request.plan_id, command.update_fields)
        if self._timeout_seconds:
            await asyncio.wait_for(pending, timeout=self._timeout_seconds)
        else:
            await pending

    def _confirm(self, command: MoveCommand) -> MoveResult:
        command.state = MoveState.CONFIRMED
        self._plans = [
            plan.with_date(command.new_date) if str(plan.id) == command.plan_key else plan
            for plan in self._plans
        ]
        if command.generation != self._generation:
            # A rollback of another move rebuilt the buckets and dropped this overlay
            self.rebuild()
        logger.info(
            "Plan move confirmed",
            plan_id=command.request.plan_id,
            dest_day_key=command.request.dest_day_key,
        )
        if self._on_plan_updated is not None:
            self._on_plan_updated(command.request.plan_id, command.update_fields)
        return MoveResult(state=command.state, request=command.request)

    def _roll_back(self, command: MoveCommand, error: Exception) -> MoveResult:
        command.state = MoveState.ROLLED_BACK
        self.rebuild()
        message = extract_error_message(error, self._fallback_error_message)
        logger.warning(
            "Plan move failed, rolled back: {error_message}",
            error_message=message,
            plan_id=command.request.plan_id,
            source_day_key=command.request.source_day_key,
            dest_day_key=command.request.dest_day_key,
            error_type=type(error).__name__,
        )
        if self._on_error is not None:
            self._on_error(message)
        return MoveResult(state=command.state, request=command.request, error_message=message)

    def on_drag_start(self, *_args: Any) -> None:
        """Drag-start hook for the rendering layer. Nothing to prepare."""
        return None

    def on_drag_end(
        self,
        source_day_key: str,
        source_index: int,
        dest_day_key: str | None,
        dest_index: int | None,
        plan_id: int | str,
    ) -> "asyncio.Task[MoveResult] | None":
        """Drag-end hook for the rendering layer.

        Applies the optimistic state immediately and schedules persistence on
        the running event loop. A drop outside any day (no destination)
        is ignored.

        Returns:
            The persistence task, or None when nothing was applied
        """
        if dest_day_key is None or dest_index is None:
            return None
        command = self.apply(
            MoveRequest(
                source_day_key=source_day_key,
                source_index=source_index,
                dest_day_key=dest_day_key,
                dest_index=dest_index,
                plan_id=plan_id,
            )
        )
        if command.state is not MoveState.OPTIMISTIC_APPLIED:
            return None
        return asyncio.get_running_loop().create_task(self.persist(command))
