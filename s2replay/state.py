"""Replay state built up from tracker events: units, their owners and control groups."""

from __future__ import annotations

import copy
import logging
from dataclasses import dataclass, field
from functools import total_ordering
from typing import Union

from .events import (
    PlayerSetupEvent,
    PlayerStatsEvent,
    ReplayFilters,
    ReplayTrackerEvent,
    UnitBornEvent,
    UnitDiedEvent,
    UnitDoneEvent,
    UnitInitEvent,
    UnitPositionsEvent,
    UnitTypeChangeEvent,
)
from .unit_cmd import SC2UnitCmd, Vec3D
from .unit_props import Color, get_unit_sized_color

log = logging.getLogger(__name__)

#: Priority of tracker events when they share a loop with game events.
TRACKER_PRIORITY = 1
#: Priority of game events when they share a loop with tracker events.
GAME_PRIORITY = 2

#: The currently selected units live in the control group past the usable ones.
ACTIVE_UNITS_GROUP_IDX = 10
_CONTROL_GROUP_COUNT = 11
_USABLE_CONTROL_GROUPS = 10

#: Unit positions are reported at four times their map position.
UNIT_POSITION_RATIO = 4.0


@total_ordering
@dataclass(eq=False)
class SC2Unit:
    """A unit as it is known at some point of the replay.

    Units compare and sort by their tag index only.
    """

    tag_index: int = 0
    last_game_loop: int = 0
    user_id: int | None = None
    name: str = ""
    pos: Vec3D = field(default_factory=Vec3D)
    init_game_loop: int = 0
    creator_ability_name: str | None = None
    radius: float = 0.0
    color: Color = (0, 0, 0, 0)
    is_selected: bool = False
    is_init: bool = False
    cmd: SC2UnitCmd = field(default_factory=SC2UnitCmd)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, SC2Unit):
            return NotImplemented
        return self.tag_index == other.tag_index

    def __lt__(self, other: object) -> bool:
        if not isinstance(other, SC2Unit):
            return NotImplemented
        return self.tag_index < other.tag_index

    __hash__ = None  # type: ignore[assignment]

    def set_unit_props(self) -> None:
        """Set radius and colour from the unit name and owner."""
        self.radius, self.color = get_unit_sized_color(
            self.name, self.user_id if self.user_id is not None else 0
        )


def _control_groups() -> list[list[int]]:
    return [[] for _ in range(_CONTROL_GROUP_COUNT)]


@dataclass
class SC2UserState:
    """Per user state: ten control groups plus the active selection."""

    control_groups: list[list[int]] = field(default_factory=_control_groups)


@dataclass
class SC2ReplayState:
    """The state of a replay as its events are processed."""

    units: dict[int, SC2Unit] = field(default_factory=dict)
    user_state: dict[int, SC2UserState] = field(default_factory=dict)
    filename: str = ""
    sha256: str = ""


@dataclass
class TrackerEventEntry:
    """A tracker event with its loop adjusted to game loop units."""

    tracker_loop: int
    event: ReplayTrackerEvent

    def should_skip(self, filters: ReplayFilters) -> bool:
        """Return True when the filters exclude the wrapped event."""
        return self.event.should_skip(filters)


@dataclass
class Registered:
    """A unit was added or changed; a copy of it is carried."""

    unit: SC2Unit


@dataclass
class Positions:
    """Unit positions were updated; copies of the moved units are carried."""

    units: list[SC2Unit]


@dataclass
class Unregistered:
    """A unit was removed from the state, with its killer if known."""

    killer: SC2Unit | None
    killed: SC2Unit


@dataclass(frozen=True)
class NoChange:
    """No unit changed."""


#: What changed in the state after handling an event.
UnitChangeHint = Union[Registered, Positions, Unregistered, NoChange]


def _snapshot(unit: SC2Unit) -> SC2Unit:
    return copy.deepcopy(unit)


def handle_unit_init(
    state: SC2ReplayState, game_loop: int, event: UnitInitEvent
) -> UnitChangeHint:
    """Register a unit that started construction."""
    unit = SC2Unit(
        tag_index=event.unit_tag_index,
        last_game_loop=game_loop,
        user_id=event.control_player_id,
        name=event.unit_type_name,
        pos=Vec3D(float(event.x), float(event.y), 0.0),
        init_game_loop=game_loop,
        is_init=True,
    )
    unit.set_unit_props()
    log.info("Initializing unit: %r", unit)
    existing = state.units.get(event.unit_tag_index)
    if existing is not None:
        # Happens for example when a unit burrows.
        existing.last_game_loop = game_loop
        existing.pos = Vec3D(float(event.x), float(event.y), 0.0)
        existing.is_init = True
        existing.name = event.unit_type_name
    else:
        state.units[event.unit_tag_index] = _snapshot(unit)
    return Registered(unit)


def handle_unit_born(
    state: SC2ReplayState, game_loop: int, event: UnitBornEvent
) -> UnitChangeHint:
    """Register a unit that appeared without construction time."""
    existing = state.units.get(event.unit_tag_index)
    if existing is not None:
        existing.creator_ability_name = event.creator_ability_name
        existing.last_game_loop = game_loop
        return Registered(_snapshot(existing))
    unit = SC2Unit(
        tag_index=event.unit_tag_index,
        last_game_loop=game_loop,
        user_id=event.control_player_id,
        name=event.unit_type_name,
        pos=Vec3D(float(event.x), float(event.y), 0.0),
        init_game_loop=game_loop,
    )
    unit.set_unit_props()
    state.units[event.unit_tag_index] = _snapshot(unit)
    return Registered(unit)


def handle_unit_type_change(
    state: SC2ReplayState, game_loop: int, event: UnitTypeChangeEvent
) -> UnitChangeHint:
    """Rename a unit that morphed; the hint carries the unit before the change."""
    existing = state.units.get(event.unit_tag_index)
    if existing is not None:
        old_unit = _snapshot(existing)
        existing.name = event.unit_type_name
        existing.last_game_loop = game_loop
        existing.set_unit_props()
        return Registered(old_unit)
    unit = SC2Unit(
        tag_index=event.unit_tag_index,
        last_game_loop=game_loop,
        user_id=None,
        name=event.unit_type_name,
        init_game_loop=game_loop,
    )
    unit.set_unit_props()
    state.units[event.unit_tag_index] = unit
    return NoChange()


def handle_unit_done(
    state: SC2ReplayState, game_loop: int, event: UnitDoneEvent
) -> UnitChangeHint:
    """Mark a unit under construction as completed."""
    existing = state.units.get(event.unit_tag_index)
    if existing is None:
        log.warning("Unit %d done but not init before.", event.unit_tag_index)
        return NoChange()
    existing.last_game_loop = game_loop
    existing.is_init = False
    existing.set_unit_props()
    return Registered(_snapshot(existing))


def handle_unit_position(
    state: SC2ReplayState, game_loop: int, event: UnitPositionsEvent
) -> UnitChangeHint:
    """Move the reported units that are known to the state."""
    updated_ids: list[int] = []
    for item in event.to_unit_positions_vec():
        unit = state.units.get(item.tag)
        if unit is None:
            log.debug("Unit %d did not exist but position registered.", item.tag)
            continue
        updated_ids.append(item.tag)
        unit.pos = Vec3D(
            item.x / UNIT_POSITION_RATIO, item.y / UNIT_POSITION_RATIO, 0.0
        )
        unit.last_game_loop = game_loop
    return Positions(
        [_snapshot(state.units[tag]) for tag in updated_ids if tag in state.units]
    )


def handle_unit_died(
    state: SC2ReplayState, game_loop: int, event: UnitDiedEvent
) -> UnitChangeHint:
    """Remove a dead unit from the state and from users' control groups."""
    dead = event.unit_tag_index
    for user in state.user_state.values():
        for idx, group in enumerate(user.control_groups[:_USABLE_CONTROL_GROUPS]):
            user.control_groups[idx] = [tag for tag in group if tag != dead]
    killed = state.units.pop(dead, None)
    if killed is None:
        # Normal when a zerg larva turns into a unit.
        log.warning("Unit %d reported dead but was not registered before.", dead)
        return NoChange()
    log.debug("Unit died: %r", killed)
    killer = None
    if event.killer_unit_tag_index is not None:
        found = state.units.get(event.killer_unit_tag_index)
        if found is not None:
            killer = _snapshot(found)
    return Unregistered(killer=killer, killed=killed)


def handle_tracker_event(
    state: SC2ReplayState, tracker_loop: int, event: ReplayTrackerEvent
) -> UnitChangeHint:
    """Apply a tracker event to the state and report what changed."""
    if isinstance(event, UnitBornEvent):
        return handle_unit_born(state, tracker_loop, event)
    if isinstance(event, UnitTypeChangeEvent):
        return handle_unit_type_change(state, tracker_loop, event)
    if isinstance(event, UnitInitEvent):
        return handle_unit_init(state, tracker_loop, event)
    if isinstance(event, UnitDoneEvent):
        return handle_unit_done(state, tracker_loop, event)
    if isinstance(event, UnitDiedEvent):
        return handle_unit_died(state, tracker_loop, event)
    if isinstance(event, UnitPositionsEvent):
        return handle_unit_position(state, tracker_loop, event)
    if isinstance(event, PlayerStatsEvent):
        return NoChange()
    if isinstance(event, PlayerSetupEvent):
        if event.user_id is not None:
            state.user_state[event.user_id] = SC2UserState()
        return NoChange()
    log.debug("Skipping event: %r", event)
    return NoChange()