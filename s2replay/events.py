"""Version independent tracker and message events, and the filters applied to them."""

from __future__ import annotations

import enum
from dataclasses import dataclass, field, fields
from typing import Iterable, Union

_TAG_INDEX_SHIFT = 18
_TAG_INDEX_MASK = 0x00003FFF
_TAG_RECYCLE_MASK = 0x0003FFFF
_U32_MASK = 0xFFFFFFFF
_POSITION_SCALE = 4
_PROP_GROUPS = ("minerals_", "vespene_", "food_")


@dataclass
class ReplayFilters:
    """Criteria used to leave events out while iterating a replay."""

    player_id: int | None = None
    unit_name: str | None = None
    include_stats: bool = False
    min_loop: int | None = None
    max_loop: int | None = None


def _is_excluded(
    filters: ReplayFilters,
    *,
    player_ids: Iterable[int | None] = (),
    unit_names: Iterable[str] = (),
    is_stats: bool = False,
) -> bool:
    """Apply the filters to the attributes an event carries.

    Only the attributes passed in are checked; an event that carries none of
    them is never excluded.
    """
    if filters.player_id is not None and any(
        player_id != filters.player_id for player_id in player_ids
    ):
        return True
    if filters.unit_name is not None and any(
        name != filters.unit_name for name in unit_names
    ):
        return True
    return is_stats and not filters.include_stats


@dataclass
class PlayerSetupEvent:
    """A player taking a slot at the start of the game."""

    player_id: int
    m_type: int
    user_id: int | None = None
    slot_id: int | None = None

    def should_skip(self, filters: ReplayFilters) -> bool:
        """Return True when the filters exclude this event."""
        return _is_excluded(filters, player_ids=(self.player_id,))


@dataclass
class PlayerStats:
    """Economy and army statistics of one player at a point in time."""

    minerals_current: int = 0
    vespene_current: int = 0
    minerals_collection_rate: int = 0
    vespene_collection_rate: int = 0
    workers_active_count: int = 0
    minerals_used_in_progress_army: int = 0
    minerals_used_in_progress_economy: int = 0
    minerals_used_in_progress_technology: int = 0
    vespene_used_in_progress_army: int = 0
    vespene_used_in_progress_economy: int = 0
    vespene_used_in_progress_technology: int = 0
    minerals_used_current_army: int = 0
    minerals_used_current_economy: int = 0
    minerals_used_current_technology: int = 0
    vespene_used_current_army: int = 0
    vespene_used_current_economy: int = 0
    vespene_used_current_technology: int = 0
    minerals_lost_army: int = 0
    minerals_lost_economy: int = 0
    minerals_lost_technology: int = 0
    vespene_lost_army: int = 0
    vespene_lost_economy: int = 0
    vespene_lost_technology: int = 0
    minerals_killed_army: int = 0
    minerals_killed_economy: int = 0
    minerals_killed_technology: int = 0
    vespene_killed_army: int = 0
    vespene_killed_economy: int = 0
    vespene_killed_technology: int = 0
    food_used: int = 0
    food_made: int = 0
    minerals_used_active_forces: int = 0
    vespene_used_active_forces: int = 0
    minerals_friendly_fire_army: int = 0
    minerals_friendly_fire_economy: int = 0
    minerals_friendly_fire_technology: int = 0
    vespene_friendly_fire_army: int = 0
    vespene_friendly_fire_economy: int = 0
    vespene_friendly_fire_technology: int = 0

    def as_prop_name_value_vec(self) -> list[tuple[str, int]]:
        """Return (path, value) pairs such as ``("minerals/current", 50)`` for plotting."""
        return [
            (_prop_name(item.name), getattr(self, item.name)) for item in fields(self)
        ]


def _prop_name(field_name: str) -> str:
    if field_name.startswith(_PROP_GROUPS):
        return field_name.replace("_", "/", 1)
    return field_name


@dataclass
class PlayerStatsEvent:
    """Periodic statistics report for a player."""

    player_id: int
    stats: PlayerStats = field(default_factory=PlayerStats)

    def should_skip(self, filters: ReplayFilters) -> bool:
        """Return True when the filters exclude this event."""
        return _is_excluded(filters, player_ids=(self.player_id,), is_stats=True)


@dataclass
class UpgradeEvent:
    """A player completed an upgrade."""

    player_id: int
    upgrade_type_name: str
    count: int

    def should_skip(self, filters: ReplayFilters) -> bool:
        """Return True when the filters exclude this event."""
        return _is_excluded(filters, player_ids=(self.player_id,))


@dataclass
class UnitBornEvent:
    """A unit that appears instantly, without construction time."""

    unit_tag_index: int = 0
    unit_tag_recycle: int = 0
    unit_type_name: str = ""
    control_player_id: int = 0
    upkeep_player_id: int = 0
    x: int = 0
    y: int = 0
    creator_unit_tag_index: int | None = None
    creator_unit_tag_recycle: int | None = None
    creator_ability_name: str | None = None

    def should_skip(self, filters: ReplayFilters) -> bool:
        """Return True when the filters exclude this event."""
        return _is_excluded(
            filters,
            player_ids=(self.control_player_id,),
            unit_names=(self.unit_type_name,),
        )


@dataclass
class UnitDiedEvent:
    """A unit died; the owner and name are not part of the event."""

    unit_tag_index: int = 0
    unit_tag_recycle: int = 0
    killer_player_id: int | None = None
    x: int = 0
    y: int = 0
    killer_unit_tag_index: int | None = None
    killer_unit_tag_recycle: int | None = None

    def should_skip(self, filters: ReplayFilters) -> bool:
        """Return True when the filters exclude this event."""
        return _is_excluded(filters, player_ids=(self.killer_player_id,))


@dataclass
class UnitDoneEvent:
    """A unit that was under construction has been completed."""

    unit_tag_index: int = 0
    unit_tag_recycle: int = 0

    def should_skip(self, filters: ReplayFilters) -> bool:
        """Return True when the filters exclude this event.

        The event carries neither a player nor a unit name, so no filter excludes it.
        """
        return _is_excluded(filters)


@dataclass
class UnitInitEvent:
    """A unit started construction and may still be cancelled."""

    unit_tag_index: int = 0
    unit_tag_recycle: int = 0
    unit_type_name: str = ""
    control_player_id: int = 0
    upkeep_player_id: int = 0
    x: int = 0
    y: int = 0

    def should_skip(self, filters: ReplayFilters) -> bool:
        """Return True when the filters exclude this event."""
        return _is_excluded(
            filters,
            player_ids=(self.control_player_id,),
            unit_names=(self.unit_type_name,),
        )


@dataclass
class UnitOwnerChangeEvent:
    """A unit changed hands."""

    unit_tag_index: int = 0
    unit_tag_recycle: int = 0
    control_player_id: int = 0
    upkeep_player_id: int = 0

    def should_skip(self, filters: ReplayFilters) -> bool:
        """Return True when the filters exclude this event."""
        return _is_excluded(filters, player_ids=(self.control_player_id,))


@dataclass
class UnitPosition:
    """The approximate position of one unit."""

    tag: int = 0
    x: int = 0
    y: int = 0


@dataclass
class UnitPositionsEvent:
    """Regular report of unit positions, encoded as relative index/x/y triples."""

    first_unit_index: int = 0
    items: list[int] = field(default_factory=list)

    def to_unit_positions_vec(self) -> list[UnitPosition]:
        """Decode the triples into absolute unit positions.

        A trailing incomplete triple is ignored.
        """
        positions: list[UnitPosition] = []
        unit_index = self.first_unit_index
        triples = zip(*[iter(self.items)] * 3)
        for relative_index, x, y in triples:
            unit_index += relative_index
            positions.append(
                UnitPosition(
                    tag=unit_index & _U32_MASK,
                    x=x * _POSITION_SCALE,
                    y=y * _POSITION_SCALE,
                )
            )
        return positions

    def should_skip(self, filters: ReplayFilters) -> bool:
        """Return True when the filters exclude this event.

        The event carries neither a player nor a unit name, so no filter excludes it.
        """
        return _is_excluded(filters)


@dataclass
class UnitTypeChangeEvent:
    """A unit morphed into another unit type."""

    unit_tag_index: int = 0
    unit_tag_recycle: int = 0
    unit_type_name: str = ""

    def should_skip(self, filters: ReplayFilters) -> bool:
        """Return True when the filters exclude this event."""
        return _is_excluded(filters, unit_names=(self.unit_type_name,))


#: Any of the supported tracker events.
ReplayTrackerEvent = Union[
    PlayerStatsEvent,
    UnitBornEvent,
    UnitDiedEvent,
    UnitOwnerChangeEvent,
    UnitTypeChangeEvent,
    UpgradeEvent,
    UnitInitEvent,
    UnitDoneEvent,
    UnitPositionsEvent,
    PlayerSetupEvent,
]


@dataclass
class TrackerEvent:
    """A tracker event with the loop delta since the previous one."""

    delta: int
    event: ReplayTrackerEvent


class MessageRecipient(enum.Enum):
    """Who a chat message was addressed to."""

    ALL = "all"
    ALLIES = "allies"
    INDIVIDUAL = "individual"
    BATTLENET = "battlenet"
    OBSERVERS = "observers"


@dataclass
class ChatMessage:
    """A chat line sent during the game."""

    recipient: MessageRecipient
    text: str


@dataclass
class MessageEvent:
    """A message event with the loop delta and the sending user."""

    delta: int
    user_id: int
    event: ChatMessage


def unit_tag(unit_tag_index: int, unit_tag_recycle: int) -> int:
    """Combine a tracker event index/recycle pair into a game event unit tag."""
    return (unit_tag_index << _TAG_INDEX_SHIFT) + unit_tag_recycle


def unit_tag_index(unit_tag: int) -> int:
    """Extract the unit tag index from a game event unit tag."""
    return (unit_tag >> _TAG_INDEX_SHIFT) & _TAG_INDEX_MASK


def unit_tag_recycle(unit_tag: int) -> int:
    """Extract the unit tag recycle value from a game event unit tag."""
    return unit_tag & _TAG_RECYCLE_MASK