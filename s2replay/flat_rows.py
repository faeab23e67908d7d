"""Flat, table-friendly rows built from tracker events for columnar storage."""

from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import Mapping

from .decoder import convert_tracker_loop_to_seconds
from .events import (
    PlayerStatsEvent,
    UnitBornEvent,
    UnitDiedEvent,
    UnitDoneEvent,
    UnitTypeChangeEvent,
    UpgradeEvent,
)
from .state import Registered, SC2Unit, Unregistered, UnitChangeHint

#: Player id used when the owner of a unit is not known.
UNKNOWN_PLAYER_ID = 99


@dataclass
class PlayerStatsFlatRow:
    """Player statistics with the replay loop, seconds and file digest alongside."""

    player_id: int
    minerals_current: int
    vespene_current: int
    minerals_collection_rate: int
    vespene_collection_rate: int
    workers_active_count: int
    minerals_used_in_progress_army: int
    minerals_used_in_progress_economy: int
    minerals_used_in_progress_technology: int
    vespene_used_in_progress_army: int
    vespene_used_in_progress_economy: int
    vespene_used_in_progress_technology: int
    minerals_used_current_army: int
    minerals_used_current_economy: int
    minerals_used_current_technology: int
    vespene_used_current_army: int
    vespene_used_current_economy: int
    vespene_used_current_technology: int
    minerals_lost_army: int
    minerals_lost_economy: int
    minerals_lost_technology: int
    vespene_lost_army: int
    vespene_lost_economy: int
    vespene_lost_technology: int
    minerals_killed_army: int
    minerals_killed_economy: int
    minerals_killed_technology: int
    vespene_killed_army: int
    vespene_killed_economy: int
    vespene_killed_technology: int
    food_used: int
    food_made: int
    minerals_used_active_forces: int
    vespene_used_active_forces: int
    minerals_friendly_fire_army: int
    minerals_friendly_fire_economy: int
    minerals_friendly_fire_technology: int
    vespene_friendly_fire_army: int
    vespene_friendly_fire_economy: int
    vespene_friendly_fire_technology: int
    ext_replay_loop: int
    ext_replay_seconds: int
    ext_fs_replay_sha256: str

    @classmethod
    def from_event(
        cls, event: PlayerStatsEvent, ext_replay_loop: int, replay_sha256: str
    ) -> PlayerStatsFlatRow:
        """Flatten a player stats event."""
        return cls(
            player_id=event.player_id,
            **asdict(event.stats),
            ext_replay_loop=ext_replay_loop,
            ext_replay_seconds=convert_tracker_loop_to_seconds(ext_replay_loop),
            ext_fs_replay_sha256=replay_sha256,
        )


def _registered_unit(change_hint: UnitChangeHint) -> SC2Unit:
    if not isinstance(change_hint, Registered):
        raise ValueError(f"expected a Registered change hint, got {change_hint!r}")
    return change_hint.unit


@dataclass
class UnitBornEventFlatRow:
    """A unit coming into play, from a born, done or type change event."""

    unit_tag_index: int
    unit_tag_recycle: int
    unit_type_name: str
    control_player_id: int
    upkeep_player_id: int
    x: float
    y: float
    creator_unit_tag_index: int | None
    creator_unit_tag_recycle: int | None
    creator_ability_name: str | None
    ext_replay_loop: int
    ext_replay_seconds: int
    ext_fs_replay_sha256: str

    @classmethod
    def from_unit_born(
        cls, event: UnitBornEvent, ext_replay_loop: int, replay_sha256: str
    ) -> UnitBornEventFlatRow:
        """Flatten a unit that appeared instantly, without construction time."""
        return cls(
            unit_tag_index=event.unit_tag_index,
            unit_tag_recycle=event.unit_tag_recycle,
            unit_type_name=event.unit_type_name,
            control_player_id=event.control_player_id,
            upkeep_player_id=event.upkeep_player_id,
            x=float(event.x),
            y=float(event.y),
            creator_unit_tag_index=event.creator_unit_tag_index,
            creator_unit_tag_recycle=event.creator_unit_tag_recycle,
            creator_ability_name=event.creator_ability_name,
            ext_replay_loop=ext_replay_loop,
            ext_replay_seconds=convert_tracker_loop_to_seconds(ext_replay_loop),
            ext_fs_replay_sha256=replay_sha256,
        )

    @classmethod
    def _from_unit(
        cls,
        unit_tag_index: int,
        unit_tag_recycle: int,
        unit: SC2Unit,
        ext_replay_loop: int,
        replay_sha256: str,
    ) -> UnitBornEventFlatRow:
        owner = unit.user_id if unit.user_id is not None else UNKNOWN_PLAYER_ID
        return cls(
            unit_tag_index=unit_tag_index,
            unit_tag_recycle=unit_tag_recycle,
            unit_type_name=unit.name,
            control_player_id=owner,
            upkeep_player_id=owner,
            x=unit.pos.x,
            y=unit.pos.y,
            creator_unit_tag_index=None,
            creator_unit_tag_recycle=None,
            creator_ability_name=unit.creator_ability_name,
            ext_replay_loop=ext_replay_loop,
            ext_replay_seconds=convert_tracker_loop_to_seconds(ext_replay_loop),
            ext_fs_replay_sha256=replay_sha256,
        )

    @classmethod
    def from_unit_done(
        cls,
        event: UnitDoneEvent,
        ext_replay_loop: int,
        replay_sha256: str,
        change_hint: UnitChangeHint,
    ) -> UnitBornEventFlatRow:
        """Flatten a finished construction; the hint supplies name, owner and position.

        Raises ValueError unless the hint is ``Registered``.
        """
        unit = _registered_unit(change_hint)
        return cls._from_unit(
            event.unit_tag_index,
            event.unit_tag_recycle,
            unit,
            ext_replay_loop,
            replay_sha256,
        )

    @classmethod
    def from_unit_type_change(
        cls,
        event: UnitTypeChangeEvent,
        ext_replay_loop: int,
        replay_sha256: str,
        change_hint: UnitChangeHint,
    ) -> UnitBornEventFlatRow:
        """Flatten a unit morph; the hint supplies name, owner and position.

        Raises ValueError unless the hint is ``Registered``.
        """
        unit = _registered_unit(change_hint)
        return cls._from_unit(
            event.unit_tag_index,
            event.unit_tag_recycle,
            unit,
            ext_replay_loop,
            replay_sha256,
        )


@dataclass
class UnitDiedEventFlatRow:
    """A unit death enriched with the killed and killer unit names."""

    unit_died_name: str = ""
    unit_tag_index: int = 0
    unit_tag_recycle: int = 0
    killer_player_id: int | None = None
    x: int = 0
    y: int = 0
    unit_killer_name: str = ""
    killer_unit_tag_index: int | None = None
    killer_unit_tag_recycle: int | None = None
    ext_replay_loop: int = 0
    ext_replay_seconds: int = 0
    ext_fs_replay_sha256: str = ""
    ext_replay_detail_killer_player_name: str = ""

    @classmethod
    def from_event(
        cls,
        event: UnitDiedEvent,
        ext_replay_loop: int,
        change_hint: UnitChangeHint,
        replay_sha256: str,
        player_names: Mapping[int, str] | None = None,
    ) -> UnitDiedEventFlatRow:
        """Flatten a unit death; the hint must be ``Unregistered``.

        ``player_names`` maps player ids to names for the killer's name.
        """
        if not isinstance(change_hint, Unregistered):
            raise ValueError(
                f"expected an Unregistered change hint, got {change_hint!r}"
            )
        killer = change_hint.killer
        names = player_names or {}
        killer_player_name = (
            names.get(event.killer_player_id, "")
            if event.killer_player_id is not None
            else ""
        )
        return cls(
            unit_died_name=change_hint.killed.name,
            unit_tag_index=event.unit_tag_index,
            unit_tag_recycle=event.unit_tag_recycle,
            killer_player_id=event.killer_player_id,
            x=event.x,
            y=event.y,
            unit_killer_name=killer.name if killer is not None else "",
            killer_unit_tag_index=event.killer_unit_tag_index,
            killer_unit_tag_recycle=event.killer_unit_tag_recycle,
            ext_replay_loop=ext_replay_loop,
            ext_replay_seconds=convert_tracker_loop_to_seconds(ext_replay_loop),
            ext_fs_replay_sha256=replay_sha256,
            ext_replay_detail_killer_player_name=killer_player_name,
        )


@dataclass
class UpgradeEventFlatRow:
    """An upgrade with the replay loop, seconds and file digest alongside."""

    player_id: int
    name: str
    count: int
    ext_replay_loop: int
    ext_replay_seconds: int
    ext_fs_replay_sha256: str

    @classmethod
    def from_event(
        cls, event: UpgradeEvent, ext_replay_loop: int, replay_sha256: str
    ) -> UpgradeEventFlatRow:
        """Flatten an upgrade event."""
        return cls(
            player_id=event.player_id,
            name=event.upgrade_type_name,
            count=event.count,
            ext_replay_loop=ext_replay_loop,
            ext_replay_seconds=convert_tracker_loop_to_seconds(ext_replay_loop),
            ext_fs_replay_sha256=replay_sha256,
        )