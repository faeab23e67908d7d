"""Iteration over tracker events while the replay state is kept up to date."""

from __future__ import annotations

import logging
import struct
from typing import Iterable, Iterator, Mapping

from .decoder import TRACKER_SPEED_RATIO
from .events import (
    PlayerStatsEvent,
    ReplayFilters,
    TrackerEvent,
    UnitBornEvent,
    UnitDiedEvent,
    UnitDoneEvent,
    UnitTypeChangeEvent,
    UpgradeEvent,
)
from .flat_rows import (
    PlayerStatsFlatRow,
    UnitBornEventFlatRow,
    UnitDiedEventFlatRow,
    UpgradeEventFlatRow,
)
from .state import (
    NoChange,
    SC2ReplayState,
    TrackerEventEntry,
    UnitChangeHint,
    handle_tracker_event,
)

log = logging.getLogger(__name__)


def _f32(value: float) -> float:
    return struct.unpack("<f", struct.pack("<f", value))[0]


def _adjusted_loop(event_loop: int) -> int:
    """Scale an accumulated tracker loop into game loop units."""
    return int(_f32(_f32(event_loop) / _f32(TRACKER_SPEED_RATIO)))


class TrackerEventIterator:
    """Yield ``(TrackerEventEntry, change hint)`` pairs for a stream of tracker events.

    Every event updates the replay state, including the ones the filters
    leave out of the output.
    """

    def __init__(
        self,
        events: Iterable[TrackerEvent],
        filename: str = "",
        filters: ReplayFilters | None = None,
    ) -> None:
        self._events: Iterator[TrackerEvent] = iter(events)
        self._event_loop = 0
        self.state = SC2ReplayState(filename=filename)
        self.filters = filters

    def __iter__(self) -> TrackerEventIterator:
        return self

    def __next__(self) -> tuple[TrackerEventEntry, UnitChangeHint]:
        for tracker_event in self._events:
            self._event_loop += tracker_event.delta
            adjusted_loop = _adjusted_loop(self._event_loop)
            hint = handle_tracker_event(self.state, adjusted_loop, tracker_event.event)
            log.info(
                "Trac [%08d]: Evt:%r Hint:%r", adjusted_loop, tracker_event.event, hint
            )
            entry = TrackerEventEntry(tracker_loop=adjusted_loop, event=tracker_event.event)
            if self.filters is not None and self._should_skip(entry, self.filters):
                continue
            return entry, hint
        raise StopIteration

    @staticmethod
    def _should_skip(entry: TrackerEventEntry, filters: ReplayFilters) -> bool:
        if filters.min_loop is not None and entry.tracker_loop < filters.min_loop:
            return True
        if filters.max_loop is not None and entry.tracker_loop > filters.max_loop:
            return True
        return entry.should_skip(filters)

    def with_filters(self, filters: ReplayFilters) -> TrackerEventIterator:
        """Set the filters and return the iterator itself."""
        self.filters = filters
        return self

    def collect_into_player_stats_flat_rows(
        self, replay_sha256: str
    ) -> list[PlayerStatsFlatRow]:
        """Consume the iterator, keeping only player stats as flat rows."""
        return [
            PlayerStatsFlatRow.from_event(entry.event, entry.tracker_loop, replay_sha256)
            for entry, _hint in self
            if isinstance(entry.event, PlayerStatsEvent)
        ]

    def collect_into_upgrades_flat_rows(
        self, replay_sha256: str
    ) -> list[UpgradeEventFlatRow]:
        """Consume the iterator, keeping only upgrades as flat rows."""
        return [
            UpgradeEventFlatRow.from_event(entry.event, entry.tracker_loop, replay_sha256)
            for entry, _hint in self
            if isinstance(entry.event, UpgradeEvent)
        ]

    def collect_into_unit_born_flat_rows(
        self, replay_sha256: str
    ) -> list[UnitBornEventFlatRow]:
        """Consume the iterator, keeping born, done and type change events as flat rows.

        Type changes of units that were not known before are left out.
        """
        rows: list[UnitBornEventFlatRow] = []
        for entry, hint in self:
            event = entry.event
            if isinstance(event, UnitBornEvent):
                rows.append(
                    UnitBornEventFlatRow.from_unit_born(
                        event, entry.tracker_loop, replay_sha256
                    )
                )
            elif isinstance(event, UnitDoneEvent):
                rows.append(
                    UnitBornEventFlatRow.from_unit_done(
                        event, entry.tracker_loop, replay_sha256, hint
                    )
                )
            elif isinstance(event, UnitTypeChangeEvent) and not isinstance(
                hint, NoChange
            ):
                rows.append(
                    UnitBornEventFlatRow.from_unit_type_change(
                        event, entry.tracker_loop, replay_sha256, hint
                    )
                )
        return rows

    def collect_into_unit_died_flat_rows(
        self,
        replay_sha256: str,
        player_names: Mapping[int, str] | None = None,
    ) -> list[UnitDiedEventFlatRow]:
        """Consume the iterator, keeping only unit deaths as flat rows."""
        return [
            UnitDiedEventFlatRow.from_event(
                entry.event, entry.tracker_loop, hint, replay_sha256, player_names
            )
            for entry, hint in self
            if isinstance(entry.event, UnitDiedEvent)
        ]