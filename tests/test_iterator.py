import pytest

from s2replay.events import (
    PlayerSetupEvent,
    PlayerStats,
    PlayerStatsEvent,
    ReplayFilters,
    TrackerEvent,
    UnitBornEvent,
    UnitDiedEvent,
    UnitDoneEvent,
    UnitInitEvent,
    UnitTypeChangeEvent,
    UpgradeEvent,
)
from s2replay.iterator import TrackerEventIterator
from s2replay.state import NoChange, Registered, Unregistered


def _born(tag, name, player, x=10, y=20):
    return UnitBornEvent(
        unit_tag_index=tag,
        unit_tag_recycle=1,
        unit_type_name=name,
        control_player_id=player,
        upkeep_player_id=player,
        x=x,
        y=y,
    )


def test_iterates_in_order_and_updates_state():
    events = [
        TrackerEvent(0, PlayerSetupEvent(player_id=1, m_type=1, user_id=0, slot_id=0)),
        TrackerEvent(0, _born(5, "Probe", 1)),
    ]
    it = TrackerEventIterator(events, filename="game.SC2Replay")
    assert iter(it) is it
    first_entry, first_hint = next(it)
    assert isinstance(first_entry.event, PlayerSetupEvent)
    assert isinstance(first_hint, NoChange)
    second_entry, second_hint = next(it)
    assert second_entry.tracker_loop == 0
    assert isinstance(second_hint, Registered)
    assert second_hint.unit.name == "Probe"
    with pytest.raises(StopIteration):
        next(it)
    assert 0 in it.state.user_state
    assert it.state.units[5].name == "Probe"
    assert it.state.filename == "game.SC2Replay"


def test_loops_accumulate_and_are_non_decreasing():
    events = [TrackerEvent(d, _born(i, "SCV", 1)) for i, d in enumerate([0, 16, 160, 0])]
    loops = [entry.tracker_loop for entry, _ in TrackerEventIterator(events)]
    assert loops[0] == 0
    assert loops == sorted(loops)
    assert loops[2] == loops[3]
    assert loops[2] > loops[1] > loops[0]


def test_player_filter_skips_output_but_state_still_updated():
    events = [
        TrackerEvent(0, _born(1, "Drone", 1)),
        TrackerEvent(0, _born(2, "Drone", 2)),
    ]
    it = TrackerEventIterator(events, filters=ReplayFilters(player_id=2))
    entries = [entry for entry, _ in it]
    assert [e.event.unit_tag_index for e in entries] == [2]
    assert set(it.state.units) == {1, 2}


def test_min_and_max_loop_filters():
    events = [
        TrackerEvent(0, _born(1, "SCV", 1)),
        TrackerEvent(1000, _born(2, "SCV", 1)),
    ]
    late = list(TrackerEventIterator(events, filters=ReplayFilters(min_loop=1)))
    assert [e.event.unit_tag_index for e, _ in late] == [2]
    early = list(TrackerEventIterator(events, filters=ReplayFilters(max_loop=0)))
    assert [e.event.unit_tag_index for e, _ in early] == [1]


def test_with_filters_returns_same_iterator():
    events = [TrackerEvent(0, PlayerStatsEvent(player_id=1))]
    it = TrackerEventIterator(events)
    assert it.with_filters(ReplayFilters()) is it
    # Stats are skipped unless include_stats is set.
    assert list(it) == []


def test_collect_player_stats_rows():
    stats = PlayerStats(minerals_current=50, food_used=12)
    events = [
        TrackerEvent(0, PlayerStatsEvent(player_id=1, stats=stats)),
        TrackerEvent(0, _born(1, "SCV", 1)),
    ]
    rows = TrackerEventIterator(events).collect_into_player_stats_flat_rows("abc")
    assert len(rows) == 1
    assert rows[0].player_id == 1
    assert rows[0].minerals_current == 50
    assert rows[0].food_used == 12
    assert rows[0].ext_replay_loop == 0
    assert rows[0].ext_replay_seconds == 0
    assert rows[0].ext_fs_replay_sha256 == "abc"


def test_collect_upgrade_rows():
    events = [
        TrackerEvent(0, UpgradeEvent(player_id=2, upgrade_type_name="Stimpack", count=1)),
        TrackerEvent(0, _born(1, "SCV", 1)),
    ]
    rows = TrackerEventIterator(events).collect_into_upgrades_flat_rows("digest")
    assert [(r.player_id, r.name, r.count) for r in rows] == [(2, "Stimpack", 1)]
    assert rows[0].ext_fs_replay_sha256 == "digest"


def test_collect_unit_born_rows():
    events = [
        TrackerEvent(0, _born(1, "Probe", 1, x=3, y=4)),
        TrackerEvent(
            0,
            UnitInitEvent(
                unit_tag_index=2,
                unit_tag_recycle=1,
                unit_type_name="Pylon",
                control_player_id=1,
                upkeep_player_id=1,
                x=7,
                y=8,
            ),
        ),
        TrackerEvent(0, UnitDoneEvent(unit_tag_index=2, unit_tag_recycle=1)),
        TrackerEvent(0, UnitTypeChangeEvent(9, 1, "Unknown")),
        TrackerEvent(0, UnitTypeChangeEvent(1, 1, "Archon")),
    ]
    rows = TrackerEventIterator(events).collect_into_unit_born_flat_rows("sha")
    assert [r.unit_tag_index for r in rows] == [1, 2, 1]
    assert (rows[0].unit_type_name, rows[0].x, rows[0].y) == ("Probe", 3.0, 4.0)
    assert (rows[1].unit_type_name, rows[1].x, rows[1].y) == ("Pylon", 7.0, 8.0)
    assert rows[1].control_player_id == 1
    # The type change hint carries the unit as it was before the change.
    assert rows[2].unit_type_name == "Probe"
    assert all(r.ext_fs_replay_sha256 == "sha" for r in rows)


def test_unit_done_without_init_raises():
    events = [TrackerEvent(0, UnitDoneEvent(unit_tag_index=4, unit_tag_recycle=1))]
    with pytest.raises(ValueError):
        TrackerEventIterator(events).collect_into_unit_born_flat_rows("sha")


def test_collect_unit_died_rows():
    events = [
        TrackerEvent(0, _born(1, "Zergling", 1)),
        TrackerEvent(0, _born(2, "Marine", 2)),
        TrackerEvent(
            0,
            UnitDiedEvent(
                unit_tag_index=1,
                unit_tag_recycle=1,
                killer_player_id=2,
                x=5,
                y=6,
                killer_unit_tag_index=2,
                killer_unit_tag_recycle=1,
            ),
        ),
    ]
    it = TrackerEventIterator(events)
    rows = it.collect_into_unit_died_flat_rows("sha", {2: "Raynor"})
    assert len(rows) == 1
    row = rows[0]
    assert row.unit_died_name == "Zergling"
    assert row.unit_killer_name == "Marine"
    assert row.ext_replay_detail_killer_player_name == "Raynor"
    assert (row.x, row.y) == (5, 6)
    assert 1 not in it.state.units


def test_died_hint_is_unregistered():
    events = [
        TrackerEvent(0, _born(1, "Zergling", 1)),
        TrackerEvent(0, UnitDiedEvent(unit_tag_index=1, unit_tag_recycle=1)),
    ]
    hints = [hint for _, hint in TrackerEventIterator(events)]
    assert isinstance(hints[1], Unregistered)
    assert hints[1].killer is None
    assert hints[1].killed.name == "Zergling"