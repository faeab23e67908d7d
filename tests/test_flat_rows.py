from dataclasses import fields

import pytest

from s2replay.decoder import convert_tracker_loop_to_seconds
from s2replay.events import (
    PlayerStats,
    PlayerStatsEvent,
    UnitBornEvent,
    UnitDiedEvent,
    UnitDoneEvent,
    UnitInitEvent,
    UnitTypeChangeEvent,
    UpgradeEvent,
)
from s2replay.flat_rows import (
    UNKNOWN_PLAYER_ID,
    PlayerStatsFlatRow,
    UnitBornEventFlatRow,
    UnitDiedEventFlatRow,
    UpgradeEventFlatRow,
)
from s2replay.state import (
    NoChange,
    Registered,
    SC2ReplayState,
    SC2Unit,
    Unregistered,
    handle_unit_died,
    handle_unit_done,
    handle_unit_init,
    handle_unit_type_change,
)
from s2replay.unit_cmd import Vec3D

SHA = "abc123"


def _stats():
    values = {f.name: i + 1 for i, f in enumerate(fields(PlayerStats))}
    return PlayerStats(**values)


def test_player_stats_row_copies_every_stat():
    stats = _stats()
    row = PlayerStatsFlatRow.from_event(PlayerStatsEvent(2, stats), 1000, SHA)
    assert row.player_id == 2
    for f in fields(PlayerStats):
        assert getattr(row, f.name) == getattr(stats, f.name)
    assert row.ext_replay_loop == 1000
    assert row.ext_replay_seconds == convert_tracker_loop_to_seconds(1000)
    assert row.ext_fs_replay_sha256 == SHA


def test_player_stats_row_at_loop_zero_has_zero_seconds():
    row = PlayerStatsFlatRow.from_event(PlayerStatsEvent(1, _stats()), 0, SHA)
    assert row.ext_replay_seconds == 0


def test_upgrade_row():
    event = UpgradeEvent(player_id=1, upgrade_type_name="SprayTerran", count=1)
    row = UpgradeEventFlatRow.from_event(event, 500, SHA)
    assert row.player_id == 1
    assert row.name == "SprayTerran"
    assert row.count == 1
    assert row.ext_replay_seconds == convert_tracker_loop_to_seconds(500)
    assert row.ext_fs_replay_sha256 == SHA


def test_unit_born_row_from_event():
    event = UnitBornEvent(
        unit_tag_index=7,
        unit_tag_recycle=1,
        unit_type_name="Probe",
        control_player_id=2,
        upkeep_player_id=2,
        x=30,
        y=40,
        creator_unit_tag_index=3,
        creator_unit_tag_recycle=1,
        creator_ability_name="NexusTrain",
    )
    row = UnitBornEventFlatRow.from_unit_born(event, 200, SHA)
    assert row.unit_type_name == "Probe"
    assert (row.x, row.y) == (30.0, 40.0)
    assert row.creator_unit_tag_index == 3
    assert row.creator_ability_name == "NexusTrain"
    assert row.control_player_id == 2
    assert row.ext_replay_seconds == convert_tracker_loop_to_seconds(200)


def test_unit_done_row_uses_registered_unit():
    state = SC2ReplayState()
    handle_unit_init(
        state,
        10,
        UnitInitEvent(
            unit_tag_index=5,
            unit_tag_recycle=2,
            unit_type_name="Pylon",
            control_player_id=1,
            upkeep_player_id=1,
            x=12,
            y=14,
        ),
    )
    done = UnitDoneEvent(unit_tag_index=5, unit_tag_recycle=2)
    hint = handle_unit_done(state, 20, done)
    row = UnitBornEventFlatRow.from_unit_done(done, 20, SHA, hint)
    assert row.unit_type_name == "Pylon"
    assert row.control_player_id == 1
    assert row.upkeep_player_id == 1
    assert (row.x, row.y) == (12.0, 14.0)
    assert row.creator_unit_tag_index is None
    assert row.unit_tag_recycle == 2


def test_unit_done_row_without_owner_uses_unknown_player():
    unit = SC2Unit(tag_index=9, name="Egg", pos=Vec3D(1.0, 2.0, 0.0))
    row = UnitBornEventFlatRow.from_unit_done(
        UnitDoneEvent(9, 0), 5, SHA, Registered(unit)
    )
    assert row.control_player_id == UNKNOWN_PLAYER_ID
    assert row.upkeep_player_id == UNKNOWN_PLAYER_ID


def test_unit_type_change_row_carries_previous_unit():
    state = SC2ReplayState()
    handle_unit_init(
        state,
        1,
        UnitInitEvent(
            unit_tag_index=4,
            unit_type_name="Zergling",
            control_player_id=2,
            x=3,
            y=4,
        ),
    )
    change = UnitTypeChangeEvent(4, 0, "BanelingCocoon")
    hint = handle_unit_type_change(state, 2, change)
    row = UnitBornEventFlatRow.from_unit_type_change(change, 2, SHA, hint)
    assert row.unit_type_name == "Zergling"
    assert row.control_player_id == 2


@pytest.mark.parametrize("hint", [NoChange(), Unregistered(None, SC2Unit())])
def test_unit_done_rejects_other_hints(hint):
    with pytest.raises(ValueError):
        UnitBornEventFlatRow.from_unit_done(UnitDoneEvent(1, 0), 0, SHA, hint)


def test_unit_type_change_rejects_no_change():
    with pytest.raises(ValueError):
        UnitBornEventFlatRow.from_unit_type_change(
            UnitTypeChangeEvent(1, 0, "X"), 0, SHA, NoChange()
        )


def test_unit_died_row_with_killer_and_names():
    state = SC2ReplayState()
    state.units[1] = SC2Unit(tag_index=1, name="Marine", user_id=1)
    state.units[2] = SC2Unit(tag_index=2, name="Zealot", user_id=2)
    event = UnitDiedEvent(
        unit_tag_index=1,
        unit_tag_recycle=3,
        killer_player_id=2,
        x=8,
        y=9,
        killer_unit_tag_index=2,
        killer_unit_tag_recycle=1,
    )
    hint = handle_unit_died(state, 100, event)
    row = UnitDiedEventFlatRow.from_event(event, 100, hint, SHA, {2: "Alice"})
    assert row.unit_died_name == "Marine"
    assert row.unit_killer_name == "Zealot"
    assert row.ext_replay_detail_killer_player_name == "Alice"
    assert (row.x, row.y) == (8, 9)
    assert row.killer_unit_tag_index == 2
    assert row.ext_replay_seconds == convert_tracker_loop_to_seconds(100)


def test_unit_died_row_without_killer():
    event = UnitDiedEvent(unit_tag_index=1, unit_tag_recycle=0)
    hint = Unregistered(killer=None, killed=SC2Unit(tag_index=1, name="Larva"))
    row = UnitDiedEventFlatRow.from_event(event, 0, hint, SHA, None)
    assert row.unit_killer_name == ""
    assert row.ext_replay_detail_killer_player_name == ""
    assert row.unit_died_name == "Larva"


def test_unit_died_row_unknown_player_name_is_empty():
    event = UnitDiedEvent(unit_tag_index=1, killer_player_id=5)
    hint = Unregistered(killer=None, killed=SC2Unit(tag_index=1, name="SCV"))
    row = UnitDiedEventFlatRow.from_event(event, 0, hint, SHA, {1: "Bob"})
    assert row.ext_replay_detail_killer_player_name == ""


def test_unit_died_rejects_registered_hint():
    with pytest.raises(ValueError):
        UnitDiedEventFlatRow.from_event(
            UnitDiedEvent(), 0, Registered(SC2Unit()), SHA, {}
        )