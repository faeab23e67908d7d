# s2replay

A library for working with StarCraft II replay data once it has been decoded into
tracker events. It has no runtime dependencies beyond the standard library.

## Modules

- `s2replay.decoder` reads the tag-prefixed, byte-aligned values found in replay sectors.
  - `parse_vlq_int`, `tagged_vlq_int`, `tagged_blob`, `tagged_bitarray`, `tagged_bool` and
    `tagged_fourcc` each take a bytes-like input and return `(value, remaining_input)`.
  - `expect_tag` checks the `Tag` byte that prefixes a value.
  - Malformed or truncated input raises `DecodeError`, which is a subclass of `ValueError`.
  - `peek_hex` and `peek_bits` render the start of a buffer so that it can be used in error messages.
  - `read_file` loads a whole file as bytes.
  - `convert_game_loop_to_seconds` and `convert_tracker_loop_to_seconds` turn loops into
    whole seconds at the "Faster" game speed.
  - `transform_to_datetime` turns a details timestamp and its local offset into a naive
    `datetime`. It returns `None` when the result is out of range.
- `s2replay.unit_props` maps unit type names to a display radius and an RGBA colour
  (`get_unit_sized_color`, `user_color`).
- `s2replay.unit_cmd` holds the command a unit is carrying out. This is `SC2UnitCmd` with
  `SC2UnitCmdAbil`, `SC2UnitCmdDataTargetUnit` and the `Vec3D` point type.
- `s2replay.events` defines version-independent event dataclasses:
  - `PlayerSetupEvent`, `PlayerStatsEvent` (with `PlayerStats`), `UpgradeEvent`,
    `UnitBornEvent`, `UnitInitEvent`, `UnitDoneEvent`, `UnitDiedEvent`,
    `UnitOwnerChangeEvent`, `UnitTypeChangeEvent` and `UnitPositionsEvent`.
  - `TrackerEvent` pairs a loop delta with an event.
  - `MessageEvent`, `ChatMessage` and `MessageRecipient` cover chat messages.
  - Each tracker event has `should_skip(filters)`, which takes a `ReplayFilters`.
  - `unit_tag`, `unit_tag_index` and `unit_tag_recycle` convert between tracker event
    index/recycle pairs and game event unit tags.
- `s2replay.state` is the replay state machine. `handle_tracker_event(state, loop, event)`
  applies an event to an `SC2ReplayState` and returns a change hint:
  - `Registered` carries a copy of the unit.
  - `Positions` carries copies of the units that moved.
  - `Unregistered` carries the killed unit and the killer, if known.
  - `NoChange` means nothing changed.

  A `PlayerSetupEvent` that has a user id creates an `SC2UserState` with eleven empty control
  groups. A dead unit is removed from the first ten of them.
- `s2replay.flat_rows` builds flat, table-friendly records:
  - `PlayerStatsFlatRow`, `UpgradeEventFlatRow`, `UnitBornEventFlatRow` and
    `UnitDiedEventFlatRow`.
  - Each record carries the replay loop, the seconds and the replay's SHA-256 digest string.
- `s2replay.iterator` provides `TrackerEventIterator`.
  - It walks an iterable of `TrackerEvent` and accumulates the loop deltas.
  - It scales the loops to game loop units and updates its `state`.
  - It yields `(TrackerEventEntry, change_hint)` pairs.
  - It can collect flat rows with the `collect_into_*_flat_rows` methods.

## Filters

`ReplayFilters` has these fields:

- `player_id`
- `unit_name`
- `include_stats`
- `min_loop`
- `max_loop`

When filters are set on an iterator, events outside the loop range or rejected by the
event's `should_skip` are not yielded. They still update the state. Player stats events are
left out unless `include_stats` is true.

## Installation

```
pip install .
```

## Examples

Decoding tagged integers:

```python
from s2replay.decoder import parse_vlq_int, tagged_vlq_int

value, rest = parse_vlq_int(b"\x12\x2c")
assert value == 9

value, rest = tagged_vlq_int(b"\x09\xac\xda\x0a")
assert value == 87702
```

Applying an event to the state:

```python
from s2replay.events import UnitBornEvent
from s2replay.state import Registered, SC2ReplayState, handle_tracker_event

state = SC2ReplayState()
hint = handle_tracker_event(
    state, 0, UnitBornEvent(unit_tag_index=5, unit_type_name="Probe", control_player_id=1)
)
assert isinstance(hint, Registered)
assert 5 in state.units
```

Iterating tracker events with filters:

```python
from s2replay.events import ReplayFilters, TrackerEvent, UnitBornEvent
from s2replay.iterator import TrackerEventIterator

events = [
    TrackerEvent(delta=0, event=UnitBornEvent(unit_tag_index=1, unit_tag_recycle=1,
                                              unit_type_name="Probe", control_player_id=1,
                                              upkeep_player_id=1, x=10, y=20)),
]
for entry, hint in TrackerEventIterator(events, filename="game.SC2Replay",
                                        filters=ReplayFilters(player_id=1)):
    print(entry.tracker_loop, entry.event, hint)
```

## What it does not do

The package starts from `TrackerEvent` objects. It does not do the following:

- It does not open replay archives.
- It does not read the protocol header.
- It does not decode the per-version event streams, game events, details or init data
  into those objects.
- It has no command-line tool.
- It does not write flat rows to any file format.

## Running the tests

```
pip install .[test]
pytest
```