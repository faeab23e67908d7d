"""Commands a unit is carrying out: abilities, target points and target units."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterable, Union


@dataclass(frozen=True)
class Vec3D:
    """A point in map space."""

    x: float = 0.0
    y: float = 0.0
    z: float = 0.0


def _as_vec3d(coord: Vec3D | Iterable[float]) -> Vec3D:
    if isinstance(coord, Vec3D):
        return coord
    x, y, z = coord
    return Vec3D(float(x), float(y), float(z))


@dataclass
class SC2UnitCmdAbil:
    """An ability engaged by a unit command."""

    abil_link: int = 0
    ability: str = ""
    abil_cmd_index: int = 0
    abil_cmd_data: int | None = None


@dataclass
class SC2UnitCmdDataTargetUnit:
    """Another unit targeted by a command."""

    target_unit_flags: int = 0
    timer: int = 0
    tag: int = 0
    snapshot_unit_link: int = 0
    snapshot_control_player_id: int | None = None
    snapshot_upkeep_player_id: int | None = None
    snapshot_point: Vec3D = field(default_factory=Vec3D)


#: Command payload: nothing, a target point, a target unit or raw data.
SC2UnitCmdData = Union[None, Vec3D, SC2UnitCmdDataTargetUnit, int]


@dataclass
class SC2UnitCmd:
    """The command a unit is currently executing."""

    cmd_flags: int = 0
    abil: SC2UnitCmdAbil | None = None
    data: SC2UnitCmdData = None
    sequence: int = 0
    other_unit: int | None = None
    unit_group: int | None = None

    def set_data_target_point(self, coord: Vec3D | Iterable[float]) -> None:
        """Point the command at a map location."""
        self.data = _as_vec3d(coord)

    def set_data_target_unit(self, target: SC2UnitCmdDataTargetUnit) -> None:
        """Point the command at another unit."""
        self.data = target