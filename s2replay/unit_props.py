"""Display size and colour of units by their type name."""

from __future__ import annotations

import logging

log = logging.getLogger(__name__)

Color = tuple[int, int, int, int]

FREYA_ORANGE: Color = (0xEB, 0x79, 0x07, 0xFF)
FREYA_GOLD: Color = (0xEA, 0x9E, 0x36, 0xFF)
FREYA_RED: Color = (0xF8, 0x10, 0x53, 0xFF)
FREYA_BLUE: Color = (0x30, 0xB5, 0xF7, 0xFF)
FREYA_GREEN: Color = (0x0A, 0xEB, 0x9F, 0xFF)
FREYA_LIGHT_BLUE: Color = (0x72, 0xC5, 0xDD, 0xFF)
FREYA_GRAY: Color = (0xB2, 0xC5, 0xC5, 0xFF)
FREYA_PINK: Color = (0xEA, 0xA4, 0x83, 0xFF)
FREYA_LIGHT_GRAY: Color = (0xF4, 0xF5, 0xF8, 0xFF)
FREYA_DARK_BLUE: Color = (0x4D, 0xA7, 0xC2, 0xFF)
FREYA_DARK_GREEN: Color = (0x37, 0xBD, 0xA9, 0xFF)
FREYA_DARK_RED: Color = (0xAE, 0x20, 0x44, 0xFF)
FREYA_VIOLET: Color = (0xA4, 0x01, 0xED, 0xFF)
FREYA_WHITE: Color = (0xFA, 0xF8, 0xFB, 0xFF)
FREYA_YELLOW: Color = (0xF7, 0xD4, 0x54, 0xFF)
FREYA_LIGHT_YELLOW: Color = (0xEA, 0xD8, 0xAD, 0xFF)
FREYA_LIGHT_GREEN: Color = (0x6E, 0xC2, 0x9C, 0xFF)

DEFAULT_UNIT_SIZE = 0.45

_KNOWN_UNITS: dict[str, tuple[float, Color]] = {
    "VespeneGeyser": (DEFAULT_UNIT_SIZE, FREYA_LIGHT_GREEN),
    "SpacePlatformGeyser": (DEFAULT_UNIT_SIZE, FREYA_LIGHT_GREEN),
    "LabMineralField": (0.24, FREYA_LIGHT_BLUE),
    "LabMineralField750": (0.36, FREYA_LIGHT_BLUE),
    "MineralField": (0.48, FREYA_LIGHT_BLUE),
    "MineralField450": (0.6, FREYA_LIGHT_BLUE),
    "MineralField750": (0.72, FREYA_LIGHT_BLUE),
    "XelNagaTower": (0.72, FREYA_WHITE),
    "RichMineralField": (DEFAULT_UNIT_SIZE, FREYA_GOLD),
    "RichMineralField750": (DEFAULT_UNIT_SIZE, FREYA_ORANGE),
    "DestructibleRockEx1DiagonalHugeBLUR": (2.0, FREYA_GRAY),
    "DestructibleDebris6x6": (1.8, FREYA_GRAY),
    "UnbuildablePlatesDestructible": (0.6, FREYA_LIGHT_GRAY),
    "Overlord": (0.6, FREYA_YELLOW),
    "SCV": (0.3, FREYA_LIGHT_GRAY),
    "Drone": (0.3, FREYA_LIGHT_GRAY),
    "Probe": (0.3, FREYA_LIGHT_GRAY),
    "Larva": (0.3, FREYA_LIGHT_GRAY),
    "Hatchery": (1.2, FREYA_PINK),
    "CommandCenter": (1.2, FREYA_PINK),
    "Nexus": (1.2, FREYA_PINK),
    "Broodling": (0.06, FREYA_LIGHT_GRAY),
}

_USER_COLORS: dict[int, Color] = {
    0: FREYA_LIGHT_GREEN,
    1: FREYA_LIGHT_BLUE,
    2: FREYA_LIGHT_GRAY,
    3: FREYA_ORANGE,
}


def get_unit_sized_color(unit_name: str, user_id: int) -> tuple[float, Color]:
    """Return the display radius and colour for a unit type.

    Unknown unit types get the default size and the owning user's colour.
    """
    known = _KNOWN_UNITS.get(unit_name)
    if known is not None:
        return known
    if not unit_name.startswith("Beacon"):
        log.warning("Unknown unit name: '%s'", unit_name)
    return DEFAULT_UNIT_SIZE, user_color(user_id)


def user_color(user_id: int) -> Color:
    """Return the colour assigned to a user id."""
    return _USER_COLORS.get(user_id, FREYA_WHITE)