"""Low level decoding of tag-prefixed replay values and loop/time conversions."""

from __future__ import annotations

import datetime as _dt
import enum
import logging
import os
import struct
from typing import Union

log = logging.getLogger(__name__)

Buffer = Union[bytes, bytearray, memoryview]

#: Ratio between tracker event loops and game event loops.
TRACKER_SPEED_RATIO = 0.70996

#: Milliseconds per game loop at the "Faster" game speed.
GAME_LOOP_MILLISECONDS = 68.58391

#: Offset between the Windows FILETIME epoch (1601) and the Unix epoch, in microseconds.
_FILETIME_EPOCH_OFFSET_MICROS = 11_644_473_600_000_000

_PEEK_LENGTH = 8

_BLUE = "\x1b[34m"
_GREEN = "\x1b[32m"
_YELLOW = "\x1b[33m"
_RESET = "\x1b[0m"

_U32_MAX = 2**32 - 1
_I64_MIN = -(2**63)
_I64_MAX = 2**63 - 1


class DecodeError(ValueError):
    """Raised when the input does not hold the expected encoded value."""


class Tag(enum.IntEnum):
    """Type tags that prefix each value in the versioned encoding."""

    ARRAY = 0x00
    BIT_ARRAY = 0x01
    BLOB = 0x02
    CHOICE = 0x03
    OPT = 0x04
    STRUCT = 0x05
    BOOL = 0x06
    FOURCC = 0x07
    INT = 0x09


def read_file(path: str | os.PathLike[str]) -> bytes:
    """Read a whole file into memory."""
    with open(path, "rb") as handle:
        return handle.read()


def peek_hex(data: Buffer) -> str:
    """Return the first few bytes of ``data`` as hex, for error context."""
    head = bytes(data[:_PEEK_LENGTH])
    text = " ".join(f"{byte:02x}" for byte in head)
    suffix = " .." if len(data) > _PEEK_LENGTH else ""
    return f"[{text}{suffix}]"


def peek_bits(data: Buffer, bit_offset: int) -> str:
    """Render the first byte as coloured bits around ``bit_offset``.

    Bits already consumed are blue, the current bit is green and wrapped in
    ``>``/``<``, and the remaining bits are yellow.
    """
    if not data:
        return "[]"
    parts = ["[0b"]
    for idx, bit in enumerate(f"{data[0]:08b}"):
        if idx < bit_offset:
            parts.append(f"{_BLUE}{bit}{_RESET}")
        elif idx == bit_offset:
            parts.append(f"{_GREEN}>{bit}<{_RESET}")
        else:
            parts.append(f"{_YELLOW}{bit}{_RESET}")
    parts.append("]")
    parts.append(peek_hex(data))
    return "".join(parts)


def _take(data: Buffer, count: int, context: str) -> tuple[bytes, Buffer]:
    if count < 0 or count > len(data):
        raise DecodeError(
            f"{context}: cannot take {count} bytes from {len(data)} at {peek_hex(data)}"
        )
    return bytes(data[:count]), data[count:]


def parse_vlq_int(data: Buffer) -> tuple[int, Buffer]:
    """Decode a zig-zag style variable length integer.

    Returns the value and the remaining input.
    """
    if not data:
        raise DecodeError("v_int: unexpected end of input")
    byte = data[0]
    negative = bool(byte & 1)
    result = (byte >> 1) & 0x3F
    shift = 6
    pos = 1
    while byte & 0x80:
        if pos >= len(data):
            raise DecodeError(f"v_int: truncated value at {peek_hex(data)}")
        byte = data[pos]
        pos += 1
        result |= (byte & 0x7F) << shift
        shift += 7
    return (-result if negative else result), data[pos:]


def expect_tag(data: Buffer, tag: Tag | int) -> Buffer:
    """Check that ``data`` starts with ``tag`` and return what follows it."""
    expected = int(tag)
    if not data or data[0] != expected:
        name = tag.name.lower() if isinstance(tag, Tag) else str(expected)
        raise DecodeError(f"{name} tag: expected 0x{expected:02x} at {peek_hex(data)}")
    return data[1:]


def tagged_bitarray(data: Buffer) -> tuple[bytes, Buffer]:
    """Read a tagged bit array; its length is given in bits."""
    tail = expect_tag(data, Tag.BIT_ARRAY)
    bit_length, tail = parse_vlq_int(tail)
    if bit_length < 0:
        raise DecodeError(f"bitarray: negative length {bit_length}")
    return _take(tail, (bit_length + 7) // 8, "bitarray")


def tagged_blob(data: Buffer) -> tuple[bytes, Buffer]:
    """Read a tagged blob of bytes."""
    tail = expect_tag(data, Tag.BLOB)
    length, tail = parse_vlq_int(tail)
    if length < 0:
        raise DecodeError(f"blob: negative length {length}")
    return _take(tail, length, "blob")


def tagged_vlq_int(data: Buffer) -> tuple[int, Buffer]:
    """Read a tagged variable length integer."""
    return parse_vlq_int(expect_tag(data, Tag.INT))


def tagged_bool(data: Buffer) -> tuple[bool, Buffer]:
    """Read a tagged boolean byte."""
    value, tail = _take(expect_tag(data, Tag.BOOL), 1, "bool")
    return value[0] != 0, tail


def tagged_fourcc(data: Buffer) -> tuple[int, Buffer]:
    """Read a tagged four character code as a big-endian unsigned integer."""
    value, tail = _take(expect_tag(data, Tag.FOURCC), 4, "fourcc")
    return int.from_bytes(value, "big"), tail


def _trunc_div(numerator: int, denominator: int) -> int:
    quotient = abs(numerator) // abs(denominator)
    return quotient if (numerator >= 0) == (denominator >= 0) else -quotient


def transform_to_datetime(time_utc: int, time_local_offset: int) -> _dt.datetime | None:
    """Convert the details' FILETIME-based timestamp into a naive datetime.

    Returns ``None`` when the result is outside the representable range.
    """
    micros = (
        _trunc_div(time_utc, 10)
        - _FILETIME_EPOCH_OFFSET_MICROS
        - _trunc_div(time_local_offset, 10)
    )
    try:
        return _dt.datetime(1970, 1, 1) + _dt.timedelta(microseconds=micros)
    except OverflowError:
        return None


def _f32(value: float) -> float:
    return struct.unpack("<f", struct.pack("<f", value))[0]


def _saturate(value: float, low: int, high: int) -> int:
    if value != value:
        return 0
    if value <= low:
        return low
    if value >= high:
        return high
    return int(value)


def convert_tracker_loop_to_seconds(tracker_loop: int) -> int:
    """Convert a tracker loop into whole seconds of game time."""
    scaled = _f32(_f32(TRACKER_SPEED_RATIO) * _f32(tracker_loop))
    return convert_game_loop_to_seconds(_saturate(scaled, _I64_MIN, _I64_MAX))


def convert_game_loop_to_seconds(game_loop: int) -> int:
    """Convert a game loop into whole seconds at the "Faster" speed."""
    milliseconds = _f32(_f32(game_loop) * _f32(GAME_LOOP_MILLISECONDS))
    seconds = _f32(milliseconds / 1000.0)
    return _saturate(seconds, 0, _U32_MAX)