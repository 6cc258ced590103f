"""HTTP Range header parsing and validation.

Only the first requested range is honoured; multi-range (multipart/byteranges)
responses are not produced.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field

from ..errors import RangeNotSatisfiable

_GROUP = re.compile(r"^(\d*)-(\d*)$")


@dataclass(frozen=True, slots=True)
class ExplicitRange:
    start: int
    end: int | None = None


@dataclass(frozen=True, slots=True)
class RangeSpec:
    """A parsed ``Range`` header.

    ``valid`` is False when the header was present but malformed; such a
    request must be answered with 416.
    """

    unit: str | None
    ranges: tuple[ExplicitRange, ...] = field(default_factory=tuple)
    suffix_lengths: tuple[int, ...] = field(default_factory=tuple)
    valid: bool = True

    @property
    def is_empty(self) -> bool:
        return not self.ranges and not self.suffix_lengths


@dataclass(frozen=True, slots=True)
class ByteSpan:
    start: int
    end: int
    total_size: int

    @property
    def length(self) -> int:
        return self.end - self.start + 1

    @property
    def is_full(self) -> bool:
        return self.length == self.total_size

    def content_range(self) -> str:
        return f"bytes {self.start}-{self.end}/{self.total_size}"


def parse_range_header(value: str | None) -> RangeSpec | None:
    """Parse a ``Range`` header value; ``None`` means no header was sent."""
    if value is None:
        return None

    unit, sep, rangeset = value.partition("=")
    unit = unit.strip()
    if not sep or not unit:
        return RangeSpec(unit=unit or None, valid=False)

    ranges: list[ExplicitRange] = []
    suffixes: list[int] = []
    for group in rangeset.split(","):
        match = _GROUP.match(group.strip())
        if match is None:
            return RangeSpec(unit=unit, valid=False)
        start, end = match.groups()
        if start == "" and end == "":
            return RangeSpec(unit=unit, valid=False)
        if start == "":
            suffixes.append(int(end))
        else:
            ranges.append(ExplicitRange(int(start), int(end) if end else None))

    if not ranges and not suffixes:
        return RangeSpec(unit=unit, valid=False)
    return RangeSpec(unit=unit, ranges=tuple(ranges), suffix_lengths=tuple(suffixes))


def resolve_span(total_size: int, start: int | None = None, end: int | None = None) -> ByteSpan:
    """Fill in defaults and check an explicit span against ``total_size``."""
    if start is None:
        start = 0
    if end is None:
        end = total_size - 1

    if start + 1 > total_size or end + 1 > total_size:
        raise RangeNotSatisfiable(f"range {start}-{end} exceeds {total_size} bytes", total_size)
    if start > end:
        raise RangeNotSatisfiable(f"range start {start} is after end {end}", total_size)
    return ByteSpan(start, end, total_size)


def resolve_range(spec: RangeSpec, total_size: int) -> ByteSpan:
    """Pick the byte span a parsed header asks for.

    Explicit ranges win over suffix lengths; only the first of either kind
    is considered.
    """
    if not spec.valid or spec.is_empty:
        raise RangeNotSatisfiable("malformed range header", total_size)
    if spec.unit != "bytes":
        raise RangeNotSatisfiable(f"unsupported range unit {spec.unit!r}", total_size)

    if spec.ranges:
        first = spec.ranges[0]
        return resolve_span(total_size, first.start, first.end)

    length = spec.suffix_lengths[0]
    if length > total_size:
        raise RangeNotSatisfiable(f"suffix length {length} exceeds {total_size} bytes", total_size)
    return resolve_span(total_size, max(0, total_size - length), total_size - 1)
