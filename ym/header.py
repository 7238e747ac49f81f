"""Per-variant YM header layouts.

Layouts after the 4-byte magic (all integers big-endian):

  YM2! / YM3!   no header; frames fill the payload, an extra 4 bytes at the
                end (payload % 14 == 4) hold the loop frame
  YM3b          same, the trailing u32 loop frame is mandatory
  YM4!          "LeOnArD!" u32 frames, u32 attributes, u16 digi-drums,
                u32 loop frame
  YM5! / YM6!   "LeOnArD!" u32 frames, u32 attributes, u16 digi-drums,
                u32 chip clock, u16 frame rate, u32 loop frame,
                u16 extra-data size + extra data

The LeOnArD! variants continue with the digi-drum table (u32 size + data
per sample), then title, author and comment as NUL-terminated strings, the
frame block and an ``End!`` trailer.
"""

from __future__ import annotations

import struct
from dataclasses import dataclass
from datetime import datetime
from enum import IntFlag
from typing import Callable, Dict, List, Tuple

from .errors import (
    MalformedHeader,
    TruncatedDigiDrum,
    TruncatedFrameData,
    TruncatedHeader,
)
from .formats import Variant


DEFAULT_CHIP_CLOCK_HZ = 2_000_000  # Atari ST YM2149
DEFAULT_FRAME_RATE_HZ = 50
MAX_DIGIDRUMS = 32
LEGACY_LOOP_SIZE = 4
END_TAG = b"End!"


class SongAttributes(IntFlag):
    NONE = 0
    INTERLEAVED = 0x0000_0001
    DIGIDRUM_SIGNED = 0x0000_0002
    DIGIDRUM_4BIT = 0x0000_0004

    @property
    def is_interleaved(self) -> bool:
        return bool(self & SongAttributes.INTERLEAVED)


@dataclass(frozen=True)
class HeaderWarning:
    """A non-fatal problem with one header field."""

    field: str
    message: str
    offset: int | None = None

    def __str__(self) -> str:
        where = f" at 0x{self.offset:X}" if self.offset is not None else ""
        return f"{self.field}: {self.message}{where}"


@dataclass(frozen=True)
class ContainerHeader:
    variant: Variant
    frame_count: int
    chip_clock_hz: int = DEFAULT_CHIP_CLOCK_HZ
    frame_rate_hz: int = DEFAULT_FRAME_RATE_HZ
    loop_frame: int = 0
    title: str = ""
    author: str = ""
    comment: str = ""
    digidrum_count: int = 0
    attributes: SongAttributes = SongAttributes.INTERLEAVED
    warnings: Tuple[HeaderWarning, ...] = ()
    created: datetime | None = None

    @property
    def register_width(self) -> int:
        return self.variant.register_width

    @property
    def has_loop(self) -> bool:
        return self.loop_frame < self.frame_count


@dataclass(frozen=True)
class SampleEntry:
    """Location of one digi-drum sample inside the file buffer."""

    offset: int
    size: int


@dataclass(frozen=True)
class DataLayout:
    """Where the sample and frame data live, as found by the header parser."""

    samples: Tuple[SampleEntry, ...]
    frames_offset: int
    frames_end: int


class _Cursor:
    """Bounds-checked big-endian reader over the file buffer."""

    def __init__(self, data: bytes, pos: int) -> None:
        self.data = data
        self.pos = pos

    @property
    def remaining(self) -> int:
        return len(self.data) - self.pos

    def _take(self, size: int, name: str) -> int:
        if self.remaining < size:
            raise TruncatedHeader(
                f"file ended inside the {name} field",
                offset=self.pos,
                expected=size,
                found=max(self.remaining, 0),
            )
        start = self.pos
        self.pos += size
        return start

    def u16(self, name: str) -> int:
        return struct.unpack_from(">H", self.data, self._take(2, name))[0]

    def u32(self, name: str) -> int:
        return struct.unpack_from(">I", self.data, self._take(4, name))[0]

    def skip(self, size: int, name: str) -> None:
        self._take(size, name)

    def cstring(self) -> str:
        end = self.data.find(b"\x00", self.pos)
        if end == -1:
            raw = self.data[self.pos :]
            self.pos = len(self.data)
        else:
            raw = self.data[self.pos : end]
            self.pos = end + 1
        return bytes(raw).decode("latin-1")


class _Builder:
    """Mutable scratch state shared by the layout functions."""

    def __init__(self, variant: Variant, file_name: str) -> None:
        self.variant = variant
        self.fields: Dict[str, object] = {"variant": variant}
        self.warnings: List[HeaderWarning] = []
        self.file_name = file_name

    def warn(self, name: str, message: str, offset: int | None = None) -> None:
        self.warnings.append(HeaderWarning(name, message, offset))


def _legacy_layout(cur: _Cursor, b: _Builder) -> DataLayout:
    start = cur.pos
    payload = cur.remaining
    width = b.variant.register_width
    loop_offset = None

    if b.variant is Variant.YM3B:
        if payload < LEGACY_LOOP_SIZE:
            raise TruncatedHeader(
                "file ended before the trailing loop frame",
                offset=start,
                expected=LEGACY_LOOP_SIZE,
                found=payload,
            )
        frame_bytes = payload - LEGACY_LOOP_SIZE
        loop_offset = len(cur.data) - LEGACY_LOOP_SIZE
    else:
        frame_bytes = payload
        if payload % width == LEGACY_LOOP_SIZE:
            frame_bytes = payload - LEGACY_LOOP_SIZE
            loop_offset = len(cur.data) - LEGACY_LOOP_SIZE

    if frame_bytes % width:
        raise TruncatedFrameData(
            f"wrong file size: {frame_bytes} bytes of frame data is not a "
            f"whole number of {width}-register frames",
            offset=start + frame_bytes,
            expected=frame_bytes + width - frame_bytes % width,
            found=frame_bytes,
        )

    frame_count = frame_bytes // width
    if frame_count == 0:
        raise TruncatedFrameData(
            "no frame data", offset=start, expected=width, found=frame_bytes
        )
    loop_frame = 0
    if loop_offset is not None:
        loop_frame = struct.unpack_from(">I", cur.data, loop_offset)[0]

    b.fields.update(
        frame_count=frame_count,
        loop_frame=loop_frame,
        title=b.file_name,
        attributes=SongAttributes.INTERLEAVED,
    )
    return DataLayout(
        samples=(),
        frames_offset=start,
        frames_end=start + frame_count * width,
    )


def _read_counts(cur: _Cursor, b: _Builder) -> int:
    offset = cur.pos
    frame_count = cur.u32("frame_count")
    if frame_count == 0:
        raise MalformedHeader("no frame data", offset=offset, expected=">0", found=0)
    attributes = SongAttributes(cur.u32("attributes") & 0x7)
    offset = cur.pos
    digidrum_count = cur.u16("digidrum_count")
    if digidrum_count > MAX_DIGIDRUMS:
        raise MalformedHeader(
            "too many digi-drum samples",
            offset=offset,
            expected=f"<={MAX_DIGIDRUMS}",
            found=digidrum_count,
        )
    b.fields.update(
        frame_count=frame_count,
        attributes=attributes,
        digidrum_count=digidrum_count,
    )
    return digidrum_count


def _read_frequencies(cur: _Cursor, b: _Builder) -> None:
    offset = cur.pos
    chip_clock_hz = cur.u32("chip_clock_hz")
    if chip_clock_hz == 0:
        raise MalformedHeader("chip clock must not be 0", offset=offset, found=0)
    offset = cur.pos
    frame_rate_hz = cur.u16("frame_rate_hz")
    if frame_rate_hz == 0:
        raise MalformedHeader("frame rate must not be 0", offset=offset, found=0)
    b.fields.update(chip_clock_hz=chip_clock_hz, frame_rate_hz=frame_rate_hz)


def _read_sample_table(cur: _Cursor, count: int) -> Tuple[SampleEntry, ...]:
    entries: List[SampleEntry] = []
    for index in range(count):
        size = cur.u32(f"digidrum[{index}].size")
        if cur.remaining < size:
            raise TruncatedDigiDrum(
                f"digi-drum sample {index} runs past the end of the file",
                offset=cur.pos,
                expected=size,
                found=cur.remaining,
            )
        entries.append(SampleEntry(offset=cur.pos, size=size))
        cur.pos += size
    return tuple(entries)


def _leonard_layout(cur: _Cursor, b: _Builder) -> DataLayout:
    digidrum_count = _read_counts(cur, b)
    if b.variant in (Variant.YM5, Variant.YM6):
        _read_frequencies(cur, b)
    b.fields["loop_frame"] = cur.u32("loop_frame")
    if b.variant in (Variant.YM5, Variant.YM6):
        offset = cur.pos
        extra = cur.u16("extra_data_size")
        cur.skip(extra, "extra_data")
        if extra:
            b.warn("extra_data_size", f"{extra} bytes of unknown header data skipped", offset)

    samples = _read_sample_table(cur, digidrum_count)
    b.fields.update(title=cur.cstring(), author=cur.cstring(), comment=cur.cstring())

    frames_offset = cur.pos
    frames_end = frames_offset + b.fields["frame_count"] * b.variant.register_width
    tag = bytes(cur.data[frames_end : frames_end + len(END_TAG)])
    if len(tag) < len(END_TAG):
        b.warn("end_tag", "no End! trailer", frames_end)
    elif tag != END_TAG:
        b.warn("end_tag", f"invalid End! trailer {tag!r}", frames_end)
    return DataLayout(samples=samples, frames_offset=frames_offset, frames_end=frames_end)


LAYOUTS: Dict[Variant, Callable[[_Cursor, _Builder], DataLayout]] = {
    Variant.YM2: _legacy_layout,
    Variant.YM3: _legacy_layout,
    Variant.YM3B: _legacy_layout,
    Variant.YM4: _leonard_layout,
    Variant.YM5: _leonard_layout,
    Variant.YM6: _leonard_layout,
}


def parse_header(
    data: bytes,
    variant: Variant,
    offset: int,
    *,
    file_name: str = "",
    created: datetime | None = None,
) -> tuple[ContainerHeader, DataLayout]:
    """Parse the header of an identified file.

    ``offset`` is the position just past the magic/check string, as
    returned by :func:`ym.formats.identify`.  ``file_name`` becomes the
    title of the legacy variants, which have none of their own.
    """
    cur = _Cursor(data, offset)
    builder = _Builder(variant, file_name)
    layout = LAYOUTS[variant](cur, builder)

    fields = builder.fields
    if fields["loop_frame"] > fields["frame_count"]:
        builder.warn(
            "loop_frame",
            f"loop frame {fields['loop_frame']} beyond frame count "
            f"{fields['frame_count']}; looping disabled",
        )
        fields["loop_frame"] = fields["frame_count"]

    header = ContainerHeader(
        warnings=tuple(builder.warnings),
        created=created,
        **fields,
    )
    return header, layout
