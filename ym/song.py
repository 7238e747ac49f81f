from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Sequence, Tuple

from .archive import Decompressor, unwrap
from .digidrums import DigiDrumSample, extract_digidrums, sample_bank as make_sample_bank
from .effects import MFP_TIMER_HZ
from .formats import Variant, identify
from .frames import RegisterSnapshot, reconstruct_frames
from .header import ContainerHeader, parse_header
from .sequence import FrameSequence


@dataclass(frozen=True)
class DecodedFile:
    """A fully decoded YM file.

    ``len(frames) == header.frame_count`` always holds.  Instances are
    immutable and may be shared between any number of :class:`FrameSequence`
    cursors.
    """

    header: ContainerHeader
    digidrums: Tuple[DigiDrumSample, ...]
    frames: Tuple[RegisterSnapshot, ...]

    @property
    def variant(self) -> Variant:
        return self.header.variant

    @property
    def duration_seconds(self) -> float:
        return self.header.frame_count / self.header.frame_rate_hz

    @property
    def frame_cycles(self) -> float:
        """Chip clock cycles per frame."""
        return self.header.chip_clock_hz / self.header.frame_rate_hz

    def timer_interval(self, divisor: int) -> float:
        """Chip clock cycles between two ticks of an MFP timer effect."""
        return self.header.chip_clock_hz * divisor / MFP_TIMER_HZ

    def sequence(self) -> FrameSequence:
        return FrameSequence(self)


def decode(
    data: bytes,
    *,
    decompress: Decompressor | None = None,
    file_name: str = "",
    sample_bank: Sequence[bytes] | None = None,
) -> DecodedFile:
    """Decode a whole YM file, LHA-wrapped or not.

    ``decompress`` replaces the stock ``lhafile`` unpacker.  ``file_name``
    is the title fallback for variants without metadata.  ``sample_bank``
    supplies 4-bit digi-drum samples for files that carry none (YM2!).
    """
    member = unwrap(data, decompress)
    raw = member.data
    variant, offset = identify(raw)
    header, layout = parse_header(
        raw,
        variant,
        offset,
        file_name=member.name or file_name,
        created=member.created,
    )
    digidrums = extract_digidrums(raw, layout.samples, header.attributes)
    if not digidrums and sample_bank is not None:
        digidrums = make_sample_bank(sample_bank)
    frames = reconstruct_frames(raw, header, layout)
    return DecodedFile(header=header, digidrums=digidrums, frames=frames)


def decode_file(path: str | Path, **kwargs) -> DecodedFile:
    path = Path(path)
    kwargs.setdefault("file_name", path.name)
    return decode(path.read_bytes(), **kwargs)
