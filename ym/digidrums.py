"""Digi-drum sample extraction.

Samples are stored back to back after the fixed header, each preceded by
its u32 size.  They are played at a rate set per trigger, never by the file.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Sequence, Tuple

from .errors import TruncatedDigiDrum
from .header import SampleEntry, SongAttributes


@dataclass(frozen=True)
class DigiDrumSample:
    index: int
    data: bytes
    attributes: SongAttributes = SongAttributes.NONE

    def __len__(self) -> int:
        return len(self.data)

    def levels(self) -> bytes:
        """Return the sample as 4-bit volume levels (0-15)."""
        if self.attributes & SongAttributes.DIGIDRUM_4BIT:
            return bytes(b & 0x0F for b in self.data)
        if self.attributes & SongAttributes.DIGIDRUM_SIGNED:
            return bytes(((b + 0x80) & 0xFF) >> 4 for b in self.data)
        return bytes(b >> 4 for b in self.data)


def extract_digidrums(
    data: bytes,
    entries: Sequence[SampleEntry],
    attributes: SongAttributes = SongAttributes.NONE,
) -> Tuple[DigiDrumSample, ...]:
    samples = []
    for index, entry in enumerate(entries):
        end = entry.offset + entry.size
        if end > len(data):
            raise TruncatedDigiDrum(
                f"digi-drum sample {index} runs past the end of the file",
                offset=entry.offset,
                expected=entry.size,
                found=max(len(data) - entry.offset, 0),
            )
        samples.append(
            DigiDrumSample(
                index=index,
                data=bytes(data[entry.offset : end]),
                attributes=attributes,
            )
        )
    return tuple(samples)


def sample_bank(blobs: Sequence[bytes]) -> Tuple[DigiDrumSample, ...]:
    """Wrap host-supplied 4-bit sample data, e.g. the YM2! built-in drums."""
    return tuple(
        DigiDrumSample(index=i, data=bytes(blob), attributes=SongAttributes.DIGIDRUM_4BIT)
        for i, blob in enumerate(blobs)
    )
