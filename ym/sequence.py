"""Loop-aware cursor over a decoded frame table.

Each playback session owns one :class:`FrameSequence`; the frame table
itself is shared and never modified.  The sequence is not thread-safe.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Iterator, Sequence, Tuple, Union

from .digidrums import DigiDrumSample
from .effects import EffectCommand, FxType, frame_effects
from .frames import RegisterSnapshot

if TYPE_CHECKING:
    from .song import DecodedFile


@dataclass(frozen=True)
class DigiDrumTrigger:
    sample: int
    divisor: int
    channel: int


@dataclass(frozen=True)
class MissingDigiDrum:
    """A trigger named a sample the file does not contain."""

    sample: int
    channel: int
    available: int

    def __str__(self) -> str:
        return (
            f"digi-drum sample {self.sample} requested on voice "
            f"{'ABC'[self.channel]}, only {self.available} present"
        )


DrumEvent = Union[DigiDrumTrigger, MissingDigiDrum]


@dataclass(frozen=True)
class PlaybackStep:
    frame: int
    snapshot: RegisterSnapshot
    digidrum: DrumEvent | None = None
    effects: Tuple[EffectCommand, ...] = ()


def resolve_digidrum(effect: EffectCommand, samples: Sequence[DigiDrumSample]) -> DrumEvent:
    if effect.data >= len(samples):
        return MissingDigiDrum(sample=effect.data, channel=effect.channel, available=len(samples))
    return DigiDrumTrigger(sample=effect.data, divisor=effect.divisor, channel=effect.channel)


class FrameSequence:
    """Forward-only producer of :class:`PlaybackStep` objects.

    After the last frame the cursor jumps to the loop frame; files whose
    loop frame equals the frame count stop instead.
    """

    def __init__(self, song: "DecodedFile") -> None:
        self.song = song
        self._cursor = 0
        self.loops = 0

    @property
    def cursor(self) -> int:
        return self._cursor

    def reset(self) -> None:
        self._cursor = 0
        self.loops = 0

    def __iter__(self) -> Iterator[PlaybackStep]:
        return self

    def __next__(self) -> PlaybackStep:
        header = self.song.header
        if self._cursor >= header.frame_count:
            if not header.has_loop:
                raise StopIteration
            self._cursor = header.loop_frame
            self.loops += 1

        index = self._cursor
        snapshot = self.song.frames[index]
        effects = tuple(frame_effects(snapshot, header.variant))
        digidrum = None
        for effect in effects:
            if effect.fx is FxType.DIGI_DRUM:
                digidrum = resolve_digidrum(effect, self.song.digidrums)
                break

        self._cursor = index + 1
        return PlaybackStep(frame=index, snapshot=snapshot, digidrum=digidrum, effects=effects)
