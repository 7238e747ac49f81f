"""Frame reconstruction: register-major block to per-frame snapshots.

Interleaved files store all ``frame_count`` values of register 0, then all
values of register 1, and so on.  Frame ``f`` is therefore the strided
slice ``block[f : width * frame_count : frame_count]``.

Register map (16 slots, 14 and 15 are virtual):

   0  fine period A        8  volume A  (bits 5-7: fx1 timer pre-divisor)
   1  coarse period A/fx0  9  volume B
   2  fine period B       10  volume C  (YM2!: bit 7 = digi-drum)
   3  coarse period B/fx1 11  envelope fine period
   4  fine period C       12  envelope coarse period
   5  coarse period C     13  envelope shape (0xFF = not written)
   6  noise period (bits 5-7: fx0 timer pre-divisor)
   7  mixer               14  fx0 timer divisor   15  fx1 timer divisor
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, List, Tuple

from .errors import TruncatedFrameData
from .formats import Variant
from .header import ContainerHeader, DataLayout


REGISTER_SLOTS = 16
AY_REGISTER_COUNT = 14
ENV_FINE_REG = 11
ENV_COARSE_REG = 12
ENV_SHAPE_REG = 13

# Bits the AY-3-8910/YM2149 actually latches per register.
AY_REGISTER_MASKS = bytes(
    [0xFF, 0x0F, 0xFF, 0x0F, 0xFF, 0x0F, 0x1F, 0xFF, 0x1F, 0x1F, 0x1F, 0xFF, 0xFF, 0x0F]
)

YM2_ENV_COARSE = 0x00
YM2_ENV_SHAPE = 0x10


@dataclass(frozen=True)
class Sentinel:
    """A stored value meaning "leave these registers as they were"."""

    register: int
    value: int
    holds: Tuple[int, ...]


SENTINELS: Dict[Variant, Sentinel] = {
    Variant.YM2: Sentinel(ENV_SHAPE_REG, 0xFF, (ENV_FINE_REG, ENV_SHAPE_REG)),
    Variant.YM3: Sentinel(ENV_SHAPE_REG, 0xFF, (ENV_SHAPE_REG,)),
    Variant.YM3B: Sentinel(ENV_SHAPE_REG, 0xFF, (ENV_SHAPE_REG,)),
    Variant.YM4: Sentinel(ENV_SHAPE_REG, 0xFF, (ENV_SHAPE_REG,)),
    Variant.YM5: Sentinel(ENV_SHAPE_REG, 0xFF, (ENV_SHAPE_REG,)),
    Variant.YM6: Sentinel(ENV_SHAPE_REG, 0xFF, (ENV_SHAPE_REG,)),
}


@dataclass(frozen=True)
class RegisterSnapshot:
    """Complete register state for one frame.

    ``shape_written`` is False when the envelope shape was carried over from
    the previous frame; writing register 13 restarts the hardware envelope,
    so players should only send it when this is True.
    """

    registers: bytes
    shape_written: bool = True

    def __getitem__(self, register: int) -> int:
        return self.registers[register]

    def __len__(self) -> int:
        return len(self.registers)

    def ay_registers(self, variant: Variant) -> bytes:
        """Return the 14 chip registers with effect bits stripped."""
        regs = bytearray(
            value & mask
            for value, mask in zip(self.registers[:AY_REGISTER_COUNT], AY_REGISTER_MASKS)
        )
        if variant is Variant.YM2:
            regs[ENV_COARSE_REG] = YM2_ENV_COARSE
            regs[ENV_SHAPE_REG] = YM2_ENV_SHAPE
        return bytes(regs)


def _check_block(data: bytes, layout: DataLayout) -> None:
    needed = layout.frames_end - layout.frames_offset
    available = len(data) - layout.frames_offset
    if len(data) < layout.frames_end:
        raise TruncatedFrameData(
            f"frame data holds {available} bytes, need {needed}",
            offset=layout.frames_offset + max(available, 0),
            expected=needed,
            found=available,
        )


def gather_interleaved(block: bytes, frame_count: int, width: int) -> List[bytes]:
    """Undo the register-major transposition.

    Trailing bytes beyond ``width * frame_count`` are ignored.
    """
    end = width * frame_count
    return [bytes(block[f:end:frame_count]) for f in range(frame_count)]


def gather_sequential(block: bytes, frame_count: int, width: int) -> List[bytes]:
    """Split a frame-major block into rows."""
    return [bytes(block[f * width : (f + 1) * width]) for f in range(frame_count)]


def carry_forward(rows: List[bytes], sentinel: Sentinel) -> Tuple[RegisterSnapshot, ...]:
    state = bytearray(REGISTER_SLOTS)  # power-on: all zero
    snapshots = []
    for row in rows:
        written = row[sentinel.register] != sentinel.value
        for reg, value in enumerate(row):
            if written or reg not in sentinel.holds:
                state[reg] = value
        snapshots.append(RegisterSnapshot(registers=bytes(state), shape_written=written))
    return tuple(snapshots)


def reconstruct_frames(
    data: bytes, header: ContainerHeader, layout: DataLayout
) -> Tuple[RegisterSnapshot, ...]:
    width = header.register_width
    frame_count = header.frame_count
    _check_block(data, layout)

    block = memoryview(data)[layout.frames_offset :]
    if header.attributes.is_interleaved:
        rows = gather_interleaved(block, frame_count, width)
    else:
        rows = gather_sequential(block, frame_count, width)
    return carry_forward(rows, SENTINELS[header.variant])
