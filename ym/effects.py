"""Special-effect decoding for the overloaded fx registers.

The high nibble of registers 1 and 3 (``S`` bits) is not part of the coarse
tone period; from YM4! on it drives timer effects:

  b7 b6 b5 b4
  -  -  0  0   effect off
  -  -  0  1   on voice A
  -  -  1  0   on voice B
  -  -  1  1   on voice C
  0  0  -  -   SID voice    (YM6!; YM4!/YM5! register 1 always SID voice,
  0  1  -  -   DIGI-DRUM     bit 6 = restart the timer)
  1  0  -  -   Sinus SID    (YM6! only)
  1  1  -  -   Sync Buzzer  (YM6! only; YM4!/YM5! register 3 always DIGI-DRUM)

Timer frequency is ``MFP_TIMER_HZ / (prediv * divisor)``; the pre-divisor
sits in bits 5-7 of register 6 (fx0) or 8 (fx1), the divisor in virtual
register 14 (fx0) or 15 (fx1).  The effect payload (volume, sample number
or buzzer shape) is the low 5 bits of the affected voice's volume register.

YM2! only knows digi-drums, on voice C: bit 7 of register 10 set, sample
number in bits 0-6, divisor ``4 * register 12``.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import List, Union

from .formats import Variant
from .frames import ENV_COARSE_REG, RegisterSnapshot


MFP_TIMER_HZ = 2_457_600
PREDIVISORS = (0, 4, 10, 16, 50, 64, 100, 200)

VOL_A_REG = 8
VOL_C_REG = 10
FX_REGISTERS = (1, 3)
PREDIV_REGISTERS = (6, 8)
DIVISOR_REGISTERS = (14, 15)

CHANNEL_MASK = 0x30
TYPE_MASK = 0xC0
TIMER_RESTART = 0x40
YM2_DRUM_FLAG = 0x80
YM2_PREDIV = 4


class FxType(Enum):
    SID_VOICE = 0
    DIGI_DRUM = 1
    SINUS_SID = 2
    SYNC_BUZZER = 3


@dataclass(frozen=True)
class LiteralValue:
    """The fx register carries a plain coarse tone period."""

    value: int


@dataclass(frozen=True)
class EffectCommand:
    fx: FxType
    channel: int  # 0 = A, 1 = B, 2 = C
    divisor: int  # MFP timer divisor, always > 0
    data: int  # volume, sample number or buzzer shape
    restart: bool = False

    @property
    def frequency_hz(self) -> float:
        return MFP_TIMER_HZ / self.divisor


FxRegister = Union[LiteralValue, EffectCommand]


def timer_divisor(prediv_reg: int, divisor_reg: int) -> int:
    return PREDIVISORS[(prediv_reg >> 5) & 0x7] * divisor_reg


def decode_fx_register(snapshot: RegisterSnapshot, variant: Variant, slot: int) -> FxRegister:
    """Decode fx register ``slot`` (0 for register 1, 1 for register 3)."""
    control = snapshot[FX_REGISTERS[slot]]
    literal = LiteralValue(control & 0x0F)
    if variant not in (Variant.YM4, Variant.YM5, Variant.YM6):
        return literal

    channel_bits = (control & CHANNEL_MASK) >> 4
    if channel_bits == 0:
        return literal
    channel = channel_bits - 1

    divisor = timer_divisor(snapshot[PREDIV_REGISTERS[slot]], snapshot[DIVISOR_REGISTERS[slot]])
    if divisor == 0:
        return literal

    restart = False
    if variant is Variant.YM6:
        fx = FxType((control & TYPE_MASK) >> 6)
    elif slot == 0:
        fx = FxType.SID_VOICE
        restart = bool(control & TIMER_RESTART)
    else:
        fx = FxType.DIGI_DRUM

    data = snapshot[VOL_A_REG + channel] & 0x1F
    return EffectCommand(fx=fx, channel=channel, divisor=divisor, data=data, restart=restart)


def decode_ym2_drum(snapshot: RegisterSnapshot) -> EffectCommand | None:
    vol_c = snapshot[VOL_C_REG]
    if not vol_c & YM2_DRUM_FLAG:
        return None
    divisor = YM2_PREDIV * snapshot[ENV_COARSE_REG]
    if divisor == 0:
        return None
    return EffectCommand(fx=FxType.DIGI_DRUM, channel=2, divisor=divisor, data=vol_c & 0x7F)


def frame_effects(snapshot: RegisterSnapshot, variant: Variant) -> List[EffectCommand]:
    """All effects started by one frame, fx0 before fx1."""
    if variant is Variant.YM2:
        drum = decode_ym2_drum(snapshot)
        return [drum] if drum is not None else []
    effects = []
    for slot in range(len(FX_REGISTERS)):
        decoded = decode_fx_register(snapshot, variant, slot)
        if isinstance(decoded, EffectCommand):
            effects.append(decoded)
    return effects
