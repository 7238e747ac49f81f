"""Frame reconstruction: transposition, carry-forward and bounds."""

from pathlib import Path
import sys

import pytest

REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

from ym import decode  # noqa: E402
from ym.errors import TruncatedFrameData  # noqa: E402
from ym.header import DataLayout, parse_header  # noqa: E402
from ym.formats import Variant, identify  # noqa: E402
from ym.frames import (  # noqa: E402
    SENTINELS,
    RegisterSnapshot,
    carry_forward,
    gather_interleaved,
    reconstruct_frames,
)

from synthetic import blank_rows, build_leonard, build_legacy  # noqa: E402


def _constant_columns(count: int, width: int):
    # Register r holds 0x10 + r in every frame; 0xFF never appears.
    return [[0x10 + r for r in range(width)] for _ in range(count)]


def _counting_rows(count: int, width: int):
    return [[(f * 7 + r * 3) % 0xF0 for r in range(width)] for f in range(count)]


@pytest.mark.parametrize("magic", [b"YM2!", b"YM3!", b"YM3b"])
def test_legacy_frame_count_matches_header(magic: bytes) -> None:
    loop = 0 if magic == b"YM3b" else None
    song = decode(build_legacy(magic, _counting_rows(9, 14), loop_frame=loop))
    assert len(song.frames) == song.header.frame_count == 9


@pytest.mark.parametrize("magic", [b"YM4!", b"YM5!", b"YM6!"])
def test_leonard_frame_count_matches_header(magic: bytes) -> None:
    song = decode(build_leonard(magic, _counting_rows(11, 16)))
    assert len(song.frames) == song.header.frame_count == 11


@pytest.mark.parametrize(
    "magic, width",
    [(b"YM3!", 14), (b"YM5!", 16), (b"YM6!", 16)],
)
def test_transpose_keeps_register_columns(magic: bytes, width: int) -> None:
    rows = _constant_columns(6, width)
    data = build_legacy(magic, rows) if width == 14 else build_leonard(magic, rows)
    song = decode(data)
    for frame in song.frames:
        for reg in range(width):
            assert frame[reg] == 0x10 + reg


def test_transpose_keeps_frame_order() -> None:
    rows = _counting_rows(7, 16)
    song = decode(build_leonard(b"YM5!", rows))
    assert [list(f.registers) for f in song.frames] == rows


def test_gather_is_strided() -> None:
    # 2 registers x 3 frames, register-major.
    block = bytes([1, 2, 3, 10, 20, 30])
    assert gather_interleaved(block, 3, 2) == [b"\x01\x0A", b"\x02\x14", b"\x03\x1E"]


def test_non_interleaved_block_is_read_row_by_row() -> None:
    rows = _counting_rows(5, 16)
    song = decode(build_leonard(b"YM6!", rows, attributes=0x0))
    assert [list(f.registers) for f in song.frames] == rows


def test_legacy_snapshots_are_sixteen_slots() -> None:
    song = decode(build_legacy(b"YM3!", _constant_columns(2, 14)))
    frame = song.frames[0]
    assert len(frame) == 16
    assert frame[14] == 0 and frame[15] == 0


def test_shape_sentinel_carries_previous_value() -> None:
    rows = blank_rows(5)
    for frame, shape in enumerate([0xFF, 0x0A, 0xFF, 0x0E, 0xFF]):
        rows[frame][13] = shape
        rows[frame][0] = frame
    song = decode(build_leonard(b"YM5!", rows))
    assert [f[13] for f in song.frames] == [0x00, 0x0A, 0x0A, 0x0E, 0x0E]
    assert [f.shape_written for f in song.frames] == [False, True, False, True, False]
    # Other registers are never held.
    assert [f[0] for f in song.frames] == [0, 1, 2, 3, 4]


def test_carry_forward_law_on_every_variant() -> None:
    for variant, sentinel in SENTINELS.items():
        rows = [bytes([5] * 14), bytes([6] * 13 + [sentinel.value])]
        first, second = carry_forward(rows, sentinel)
        for reg in sentinel.holds:
            assert second[reg] == first[reg], (variant, reg)


def test_ym2_sentinel_also_holds_envelope_period() -> None:
    rows = blank_rows(2, 14)
    rows[0][11], rows[0][13] = 0x33, 0x00
    rows[1][11], rows[1][13] = 0x44, 0xFF
    rows[1][12] = 0x09
    song = decode(build_legacy(b"YM2!", rows))
    second = song.frames[1]
    assert second[11] == 0x33
    assert second[12] == 0x09
    assert second.shape_written is False


def test_truncated_frame_block_is_rejected() -> None:
    data = build_leonard(b"YM5!", _counting_rows(4, 16), end_tag=b"")
    decode(data)
    with pytest.raises(TruncatedFrameData) as excinfo:
        decode(data[:-1])
    assert excinfo.value.expected == 4 * 16
    assert excinfo.value.found == 4 * 16 - 1


def test_truncation_deep_inside_block_is_rejected() -> None:
    data = build_leonard(b"YM6!", _counting_rows(10, 16), end_tag=b"")
    with pytest.raises(TruncatedFrameData):
        decode(data[: len(data) - 70])


def test_trailing_bytes_after_block_are_ignored() -> None:
    rows = _counting_rows(3, 16)
    song = decode(build_leonard(b"YM5!", rows, end_tag=b"End!" + b"\x00" * 9))
    assert [list(f.registers) for f in song.frames] == rows


def test_ay_registers_mask_effect_bits() -> None:
    snap = RegisterSnapshot(registers=bytes([0xFF] * 16))
    regs = snap.ay_registers(Variant.YM6)
    assert len(regs) == 14
    assert regs[1] == 0x0F
    assert regs[6] == 0x1F
    assert regs[8] == 0x1F
    assert regs[13] == 0x0F


def test_ay_registers_apply_ym2_envelope_quirk() -> None:
    snap = RegisterSnapshot(registers=bytes(range(16)))
    regs = snap.ay_registers(Variant.YM2)
    assert regs[11] == 11
    assert regs[12] == 0x00
    assert regs[13] == 0x10


def test_ay_registers_needs_a_variant() -> None:
    snap = RegisterSnapshot(registers=bytes(16))
    with pytest.raises(TypeError):
        snap.ay_registers()


def test_reconstruct_checks_block_end_from_layout() -> None:
    data = build_leonard(b"YM5!", _counting_rows(3, 16), end_tag=b"")
    variant, offset = identify(data)
    header, layout = parse_header(data, variant, offset)
    assert layout.frames_end == len(data)
    assert len(reconstruct_frames(data, header, layout)) == 3

    # A layout claiming more frame bytes than the buffer holds.
    longer = DataLayout(
        samples=layout.samples,
        frames_offset=layout.frames_offset,
        frames_end=layout.frames_end + 16,
    )
    with pytest.raises(TruncatedFrameData) as excinfo:
        reconstruct_frames(data, header, longer)
    assert excinfo.value.expected == 4 * 16
    assert excinfo.value.found == 3 * 16
