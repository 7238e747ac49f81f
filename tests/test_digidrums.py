from pathlib import Path
import sys

import pytest

REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

from ym import decode  # noqa: E402
from ym.digidrums import DigiDrumSample, extract_digidrums  # noqa: E402
from ym.errors import TruncatedDigiDrum  # noqa: E402
from ym.header import SampleEntry, SongAttributes  # noqa: E402

from synthetic import blank_rows, build_leonard  # noqa: E402


def test_samples_extracted_in_table_order() -> None:
    data = build_leonard(b"YM6!", blank_rows(2), samples=[b"\x01\x02\x03", b"", b"\xFF"])
    song = decode(data)
    assert [s.index for s in song.digidrums] == [0, 1, 2]
    assert [s.data for s in song.digidrums] == [b"\x01\x02\x03", b"", b"\xFF"]
    assert len(song.digidrums) == song.header.digidrum_count


def test_sample_declared_past_end_is_truncated() -> None:
    data = build_leonard(b"YM5!", blank_rows(1), samples=[b"\x00" * 8])
    # Cut inside the sample body: header(12 + 22) + size word(4) + 3 bytes.
    with pytest.raises(TruncatedDigiDrum) as excinfo:
        decode(data[: 12 + 22 + 4 + 3])
    assert excinfo.value.expected == 8
    assert excinfo.value.found == 3


def test_extract_rechecks_bounds() -> None:
    with pytest.raises(TruncatedDigiDrum):
        extract_digidrums(b"\x00" * 4, [SampleEntry(offset=2, size=4)])


@pytest.mark.parametrize(
    "attributes, raw, levels",
    [
        (SongAttributes.NONE, b"\x00\x7F\x80\xFF", b"\x00\x07\x08\x0F"),
        (SongAttributes.DIGIDRUM_SIGNED, b"\x00\x7F\x80\xFF", b"\x08\x0F\x00\x07"),
        (SongAttributes.DIGIDRUM_4BIT, b"\x00\x07\x0F", b"\x00\x07\x0F"),
    ],
)
def test_levels_follow_sample_encoding(attributes, raw: bytes, levels: bytes) -> None:
    sample = DigiDrumSample(index=0, data=raw, attributes=attributes)
    assert sample.levels() == levels
    assert sample.data == raw
