"""YM container variants and magic-token identification.

  YM2!  Mad Max tunes, 14 registers/frame, built-in digi-drums on voice C
  YM3!  plain 14 registers/frame
  YM3b  YM3! with a trailing loop frame
  YM4!  LeOnArD! header, 16 registers/frame, SID voice + digi-drum
  YM5!  YM4! plus chip clock and frame rate
  YM6!  YM5! with four selectable effects per fx register

Frame count is implicit for the three legacy variants.
"""

from __future__ import annotations

from enum import Enum

from .errors import MalformedHeader, UnrecognizedFormat


MAGIC_SIZE = 4
CHECK_STRING = b"LeOnArD!"


class Variant(Enum):
    YM2 = b"YM2!"
    YM3 = b"YM3!"
    YM3B = b"YM3b"
    YM4 = b"YM4!"
    YM5 = b"YM5!"
    YM6 = b"YM6!"

    @property
    def magic(self) -> bytes:
        return self.value

    @property
    def is_legacy(self) -> bool:
        """Legacy variants have no header block and no explicit frame count."""
        return self in (Variant.YM2, Variant.YM3, Variant.YM3B)

    @property
    def has_check_string(self) -> bool:
        return not self.is_legacy

    @property
    def register_width(self) -> int:
        return 14 if self.is_legacy else 16

    def __str__(self) -> str:
        return self.value.decode("ascii")


_BY_MAGIC = {variant.magic: variant for variant in Variant}


def identify(data: bytes) -> tuple[Variant, int]:
    """Classify ``data`` by its magic token.

    Returns the variant and the offset just past the magic (and past the
    check string for the variants that carry one).
    """
    magic = bytes(data[:MAGIC_SIZE])
    variant = _BY_MAGIC.get(magic)
    if variant is None:
        raise UnrecognizedFormat(
            f"unrecognized file signature {magic!r}",
            offset=0,
            expected=sorted(_BY_MAGIC),
            found=magic,
        )

    pos = MAGIC_SIZE
    if variant.has_check_string:
        check = bytes(data[pos : pos + len(CHECK_STRING)])
        if check != CHECK_STRING:
            raise MalformedHeader(
                f"{variant} file is missing the {CHECK_STRING.decode()} check string",
                offset=pos,
                expected=CHECK_STRING,
                found=check,
            )
        pos += len(CHECK_STRING)
    return variant, pos
