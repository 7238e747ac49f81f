"""Errors raised while decoding YM files.

Every error is a ``ValueError`` so callers that already guard parsers with
``except ValueError`` keep working.  Each carries the byte offset where the
problem was detected plus what was expected and what was found, for
diagnostic reporting.
"""

from __future__ import annotations


class DecodeError(ValueError):
    """Base class for every fatal decode failure."""

    def __init__(
        self,
        message: str,
        *,
        offset: int | None = None,
        expected: object = None,
        found: object = None,
    ) -> None:
        super().__init__(message)
        self.offset = offset
        self.expected = expected
        self.found = found

    def __str__(self) -> str:
        text = super().__str__()
        if self.offset is not None:
            text = f"{text} (at offset 0x{self.offset:X})"
        return text


class UnrecognizedFormat(DecodeError):
    """Magic token missing or unknown."""


class ArchiveError(DecodeError):
    """The LHA envelope could not be unpacked."""


class MalformedHeader(DecodeError):
    """A header field holds a value the file cannot be played with."""


class TruncatedData(DecodeError):
    """The buffer ended before a mandatory field or block was complete."""


class TruncatedHeader(TruncatedData):
    pass


class TruncatedDigiDrum(TruncatedData):
    pass


class TruncatedFrameData(TruncatedData):
    pass
