"""LHA envelope detection and unwrapping.

YM files are normally shipped LHA-compressed (method ``-lh5-``).  The
decompressor itself is a collaborator: any callable taking the archive
bytes and returning either the member bytes or an :class:`ArchiveMember`.
:func:`lha_decompress` is the stock collaborator, backed by ``lhafile``.
"""

from __future__ import annotations

import io
from dataclasses import dataclass
from datetime import datetime
from typing import Callable, Union

from .errors import ArchiveError


# LHA level 0/1/2 headers: [size][checksum] "-lh?-" ...
LHA_METHOD_OFFSET = 2
LHA_METHOD_SIZE = 5


@dataclass(frozen=True)
class ArchiveMember:
    data: bytes
    name: str = ""
    created: datetime | None = None
    archived: bool = True


Decompressor = Callable[[bytes], Union[bytes, ArchiveMember]]


def is_lha(data: bytes) -> bool:
    method = bytes(data[LHA_METHOD_OFFSET : LHA_METHOD_OFFSET + LHA_METHOD_SIZE])
    return len(method) == LHA_METHOD_SIZE and method[:3] == b"-lh" and method[4:] == b"-"


def lha_decompress(data: bytes) -> ArchiveMember:
    """Extract the first member of an LHA archive with ``lhafile``."""
    try:
        import lhafile
    except ImportError as exc:
        raise ArchiveError(
            "LHA-compressed input needs the 'lhafile' package (pip install ym-decoder[lha])"
        ) from exc

    try:
        archive = lhafile.LhaFile(io.BytesIO(data))
        infos = archive.infolist()
        if not infos:
            raise ArchiveError("LHA archive holds no members", offset=0)
        info = infos[0]
        member = archive.read(info.filename)
    except ArchiveError:
        raise
    except (lhafile.BadLhafile, EOFError, OSError, KeyError, ValueError, RuntimeError) as exc:
        raise ArchiveError(f"corrupt LHA archive: {exc}", offset=0) from exc

    name = info.filename.replace("\\", "/").rsplit("/", 1)[-1]
    created = info.date_time if isinstance(info.date_time, datetime) else None
    return ArchiveMember(data=bytes(member), name=name, created=created)


def unwrap(data: bytes, decompress: Decompressor | None = None) -> ArchiveMember:
    """Strip the LHA envelope when present; otherwise pass ``data`` through."""
    if not is_lha(data):
        return ArchiveMember(data=bytes(data), archived=False)

    if decompress is None:
        decompress = lha_decompress
    try:
        result = decompress(bytes(data))
    except ArchiveError:
        raise
    except Exception as exc:
        raise ArchiveError(f"decompression failed: {exc}", offset=0) from exc

    if isinstance(result, ArchiveMember):
        return result
    return ArchiveMember(data=bytes(result))
