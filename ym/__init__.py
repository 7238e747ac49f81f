"""Decoder for YM chiptune files (YM2! through YM6!)."""

from .archive import ArchiveMember, is_lha, lha_decompress, unwrap  # noqa: F401
from .digidrums import DigiDrumSample, extract_digidrums  # noqa: F401
from .effects import (  # noqa: F401
    MFP_TIMER_HZ,
    EffectCommand,
    FxType,
    LiteralValue,
    decode_fx_register,
    frame_effects,
)
from .errors import (  # noqa: F401
    ArchiveError,
    DecodeError,
    MalformedHeader,
    TruncatedData,
    TruncatedDigiDrum,
    TruncatedFrameData,
    TruncatedHeader,
    UnrecognizedFormat,
)
from .formats import CHECK_STRING, Variant, identify  # noqa: F401
from .frames import RegisterSnapshot, reconstruct_frames  # noqa: F401
from .header import (  # noqa: F401
    DEFAULT_CHIP_CLOCK_HZ,
    DEFAULT_FRAME_RATE_HZ,
    ContainerHeader,
    HeaderWarning,
    SongAttributes,
    parse_header,
)
from .sequence import (  # noqa: F401
    DigiDrumTrigger,
    FrameSequence,
    MissingDigiDrum,
    PlaybackStep,
)
from .song import DecodedFile, decode, decode_file  # noqa: F401
