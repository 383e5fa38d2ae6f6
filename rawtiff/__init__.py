"""rawtiff -- TIFF/DNG directory walker and Magic Lantern RAW footer reader."""

__version__ = "1.0.0"

from rawtiff.errors import (
    BoundsError,
    FileAccessError,
    FormatError,
    RawTiffError,
)
from rawtiff.config import ParserConfig
from rawtiff.tiff import (
    ByteOrderBuffer,
    Directory,
    DirectoryChain,
    TagEntry,
    TiffHandler,
    TiffType,
)
from rawtiff.models import DirectorySummary, RawFooterInfo, TagSummary
from rawtiff.raw_footer import RawFooterReader
from rawtiff.formats import detect_format

__all__ = [
    "__version__",
    "RawTiffError",
    "FormatError",
    "BoundsError",
    "FileAccessError",
    "ParserConfig",
    "ByteOrderBuffer",
    "TiffType",
    "TagEntry",
    "Directory",
    "DirectoryChain",
    "TiffHandler",
    "DirectorySummary",
    "TagSummary",
    "RawFooterInfo",
    "RawFooterReader",
    "detect_format",
]
