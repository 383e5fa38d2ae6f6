"""Classic TIFF directory parser package.

Re-exports all public names so callers can ``from rawtiff.tiff import X``.
"""

# --- buffer.py: byte-order aware reads ---
from rawtiff.tiff.buffer import (  # noqa: F401
    BIG_ENDIAN,
    LITTLE_ENDIAN,
    ByteOrderBuffer,
)

# --- tags.py: value types, tag ids and names ---
from rawtiff.tiff.tags import (  # noqa: F401
    TIFF_TYPES,
    TAG_NAMES,
    PHOTOMETRIC_NAMES,
    PHOTOMETRIC_CFA,
    PHOTOMETRIC_LINEAR_RAW,
    PHOTOMETRIC_UNSPECIFIED,
    TAG_IMAGE_LENGTH,
    TAG_IMAGE_WIDTH,
    TAG_PHOTOMETRIC,
    TAG_STRIP_BYTE_COUNTS,
    TAG_STRIP_OFFSETS,
    TAG_SUB_IFDS,
    TAG_TILE_BYTE_COUNTS,
    TAG_TILE_OFFSETS,
    TiffType,
    tag_name,
)

# --- entry.py / directory.py / chain.py: IFD model ---
from rawtiff.tiff.entry import TagEntry, resolve  # noqa: F401
from rawtiff.tiff.directory import Directory, MAX_IFD_ENTRIES  # noqa: F401
from rawtiff.tiff.chain import DirectoryChain  # noqa: F401

# --- handler.py: whole-file access ---
from rawtiff.tiff.handler import TiffHandler, TIFF_MAGIC  # noqa: F401
