"""TIFF value types and well-known tag ids."""

from enum import IntEnum
from typing import Dict, Tuple

from rawtiff.errors import FormatError

# TIFF type definitions: {type_id: (element_size_bytes, struct_format)}
TIFF_TYPES: Dict[int, Tuple[int, str]] = {
    1: (1, 'B'),    # BYTE
    2: (1, 'c'),    # ASCII
    3: (2, 'H'),    # SHORT
    4: (4, 'I'),    # LONG
    5: (8, 'II'),   # RATIONAL (num/denom)
    6: (1, 'b'),    # SBYTE
    7: (1, 'B'),    # UNDEFINED
    8: (2, 'h'),    # SSHORT
    9: (4, 'i'),    # SLONG
    10: (8, 'ii'),  # SRATIONAL
    11: (4, 'f'),   # FLOAT
    12: (8, 'd'),   # DOUBLE
    13: (4, 'I'),   # IFD (offset, TIFF Technical Note 1)
}


class TiffType(IntEnum):
    """Value type of a directory entry."""

    BYTE = 1
    ASCII = 2
    SHORT = 3
    LONG = 4
    RATIONAL = 5
    SBYTE = 6
    UNDEFINED = 7
    SSHORT = 8
    SLONG = 9
    SRATIONAL = 10
    FLOAT = 11
    DOUBLE = 12
    IFD = 13

    @property
    def width(self) -> int:
        return TIFF_TYPES[self.value][0]

    @property
    def struct_format(self) -> str:
        return TIFF_TYPES[self.value][1]

    @property
    def is_rational(self) -> bool:
        return self in (TiffType.RATIONAL, TiffType.SRATIONAL)

    @property
    def is_integer(self) -> bool:
        return self in _INTEGER_TYPES

    @classmethod
    def from_id(cls, type_id: int) -> 'TiffType':
        """Map a raw type id to a TiffType, raising FormatError if unknown."""
        try:
            return cls(type_id)
        except ValueError:
            raise FormatError(f'Unrecognized TIFF value type {type_id}') from None


_INTEGER_TYPES = frozenset({
    TiffType.BYTE, TiffType.SHORT, TiffType.LONG,
    TiffType.SBYTE, TiffType.SSHORT, TiffType.SLONG, TiffType.IFD,
})


# Tag ids used by the directory walker and its consumers
TAG_IMAGE_WIDTH = 256
TAG_IMAGE_LENGTH = 257
TAG_BITS_PER_SAMPLE = 258
TAG_COMPRESSION = 259
TAG_PHOTOMETRIC = 262
TAG_STRIP_OFFSETS = 273
TAG_STRIP_BYTE_COUNTS = 279
TAG_TILE_OFFSETS = 324
TAG_TILE_BYTE_COUNTS = 325
TAG_SUB_IFDS = 330

# PhotometricInterpretation values
PHOTOMETRIC_UNSPECIFIED = -1
PHOTOMETRIC_CFA = 32803
PHOTOMETRIC_LINEAR_RAW = 34892

# Well-known TIFF / DNG tag names
TAG_NAMES: Dict[int, str] = {
    254: 'NewSubfileType', 256: 'ImageWidth', 257: 'ImageLength',
    258: 'BitsPerSample', 259: 'Compression', 262: 'PhotometricInterpretation',
    270: 'ImageDescription', 271: 'Make', 272: 'Model',
    273: 'StripOffsets', 274: 'Orientation', 277: 'SamplesPerPixel',
    278: 'RowsPerStrip', 279: 'StripByteCounts', 282: 'XResolution',
    283: 'YResolution', 284: 'PlanarConfiguration', 296: 'ResolutionUnit',
    305: 'Software', 306: 'DateTime', 315: 'Artist',
    322: 'TileWidth', 323: 'TileLength',
    324: 'TileOffsets', 325: 'TileByteCounts', 330: 'SubIFDs',
    33421: 'CFARepeatPatternDim', 33422: 'CFAPattern',
    33434: 'ExposureTime', 33437: 'FNumber',
    34665: 'ExifIFDPointer', 34853: 'GPSInfoIFDPointer',
    50706: 'DNGVersion', 50707: 'DNGBackwardVersion',
    50708: 'UniqueCameraModel', 50710: 'CFAPlaneColor', 50711: 'CFALayout',
    50713: 'BlackLevelRepeatDim', 50714: 'BlackLevel', 50717: 'WhiteLevel',
    50718: 'DefaultScale', 50719: 'DefaultCropOrigin', 50720: 'DefaultCropSize',
    50721: 'ColorMatrix1', 50722: 'ColorMatrix2',
    50778: 'CalibrationIlluminant1', 50779: 'CalibrationIlluminant2',
    50829: 'ActiveArea',
}

PHOTOMETRIC_NAMES: Dict[int, str] = {
    PHOTOMETRIC_UNSPECIFIED: 'unspecified',
    0: 'WhiteIsZero', 1: 'BlackIsZero', 2: 'RGB', 3: 'Palette',
    4: 'TransparencyMask', 5: 'CMYK', 6: 'YCbCr', 8: 'CIELab',
    PHOTOMETRIC_CFA: 'CFA', PHOTOMETRIC_LINEAR_RAW: 'LinearRaw',
}


def tag_name(tag_id: int) -> str:
    """Human-readable name for a tag id."""
    return TAG_NAMES.get(tag_id, f'Tag_{tag_id}')
