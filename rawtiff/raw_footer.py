"""Reader for the footer of Magic Lantern RAW image sequences.

A RAW sequence is a run of packed 14-bit little-endian CFA frames followed by
a fixed 192-byte footer. Every footer field is little-endian regardless of
the platform or any TIFF byte-order setting.

Each accessor seeks and reads on its own; nothing is cached. A reader holds
one open file handle and is not safe to share between threads.
"""

import logging
import os
import struct
from pathlib import Path
from typing import BinaryIO, Tuple, Union

from rawtiff.errors import BoundsError, FileAccessError, FormatError
from rawtiff.models import RawFooterInfo

logger = logging.getLogger(__name__)

FOOTER_SIZE = 192
FOOTER_MAGIC = b'RAWM'
SUPPORTED_BITS_PER_PIXEL = 14

# Field offsets within the footer
FOOTER_MAGIC_OFFSET = 0
FOOTER_WIDTH_OFFSET = 4
FOOTER_HEIGHT_OFFSET = 6
FOOTER_FRAME_SIZE_OFFSET = 8
FOOTER_FRAME_COUNT_OFFSET = 12
FOOTER_FRAME_SKIP_OFFSET = 16
FOOTER_FPS_X1000_OFFSET = 20

# raw_info sub-record
RAW_INFO_API_VERSION_OFFSET = 32
RAW_INFO_HEIGHT_OFFSET = 40
RAW_INFO_WIDTH_OFFSET = 44
RAW_INFO_PITCH_OFFSET = 48
RAW_INFO_FRAME_SIZE_OFFSET = 52
RAW_INFO_BPP_OFFSET = 56
RAW_INFO_BLACK_LEVEL_OFFSET = 60
RAW_INFO_WHITE_LEVEL_OFFSET = 64
RAW_INFO_CROP_OFFSET = 68
RAW_INFO_ACTIVE_AREA_OFFSET = 84
RAW_INFO_DYNAMIC_RANGE_OFFSET = 84 + 26 * 4


class RawFooterReader:
    """Random-access reader for the 192-byte RAW sequence footer.

    Construction fails (and releases the file) unless the footer magic is
    ``RAWM`` and the sequence uses 14 bits per pixel.
    """

    def __init__(self, path: Union[str, Path]):
        self.path = Path(path)
        try:
            self._f: BinaryIO = open(self.path, 'rb')
        except OSError as e:
            raise FileAccessError(f'Cannot open {self.path}: {e}') from e

        try:
            self._file_size = os.fstat(self._f.fileno()).st_size
            if self._file_size < FOOTER_SIZE:
                raise BoundsError(
                    f'{self.path}: {self._file_size} bytes is too short for a '
                    f'{FOOTER_SIZE}-byte RAW footer')
            self._validate()
        except BaseException:
            self._f.close()
            raise

        logger.debug("%s: RAW footer OK", self.path)

    def _validate(self):
        magic = self._read(FOOTER_MAGIC_OFFSET, len(FOOTER_MAGIC))
        if magic != FOOTER_MAGIC:
            raise FormatError(f'{self.path} is not a RAW file (magic {magic!r})')
        bpp = self.get_bits_per_pixel()
        if bpp != SUPPORTED_BITS_PER_PIXEL:
            raise FormatError(
                f'{self.path}: unsupported bits per pixel '
                f'(need {SUPPORTED_BITS_PER_PIXEL}, got {bpp})')

    # ----------------------------------------------------------------
    # Low-level access
    # ----------------------------------------------------------------

    def _read_at(self, position: int, size: int) -> bytes:
        if self._f.closed:
            raise ValueError('I/O operation on closed RawFooterReader')
        try:
            self._f.seek(position)
            data = self._f.read(size)
        except OSError as e:
            raise FileAccessError(f'{self.path}: read at {position} failed: {e}') from e
        if len(data) < size:
            raise BoundsError(
                f'{self.path}: short read at offset {position} '
                f'({len(data)} of {size} bytes)')
        return data

    def _read(self, field_offset: int, size: int) -> bytes:
        return self._read_at(self._file_size - FOOTER_SIZE + field_offset, size)

    def _uint16(self, field_offset: int) -> int:
        return struct.unpack('<H', self._read(field_offset, 2))[0]

    def _uint32(self, field_offset: int) -> int:
        return struct.unpack('<I', self._read(field_offset, 4))[0]

    def _rect(self, field_offset: int) -> Tuple[int, int, int, int]:
        return struct.unpack('<4I', self._read(field_offset, 16))

    # ----------------------------------------------------------------
    # Footer fields
    # ----------------------------------------------------------------

    def get_magic(self) -> str:
        raw = self._read(FOOTER_MAGIC_OFFSET, len(FOOTER_MAGIC))
        return raw.decode('ascii', errors='replace')

    def get_width(self) -> int:
        return self._uint16(FOOTER_WIDTH_OFFSET)

    def get_height(self) -> int:
        return self._uint16(FOOTER_HEIGHT_OFFSET)

    def get_frame_size(self) -> int:
        """Bytes per packed frame."""
        return self._uint32(FOOTER_FRAME_SIZE_OFFSET)

    def get_frame_count(self) -> int:
        return self._uint32(FOOTER_FRAME_COUNT_OFFSET)

    def get_frame_skip(self) -> int:
        return self._uint32(FOOTER_FRAME_SKIP_OFFSET)

    def get_frame_rate_x1000(self) -> int:
        return self._uint32(FOOTER_FPS_X1000_OFFSET)

    def get_frame_rate(self) -> float:
        """Frames per second."""
        return self.get_frame_rate_x1000() / 1000.0

    # raw_info

    def get_api_version(self) -> int:
        return self._uint32(RAW_INFO_API_VERSION_OFFSET)

    def get_raw_height(self) -> int:
        return self._uint32(RAW_INFO_HEIGHT_OFFSET)

    def get_raw_width(self) -> int:
        return self._uint32(RAW_INFO_WIDTH_OFFSET)

    def get_pitch(self) -> int:
        return self._uint32(RAW_INFO_PITCH_OFFSET)

    def get_raw_frame_size(self) -> int:
        return self._uint32(RAW_INFO_FRAME_SIZE_OFFSET)

    def get_bits_per_pixel(self) -> int:
        return self._uint32(RAW_INFO_BPP_OFFSET)

    def get_black_level(self) -> int:
        return self._uint32(RAW_INFO_BLACK_LEVEL_OFFSET)

    def get_white_level(self) -> int:
        return self._uint32(RAW_INFO_WHITE_LEVEL_OFFSET)

    def get_crop_rect(self) -> Tuple[int, int, int, int]:
        """Crop rectangle as (x, y, width, height)."""
        return self._rect(RAW_INFO_CROP_OFFSET)

    def get_active_area(self) -> Tuple[int, int, int, int]:
        """Active sensor area as (x1, y1, x2, y2)."""
        return self._rect(RAW_INFO_ACTIVE_AREA_OFFSET)

    def get_dynamic_range_x100(self) -> int:
        return self._uint32(RAW_INFO_DYNAMIC_RANGE_OFFSET)

    def get_dynamic_range(self) -> float:
        """Dynamic range in EV."""
        return self.get_dynamic_range_x100() / 100.0

    def info(self) -> RawFooterInfo:
        """Read every footer field."""
        return RawFooterInfo(
            magic=self.get_magic(),
            width=self.get_width(),
            height=self.get_height(),
            frame_size=self.get_frame_size(),
            frame_count=self.get_frame_count(),
            frame_skip=self.get_frame_skip(),
            frame_rate=self.get_frame_rate(),
            api_version=self.get_api_version(),
            raw_width=self.get_raw_width(),
            raw_height=self.get_raw_height(),
            pitch=self.get_pitch(),
            raw_frame_size=self.get_raw_frame_size(),
            bits_per_pixel=self.get_bits_per_pixel(),
            black_level=self.get_black_level(),
            white_level=self.get_white_level(),
            crop_rect=self.get_crop_rect(),
            active_area=self.get_active_area(),
            dynamic_range=self.get_dynamic_range(),
        )

    # ----------------------------------------------------------------
    # Frame data
    # ----------------------------------------------------------------

    def frame_offset(self, index: int) -> int:
        """Byte offset of frame ``index``; frames are stored back to back."""
        count = self.get_frame_count()
        if not 0 <= index < count:
            raise IndexError(f'frame {index} out of range (0..{count - 1})')
        return index * self.get_frame_size()

    def read_frame(self, index: int) -> bytes:
        """Packed bytes of frame ``index``, for the raw-frame decoder."""
        offset = self.frame_offset(index)
        size = self.get_frame_size()
        if offset + size > self._file_size - FOOTER_SIZE:
            raise BoundsError(f'{self.path}: frame {index} overlaps the footer')
        return self._read_at(offset, size)

    # ----------------------------------------------------------------
    # Resource handling
    # ----------------------------------------------------------------

    @property
    def closed(self) -> bool:
        return self._f.closed

    def close(self):
        self._f.close()

    def __enter__(self) -> 'RawFooterReader':
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()

    def __repr__(self) -> str:
        state = 'closed' if self.closed else 'open'
        return f'RawFooterReader({str(self.path)!r}, {state})'
