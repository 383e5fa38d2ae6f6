"""Shared test fixtures -- synthetic TIFF and RAW sequence file generators."""

import struct
import pytest


def build_tiff(entries, endian='<', extra_data=None):
    """Build a minimal TIFF file in memory with given IFD entries.

    Args:
        entries: List of (tag_id, type_id, count, value_or_bytes) tuples.
            For inline values (<=4 bytes), pass an int.
            For out-of-line values, pass bytes.
        endian: '<' for little-endian, '>' for big-endian.
        extra_data: Optional bytes to append after the IFD.

    Returns:
        bytes: Complete TIFF file content.
    """
    return build_tiff_multi_ifd([entries], endian=endian) + (extra_data or b'')


def _pack_entry(endian, tag_id, type_id, count, value, val_offset=None):
    """Pack one 12-byte IFD entry.

    Inline ints are left-aligned in the 4-byte slot according to the type
    width, the same way a TIFF writer stores them.
    """
    head = struct.pack(endian + 'HHI', tag_id, type_id, count)
    if val_offset is not None:
        return head + struct.pack(endian + 'I', val_offset)
    if type_id == 3 and count == 1:
        return head + struct.pack(endian + 'HH', value, 0)
    if type_id in (1, 2, 7) and count == 1:
        return head + struct.pack(endian + 'BBBB', value, 0, 0, 0)
    return head + struct.pack(endian + 'I', value)


def build_tiff_multi_ifd(ifd_entries_list, endian='<'):
    """Build a TIFF with multiple linked IFDs.

    Args:
        ifd_entries_list: List of lists, each inner list contains
            (tag_id, type_id, count, value_or_bytes) tuples for one IFD.
        endian: '<' or '>'.

    Returns:
        bytes: Complete TIFF file with chained IFDs.
    """
    bo = b'II' if endian == '<' else b'MM'

    # Pre-compute out-of-line data sizes for layout calculation
    ool_sizes = []
    for entries in ifd_entries_list:
        ool_sizes.append(sum(len(v) for _, _, _, v in entries if isinstance(v, bytes)))

    ifd_starts = []
    offset = 8  # After header
    for i, entries in enumerate(ifd_entries_list):
        ifd_starts.append(offset)
        offset += 2 + 12 * len(entries) + 4 + ool_sizes[i]

    result = bo + struct.pack(endian + 'H', 42)
    result += struct.pack(endian + 'I', ifd_starts[0] if ifd_starts else 0)

    for i, entries in enumerate(ifd_entries_list):
        n = len(entries)
        data_start = ifd_starts[i] + 2 + 12 * n + 4

        ifd_bytes = struct.pack(endian + 'H', n)
        data_bytes = b''

        for tag_id, type_id, count, value in entries:
            if isinstance(value, bytes):
                ifd_bytes += _pack_entry(endian, tag_id, type_id, count, value,
                                         val_offset=data_start + len(data_bytes))
                data_bytes += value
            else:
                ifd_bytes += _pack_entry(endian, tag_id, type_id, count, value)

        next_ifd = ifd_starts[i + 1] if i + 1 < len(ifd_entries_list) else 0
        ifd_bytes += struct.pack(endian + 'I', next_ifd)

        result += ifd_bytes + data_bytes

    return result


def place_ifd(buf, offset, entries, next_offset, endian='<'):
    """Write an IFD into ``buf`` (a bytearray) at a fixed offset.

    ``entries`` are (tag_id, type_id, count, int_value) tuples; values are
    stored in the slot as-is (inline value or offset).
    """
    struct.pack_into(endian + 'H', buf, offset, len(entries))
    pos = offset + 2
    for tag_id, type_id, count, value in entries:
        buf[pos:pos + 12] = _pack_entry(endian, tag_id, type_id, count, value)
        pos += 12
    struct.pack_into(endian + 'I', buf, pos, next_offset)


def tiff_header(buf, first_ifd, endian='<'):
    """Write the 8-byte TIFF header into ``buf``."""
    buf[0:2] = b'II' if endian == '<' else b'MM'
    struct.pack_into(endian + 'HI', buf, 2, 42, first_ifd)


# ---------------------------------------------------------------------------
# RAW sequence fixtures
# ---------------------------------------------------------------------------

def build_raw_footer(magic=b'RAWM', width=0x0A00, height=0x0780,
                     frame_size=16, frame_count=3, frame_skip=1,
                     fps_x1000=23976, api_version=1, raw_height=1080,
                     raw_width=1920, pitch=3360, raw_frame_size=16,
                     bits_per_pixel=14, black_level=2047, white_level=15000,
                     crop=(0, 0, 1920, 1080), active_area=(28, 146, 1108, 2068),
                     dynamic_range_x100=1105):
    """Build the 192-byte little-endian RAW footer."""
    footer = bytearray(192)
    footer[0:4] = magic
    struct.pack_into('<HH', footer, 4, width, height)
    struct.pack_into('<IIII', footer, 8, frame_size, frame_count, frame_skip, fps_x1000)
    struct.pack_into('<I', footer, 32, api_version)
    struct.pack_into('<IIIIIII', footer, 40, raw_height, raw_width, pitch,
                     raw_frame_size, bits_per_pixel, black_level, white_level)
    struct.pack_into('<4I', footer, 68, *crop)
    struct.pack_into('<4I', footer, 84, *active_area)
    struct.pack_into('<I', footer, 188, dynamic_range_x100)
    return bytes(footer)


def build_raw_sequence(frames=None, **footer_fields):
    """Frame data followed by a footer describing it."""
    if frames is None:
        frames = [bytes([i]) * 16 for i in range(3)]
    footer_fields.setdefault('frame_count', len(frames))
    footer_fields.setdefault('frame_size', len(frames[0]) if frames else 0)
    return b''.join(frames) + build_raw_footer(**footer_fields)


@pytest.fixture
def tmp_raw(tmp_path):
    """A 3-frame RAW sequence with a valid 14-bit footer."""
    filepath = tmp_path / 'M01-1234.RAW'
    filepath.write_bytes(build_raw_sequence())
    return filepath


# ---------------------------------------------------------------------------
# TIFF fixtures
# ---------------------------------------------------------------------------

@pytest.fixture
def tmp_tiff(tmp_path):
    """A single-IFD little-endian TIFF with a few common tags."""
    make = b'Canon\x00'
    entries = [
        (256, 3, 1, 64),              # ImageWidth
        (257, 3, 1, 48),              # ImageLength
        (262, 3, 1, 2),               # PhotometricInterpretation = RGB
        (271, 2, len(make), make),    # Make
    ]
    filepath = tmp_path / 'plain.tif'
    filepath.write_bytes(build_tiff(entries))
    return filepath


def dng_like_bytes(endian='<'):
    """Thumbnail IFD at 100 with a CFA SubIFD at 500, second IFD at 300.

    Layout: 100 -> 300 -> 0, SubIFDs(100) = 500.
    """
    buf = bytearray(700)
    tiff_header(buf, 100, endian)
    place_ifd(buf, 100, [
        (256, 3, 1, 256),
        (257, 3, 1, 171),
        (262, 3, 1, 2),          # RGB preview
        (330, 4, 1, 500),        # SubIFDs -> 500
    ], next_offset=300, endian=endian)
    place_ifd(buf, 300, [
        (256, 3, 1, 160),
        (262, 3, 1, 6),          # YCbCr
    ], next_offset=0, endian=endian)
    place_ifd(buf, 500, [
        (256, 4, 1, 5202),
        (257, 4, 1, 3465),
        (262, 3, 1, 32803),      # CFA
        (273, 4, 1, 600),        # StripOffsets
        (279, 4, 1, 64),         # StripByteCounts
    ], next_offset=0, endian=endian)
    return bytes(buf)


@pytest.fixture
def tmp_dng(tmp_path):
    """A DNG-like TIFF whose raw data lives in a SubIFD."""
    filepath = tmp_path / 'IMG_0001.dng'
    filepath.write_bytes(dng_like_bytes())
    return filepath
