"""Tests for single-IFD parsing and tag lookup."""

import struct

import pytest

from rawtiff.errors import BoundsError, FormatError
from rawtiff.tiff import (
    PHOTOMETRIC_CFA,
    PHOTOMETRIC_UNSPECIFIED,
    ByteOrderBuffer,
    Directory,
)
from tests.conftest import build_tiff, dng_like_bytes, place_ifd, tiff_header


def _buffer(data):
    return ByteOrderBuffer.from_tiff_bytes(data)


class TestParse:
    def test_entries_in_disk_order(self, tmp_tiff):
        buf = _buffer(tmp_tiff.read_bytes())
        d = Directory.parse(buf, 8)
        assert [e.tag_id for e in d] == [256, 257, 262, 271]
        assert len(d) == 4
        assert d.next_offset == 0
        assert d.offset == 8
        assert d.parent is None

    def test_lookup(self, tmp_tiff):
        buf = _buffer(tmp_tiff.read_bytes())
        d = Directory.parse(buf, 8)
        assert d.has_tag(271)
        assert 256 in d
        assert not d.has_tag(330)
        assert d.get_entry(330) is None
        assert d.get_entry(271).string(buf) == 'Canon'

    def test_next_offset(self):
        buf = _buffer(dng_like_bytes())
        assert Directory.parse(buf, 100).next_offset == 300
        assert Directory.parse(buf, 300).next_offset == 0

    def test_big_endian(self):
        buf = _buffer(dng_like_bytes('>'))
        d = Directory.parse(buf, 500)
        assert d.photometric_interpretation(buf) == PHOTOMETRIC_CFA
        assert d.image_size(buf) == (5202, 3465)

    def test_empty_directory(self):
        buf = _buffer(build_tiff([]))
        d = Directory.parse(buf, 8)
        assert len(d) == 0
        assert d.next_offset == 0


class TestDuplicateTags:
    def test_first_one_wins(self):
        data = build_tiff([
            (256, 3, 1, 100),
            (256, 3, 1, 200),
        ])
        buf = _buffer(data)
        d = Directory.parse(buf, 8)
        assert len(d) == 2
        assert d.get_entry(256).value(buf) == 100


class TestPhotometric:
    def test_unspecified_when_absent(self):
        buf = _buffer(build_tiff([(256, 3, 1, 10)]))
        d = Directory.parse(buf, 8)
        assert d.photometric_interpretation(buf) == PHOTOMETRIC_UNSPECIFIED
        assert not d.is_cfa(buf)

    def test_cfa(self):
        buf = _buffer(dng_like_bytes())
        d = Directory.parse(buf, 500)
        assert d.photometric_interpretation(buf) == PHOTOMETRIC_CFA
        assert d.is_cfa(buf)

    def test_linear_raw_counts_as_cfa(self):
        buf = _buffer(build_tiff([(262, 3, 1, 34892)]))
        assert Directory.parse(buf, 8).is_cfa(buf)


class TestSubDirectory:
    def test_single_pointer(self):
        buf = _buffer(dng_like_bytes())
        assert Directory.parse(buf, 100).sub_directory_offset(buf) == 500
        assert Directory.parse(buf, 300).sub_directory_offset(buf) is None

    def test_multiple_pointers_ignored(self):
        pointers = struct.pack('<II', 200, 300)
        buf = _buffer(build_tiff([(330, 4, 2, pointers)]))
        assert Directory.parse(buf, 8).sub_directory_offset(buf) is None

    def test_zero_pointer_ignored(self):
        buf = _buffer(build_tiff([(330, 4, 1, 0)]))
        assert Directory.parse(buf, 8).sub_directory_offset(buf) is None


class TestStrips:
    def test_strip_location(self):
        buf = _buffer(dng_like_bytes())
        d = Directory.parse(buf, 500)
        assert d.strip_offsets(buf) == [600]
        assert d.strip_byte_counts(buf) == [64]

    def test_tiles_as_fallback(self):
        offsets = struct.pack('<II', 1000, 2000)
        counts = struct.pack('<II', 512, 512)
        buf = _buffer(build_tiff([
            (324, 4, 2, offsets),
            (325, 4, 2, counts),
        ]))
        d = Directory.parse(buf, 8)
        assert d.strip_offsets(buf) == [1000, 2000]
        assert d.strip_byte_counts(buf) == [512, 512]

    def test_no_image_data(self, tmp_tiff):
        buf = _buffer(tmp_tiff.read_bytes())
        d = Directory.parse(buf, 8)
        assert d.strip_offsets(buf) == []
        assert d.image_size(buf) == (64, 48)


class TestMalformed:
    def test_offset_outside_file(self):
        buf = _buffer(build_tiff([(256, 3, 1, 1)]))
        with pytest.raises(BoundsError):
            Directory.parse(buf, 5000)

    def test_truncated_entry_table(self):
        data = b'II' + struct.pack('<HI', 42, 8)
        data += struct.pack('<H', 5)
        data += struct.pack('<HHII', 256, 3, 1, 100)
        buf = _buffer(data)
        with pytest.raises(BoundsError):
            Directory.parse(buf, 8)

    def test_missing_next_offset(self):
        data = b'II' + struct.pack('<HI', 42, 8)
        data += struct.pack('<H', 1) + struct.pack('<HHII', 256, 3, 1, 100)
        buf = _buffer(data)
        with pytest.raises(BoundsError):
            Directory.parse(buf, 8)

    def test_absurd_entry_count(self):
        buf_data = bytearray(64)
        tiff_header(buf_data, 8)
        struct.pack_into('<H', buf_data, 8, 0xFFFF)
        buf = _buffer(bytes(buf_data))
        with pytest.raises(FormatError, match='entries'):
            Directory.parse(buf, 8)

    def test_custom_entry_limit(self):
        buf_data = bytearray(128)
        tiff_header(buf_data, 8)
        place_ifd(buf_data, 8, [(256, 3, 1, 1)] * 3, 0)
        buf = _buffer(bytes(buf_data))
        with pytest.raises(FormatError):
            Directory.parse(buf, 8, max_entries=2)
