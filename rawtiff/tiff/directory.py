"""Image File Directory (IFD) parsing and tag lookup."""

import logging
from typing import Dict, Iterator, List, Optional, Tuple

from rawtiff.errors import BoundsError, FormatError
from rawtiff.tiff.buffer import ByteOrderBuffer
from rawtiff.tiff.entry import ENTRY_SIZE, TagEntry
from rawtiff.tiff.tags import (
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
)

logger = logging.getLogger(__name__)

# Real raw-file IFDs have well under 200 tags; a count far beyond that means
# the directory pointer landed in image data.
MAX_IFD_ENTRIES = 1000


class Directory:
    """One IFD: entries in on-disk order plus the link to the next IFD.

    Lookup by tag id is first-one-wins when a tag is repeated.
    """
    __slots__ = ('offset', 'entries', 'next_offset', 'parent', '_by_tag')

    def __init__(self, offset: int, entries: List[TagEntry], next_offset: int,
                 parent: Optional['Directory'] = None):
        self.offset = offset
        self.entries = entries
        self.next_offset = next_offset
        self.parent = parent
        self._by_tag: Dict[int, TagEntry] = {}
        for entry in entries:
            if entry.tag_id in self._by_tag:
                logger.debug("IFD at %d: duplicate tag %d ignored", offset, entry.tag_id)
                continue
            self._by_tag[entry.tag_id] = entry

    @classmethod
    def parse(cls, buffer: ByteOrderBuffer, offset: int,
              parent: Optional['Directory'] = None,
              max_entries: int = MAX_IFD_ENTRIES) -> 'Directory':
        """Parse the IFD at ``offset``.

        Layout: 16-bit entry count, ``count`` 12-byte records, 32-bit offset
        of the next IFD (0 when this is the last one).
        """
        try:
            num_entries = buffer.read_uint16(offset)
        except BoundsError:
            raise BoundsError(f'IFD offset {offset} is outside the file') from None

        if num_entries > max_entries:
            raise FormatError(
                f'IFD at offset {offset} claims {num_entries} entries '
                f'(limit {max_entries})')

        entries = []
        pos = offset + 2
        for _ in range(num_entries):
            entries.append(TagEntry.parse(buffer, pos))
            pos += ENTRY_SIZE

        next_offset = buffer.read_uint32(pos)
        return cls(offset, entries, next_offset, parent)

    def __len__(self) -> int:
        return len(self.entries)

    def __iter__(self) -> Iterator[TagEntry]:
        return iter(self.entries)

    def __contains__(self, tag_id: int) -> bool:
        return tag_id in self._by_tag

    def has_tag(self, tag_id: int) -> bool:
        return tag_id in self._by_tag

    def get_entry(self, tag_id: int) -> Optional[TagEntry]:
        """Return the first entry with ``tag_id``, or None."""
        return self._by_tag.get(tag_id)

    @property
    def is_sub_directory(self) -> bool:
        return self.parent is not None

    @staticmethod
    def _int_value(entry: TagEntry, buffer: ByteOrderBuffer) -> int:
        if not entry.type.is_integer:
            raise FormatError(
                f'{entry.tag_name} has non-integer value type {entry.dtype}')
        return entry.value(buffer)

    def sub_directory_offset(self, buffer: ByteOrderBuffer) -> Optional[int]:
        """Offset of the nested IFD if SubIFDs holds exactly one pointer."""
        entry = self._by_tag.get(TAG_SUB_IFDS)
        if entry is None or entry.count != 1:
            return None
        return self._int_value(entry, buffer) or None

    def photometric_interpretation(self, buffer: ByteOrderBuffer) -> int:
        """PhotometricInterpretation value, or PHOTOMETRIC_UNSPECIFIED."""
        entry = self._by_tag.get(TAG_PHOTOMETRIC)
        if entry is None or entry.count == 0:
            return PHOTOMETRIC_UNSPECIFIED
        return self._int_value(entry, buffer)

    def is_cfa(self, buffer: ByteOrderBuffer) -> bool:
        """True if this IFD holds raw sensor (CFA or LinearRaw) data."""
        return self.photometric_interpretation(buffer) in (
            PHOTOMETRIC_CFA, PHOTOMETRIC_LINEAR_RAW)

    def image_size(self, buffer: ByteOrderBuffer) -> Optional[Tuple[int, int]]:
        """(width, height) from ImageWidth/ImageLength, or None."""
        w = self._by_tag.get(TAG_IMAGE_WIDTH)
        h = self._by_tag.get(TAG_IMAGE_LENGTH)
        if w is None or h is None or not w.count or not h.count:
            return None
        return self._int_value(w, buffer), self._int_value(h, buffer)

    def _long_array(self, buffer: ByteOrderBuffer, primary: int,
                    fallback: int) -> List[int]:
        entry = self._by_tag.get(primary) or self._by_tag.get(fallback)
        if entry is None:
            return []
        if not entry.type.is_integer:
            raise FormatError(
                f'{entry.tag_name} has non-integer value type {entry.dtype}')
        return entry.resolve(buffer)

    def strip_offsets(self, buffer: ByteOrderBuffer) -> List[int]:
        """Strip (or tile) data offsets for the pixel-data reader."""
        return self._long_array(buffer, TAG_STRIP_OFFSETS, TAG_TILE_OFFSETS)

    def strip_byte_counts(self, buffer: ByteOrderBuffer) -> List[int]:
        """Strip (or tile) byte counts, parallel to :meth:`strip_offsets`."""
        return self._long_array(buffer, TAG_STRIP_BYTE_COUNTS, TAG_TILE_BYTE_COUNTS)

    def __repr__(self) -> str:
        kind = 'SubIFD' if self.parent is not None else 'IFD'
        return (f'Directory({kind} @ {self.offset}, {len(self.entries)} entries, '
                f'next={self.next_offset})')
