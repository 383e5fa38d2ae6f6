"""Directory entries and the inline-vs-indirect value rule."""

import struct
from typing import Any, List

from rawtiff.errors import BoundsError, FormatError
from rawtiff.tiff.buffer import ByteOrderBuffer
from rawtiff.tiff.tags import TiffType, tag_name

ENTRY_SIZE = 12
INLINE_THRESHOLD = 4


class TagEntry:
    """A single 12-byte directory record: tag, type, count, value slot."""
    __slots__ = ('tag_id', 'dtype', 'count', 'slot', 'entry_offset')

    def __init__(self, tag_id: int, dtype: int, count: int,
                 slot: bytes, entry_offset: int = 0):
        if len(slot) != INLINE_THRESHOLD:
            raise ValueError('value slot must be exactly 4 bytes')
        self.tag_id = tag_id
        self.dtype = dtype
        self.count = count
        self.slot = bytes(slot)
        self.entry_offset = entry_offset

    @classmethod
    def parse(cls, buffer: ByteOrderBuffer, offset: int) -> 'TagEntry':
        """Read the record at ``offset`` (2+2+4 header, 4-byte slot)."""
        tag_id, dtype, count = buffer.read_struct('HHI', offset)
        slot = buffer.read_bytes(offset + 8, INLINE_THRESHOLD)
        return cls(tag_id, dtype, count, slot, offset)

    @property
    def tag_name(self) -> str:
        return tag_name(self.tag_id)

    @property
    def type(self) -> TiffType:
        return TiffType.from_id(self.dtype)

    @property
    def total_size(self) -> int:
        return self.type.width * self.count

    @property
    def is_inline(self) -> bool:
        return self.total_size <= INLINE_THRESHOLD

    def value_offset(self, endian: str) -> int:
        """The slot read as a 32-bit offset (meaningful for indirect values)."""
        return struct.unpack(endian + 'I', self.slot)[0]

    def resolve(self, buffer: ByteOrderBuffer) -> List[Any]:
        return resolve(self, buffer)

    def value(self, buffer: ByteOrderBuffer) -> Any:
        """First resolved value; ``None`` for an entry with count 0."""
        values = resolve(self, buffer)
        return values[0] if values else None

    def string(self, buffer: ByteOrderBuffer) -> str:
        """Resolve an ASCII entry to text, dropping NUL terminators."""
        if self.dtype != TiffType.ASCII:
            raise FormatError(f'{self.tag_name} is not an ASCII entry')
        raw = b''.join(resolve(self, buffer))
        return raw.rstrip(b'\x00').decode('ascii', errors='replace')

    def __repr__(self) -> str:
        return (f'TagEntry({self.tag_name}, type={self.dtype}, '
                f'count={self.count}, slot={self.slot.hex()})')


def resolve(entry: TagEntry, buffer: ByteOrderBuffer) -> List[Any]:
    """Decode the values of ``entry``.

    Values that fit in four bytes are decoded from the slot itself and never
    touch the buffer. Larger values are read from the offset stored in the
    slot, one ``width``-byte read per element.
    """
    dtype = entry.type
    width = dtype.width
    fmt = dtype.struct_format

    if entry.count * width <= INLINE_THRESHOLD:
        return list(struct.unpack_from(buffer.endian + fmt * entry.count, entry.slot))

    start = entry.value_offset(buffer.endian)
    if start + entry.count * width > len(buffer):
        raise BoundsError(
            f'{entry.tag_name}: {entry.count * width} value bytes at offset '
            f'{start} run past end of buffer ({len(buffer)} bytes)')
    values = []
    for i in range(entry.count):
        item = buffer.read_struct(fmt, start + i * width)
        values.append(item if dtype.is_rational else item[0])
    return values
