"""Byte buffer with a selectable byte order and bounds-checked reads."""

import struct
from pathlib import Path
from typing import Tuple, Union

from rawtiff.errors import BoundsError, FileAccessError, FormatError

LITTLE_ENDIAN = '<'
BIG_ENDIAN = '>'

# Byte-order marker at the start of every TIFF stream
_BYTE_ORDER_MARKERS = {
    b'II': LITTLE_ENDIAN,
    b'MM': BIG_ENDIAN,
}


class ByteOrderBuffer:
    """Immutable bytes read as unsigned integers in a configurable byte order.

    The byte order may be set once after construction, typically from the
    TIFF header marker via :meth:`detect_endianness`. All reads fail with
    :class:`BoundsError` instead of wrapping or returning short data.
    """
    __slots__ = ('_data', '_endian', '_endian_set')

    def __init__(self, data: bytes, endian: str = LITTLE_ENDIAN):
        if endian not in (LITTLE_ENDIAN, BIG_ENDIAN):
            raise ValueError(f'endian must be {LITTLE_ENDIAN!r} or {BIG_ENDIAN!r}')
        self._data = bytes(data)
        self._endian = endian
        self._endian_set = False

    @classmethod
    def from_tiff_bytes(cls, data: bytes) -> 'ByteOrderBuffer':
        """Wrap TIFF file bytes and pick the byte order from the header."""
        buf = cls(data)
        buf.detect_endianness()
        return buf

    @classmethod
    def from_file(cls, path: Union[str, Path]) -> 'ByteOrderBuffer':
        """Read a whole file into a little-endian buffer."""
        try:
            data = Path(path).read_bytes()
        except OSError as e:
            raise FileAccessError(f'Cannot read {path}: {e}') from e
        return cls(data)

    @property
    def endian(self) -> str:
        """``'<'`` for little-endian, ``'>'`` for big-endian."""
        return self._endian

    @property
    def data(self) -> bytes:
        return self._data

    def __len__(self) -> int:
        return len(self._data)

    def length(self) -> int:
        return len(self._data)

    @property
    def endian_is_set(self) -> bool:
        return self._endian_set

    def set_endianness(self, endian: str):
        """Set the byte order. May only be called once per buffer."""
        if self._endian_set:
            raise RuntimeError('Byte order has already been set for this buffer')
        if endian not in (LITTLE_ENDIAN, BIG_ENDIAN):
            raise ValueError(f'endian must be {LITTLE_ENDIAN!r} or {BIG_ENDIAN!r}')
        self._endian = endian
        self._endian_set = True

    def detect_endianness(self) -> str:
        """Set the byte order from the first two bytes (``II`` or ``MM``)."""
        marker = self.read_bytes(0, 2)
        endian = _BYTE_ORDER_MARKERS.get(marker)
        if endian is None:
            raise FormatError(f'Invalid byte-order marker {marker!r}')
        self.set_endianness(endian)
        return endian

    def _check(self, offset: int, width: int):
        if offset < 0 or offset + width > len(self._data):
            raise BoundsError(
                f'Read of {width} byte(s) at offset {offset} is outside '
                f'buffer of {len(self._data)} bytes')

    def read_bytes(self, offset: int, length: int) -> bytes:
        """Return ``length`` raw bytes starting at ``offset``."""
        self._check(offset, length)
        return self._data[offset:offset + length]

    def read_struct(self, fmt: str, offset: int) -> Tuple:
        """Unpack ``fmt`` (without byte-order prefix) at ``offset``."""
        fmt = self._endian + fmt
        self._check(offset, struct.calcsize(fmt))
        return struct.unpack_from(fmt, self._data, offset)

    def read_uint8(self, offset: int) -> int:
        return self.read_struct('B', offset)[0]

    def read_uint16(self, offset: int) -> int:
        return self.read_struct('H', offset)[0]

    def read_uint32(self, offset: int) -> int:
        return self.read_struct('I', offset)[0]

    def dump_to_file(self, path: Union[str, Path]):
        """Write the buffer contents to ``path`` verbatim."""
        try:
            with open(path, 'wb') as f:
                f.write(self._data)
        except OSError as e:
            raise FileAccessError(f'Cannot write {path}: {e}') from e

    def __repr__(self) -> str:
        order = 'little' if self._endian == LITTLE_ENDIAN else 'big'
        return f'ByteOrderBuffer({len(self._data)} bytes, {order}-endian)'
