"""File-level TIFF handler -- header validation and directory chain."""

import logging
from pathlib import Path
from typing import Dict, Optional, Union

from rawtiff.config import ParserConfig
from rawtiff.errors import FormatError
from rawtiff.tiff.buffer import ByteOrderBuffer
from rawtiff.tiff.chain import DirectoryChain
from rawtiff.tiff.directory import Directory
from rawtiff.tiff.tags import PHOTOMETRIC_NAMES

logger = logging.getLogger(__name__)

TIFF_MAGIC = 42
HEADER_SIZE = 8


class TiffHandler:
    """A TIFF file held fully in memory, with its directories parsed.

    The header is ``II``/``MM``, the 16-bit value 42, then the 32-bit offset
    of the first IFD.
    """

    def __init__(self, buffer: ByteOrderBuffer, path: Optional[Path] = None,
                 config: Optional[ParserConfig] = None):
        if config is None:
            config = ParserConfig.default()
        self.path = path
        self.buffer = buffer

        if len(buffer) < max(config.min_tiff_size, HEADER_SIZE):
            raise FormatError(f'{self._name}: too small to be a TIFF file '
                              f'({len(buffer)} bytes)')

        if not buffer.endian_is_set:
            buffer.detect_endianness()
        magic = buffer.read_uint16(2)
        if magic != TIFF_MAGIC:
            raise FormatError(f'{self._name}: missing TIFF magic 42 (got {magic})')

        self.first_ifd_offset = buffer.read_uint32(4)
        logger.debug("%s: %s-endian, first IFD at %d", self._name,
                     'little' if buffer.endian == '<' else 'big', self.first_ifd_offset)
        self.directories = DirectoryChain.build(buffer, self.first_ifd_offset, config)

    @classmethod
    def open(cls, path: Union[str, Path],
             config: Optional[ParserConfig] = None) -> 'TiffHandler':
        """Read ``path`` fully and parse it."""
        path = Path(path)
        return cls(ByteOrderBuffer.from_file(path), path, config)

    @classmethod
    def from_bytes(cls, data: bytes,
                   config: Optional[ParserConfig] = None) -> 'TiffHandler':
        return cls(ByteOrderBuffer(data), None, config)

    @property
    def _name(self) -> str:
        return str(self.path) if self.path is not None else '<bytes>'

    @property
    def endian(self) -> str:
        return self.buffer.endian

    def first_cfa_directory(self) -> Optional[Directory]:
        """First IFD whose PhotometricInterpretation marks raw sensor data."""
        return self.directories.first_cfa(self.buffer)

    def save_as(self, path: Union[str, Path]):
        """Write the underlying bytes to ``path`` unchanged."""
        self.buffer.dump_to_file(path)

    def get_format_info(self) -> Dict:
        """Summary information for display."""
        info = {
            'format': 'tiff',
            'byte_order': 'little-endian' if self.endian == '<' else 'big-endian',
            'file_size': len(self.buffer),
            'directories': len(self.directories),
            'sub_directories': sum(1 for d in self.directories if d.is_sub_directory),
        }
        cfa = self.first_cfa_directory()
        if cfa is not None:
            info['cfa_directory_offset'] = cfa.offset
            size = cfa.image_size(self.buffer)
            if size:
                info['cfa_dimensions'] = f'{size[0]}x{size[1]}'
            pi = cfa.photometric_interpretation(self.buffer)
            info['cfa_photometric'] = PHOTOMETRIC_NAMES.get(pi, str(pi))
        return info
