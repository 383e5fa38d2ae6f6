"""Walk the IFD chain into a flat list of directories."""

import logging
from typing import Callable, Iterator, List, Optional

from rawtiff.config import ParserConfig
from rawtiff.errors import FormatError
from rawtiff.tiff.buffer import ByteOrderBuffer
from rawtiff.tiff.directory import Directory

logger = logging.getLogger(__name__)


class DirectoryChain:
    """All directories reachable from the first IFD, in walk order.

    Each top-level IFD is followed directly by its SubIFD (when SubIFDs holds
    a single pointer), then by the next top-level IFD.
    """

    def __init__(self, directories: List[Directory]):
        self.directories = directories

    @classmethod
    def build(cls, buffer: ByteOrderBuffer, first_offset: int,
              config: Optional[ParserConfig] = None) -> 'DirectoryChain':
        """Follow next-IFD links from ``first_offset`` until a 0 link.

        Raises FormatError if an offset is visited twice or the chain grows
        beyond ``config.max_directories``.
        """
        if config is None:
            config = ParserConfig.default()

        directories: List[Directory] = []
        seen = set()

        def visit(offset: int, parent: Optional[Directory] = None) -> Directory:
            if offset in seen:
                raise FormatError(f'IFD chain loops back to offset {offset}')
            if len(directories) >= config.max_directories:
                raise FormatError(
                    f'IFD chain exceeds {config.max_directories} directories')
            seen.add(offset)
            d = Directory.parse(buffer, offset, parent, max_entries=config.max_entries)
            directories.append(d)
            return d

        offset = first_offset
        while offset != 0:
            d = visit(offset)
            logger.debug("IFD %d at offset %d: %d entries, next=%d",
                         len(directories) - 1, offset, len(d), d.next_offset)

            sub_offset = d.sub_directory_offset(buffer)
            if sub_offset is not None:
                logger.debug("IFD at offset %d has SubIFD at %d", offset, sub_offset)
                visit(sub_offset, parent=d)

            offset = d.next_offset

        return cls(directories)

    def __len__(self) -> int:
        return len(self.directories)

    def __iter__(self) -> Iterator[Directory]:
        return iter(self.directories)

    def __getitem__(self, index: int) -> Directory:
        return self.directories[index]

    def offsets(self) -> List[int]:
        return [d.offset for d in self.directories]

    def find(self, predicate: Callable[[Directory], bool]) -> Optional[Directory]:
        """First directory matching ``predicate``, or None."""
        for d in self.directories:
            if predicate(d):
                return d
        return None

    def first_cfa(self, buffer: ByteOrderBuffer) -> Optional[Directory]:
        """First directory holding raw sensor data."""
        return self.find(lambda d: d.is_cfa(buffer))
