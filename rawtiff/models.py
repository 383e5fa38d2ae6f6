"""Data models for directory listings and RAW footer dumps."""

from dataclasses import asdict, dataclass, field
from typing import List, Optional, Tuple

from rawtiff.errors import FormatError
from rawtiff.tiff.buffer import ByteOrderBuffer
from rawtiff.tiff.directory import Directory
from rawtiff.tiff.entry import TagEntry
from rawtiff.tiff.tags import PHOTOMETRIC_NAMES, TiffType

# Longest value list shown in a tag preview
_PREVIEW_VALUES = 8


@dataclass
class TagSummary:
    """One directory entry, ready for display."""
    tag_id: int
    tag_name: str
    dtype: int
    count: int
    inline: bool
    value_preview: str

    @classmethod
    def from_entry(cls, entry: TagEntry, buffer: ByteOrderBuffer) -> 'TagSummary':
        try:
            inline = entry.is_inline
            preview = _preview(entry, buffer)
        except FormatError as e:
            inline = False
            preview = f'<{e}>'
        return cls(
            tag_id=entry.tag_id,
            tag_name=entry.tag_name,
            dtype=entry.dtype,
            count=entry.count,
            inline=inline,
            value_preview=preview,
        )


def _preview(entry: TagEntry, buffer: ByteOrderBuffer) -> str:
    if entry.dtype == TiffType.ASCII:
        return entry.string(buffer)[:60]
    if entry.dtype == TiffType.UNDEFINED and entry.count > _PREVIEW_VALUES:
        return f'<{entry.count} bytes>'
    if entry.count > _PREVIEW_VALUES:
        return f'<{entry.count} values>'
    values = entry.resolve(buffer)
    if entry.type.is_rational:
        values = [f'{n}/{d}' for n, d in values]
    if len(values) == 1:
        return str(values[0])
    return ', '.join(str(v) for v in values)


@dataclass
class DirectorySummary:
    """One IFD of a chain, with its tags."""
    index: int
    offset: int
    parent_offset: Optional[int]
    next_offset: int
    photometric: str
    dimensions: Optional[Tuple[int, int]] = None
    tags: List[TagSummary] = field(default_factory=list)

    @classmethod
    def from_directory(cls, index: int, directory: Directory,
                       buffer: ByteOrderBuffer) -> 'DirectorySummary':
        pi = directory.photometric_interpretation(buffer)
        return cls(
            index=index,
            offset=directory.offset,
            parent_offset=directory.parent.offset if directory.parent else None,
            next_offset=directory.next_offset,
            photometric=PHOTOMETRIC_NAMES.get(pi, str(pi)),
            dimensions=directory.image_size(buffer),
            tags=[TagSummary.from_entry(e, buffer) for e in directory],
        )

    def to_dict(self) -> dict:
        return asdict(self)


@dataclass
class RawFooterInfo:
    """Every field of a RAW sequence footer, read in one pass."""
    magic: str
    width: int
    height: int
    frame_size: int
    frame_count: int
    frame_skip: int
    frame_rate: float
    api_version: int
    raw_width: int
    raw_height: int
    pitch: int
    raw_frame_size: int
    bits_per_pixel: int
    black_level: int
    white_level: int
    crop_rect: Tuple[int, int, int, int]
    active_area: Tuple[int, int, int, int]
    dynamic_range: float

    def to_dict(self) -> dict:
        return asdict(self)
