"""Format detection by magic bytes."""

import os
from pathlib import Path

from rawtiff.raw_footer import FOOTER_MAGIC, FOOTER_SIZE

# Byte-order marker + 42, in both byte orders
_TIFF_SIGNATURES = (b'II*\x00', b'MM\x00*')

_FORMATS = ['tiff', 'raw']


def detect_format(filepath: Path) -> str:
    """Detect the format of a file.

    Returns "tiff" for a classic TIFF header, "raw" for a Magic Lantern RAW
    footer, or "unknown".
    """
    filepath = Path(filepath)
    try:
        size = os.path.getsize(filepath)
        with open(filepath, 'rb') as f:
            if f.read(4) in _TIFF_SIGNATURES:
                return 'tiff'
            if size >= FOOTER_SIZE:
                f.seek(size - FOOTER_SIZE)
                if f.read(len(FOOTER_MAGIC)) == FOOTER_MAGIC:
                    return 'raw'
    except OSError:
        return 'unknown'
    return 'unknown'


def list_supported_formats() -> list:
    """List all supported format names."""
    return list(_FORMATS)
