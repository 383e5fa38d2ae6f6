"""Exception hierarchy for TIFF directory and RAW footer parsing."""


class RawTiffError(Exception):
    """Base class for all rawtiff errors."""


class FormatError(RawTiffError, ValueError):
    """The data does not follow the expected binary layout."""


class BoundsError(FormatError):
    """A read or seek would fall outside the buffer or file."""


class FileAccessError(RawTiffError, OSError):
    """Opening, seeking or reading a file failed at the OS level."""
