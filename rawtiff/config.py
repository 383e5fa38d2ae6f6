"""Parser limits -- defaults plus optional JSON overrides."""

import json
from dataclasses import dataclass, fields

from rawtiff.errors import FileAccessError, FormatError


@dataclass
class ParserConfig:
    """Limits applied while walking untrusted files.

    A directory table with more entries than ``max_entries`` almost always
    means a pointer landed in image data, so it is rejected instead of parsed.
    """

    max_directories: int = 500
    max_entries: int = 1000
    min_tiff_size: int = 20

    @classmethod
    def default(cls) -> 'ParserConfig':
        """Return the built-in limits."""
        return cls()

    @classmethod
    def from_json(cls, path) -> 'ParserConfig':
        """Load limits from a JSON file.

        JSON format::

            {
              "max_directories": 500,
              "max_entries": 1000,
              "min_tiff_size": 20
            }

        All keys are optional; omitted keys keep the defaults.
        """
        try:
            with open(str(path), 'r') as f:
                data = json.load(f)
        except OSError as e:
            raise FileAccessError(f'Cannot read config {path}: {e}') from e
        except ValueError as e:
            raise FormatError(f'{path}: invalid JSON ({e})') from e

        if not isinstance(data, dict):
            raise FormatError(f'{path}: config must be a JSON object')

        known = {f.name for f in fields(cls)}
        unknown = set(data) - known
        if unknown:
            raise FormatError(f'{path}: unknown config keys: {", ".join(sorted(unknown))}')

        config = cls.default()
        for key, value in data.items():
            if not isinstance(value, int) or isinstance(value, bool) or value < 0:
                raise FormatError(f'{path}: {key} must be a non-negative integer')
            setattr(config, key, value)
        return config
