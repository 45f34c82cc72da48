"""opshelpers: archive, file, database and object-storage helpers."""

from opshelpers.version import __version__

__all__ = ["__version__"]
