"""carsonrent - Car rental entity service with a searchable mirror of every resource."""

from importlib.metadata import version, PackageNotFoundError

try:
    __version__ = version("carsonrent")
except PackageNotFoundError:
    __version__ = "unknown"

__all__ = ["__version__"]
