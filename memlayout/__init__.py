"""memlayout - Memory layout reports for versioned binaries."""

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("memlayout")
except PackageNotFoundError:
    __version__ = "(local)"
