"""termdeck - an embeddable line-oriented virtual terminal."""

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("termdeck")
except PackageNotFoundError:
    __version__ = "0.0.0"
