"""Cipher Sentinel package metadata."""
from importlib.metadata import version, PackageNotFoundError

try:
    __version__ = version("cipher-sentinel")
except PackageNotFoundError:
    __version__ = "0.1.0"
