"""Flat-file persistence for scan records and settings."""

from .simpledb import ScanStore, new_scan_record

__all__ = ["ScanStore", "new_scan_record"]
