# SPDX-License-Identifier: MIT
"""
Flat-file JSON store for scan records and settings.

Scan records are kept in ``scans.json`` as a list, settings in
``settings.json``. Each read-modify-write cycle holds a lock so concurrent
API requests do not lose writes.
"""
from __future__ import annotations

import json
import logging
import threading
import uuid
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, List, Optional

from cipher_sentinel.config.settings import (
    apply_settings_defaults,
    get_default_settings,
    validate_settings,
)
from cipher_sentinel.core.findings import ScanOutcome

logger = logging.getLogger(__name__)

SCANS_FILENAME = "scans.json"
SETTINGS_FILENAME = "settings.json"


def utc_now() -> str:
    return datetime.now(timezone.utc).isoformat()


def new_scan_record(outcome: ScanOutcome, file_name: str) -> Dict[str, Any]:
    """Wrap a scan outcome in the record shape that is persisted and served."""
    return {
        "scan_id": str(uuid.uuid4()),
        "file_name": file_name,
        "findings": [f.to_dict() for f in outcome.findings],
        "severity": outcome.overall_severity.value,
        "risk_score": outcome.risk_score,
        "created_at": utc_now(),
    }


class ScanStore:
    """JSON-file backed storage for scan history and settings."""

    def __init__(self, data_dir: str | Path):
        self.data_dir = Path(data_dir)
        self.scans_path = self.data_dir / SCANS_FILENAME
        self.settings_path = self.data_dir / SETTINGS_FILENAME
        self._lock = threading.Lock()

    def _ensure_files(self) -> None:
        self.data_dir.mkdir(parents=True, exist_ok=True)
        if not self.scans_path.exists():
            self._write_json(self.scans_path, [])
        if not self.settings_path.exists():
            self._write_json(self.settings_path, get_default_settings())

    @staticmethod
    def _read_json(path: Path) -> Any:
        with path.open("r", encoding="utf-8") as handle:
            return json.load(handle)

    @staticmethod
    def _write_json(path: Path, payload: Any) -> None:
        with path.open("w", encoding="utf-8") as handle:
            json.dump(payload, handle, indent=2, ensure_ascii=True)

    def _load_scans(self) -> List[Dict[str, Any]]:
        self._ensure_files()
        scans = self._read_json(self.scans_path)
        if not isinstance(scans, list):
            raise ValueError(f"Scan store is corrupt: {self.scans_path}")
        return scans

    # -- scans --------------------------------------------------------
    def list_scans(self) -> List[Dict[str, Any]]:
        """Return all scan records, newest first."""
        with self._lock:
            scans = self._load_scans()
        return sorted(scans, key=lambda s: s.get("created_at", ""), reverse=True)

    def get_scan(self, scan_id: str) -> Optional[Dict[str, Any]]:
        with self._lock:
            scans = self._load_scans()
        return next((s for s in scans if s.get("scan_id") == scan_id), None)

    def save_scan(self, record: Dict[str, Any]) -> None:
        with self._lock:
            scans = self._load_scans()
            scans.append(record)
            self._write_json(self.scans_path, scans)
        logger.info("Saved scan %s (%d findings)", record.get("scan_id"), len(record.get("findings", [])))

    def delete_scan(self, scan_id: str) -> bool:
        """Delete a scan record. Returns False when no record had that id."""
        with self._lock:
            scans = self._load_scans()
            remaining = [s for s in scans if s.get("scan_id") != scan_id]
            if len(remaining) == len(scans):
                return False
            self._write_json(self.scans_path, remaining)
        logger.info("Deleted scan %s", scan_id)
        return True

    def clear_history(self) -> None:
        with self._lock:
            self._ensure_files()
            self._write_json(self.scans_path, [])
        logger.info("Cleared scan history")

    # -- settings -----------------------------------------------------
    def get_settings(self) -> Dict[str, Any]:
        with self._lock:
            self._ensure_files()
            raw = self._read_json(self.settings_path)
        settings = apply_settings_defaults(raw, config_path=str(self.settings_path))
        validate_settings(settings, config_path=str(self.settings_path))
        return settings

    def save_settings(self, settings: Dict[str, Any]) -> Dict[str, Any]:
        """
        Validate and persist settings.

        Returns:
            The stored settings with defaults applied

        Raises:
            SentinelConfigError: If the settings are invalid; nothing is written
        """
        merged = apply_settings_defaults(settings)
        validate_settings(merged)
        with self._lock:
            self._ensure_files()
            self._write_json(self.settings_path, merged)
        logger.info("Saved settings")
        return merged


__all__ = ["ScanStore", "new_scan_record"]
