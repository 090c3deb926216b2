# SPDX-License-Identifier: MIT
"""
HTTP API for Cipher Sentinel.

Thin plumbing around the scan engine: it decodes and size-checks input,
builds the rule set from stored settings, runs the scan and persists the
record in the flat-file store.
"""
from __future__ import annotations

import logging
import os
from typing import Any, Dict, Optional

from fastapi import Body, FastAPI, File, HTTPException, UploadFile
from pydantic import BaseModel

from cipher_sentinel import __version__
from cipher_sentinel.config.settings import build_rule_set, file_size_limit_bytes
from cipher_sentinel.core.exceptions import SentinelConfigError
from cipher_sentinel.scanner.engine import scan
from cipher_sentinel.store.simpledb import ScanStore, new_scan_record

logger = logging.getLogger(__name__)

APP_NAME = "cipher-sentinel-api"
DEFAULT_DATA_DIR = "simpledb-data"


class ScanTextInput(BaseModel):
    text: Optional[str] = None
    file_name: str = "Pasted Code"


def create_app(store: Optional[ScanStore] = None) -> FastAPI:
    """Build the FastAPI application around *store*."""
    if store is None:
        store = ScanStore(os.getenv("CIPHER_SENTINEL_DATA_DIR", DEFAULT_DATA_DIR))

    app = FastAPI(title=APP_NAME, version=__version__)
    app.state.store = store

    def _load_settings() -> Dict[str, Any]:
        try:
            return store.get_settings()
        except SentinelConfigError as e:
            logger.error("Stored settings are invalid: %s", e)
            raise HTTPException(status_code=500, detail=f"settings_error: {e}")

    def _run_scan(text: str, file_name: str) -> Dict[str, Any]:
        settings = _load_settings()
        if len(text.encode("utf-8")) > file_size_limit_bytes(settings):
            raise HTTPException(status_code=413, detail="Content exceeds the configured size limit")
        outcome = scan(text, build_rule_set(settings))
        record = new_scan_record(outcome, file_name)
        store.save_scan(record)
        return record

    @app.get("/api/health")
    def health():
        return {"ok": True, "service": APP_NAME, "version": __version__}

    @app.post("/api/scan/text")
    def scan_text(payload: ScanTextInput):
        if not payload.text:
            raise HTTPException(status_code=400, detail="Text content is required")
        return _run_scan(payload.text, payload.file_name)

    @app.post("/api/scan/file")
    def scan_file(file: Optional[UploadFile] = File(None)):
        if file is None:
            raise HTTPException(status_code=400, detail="No file uploaded")

        settings = _load_settings()
        limit = file_size_limit_bytes(settings)
        # Read one byte past the limit so oversize uploads are never fully buffered.
        blob = file.file.read(limit + 1)
        if len(blob) > limit:
            raise HTTPException(status_code=413, detail="File exceeds the configured size limit")
        try:
            text = blob.decode("utf-8")
        except UnicodeDecodeError:
            raise HTTPException(status_code=400, detail="File is not valid UTF-8 text")

        return _run_scan(text, file.filename or "Uploaded File")

    @app.get("/api/scans")
    def list_scans():
        return store.list_scans()

    @app.get("/api/scans/{scan_id}")
    def get_scan(scan_id: str):
        record = store.get_scan(scan_id)
        if record is None:
            raise HTTPException(status_code=404, detail="Scan not found")
        return record

    @app.delete("/api/scans/{scan_id}")
    def delete_scan(scan_id: str):
        if not store.delete_scan(scan_id):
            raise HTTPException(status_code=404, detail="Scan not found")
        return {"message": "Scan deleted successfully"}

    @app.post("/api/scans/clear")
    def clear_history():
        store.clear_history()
        return {"message": "History cleared"}

    @app.get("/api/settings")
    def get_settings():
        return _load_settings()

    @app.post("/api/settings")
    def save_settings(settings: Dict[str, Any] = Body(...)):
        try:
            saved = store.save_settings(settings)
        except SentinelConfigError as e:
            raise HTTPException(status_code=400, detail=str(e))
        return {"message": "Settings saved", "settings": saved}

    return app


def serve(host: Optional[str] = None, port: Optional[int] = None, data_dir: Optional[str] = None) -> None:
    """Run the API with uvicorn, reading HOST/PORT/data dir from the environment."""
    import uvicorn
    from dotenv import load_dotenv

    load_dotenv()
    store = ScanStore(data_dir or os.getenv("CIPHER_SENTINEL_DATA_DIR", DEFAULT_DATA_DIR))
    uvicorn.run(
        create_app(store),
        host=host or os.getenv("HOST", "127.0.0.1"),
        port=port or int(os.getenv("PORT", "5000")),
    )
