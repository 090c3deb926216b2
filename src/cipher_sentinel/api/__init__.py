# SPDX-License-Identifier: MIT
"""HTTP API for scans, scan history and settings."""
from .app import create_app, serve

__all__ = ["create_app", "serve"]
