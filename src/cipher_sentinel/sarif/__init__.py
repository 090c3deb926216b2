# SPDX-License-Identifier: MIT
"""SARIF 2.1.0 export for scan reports."""
from .export import build_sarif

__all__ = ["build_sarif"]
