"""Public API for the Cipher Sentinel scan engine.

    from cipher_sentinel.scanner import scan
    outcome = scan(text, rule_set)
"""

from .engine import find_secrets, scan, split_lines

__all__ = ["find_secrets", "scan", "split_lines"]
