#!/usr/bin/env python3
"""
Allow running cipher_sentinel as a module: python -m cipher_sentinel
"""

from cipher_sentinel.cli import main

if __name__ == "__main__":
    raise SystemExit(main())
