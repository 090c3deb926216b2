# SPDX-License-Identifier: MIT
"""Cipher Sentinel custom exceptions."""

from __future__ import annotations


class SentinelConfigError(Exception):
    """Raised when configuration is missing or invalid."""

    def __init__(self, message: str, config_path: str = None, section: str = None):
        self.config_path = config_path
        self.section = section
        super().__init__(message)

    def __str__(self):
        msg = super().__str__()
        if self.config_path:
            msg += f" (config: {self.config_path})"
        if self.section:
            msg += f" (section: {self.section})"
        return msg


class RuleDefinitionError(SentinelConfigError):
    """Raised when a detection rule cannot be built."""

    def __init__(self, message: str, rule_name: str = None, config_path: str = None):
        self.rule_name = rule_name
        super().__init__(message, config_path=config_path, section="rules")
