# SPDX-License-Identifier: MIT
"""
Settings loader for Cipher Sentinel.

Settings are plain dictionaries loaded from YAML (or persisted JSON) with the
built-in defaults filled in. ``build_rule_set`` turns them into the rule set a
scan runs with, so the engine itself never reads setting names.
"""
from __future__ import annotations

import copy
import logging
import math
from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml

from cipher_sentinel.core.exceptions import SentinelConfigError
from cipher_sentinel.rules.catalog import (
    CATEGORY_API_KEYS,
    CATEGORY_ENV_LEAKS,
    CATEGORY_PASSWORDS,
    CATEGORY_PEM_LEAKS,
    CATEGORY_PRIVATE_KEYS,
    CATEGORY_TOKENS,
    DEFAULT_RULE_SET,
    Rule,
    RuleSet,
    Sensitivity,
    apply_sensitivity,
    rule_from_dict,
)

logger = logging.getLogger(__name__)

CONFIG_FILENAMES = [".cipher-sentinel.yml", ".cipher-sentinel.yaml"]

MAX_FILE_SIZE_LIMIT_MB = 1024

# scanner.<flag> -> rule category it gates
CATEGORY_FLAGS = {
    "detect_api_keys": CATEGORY_API_KEYS,
    "detect_tokens": CATEGORY_TOKENS,
    "detect_passwords": CATEGORY_PASSWORDS,
    "detect_private_keys": CATEGORY_PRIVATE_KEYS,
    "detect_env_leaks": CATEGORY_ENV_LEAKS,
    "detect_pem_leaks": CATEGORY_PEM_LEAKS,
}

_SECTIONS = ("scanner", "data", "security", "performance")

DEFAULT_SETTINGS: Dict[str, Any] = {
    "scanner": {
        "deep_scan": False,
        "sensitivity": Sensitivity.MEDIUM.value,
        "file_size_limit_mb": 10,
        "detect_api_keys": True,
        "detect_tokens": True,
        "detect_passwords": True,
        "detect_private_keys": True,
        "detect_env_leaks": True,
        "detect_pem_leaks": True,
    },
    "data": {
        "auto_delete_old_scans": False,
    },
    "security": {
        "privacy_mode": True,
        "mask_secrets": True,
    },
    "performance": {
        "fast_scan_mode": True,
        "parallel_scanning": True,
        "cache_results": True,
    },
    "rules": [],
}


def get_default_settings() -> Dict[str, Any]:
    """
    Get the default settings.

    Returns:
        A fresh copy of the default settings dictionary
    """
    return copy.deepcopy(DEFAULT_SETTINGS)


def load_settings(config_path: Optional[str] = None, search_root: str = ".") -> Dict[str, Any]:
    """
    Load settings following the search order.

    Args:
        config_path: Explicit config path from the --config CLI flag
        search_root: Directory searched for .cipher-sentinel.yml/.yaml

    Returns:
        Validated settings dictionary with defaults applied

    Raises:
        SentinelConfigError: If the config file is malformed or an explicitly
            provided config is missing
    """
    # 1. Explicit --config
    if config_path:
        config_abs_path = Path(config_path).resolve()
        if not config_abs_path.exists():
            raise SentinelConfigError(
                f"Specified config file not found: {config_abs_path}",
                config_path=str(config_abs_path),
            )
        return _load_yaml_settings(config_abs_path)

    # 2. .cipher-sentinel.yml / .cipher-sentinel.yaml in the search root
    root = Path(search_root).resolve()
    for config_name in CONFIG_FILENAMES:
        config_file = root / config_name
        if config_file.exists():
            return _load_yaml_settings(config_file)

    # 3. Built-in defaults
    logger.debug("Using default settings")
    return get_default_settings()


def _load_yaml_settings(config_path: Path) -> Dict[str, Any]:
    """Load and validate a YAML settings file."""
    try:
        with open(config_path, "r", encoding="utf-8") as f:
            config = yaml.safe_load(f)
    except (OSError, yaml.YAMLError) as e:
        raise SentinelConfigError(
            f"Failed to parse config file: {e}", config_path=str(config_path)
        ) from e

    if config is None:
        config = {}

    settings = apply_settings_defaults(config, config_path=str(config_path))
    validate_settings(settings, config_path=str(config_path))
    logger.info("Loaded config: %s", config_path)
    return settings


def apply_settings_defaults(config: Any, config_path: Optional[str] = None) -> Dict[str, Any]:
    """
    Fill in missing settings from the defaults.

    Unknown keys are kept so that settings written by newer clients survive a
    round trip through the store.
    """
    if not isinstance(config, dict):
        raise SentinelConfigError("Settings must be a mapping", config_path=config_path)

    settings = copy.deepcopy(config)
    for section in _SECTIONS:
        value = settings.setdefault(section, {})
        if value is None:
            value = settings[section] = {}
        if not isinstance(value, dict):
            raise SentinelConfigError(
                f"'{section}' must be a mapping", config_path=config_path, section=section
            )
        for key, default in DEFAULT_SETTINGS[section].items():
            value.setdefault(key, default)

    if settings.get("rules") is None:
        settings["rules"] = []
    return settings


def validate_settings(settings: Dict[str, Any], config_path: Optional[str] = None) -> None:
    """
    Validate a settings dictionary that already has defaults applied.

    Raises:
        SentinelConfigError: On the first invalid value found
    """
    scanner = settings["scanner"]

    try:
        Sensitivity.parse(scanner["sensitivity"])
    except ValueError as e:
        raise SentinelConfigError(str(e), config_path=config_path, section="scanner") from e

    limit = scanner["file_size_limit_mb"]
    if (
        isinstance(limit, bool)
        or not isinstance(limit, (int, float))
        or not 0 < limit <= MAX_FILE_SIZE_LIMIT_MB
        or not math.isfinite(limit)
    ):
        raise SentinelConfigError(
            f"file_size_limit_mb must be a number greater than 0 and at most {MAX_FILE_SIZE_LIMIT_MB}",
            config_path=config_path,
            section="scanner",
        )

    for flag in CATEGORY_FLAGS:
        if not isinstance(scanner[flag], bool):
            raise SentinelConfigError(
                f"{flag} must be true or false", config_path=config_path, section="scanner"
            )

    # Building the full rule set surfaces bad patterns and duplicate names now.
    RuleSet(DEFAULT_RULE_SET.rules + tuple(custom_rules(settings, config_path=config_path)))


def custom_rules(settings: Dict[str, Any], config_path: Optional[str] = None) -> List[Rule]:
    """Compile the user-defined rules listed under ``rules``."""
    raw = settings.get("rules") or []
    if not isinstance(raw, list):
        raise SentinelConfigError("'rules' must be a list", config_path=config_path, section="rules")
    return [rule_from_dict(item, config_path=config_path) for item in raw]


def enabled_categories(settings: Dict[str, Any]) -> List[str]:
    scanner = settings.get("scanner", {})
    return [
        category
        for flag, category in CATEGORY_FLAGS.items()
        if scanner.get(flag, DEFAULT_SETTINGS["scanner"][flag])
    ]


def build_rule_set(settings: Optional[Dict[str, Any]] = None, base: RuleSet = DEFAULT_RULE_SET) -> RuleSet:
    """
    Derive the rule set for one scan from settings.

    Custom rules are appended to *base*, disabled categories are dropped and
    the heuristic rules are retuned for the configured sensitivity.

    Args:
        settings: Settings dictionary (default: built-in defaults)
        base: Starting catalog

    Returns:
        The immutable RuleSet to hand to the scan engine
    """
    settings = apply_settings_defaults(settings if settings is not None else get_default_settings())
    rule_set = base.extend(custom_rules(settings))
    rule_set = rule_set.select(enabled_categories(settings))
    rule_set = apply_sensitivity(rule_set, Sensitivity.parse(settings["scanner"]["sensitivity"]))
    logger.debug("Built rule set with %d rules: %s", len(rule_set), ", ".join(rule_set.names))
    return rule_set


def file_size_limit_bytes(settings: Dict[str, Any]) -> int:
    """Maximum accepted input size, from ``scanner.file_size_limit_mb``."""
    limit_mb = settings.get("scanner", {}).get(
        "file_size_limit_mb", DEFAULT_SETTINGS["scanner"]["file_size_limit_mb"]
    )
    return int(float(limit_mb) * 1024 * 1024)


def create_default_config_template() -> str:
    """
    Create a .cipher-sentinel.yml template with commented examples.

    Returns:
        YAML string with the default configuration
    """
    return """# Cipher Sentinel configuration

scanner:
  # Low | Medium | High. Tunes the generic password and bearer rules only.
  sensitivity: Medium
  # Inputs larger than this are rejected before scanning.
  file_size_limit_mb: 10
  deep_scan: false
  # Rule categories. A disabled category is never matched.
  detect_api_keys: true
  detect_tokens: true
  detect_passwords: true
  detect_private_keys: true
  detect_env_leaks: true
  detect_pem_leaks: true

data:
  auto_delete_old_scans: false

security:
  privacy_mode: true
  # Mask matched secrets in CLI output.
  mask_secrets: true

performance:
  fast_scan_mode: true
  parallel_scanning: true
  cache_results: true

# Extra rules appended after the built-in catalog.
rules: []
  # Example:
  # - name: PEM_CERTIFICATE
  #   pattern: "-----BEGIN CERTIFICATE-----"
  #   severity: Low
  #   category: pem_leaks
"""
