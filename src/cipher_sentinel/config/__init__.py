"""Settings loading and rule-set wiring."""

from .settings import (
    apply_settings_defaults,
    build_rule_set,
    file_size_limit_bytes,
    get_default_settings,
    load_settings,
    validate_settings,
)

__all__ = [
    "apply_settings_defaults",
    "build_rule_set",
    "file_size_limit_bytes",
    "get_default_settings",
    "load_settings",
    "validate_settings",
]
