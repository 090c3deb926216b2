# SPDX-License-Identifier: MIT
"""
Detection rules.

Exposes the default catalog and the helpers used to derive the rule set a
scan actually runs with.
"""

from .catalog import (
    CATEGORIES,
    DEFAULT_RULE_SET,
    DEFAULT_RULES,
    Rule,
    RuleSet,
    Sensitivity,
    apply_sensitivity,
    rule_from_dict,
)

__all__ = [
    "CATEGORIES",
    "DEFAULT_RULE_SET",
    "DEFAULT_RULES",
    "Rule",
    "RuleSet",
    "Sensitivity",
    "apply_sensitivity",
    "rule_from_dict",
]
