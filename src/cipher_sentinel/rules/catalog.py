# SPDX-License-Identifier: MIT
"""
Detection rule catalog.

A rule is a named regular expression plus the severity and category of the
secret it detects. Rules are compiled when they are constructed so that a bad
pattern fails when the catalog or configuration is loaded, never mid-scan.
"""
from __future__ import annotations

import dataclasses
import logging
import re
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Iterable, Iterator, List, Mapping, Optional, Pattern, Tuple

from cipher_sentinel.core.exceptions import RuleDefinitionError
from cipher_sentinel.core.findings import Severity

logger = logging.getLogger(__name__)


CATEGORY_API_KEYS = "api_keys"
CATEGORY_TOKENS = "tokens"
CATEGORY_PASSWORDS = "passwords"
CATEGORY_PRIVATE_KEYS = "private_keys"
CATEGORY_ENV_LEAKS = "env_leaks"
CATEGORY_PEM_LEAKS = "pem_leaks"

CATEGORIES = (
    CATEGORY_API_KEYS,
    CATEGORY_TOKENS,
    CATEGORY_PASSWORDS,
    CATEGORY_PRIVATE_KEYS,
    CATEGORY_ENV_LEAKS,
    CATEGORY_PEM_LEAKS,
)


class Sensitivity(str, Enum):
    """How eagerly the heuristic rules fire."""

    LOW = "Low"
    MEDIUM = "Medium"
    HIGH = "High"

    @classmethod
    def parse(cls, value: Any) -> "Sensitivity":
        if isinstance(value, cls):
            return value
        text = str(value).strip().lower()
        for member in cls:
            if member.value.lower() == text:
                return member
        raise ValueError(f"Unknown sensitivity: {value!r}")


@dataclass(frozen=True)
class Rule:
    """An immutable detection rule with its pattern compiled up front."""

    name: str
    pattern: str
    severity: Severity
    category: str
    ignore_case: bool = False
    description: str = ""
    regex: Pattern[str] = field(init=False, repr=False, compare=False)

    def __post_init__(self):
        if not self.name or not str(self.name).strip():
            raise RuleDefinitionError("Rule name must be a non-empty string")
        if self.category not in CATEGORIES:
            raise RuleDefinitionError(
                f"Rule {self.name} has unknown category {self.category!r}",
                rule_name=self.name,
            )
        try:
            object.__setattr__(self, "severity", Severity.parse(self.severity))
        except ValueError as e:
            raise RuleDefinitionError(f"Rule {self.name}: {e}", rule_name=self.name) from e

        # Character classes and case folding are ASCII only.
        flags = re.ASCII | (re.IGNORECASE if self.ignore_case else 0)
        try:
            compiled = re.compile(self.pattern, flags)
        except re.error as e:
            raise RuleDefinitionError(
                f"Rule {self.name} has an invalid pattern: {e}", rule_name=self.name
            ) from e
        if compiled.search("") is not None:
            raise RuleDefinitionError(
                f"Rule {self.name} pattern matches the empty string", rule_name=self.name
            )
        object.__setattr__(self, "regex", compiled)

    def find_all(self, line: str) -> List[str]:
        """Return every non-overlapping match in *line*, left to right."""
        return [m.group(0) for m in self.regex.finditer(line) if m.group(0)]


@dataclass(frozen=True)
class RuleSet:
    """Ordered, immutable collection of uniquely named rules."""

    rules: Tuple[Rule, ...] = ()

    def __post_init__(self):
        rules = tuple(self.rules)
        seen = set()
        for rule in rules:
            # Fail fast rather than letting a later rule shadow an earlier one.
            if rule.name in seen:
                raise RuleDefinitionError(f"Duplicate rule: {rule.name}", rule_name=rule.name)
            seen.add(rule.name)
        object.__setattr__(self, "rules", rules)

    def __iter__(self) -> Iterator[Rule]:
        return iter(self.rules)

    def __len__(self) -> int:
        return len(self.rules)

    def __contains__(self, name: object) -> bool:
        return any(rule.name == name for rule in self.rules)

    @property
    def names(self) -> List[str]:
        return [rule.name for rule in self.rules]

    def get(self, name: str) -> Optional[Rule]:
        for rule in self.rules:
            if rule.name == name:
                return rule
        return None

    def select(self, categories: Iterable[str]) -> "RuleSet":
        """Return the subset of rules whose category is in *categories*."""
        wanted = set(categories)
        return RuleSet(tuple(rule for rule in self.rules if rule.category in wanted))

    def extend(self, rules: Iterable[Rule]) -> "RuleSet":
        return RuleSet(self.rules + tuple(rules))

    def replace_pattern(self, name: str, pattern: str) -> "RuleSet":
        """Return a copy with the named rule's pattern swapped; order is kept."""
        return RuleSet(
            tuple(
                dataclasses.replace(rule, pattern=pattern) if rule.name == name else rule
                for rule in self.rules
            )
        )


def _password_pattern(min_length: int, window: int) -> str:
    return rf"(password|passwd|pwd|secret).{{0,{window}}}['\"][^'\"]{{{min_length},}}['\"]"


def _bearer_pattern(min_length: int) -> str:
    return rf"bearer [a-zA-Z0-9._~+/-]{{{min_length},}}=*"


DEFAULT_RULES: Tuple[Rule, ...] = (
    Rule(
        name="AWS_ACCESS_KEY",
        # Body accepts underscores so documentation placeholders such as
        # AKIA_FAKE_ACCESS_KEY are reported too.
        pattern=r"(A3T[A-Z0-9]|AKIA|AGPA|AIDA|AROA|AIPA|ANPA|ANVA|ASIA)[A-Z0-9_]{16}",
        severity=Severity.CRITICAL,
        category=CATEGORY_API_KEYS,
        description="AWS access key id",
    ),
    Rule(
        name="AWS_SECRET_KEY",
        pattern=r"aws_(?:secret_access_key|secret_key).{0,50}(['\"][a-zA-Z0-9/+=]{40}['\"])",
        severity=Severity.CRITICAL,
        category=CATEGORY_ENV_LEAKS,
        ignore_case=True,
        description="AWS secret access key assignment",
    ),
    Rule(
        name="GITHUB_TOKEN",
        pattern=r"(ghp|gho|ghu|ghs|ghr)_[a-zA-Z0-9]{36}",
        severity=Severity.CRITICAL,
        category=CATEGORY_TOKENS,
        description="GitHub personal, OAuth or app token",
    ),
    Rule(
        name="JWT_TOKEN",
        pattern=r"ey[A-Za-z0-9_=-]+\.[A-Za-z0-9_=-]+\.?[A-Za-z0-9_.+/=-]*",
        severity=Severity.MEDIUM,
        category=CATEGORY_TOKENS,
        description="JSON Web Token",
    ),
    Rule(
        name="PRIVATE_KEY",
        pattern=r"-----BEGIN (RSA|OPENSSH|DSA|EC|PGP) PRIVATE KEY-----",
        severity=Severity.CRITICAL,
        category=CATEGORY_PRIVATE_KEYS,
        description="PEM private key header",
    ),
    Rule(
        name="GOOGLE_API_KEY",
        pattern=r"AIza[0-9A-Za-z_-]{35}",
        severity=Severity.CRITICAL,
        category=CATEGORY_API_KEYS,
        description="Google API key",
    ),
    Rule(
        name="STRIPE_SECRET_KEY",
        pattern=r"sk_(live|test)_[0-9a-zA-Z]{24}",
        severity=Severity.CRITICAL,
        category=CATEGORY_API_KEYS,
        description="Stripe secret key",
    ),
    Rule(
        name="SLACK_TOKEN",
        pattern=r"xox[baprs]-[0-9a-zA-Z]{10,48}",
        severity=Severity.CRITICAL,
        category=CATEGORY_TOKENS,
        description="Slack token",
    ),
    Rule(
        name="GENERIC_PASSWORD",
        pattern=_password_pattern(min_length=5, window=20),
        severity=Severity.MEDIUM,
        category=CATEGORY_PASSWORDS,
        ignore_case=True,
        description="Quoted literal assigned to a password-like name",
    ),
    Rule(
        name="GENERIC_BEARER",
        pattern=_bearer_pattern(min_length=1),
        severity=Severity.MEDIUM,
        category=CATEGORY_TOKENS,
        ignore_case=True,
        description="Bearer authorization token",
    ),
)

DEFAULT_RULE_SET = RuleSet(DEFAULT_RULES)

# Medium is the catalog as written above.
SENSITIVITY_PATTERNS: Dict[Sensitivity, Dict[str, str]] = {
    Sensitivity.LOW: {
        "GENERIC_PASSWORD": _password_pattern(min_length=8, window=20),
        "GENERIC_BEARER": _bearer_pattern(min_length=20),
    },
    Sensitivity.MEDIUM: {},
    Sensitivity.HIGH: {
        "GENERIC_PASSWORD": _password_pattern(min_length=3, window=40),
    },
}


def apply_sensitivity(rule_set: RuleSet, sensitivity: Sensitivity) -> RuleSet:
    """Retune the heuristic rules present in *rule_set* for *sensitivity*."""
    for name, pattern in SENSITIVITY_PATTERNS[Sensitivity.parse(sensitivity)].items():
        if name in rule_set:
            rule_set = rule_set.replace_pattern(name, pattern)
    return rule_set


def rule_from_dict(item: Mapping[str, Any], config_path: Optional[str] = None) -> Rule:
    """
    Build a custom rule from a configuration mapping.

    Args:
        item: Mapping with ``name``, ``pattern``, ``severity`` and ``category``
            keys, and optional ``ignore_case`` / ``description``
        config_path: Config file the rule came from, for error messages

    Returns:
        The compiled Rule

    Raises:
        RuleDefinitionError: If keys are missing or the rule is invalid
    """
    if not isinstance(item, Mapping):
        raise RuleDefinitionError("Each rule entry must be a mapping", config_path=config_path)

    missing = [key for key in ("name", "pattern", "severity", "category") if key not in item]
    if missing:
        raise RuleDefinitionError(
            f"Rule is missing keys: {', '.join(missing)}",
            rule_name=item.get("name"),
            config_path=config_path,
        )

    try:
        return Rule(
            name=str(item["name"]),
            pattern=str(item["pattern"]),
            severity=item["severity"],
            category=str(item["category"]),
            ignore_case=bool(item.get("ignore_case", False)),
            description=str(item.get("description", "")),
        )
    except RuleDefinitionError as e:
        e.config_path = config_path
        raise
