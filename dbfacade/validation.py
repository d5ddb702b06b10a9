"""Declarative field validation.

A rule string such as ``"required|integer|min:0"`` is parsed into a list of
:class:`Rule` values (kind + optional argument) and evaluated in order.
Evaluation stops at the first failing rule of the first failing field; there
is no error aggregation.

Rules other than ``required`` only apply when the field is present, i.e. the
key exists and its value is not ``None``. Unknown rule names are ignored.
"""
from __future__ import annotations

import re
from dataclasses import dataclass
from enum import Enum
from typing import Any, Mapping, Optional

from email_validator import EmailNotValidError, validate_email


class RuleKind(str, Enum):
    REQUIRED = "required"
    STRING = "string"
    INTEGER = "integer"
    FLOAT = "float"
    MIN = "min"
    MAX = "max"
    EMAIL = "email"
    REGEX = "regex"


@dataclass(frozen=True)
class Rule:
    kind: RuleKind
    arg: Optional[str] = None

    def __str__(self) -> str:
        return self.kind.value if self.arg is None else f"{self.kind.value}:{self.arg}"


@dataclass(frozen=True)
class ValidationFailure:
    field: str
    rule: Rule
    message: str


_DIGITS_RE = re.compile(r"[0-9]+")
# numeric string: optional surrounding whitespace, sign, decimal, exponent (no hex, no inf/nan)
_NUMERIC_RE = re.compile(r"\s*[+-]?(?:[0-9]+(?:\.[0-9]*)?|\.[0-9]+)(?:[eE][+-]?[0-9]+)?\s*")
# /pattern/flags style, as written for PCRE
_DELIMITED_RE = re.compile(r"([/#~@!%+])(.*)\1([imsxu]*)", re.DOTALL)
_FLAG_BITS = {"i": re.IGNORECASE, "m": re.MULTILINE, "s": re.DOTALL, "x": re.VERBOSE, "u": 0}


def parse_rule(token: str) -> Optional[Rule]:
    """Parse one ``name[:arg]`` token. Returns None for unknown names."""
    name, sep, arg = token.partition(":")
    try:
        kind = RuleKind(name)
    except ValueError:
        return None
    return Rule(kind, arg if sep else None)


def parse_rules(rule_string: str) -> list[Rule]:
    rules = []
    for token in rule_string.split("|"):
        rule = parse_rule(token)
        if rule is not None:
            rules.append(rule)
    return rules


def to_number(value: Any) -> Optional[float]:
    """Numeric value of an int, float or numeric string; None otherwise."""
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return float(value)
    if isinstance(value, str) and _NUMERIC_RE.fullmatch(value):
        return float(value.strip())
    return None


def compile_pattern(pattern: str) -> re.Pattern:
    m = _DELIMITED_RE.fullmatch(pattern)
    if not m:
        return re.compile(pattern)
    flags = 0
    for ch in m.group(3):
        flags |= _FLAG_BITS[ch]
    return re.compile(m.group(2), flags)


def check_rule(rule: Rule, field: str, data: Mapping[str, Any]) -> Optional[str]:
    """Return a failure message, or None when the rule holds."""
    value = data.get(field)
    if value is None:
        if rule.kind is RuleKind.REQUIRED:
            return f"Field '{field}' is required."
        return None

    kind = rule.kind
    if kind is RuleKind.STRING:
        if not isinstance(value, str):
            return f"Field '{field}' must be a string."
    elif kind is RuleKind.INTEGER:
        is_int = isinstance(value, int) and not isinstance(value, bool)
        if not is_int and not (isinstance(value, str) and _DIGITS_RE.fullmatch(value)):
            return f"Field '{field}' must be an integer."
    elif kind is RuleKind.FLOAT:
        if to_number(value) is None:
            return f"Field '{field}' must be a number."
    elif kind in (RuleKind.MIN, RuleKind.MAX):
        number = to_number(value)
        bound = to_number(rule.arg) if rule.arg is not None else None
        if number is None or bound is None:
            return None
        if kind is RuleKind.MIN and number < bound:
            return f"Field '{field}' must be at least {rule.arg}."
        if kind is RuleKind.MAX and number > bound:
            return f"Field '{field}' must be at most {rule.arg}."
    elif kind is RuleKind.EMAIL:
        if not isinstance(value, str):
            return f"Field '{field}' must be a valid email address."
        try:
            # syntax only: no DNS, and special-use domains (.test, .local) are well-formed
            validate_email(value, check_deliverability=False, globally_deliverable=False, test_environment=True)
        except EmailNotValidError:
            return f"Field '{field}' must be a valid email address."
    elif kind is RuleKind.REGEX:
        try:
            pattern = compile_pattern(rule.arg or "")
        except re.error as e:
            return f"Field '{field}' has an invalid pattern {rule.arg!r}: {e}"
        if not rule.arg or not pattern.search(str(value)):
            return f"Field '{field}' does not match pattern: {rule.arg}"
    return None


def first_failure(data: Mapping[str, Any], rules: Mapping[str, str] | None) -> Optional[ValidationFailure]:
    """
    Walk rules in mapping order, each field's rules in list order, and return
    the first failure. Fields without rules are never checked.
    """
    for field, rule_string in (rules or {}).items():
        for rule in parse_rules(rule_string):
            message = check_rule(rule, field, data)
            if message is not None:
                return ValidationFailure(field, rule, message)
    return None
