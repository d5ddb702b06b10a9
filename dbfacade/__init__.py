"""Thin SQLite access facade: CRUD, transactions and rule-based field validation.

Driver errors are logged and reported as False, never raised to callers.
"""
from __future__ import annotations

from .db import DatabaseSettings, load_settings
from .facade import Database
from .validation import Rule, RuleKind, ValidationFailure, parse_rules

__version__ = "0.1.0"

__all__ = [
    "Database",
    "DatabaseSettings",
    "load_settings",
    "Rule",
    "RuleKind",
    "ValidationFailure",
    "parse_rules",
]
