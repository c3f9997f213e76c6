"""
Configuration for the reconciliation engine.

The rule tables below are the built-in defaults. They are plain immutable
values: every engine component receives its tables at construction time,
so callers can swap in their own rules (see ``load_rules``) without touching
module state.

Table order matters. Categories are checked in declaration order (after
"Income", which always goes first) and the first keyword hit wins, so
overlapping keywords are resolved by position in the table.
"""

import json
import logging
import os
import pathlib
from dataclasses import dataclass, field, replace
from types import MappingProxyType
from typing import Mapping, Tuple

logger = logging.getLogger(__name__)

INCOME_CATEGORY = "Income"
FALLBACK_CATEGORY = "Other"
PLACEHOLDER_DESCRIPTION = "Unknown transaction"

DEFAULT_CATEGORY_PATTERNS = MappingProxyType({
    "Food & Dining": (
        "restaurant", "cafe", "coffee", "starbucks", "mcdonalds", "burger",
        "pizza", "doordash", "uber eats", "grubhub", "postmates", "delivery",
        "takeout", "dining", "food", "meal", "lunch", "dinner", "breakfast",
        "snack",
    ),
    "Transportation": (
        "uber", "lyft", "taxi", "gas", "fuel", "shell", "exxon", "chevron",
        "parking", "toll", "metro", "subway", "bus", "train", "airline",
        "delta", "united", "american airlines", "southwest", "transport",
    ),
    "Shopping": (
        "amazon", "walmart", "target", "costco", "best buy", "home depot",
        "lowes", "macy", "nordstrom", "shopping", "retail",
    ),
    "Entertainment": (
        "netflix", "spotify", "hulu", "disney", "youtube", "prime", "hbo",
        "movie", "theater", "concert", "show", "ticket", "game",
        "entertainment",
    ),
    "Healthcare": (
        "pharmacy", "medical", "doctor", "hospital", "cvs", "walgreens",
        "insurance", "copay", "deductible", "prescription", "healthcare",
    ),
    "Housing": (
        "rent", "mortgage", "home", "apartment", "lease", "property",
        "maintenance", "repair", "furniture", "ikea", "wayfair", "housing",
    ),
    "Utilities": (
        "electric", "gas", "water", "internet", "phone", "cable", "utility",
        "at&t", "verizon", "comcast", "xfinity", "spectrum",
    ),
    INCOME_CATEGORY: (
        "salary", "payroll", "deposit", "transfer in", "income",
        "payment received",
    ),
})

@dataclass(frozen=True)
class BankPattern:
    """Description patterns identifying one bank, plus its usual account types."""
    patterns: Tuple[str, ...]
    account_types: Tuple[str, ...] = ()

DEFAULT_BANK_IDENTIFIERS = MappingProxyType({
    "bank of america": BankPattern(
        ("boa", "bank of america", "bofa"), ("checking", "savings", "credit card")),
    "chase": BankPattern(
        ("chase", "jpmorgan"), ("checking", "savings", "credit card")),
    "wells fargo": BankPattern(
        ("wells fargo", "wellsfargo"), ("checking", "savings", "credit card")),
    "citibank": BankPattern(
        ("citi", "citibank"), ("checking", "savings", "credit card")),
    "american express": BankPattern(
        ("amex", "american express"), ("credit card",)),
    "discover": BankPattern(
        ("discover",), ("credit card",)),
})

# Zero-amount records whose description contains one of these are noise
DEFAULT_SKIP_KEYWORDS = ("interest", "fee", "charge", "adjustment", "credit")

@dataclass(frozen=True)
class DuplicateOptions:
    """Tolerances used when comparing a new transaction to an existing one.

    Attributes:
        date_tolerance_days (int): Maximum day difference still counted as the same date
        amount_tolerance (float): Maximum absolute amount difference still counted as equal
        require_exact_category (bool): Require both categories present and equal
        compare_absolute_amounts (bool): Ignore the sign when comparing amounts
    """
    date_tolerance_days: int = 1
    amount_tolerance: float = 0.01
    require_exact_category: bool = False
    compare_absolute_amounts: bool = False

@dataclass(frozen=True)
class EngineConfig:
    """Complete rule set for one engine instance."""
    category_patterns: Mapping[str, Tuple[str, ...]] = field(default_factory=lambda: DEFAULT_CATEGORY_PATTERNS)
    bank_identifiers: Mapping[str, BankPattern] = field(default_factory=lambda: DEFAULT_BANK_IDENTIFIERS)
    skip_keywords: Tuple[str, ...] = DEFAULT_SKIP_KEYWORDS
    fallback_category: str = FALLBACK_CATEGORY
    placeholder_description: str = PLACEHOLDER_DESCRIPTION
    duplicate_options: DuplicateOptions = field(default_factory=DuplicateOptions)

DEFAULT_CONFIG = EngineConfig()

def _keyword_tuple(values, context):
    if isinstance(values, str) or not isinstance(values, (list, tuple)):
        raise ValueError(f"{context} must be a list of strings, got {type(values).__name__}")
    return tuple(str(v).strip().lower() for v in values if str(v).strip())

def _parse_categories(raw):
    if not isinstance(raw, dict):
        raise ValueError("'categories' must be an object mapping label to keywords")
    return MappingProxyType({
        str(label): _keyword_tuple(keywords, f"Keywords for category '{label}'")
        for label, keywords in raw.items()
    })

def _parse_banks(raw):
    if not isinstance(raw, dict):
        raise ValueError("'banks' must be an object mapping bank name to patterns")
    banks = {}
    for name, entry in raw.items():
        if not isinstance(entry, dict) or 'patterns' not in entry:
            raise ValueError(f"Bank '{name}' must define 'patterns'")
        banks[str(name).strip().lower()] = BankPattern(
            patterns=_keyword_tuple(entry['patterns'], f"Patterns for bank '{name}'"),
            account_types=tuple(str(t) for t in entry.get('accountTypes', ())),
        )
    return MappingProxyType(banks)

def _parse_duplicate_options(raw):
    if not isinstance(raw, dict):
        raise ValueError("'duplicateOptions' must be an object")
    options = DuplicateOptions()
    try:
        if 'dateToleranceDays' in raw:
            options = replace(options, date_tolerance_days=int(raw['dateToleranceDays']))
        if 'amountTolerance' in raw:
            options = replace(options, amount_tolerance=float(raw['amountTolerance']))
    except (TypeError, ValueError) as e:
        raise ValueError(f"Invalid duplicate option: {str(e)}")
    if 'requireExactCategory' in raw:
        options = replace(options, require_exact_category=bool(raw['requireExactCategory']))
    if 'compareAbsoluteAmounts' in raw:
        options = replace(options, compare_absolute_amounts=bool(raw['compareAbsoluteAmounts']))
    return options

def load_rules(path=None) -> EngineConfig:
    """Load an engine configuration from a JSON rules file.

    Args:
        path (str or pathlib.Path, optional): Rules file. Defaults to the
            RECONCILE_RULES environment variable; when neither is set the
            built-in configuration is returned.

    Returns:
        EngineConfig: Configuration with every key present in the file
        overriding the built-in default

    Raises:
        FileNotFoundError: If the rules file does not exist
        ValueError: If the file is not valid JSON or has malformed entries
    """
    if path is None:
        path = os.getenv('RECONCILE_RULES')
    if not path:
        return DEFAULT_CONFIG

    path = pathlib.Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Rules file not found: {path}")

    logger.info(f"Loading rules from {path}")
    try:
        with open(path, 'r', encoding='utf-8') as f:
            raw = json.load(f)
    except json.JSONDecodeError as e:
        raise ValueError(f"Invalid rules file {path}: {str(e)}")

    if not isinstance(raw, dict):
        raise ValueError(f"Invalid rules file {path}: top level must be an object")

    config = DEFAULT_CONFIG
    if 'categories' in raw:
        config = replace(config, category_patterns=_parse_categories(raw['categories']))
    if 'banks' in raw:
        config = replace(config, bank_identifiers=_parse_banks(raw['banks']))
    if 'skipKeywords' in raw:
        config = replace(config, skip_keywords=_keyword_tuple(raw['skipKeywords'], "'skipKeywords'"))
    if 'fallbackCategory' in raw:
        config = replace(config, fallback_category=str(raw['fallbackCategory']))
    if 'duplicateOptions' in raw:
        config = replace(config, duplicate_options=_parse_duplicate_options(raw['duplicateOptions']))

    logger.debug(f"Loaded {len(config.category_patterns)} categories and "
                 f"{len(config.bank_identifiers)} banks")
    return config
