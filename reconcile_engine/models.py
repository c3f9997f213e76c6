"""
Typed records passed into and returned by the engine.

All records are frozen: the engine derives new records (``dataclasses.replace``)
instead of mutating what the caller handed in. ``from_record`` builds a
record from a loosely-shaped mapping, such as a CSV row or a JSON object,
coercing malformed values to None rather than failing.
"""

from dataclasses import asdict, dataclass, field
import datetime as dt
from enum import Enum
from typing import Any, List, Mapping, Optional, Tuple

from .similarity import _is_missing, parse_amount, parse_date

def _pick(record, *keys):
    """Return the first non-missing value among ``keys``."""
    for key in keys:
        value = record.get(key)
        if not _is_missing(value):
            return value
    return None

def _optional_text(value):
    if _is_missing(value):
        return None
    text = str(value).strip()
    return text or None

class AccountType(str, Enum):
    CHECKING = "checking"
    SAVINGS = "savings"
    CREDIT = "credit"
    INVESTMENT = "investment"
    LOAN = "loan"

@dataclass(frozen=True)
class Transaction:
    """A single financial transaction.

    Amounts follow the convention negative = money out, positive = money in.
    ``type``, ``account_id`` and ``account_name`` are filled in by the
    processor; ``id`` is present on transactions that are already stored.
    """
    date: Optional[dt.date] = None
    description: Optional[str] = None
    amount: Optional[float] = None
    category: Optional[str] = None
    id: Any = None
    account_id: Any = None
    user_id: Any = None
    account_name: Optional[str] = None
    type: Optional[str] = None

    @classmethod
    def from_record(cls, record: Mapping[str, Any]) -> "Transaction":
        return cls(
            date=parse_date(record.get('date')),
            description=_optional_text(record.get('description')),
            amount=parse_amount(record.get('amount')),
            category=_optional_text(record.get('category')),
            id=_pick(record, 'id'),
            account_id=_pick(record, 'account_id', 'accountId'),
            user_id=_pick(record, 'user_id', 'userId'),
            account_name=_optional_text(_pick(record, 'account_name', 'accountName')),
            type=_optional_text(record.get('type')),
        )

    def to_dict(self):
        result = asdict(self)
        day = parse_date(self.date)
        result['date'] = day.isoformat() if day else None
        return result

@dataclass(frozen=True)
class Account:
    """A known financial account.

    ``name`` is the display string searched for the bank name; ``last4_digits``
    disambiguates several accounts held at the same bank.
    """
    id: Any
    name: str
    last4_digits: Optional[str] = None
    type: AccountType = AccountType.CHECKING

    @classmethod
    def from_record(cls, record: Mapping[str, Any]) -> "Account":
        digits = _optional_text(_pick(record, 'last4_digits', 'last4Digits'))
        # CSV readers can turn "0042" into 42.0
        if digits and digits.endswith('.0'):
            digits = digits[:-2]
        if digits and digits.isdigit():
            digits = digits.zfill(4)

        raw_type = _optional_text(record.get('type'))
        try:
            account_type = AccountType(raw_type.lower()) if raw_type else AccountType.CHECKING
        except ValueError:
            account_type = AccountType.CHECKING

        return cls(
            id=_pick(record, 'id'),
            name=_optional_text(record.get('name')) or "",
            last4_digits=digits,
            type=account_type,
        )

@dataclass(frozen=True)
class FieldMatches:
    date: bool = False
    amount: bool = False
    description: bool = False
    category: bool = False

    def count(self):
        return sum((self.date, self.amount, self.description, self.category))

@dataclass(frozen=True)
class MatchResult:
    """Outcome of comparing one new transaction to one existing transaction."""
    is_duplicate: bool
    confidence: float
    matches: FieldMatches

@dataclass(frozen=True)
class DuplicateMatch:
    """A new transaction flagged as a duplicate, with its strongest evidence."""
    new_transaction: Transaction
    existing_transaction: Transaction
    result: MatchResult

    @property
    def confidence(self):
        return self.result.confidence

@dataclass(frozen=True)
class DuplicateSummary:
    total: int
    duplicates: int
    non_duplicates: int
    duplicate_percentage: float

@dataclass(frozen=True)
class DuplicateReport:
    duplicates: List[DuplicateMatch]
    non_duplicates: List[Transaction]
    summary: DuplicateSummary

@dataclass(frozen=True)
class ConfidenceGroups:
    high: List[DuplicateMatch]
    medium: List[DuplicateMatch]
    low: List[DuplicateMatch]
    all: List[DuplicateMatch]

@dataclass(frozen=True)
class BankInfo:
    bank_name: str
    last4_digits: Optional[str] = None
    account_types: Tuple[str, ...] = ()

@dataclass(frozen=True)
class AccountSuggestion:
    """An account worth creating, backed by repeated transactions."""
    bank_name: str
    last4_digits: Optional[str]
    transaction_count: int
    suggested_name: str

@dataclass(frozen=True)
class NewAccountProposal:
    """A transaction from a recognized bank with no matching known account."""
    transaction: Transaction
    bank_info: BankInfo
    suggested_account_name: str

@dataclass(frozen=True)
class ProcessingSummary:
    total: int
    processed: int
    suggestions: int
    unmatched: int
    skipped: int

@dataclass(frozen=True)
class ProcessingResult:
    processed: List[Transaction] = field(default_factory=list)
    suggestions: List[NewAccountProposal] = field(default_factory=list)
    unmatched: List[Transaction] = field(default_factory=list)
    summary: ProcessingSummary = field(default_factory=lambda: ProcessingSummary(0, 0, 0, 0, 0))
