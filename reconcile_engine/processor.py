"""
Transaction processing: validation, categorization and account matching.

Raw records flow one way: validate -> categorize -> match an account. Each
validated record ends up in exactly one bucket:

- processed: matched to a known account
- suggestions: the bank is recognized but no known account fits
- unmatched: no bank recognized

Zero-amount noise records (fees, interest, adjustments) are dropped during
validation and only show up in the summary's ``skipped`` count.
"""

import logging
from dataclasses import replace
from datetime import date

from .accounts import BankMatcher, proposed_account_name
from .categorizer import Categorizer
from .config import DEFAULT_CONFIG
from .models import (
    Account,
    NewAccountProposal,
    ProcessingResult,
    ProcessingSummary,
    Transaction,
)
from .similarity import normalize_string, parse_amount, parse_date

logger = logging.getLogger(__name__)

class TransactionProcessor:
    """Validates, categorizes and assigns accounts to raw transactions."""

    def __init__(self, config=None):
        self.config = config or DEFAULT_CONFIG
        self.categorizer = Categorizer(self.config.category_patterns,
                                       self.config.fallback_category)
        self.bank_matcher = BankMatcher(self.config.bank_identifiers)

    def is_noise(self, amount, description):
        if amount != 0:
            return False
        desc = normalize_string(description)
        return any(keyword in desc for keyword in self.config.skip_keywords)

    def validate(self, raw):
        """Normalize one raw transaction record.

        Args:
            raw (dict or Transaction): Record with date, description, amount
                and optionally category and ownership ids

        Returns:
            Transaction or None: Normalized transaction, or None if the record
            is zero-amount noise that should be dropped
        """
        if isinstance(raw, Transaction):
            raw = raw.to_dict()

        amount = parse_amount(raw.get('amount'))
        if amount is None:
            amount = 0.0

        base = Transaction.from_record(raw)
        if self.is_noise(amount, base.description):
            logger.debug(f"Skipping zero-amount record: {base.description!r}")
            return None

        return replace(
            base,
            amount=amount,
            category=base.category or self.categorizer.categorize(base.description),
            description=base.description or self.config.placeholder_description,
            date=parse_date(raw.get('date')) or date.today(),
            type="income" if amount >= 0 else "expense",
        )

    def process(self, raw_transactions, known_accounts=()):
        """Validate a batch and sort it into processed, suggestions and unmatched.

        Args:
            raw_transactions (iterable): Raw transaction records
            known_accounts (iterable): Account records or dicts

        Returns:
            ProcessingResult: The three buckets plus a summary
        """
        raw_transactions = list(raw_transactions)
        accounts = [a if isinstance(a, Account) else Account.from_record(a)
                    for a in known_accounts]

        processed = []
        suggestions = []
        unmatched = []
        for raw in raw_transactions:
            txn = self.validate(raw)
            if txn is None:
                continue

            account = self.bank_matcher.find_matching_account(txn.description, accounts)
            if account is not None:
                processed.append(replace(txn, account_id=account.id, account_name=account.name))
                continue

            bank_info = self.bank_matcher.extract_bank_info(txn.description)
            if bank_info is not None:
                suggestions.append(NewAccountProposal(
                    transaction=txn,
                    bank_info=bank_info,
                    suggested_account_name=proposed_account_name(bank_info),
                ))
            else:
                unmatched.append(txn)

        total = len(raw_transactions)
        summary = ProcessingSummary(
            total=total,
            processed=len(processed),
            suggestions=len(suggestions),
            unmatched=len(unmatched),
            skipped=total - len(processed) - len(suggestions) - len(unmatched),
        )
        logger.info(f"Processed {total} transactions: {summary.processed} matched, "
                    f"{summary.suggestions} suggestions, {summary.unmatched} unmatched, "
                    f"{summary.skipped} skipped")
        return ProcessingResult(processed, suggestions, unmatched, summary)

_default_processor = TransactionProcessor()

def validate_transaction(raw):
    return _default_processor.validate(raw)

def process_transactions(raw_transactions, known_accounts=()):
    return _default_processor.process(raw_transactions, known_accounts)
