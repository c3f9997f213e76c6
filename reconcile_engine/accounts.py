"""
Bank recognition and account matching.

A description such as "CHASE DEBIT PURCHASE *4321" identifies a bank by
substring pattern and, optionally, the last four digits of the account.
That is enough to pick a known account or to propose a new one.

When a description carries no digits, or the candidate account has none
recorded, the first account whose name mentions the bank is accepted. With
several undifferentiated accounts at one bank this can pick the wrong one.
"""

import logging
import re
from collections import Counter

from .config import DEFAULT_BANK_IDENTIFIERS
from .models import Account, AccountSuggestion, BankInfo, Transaction
from .similarity import normalize_string

logger = logging.getLogger(__name__)

LAST4_PATTERN = re.compile(r'\*(\d{4})(?!\d)')
UNKNOWN_DIGITS = "unknown"

def _capitalize(name):
    return name[:1].upper() + name[1:]

def suggested_account_name(bank_name, last4_digits=None):
    """Display name for a proposed account, e.g. "Chase Account ****4321"."""
    name = f"{_capitalize(bank_name)} Account"
    if last4_digits:
        name += f" ****{last4_digits}"
    return name

def proposed_account_name(bank_info):
    """Display name including the bank's primary account type, e.g. "Chase checking ****4321"."""
    account_type = bank_info.account_types[0] if bank_info.account_types else "Account"
    name = f"{_capitalize(bank_info.bank_name)} {account_type}"
    if bank_info.last4_digits:
        name += f" ****{bank_info.last4_digits}"
    return name

class BankMatcher:
    """Recognizes banks in descriptions and matches them to known accounts."""

    def __init__(self, banks=None):
        if banks is None:
            banks = DEFAULT_BANK_IDENTIFIERS
        self.banks = banks

    def extract_bank_info(self, description):
        """Identify the bank (and trailing account digits) in a description.

        Args:
            description (str or None): Transaction description

        Returns:
            BankInfo or None: Bank name, last four digits if a ``*NNNN`` marker
            is present, and the bank's account types; None when no bank is recognized
        """
        desc = normalize_string(description)
        if not desc:
            return None

        for bank_name, bank in self.banks.items():
            if any(pattern and pattern in desc for pattern in bank.patterns):
                digit_match = LAST4_PATTERN.search(desc)
                return BankInfo(
                    bank_name=bank_name,
                    last4_digits=digit_match.group(1) if digit_match else None,
                    account_types=tuple(bank.account_types),
                )
        return None

    def find_matching_account(self, description, known_accounts):
        """Find the known account a transaction description belongs to.

        Accounts are scanned in order. An account matches when its name
        contains the bank name; if both sides know the last four digits,
        those must agree as well.

        Args:
            description (str or None): Transaction description
            known_accounts (iterable): Candidate accounts, as Account records or mappings

        Returns:
            Account or None: First matching account
        """
        bank_info = self.extract_bank_info(description)
        if bank_info is None:
            return None

        for account in known_accounts:
            if not isinstance(account, Account):
                account = Account.from_record(account)
            if bank_info.bank_name not in normalize_string(account.name):
                continue
            if bank_info.last4_digits and account.last4_digits:
                if account.last4_digits == bank_info.last4_digits:
                    return account
                continue
            return account

        logger.debug(f"No known account for bank {bank_info.bank_name!r} "
                     f"(digits {bank_info.last4_digits})")
        return None

    def suggest_accounts(self, transactions):
        """Propose accounts to create from recurring bank signatures.

        Transactions are grouped by bank name and last four digits; groups
        seen at least twice are returned, most frequent first.

        Args:
            transactions (iterable): Transactions, records or plain descriptions

        Returns:
            list of AccountSuggestion
        """
        counts = Counter()
        for txn in transactions:
            if isinstance(txn, str):
                description = txn
            elif isinstance(txn, Transaction):
                description = txn.description
            else:
                description = txn.get('description')

            bank_info = self.extract_bank_info(description)
            if bank_info:
                counts[(bank_info.bank_name, bank_info.last4_digits or UNKNOWN_DIGITS)] += 1

        suggestions = []
        for (bank_name, digits), count in counts.items():
            if count < 2:
                continue
            last4 = None if digits == UNKNOWN_DIGITS else digits
            suggestions.append(AccountSuggestion(
                bank_name=bank_name,
                last4_digits=last4,
                transaction_count=count,
                suggested_name=suggested_account_name(bank_name, last4),
            ))
        # sorted() is stable, equal counts keep first-seen order
        return sorted(suggestions, key=lambda s: s.transaction_count, reverse=True)

_default_matcher = BankMatcher()

def extract_bank_info(description):
    return _default_matcher.extract_bank_info(description)

def find_matching_account(description, known_accounts):
    return _default_matcher.find_matching_account(description, known_accounts)

def suggest_accounts(transactions):
    return _default_matcher.suggest_accounts(transactions)
