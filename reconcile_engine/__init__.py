"""
Reconcile Engine - Duplicate detection, categorization and account matching
for imported financial transactions.

This package provides functionality to:
- Detect whether incoming transactions duplicate ones already stored
- Assign a spending/income category from a transaction description
- Match transactions to known accounts, or propose new accounts
- Run these steps over CSV files and write reconciliation reports

Transactions use a common format:
- date: Calendar date of the transaction
- description: Free-text description
- amount: Signed amount (negative for money out, positive for money in)
- category: Optional category label
- id / account_id / user_id: Optional opaque identifiers
"""

from .accounts import BankMatcher, extract_bank_info, find_matching_account, suggest_accounts
from .categorizer import Categorizer, categorize
from .config import DuplicateOptions, EngineConfig, load_rules
from .duplicates import (
    DuplicateDetector,
    check_duplicate,
    explain_match,
    find_duplicates,
    group_by_confidence,
)
from .models import Account, AccountType, Transaction
from .processor import TransactionProcessor, process_transactions, validate_transaction

__all__ = [
    'Account',
    'AccountType',
    'BankMatcher',
    'Categorizer',
    'DuplicateDetector',
    'DuplicateOptions',
    'EngineConfig',
    'Transaction',
    'TransactionProcessor',
    'categorize',
    'check_duplicate',
    'explain_match',
    'extract_bank_info',
    'find_duplicates',
    'find_matching_account',
    'group_by_confidence',
    'load_rules',
    'process_transactions',
    'suggest_accounts',
    'validate_transaction'
]
