"""
Transaction Import Workflow

Command-line front end for the reconciliation engine. It loads transaction
and account CSV files with pandas, runs one of the engine workflows and
writes the results back out as CSV files plus a plain-text report.

Workflows:
- duplicates: compare a batch of new transactions against existing ones
  and split the batch into duplicates and non-duplicates
- process: validate, categorize and assign accounts to a batch of
  transactions, proposing new accounts for recognized banks

Input Columns (case-insensitive, '_' and ' ' interchangeable):
- Transactions: Date, Description, Amount, optional Category, Id,
  Account Id, User Id
- Accounts: Name, optional Id, Last4 Digits, Type

Output Files:
- duplicates/duplicates.csv, duplicates/non_duplicates.csv
- process/processed.csv, process/suggestions.csv, process/unmatched.csv,
  process/account_suggestions.csv
- reconciliation_report.txt in the workflow directory
"""

import argparse
import csv
import logging
import os
import pathlib
from dataclasses import replace

import pandas as pd

from .accounts import BankMatcher
from .config import load_rules
from .duplicates import DuplicateDetector, confidence_label, explain_match, group_by_confidence
from .models import Account
from .processor import TransactionProcessor
from .utils import create_output_directory, ensure_directory, setup_logging

logger = logging.getLogger(__name__)

TRANSACTION_COLUMNS = {
    'date': 'date',
    'transaction date': 'date',
    'description': 'description',
    'amount': 'amount',
    'category': 'category',
    'id': 'id',
    'account id': 'account_id',
    'accountid': 'account_id',
    'user id': 'user_id',
    'userid': 'user_id',
}

ACCOUNT_COLUMNS = {
    'id': 'id',
    'name': 'name',
    'last4 digits': 'last4_digits',
    'last4digits': 'last4_digits',
    'last 4 digits': 'last4_digits',
    'type': 'type',
}

TRANSACTION_OUTPUT_COLUMNS = [
    'date', 'description', 'amount', 'category', 'type',
    'id', 'account_id', 'account_name', 'user_id'
]

DUPLICATE_DETAIL_COLUMNS = ['existing_id', 'confidence', 'confidence_level', 'reason']

SUGGESTION_DETAIL_COLUMNS = ['bank_name', 'last4_digits', 'suggested_account_name']

def _read_csv(file_path):
    """Read a CSV file as strings, trying the usual encodings.

    Raises:
        FileNotFoundError: If the file does not exist
        ValueError: If the path is not a readable CSV file
    """
    file_path = pathlib.Path(file_path)
    if not file_path.exists():
        raise FileNotFoundError(f"File not found: {file_path}")
    if file_path.is_dir():
        raise ValueError(f"Path is a directory: {file_path}")
    if file_path.suffix.lower() != '.csv':
        raise ValueError(f"Unsupported file format: {file_path.suffix}")
    if os.path.getsize(file_path) == 0:
        raise ValueError(f"Could not read {file_path}: File is empty")

    for encoding in ['utf-8', 'utf-8-sig', 'cp1252']:
        try:
            df = pd.read_csv(
                file_path,
                header=0,
                dtype=str,
                skipinitialspace=True,
                encoding=encoding
            )
            logger.debug(f"Read {file_path} with encoding {encoding}")
            return df
        except UnicodeDecodeError:
            continue
        except (pd.errors.EmptyDataError, pd.errors.ParserError) as e:
            raise ValueError(f"Could not read {file_path}: {str(e)}")

    raise ValueError(f"Could not read {file_path} with any supported encoding")

def _normalize_columns(df, column_map, required_columns, file_path):
    df = df.copy()
    # utf-8 read of a BOM-prefixed file leaves the marker on the first header
    headers = [str(col).lstrip('\ufeff').strip().lower().replace('_', ' ') for col in df.columns]
    df.columns = headers
    df = df.rename(columns={col: column_map[col] for col in headers if col in column_map})

    missing_columns = [col for col in required_columns if col not in df.columns]
    if missing_columns:
        raise ValueError(f"Missing required columns in {file_path}: {missing_columns}")

    return df[[col for col in dict.fromkeys(column_map.values()) if col in df.columns]]

def import_transactions(file_path):
    """Load raw transaction records from a CSV file.

    Args:
        file_path (str or pathlib.Path): CSV file to read

    Returns:
        list of dict: Raw records ready for the engine (values are left
        unparsed; the engine coerces them)

    Raises:
        FileNotFoundError: If the file does not exist
        ValueError: If the file cannot be read or lacks Date, Description or Amount
    """
    logger.info(f"Importing transactions from {file_path}")
    df = _read_csv(file_path)
    df = _normalize_columns(df, TRANSACTION_COLUMNS, ['date', 'description', 'amount'], file_path)
    records = df.to_dict('records')
    logger.info(f"Imported {len(records)} transactions from {file_path}")
    return records

def import_accounts(file_path):
    """Load known accounts from a CSV file.

    Rows without an Id are numbered from 1 in file order.

    Raises:
        FileNotFoundError: If the file does not exist
        ValueError: If the file cannot be read or lacks a Name column
    """
    logger.info(f"Importing accounts from {file_path}")
    df = _read_csv(file_path)
    df = _normalize_columns(df, ACCOUNT_COLUMNS, ['name'], file_path)

    accounts = []
    for position, record in enumerate(df.to_dict('records'), start=1):
        account = Account.from_record(record)
        if account.id is None:
            account = replace(account, id=str(position))
        accounts.append(account)

    logger.info(f"Imported {len(accounts)} accounts from {file_path}")
    return accounts

def _transactions_frame(transactions, extra=None, extra_columns=()):
    rows = []
    for position, txn in enumerate(transactions):
        row = txn.to_dict()
        if extra:
            row.update(extra[position])
        rows.append(row)
    columns = TRANSACTION_OUTPUT_COLUMNS + list(extra_columns)
    if not rows:
        return pd.DataFrame(columns=columns)
    return pd.DataFrame(rows).reindex(columns=columns)

def _write_csv(df, output_path):
    output_path.parent.mkdir(parents=True, exist_ok=True)
    df.to_csv(output_path, index=False, quoting=csv.QUOTE_NONNUMERIC)
    logger.debug(f"Wrote {len(df)} rows to {output_path}")

def save_duplicate_results(report, output_dir):
    """Save duplicate detection results.

    Args:
        report (DuplicateReport): Result of find_duplicates
        output_dir (str or pathlib.Path): Directory to write into
    """
    output_dir = pathlib.Path(output_dir)
    duplicate_details = [
        {
            'existing_id': match.existing_transaction.id,
            'confidence': match.confidence,
            'confidence_level': confidence_label(match.confidence),
            'reason': explain_match(match),
        }
        for match in report.duplicates
    ]
    duplicates_df = _transactions_frame(
        [match.new_transaction for match in report.duplicates],
        duplicate_details,
        DUPLICATE_DETAIL_COLUMNS
    )
    _write_csv(duplicates_df, output_dir / "duplicates.csv")
    _write_csv(_transactions_frame(report.non_duplicates), output_dir / "non_duplicates.csv")

def save_processing_results(result, output_dir, bank_matcher=None):
    """Save transaction processing results.

    Besides the three result buckets, writes account_suggestions.csv with
    accounts worth creating based on transactions that found no known account.

    Args:
        result (ProcessingResult): Result of process
        output_dir (str or pathlib.Path): Directory to write into
        bank_matcher (BankMatcher, optional): Matcher used for account suggestions
    """
    output_dir = pathlib.Path(output_dir)
    bank_matcher = bank_matcher or BankMatcher()

    _write_csv(_transactions_frame(result.processed), output_dir / "processed.csv")

    suggestions_df = _transactions_frame(
        [proposal.transaction for proposal in result.suggestions],
        [
            {
                'bank_name': proposal.bank_info.bank_name,
                'last4_digits': proposal.bank_info.last4_digits,
                'suggested_account_name': proposal.suggested_account_name,
            }
            for proposal in result.suggestions
        ],
        SUGGESTION_DETAIL_COLUMNS
    )
    _write_csv(suggestions_df, output_dir / "suggestions.csv")

    _write_csv(_transactions_frame(result.unmatched), output_dir / "unmatched.csv")

    unassigned = [proposal.transaction for proposal in result.suggestions] + list(result.unmatched)
    account_suggestions = bank_matcher.suggest_accounts(unassigned)
    account_columns = ['bank_name', 'last4_digits', 'transaction_count', 'suggested_name']
    account_df = pd.DataFrame(
        [
            [s.bank_name, s.last4_digits, s.transaction_count, s.suggested_name]
            for s in account_suggestions
        ],
        columns=account_columns
    )
    _write_csv(account_df, output_dir / "account_suggestions.csv")

def format_duplicate_summary(report):
    """Format a summary of duplicate detection results.

    Args:
        report (DuplicateReport): Result of find_duplicates

    Returns:
        str: Formatted summary text
    """
    summary = report.summary
    groups = group_by_confidence(report.duplicates)
    lines = [
        f"Total Transactions: {summary.total}",
        f"Duplicate Transactions: {summary.duplicates}",
        f"New Transactions: {summary.non_duplicates}",
        f"Duplicate Percentage: {summary.duplicate_percentage:.1f}%",
        f"High Confidence: {len(groups.high)}",
        f"Medium Confidence: {len(groups.medium)}",
        f"Low Confidence: {len(groups.low)}",
    ]
    if summary.duplicates == 0:
        lines.append("\nNo duplicate transactions found")
    return "\n".join(lines)

def format_processing_summary(result):
    """Format a summary of transaction processing results.

    Args:
        result (ProcessingResult): Result of process

    Returns:
        str: Formatted summary text
    """
    summary = result.summary
    lines = [
        f"Total Transactions: {summary.total}",
        f"Matched to Accounts: {summary.processed}",
        f"New Account Suggestions: {summary.suggestions}",
        f"Unmatched Transactions: {summary.unmatched}",
        f"Skipped Transactions: {summary.skipped}",
    ]
    if summary.unmatched:
        amount = sum(txn.amount for txn in result.unmatched)
        lines.append(f"Unmatched Amount: ${amount:.2f}")
    return "\n".join(lines)

def generate_report(report_text, output_path):
    """Write a summary report.

    Args:
        report_text (str): Report content
        output_path (str or pathlib.Path): Report file, or a directory to
            place reconciliation_report.txt in

    Returns:
        pathlib.Path: Path of the written report
    """
    output_path = pathlib.Path(output_path)
    if output_path.is_dir() or not output_path.suffix:
        output_path = output_path / "reconciliation_report.txt"

    output_path.parent.mkdir(parents=True, exist_ok=True)
    logger.debug(f"Writing report to {output_path}")
    with open(output_path, 'w') as f:
        f.write(report_text)
    return output_path

def run_duplicates(args, config):
    """Run duplicate detection for parsed command-line arguments."""
    options = config.duplicate_options
    if args.date_tolerance is not None:
        options = replace(options, date_tolerance_days=args.date_tolerance)
    if args.amount_tolerance is not None:
        options = replace(options, amount_tolerance=args.amount_tolerance)
    if args.require_exact_category:
        options = replace(options, require_exact_category=True)

    new_records = import_transactions(args.new)
    existing_records = import_transactions(args.existing)

    report = DuplicateDetector(options).find_duplicates(new_records, existing_records)

    output_dir = create_output_directory(args.output, 'duplicates')
    save_duplicate_results(report, output_dir)
    summary_text = format_duplicate_summary(report)
    generate_report(summary_text, output_dir)
    return summary_text

def run_process(args, config):
    """Run transaction processing for parsed command-line arguments."""
    records = import_transactions(args.transactions)
    accounts = import_accounts(args.accounts) if args.accounts else []

    processor = TransactionProcessor(config)
    result = processor.process(records, accounts)

    output_dir = create_output_directory(args.output, 'process')
    save_processing_results(result, output_dir, processor.bank_matcher)
    summary_text = format_processing_summary(result)
    generate_report(summary_text, output_dir)
    return summary_text

def build_parser():
    parser = argparse.ArgumentParser(description='Reconcile imported financial transactions')
    parser.add_argument('--output', type=str, default=None,
                        help='Output directory (default: $DATA_DIR/output)')
    parser.add_argument('--rules', type=str, default=None,
                        help='JSON rules file (default: $RECONCILE_RULES)')
    parser.add_argument('--debug', action='store_true',
                        help='Enable debug logging')
    subparsers = parser.add_subparsers(dest='command', required=True)

    duplicates = subparsers.add_parser('duplicates', help='Find duplicates of existing transactions')
    duplicates.add_argument('--new', type=str, required=True,
                            help='CSV of incoming transactions')
    duplicates.add_argument('--existing', type=str, required=True,
                            help='CSV of stored transactions')
    duplicates.add_argument('--date-tolerance', type=int, default=None,
                            help='Days two dates may differ and still match')
    duplicates.add_argument('--amount-tolerance', type=float, default=None,
                            help='Amount difference still counted as equal')
    duplicates.add_argument('--require-exact-category', action='store_true',
                            help='Require both categories present and equal')

    process = subparsers.add_parser('process', help='Categorize transactions and match accounts')
    process.add_argument('--transactions', type=str, required=True,
                         help='CSV of raw transactions')
    process.add_argument('--accounts', type=str, default=None,
                         help='CSV of known accounts')
    return parser

def main(argv=None):
    """Main execution function."""
    args = build_parser().parse_args(argv)
    setup_logging(debug=args.debug)
    logger.info(f"Starting {args.command} workflow")

    try:
        config = load_rules(args.rules)
        if args.output is None:
            args.output = str(ensure_directory('output'))

        if args.command == 'duplicates':
            summary_text = run_duplicates(args, config)
        else:
            summary_text = run_process(args, config)

        print(summary_text)
        return summary_text

    except Exception as e:
        logger.error(f"Error during {args.command} workflow: {str(e)}")
        raise

if __name__ == '__main__':
    main()
