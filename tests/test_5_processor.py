import pytest
from dataclasses import replace
from datetime import date

from reconcile_engine.config import DEFAULT_CONFIG, EngineConfig
from reconcile_engine.models import Account, Transaction
from reconcile_engine.processor import (
    TransactionProcessor,
    process_transactions,
    validate_transaction,
)

class TestValidateTransaction:
    """Test suite for raw transaction validation"""

    def test_zero_amount_fee_is_skipped(self):
        assert validate_transaction({'amount': 0, 'description': 'monthly fee'}) is None

    @pytest.mark.parametrize("description", [
        'Interest paid', 'LATE CHARGE', 'Balance adjustment', 'Statement credit',
    ])
    def test_zero_amount_noise_keywords(self, description):
        assert validate_transaction({'amount': '0.00', 'description': description}) is None

    def test_zero_amount_purchase_is_kept(self):
        txn = validate_transaction({'amount': 0, 'description': 'grocery store'})

        assert txn is not None
        assert txn.amount == 0.0
        assert txn.type == 'income'

    def test_nonzero_fee_is_kept(self):
        txn = validate_transaction({'amount': -35, 'description': 'Overdraft fee', 'date': '2024-01-03'})

        assert txn.amount == -35.0
        assert txn.type == 'expense'

    def test_unparseable_amount_defaults_to_zero(self):
        assert validate_transaction({'amount': 'n/a', 'description': 'interest'}) is None

        txn = validate_transaction({'amount': 'n/a', 'description': 'Coffee shop'})
        assert txn.amount == 0.0

    def test_amount_strings(self):
        txn = validate_transaction({'amount': '($1,200.00)', 'description': 'Rent', 'date': '2024-01-01'})

        assert txn.amount == -1200.0
        assert txn.type == 'expense'

    def test_defaults(self):
        txn = validate_transaction({'amount': '12.50'})

        assert txn.description == 'Unknown transaction'
        assert txn.category == 'Other'
        assert txn.date == date.today()
        assert txn.type == 'income'

    def test_unparseable_date_defaults_to_today(self):
        txn = validate_transaction({'amount': -5, 'description': 'Cafe', 'date': 'sometime'})

        assert txn.date == date.today()

    def test_category_inferred(self):
        txn = validate_transaction({'amount': -15, 'description': 'UBER EATS ORDER #4451', 'date': '2024-01-15'})

        assert txn.category == 'Food & Dining'
        assert txn.date == date(2024, 1, 15)

    def test_existing_category_kept(self):
        txn = validate_transaction({'amount': -15, 'description': 'UBER EATS', 'category': 'Treats'})

        assert txn.category == 'Treats'

    def test_ownership_ids_preserved(self):
        txn = validate_transaction({'amount': -1, 'description': 'x', 'accountId': 'a1', 'userId': 7})

        assert txn.account_id == 'a1'
        assert txn.user_id == 7

    def test_input_not_mutated(self):
        raw = {'amount': '-4.00', 'description': 'Coffee'}
        validate_transaction(raw)

        assert raw == {'amount': '-4.00', 'description': 'Coffee'}

    def test_accepts_transaction_records(self):
        txn = validate_transaction(Transaction(date=date(2024, 1, 2), description='Payroll', amount=1000.0))

        assert txn.category == 'Income'
        assert txn.date == date(2024, 1, 2)

class TestProcessTransactions:
    """Test suite for batch processing"""

    def test_partitions(self, raw_transactions, known_accounts):
        result = process_transactions(raw_transactions, known_accounts)

        assert [t.description for t in result.processed] == [
            'CHASE DEBIT PURCHASE STARBUCKS *2222',
            'DISCOVER PAYMENT RECEIVED',
        ]
        assert [p.transaction.description for p in result.suggestions] == [
            'WELLS FARGO ATM WITHDRAWAL *9876',
        ]
        assert [t.description for t in result.unmatched] == ['Corner Market']

    def test_summary(self, raw_transactions, known_accounts):
        summary = process_transactions(raw_transactions, known_accounts).summary

        assert summary.total == 5
        assert summary.processed == 2
        assert summary.suggestions == 1
        assert summary.unmatched == 1
        assert summary.skipped == 1

    def test_account_attached(self, raw_transactions, known_accounts):
        result = process_transactions(raw_transactions, known_accounts)
        chase, discover = result.processed

        assert chase.account_id == 'acc-2'
        assert chase.account_name == 'Chase Checking'
        assert chase.category == 'Food & Dining'
        assert chase.type == 'expense'
        assert discover.account_id == 'acc-3'
        assert discover.category == 'Income'
        assert discover.type == 'income'

    def test_suggestion_details(self, raw_transactions, known_accounts):
        proposal = process_transactions(raw_transactions, known_accounts).suggestions[0]

        assert proposal.bank_info.bank_name == 'wells fargo'
        assert proposal.bank_info.last4_digits == '9876'
        assert proposal.suggested_account_name == 'Wells fargo checking ****9876'

    def test_without_known_accounts(self, raw_transactions):
        result = process_transactions(raw_transactions)

        assert result.summary.processed == 0
        assert result.summary.suggestions == 3
        assert result.summary.unmatched == 1

    def test_account_dicts(self, raw_transactions):
        accounts = [{'id': 9, 'name': 'My Wells Fargo', 'last4Digits': '9876'}]
        result = process_transactions(raw_transactions, accounts)

        assert result.processed[0].account_id == 9

    def test_every_record_accounted_for(self, raw_transactions, known_accounts):
        summary = process_transactions(raw_transactions * 3, known_accounts).summary

        assert summary.processed + summary.suggestions + summary.unmatched + summary.skipped == summary.total

    def test_empty(self):
        result = process_transactions([], [])

        assert result.processed == [] and result.suggestions == [] and result.unmatched == []
        assert result.summary.total == 0
        assert result.summary.skipped == 0

class TestProcessorConfiguration:
    """Test suite for injected rule tables"""

    def test_custom_skip_keywords(self):
        processor = TransactionProcessor(replace(DEFAULT_CONFIG, skip_keywords=('pending',)))

        assert processor.validate({'amount': 0, 'description': 'PENDING AUTH'}) is None
        assert processor.validate({'amount': 0, 'description': 'monthly fee'}) is not None

    def test_custom_categories_and_fallback(self):
        config = EngineConfig(category_patterns={'Pets': ('petco',)}, fallback_category='Uncategorized')
        processor = TransactionProcessor(config)

        assert processor.validate({'amount': -20, 'description': 'PETCO'}).category == 'Pets'
        assert processor.validate({'amount': -20, 'description': 'Starbucks'}).category == 'Uncategorized'

    def test_custom_banks(self):
        from reconcile_engine.config import BankPattern

        config = EngineConfig(bank_identifiers={'ally': BankPattern(('ally',), ('savings',))})
        result = TransactionProcessor(config).process(
            [{'amount': 5, 'description': 'ALLY INTEREST *0001'},
             {'amount': -5, 'description': 'CHASE *0001'}],
            [Account(id='x', name='Ally Savings')]
        )

        assert result.processed[0].account_id == 'x'
        assert [t.description for t in result.unmatched] == ['CHASE *0001']
