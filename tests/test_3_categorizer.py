import pytest

from reconcile_engine.categorizer import Categorizer, categorize
from reconcile_engine.config import DEFAULT_CATEGORY_PATTERNS, FALLBACK_CATEGORY

class TestDefaultCategories:
    """Test suite for the built-in category table"""

    @pytest.mark.parametrize("description, expected", [
        ('STARBUCKS STORE #123', 'Food & Dining'),
        ('UBER EATS ORDER #4451', 'Food & Dining'),
        ('UBER TRIP HELP.UBER.COM', 'Transportation'),
        ('SHELL OIL 5744', 'Transportation'),
        ('AMAZON MKTPLACE PMTS', 'Shopping'),
        ('NETFLIX.COM', 'Entertainment'),
        ('CVS/PHARMACY #0123', 'Healthcare'),
        ('IKEA BROOKLYN', 'Housing'),
        ('COMCAST CABLE COMM', 'Utilities'),
        ('ACME CORP PAYROLL', 'Income'),
    ])
    def test_categories(self, description, expected):
        assert categorize(description) == expected

    def test_income_takes_priority(self):
        """Income keywords win over merchant names"""
        assert categorize('Payment received - Amazon refund') == 'Income'

    def test_table_order_resolves_overlaps(self):
        """'gas' is both Transportation and Utilities; the earlier category wins"""
        assert categorize('CITY GAS & POWER') == 'Transportation'

    def test_fallback(self):
        assert categorize('ZZZ UNKNOWN MERCHANT') == FALLBACK_CATEGORY

    def test_empty_description(self):
        assert categorize('') == 'Other'
        assert categorize(None) == 'Other'
        assert categorize('   ') == 'Other'

    def test_case_insensitive(self):
        assert categorize('sPoTiFy') == 'Entertainment'

class TestCustomCategorizer:
    """Test suite for caller-supplied category tables"""

    def test_custom_table(self):
        categorizer = Categorizer({
            'Pets': ('petco', 'vet'),
            'Kids': ('toys', 'daycare'),
        }, fallback='Uncategorized')

        assert categorizer.categorize('PETCO 1234') == 'Pets'
        assert categorizer.categorize('Sunshine Daycare') == 'Kids'
        assert categorizer.categorize('Starbucks') == 'Uncategorized'

    def test_declaration_order(self):
        categorizer = Categorizer({'First': ('shop',), 'Second': ('shop',)})

        assert categorizer.categorize('shop') == 'First'

    def test_income_checked_first_wherever_declared(self):
        categorizer = Categorizer({'Shopping': ('amazon',), 'Income': ('refund',)})

        assert categorizer.categorize('amazon refund') == 'Income'

    def test_labels(self):
        categorizer = Categorizer(DEFAULT_CATEGORY_PATTERNS)

        assert categorizer.labels[0] == 'Income'
        assert categorizer.labels[-1] == 'Other'
        assert set(categorizer.labels) == set(DEFAULT_CATEGORY_PATTERNS) | {'Other'}
