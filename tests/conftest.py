import pytest
import pandas as pd

from reconcile_engine.models import Account

# Stored transaction as it comes back from persistence
existing_sample_data = {
    'id': 1,
    'date': '2024-01-15',
    'description': 'Grocery Store',
    'amount': -85.50,
    'category': 'Groceries',
    'userId': 1
}

# Same purchase arriving again from a re-imported statement
new_sample_data = {
    'date': '2024-01-15',
    'description': 'Grocery Store',
    'amount': -85.50,
    'category': 'Groceries'
}

@pytest.fixture
def existing_transaction():
    """A stored grocery transaction."""
    return dict(existing_sample_data)

@pytest.fixture
def new_transaction():
    """An incoming transaction identical to the stored one."""
    return dict(new_sample_data)

@pytest.fixture
def existing_transactions():
    """Two stored transactions a day apart."""
    return [
        dict(existing_sample_data),
        {
            'id': 2,
            'date': '2024-01-14',
            'description': 'Gas Station',
            'amount': -45.00,
            'category': 'Transport',
            'userId': 1
        }
    ]

@pytest.fixture
def known_accounts():
    """Two checking accounts at the same bank plus a card at another."""
    return [
        Account(id='acc-1', name='Chase Checking', last4_digits='1111'),
        Account(id='acc-2', name='Chase Checking', last4_digits='2222'),
        Account(id='acc-3', name='Discover It Card', type='credit'),
    ]

@pytest.fixture
def raw_transactions():
    """Raw statement lines covering every processing outcome."""
    return [
        {'date': '2024-03-01', 'description': 'CHASE DEBIT PURCHASE STARBUCKS *2222', 'amount': '-4.75'},
        {'date': '2024-03-02', 'description': 'WELLS FARGO ATM WITHDRAWAL *9876', 'amount': '-60.00'},
        {'date': '2024-03-03', 'description': 'Corner Market', 'amount': '-12.30'},
        {'date': '2024-03-04', 'description': 'Monthly interest charge', 'amount': '0'},
        {'date': '2024-03-05', 'description': 'DISCOVER PAYMENT RECEIVED', 'amount': '250.00'},
    ]

@pytest.fixture
def write_csv(tmp_path):
    """Helper fixture writing a dict of columns to a CSV file under tmp_path."""
    def _write(name, data):
        path = tmp_path / name
        pd.DataFrame(data).to_csv(path, index=False)
        return path
    return _write
