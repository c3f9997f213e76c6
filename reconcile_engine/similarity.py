"""
Similarity primitives shared by the duplicate detector and the processor.

Every function here is total: malformed input never raises, it simply
fails to match (or parses to None). Values coming out of pandas are
handled too, so NaN/NaT cells behave like missing values.
"""

import logging
import re
from datetime import date, datetime

import numpy as np
import pandas as pd

logger = logging.getLogger(__name__)

DATE_FORMATS = [
    '%Y-%m-%d',           # ISO
    '%Y-%m-%d %H:%M:%S',  # ISO with time
    '%Y-%m-%dT%H:%M:%S',  # ISO with T separator
    '%Y-%m-%d %H:%M',     # ISO without seconds
    '%Y-%m-%dT%H:%M',
    '%m/%d/%y',           # Short year, before %Y so '24' is not year 24
    '%m/%d/%Y',           # US
    '%m-%d-%Y',           # US with dashes
    '%Y%m%d',             # Compact
]

def _is_missing(value):
    if value is None:
        return True
    try:
        return bool(pd.isna(value))
    except (TypeError, ValueError):
        # list-likes are not missing scalars
        return False

def parse_date(value):
    """Convert a date-like value to a calendar date.

    Args:
        value: date, datetime, pandas Timestamp or date string

    Returns:
        datetime.date or None: Parsed date, or None if the value is missing or unparseable
    """
    if _is_missing(value):
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if not isinstance(value, str):
        return None

    date_str = value.strip().strip('"\'')
    if not date_str:
        return None

    if 'T' in date_str or ':' in date_str:
        # Only the calendar day matters: drop timezone and fractional seconds
        date_str = re.sub(r'(Z|[+-]\d{2}:?\d{2})$', '', date_str)
        date_str = re.sub(r'\.\d+$', '', date_str)

    for fmt in DATE_FORMATS:
        try:
            return datetime.strptime(date_str, fmt).date()
        except ValueError:
            continue

    logger.debug(f"Could not parse date: {value!r}")
    return None

def parse_amount(value):
    """Convert an amount-like value to a float.

    Handles currency symbols, thousands separators and parentheses for
    negative numbers.

    Args:
        value (str, int, float or None): Amount to parse

    Returns:
        float or None: Parsed amount, or None if missing, unparseable or not finite
    """
    if _is_missing(value) or isinstance(value, bool):
        return None
    if isinstance(value, (int, float, np.number)):
        result = float(value)
        return result if np.isfinite(result) else None
    if not isinstance(value, str):
        return None

    cleaned = re.sub(r'[$,\s]', '', value)
    if cleaned.startswith('(') and cleaned.endswith(')'):
        cleaned = '-' + cleaned[1:-1]
    try:
        result = float(cleaned)
    except ValueError:
        logger.debug(f"Could not parse amount: {value!r}")
        return None
    return result if np.isfinite(result) else None

def normalize_string(value):
    """Lowercase, trim and collapse internal whitespace. Missing values become ''."""
    if _is_missing(value):
        return ""
    return re.sub(r'\s+', ' ', str(value).strip().lower())

def dates_match(date1, date2, tolerance_days=1):
    """Check whether two dates fall within ``tolerance_days`` of each other.

    Args:
        date1: First date (any value accepted by ``parse_date``)
        date2: Second date
        tolerance_days (int): Maximum allowed difference in days

    Returns:
        bool: True if both dates parse and are close enough
    """
    d1 = parse_date(date1)
    d2 = parse_date(date2)
    if d1 is None or d2 is None:
        return False
    return abs((d1 - d2).days) <= tolerance_days

def amounts_match(amount1, amount2, tolerance=0.01, absolute=False):
    """Check whether two amounts are equal within ``tolerance``.

    The sign must agree unless ``absolute`` is set: a charge and a refund
    of the same size are different transactions.

    Args:
        amount1: First amount (any value accepted by ``parse_amount``)
        amount2: Second amount
        tolerance (float): Maximum allowed absolute difference
        absolute (bool): Compare magnitudes only

    Returns:
        bool: True if both amounts parse and agree
    """
    a1 = parse_amount(amount1)
    a2 = parse_amount(amount2)
    if a1 is None or a2 is None:
        return False
    if absolute:
        a1, a2 = abs(a1), abs(a2)
    elif (a1 < 0) != (a2 < 0):
        return False
    # Rounding keeps 0.01-apart cents from failing on float noise
    return round(abs(a1 - a2), 9) <= tolerance

def descriptions_match(desc1, desc2):
    """Check whether two descriptions are equal or one contains the other after normalization.

    Empty descriptions never match.
    """
    n1 = normalize_string(desc1)
    n2 = normalize_string(desc2)
    if not n1 or not n2:
        return False
    return n1 == n2 or n1 in n2 or n2 in n1

def categories_match(category1, category2, require_exact=False):
    """Compare two categories.

    Categories are provisional, so unless ``require_exact`` is set a missing
    category on either side counts as a match. When both are present they
    must be equal after normalization.
    """
    c1 = normalize_string(category1)
    c2 = normalize_string(category2)
    if not c1 or not c2:
        return not require_exact
    return c1 == c2
