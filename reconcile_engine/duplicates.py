"""
Duplicate transaction detection.

A new transaction is compared field by field (date, amount, description,
category) against existing transactions. Date and amount are load-bearing:
a pair can only be a duplicate when both agree and at least one of
description or category agrees too. Confidence is the fraction of the four
checks that passed.
"""

import logging
from collections import defaultdict
from datetime import timedelta

from .config import DuplicateOptions
from .models import (
    ConfidenceGroups,
    DuplicateMatch,
    DuplicateReport,
    DuplicateSummary,
    FieldMatches,
    MatchResult,
    Transaction,
)
from .similarity import (
    amounts_match,
    categories_match,
    dates_match,
    descriptions_match,
    parse_date,
)

logger = logging.getLogger(__name__)

HIGH_CONFIDENCE = 0.9
MEDIUM_CONFIDENCE = 0.7

def _as_transaction(value):
    if isinstance(value, Transaction):
        return value
    return Transaction.from_record(value)

class DuplicateDetector:
    """Compares new transactions against stored ones using fixed tolerances."""

    def __init__(self, options=None):
        self.options = options or DuplicateOptions()

    def check_duplicate(self, new_txn, existing_txn) -> MatchResult:
        """Compare one new transaction against one existing transaction.

        Args:
            new_txn (Transaction or dict): Incoming transaction
            existing_txn (Transaction or dict): Stored transaction

        Returns:
            MatchResult: Per-field matches, confidence and duplicate verdict
        """
        new_txn = _as_transaction(new_txn)
        existing_txn = _as_transaction(existing_txn)
        opts = self.options

        matches = FieldMatches(
            date=dates_match(new_txn.date, existing_txn.date, opts.date_tolerance_days),
            amount=amounts_match(new_txn.amount, existing_txn.amount,
                                 opts.amount_tolerance, opts.compare_absolute_amounts),
            description=descriptions_match(new_txn.description, existing_txn.description),
            category=categories_match(new_txn.category, existing_txn.category,
                                      opts.require_exact_category),
        )
        is_duplicate = (matches.date and matches.amount
                        and (matches.description or matches.category))
        return MatchResult(
            is_duplicate=is_duplicate,
            confidence=matches.count() / 4,
            matches=matches,
        )

    def _index_by_day(self, existing):
        index = defaultdict(list)
        for position, txn in enumerate(existing):
            day = parse_date(txn.date)
            if day is not None:
                index[day].append(position)
        return index

    def _candidates(self, txn, existing, index):
        anchor = parse_date(txn.date)
        if anchor is None:
            return []
        tolerance = max(int(self.options.date_tolerance_days), 0)
        positions = []
        for offset in range(-tolerance, tolerance + 1):
            try:
                day = anchor + timedelta(days=offset)
            except OverflowError:
                continue
            positions.extend(index.get(day, ()))
        # Keep list order so ties resolve exactly like a full scan
        return [existing[p] for p in sorted(positions)]

    def find_duplicates(self, new_txns, existing_txns) -> DuplicateReport:
        """Split a batch of new transactions into duplicates and non-duplicates.

        A new transaction is a duplicate when any existing transaction yields
        a duplicate verdict; the highest-confidence comparison (first one on
        ties) is kept as evidence.

        Args:
            new_txns (iterable): Incoming transactions
            existing_txns (iterable): Stored transactions

        Returns:
            DuplicateReport: duplicates, non_duplicates and a summary
        """
        new_txns = [_as_transaction(t) for t in new_txns]
        existing = [_as_transaction(t) for t in existing_txns]
        index = self._index_by_day(existing)

        duplicates = []
        non_duplicates = []
        for txn in new_txns:
            best = None
            best_existing = None
            for candidate in self._candidates(txn, existing, index):
                result = self.check_duplicate(txn, candidate)
                if result.is_duplicate and (best is None or result.confidence > best.confidence):
                    best = result
                    best_existing = candidate

            if best is not None:
                logger.debug(f"Duplicate found for {txn.description!r} "
                             f"(existing id={best_existing.id}, confidence={best.confidence})")
                duplicates.append(DuplicateMatch(txn, best_existing, best))
            else:
                non_duplicates.append(txn)

        total = len(new_txns)
        percentage = len(duplicates) / total * 100 if total else 0.0
        logger.info(f"Checked {total} transactions against {len(existing)} existing: "
                    f"{len(duplicates)} duplicates")
        return DuplicateReport(
            duplicates=duplicates,
            non_duplicates=non_duplicates,
            summary=DuplicateSummary(
                total=total,
                duplicates=len(duplicates),
                non_duplicates=len(non_duplicates),
                duplicate_percentage=percentage,
            ),
        )

def group_by_confidence(duplicates) -> ConfidenceGroups:
    """Bucket duplicates into high (>= 0.9), medium (>= 0.7) and low confidence."""
    duplicates = list(duplicates)
    return ConfidenceGroups(
        high=[d for d in duplicates if d.confidence >= HIGH_CONFIDENCE],
        medium=[d for d in duplicates if MEDIUM_CONFIDENCE <= d.confidence < HIGH_CONFIDENCE],
        low=[d for d in duplicates if d.confidence < MEDIUM_CONFIDENCE],
        all=duplicates,
    )

def confidence_label(confidence):
    if confidence >= 0.9:
        return "very high"
    if confidence >= 0.7:
        return "high"
    if confidence >= 0.5:
        return "medium"
    return "low"

def explain_match(match) -> str:
    """Describe in words why a pair was flagged.

    Args:
        match (MatchResult or DuplicateMatch): Comparison to explain

    Returns:
        str: e.g. "same date, same amount, similar description (very high confidence)",
        or "Unknown reason" when no field matched
    """
    if isinstance(match, DuplicateMatch):
        match = match.result

    reasons = []
    if match.matches.date:
        reasons.append("same date")
    if match.matches.amount:
        reasons.append("same amount")
    if match.matches.description:
        reasons.append("similar description")
    if match.matches.category:
        reasons.append("same category")

    if not reasons:
        return "Unknown reason"
    return f"{', '.join(reasons)} ({confidence_label(match.confidence)} confidence)"

_default_detector = DuplicateDetector()

def check_duplicate(new_txn, existing_txn, options=None) -> MatchResult:
    detector = DuplicateDetector(options) if options else _default_detector
    return detector.check_duplicate(new_txn, existing_txn)

def find_duplicates(new_txns, existing_txns, options=None) -> DuplicateReport:
    detector = DuplicateDetector(options) if options else _default_detector
    return detector.find_duplicates(new_txns, existing_txns)
