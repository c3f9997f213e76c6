"""Run the reconciliation workflows from a source checkout.

Usage:
    python reconcile.py duplicates --new new.csv --existing existing.csv
    python reconcile.py process --transactions statement.csv --accounts accounts.csv
"""

from reconcile_engine.reconcile import main

if __name__ == '__main__':
    main()
