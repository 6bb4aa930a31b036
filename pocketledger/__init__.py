"""
PocketLedger - Source Package

The ledger core of a personal finance tracker: wallets, transactions,
budgets and liabilities, plus the statistics derived from them.

DESIGN PRINCIPLES:
1. Wallet balances always match transaction history
2. Validate first, mutate second
3. Every mutation persists the whole snapshot, then notifies
4. Derived views are recomputed on demand, never cached
5. Storage layer is swappable
"""

__version__ = "1.0.0"
__author__ = "PocketLedger Team"
