"""
Finance Ledger - Source Package

A personal finance ledger: accounts, categories and transactions,
with balances and reports derived from the transaction log.

DESIGN PRINCIPLES:
1. State is an immutable value; a pure reducer produces the next one
2. Balances are always derived, never stored
3. Validate at the boundary, never inside the reducer
4. Every mutation must be auditable
5. Storage layer is swappable
"""

__version__ = "1.0.0"
__author__ = "Finance Ledger Team"
