"""
WiseVault - Source Package

A small personal-finance tracker: income and expense transactions,
monthly bills, and a budget/savings overview.

DESIGN PRINCIPLES:
1. One explicit ledger object per session, no hidden globals
2. Every number on screen is derived, never stored twice
3. Bad form input is dropped at the boundary, never reaches the ledger
4. Every mutation is auditable
5. Persistence is optional and swappable
"""

__version__ = "1.0.0"
__author__ = "WiseVault Team"
