"""
SplitLedger - Source Package

Shared-expense ledger and balance reconciliation for groups of people
who pay for things together.

DESIGN PRINCIPLES:
1. Unknown ids are "nothing to do", not errors
2. Settlement is one-way
3. A failed save never leaves half a change behind
4. Notifications are advisory; they never change an outcome
5. Storage layer is swappable
"""

__version__ = "1.0.0"
__author__ = "SplitLedger Team"
