"""
Budget & Loan Tracker - Source Package

A personal finance tracker that keeps expenses, loans and loan
payments in a spreadsheet and derives simple summaries from them.

DESIGN PRINCIPLES:
1. The spreadsheet stays human-readable (one record per row)
2. Balances must reconcile with the payment history
3. Fail visibly: every operation reports its error alongside current state
4. Storage layer is swappable
"""

__version__ = "1.0.0"
__author__ = "Budget Tracker Team"
