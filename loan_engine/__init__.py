"""Loan amortization and repayment ledger engine."""

__version__ = "0.1.0"
