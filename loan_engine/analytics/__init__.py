"""Portfolio analytics over the loan ledger."""

from loan_engine.analytics.warnings import generate_warnings

__all__ = ["generate_warnings"]
