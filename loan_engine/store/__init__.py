"""In-memory stores for loan accounts and repayment activity."""

from loan_engine.store.ledger import LoanLedger

__all__ = ["LoanLedger"]
