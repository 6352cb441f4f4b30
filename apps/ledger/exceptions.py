from __future__ import annotations

from decimal import Decimal


class LedgerError(Exception):
    """Base class for postings the ledger refuses to apply."""


class SalaryUnderflowError(LedgerError):
    def __init__(self, *, worker_id: int, pending: Decimal, amount: Decimal):
        self.worker_id = worker_id
        self.pending = pending
        self.amount = amount
        super().__init__(
            f"Debit of {amount} exceeds pending salary {pending} for worker {worker_id}."
        )
