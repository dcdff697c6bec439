"""Sign normalization for parsed transactions."""

from dataclasses import replace

from deductit.domain.entities import RawTransaction, TransactionType


def normalize_sign(transaction: RawTransaction) -> RawTransaction:
    """Make the amount sign agree with the transaction type.

    Debits become negative and credits positive, whatever convention the
    statement parser used.
    """
    magnitude = abs(transaction.amount)
    amount = -magnitude if transaction.type == TransactionType.DEBIT else magnitude
    if amount == transaction.amount:
        return transaction
    return replace(transaction, amount=amount)


def normalize_signs(transactions: list[RawTransaction]) -> list[RawTransaction]:
    """Normalize the sign of every transaction, keeping order."""
    return [normalize_sign(txn) for txn in transactions]
