"""Shared domain error messages and error types."""


class DomainError(ValueError):
    """Base class for domain-level errors.

    Subclasses provide semantic categories while preserving ValueError
    compatibility for existing error handling.
    """


class ValidationError(DomainError):
    """Invalid input or failed validation in domain logic."""


class NotFoundError(DomainError):
    """Requested domain entity does not exist."""


class ConflictError(DomainError):
    """Domain conflict, such as uniqueness violations."""


class ExtractionError(DomainError):
    """A document was accepted but its text could not be extracted."""


class UpstreamError(DomainError):
    """An external service such as the open-banking aggregator failed."""


class ClassifierUnavailableError(Exception):
    """An external classifier could not produce a result.

    Never propagated to callers of the classification pipeline; the
    affected transactions degrade to the heuristic result instead.
    """


def unsupported_bank(bank: str) -> str:
    """Return message for a bank without a statement parser."""
    return f"No parser available for bank: {bank}"


def file_too_large() -> str:
    """Return message for an upload over the size ceiling."""
    return "File size must be less than 10MB"


def merchant_not_found(name: str) -> str:
    """Return message for missing merchant."""
    return f"Merchant '{name}' not found"


def anzsic_mapping_not_found(code: str) -> str:
    """Return message for missing ANZSIC mapping."""
    return f"ANZSIC mapping for code {code} not found"


def unknown_category(category: str) -> str:
    """Return message for a category outside the deduction taxonomy."""
    return f"Unknown deduction category '{category}'"


def no_transactions_found(bank: str) -> str:
    """Return the corrective hint shown when a statement yields nothing."""
    return (
        f"No transactions found in {bank.upper()} statement. "
        "Check that the selected bank matches the statement and that the PDF "
        "contains selectable text."
    )
