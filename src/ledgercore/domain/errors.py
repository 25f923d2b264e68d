"""Shared ledger error messages and error types."""

from decimal import Decimal


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


class DependencyError(DomainError):
    """Operation blocked due to dependent domain data."""


class DuplicateCodeError(ConflictError):
    """Account code already in use."""


class UnbalancedEntryError(ValidationError):
    """Journal entry debits and credits differ."""


class AccountNotPostableError(ValidationError):
    """Journal line references a header or inactive account."""


class PeriodClosedError(ConflictError):
    """Posting or reversing into a closed period."""


class JournalPostedError(ConflictError):
    """Mutating or re-posting a journal entry that is no longer a draft."""


class FiscalYearNotClosableError(DependencyError):
    """Fiscal year still has open periods."""


class LedgerInfrastructureError(RuntimeError):
    """Failure outside business rules; callers may retry the whole operation."""


class LedgerStorageError(LedgerInfrastructureError):
    """The relational store rejected or failed a unit of work."""


class LedgerIntegrityError(LedgerInfrastructureError):
    """Persisted ledger data violates an accounting identity."""


def account_not_found(account_id: int) -> str:
    """Return message for missing account by ID."""
    return f"Account {account_id} not found"


def account_code_not_found(code: str) -> str:
    """Return message for missing account by code."""
    return f"Account '{code}' not found"


def duplicate_account_code(code: str) -> str:
    """Return message for account code collision."""
    return f"Account with code '{code}' already exists"


def account_not_postable(code: str, is_active: bool) -> str:
    """Return message for a line against a header or inactive account."""
    reason = "is not postable" if is_active else "is inactive"
    return f"Account '{code}' {reason}"


def fiscal_year_not_found(fiscal_year_id: int) -> str:
    """Return message for missing fiscal year."""
    return f"Fiscal year {fiscal_year_id} not found"


def period_not_found(period_id: int) -> str:
    """Return message for missing period."""
    return f"Period {period_id} not found"


def no_period_for_date(on_date) -> str:
    """Return message when no period covers a date."""
    return f"No fiscal period covers {on_date.isoformat()}"


def period_closed(period_name: str) -> str:
    """Return message for posting into a closed period."""
    return f"Period '{period_name}' is closed"


def journal_entry_not_found(entry_id: int) -> str:
    """Return message for missing journal entry."""
    return f"Journal entry {entry_id} not found"


def journal_not_draft(entry_number: str, status: str) -> str:
    """Return message for mutating a non-draft journal entry."""
    return f"Journal entry {entry_number} is {status}; only draft entries can be changed"


def unbalanced_entry(entry_number: str, total_debit: Decimal, total_credit: Decimal) -> str:
    """Return message for an entry whose sides differ."""
    return (
        f"Journal entry {entry_number} is unbalanced: "
        f"debits {total_debit:.2f} != credits {total_credit:.2f}"
    )


def fiscal_year_not_closable(label: str, open_count: int) -> str:
    """Return message when a fiscal year still has open periods."""
    return (
        f"Cannot close fiscal year '{label}': "
        f"{open_count} period{'s' if open_count != 1 else ''} still open"
    )


def account_delete_blocked(account_id: int, line_count: int, child_count: int) -> str:
    """Return message when account has journal lines or child accounts."""
    parts = []
    if line_count > 0:
        parts.append(f"{line_count} journal line{'s' if line_count != 1 else ''}")
    if child_count > 0:
        parts.append(f"{child_count} child account{'s' if child_count != 1 else ''}")
    return (
        f"Cannot delete account {account_id}: it has {', '.join(parts)}. "
        "Deactivate it instead."
    )
