"""Domain layer for the general ledger core."""

from importlib import import_module

# Services are resolved lazily: the database package imports domain.entities,
# and the services import the database package.
_SERVICES = {
    "AccountService": "ledgercore.domain.account",
    "FiscalCalendarService": "ledgercore.domain.calendar",
    "JournalService": "ledgercore.domain.journal",
    "PostingService": "ledgercore.domain.posting",
    "ReportService": "ledgercore.domain.reports",
    "SubledgerPostingService": "ledgercore.domain.integration",
}

__all__ = list(_SERVICES)


def __getattr__(name):
    if name in _SERVICES:
        return getattr(import_module(_SERVICES[name]), name)
    raise AttributeError(f"module '{__name__}' has no attribute '{name}'")
