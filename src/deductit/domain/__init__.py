"""Domain layer for deductit application."""

# Services import the database layer, which imports domain entities, so
# they are resolved lazily to avoid circular dependencies
_SERVICES = {
    "AnzsicService": "deductit.domain.anzsic",
    "ClassificationService": "deductit.domain.reconcile",
    "MerchantService": "deductit.domain.merchant",
    "PreferenceService": "deductit.domain.preferences",
    "StatementService": "deductit.domain.statement",
    "SummaryService": "deductit.domain.aggregation",
    "BasiqClient": "deductit.domain.open_banking",
}

__all__ = list(_SERVICES)


def __getattr__(name):
    if name in _SERVICES:
        from importlib import import_module

        return getattr(import_module(_SERVICES[name]), name)
    raise AttributeError(f"module '{__name__}' has no attribute '{name}'")
