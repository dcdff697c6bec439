"""Per-user classification preferences.

Overrides, deduction toggles, the classification cache and the user's
income all live in the user-scoped key-value store exposed by
``Database.get_user_value`` / ``set_user_value`` / ``remove_user_value``.
Writes replace the stored value wholesale (last write wins).
"""

import logging
from datetime import datetime, timedelta, UTC
from decimal import Decimal, InvalidOperation
from typing import Callable, Iterable

from deductit.database.base import Database
from deductit.domain.categories import DEDUCTION_CATEGORIES, resolve_category
from deductit.domain.entities import CachedClassification, ClassificationSource
from deductit.domain.errors import ValidationError

logger = logging.getLogger(__name__)

MANUAL_OVERRIDES_KEY = "manual_overrides"
CATEGORY_OVERRIDES_KEY = "category_overrides"
DEDUCTION_TOGGLES_KEY = "deduction_toggles"
CLASSIFICATION_CACHE_KEY = "classification_cache"
ANNUAL_INCOME_KEY = "annual_income"

CACHE_TTL = timedelta(hours=24)
DEFAULT_ANNUAL_INCOME = Decimal("80000")


def _utcnow() -> datetime:
    return datetime.now(UTC)


class PreferenceService:
    """Service for a single user's stored classification preferences."""

    def __init__(self, db: Database, user_id: str, clock: Callable[[], datetime] = _utcnow):
        """Initialize preference service.

        Args:
            db: Database instance
            user_id: User the preferences belong to
            clock: Returns the current UTC time; replaced in tests
        """
        if not user_id:
            raise ValidationError("User id is required")
        self.db = db
        self.user_id = user_id
        self.clock = clock

    def _get(self, key: str, default):
        value = self.db.get_user_value(self.user_id, key)
        return default if value is None else value

    def _set(self, key: str, value) -> None:
        self.db.set_user_value(self.user_id, key, value)

    # Manual overrides
    def get_manual_overrides(self) -> dict[str, bool]:
        """Return transaction id -> user-chosen deductible flag."""
        return {str(k): bool(v) for k, v in self._get(MANUAL_OVERRIDES_KEY, {}).items()}

    def save_manual_overrides(self, overrides: dict[str, bool]) -> None:
        """Replace all manual overrides."""
        self._set(MANUAL_OVERRIDES_KEY, {str(k): bool(v) for k, v in overrides.items()})

    def set_manual_override(self, transaction_id: str, is_deductible: bool) -> None:
        """Mark one transaction deductible or not."""
        overrides = self.get_manual_overrides()
        overrides[transaction_id] = is_deductible
        self.save_manual_overrides(overrides)

    # Category overrides
    def get_category_overrides(self) -> dict[str, str]:
        """Return transaction id -> user-chosen deduction category."""
        return {str(k): str(v) for k, v in self._get(CATEGORY_OVERRIDES_KEY, {}).items()}

    def save_category_overrides(self, overrides: dict[str, str]) -> None:
        """Replace all category overrides.

        Raises:
            ValidationError: If a category is not a deduction category
        """
        self._set(
            CATEGORY_OVERRIDES_KEY,
            {str(k): resolve_category(v) for k, v in overrides.items()},
        )

    def set_category_override(self, transaction_id: str, category: str) -> None:
        """Claim one transaction under a deduction category."""
        overrides = self.get_category_overrides()
        overrides[transaction_id] = category
        self.save_category_overrides(overrides)

    def clear_override(self, transaction_id: str) -> bool:
        """Remove both kinds of override for a transaction.

        Returns:
            True if any override was removed
        """
        manual = self.get_manual_overrides()
        categories = self.get_category_overrides()
        removed = manual.pop(transaction_id, None) is not None
        removed = categories.pop(transaction_id, None) is not None or removed
        if removed:
            self.save_manual_overrides(manual)
            self.save_category_overrides(categories)
        return removed

    # Deduction toggles
    def get_deduction_toggles(self) -> dict[str, bool]:
        """Return category -> enabled for every deduction category.

        Categories never set are enabled.
        """
        stored = self._get(DEDUCTION_TOGGLES_KEY, {})
        return {category: bool(stored.get(category, True)) for category in DEDUCTION_CATEGORIES}

    def save_deduction_toggles(self, toggles: dict[str, bool]) -> None:
        """Replace the toggle state.

        Raises:
            ValidationError: If a key is not a deduction category
        """
        self._set(
            DEDUCTION_TOGGLES_KEY,
            {resolve_category(category): bool(enabled) for category, enabled in toggles.items()},
        )

    def set_deduction_toggle(self, category: str, enabled: bool) -> dict[str, bool]:
        """Turn one category on or off. Returns the new toggle state."""
        toggles = self.get_deduction_toggles()
        toggles[resolve_category(category)] = enabled
        self.save_deduction_toggles(toggles)
        return toggles

    def initialize_from_onboarding(self, selected_categories: Iterable[str]) -> dict[str, bool]:
        """Set toggles from the categories chosen during onboarding.

        Selected categories are enabled and every other category disabled.

        Args:
            selected_categories: Category names picked by the user

        Returns:
            The stored toggle state

        Raises:
            ValidationError: If a selected name is not a deduction category
        """
        selected = {resolve_category(category) for category in selected_categories}
        toggles = {category: category in selected for category in DEDUCTION_CATEGORIES}
        self.save_deduction_toggles(toggles)
        logger.info("Initialized %d of %d deduction toggles", len(selected), len(toggles))
        return toggles

    def enabled_categories(self) -> list[str]:
        """Return the categories currently toggled on, in taxonomy order."""
        return [category for category, enabled in self.get_deduction_toggles().items() if enabled]

    # Classification cache
    def load_classification_cache(self) -> dict[str, CachedClassification]:
        """Return cached classifications keyed by transaction id.

        A snapshot older than 24 hours is deleted and nothing is returned.
        """
        snapshot = self.db.get_user_value(self.user_id, CLASSIFICATION_CACHE_KEY)
        if not snapshot:
            return {}

        try:
            stamped = datetime.fromisoformat(snapshot["timestamp"])
        except (KeyError, TypeError, ValueError):
            logger.warning("Discarding classification cache without a valid timestamp")
            self.clear_classification_cache()
            return {}
        if stamped.tzinfo is None:
            stamped = stamped.replace(tzinfo=UTC)
        if self.clock() - stamped > CACHE_TTL:
            logger.info("Classification cache for %s expired", self.user_id)
            self.clear_classification_cache()
            return {}

        entries = {}
        for item in snapshot.get("transactions", []):
            try:
                entry = CachedClassification(
                    transaction_id=str(item["id"]),
                    is_business_expense=bool(item["is_business_expense"]),
                    deduction_amount=Decimal(str(item["deduction_amount"])),
                    deduction_type=item["deduction_type"],
                    classification_source=ClassificationSource(item["classification_source"]),
                    confidence=int(item["confidence"]),
                    merchant_name=item.get("merchant_name", "Unknown Merchant"),
                    anzsic_code=item.get("anzsic_code", "9999"),
                )
            except (KeyError, ValueError, InvalidOperation) as e:
                logger.warning("Skipping malformed cache entry: %s", e)
                continue
            entries[entry.transaction_id] = entry
        return entries

    def save_classification_cache(self, entries: Iterable[CachedClassification]) -> None:
        """Replace the cache with a new snapshot stamped now."""
        self._set(
            CLASSIFICATION_CACHE_KEY,
            {
                "timestamp": self.clock().isoformat(),
                "transactions": [
                    {
                        "id": entry.transaction_id,
                        "is_business_expense": entry.is_business_expense,
                        "deduction_amount": str(entry.deduction_amount),
                        "deduction_type": entry.deduction_type,
                        "classification_source": entry.classification_source.value,
                        "confidence": entry.confidence,
                        "merchant_name": entry.merchant_name,
                        "anzsic_code": entry.anzsic_code,
                    }
                    for entry in entries
                ],
            },
        )

    def clear_classification_cache(self) -> None:
        self.db.remove_user_value(self.user_id, CLASSIFICATION_CACHE_KEY)

    # Income
    def get_annual_income(self) -> Decimal:
        """Return the user's annual income, defaulting to 80,000."""
        value = self._get(ANNUAL_INCOME_KEY, None)
        if value is None:
            return DEFAULT_ANNUAL_INCOME
        return Decimal(str(value))

    def set_annual_income(self, income: Decimal) -> None:
        """Store the user's annual income.

        Raises:
            ValidationError: If income is negative
        """
        if income < 0:
            raise ValidationError("Annual income cannot be negative")
        self._set(ANNUAL_INCOME_KEY, str(income))

