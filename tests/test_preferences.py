"""Tests for per-user classification preferences."""

from datetime import datetime, timedelta, UTC
from decimal import Decimal

import pytest

from deductit.domain.categories import DEDUCTION_CATEGORIES, HOME_OFFICE, MEALS, VEHICLES
from deductit.domain.entities import CachedClassification, ClassificationSource
from deductit.domain.errors import ValidationError
from deductit.domain.preferences import CLASSIFICATION_CACHE_KEY, PreferenceService


class FakeClock:
    def __init__(self, now):
        self.now = now

    def __call__(self):
        return self.now


def _entry(txn_id="t1"):
    return CachedClassification(
        transaction_id=txn_id,
        is_business_expense=True,
        deduction_amount=Decimal("45.67"),
        deduction_type=VEHICLES,
        classification_source=ClassificationSource.PATTERN,
        confidence=90,
        merchant_name="Fuel Station",
        anzsic_code="4613",
    )


def test_user_id_required(temp_db):
    with pytest.raises(ValidationError):
        PreferenceService(temp_db, "")


class TestOverrides:
    def test_manual_overrides_round_trip(self, preference_service):
        overrides = {"t1": True, "t2": False}

        preference_service.save_manual_overrides(overrides)

        assert preference_service.get_manual_overrides() == overrides

    def test_category_overrides_round_trip(self, preference_service):
        overrides = {"t1": HOME_OFFICE, "t2": MEALS}

        preference_service.save_category_overrides(overrides)

        assert preference_service.get_category_overrides() == overrides

    def test_category_override_is_resolved(self, preference_service):
        preference_service.set_category_override("t1", "home office expenses")

        assert preference_service.get_category_overrides() == {"t1": HOME_OFFICE}

    def test_unknown_category_rejected(self, preference_service):
        with pytest.raises(ValidationError):
            preference_service.set_category_override("t1", "Snacks")

    def test_clear_override(self, preference_service):
        preference_service.set_manual_override("t1", True)
        preference_service.set_category_override("t1", MEALS)
        preference_service.set_manual_override("t2", False)

        assert preference_service.clear_override("t1") is True
        assert preference_service.clear_override("t1") is False
        assert preference_service.get_manual_overrides() == {"t2": False}
        assert preference_service.get_category_overrides() == {}

    def test_users_are_isolated(self, temp_db):
        PreferenceService(temp_db, "alice").set_manual_override("t1", True)

        assert PreferenceService(temp_db, "bob").get_manual_overrides() == {}


class TestDeductionToggles:
    def test_unset_categories_are_enabled(self, preference_service):
        toggles = preference_service.get_deduction_toggles()

        assert list(toggles) == list(DEDUCTION_CATEGORIES)
        assert all(toggles.values())

    def test_round_trip(self, preference_service):
        toggles = {category: i % 2 == 0 for i, category in enumerate(DEDUCTION_CATEGORIES)}

        preference_service.save_deduction_toggles(toggles)

        assert preference_service.get_deduction_toggles() == toggles

    def test_set_single_toggle(self, preference_service):
        toggles = preference_service.set_deduction_toggle(MEALS, False)

        assert toggles[MEALS] is False
        assert MEALS not in preference_service.enabled_categories()

    def test_initialize_from_onboarding(self, preference_service):
        toggles = preference_service.initialize_from_onboarding([VEHICLES, "home office expenses"])

        assert [c for c, enabled in toggles.items() if enabled] == [VEHICLES, HOME_OFFICE]
        assert preference_service.enabled_categories() == [VEHICLES, HOME_OFFICE]


class TestClassificationCache:
    def test_round_trip(self, temp_db):
        clock = FakeClock(datetime(2024, 7, 1, 9, 0, tzinfo=UTC))
        service = PreferenceService(temp_db, "user-1", clock=clock)

        service.save_classification_cache([_entry("t1"), _entry("t2")])
        clock.now += timedelta(hours=23)

        assert service.load_classification_cache() == {"t1": _entry("t1"), "t2": _entry("t2")}

    def test_expired_cache_is_purged(self, temp_db):
        clock = FakeClock(datetime(2024, 7, 1, 9, 0, tzinfo=UTC))
        service = PreferenceService(temp_db, "user-1", clock=clock)
        service.save_classification_cache([_entry()])

        clock.now += timedelta(hours=24, seconds=1)

        assert service.load_classification_cache() == {}
        assert temp_db.get_user_value("user-1", CLASSIFICATION_CACHE_KEY) is None

    def test_cache_without_timestamp_is_discarded(self, temp_db, preference_service):
        temp_db.set_user_value("user-1", CLASSIFICATION_CACHE_KEY, {"transactions": []})

        assert preference_service.load_classification_cache() == {}
        assert temp_db.get_user_value("user-1", CLASSIFICATION_CACHE_KEY) is None

    def test_malformed_entries_are_skipped(self, temp_db, preference_service):
        preference_service.save_classification_cache([_entry("t1")])
        snapshot = temp_db.get_user_value("user-1", CLASSIFICATION_CACHE_KEY)
        snapshot["transactions"].append({"id": "t2", "is_business_expense": True})
        temp_db.set_user_value("user-1", CLASSIFICATION_CACHE_KEY, snapshot)

        assert list(preference_service.load_classification_cache()) == ["t1"]


class TestIncome:
    def test_default_income(self, preference_service):
        assert preference_service.get_annual_income() == Decimal("80000")

    def test_set_income(self, preference_service):
        preference_service.set_annual_income(Decimal("95000.50"))

        assert preference_service.get_annual_income() == Decimal("95000.50")

    def test_negative_income_rejected(self, preference_service):
        with pytest.raises(ValidationError):
            preference_service.set_annual_income(Decimal("-1"))
