"""Tests for override, cache and classifier reconciliation."""

import threading
from decimal import Decimal

import pytest

from deductit.domain.categories import HOME_OFFICE, MEALS, OTHER, VEHICLES
from deductit.domain.classifier import AIClassifier
from deductit.domain.entities import Classification, ClassificationSource
from deductit.domain.errors import ClassifierUnavailableError
from deductit.domain.merchant import MerchantService
from deductit.domain.preferences import PreferenceService
from deductit.domain.reconcile import (
    ClassificationService,
    apply_overrides,
    deduction_amount_for,
    restrict_to_enabled,
)


class FakeAIClassifier(AIClassifier):
    """Answers from a lookup table keyed by a word in the description."""

    def __init__(self, answers=None, fail_on=()):
        self.answers = answers or {}
        self.fail_on = fail_on
        self.calls = []
        self._lock = threading.Lock()

    def classify(self, description, enabled_categories):
        with self._lock:
            self.calls.append((description, list(enabled_categories)))
        for word in self.fail_on:
            if word in description:
                raise ClassifierUnavailableError("service down")
        for word, category in self.answers.items():
            if word in description:
                return Classification(
                    merchant_name=word.title(),
                    anzsic_code="5910",
                    anzsic_description="Telecommunications",
                    ato_category=category,
                    is_deductible=True,
                    confidence=88,
                    source=ClassificationSource.FALLBACK,
                )
        raise ClassifierUnavailableError("no answer")


@pytest.fixture
def service(temp_db):
    return ClassificationService(temp_db, "user-1")


def test_deduction_amount_only_for_deductible_outflows():
    assert deduction_amount_for(Decimal("-45.67"), True) == Decimal("45.67")
    assert deduction_amount_for(Decimal("-45.67"), False) == Decimal("0")
    assert deduction_amount_for(Decimal("45.67"), True) == Decimal("0")


def test_restrict_to_enabled(service):
    result = service.classifier.classify("SHELL COLES EXPRESS 123")

    assert restrict_to_enabled(result, None).is_deductible is True
    assert restrict_to_enabled(result, [VEHICLES]).is_deductible is True
    restricted = restrict_to_enabled(result, [MEALS])
    assert restricted.is_deductible is False
    assert restricted.ato_category == VEHICLES


def test_apply_overrides_without_prior(make_transaction):
    txn = make_transaction(description="ZARA 123 SYDNEY")

    result = apply_overrides(txn, manual_override=True, category_override=None)

    assert result.is_business_expense is True
    assert result.ato_category == OTHER
    assert result.merchant_name == "Zara"
    assert result.classification_source == ClassificationSource.MANUAL
    assert result.confidence == 100
    assert result.auto_classified is False


class TestProcess:
    def test_fresh_classification(self, service, make_transaction):
        txn = make_transaction(description="SHELL COLES EXPRESS 123", amount="-60.00")

        [result] = service.process([txn])

        assert result.ato_category == VEHICLES
        assert result.is_business_expense is True
        assert result.deduction_amount == Decimal("60.00")
        assert result.classification_source == ClassificationSource.PATTERN
        assert result.auto_classified is True

    def test_preserves_input_order(self, service, make_transaction):
        transactions = [
            make_transaction("a", "SHELL COLES EXPRESS 123"),
            make_transaction("b", "WOOLWORTHS 1234 SYDNEY"),
            make_transaction("c", "UBER *TRIP"),
        ]
        service.preferences.set_manual_override("b", True)

        results = service.process(transactions)

        assert [r.id for r in results] == ["a", "b", "c"]

    def test_category_override_wins(self, service, make_transaction):
        txn = make_transaction(description="WOOLWORTHS 1234 SYDNEY")
        service.preferences.set_category_override(txn.id, HOME_OFFICE)
        service.preferences.set_manual_override(txn.id, False)

        [result] = service.process([txn])

        assert result.is_business_expense is True
        assert result.ato_category == HOME_OFFICE
        assert result.deduction_amount == Decimal("45.67")
        assert result.classification_source == ClassificationSource.MANUAL

    def test_manual_override_keeps_prior_category(self, service, make_transaction):
        txn = make_transaction(description="SHELL COLES EXPRESS 123")
        service.process([txn])
        service.preferences.set_manual_override(txn.id, False)

        [result] = service.process([txn])

        assert result.is_business_expense is False
        assert result.deduction_amount == Decimal("0")
        assert result.ato_category == VEHICLES
        assert result.merchant_name == "Fuel Station"

    def test_manual_override_is_stable_across_runs(self, service, make_transaction):
        txn = make_transaction(description="SHELL COLES EXPRESS 123", amount="-60.00")
        service.process([txn])
        service.preferences.set_manual_override(txn.id, True)

        first = service.process([txn])
        second = service.process([txn])
        third = service.process([txn])

        assert second == first
        assert third == first
        assert first[0].merchant_name == "Fuel Station"
        assert first[0].ato_category == VEHICLES

    def test_cleared_override_restores_automatic_decision(self, service, make_transaction):
        txn = make_transaction(description="SHELL COLES EXPRESS 123", amount="-60.00")
        [automatic] = service.process([txn])
        service.preferences.set_manual_override(txn.id, False)
        service.process([txn])

        service.preferences.clear_override(txn.id)
        [result] = service.process([txn])

        assert result == automatic

    def test_overrides_are_not_cached(self, service, make_transaction):
        txn = make_transaction()
        service.preferences.set_manual_override(txn.id, True)

        service.process([txn])

        assert service.preferences.load_classification_cache() == {}

    def test_cache_hit_skips_classifier(self, temp_db, make_transaction):
        txn = make_transaction(description="SHELL COLES EXPRESS 123", amount="-60.00")
        first = ClassificationService(temp_db, "user-1").process([txn])

        # A stored mapping would now change the fresh answer
        MerchantService(temp_db).create_merchant("shell", "4110")
        second = ClassificationService(temp_db, "user-1").process([txn])

        assert second == first

    def test_reprocessing_is_idempotent(self, service, make_transaction):
        transactions = [
            make_transaction("a", "SHELL COLES EXPRESS 123"),
            make_transaction("b", "ZARA PETROL 55"),
        ]

        assert service.process(transactions) == service.process(transactions)

    def test_disabled_category_is_not_deductible(self, temp_db, make_transaction):
        PreferenceService(temp_db, "user-1").initialize_from_onboarding([HOME_OFFICE])
        txn = make_transaction(description="SHELL COLES EXPRESS 123")

        [result] = ClassificationService(temp_db, "user-1").process([txn])

        assert result.ato_category == VEHICLES
        assert result.is_business_expense is False
        assert result.deduction_amount == Decimal("0")

    def test_deductible_iff_positive_deduction_for_outflows(self, service, make_transaction):
        transactions = [
            make_transaction("a", "SHELL COLES EXPRESS 123", "-60.00"),
            make_transaction("b", "WOOLWORTHS 1234 SYDNEY", "-45.67"),
            make_transaction("c", "UBER *TRIP", "-18.20"),
        ]

        for result in service.process(transactions):
            assert result.is_business_expense == (result.deduction_amount > 0)


class TestClassifyBatch:
    def test_learns_and_counts_merchant_usage(self, temp_db):
        service = ClassificationService(temp_db, "user-1")

        first = service.classify_batch(["ZARA PETROL 55"])
        second = service.classify_batch(["ZARA PETROL 99"])

        assert first[0].source == ClassificationSource.SMART_EXTRACTION
        assert second[0].source == ClassificationSource.DATABASE
        assert MerchantService(temp_db).get_merchant("zara").usage_count == 1

    def test_ai_escalation_once_per_merchant(self, temp_db):
        ai = FakeAIClassifier(answers={"ZARA": HOME_OFFICE})
        service = ClassificationService(temp_db, "user-1", ai_classifier=ai)

        results = service.classify_batch(
            ["ZARA PETROL 55", "SHELL COLES EXPRESS 123", "ZARA PETROL 99"], [HOME_OFFICE, VEHICLES]
        )

        assert len(ai.calls) == 1
        assert ai.calls[0][1] == [HOME_OFFICE, VEHICLES]
        assert [r.source for r in results] == [
            ClassificationSource.AI,
            ClassificationSource.PATTERN,
            ClassificationSource.AI,
        ]
        assert results[0].ato_category == HOME_OFFICE
        assert results[0].is_deductible is True

    def test_ai_failure_falls_back(self, temp_db):
        ai = FakeAIClassifier(fail_on=("ZARA",))
        service = ClassificationService(temp_db, "user-1", ai_classifier=ai)

        [result] = service.classify_batch(["ZARA PETROL 55"])

        assert result.source == ClassificationSource.FALLBACK
        assert result.is_deductible is False
        assert result.merchant_name == "Zara"

    def test_ai_results_respect_enabled_categories(self, temp_db):
        ai = FakeAIClassifier(answers={"ZARA": HOME_OFFICE})
        service = ClassificationService(temp_db, "user-1", ai_classifier=ai)

        [result] = service.classify_batch(["ZARA PETROL 55"], [VEHICLES])

        assert result.source == ClassificationSource.AI
        assert result.is_deductible is False
