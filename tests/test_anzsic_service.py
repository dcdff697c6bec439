"""Tests for the ANZSIC mapping service."""

from decimal import Decimal

import pytest

from deductit.domain.anzsic import normalize_anzsic_code
from deductit.domain.categories import HOME_OFFICE, OTHER, VEHICLES
from deductit.domain.errors import ConflictError, NotFoundError, ValidationError


@pytest.mark.parametrize("code,expected", [("4613", "4613"), ("612", "0612"), (7, "0007"), (" 6920 ", "6920")])
def test_normalize_anzsic_code(code, expected):
    assert normalize_anzsic_code(code) == expected


@pytest.mark.parametrize("code", [None, "", "undefined", "46a3", "12345"])
def test_normalize_rejects_invalid_codes(code):
    with pytest.raises(ValidationError):
        normalize_anzsic_code(code)


def test_seed_defaults_is_idempotent(anzsic_service):
    assert anzsic_service.seed_defaults() == 26
    assert anzsic_service.seed_defaults() == 0


def test_lookup(anzsic_service):
    anzsic_service.seed_defaults()

    mapping = anzsic_service.lookup("4613")

    assert mapping.ato_category == VEHICLES
    assert mapping.is_deductible is True
    assert mapping.confidence_level == 90
    assert mapping.source == "seed"
    assert anzsic_service.lookup("1234") is None


def test_create_mapping(anzsic_service):
    anzsic_service.create_mapping("591", "Internet services", HOME_OFFICE, True, 75)

    mapping = anzsic_service.lookup("0591")
    assert mapping.anzsic_description == "Internet services"
    assert mapping.confidence_level == 75


def test_create_duplicate_mapping_conflicts(anzsic_service):
    anzsic_service.create_mapping("5910", "Telecommunications", HOME_OFFICE, True)

    with pytest.raises(ConflictError):
        anzsic_service.create_mapping("5910", "Telecommunications", HOME_OFFICE, True)


def test_create_mapping_validates_category_and_confidence(anzsic_service):
    with pytest.raises(ValidationError, match="Unknown deduction category"):
        anzsic_service.create_mapping("5910", "Telecommunications", "Snacks", True)
    with pytest.raises(ValidationError, match="Confidence"):
        anzsic_service.create_mapping("5910", "Telecommunications", HOME_OFFICE, True, 101)


def test_list_mappings_filters(anzsic_service):
    anzsic_service.seed_defaults()

    deductible = anzsic_service.list_mappings(deductible_only=True)
    other = anzsic_service.list_mappings(ato_category=OTHER)

    assert all(m.is_deductible for m in deductible)
    assert {m.anzsic_code for m in other} == {"4110", "4711", "4251", "4721", "9529", "9999"}
    assert [m.anzsic_code for m in other] == sorted(m.anzsic_code for m in other)


def test_deactivate(anzsic_service):
    anzsic_service.seed_defaults()

    anzsic_service.deactivate("9999")

    assert anzsic_service.lookup("9999") is None
    with pytest.raises(NotFoundError):
        anzsic_service.deactivate("9999")


def test_statistics(anzsic_service):
    anzsic_service.create_mapping("4613", "Fuel", VEHICLES, True, 90)
    anzsic_service.create_mapping("4622", "Taxi", VEHICLES, True, 85)
    anzsic_service.create_mapping("4110", "Supermarkets", OTHER, False, 90)

    stats = anzsic_service.get_statistics()

    assert stats.total == 3
    assert stats.deductible == 2
    assert stats.by_ato_category[VEHICLES] == {"count": 2, "deductible": 2}
    assert stats.by_ato_category[OTHER] == {"count": 1, "deductible": 0}
    assert stats.average_confidence == Decimal("88.3")
