"""ANZSIC mapping domain service."""

import logging
from decimal import Decimal
from typing import Optional

from deductit.database.base import Database
from deductit.domain.categories import OTHER, is_deduction_category
from deductit.domain.entities import AnzsicMapping, AnzsicStatistics
from deductit.domain.errors import (
    NotFoundError,
    ValidationError,
    anzsic_mapping_not_found,
    unknown_category,
)
from deductit.domain.reference_data import DEFAULT_ANZSIC_MAPPINGS

logger = logging.getLogger(__name__)


def normalize_anzsic_code(code) -> str:
    """Zero-pad an ANZSIC code to four digits.

    Raises:
        ValidationError: If the code is empty or not a 1-4 digit number
    """
    text = "" if code is None else str(code).strip()
    if not text or text == "undefined" or not text.isdigit() or len(text) > 4:
        raise ValidationError("Invalid ANZSIC code")
    return text.zfill(4)


class AnzsicService:
    """Service for ANZSIC code to ATO category mappings."""

    def __init__(self, db: Database):
        """Initialize ANZSIC service.

        Args:
            db: Database instance
        """
        self.db = db

    def lookup(self, code) -> Optional[AnzsicMapping]:
        """Find the active mapping for a code.

        Args:
            code: ANZSIC code, padded to four digits before lookup

        Returns:
            Mapping or None if the code has no mapping

        Raises:
            ValidationError: If the code is malformed
        """
        return self.db.get_anzsic_mapping(normalize_anzsic_code(code))

    def list_mappings(
        self, deductible_only: bool = False, ato_category: Optional[str] = None
    ) -> list[AnzsicMapping]:
        """List active mappings, optionally only deductible ones or one category."""
        return self.db.list_anzsic_mappings(
            deductible_only=deductible_only, ato_category=ato_category
        )

    def create_mapping(
        self,
        code,
        description: str,
        ato_category: str,
        is_deductible: bool,
        confidence_level: int = 80,
        source: str = "manual",
    ) -> int:
        """Create a mapping.

        Args:
            code: ANZSIC code
            description: Industry description
            ato_category: Deduction category, or "Other"
            is_deductible: Whether spending under the code is deductible
            confidence_level: 0-100
            source: Provenance label

        Returns:
            Mapping ID

        Raises:
            ValidationError: If the code, category or confidence is invalid
            ConflictError: If an active mapping exists for the code
        """
        record = self._validated_record(
            code, description, ato_category, is_deductible, confidence_level, source
        )
        return self.db.create_anzsic_mapping(**record)

    def bulk_create(self, mappings: list[dict]) -> int:
        """Insert mappings, skipping codes that already have one.

        Returns:
            Number of mappings inserted
        """
        records = [
            self._validated_record(
                m["anzsic_code"],
                m["anzsic_description"],
                m["ato_category"],
                m["is_deductible"],
                m.get("confidence_level", 80),
                m.get("source", "manual"),
            )
            for m in mappings
        ]
        inserted = self.db.bulk_create_anzsic_mappings(records)
        logger.info("Inserted %d of %d ANZSIC mappings", inserted, len(records))
        return inserted

    def seed_defaults(self) -> int:
        """Load the standard mapping table. Safe to run repeatedly."""
        return self.bulk_create(
            [
                {
                    "anzsic_code": code,
                    "anzsic_description": description,
                    "ato_category": category,
                    "is_deductible": deductible,
                    "confidence_level": confidence,
                    "source": "seed",
                }
                for code, description, category, deductible, confidence in DEFAULT_ANZSIC_MAPPINGS
            ]
        )

    def deactivate(self, code) -> None:
        """Soft-delete the mapping for a code.

        Raises:
            NotFoundError: If no active mapping exists for the code
        """
        normalized = normalize_anzsic_code(code)
        if not self.db.deactivate_anzsic_mapping(normalized):
            raise NotFoundError(anzsic_mapping_not_found(normalized))

    def get_statistics(self) -> AnzsicStatistics:
        """Summarize active mappings."""
        mappings = self.db.list_anzsic_mappings()
        total = len(mappings)
        if total:
            average = Decimal(sum(m.confidence_level for m in mappings)) / total
        else:
            average = Decimal("0")
        return AnzsicStatistics(
            total=total,
            deductible=sum(1 for m in mappings if m.is_deductible),
            by_ato_category=self.db.anzsic_category_counts(),
            average_confidence=average.quantize(Decimal("0.1")),
        )

    def _validated_record(
        self, code, description, ato_category, is_deductible, confidence_level, source
    ) -> dict:
        if ato_category != OTHER and not is_deduction_category(ato_category):
            raise ValidationError(unknown_category(ato_category))
        if not 0 <= int(confidence_level) <= 100:
            raise ValidationError("Confidence must be between 0 and 100")
        return {
            "anzsic_code": normalize_anzsic_code(code),
            "anzsic_description": description,
            "ato_category": ato_category,
            "is_deductible": bool(is_deductible),
            "confidence_level": int(confidence_level),
            "source": source,
        }
