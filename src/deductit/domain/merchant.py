"""Merchant domain service."""

import logging
from typing import Iterable, Optional

from deductit.database.base import Database
from deductit.domain.anzsic import normalize_anzsic_code
from deductit.domain.classifier import is_learnable
from deductit.domain.entities import (
    Classification,
    Merchant,
    MerchantMatch,
    MerchantSource,
    MerchantStatistics,
)
from deductit.domain.errors import NotFoundError, ValidationError, merchant_not_found
from deductit.domain.reference_data import DEFAULT_MERCHANTS
from deductit.utils.merchant_extraction import (
    PREFIX_PATTERN_STRATEGY,
    display_name,
    extract_merchant,
)

logger = logging.getLogger(__name__)

LEARNED_CONFIDENCE = 70
MAX_FUZZY_LOOKUPS = 20
EXACT_MATCH_SCORE = 100
FUZZY_MATCH_SCORE = 80


def normalize_merchant_name(name: str) -> str:
    """Return the canonical lowercase key for a merchant name.

    Raises:
        ValidationError: If the name is blank
    """
    key = " ".join((name or "").split()).lower()
    if not key:
        raise ValidationError("Merchant name is required")
    return key


class MerchantService:
    """Service for the known-merchant reference table."""

    def __init__(self, db: Database):
        """Initialize merchant service.

        Args:
            db: Database instance
        """
        self.db = db

    def create_merchant(
        self,
        name: str,
        anzsic_code: str,
        display: Optional[str] = None,
        keywords: Optional[list[str]] = None,
        aliases: Optional[list[str]] = None,
        source: str = MerchantSource.MANUAL.value,
        confidence: int = 80,
    ) -> Merchant:
        """Create a merchant, or return the existing active one with that name.

        Args:
            name: Merchant name; stored lowercased and trimmed
            anzsic_code: ANZSIC code for the merchant's industry
            display: Display name, defaults to the name as given
            keywords: Extra lookup keywords
            aliases: Alternative names
            source: Provenance label
            confidence: 0-100

        Returns:
            The stored merchant

        Raises:
            ValidationError: If the name or code is invalid
        """
        key = normalize_merchant_name(name)
        existing = self.db.get_merchant_by_name(key)
        if existing is not None:
            return existing

        self.db.create_merchant(
            merchant_name=key,
            display_name=display or name.strip(),
            anzsic_code=normalize_anzsic_code(anzsic_code),
            keywords=[k.strip().lower() for k in keywords or [] if k.strip()],
            aliases=[a.strip().lower() for a in aliases or [] if a.strip()],
            source=source,
            confidence=confidence,
        )
        return self.db.get_merchant_by_name(key)

    def get_merchant(self, name: str) -> Optional[Merchant]:
        """Get an active merchant by name (case-insensitive)."""
        return self.db.get_merchant_by_name(normalize_merchant_name(name))

    def list_merchants(self) -> list[Merchant]:
        """List active merchants."""
        return self.db.list_merchants()

    def search(self, query: str, limit: int = 20) -> list[Merchant]:
        """Search merchants by name, most used first."""
        query = query.strip()
        if not query:
            return []
        return self.db.search_merchants(query, limit=limit)

    def bulk_create(self, merchants: list[dict]) -> int:
        """Insert merchants, skipping names that already exist.

        Each dict needs merchant_name and anzsic_code; display_name,
        keywords, aliases, source and confidence are optional.

        Returns:
            Number of merchants inserted
        """
        records = []
        for merchant in merchants:
            key = normalize_merchant_name(merchant["merchant_name"])
            records.append(
                {
                    "merchant_name": key,
                    "display_name": merchant.get("display_name") or display_name(key),
                    "anzsic_code": normalize_anzsic_code(merchant["anzsic_code"]),
                    "keywords": list(merchant.get("keywords") or [key]),
                    "aliases": list(merchant.get("aliases") or []),
                    "source": merchant.get("source", MerchantSource.MANUAL.value),
                    "confidence": merchant.get("confidence", 80),
                }
            )
        inserted = self.db.bulk_create_merchants(records)
        logger.info("Inserted %d of %d merchants", inserted, len(records))
        return inserted

    def learn_merchants(self, classifications: Iterable[Classification]) -> list[Merchant]:
        """Persist merchants guessed by the heuristic tiers.

        Results that do not name a real merchant are ignored and names are
        deduplicated case-insensitively.

        Returns:
            Newly stored merchants
        """
        records = {}
        for classification in classifications:
            if not is_learnable(classification):
                continue
            key = normalize_merchant_name(classification.merchant_name)
            records.setdefault(
                key,
                {
                    "merchant_name": key,
                    "display_name": classification.merchant_name,
                    "anzsic_code": classification.anzsic_code,
                    "keywords": [key],
                    "aliases": [],
                    "source": MerchantSource.LEARNED.value,
                    "confidence": LEARNED_CONFIDENCE,
                },
            )
        if not records:
            return []

        new_keys = [key for key in records if self.db.get_merchant_by_name(key, True) is None]
        self.bulk_create([records[key] for key in new_keys])
        learned = [self.db.get_merchant_by_name(key) for key in new_keys]
        learned = [merchant for merchant in learned if merchant is not None]
        logger.info("Learned %d new merchants", len(learned))
        return learned

    def record_usage(self, merchant_id: int) -> None:
        """Count one more classification hit for a merchant."""
        self.db.increment_merchant_usage(merchant_id)

    def update_merchant(self, name: str, **fields) -> Merchant:
        """Update an active merchant.

        Raises:
            NotFoundError: If no active merchant has the name
        """
        merchant = self.get_merchant(name)
        if merchant is None:
            raise NotFoundError(merchant_not_found(name))
        if "anzsic_code" in fields:
            fields["anzsic_code"] = normalize_anzsic_code(fields["anzsic_code"])
        self.db.update_merchant(merchant.id, **fields)
        return self.db.get_merchant_by_name(merchant.merchant_name)

    def deactivate(self, name: str) -> None:
        """Soft-delete a merchant.

        Raises:
            NotFoundError: If no active merchant has the name
        """
        if not self.db.deactivate_merchant(normalize_merchant_name(name)):
            raise NotFoundError(merchant_not_found(name))

    def get_statistics(self) -> MerchantStatistics:
        """Summarize active merchants."""
        return MerchantStatistics(
            total=self.db.count_merchants(),
            by_anzsic_code=self.db.merchant_counts_by("anzsic_code"),
            by_source=self.db.merchant_counts_by("source"),
            most_used=self.db.most_used_merchants(limit=10),
        )

    def seed_defaults(self) -> int:
        """Load well-known merchants. Safe to run repeatedly."""
        return self.bulk_create(
            [
                {
                    "merchant_name": name,
                    "display_name": display,
                    "anzsic_code": code,
                    "keywords": keywords,
                    "aliases": aliases,
                    "source": MerchantSource.SEED.value,
                    "confidence": 90,
                }
                for name, display, code, keywords, aliases in DEFAULT_MERCHANTS
            ]
        )

    def bulk_search(self, descriptions: list[str]) -> tuple[list[MerchantMatch], dict[str, int]]:
        """Match descriptions against the merchant table.

        A merchant name is extracted from each description, then looked up
        exactly; names without an exact hit get a contains-search, and
        failing that a lookup of each word. At most 20 such fuzzy lookups run
        per call.

        Args:
            descriptions: Transaction descriptions

        Returns:
            Tuple of (matches in description order, statistics dict)
        """
        extracted: dict[str, str] = {}
        for description in descriptions:
            name = extract_merchant(description, PREFIX_PATTERN_STRATEGY)
            if name:
                extracted[description] = name

        unique_names = list(dict.fromkeys(extracted.values()))
        found: dict[str, tuple[Merchant, str, int]] = {}
        fuzzy_left = MAX_FUZZY_LOOKUPS
        for name in unique_names:
            merchant = self.db.get_merchant_by_name(name)
            if merchant is not None:
                found[name] = (merchant, "exact", EXACT_MATCH_SCORE)
                continue
            if fuzzy_left <= 0:
                continue
            fuzzy_left -= 1
            merchant = self._fuzzy_lookup(name)
            if merchant is not None:
                found[name] = (merchant, "fuzzy", FUZZY_MATCH_SCORE)

        matches = []
        for description in descriptions:
            name = extracted.get(description)
            if name is None or name not in found:
                continue
            merchant, match_type, score = found[name]
            matches.append(
                MerchantMatch(
                    description=description,
                    extracted_merchant=name,
                    merchant=merchant,
                    match_type=match_type,
                    score=score,
                )
            )

        stats = {
            "total_descriptions": len(descriptions),
            "unique_merchants": len(unique_names),
            "matches": len(matches),
            "exact_matches": sum(1 for m in matches if m.match_type == "exact"),
            "fuzzy_matches": sum(1 for m in matches if m.match_type == "fuzzy"),
        }
        return matches, stats

    def _fuzzy_lookup(self, name: str) -> Optional[Merchant]:
        candidates = self.db.search_merchants(name, limit=1)
        if candidates:
            return candidates[0]
        for word in name.split():
            if len(word) >= 3:
                merchant = self.db.get_merchant_by_name(word)
                if merchant is not None:
                    return merchant
        return None
