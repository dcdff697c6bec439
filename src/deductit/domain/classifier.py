"""Tiered merchant and ATO category classifier.

A description is offered to each tier in turn and the first tier that
returns a result wins:

1. database          known merchants by name, keyword or alias
2. pattern           fixed ordered table of merchant keyword rules
3. smart-extraction  noise-word stripping plus keyword groups
4. fallback          always answers, never deductible

Every tier is a callable ``(description) -> Classification | None`` so each
can be exercised on its own.
"""

import logging
import re
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Callable, Iterable, Optional, Sequence

from deductit.domain.categories import (
    VEHICLES,
    WORK_TOOLS,
    HOME_OFFICE,
    PROFESSIONAL_FEES,
    MEALS,
    TAX_ACCOUNTING,
    OTHER,
)
from deductit.domain.entities import (
    AnzsicMapping,
    Classification,
    ClassificationSource,
    Merchant,
)
from deductit.utils.merchant_extraction import (
    NOISE_WORD_STRATEGY,
    display_name,
    extract_merchant,
)

logger = logging.getLogger(__name__)

UNKNOWN_MERCHANT = "Unknown Merchant"
FALLBACK_CODE = "9999"
FALLBACK_DESCRIPTION = "General retail"
FALLBACK_CONFIDENCE = 30
GENERIC_MERCHANT_NAMES = frozenset({"unknown", UNKNOWN_MERCHANT.lower()})

MIN_TOKEN_LENGTH = 3
_TOKEN = re.compile(r"[a-z0-9][a-z0-9&'\-]*")

ClassificationTier = Callable[[str], Optional[Classification]]


def compile_keywords(keywords: Iterable[str]) -> re.Pattern:
    """Compile keywords into one case-insensitive whole-word alternation.

    A trailing "s" or "'s" is tolerated, so "mcdonald" matches "McDonald's".
    """
    alternation = "|".join(re.escape(keyword) for keyword in keywords)
    return re.compile(rf"\b(?:{alternation})(?:'?s)?\b", re.IGNORECASE)


@dataclass(frozen=True)
class CategoryRule:
    """Keyword set mapped to an ANZSIC code and deduction category."""

    name: str
    keywords: tuple[str, ...]
    anzsic_code: str
    anzsic_description: str
    ato_category: str
    is_deductible: bool
    confidence: int

    def compile(self) -> re.Pattern:
        return compile_keywords(self.keywords)


MERCHANT_PATTERNS: tuple[CategoryRule, ...] = (
    CategoryRule(
        "Fuel Station",
        ("shell", "bp", "caltex", "7-eleven", "mobil", "ampol", "united petroleum", "puma energy"),
        "4613", "Motor vehicle fuel retailing", VEHICLES, True, 90,
    ),
    CategoryRule(
        "Transport Service",
        ("uber", "taxi", "cabcharge", "rideshare", "transport"),
        "4622", "Taxi and other road transport", VEHICLES, True, 85,
    ),
    CategoryRule(
        "Hardware Store",
        ("bunnings", "masters", "mitre 10", "mitre10", "home depot", "hardware"),
        "4231", "Hardware and building supplies retailing", WORK_TOOLS, True, 85,
    ),
    CategoryRule(
        "Electronics Store",
        ("jb hi-fi", "jb hifi", "jbhifi", "harvey norman", "officeworks", "dick smith", "electronics"),
        "4252", "Electronics retailing", WORK_TOOLS, True, 80,
    ),
    CategoryRule(
        "Professional Service",
        ("accountant", "lawyer", "solicitor", "consultant", "professional"),
        "6920", "Accounting services", PROFESSIONAL_FEES, True, 90,
    ),
    CategoryRule(
        "Parking",
        ("parking", "wilson", "secure parking"),
        "7220", "Transport services", VEHICLES, True, 75,
    ),
    CategoryRule(
        "Telecommunications",
        ("telstra", "optus", "vodafone", "tpg", "iinet", "mobile", "internet"),
        "5910", "Telecommunications", HOME_OFFICE, True, 85,
    ),
    CategoryRule(
        "Bank Fees",
        ("atm fee", "bank fee", "account fee", "transaction fee", "overdraft"),
        "6221", "Bank fees and charges", TAX_ACCOUNTING, True, 95,
    ),
    CategoryRule(
        "Fast Food",
        ("mcdonalds", "mcdonald", "maccas", "kfc", "subway", "dominos", "pizza hut",
         "hungry jacks", "red rooster"),
        "5611", "Takeaway food services", MEALS, True, 75,
    ),
    CategoryRule(
        "Coffee Shop",
        ("starbucks", "gloria jeans", "coffee club", "cafe", "coffee"),
        "5613", "Cafes and coffee shops", MEALS, True, 70,
    ),
    CategoryRule(
        "Supermarket",
        ("woolworths", "woolies", "coles", "aldi", "iga", "supermarket", "grocery"),
        "4110", "Supermarket and grocery stores", OTHER, False, 90,
    ),
    CategoryRule(
        "Retail Store",
        ("target", "kmart", "big w", "bigw", "myer", "david jones", "clothing", "fashion"),
        "4251", "Department stores", OTHER, False, 85,
    ),
)

SMART_KEYWORD_GROUPS: tuple[CategoryRule, ...] = (
    CategoryRule(
        "fuel",
        ("fuel", "petrol", "gas", "station", "shell", "bp", "caltex", "mobil", "ampol"),
        "4613", "Motor vehicle fuel retailing", VEHICLES, True, 80,
    ),
    CategoryRule(
        "food",
        ("food", "restaurant", "cafe", "meal", "lunch", "dinner", "mcdonalds", "kfc",
         "subway", "starbucks"),
        "5611", "Takeaway food services", MEALS, True, 70,
    ),
    CategoryRule(
        "hardware",
        ("hardware", "tools", "equipment", "supplies", "bunnings", "mitre"),
        "4231", "Hardware and building supplies retailing", WORK_TOOLS, True, 75,
    ),
    CategoryRule(
        "telecom",
        ("phone", "mobile", "internet", "telco", "telecommunications", "telstra", "optus",
         "vodafone"),
        "5910", "Telecommunications", HOME_OFFICE, True, 85,
    ),
    CategoryRule(
        "banking",
        ("atm", "bank", "fee", "account", "service"),
        "6221", "Bank fees and charges", TAX_ACCOUNTING, True, 90,
    ),
)


def _with_mapping(
    rule: CategoryRule,
    mappings: dict[str, AnzsicMapping],
    merchant_name: str,
    source: ClassificationSource,
    matched_keyword: str,
) -> Classification:
    """Build a result from a rule, letting a stored mapping override its category."""
    mapping = mappings.get(rule.anzsic_code)
    return Classification(
        merchant_name=merchant_name,
        anzsic_code=rule.anzsic_code,
        anzsic_description=mapping.anzsic_description if mapping else rule.anzsic_description,
        ato_category=mapping.ato_category if mapping else rule.ato_category,
        is_deductible=mapping.is_deductible if mapping else rule.is_deductible,
        confidence=rule.confidence,
        source=source,
        matched_keyword=matched_keyword,
    )


class MerchantIndexTier:
    """Tier 1: exact token lookup against known merchants."""

    source = ClassificationSource.DATABASE

    def __init__(self, merchants: Iterable[Merchant], mappings: dict[str, AnzsicMapping]):
        self.mappings = mappings
        self.index: dict[str, Merchant] = {}
        for merchant in merchants:
            self.add(merchant)

    def add(self, merchant: Merchant) -> None:
        """Index a merchant under its name, keywords and aliases."""
        if not merchant.is_active:
            return
        for key in (merchant.merchant_name, *merchant.keywords, *merchant.aliases):
            key = key.strip().lower()
            if key:
                self.index.setdefault(key, merchant)

    def __call__(self, description: str) -> Optional[Classification]:
        for token in _TOKEN.findall(description.lower()):
            if len(token) < MIN_TOKEN_LENGTH:
                continue
            merchant = self.index.get(token)
            if merchant is None:
                continue
            mapping = self.mappings.get(merchant.anzsic_code)
            return Classification(
                merchant_name=merchant.display_name,
                anzsic_code=merchant.anzsic_code,
                anzsic_description=mapping.anzsic_description if mapping else "",
                ato_category=mapping.ato_category if mapping else OTHER,
                is_deductible=mapping.is_deductible if mapping else False,
                confidence=merchant.confidence,
                source=self.source,
                matched_keyword=token,
                merchant_id=merchant.id,
            )
        return None


class PatternTier:
    """Tier 2: first matching rule of a fixed, ordered pattern table."""

    source = ClassificationSource.PATTERN

    def __init__(
        self,
        mappings: dict[str, AnzsicMapping],
        rules: Sequence[CategoryRule] = MERCHANT_PATTERNS,
    ):
        self.mappings = mappings
        self.rules = [(rule, rule.compile()) for rule in rules]

    def __call__(self, description: str) -> Optional[Classification]:
        for rule, pattern in self.rules:
            match = pattern.search(description)
            if match:
                return _with_mapping(
                    rule, self.mappings, rule.name, self.source, match.group(0).lower()
                )
        return None


class SmartExtractionTier:
    """Tier 3: merchant name guess plus category keyword groups."""

    source = ClassificationSource.SMART_EXTRACTION

    def __init__(
        self,
        mappings: dict[str, AnzsicMapping],
        groups: Sequence[CategoryRule] = SMART_KEYWORD_GROUPS,
    ):
        self.mappings = mappings
        self.groups = [(group, group.compile()) for group in groups]

    def __call__(self, description: str) -> Optional[Classification]:
        merchant = extract_merchant(description, NOISE_WORD_STRATEGY)
        merchant_name = display_name(merchant) if merchant else UNKNOWN_MERCHANT
        for group, pattern in self.groups:
            match = pattern.search(description)
            if match:
                return _with_mapping(
                    group, self.mappings, merchant_name, self.source, match.group(0).lower()
                )
        return None


class FallbackTier:
    """Tier 4: best-effort merchant name, category Other, not deductible."""

    source = ClassificationSource.FALLBACK

    def __call__(self, description: str) -> Classification:
        merchant = extract_merchant(description, NOISE_WORD_STRATEGY)
        return Classification(
            merchant_name=display_name(merchant) if merchant else UNKNOWN_MERCHANT,
            anzsic_code=FALLBACK_CODE,
            anzsic_description=FALLBACK_DESCRIPTION,
            ato_category=OTHER,
            is_deductible=False,
            confidence=FALLBACK_CONFIDENCE,
            source=self.source,
        )


def fallback_classification(description: str) -> Classification:
    """Classify with the last-resort tier only."""
    return FallbackTier()(description)


def is_heuristic(classification: Classification) -> bool:
    """Return True for results from the smart-extraction or fallback tiers."""
    return classification.source in (
        ClassificationSource.SMART_EXTRACTION,
        ClassificationSource.FALLBACK,
    )


def is_learnable(classification: Classification) -> bool:
    """Return True if a result names a merchant worth remembering."""
    return (
        is_heuristic(classification)
        and classification.merchant_name.strip().lower() not in GENERIC_MERCHANT_NAMES
    )


class MerchantClassifier:
    """Runs a description through an ordered list of classification tiers."""

    def __init__(
        self,
        merchants: Iterable[Merchant] = (),
        anzsic_mappings: Iterable[AnzsicMapping] = (),
        tiers: Optional[Sequence[ClassificationTier]] = None,
    ):
        """Initialize classifier.

        Args:
            merchants: Known merchants for the database tier
            anzsic_mappings: Active mappings used to resolve codes to categories
            tiers: Replacement tier list; the default is database, pattern,
                smart-extraction, fallback
        """
        mappings = {m.anzsic_code: m for m in anzsic_mappings if m.is_active}
        self.merchant_index = MerchantIndexTier(merchants, mappings)
        if tiers is None:
            tiers = [
                self.merchant_index,
                PatternTier(mappings),
                SmartExtractionTier(mappings),
                FallbackTier(),
            ]
        self.tiers = list(tiers)

    def classify(self, description: str) -> Classification:
        """Classify a transaction description.

        Args:
            description: Free-text transaction description

        Returns:
            Result of the first tier that matches, or the fallback result
        """
        description = description or ""
        for tier in self.tiers:
            result = tier(description)
            if result is not None:
                logger.debug("%r classified by %s tier", description, result.source.value)
                return result
        return fallback_classification(description)

    def learn(self, merchant: Merchant) -> None:
        """Make a newly stored merchant visible to the database tier."""
        self.merchant_index.add(merchant)


class AIClassifier(ABC):
    """External classifier consulted for low-confidence heuristic results."""

    @abstractmethod
    def classify(self, description: str, enabled_categories: Sequence[str]) -> Classification:
        """Classify a description, restricted to the enabled categories.

        Raises:
            ClassifierUnavailableError: If the classifier cannot answer
        """
        pass
