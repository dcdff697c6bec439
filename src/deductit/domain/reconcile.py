"""Reconciliation of overrides, cached decisions and fresh classifications."""

import logging
from concurrent.futures import ThreadPoolExecutor, as_completed
from dataclasses import replace
from decimal import Decimal
from typing import Optional, Sequence

from deductit.database.base import Database
from deductit.domain.anzsic import AnzsicService
from deductit.domain.categories import OTHER
from deductit.domain.classifier import (
    AIClassifier,
    GENERIC_MERCHANT_NAMES,
    MerchantClassifier,
    fallback_classification,
    is_heuristic,
)
from deductit.domain.entities import (
    CachedClassification,
    Classification,
    ClassificationSource,
    ClassifiedTransaction,
    RawTransaction,
)
from deductit.domain.merchant import MerchantService
from deductit.domain.preferences import PreferenceService

logger = logging.getLogger(__name__)

DEFAULT_MAX_WORKERS = 4


def deduction_amount_for(amount: Decimal, is_business_expense: bool) -> Decimal:
    """Return abs(amount) for a deductible outflow, otherwise zero."""
    if is_business_expense and amount < 0:
        return abs(amount)
    return Decimal("0")


def build_classified(
    transaction: RawTransaction,
    merchant_name: str,
    anzsic_code: str,
    ato_category: str,
    is_business_expense: bool,
    source: ClassificationSource,
    confidence: int,
    auto_classified: bool,
) -> ClassifiedTransaction:
    """Combine a raw transaction with a decision."""
    return ClassifiedTransaction(
        id=transaction.id,
        date=transaction.date,
        description=transaction.description,
        amount=transaction.amount,
        type=transaction.type,
        balance=transaction.balance,
        account_id=transaction.account_id,
        source=transaction.source,
        merchant_name=merchant_name,
        anzsic_code=anzsic_code,
        ato_category=ato_category,
        is_business_expense=is_business_expense,
        deduction_amount=deduction_amount_for(transaction.amount, is_business_expense),
        classification_source=source,
        confidence=confidence,
        auto_classified=auto_classified,
    )


def apply_overrides(
    transaction: RawTransaction,
    manual_override: Optional[bool],
    category_override: Optional[str],
    prior: Optional[CachedClassification] = None,
) -> ClassifiedTransaction:
    """Classify a transaction from the user's own decision.

    A category override makes the transaction deductible under that
    category. A manual override alone sets only the deductible flag and
    keeps the prior category, or "Other" when there is none.
    """
    if prior is not None:
        merchant_name, anzsic_code = prior.merchant_name, prior.anzsic_code
    else:
        guess = fallback_classification(transaction.description)
        merchant_name, anzsic_code = guess.merchant_name, guess.anzsic_code

    if category_override is not None:
        is_deductible, category = True, category_override
    else:
        is_deductible = bool(manual_override)
        category = prior.deduction_type if prior is not None else OTHER

    return build_classified(
        transaction,
        merchant_name=merchant_name,
        anzsic_code=anzsic_code,
        ato_category=category or OTHER,
        is_business_expense=is_deductible,
        source=ClassificationSource.MANUAL,
        confidence=100,
        auto_classified=False,
    )


def from_cache(transaction: RawTransaction, cached: CachedClassification) -> ClassifiedTransaction:
    """Rebuild a classified transaction from a cached decision."""
    return build_classified(
        transaction,
        merchant_name=cached.merchant_name,
        anzsic_code=cached.anzsic_code,
        ato_category=cached.deduction_type or OTHER,
        is_business_expense=cached.is_business_expense,
        source=cached.classification_source,
        confidence=cached.confidence,
        auto_classified=True,
    )


def to_cache(classified: ClassifiedTransaction) -> CachedClassification:
    return CachedClassification(
        transaction_id=classified.id,
        is_business_expense=classified.is_business_expense,
        deduction_amount=classified.deduction_amount,
        deduction_type=classified.ato_category,
        classification_source=classified.classification_source,
        confidence=classified.confidence,
        merchant_name=classified.merchant_name,
        anzsic_code=classified.anzsic_code,
    )


def restrict_to_enabled(
    classification: Classification, enabled_categories: Optional[Sequence[str]]
) -> Classification:
    """Drop deductibility for categories the user has not enabled."""
    if (
        enabled_categories is not None
        and classification.is_deductible
        and classification.ato_category not in enabled_categories
    ):
        return replace(classification, is_deductible=False)
    return classification


def _merchant_key(description: str, classification: Classification) -> str:
    name = classification.merchant_name.strip().lower()
    if name in GENERIC_MERCHANT_NAMES:
        return " ".join(description.lower().split())
    return name


class ClassificationService:
    """Classifies transaction batches for one user.

    Precedence, highest first: the user's overrides, the 24-hour
    classification cache, then the merchant classifier (optionally
    escalated to an AI classifier).
    """

    def __init__(
        self,
        db: Database,
        user_id: str,
        ai_classifier: Optional[AIClassifier] = None,
        max_workers: int = DEFAULT_MAX_WORKERS,
    ):
        """Initialize classification service.

        Args:
            db: Database instance
            user_id: User whose overrides, toggles and cache apply
            ai_classifier: Optional external classifier for heuristic results
            max_workers: Concurrent AI requests
        """
        self.db = db
        self.preferences = PreferenceService(db, user_id)
        self.merchants = MerchantService(db)
        self.anzsic = AnzsicService(db)
        self.ai_classifier = ai_classifier
        self.max_workers = max_workers
        self._classifier: Optional[MerchantClassifier] = None

    @property
    def classifier(self) -> MerchantClassifier:
        """Classifier built from the current reference tables."""
        if self._classifier is None:
            self._classifier = MerchantClassifier(
                merchants=self.merchants.list_merchants(),
                anzsic_mappings=self.anzsic.list_mappings(),
            )
        return self._classifier

    def process(self, transactions: Sequence[RawTransaction]) -> list[ClassifiedTransaction]:
        """Reconcile a batch of transactions into classified transactions.

        Overridden transactions never reach the classifier; their cached
        automatic decision only supplies the merchant and category. Everything
        else is served from the cache when possible, and the cache is then
        replaced by this batch's automatic decisions.

        Args:
            transactions: Transactions with sign-normalized amounts

        Returns:
            Classified transactions in input order
        """
        manual = self.preferences.get_manual_overrides()
        categories = self.preferences.get_category_overrides()
        cache = self.preferences.load_classification_cache()

        results: list[Optional[ClassifiedTransaction]] = [None] * len(transactions)
        pending = []
        overridden = 0
        for i, transaction in enumerate(transactions):
            if transaction.id in manual or transaction.id in categories:
                overridden += 1
                results[i] = apply_overrides(
                    transaction,
                    manual.get(transaction.id),
                    categories.get(transaction.id),
                    cache.get(transaction.id),
                )
            elif transaction.id in cache:
                results[i] = from_cache(transaction, cache[transaction.id])
            else:
                pending.append(i)

        enabled = self.preferences.enabled_categories()
        fresh = self.classify_batch([transactions[i].description for i in pending], enabled)
        for i, classification in zip(pending, fresh):
            results[i] = build_classified(
                transactions[i],
                merchant_name=classification.merchant_name,
                anzsic_code=classification.anzsic_code,
                ato_category=classification.ato_category,
                is_business_expense=classification.is_deductible,
                source=classification.source,
                confidence=classification.confidence,
                auto_classified=True,
            )

        # Overridden ids keep their prior automatic decision so the override
        # resolves the same way on every run
        snapshot = []
        for result in results:
            if result.classification_source != ClassificationSource.MANUAL:
                snapshot.append(to_cache(result))
            elif result.id in cache:
                snapshot.append(cache[result.id])
        self.preferences.save_classification_cache(snapshot)
        logger.info(
            "Processed %d transactions: %d overridden, %d cached, %d classified",
            len(transactions),
            overridden,
            len(transactions) - overridden - len(pending),
            len(pending),
        )
        return results

    def classify_batch(
        self,
        descriptions: Sequence[str],
        enabled_categories: Optional[Sequence[str]] = None,
    ) -> list[Classification]:
        """Classify descriptions without consulting overrides or the cache.

        Heuristic results are escalated to the AI classifier when one is
        configured. Merchants named by heuristic results are stored so the
        database tier finds them next time, and database hits count towards
        merchant usage.

        Args:
            descriptions: Transaction descriptions
            enabled_categories: Categories that may be flagged deductible;
                None allows all

        Returns:
            One classification per description, in order
        """
        results = [self.classifier.classify(description) for description in descriptions]

        if self.ai_classifier is not None:
            results = self._escalate(descriptions, results, enabled_categories)

        for merchant in self.merchants.learn_merchants(results):
            self.classifier.learn(merchant)
        for result in results:
            if result.merchant_id is not None:
                self.merchants.record_usage(result.merchant_id)

        return [restrict_to_enabled(result, enabled_categories) for result in results]

    def _escalate(
        self,
        descriptions: Sequence[str],
        results: list[Classification],
        enabled_categories: Optional[Sequence[str]],
    ) -> list[Classification]:
        """Ask the AI classifier once per unique merchant among heuristic results."""
        representatives: dict[str, str] = {}
        for description, result in zip(descriptions, results):
            if is_heuristic(result):
                representatives.setdefault(_merchant_key(description, result), description)
        if not representatives:
            return results

        categories = list(enabled_categories) if enabled_categories is not None else []
        answers: dict[str, Optional[Classification]] = {}
        with ThreadPoolExecutor(max_workers=self.max_workers) as executor:
            futures = {
                executor.submit(self.ai_classifier.classify, description, categories): key
                for key, description in representatives.items()
            }
            for future in as_completed(futures):
                key = futures[future]
                try:
                    answers[key] = future.result()
                except Exception as e:
                    logger.warning("AI classification failed for %r: %s", key, e)
                    answers[key] = None

        escalated = []
        for description, result in zip(descriptions, results):
            if not is_heuristic(result):
                escalated.append(result)
                continue
            answer = answers.get(_merchant_key(description, result))
            if answer is None:
                escalated.append(
                    replace(result, source=ClassificationSource.FALLBACK, is_deductible=False)
                )
            else:
                escalated.append(replace(answer, source=ClassificationSource.AI))
        return escalated
