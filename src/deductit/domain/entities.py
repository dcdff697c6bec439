"""Domain model entities for deductit.

These are pure data classes representing business concepts, independent of
database schema and of the transport (CLI or HTTP) used to present them.
"""

from dataclasses import dataclass, field
from datetime import datetime, date
from decimal import Decimal
from enum import Enum
from typing import Optional


class TransactionType(str, Enum):
    """Direction of money movement for a transaction."""

    DEBIT = "debit"
    CREDIT = "credit"


class ClassificationSource(str, Enum):
    """Which tier or decision produced a classification."""

    DATABASE = "database"
    PATTERN = "pattern"
    SMART_EXTRACTION = "smart-extraction"
    AI = "ai"
    MANUAL = "manual"
    FALLBACK = "fallback"


class MerchantSource(str, Enum):
    """Provenance of a merchant reference record."""

    MANUAL = "manual"
    AI = "ai"
    SEED = "seed"
    USER = "user"
    LEARNED = "learned"


@dataclass(frozen=True)
class RawTransaction:
    """Transaction as produced by a bank statement parser."""

    id: str
    date: date
    description: str
    amount: Decimal
    type: TransactionType
    balance: Optional[Decimal] = None
    account_id: Optional[str] = None
    source: Optional[str] = None


@dataclass(frozen=True)
class Classification:
    """Result of classifying a single transaction description."""

    merchant_name: str
    anzsic_code: str
    anzsic_description: str
    ato_category: str
    is_deductible: bool
    confidence: int
    source: ClassificationSource
    matched_keyword: Optional[str] = None
    merchant_id: Optional[int] = None


@dataclass(frozen=True)
class ClassifiedTransaction:
    """Raw transaction enriched with a reconciled classification decision.

    ``deduction_amount`` equals ``abs(amount)`` when the transaction is a
    business expense and an outflow, and zero otherwise.
    """

    id: str
    date: date
    description: str
    amount: Decimal
    type: TransactionType
    merchant_name: str
    anzsic_code: str
    ato_category: str
    is_business_expense: bool
    deduction_amount: Decimal
    classification_source: ClassificationSource
    confidence: int
    auto_classified: bool
    balance: Optional[Decimal] = None
    account_id: Optional[str] = None
    source: Optional[str] = None

    @property
    def deduction_type(self) -> str:
        """Category the deduction is claimed under."""
        return self.ato_category

    @property
    def is_outflow(self) -> bool:
        return self.amount < 0


@dataclass(frozen=True)
class Merchant:
    """Known merchant reference entity."""

    id: int
    merchant_name: str
    display_name: str
    anzsic_code: str
    keywords: tuple[str, ...]
    aliases: tuple[str, ...]
    source: str
    confidence: int
    usage_count: int
    is_active: bool
    created_at: datetime
    last_used: Optional[datetime] = None


@dataclass(frozen=True)
class AnzsicMapping:
    """ANZSIC industry code to ATO deduction category mapping."""

    id: int
    anzsic_code: str
    anzsic_description: str
    ato_category: str
    is_deductible: bool
    confidence_level: int
    source: str
    is_active: bool
    created_at: datetime


@dataclass(frozen=True)
class CachedClassification:
    """Classification decision held in the per-user classification cache."""

    transaction_id: str
    is_business_expense: bool
    deduction_amount: Decimal
    deduction_type: str
    classification_source: ClassificationSource
    confidence: int
    merchant_name: str = "Unknown Merchant"
    anzsic_code: str = "9999"


@dataclass(frozen=True)
class DashboardStats:
    """Headline figures for a set of classified transactions."""

    total_transactions: int
    total_income: Decimal
    total_expenses: Decimal
    total_deductions: Decimal
    tax_savings: Decimal
    marginal_rate: Decimal
    accounts_connected: int
    last_sync: datetime


@dataclass(frozen=True)
class MonthlyTrend:
    """Income, expense and deduction totals for one calendar month."""

    month: str
    year: int
    month_number: int
    income: Decimal
    expenses: Decimal
    deductions: Decimal
    savings: Decimal
    transaction_count: int


@dataclass(frozen=True)
class CategoryBreakdown:
    """Deduction total and share for one ATO category."""

    category: str
    amount: Decimal
    count: int
    percentage: Decimal


@dataclass(frozen=True)
class ExtractedText:
    """Plain text pulled out of a PDF document."""

    text: str
    page_count: int


@dataclass(frozen=True)
class StatementResult:
    """Outcome of processing one uploaded bank statement."""

    success: bool
    bank: str
    file_name: str
    file_size: int
    page_count: int
    text_length: int
    transactions: list[RawTransaction] = field(default_factory=list)
    raw_text_preview: str = ""
    error: Optional[str] = None

    @property
    def transaction_count(self) -> int:
        return len(self.transactions)


@dataclass(frozen=True)
class MerchantMatch:
    """Bulk-search match of a description against the merchant table."""

    description: str
    extracted_merchant: str
    merchant: Merchant
    match_type: str
    score: int


@dataclass(frozen=True)
class MerchantStatistics:
    """Aggregate figures over active merchants."""

    total: int
    by_anzsic_code: dict[str, int]
    by_source: dict[str, int]
    most_used: list[Merchant]


@dataclass(frozen=True)
class AnzsicStatistics:
    """Aggregate figures over active ANZSIC mappings."""

    total: int
    deductible: int
    by_ato_category: dict[str, dict[str, int]]
    average_confidence: Decimal


@dataclass(frozen=True)
class DashboardReport:
    """Dashboard statistics, trends and breakdown for one period."""

    stats: DashboardStats
    monthly_trends: list[MonthlyTrend]
    category_breakdown: list[CategoryBreakdown]
    financial_year: Optional[int] = None
