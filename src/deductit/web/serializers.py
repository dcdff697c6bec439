"""JSON representations of domain entities.

Keys are camelCase, matching what browser clients send and expect. The same
shapes are used for transaction files read and written by the CLI.
"""

from datetime import date
from decimal import Decimal
from typing import Any, Optional

from deductit.domain.categories import OTHER
from deductit.domain.entities import (
    AnzsicMapping,
    AnzsicStatistics,
    Classification,
    ClassificationSource,
    ClassifiedTransaction,
    DashboardReport,
    Merchant,
    MerchantMatch,
    MerchantStatistics,
    RawTransaction,
    StatementResult,
    TransactionType,
)
from deductit.domain.errors import ValidationError
from deductit.parsers.normalize import normalize_sign
from deductit.utils.amount_parser import to_decimal
from deductit.utils.date_parser import format_financial_year, parse_date


def _money(value: Optional[Decimal]) -> Optional[float]:
    return None if value is None else float(value)


def _require(data: dict, key: str):
    value = data.get(key)
    if value is None or value == "":
        raise ValidationError(f"Transaction is missing '{key}'")
    return value


def _date(value) -> date:
    if isinstance(value, date):
        return value
    try:
        return parse_date(str(value)[:10])
    except ValueError as e:
        raise ValidationError(str(e)) from e


def _amount(value) -> Decimal:
    try:
        return to_decimal(value)
    except ValueError as e:
        raise ValidationError(str(e)) from e


def _flag(data: dict, key: str, default: bool) -> bool:
    value = data.get(key)
    if value is None:
        return default
    if isinstance(value, bool):
        return value
    if isinstance(value, str) and value.strip().lower() in ("true", "false"):
        return value.strip().lower() == "true"
    raise ValidationError(f"'{key}' must be true or false")


def _confidence(value) -> int:
    if value in (None, ""):
        return 0
    if isinstance(value, bool):
        raise ValidationError(f"Invalid confidence: {value}")
    try:
        confidence = int(value)
    except (TypeError, ValueError) as e:
        raise ValidationError(f"Invalid confidence: {value}") from e
    if not 0 <= confidence <= 100:
        raise ValidationError(f"Confidence must be between 0 and 100: {value}")
    return confidence


def _type(data: dict, amount: Decimal) -> TransactionType:
    value = data.get("type")
    if value:
        try:
            return TransactionType(str(value).lower())
        except ValueError as e:
            raise ValidationError(f"Invalid transaction type: {value}") from e
    return TransactionType.CREDIT if amount > 0 else TransactionType.DEBIT


def raw_transaction_to_dict(txn: RawTransaction) -> dict[str, Any]:
    return {
        "id": txn.id,
        "date": txn.date.isoformat(),
        "description": txn.description,
        "amount": _money(txn.amount),
        "type": txn.type.value,
        "balance": _money(txn.balance),
        "accountId": txn.account_id,
        "source": txn.source,
    }


def raw_transaction_from_dict(data: dict) -> RawTransaction:
    """Build a raw transaction from client JSON.

    ``type`` is optional and inferred from the amount's sign when missing.
    When given, it decides the sign, so a debit is always negative.

    Raises:
        ValidationError: If id, date, description or amount is missing or invalid
    """
    if not isinstance(data, dict):
        raise ValidationError("Each transaction must be an object")
    amount = _amount(_require(data, "amount"))
    balance = data.get("balance")
    transaction = RawTransaction(
        id=str(_require(data, "id")),
        date=_date(_require(data, "date")),
        description=str(_require(data, "description")),
        amount=amount,
        type=_type(data, amount),
        balance=_amount(balance) if balance not in (None, "") else None,
        account_id=data.get("accountId"),
        source=data.get("source"),
    )
    return normalize_sign(transaction)


def classified_to_dict(txn: ClassifiedTransaction) -> dict[str, Any]:
    return {
        "id": txn.id,
        "date": txn.date.isoformat(),
        "description": txn.description,
        "amount": _money(txn.amount),
        "type": txn.type.value,
        "balance": _money(txn.balance),
        "accountId": txn.account_id,
        "source": txn.source,
        "merchantName": txn.merchant_name,
        "anzsicCode": txn.anzsic_code,
        "atoCategory": txn.ato_category,
        "deductionType": txn.deduction_type,
        "isBusinessExpense": txn.is_business_expense,
        "deductionAmount": _money(txn.deduction_amount),
        "classificationSource": txn.classification_source.value,
        "confidence": txn.confidence,
        "autoClassified": txn.auto_classified,
    }


def classified_from_dict(data: dict) -> ClassifiedTransaction:
    """Build a classified transaction from client JSON.

    Classification fields the client omits default to an unclassified,
    non-deductible transaction.

    Raises:
        ValidationError: If a required raw-transaction field is missing or invalid
    """
    raw = raw_transaction_from_dict(data)
    try:
        source = ClassificationSource(data.get("classificationSource") or "fallback")
    except ValueError as e:
        raise ValidationError(f"Invalid classification source: {data['classificationSource']}") from e
    deduction = data.get("deductionAmount")
    return ClassifiedTransaction(
        id=raw.id,
        date=raw.date,
        description=raw.description,
        amount=raw.amount,
        type=raw.type,
        balance=raw.balance,
        account_id=raw.account_id,
        source=raw.source,
        merchant_name=data.get("merchantName") or "Unknown Merchant",
        anzsic_code=data.get("anzsicCode") or "9999",
        ato_category=data.get("atoCategory") or data.get("deductionType") or OTHER,
        is_business_expense=_flag(data, "isBusinessExpense", False),
        deduction_amount=_amount(deduction) if deduction not in (None, "") else Decimal("0"),
        classification_source=source,
        confidence=_confidence(data.get("confidence")),
        auto_classified=_flag(data, "autoClassified", True),
    )


def classification_to_dict(classification: Classification) -> dict[str, Any]:
    return {
        "merchantName": classification.merchant_name,
        "anzsicCode": classification.anzsic_code,
        "anzsicDescription": classification.anzsic_description,
        "atoCategory": classification.ato_category,
        "isDeductible": classification.is_deductible,
        "confidence": classification.confidence,
        "source": classification.source.value,
        "matchedKeyword": classification.matched_keyword,
    }


def merchant_to_dict(merchant: Merchant) -> dict[str, Any]:
    return {
        "id": merchant.id,
        "merchantName": merchant.merchant_name,
        "displayName": merchant.display_name,
        "anzsicCode": merchant.anzsic_code,
        "keywords": list(merchant.keywords),
        "aliases": list(merchant.aliases),
        "source": merchant.source,
        "confidence": merchant.confidence,
        "usageCount": merchant.usage_count,
        "lastUsed": merchant.last_used.isoformat() if merchant.last_used else None,
    }


def merchant_match_to_dict(match: MerchantMatch) -> dict[str, Any]:
    return {
        "description": match.description,
        "extractedMerchant": match.extracted_merchant,
        "merchant": merchant_to_dict(match.merchant),
        "matchType": match.match_type,
        "score": match.score,
    }


def merchant_statistics_to_dict(stats: MerchantStatistics) -> dict[str, Any]:
    return {
        "total": stats.total,
        "byAnzsicCode": stats.by_anzsic_code,
        "bySource": stats.by_source,
        "mostUsed": [merchant_to_dict(m) for m in stats.most_used],
    }


def anzsic_mapping_to_dict(mapping: AnzsicMapping) -> dict[str, Any]:
    return {
        "id": mapping.id,
        "anzsicCode": mapping.anzsic_code,
        "anzsicDescription": mapping.anzsic_description,
        "atoCategory": mapping.ato_category,
        "isDeductible": mapping.is_deductible,
        "confidenceLevel": mapping.confidence_level,
        "source": mapping.source,
    }


def anzsic_statistics_to_dict(stats: AnzsicStatistics) -> dict[str, Any]:
    return {
        "total": stats.total,
        "deductible": stats.deductible,
        "byAtoCategory": stats.by_ato_category,
        "averageConfidence": float(stats.average_confidence),
    }


def statement_result_to_dict(result: StatementResult) -> dict[str, Any]:
    payload = {
        "success": result.success,
        "bank": result.bank,
        "transactions": [raw_transaction_to_dict(t) for t in result.transactions],
        "transactionCount": result.transaction_count,
        "pageCount": result.page_count,
        "metadata": {
            "fileName": result.file_name,
            "fileSize": result.file_size,
            "textLength": result.text_length,
            "rawTextPreview": result.raw_text_preview,
        },
    }
    if result.error:
        payload["error"] = result.error
    return payload


def dashboard_to_dict(report: DashboardReport) -> dict[str, Any]:
    stats = report.stats
    return {
        "financialYear": (
            format_financial_year(report.financial_year) if report.financial_year else None
        ),
        "stats": {
            "totalTransactions": stats.total_transactions,
            "totalIncome": _money(stats.total_income),
            "totalExpenses": _money(stats.total_expenses),
            "totalDeductions": _money(stats.total_deductions),
            "taxSavings": _money(stats.tax_savings),
            "marginalRate": float(stats.marginal_rate),
            "accountsConnected": stats.accounts_connected,
            "lastSync": stats.last_sync.isoformat(),
        },
        "monthlyTrends": [
            {
                "month": trend.month,
                "year": trend.year,
                "monthNumber": trend.month_number,
                "income": _money(trend.income),
                "expenses": _money(trend.expenses),
                "deductions": _money(trend.deductions),
                "savings": _money(trend.savings),
                "transactionCount": trend.transaction_count,
            }
            for trend in report.monthly_trends
        ],
        "categoryBreakdown": [
            {
                "category": item.category,
                "amount": _money(item.amount),
                "count": item.count,
                "percentage": float(item.percentage),
            }
            for item in report.category_breakdown
        ],
    }
