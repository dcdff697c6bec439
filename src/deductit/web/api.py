"""JSON API routes."""

from flask import Blueprint, current_app, jsonify, request

from deductit.domain.aggregation import SummaryService
from deductit.domain.anzsic import AnzsicService
from deductit.domain.categories import resolve_category
from deductit.domain.errors import ValidationError
from deductit.domain.merchant import MerchantService
from deductit.domain.reconcile import ClassificationService
from deductit.web.serializers import (
    anzsic_mapping_to_dict,
    anzsic_statistics_to_dict,
    classification_to_dict,
    classified_from_dict,
    classified_to_dict,
    dashboard_to_dict,
    merchant_match_to_dict,
    merchant_statistics_to_dict,
    raw_transaction_from_dict,
    raw_transaction_to_dict,
    statement_result_to_dict,
)


api = Blueprint("api", __name__, url_prefix="/api")

DEFAULT_USER = "default"


def _services() -> dict:
    return current_app.extensions["deductit"]


def _json_body() -> dict:
    body = request.get_json(silent=True)
    if not isinstance(body, dict):
        raise ValidationError("Request body must be a JSON object")
    return body


def _json_list(body: dict, key: str) -> list:
    value = body.get(key)
    if not isinstance(value, list):
        raise ValidationError(f"'{key}' must be a list")
    return value


def _user_id(body: dict | None = None) -> str:
    if body is not None:
        return body.get("userId") or DEFAULT_USER
    return request.args.get("userId") or DEFAULT_USER


def _open_banking():
    return _services()["open_banking"]


def _open_banking_unavailable():
    return jsonify({"success": False, "error": "Open banking is not configured"}), 503


@api.route("/health")
def health():
    return jsonify({"success": True, "status": "ok"})


@api.route("/process-pdf", methods=["POST"])
def process_pdf():
    """Parse an uploaded bank statement PDF."""
    upload = request.files.get("file")
    year = request.form.get("year")
    try:
        statement_year = int(year) if year else None
    except ValueError as e:
        raise ValidationError(f"Invalid statement year: {year}") from e

    result = _services()["statements"].process(
        content=upload.read() if upload else None,
        filename=upload.filename if upload else "",
        content_type=upload.mimetype if upload else None,
        bank=request.form.get("bank"),
        statement_year=statement_year,
    )
    return jsonify(statement_result_to_dict(result))


@api.route("/classify", methods=["POST"])
def classify():
    """Classify transaction descriptions without overrides or caching."""
    body = _json_body()
    transactions = _json_list(body, "transactions")
    enabled = body.get("enabledCategories")
    if enabled is not None:
        if not isinstance(enabled, list):
            raise ValidationError("'enabledCategories' must be a list")
        enabled = [resolve_category(category) for category in enabled]

    descriptions = []
    for txn in transactions:
        if not isinstance(txn, dict) or not txn.get("description"):
            raise ValidationError("Each transaction needs a description")
        descriptions.append(str(txn["description"]))

    service = ClassificationService(
        _services()["db"], _user_id(body), ai_classifier=_services()["ai_classifier"]
    )
    results = service.classify_batch(descriptions, enabled)
    return jsonify(
        {
            "success": True,
            "results": [
                {"id": txn.get("id"), **classification_to_dict(result)}
                for txn, result in zip(transactions, results)
            ],
        }
    )


@api.route("/merchants/bulk-search", methods=["POST"])
def bulk_search_merchants():
    body = _json_body()
    descriptions = [str(d) for d in _json_list(body, "descriptions")]
    matches, stats = MerchantService(_services()["db"]).bulk_search(descriptions)
    return jsonify(
        {
            "success": True,
            "matches": [merchant_match_to_dict(m) for m in matches],
            "totalMatches": len(matches),
            "stats": stats,
        }
    )


@api.route("/merchants/statistics")
def merchant_statistics():
    stats = MerchantService(_services()["db"]).get_statistics()
    return jsonify({"success": True, "statistics": merchant_statistics_to_dict(stats)})


@api.route("/anzsic-mappings/statistics")
def anzsic_statistics():
    stats = AnzsicService(_services()["db"]).get_statistics()
    return jsonify({"success": True, "statistics": anzsic_statistics_to_dict(stats)})


@api.route("/anzsic-mappings/lookup/<code>")
def lookup_anzsic_mapping(code):
    """Look up one mapping; an unknown code answers with a null mapping."""
    mapping = AnzsicService(_services()["db"]).lookup(code)
    return jsonify(
        {"success": True, "mapping": anzsic_mapping_to_dict(mapping) if mapping else None}
    )


@api.route("/transactions/process", methods=["POST"])
def process_transactions():
    """Reconcile transactions against the user's overrides, cache and toggles."""
    body = _json_body()
    transactions = [raw_transaction_from_dict(t) for t in _json_list(body, "transactions")]
    service = ClassificationService(
        _services()["db"], _user_id(body), ai_classifier=_services()["ai_classifier"]
    )
    classified = service.process(transactions)
    return jsonify(
        {
            "success": True,
            "transactions": [classified_to_dict(t) for t in classified],
            "transactionCount": len(classified),
        }
    )


@api.route("/dashboard", methods=["POST"])
def dashboard():
    body = _json_body()
    transactions = [classified_from_dict(t) for t in _json_list(body, "transactions")]
    report = SummaryService(_services()["db"], _user_id(body)).build_dashboard(
        transactions, financial_year=body.get("financialYear")
    )
    return jsonify({"success": True, **dashboard_to_dict(report)})


@api.route("/open-banking/accounts")
def open_banking_accounts():
    source = _open_banking()
    if source is None:
        return _open_banking_unavailable()
    return jsonify({"success": True, "accounts": source.get_user_accounts(_user_id())})


@api.route("/open-banking/transactions")
def open_banking_transactions():
    source = _open_banking()
    if source is None:
        return _open_banking_unavailable()
    account_ids = request.args.getlist("accountId") or None
    transactions = source.get_user_transactions(_user_id(), account_ids)
    return jsonify(
        {
            "success": True,
            "transactions": [raw_transaction_to_dict(t) for t in transactions],
            "transactionCount": len(transactions),
        }
    )


@api.route("/open-banking/consents")
def open_banking_consents():
    source = _open_banking()
    if source is None:
        return _open_banking_unavailable()
    return jsonify({"success": True, "consents": source.get_user_consents(_user_id())})
