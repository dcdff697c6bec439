"""Reading and writing transaction JSON files for CLI commands."""

import json
from pathlib import Path

from deductit.domain.entities import RawTransaction
from deductit.domain.errors import ValidationError
from deductit.web.serializers import raw_transaction_from_dict, raw_transaction_to_dict


def read_transactions(path: str) -> list[RawTransaction]:
    """Load transactions written by ``deductit parse --output``.

    Accepts either a bare JSON list or an object with a ``transactions`` list,
    such as a saved ``/api/process-pdf`` response.

    Raises:
        ValidationError: If the file is not valid JSON or a record is malformed
    """
    try:
        data = json.loads(Path(path).read_text(encoding="utf-8"))
    except json.JSONDecodeError as e:
        raise ValidationError(f"{path} is not valid JSON: {e}") from e

    if isinstance(data, dict):
        data = data.get("transactions")
    if not isinstance(data, list):
        raise ValidationError(f"{path} does not contain a list of transactions")
    return [raw_transaction_from_dict(item) for item in data]


def write_transactions(path: str, transactions: list[RawTransaction]) -> None:
    Path(path).write_text(
        json.dumps([raw_transaction_to_dict(t) for t in transactions], indent=2),
        encoding="utf-8",
    )
