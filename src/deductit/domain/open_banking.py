"""Open-banking transaction source backed by the Basiq aggregator API."""

import logging
import os
import time
from abc import ABC, abstractmethod
from typing import Any, Callable, Optional, Sequence

import requests

from deductit.domain.entities import RawTransaction, TransactionType
from deductit.domain.errors import UpstreamError, ValidationError
from deductit.parsers.normalize import normalize_sign
from deductit.utils.amount_parser import to_decimal
from deductit.utils.date_parser import parse_date

logger = logging.getLogger(__name__)

BASIQ_BASE_URL = "https://au-api.basiq.io"
BASIQ_VERSION = "3.0"
BANK_CONNECTION_SOURCE = "bank-connection"
DEFAULT_TOKEN_LIFETIME = 3600
# Refresh a little early so a token never expires mid-request
TOKEN_REFRESH_MARGIN = 60
REQUEST_TIMEOUT = 30


class OpenBankingSource(ABC):
    """A provider of a user's connected bank accounts and transactions."""

    @abstractmethod
    def get_user_accounts(self, user_id: str) -> list[dict[str, Any]]:
        """Return the user's connected accounts."""
        pass

    @abstractmethod
    def get_user_transactions(
        self, user_id: str, account_ids: Optional[Sequence[str]] = None
    ) -> list[RawTransaction]:
        """Return the user's transactions, optionally for some accounts only."""
        pass

    @abstractmethod
    def get_user_consents(self, user_id: str) -> list[dict[str, Any]]:
        """Return the user's data-sharing consents."""
        pass


def transaction_from_basiq(record: dict[str, Any]) -> RawTransaction:
    """Map a Basiq transaction record to a raw transaction.

    Basiq amounts are signed strings, negative for money out; ``direction``
    decides the transaction type when present, and the sign follows the type.

    Raises:
        ValueError: If the record has no usable amount or date
    """
    amount = to_decimal(record.get("amount"))
    direction = (record.get("direction") or "").lower()
    if direction == "credit":
        txn_type = TransactionType.CREDIT
    elif direction == "debit":
        txn_type = TransactionType.DEBIT
    else:
        txn_type = TransactionType.CREDIT if amount > 0 else TransactionType.DEBIT

    posted = record.get("transactionDate") or record.get("postDate")
    if not posted:
        raise ValueError(f"Transaction {record.get('id')} has no date")

    balance = record.get("balance")
    transaction = RawTransaction(
        id=str(record["id"]),
        date=parse_date(posted[:10]),
        description=(record.get("description") or "").strip(),
        amount=amount,
        type=txn_type,
        balance=to_decimal(balance) if balance not in (None, "") else None,
        account_id=record.get("account"),
        source=BANK_CONNECTION_SOURCE,
    )
    return normalize_sign(transaction)


class BasiqClient(OpenBankingSource):
    """Read-only client for the Basiq open-banking API.

    Uses a server-access token obtained from the API key and reuses it until
    shortly before it expires.
    """

    def __init__(
        self,
        api_key: Optional[str] = None,
        session: Optional[requests.Session] = None,
        base_url: str = BASIQ_BASE_URL,
        clock: Callable[[], float] = time.monotonic,
    ):
        """Initialize Basiq client.

        Args:
            api_key: Basiq API key, or a ready-made "Bearer ..." token.
                Defaults to BASIQ_API_KEY, then BASIQ_TOKEN.
            session: HTTP session; replaced in tests
            base_url: API root
            clock: Monotonic seconds, used for token expiry

        Raises:
            ValidationError: If no credentials are available
        """
        api_key = api_key or os.getenv("BASIQ_API_KEY") or os.getenv("BASIQ_TOKEN")
        if not api_key:
            raise ValidationError("BASIQ_API_KEY is not configured")
        self.api_key = api_key.strip()
        self.base_url = base_url.rstrip("/")
        self.session = session or requests.Session()
        self.session.headers.update({"basiq-version": BASIQ_VERSION, "Accept": "application/json"})
        self.clock = clock
        self._token: Optional[str] = None
        self._token_expires_at = 0.0

    def _authorization(self) -> str:
        if self.api_key.startswith("Bearer "):
            return self.api_key
        if self._token is None or self.clock() >= self._token_expires_at:
            self._refresh_token()
        return self._token

    def _refresh_token(self) -> None:
        try:
            response = self.session.post(
                f"{self.base_url}/token",
                headers={
                    "Authorization": f"Basic {self.api_key}",
                    "Content-Type": "application/x-www-form-urlencoded",
                    "basiq-version": BASIQ_VERSION,
                },
                data="scope=SERVER_ACCESS",
                timeout=REQUEST_TIMEOUT,
            )
            response.raise_for_status()
            payload = response.json()
        except requests.RequestException as e:
            logger.error("Basiq token request failed: %s", e)
            raise UpstreamError(f"Failed to authenticate with Basiq: {e}") from e

        token = payload.get("access_token")
        if not token:
            raise UpstreamError("Basiq token response did not include an access token")
        lifetime = int(payload.get("expires_in") or DEFAULT_TOKEN_LIFETIME)
        self._token = f"Bearer {token}"
        self._token_expires_at = self.clock() + max(lifetime - TOKEN_REFRESH_MARGIN, 0)
        logger.debug("Obtained Basiq token valid for %ds", lifetime)

    def _get(self, path: str, params: Optional[dict[str, str]] = None) -> dict[str, Any]:
        try:
            response = self.session.get(
                f"{self.base_url}{path}",
                headers={"Authorization": self._authorization()},
                params=params,
                timeout=REQUEST_TIMEOUT,
            )
            response.raise_for_status()
            return response.json()
        except requests.RequestException as e:
            logger.error("Basiq request %s failed: %s", path, e)
            raise UpstreamError(f"Basiq request failed: {e}") from e

    def get_user_accounts(self, user_id: str) -> list[dict[str, Any]]:
        return self._get(f"/users/{user_id}/accounts").get("data", [])

    def get_user_transactions(
        self, user_id: str, account_ids: Optional[Sequence[str]] = None
    ) -> list[RawTransaction]:
        """Fetch and map the user's transactions.

        Records that cannot be mapped are logged and skipped.

        Args:
            user_id: Basiq user id
            account_ids: Restrict to these accounts; None fetches all

        Returns:
            Transactions with Basiq's signed amounts
        """
        params = None
        if account_ids:
            params = {
                "filter": ",".join(f"account.id.eq('{account_id}')" for account_id in account_ids)
            }
        records = self._get(f"/users/{user_id}/transactions", params).get("data", [])

        transactions = []
        for record in records:
            try:
                transactions.append(transaction_from_basiq(record))
            except (KeyError, ValueError) as e:
                logger.warning("Skipping Basiq transaction %s: %s", record.get("id"), e)
        logger.info("Fetched %d transactions for %s", len(transactions), user_id)
        return transactions

    def get_user_consents(self, user_id: str) -> list[dict[str, Any]]:
        return self._get(f"/users/{user_id}/consents").get("data", [])
