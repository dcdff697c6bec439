"""Abstract database interface."""

from abc import ABC, abstractmethod
from typing import Optional, Any

# Import entities directly to avoid circular import through domain/__init__.py
from deductit.domain.entities import Merchant, AnzsicMapping


class Database(ABC):
    """Abstract database interface for deductit.

    Reference data (merchants, ANZSIC mappings) is never hard-deleted;
    deactivation hides a record from every read below except
    ``get_merchant_by_name(..., include_inactive=True)``.
    """

    @abstractmethod
    def connect(self) -> None:
        """Connect to the database."""
        pass

    @abstractmethod
    def disconnect(self) -> None:
        """Disconnect from the database."""
        pass

    @abstractmethod
    def initialize_schema(self) -> None:
        """Initialize database schema (create tables)."""
        pass

    # Merchant operations
    @abstractmethod
    def create_merchant(
        self,
        merchant_name: str,
        display_name: str,
        anzsic_code: str,
        keywords: list[str],
        aliases: list[str],
        source: str,
        confidence: int,
    ) -> int:
        """Create a merchant, reactivating it if it was deactivated. Returns merchant ID.

        Raises ConflictError if an active merchant already has the name.
        """
        pass

    @abstractmethod
    def bulk_create_merchants(self, merchants: list[dict[str, Any]]) -> int:
        """Insert merchants, skipping names that already exist. Returns number inserted."""
        pass

    @abstractmethod
    def get_merchant_by_name(
        self, merchant_name: str, include_inactive: bool = False
    ) -> Optional[Merchant]:
        """Get merchant by its lowercase canonical name."""
        pass

    @abstractmethod
    def list_merchants(self) -> list[Merchant]:
        """List active merchants."""
        pass

    @abstractmethod
    def search_merchants(self, query: str, limit: int = 20) -> list[Merchant]:
        """Search active merchants whose name or display name contains query.

        Results are ordered by usage count, most used first.
        """
        pass

    @abstractmethod
    def update_merchant(self, merchant_id: int, **fields: Any) -> None:
        """Update merchant fields."""
        pass

    @abstractmethod
    def increment_merchant_usage(self, merchant_id: int) -> None:
        """Increment usage count and stamp last-used time."""
        pass

    @abstractmethod
    def deactivate_merchant(self, merchant_name: str) -> bool:
        """Soft-delete a merchant. Returns False if no active merchant had the name."""
        pass

    @abstractmethod
    def count_merchants(self) -> int:
        """Count active merchants."""
        pass

    @abstractmethod
    def merchant_counts_by(self, field: str) -> dict[str, int]:
        """Count active merchants grouped by 'anzsic_code' or 'source'."""
        pass

    @abstractmethod
    def most_used_merchants(self, limit: int = 10) -> list[Merchant]:
        """Get the active merchants with the highest usage count."""
        pass

    # ANZSIC mapping operations
    @abstractmethod
    def create_anzsic_mapping(
        self,
        anzsic_code: str,
        anzsic_description: str,
        ato_category: str,
        is_deductible: bool,
        confidence_level: int,
        source: str,
    ) -> int:
        """Create a mapping, reactivating it if it was deactivated. Returns mapping ID.

        Raises ConflictError if an active mapping already exists for the code.
        """
        pass

    @abstractmethod
    def bulk_create_anzsic_mappings(self, mappings: list[dict[str, Any]]) -> int:
        """Insert mappings, skipping codes that already exist. Returns number inserted."""
        pass

    @abstractmethod
    def get_anzsic_mapping(self, anzsic_code: str) -> Optional[AnzsicMapping]:
        """Get the active mapping for a zero-padded code."""
        pass

    @abstractmethod
    def list_anzsic_mappings(
        self, deductible_only: bool = False, ato_category: Optional[str] = None
    ) -> list[AnzsicMapping]:
        """List active mappings ordered by code, optionally filtered."""
        pass

    @abstractmethod
    def deactivate_anzsic_mapping(self, anzsic_code: str) -> bool:
        """Soft-delete a mapping. Returns False if no active mapping had the code."""
        pass

    @abstractmethod
    def anzsic_category_counts(self) -> dict[str, dict[str, int]]:
        """Count active mappings per ATO category.

        Returns:
            {category: {"count": n, "deductible": m}}
        """
        pass

    # User setting operations
    @abstractmethod
    def get_user_value(self, user_id: str, key: str) -> Optional[Any]:
        """Get a JSON value stored for a user, or None."""
        pass

    @abstractmethod
    def set_user_value(self, user_id: str, key: str, value: Any) -> None:
        """Store a JSON value for a user, replacing any previous value."""
        pass

    @abstractmethod
    def remove_user_value(self, user_id: str, key: str) -> None:
        """Remove a stored value. Missing keys are ignored."""
        pass
