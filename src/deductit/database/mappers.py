"""Mapper functions to convert between domain models and SQLAlchemy models.

This layer isolates the conversion logic, so services never see ORM objects.
"""

from deductit.domain import entities as domain
from deductit.database.models import (
    Merchant as ORMMerchant,
    AnzsicMapping as ORMAnzsicMapping,
)


def merchant_to_domain(orm_merchant: ORMMerchant) -> domain.Merchant:
    """Convert SQLAlchemy Merchant model to domain Merchant entity."""
    return domain.Merchant(
        id=orm_merchant.id,
        merchant_name=orm_merchant.merchant_name,
        display_name=orm_merchant.display_name,
        anzsic_code=orm_merchant.anzsic_code,
        keywords=tuple(orm_merchant.keywords or ()),
        aliases=tuple(orm_merchant.aliases or ()),
        source=orm_merchant.source,
        confidence=orm_merchant.confidence,
        usage_count=orm_merchant.usage_count,
        is_active=orm_merchant.is_active,
        created_at=orm_merchant.created_at,
        last_used=orm_merchant.last_used,
    )


def anzsic_mapping_to_domain(orm_mapping: ORMAnzsicMapping) -> domain.AnzsicMapping:
    """Convert SQLAlchemy AnzsicMapping model to domain AnzsicMapping entity."""
    return domain.AnzsicMapping(
        id=orm_mapping.id,
        anzsic_code=orm_mapping.anzsic_code,
        anzsic_description=orm_mapping.anzsic_description,
        ato_category=orm_mapping.ato_category,
        is_deductible=orm_mapping.is_deductible,
        confidence_level=orm_mapping.confidence_level,
        source=orm_mapping.source,
        is_active=orm_mapping.is_active,
        created_at=orm_mapping.created_at,
    )
