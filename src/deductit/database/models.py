"""SQLAlchemy models for deductit database."""

from datetime import datetime, UTC
from sqlalchemy import (
    Column,
    Integer,
    String,
    DateTime,
    Boolean,
    JSON,
    UniqueConstraint,
    create_engine,
)
from sqlalchemy.orm import declarative_base, sessionmaker, Session

Base = declarative_base()


class Merchant(Base):
    """Known merchant model."""

    __tablename__ = "merchants"

    id = Column(Integer, primary_key=True)
    merchant_name = Column(String, unique=True, nullable=False, index=True)
    display_name = Column(String, nullable=False)
    anzsic_code = Column(String(4), nullable=False, index=True)
    keywords = Column(JSON, default=list, nullable=False)
    aliases = Column(JSON, default=list, nullable=False)
    source = Column(String, default="manual", nullable=False)
    confidence = Column(Integer, default=80, nullable=False)
    usage_count = Column(Integer, default=0, nullable=False)
    last_used = Column(DateTime, nullable=True)
    is_active = Column(Boolean, default=True, nullable=False)
    created_at = Column(DateTime, default=lambda: datetime.now(UTC), nullable=False)
    updated_at = Column(
        DateTime,
        default=lambda: datetime.now(UTC),
        onupdate=lambda: datetime.now(UTC),
        nullable=False,
    )


class AnzsicMapping(Base):
    """ANZSIC code to ATO category mapping model."""

    __tablename__ = "anzsic_mappings"

    id = Column(Integer, primary_key=True)
    anzsic_code = Column(String(4), unique=True, nullable=False, index=True)
    anzsic_description = Column(String, nullable=False)
    ato_category = Column(String, nullable=False, index=True)
    is_deductible = Column(Boolean, default=False, nullable=False)
    confidence_level = Column(Integer, default=80, nullable=False)
    source = Column(String, default="manual", nullable=False)
    is_active = Column(Boolean, default=True, nullable=False)
    created_at = Column(DateTime, default=lambda: datetime.now(UTC), nullable=False)
    updated_at = Column(
        DateTime,
        default=lambda: datetime.now(UTC),
        onupdate=lambda: datetime.now(UTC),
        nullable=False,
    )


class UserSetting(Base):
    """Per-user key-value setting holding a JSON document."""

    __tablename__ = "user_settings"

    id = Column(Integer, primary_key=True)
    user_id = Column(String, nullable=False)
    key = Column(String, nullable=False)
    value = Column(JSON, nullable=True)
    updated_at = Column(
        DateTime,
        default=lambda: datetime.now(UTC),
        onupdate=lambda: datetime.now(UTC),
        nullable=False,
    )

    __table_args__ = (UniqueConstraint("user_id", "key", name="uq_user_setting_key"),)


def create_session_factory(database_url: str) -> sessionmaker[Session]:
    """Create a SQLAlchemy session factory."""
    engine = create_engine(database_url, echo=False)
    Base.metadata.create_all(engine)
    return sessionmaker(bind=engine)
