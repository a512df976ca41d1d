"""Models for custom field definitions and per-record values."""
from __future__ import annotations

from datetime import datetime
from enum import Enum

from sqlalchemy import (
    Boolean,
    DateTime,
    Enum as SQLEnum,
    Index,
    Integer,
    String,
    Text,
    UniqueConstraint,
    func,
)
from sqlalchemy.orm import Mapped, mapped_column

from fieldengine.models.base import Base


class FieldType(str, Enum):
    """Supported custom field data types."""

    TEXT = "text"
    TEXTAREA = "textarea"
    NUMBER = "number"
    DATE = "date"
    DATETIME = "datetime"
    DROPDOWN = "dropdown"
    MULTI_SELECT = "multi_select"
    COUNTRY = "country"
    FILE = "file"
    BOOLEAN = "boolean"
    EMAIL = "email"
    PHONE = "phone"
    URL = "url"


class FieldDefinition(Base):
    """Administrative definition of a dynamic field within a module."""

    __tablename__ = "field_definitions"
    __table_args__ = (
        UniqueConstraint("module", "field_key", name="uq_field_module_key"),
        # Ids are never reused, so values orphaned by a delete stay orphaned.
        {"sqlite_autoincrement": True},
    )

    id: Mapped[int] = mapped_column(primary_key=True)
    module: Mapped[str] = mapped_column(String(50), nullable=False, index=True)
    field_key: Mapped[str] = mapped_column(String(100), nullable=False)
    label_en: Mapped[str] = mapped_column(String(255), nullable=False)
    label_ar: Mapped[str | None] = mapped_column(String(255))
    field_type: Mapped[FieldType] = mapped_column(
        SQLEnum(
            FieldType,
            name="field_type",
            values_callable=lambda enum: [member.value for member in enum],
        ),
        nullable=False,
    )
    # JSON payloads are stored as text; readers tolerate malformed content.
    config: Mapped[str | None] = mapped_column(Text())
    dependencies: Mapped[str | None] = mapped_column(Text())
    validation_rules: Mapped[str | None] = mapped_column(Text())
    is_required: Mapped[bool] = mapped_column(Boolean(), nullable=False, default=False)
    show_in_admin: Mapped[bool] = mapped_column(Boolean(), nullable=False, default=True)
    show_in_user_form: Mapped[bool] = mapped_column(
        Boolean(), nullable=False, default=True
    )
    display_order: Mapped[int] = mapped_column(Integer(), nullable=False, default=0)
    help_text_en: Mapped[str | None] = mapped_column(Text())
    help_text_ar: Mapped[str | None] = mapped_column(Text())
    placeholder_en: Mapped[str | None] = mapped_column(String(255))
    placeholder_ar: Mapped[str | None] = mapped_column(String(255))
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=False), server_default=func.now(), nullable=False
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=False),
        server_default=func.now(),
        onupdate=func.now(),
        nullable=False,
    )


class FieldValue(Base):
    """Value stored against a field definition for one record."""

    __tablename__ = "field_values"
    __table_args__ = (
        UniqueConstraint("field_id", "record_id", name="uq_field_value_record"),
        Index("ix_field_values_module_record", "module", "record_id"),
    )

    id: Mapped[int] = mapped_column(primary_key=True)
    # Not a foreign key: values outlive a deleted definition as orphans.
    field_id: Mapped[int] = mapped_column(Integer(), nullable=False)
    module: Mapped[str] = mapped_column(String(50), nullable=False)
    record_id: Mapped[int] = mapped_column(Integer(), nullable=False)
    value: Mapped[str | None] = mapped_column(Text())
    file_url: Mapped[str | None] = mapped_column(String(500))
    file_name: Mapped[str | None] = mapped_column(String(255))
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=False), server_default=func.now(), nullable=False
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=False),
        server_default=func.now(),
        onupdate=func.now(),
        nullable=False,
    )
