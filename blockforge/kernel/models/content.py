"""
Content records - blocks, symbols and SCSS partials with their raw fields.

Records are owned by the content-management backend; the generation core
reads them and only writes fields through explicit apply operations.
"""

from enum import Enum
from typing import List

from sqlalchemy import ForeignKey, Integer, String, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from blockforge.kernel.models.base import Base, TimestampMixin


class ContentType(str, Enum):
    """Taxonomy term classifying a record."""
    BLOCK = "block"
    SYMBOL = "symbol"
    PARTIAL = "partial"


class FieldKey(str, Enum):
    """Named content fields stored per record."""
    RENDER_TEMPLATE = "render_template"
    STYLE_SOURCE = "style_source"
    EDITOR_STYLE_SOURCE = "editor_style_source"
    COMPILED_STYLE = "compiled_style"
    COMPILED_EDITOR_STYLE = "compiled_editor_style"
    SCRIPT_SOURCE = "script_source"
    ATTRIBUTES_SCHEMA = "attributes_schema_json"
    SYMBOL_TEMPLATE = "symbol_template"
    PARTIAL_SOURCE = "partial_source"


class ContentRecord(Base, TimestampMixin):
    """A block, symbol or partial."""

    __tablename__ = "content_records"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    title: Mapped[str] = mapped_column(String(255), default="", nullable=False)
    slug: Mapped[str] = mapped_column(String(200), nullable=False, index=True)
    content_type: Mapped[str] = mapped_column(String(20), nullable=False, index=True)

    fields: Mapped[List["ContentField"]] = relationship(
        "ContentField",
        back_populates="record",
        cascade="all, delete-orphan",
        passive_deletes=True,
        lazy="selectin",
    )

    @property
    def label(self) -> str:
        """Human label used in error messages, e.g. 'block "Hero"'."""
        kind = self.content_type.value if isinstance(self.content_type, ContentType) else str(self.content_type)
        return f'{kind} "{self.title or self.slug}"'


class ContentField(Base):
    """One named text field of a record."""

    __tablename__ = "content_fields"
    __table_args__ = (
        UniqueConstraint("record_id", "field_key", name="uq_content_field_key"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    record_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("content_records.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    field_key: Mapped[str] = mapped_column(String(100), nullable=False)
    value: Mapped[str] = mapped_column(Text, default="", nullable=False)

    record: Mapped["ContentRecord"] = relationship("ContentRecord", back_populates="fields")
