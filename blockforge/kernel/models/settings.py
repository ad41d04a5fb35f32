"""
Block and partial settings tables, and the derived partial-usage relation.
"""

from typing import Optional

from sqlalchemy import Boolean, ForeignKey, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from blockforge.kernel.models.base import Base, TimestampMixin


class BlockSettingsRow(Base, TimestampMixin):
    """
    Per-block configuration.

    List columns keep their storage formats: block types and template
    entries comma-separated, partial selections as JSON arrays of ids.
    """

    __tablename__ = "block_settings"

    block_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("content_records.id", ondelete="CASCADE"),
        primary_key=True,
    )
    category: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    icon: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    supports_inner_blocks: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    allowed_block_types: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    template: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    template_lock: Mapped[Optional[str]] = mapped_column(String(20), nullable=True)
    selected_partials: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    editor_selected_partials: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    supports: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    view_script_module: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)


class PartialSettingsRow(Base, TimestampMixin):
    """Scope of an SCSS partial: global partials are compiled into every block."""

    __tablename__ = "partial_settings"

    partial_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("content_records.id", ondelete="CASCADE"),
        primary_key=True,
    )
    is_global: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False, index=True)
    global_order: Mapped[int] = mapped_column(Integer, default=0, nullable=False)


class PartialUsage(Base):
    """(block, partial) pairs: the block's compiled style includes the partial."""

    __tablename__ = "partial_usage"

    block_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("content_records.id", ondelete="CASCADE"),
        primary_key=True,
    )
    partial_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("content_records.id", ondelete="CASCADE"),
        primary_key=True,
        index=True,
    )
