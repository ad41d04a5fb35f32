"""
Kernel Data Models

SQLAlchemy models for content records, block/partial settings and the
partial-usage relation.
"""

from blockforge.kernel.models.base import Base, TimestampMixin
from blockforge.kernel.models.content import ContentRecord, ContentField, ContentType, FieldKey
from blockforge.kernel.models.settings import BlockSettingsRow, PartialSettingsRow, PartialUsage

__all__ = [
    # Base
    "Base",
    "TimestampMixin",
    # Content
    "ContentRecord",
    "ContentField",
    "ContentType",
    "FieldKey",
    # Settings
    "BlockSettingsRow",
    "PartialSettingsRow",
    "PartialUsage",
]
