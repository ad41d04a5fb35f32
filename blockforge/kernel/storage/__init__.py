"""
Repositories over the kernel models.
"""

from blockforge.kernel.storage.content_store import ContentStore
from blockforge.kernel.storage.block_settings_repository import BlockSettingsRepository
from blockforge.kernel.storage.partial_settings_repository import PartialSettingsRepository

__all__ = [
    "ContentStore",
    "BlockSettingsRepository",
    "PartialSettingsRepository",
]
