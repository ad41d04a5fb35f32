"""
Compiled CSS providers.

SCSS compilation happens elsewhere; generators only ask for the CSS a
record compiled to, if any.
"""

from abc import ABC, abstractmethod
from typing import Optional

from blockforge.engines.generators.base import ArtifactKind
from blockforge.kernel.models.content import FieldKey
from blockforge.kernel.storage import ContentStore

_COMPILED_FIELDS = {
    ArtifactKind.STYLE: FieldKey.COMPILED_STYLE,
    ArtifactKind.EDITOR_STYLE: FieldKey.COMPILED_EDITOR_STYLE,
}


class CompiledCssProvider(ABC):
    """Source of compiled CSS per record and variant (style / editor_style)."""

    @abstractmethod
    async def compiled_css_for(self, record_id: int, variant: ArtifactKind) -> Optional[str]:
        ...


class StoredCssProvider(CompiledCssProvider):
    """Reads the compiler's output from the record's compiled_* fields."""

    def __init__(self, store: ContentStore):
        self.store = store

    async def compiled_css_for(self, record_id: int, variant: ArtifactKind) -> Optional[str]:
        field = _COMPILED_FIELDS.get(ArtifactKind(variant))
        if field is None:
            raise ValueError(f"No compiled CSS variant {variant!r}")
        css = await self.store.get_field(record_id, field)
        return css or None
