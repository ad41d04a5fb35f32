"""
style.css and editor.css generators.
"""

from pathlib import Path
from typing import List, Union

from blockforge.engines.files import AtomicFileWriter
from blockforge.engines.generators.base import ArtifactGenerator, ArtifactKind
from blockforge.engines.generators.css import CompiledCssProvider
from blockforge.kernel.models.content import ContentRecord, FieldKey
from blockforge.kernel.storage import ContentStore


class StyleGenerator(ArtifactGenerator):
    """Writes compiled front-end CSS as-is. Declines when nothing compiled."""

    kind = ArtifactKind.STYLE
    filename = "style.css"
    source_field = FieldKey.STYLE_SOURCE

    def __init__(self, store: ContentStore, writer: AtomicFileWriter, css_provider: CompiledCssProvider):
        super().__init__(store, writer)
        self.css_provider = css_provider

    async def generate(self, record_id: int, output_dir: Union[str, Path]) -> bool:
        css = await self.css_provider.compiled_css_for(record_id, self.kind)
        if not css:
            return False

        record = await self._load_record(record_id)
        await self._write(output_dir, self.output_filename(record), css, record.label)
        return True

    def required_fields(self) -> List[FieldKey]:
        return [self.source_field]

    def output_filename(self, record: ContentRecord) -> str:
        return self.filename


class EditorStyleGenerator(StyleGenerator):
    """Writes compiled editor-only CSS."""

    kind = ArtifactKind.EDITOR_STYLE
    filename = "editor.css"
    source_field = FieldKey.EDITOR_STYLE_SOURCE
