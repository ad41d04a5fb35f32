"""
view.js generator.
"""

from pathlib import Path
from typing import List, Union

from blockforge.engines.generators.base import ArtifactGenerator, ArtifactKind
from blockforge.kernel.models.content import ContentRecord, FieldKey


class ScriptGenerator(ArtifactGenerator):
    """Writes the front-end view script unchanged."""

    kind = ArtifactKind.SCRIPT

    async def generate(self, record_id: int, output_dir: Union[str, Path]) -> bool:
        script = await self.store.get_field(record_id, FieldKey.SCRIPT_SOURCE)
        if not script:
            return False

        record = await self._load_record(record_id)
        await self._write(output_dir, self.output_filename(record), script, record.label)
        return True

    def required_fields(self) -> List[FieldKey]:
        return [FieldKey.SCRIPT_SOURCE]

    def output_filename(self, record: ContentRecord) -> str:
        return "view.js"
