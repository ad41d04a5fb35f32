"""
render.php generator.
"""

from pathlib import Path
from typing import List, Union

from blockforge.engines.generators.base import ArtifactGenerator, ArtifactKind
from blockforge.engines.templating import expand_block_props, has_block_props
from blockforge.kernel.models.content import ContentRecord, FieldKey
from blockforge.logging_config import get_logger

logger = get_logger(__name__)


class RenderGenerator(ArtifactGenerator):
    """
    Writes the block's server-side render template.

    Only the blockProps placeholder is expanded here. Symbol tags stay in
    the file and are resolved when the block is rendered.
    """

    kind = ArtifactKind.RENDER

    async def generate(self, record_id: int, output_dir: Union[str, Path]) -> bool:
        template = await self.store.get_field(record_id, FieldKey.RENDER_TEMPLATE)
        if not template:
            return False

        record = await self._load_record(record_id)
        if has_block_props(template):
            logger.debug("Expanding blockProps placeholder for %s", record.label)

        await self._write(
            output_dir,
            self.output_filename(record),
            expand_block_props(template),
            record.label,
            validate=True,
        )
        return True

    def required_fields(self) -> List[FieldKey]:
        return [FieldKey.RENDER_TEMPLATE]

    def output_filename(self, record: ContentRecord) -> str:
        return "render.php"
