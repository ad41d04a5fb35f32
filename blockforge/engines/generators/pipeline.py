"""
Generation pipeline - runs every applicable generator for one record.
"""

from pathlib import Path
from typing import List, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from blockforge.config import Settings, get_settings
from blockforge.engines.dependencies import PartialUsageTracker
from blockforge.engines.files import AtomicFileWriter
from blockforge.engines.generators.base import ArtifactGenerator
from blockforge.engines.generators.css import CompiledCssProvider, StoredCssProvider
from blockforge.engines.generators.manifest import ManifestGenerator
from blockforge.engines.generators.render import RenderGenerator
from blockforge.engines.generators.schema_mapper import AttributeSchemaMapper
from blockforge.engines.generators.script import ScriptGenerator
from blockforge.engines.generators.styles import EditorStyleGenerator, StyleGenerator
from blockforge.engines.generators.symbol import SymbolGenerator
from blockforge.engines.syntax import PhpSyntaxValidator
from blockforge.errors import ArtifactError, RecordNotFoundError
from blockforge.kernel.models.content import ContentRecord, ContentType
from blockforge.kernel.storage import BlockSettingsRepository, ContentStore
from blockforge.logging_config import generation_scope, get_logger
from blockforge.schemas.generation import GenerationReport

logger = get_logger(__name__)


class ArtifactPipeline:
    """
    Generates the files of blocks and symbols.

    Block artifacts are produced in a fixed order with block.json last, so
    its existence checks see the files written by the same pass. A failing
    artifact is recorded in the report and the remaining kinds still run.

    Usage:
        pipeline = ArtifactPipeline(session)
        report = await pipeline.generate(block_id)
    """

    def __init__(
        self,
        session: AsyncSession,
        settings: Optional[Settings] = None,
        validator: Optional[PhpSyntaxValidator] = None,
        css_provider: Optional[CompiledCssProvider] = None,
    ):
        self.session = session
        self.settings = settings or get_settings()
        self.store = ContentStore(session)
        self.writer = AtomicFileWriter(validator or PhpSyntaxValidator.from_settings(self.settings))
        self.css_provider = css_provider or StoredCssProvider(self.store)

        block_settings = BlockSettingsRepository(
            session, use_json_query=self.settings.json_membership_query_enabled
        )
        self.block_generators: List[ArtifactGenerator] = [
            RenderGenerator(self.store, self.writer),
            StyleGenerator(self.store, self.writer, self.css_provider),
            EditorStyleGenerator(self.store, self.writer, self.css_provider),
            ScriptGenerator(self.store, self.writer),
            ManifestGenerator(
                self.store,
                self.writer,
                block_settings,
                AttributeSchemaMapper(self.store),
                self.css_provider,
                self.settings,
            ),
        ]
        self.symbol_generators: List[ArtifactGenerator] = [
            SymbolGenerator(self.store, self.writer),
        ]

    def output_dir_for(self, record: ContentRecord) -> Path:
        if record.content_type == ContentType.SYMBOL.value:
            return self.settings.symbols_path
        return self.settings.blocks_path / (record.slug or str(record.id))

    async def generate(self, record_id: int) -> GenerationReport:
        """
        Generate every artifact of a block or symbol.

        Raises:
            RecordNotFoundError: the record does not exist
        """
        record = await self.store.get_record(record_id)
        if record is None:
            raise RecordNotFoundError(record_id)

        generators = [
            g for g in self.block_generators + self.symbol_generators
            if g.can_generate(record.content_type)
        ]
        output_dir = self.output_dir_for(record)
        report = GenerationReport(record_id=record_id, output_dir=str(output_dir))
        if not generators:
            logger.info("Nothing to generate for %s", record.label)
            return report

        with generation_scope(record_id):
            output_dir.mkdir(parents=True, exist_ok=True)
            for generator in generators:
                kind = generator.kind.value
                try:
                    written = await generator.generate(record_id, output_dir)
                except ArtifactError as e:
                    logger.error(
                        "Generating %s failed: %s",
                        kind,
                        e.message,
                        extra={"artifact_kind": kind, "label": e.label},
                    )
                    report.errors[kind] = e.message
                    continue

                if written:
                    report.generated.append(kind)
                else:
                    report.skipped.append(kind)

            logger.info(
                "Generated %s: %d written, %d skipped, %d failed",
                record.label,
                len(report.generated),
                len(report.skipped),
                len(report.errors),
            )
        return report

    async def regenerate_affected(self, partial_id: int) -> List[GenerationReport]:
        """Regenerate every block that depends on a partial, sequentially."""
        tracker = PartialUsageTracker(self.session, self.settings)
        block_ids = sorted(await tracker.affected_blocks(partial_id))
        logger.info("Partial %s affects %d blocks", partial_id, len(block_ids))

        reports = []
        for block_id in block_ids:
            reports.append(await self.generate(block_id))
        return reports
