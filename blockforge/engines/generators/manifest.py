"""
block.json generator.

The manifest always generates. Asset references are only emitted for
files that exist in the block directory or are produced by the same
generation pass, so block.json never points at a missing file.
"""

import json
import re
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

from blockforge.config import Settings, get_settings
from blockforge.engines.files import AtomicFileWriter
from blockforge.engines.generators.base import ArtifactGenerator, ArtifactKind
from blockforge.engines.generators.css import CompiledCssProvider
from blockforge.engines.generators.schema_mapper import AttributeSchemaMapper
from blockforge.kernel.models.content import ContentRecord, FieldKey
from blockforge.kernel.storage import BlockSettingsRepository, ContentStore
from blockforge.schemas.block_settings import BlockSettings

BLOCK_SCHEMA_URL = "https://schemas.wp.org/trunk/block.json"
API_VERSION = 3
BLOCK_VERSION = "1.0.0"

DEFAULT_CATEGORY = "theme"
DEFAULT_ICON = "smiley"
DEFAULT_ALIGN = ["left", "center", "right", "wide", "full"]

INNER_BLOCKS_MARKER = "<innerblocks"

_TAGS = re.compile(r"<[^>]*>")
_WHITESPACE = re.compile(r"\s+")


def sanitize_text(value: Optional[str]) -> str:
    """Single-line plain text: tags stripped, whitespace collapsed."""
    if not value:
        return ""
    return _WHITESPACE.sub(" ", _TAGS.sub("", value)).strip()


def uses_inner_blocks(settings: BlockSettings, render_text: str) -> bool:
    return settings.supports_inner_blocks or INNER_BLOCKS_MARKER in (render_text or "").lower()


class ManifestGenerator(ArtifactGenerator):
    """Builds and writes block.json for a block record."""

    kind = ArtifactKind.MANIFEST

    def __init__(
        self,
        store: ContentStore,
        writer: AtomicFileWriter,
        settings_repository: BlockSettingsRepository,
        schema_mapper: AttributeSchemaMapper,
        css_provider: CompiledCssProvider,
        app_settings: Optional[Settings] = None,
    ):
        super().__init__(store, writer)
        self.settings_repository = settings_repository
        self.schema_mapper = schema_mapper
        self.css_provider = css_provider
        self.app_settings = app_settings or get_settings()

    async def generate(self, record_id: int, output_dir: Union[str, Path]) -> bool:
        record = await self._load_record(record_id)
        document = await self.build(record, Path(output_dir))
        await self._write(
            output_dir,
            self.output_filename(record),
            json.dumps(document, indent=4),
            record.label,
        )
        return True

    async def build(self, record: ContentRecord, output_dir: Path) -> Dict[str, Any]:
        """The manifest document, keys in block.json order."""
        block_settings = await self.settings_repository.get(record.id) or BlockSettings(block_id=record.id)

        template = await self.store.get_field(record.id, FieldKey.RENDER_TEMPLATE)
        script = await self.store.get_field(record.id, FieldKey.SCRIPT_SOURCE)

        render_text = template
        render_file = output_dir / "render.php"
        if not render_text and render_file.is_file():
            render_text = render_file.read_text(encoding="utf-8", errors="replace")
        inner_blocks = uses_inner_blocks(block_settings, render_text)

        document: Dict[str, Any] = {
            "$schema": BLOCK_SCHEMA_URL,
            "apiVersion": API_VERSION,
            "name": f"{self.app_settings.block_namespace}/{record.slug}",
            "version": BLOCK_VERSION,
            "title": record.title,
            "category": sanitize_text(block_settings.category) or DEFAULT_CATEGORY,
            "icon": sanitize_text(block_settings.icon) or DEFAULT_ICON,
            "description": sanitize_text(block_settings.description),
        }

        default_supports: Dict[str, Any] = {
            "html": inner_blocks,
            "align": list(DEFAULT_ALIGN),
            "anchor": True,
        }
        if script:
            default_supports["interactivity"] = True

        supports = {**default_supports, **(block_settings.supports or {})}
        if inner_blocks:
            supports["html"] = True
            supports.setdefault("innerBlocks", True)
        document["supports"] = supports

        document["textdomain"] = self.app_settings.textdomain

        await self._add_assets(document, record, output_dir, block_settings, template, script)

        attributes = await self.schema_mapper.schema_for(record.id)
        if attributes:
            document["attributes"] = attributes

        return document

    async def _add_assets(
        self,
        document: Dict[str, Any],
        record: ContentRecord,
        output_dir: Path,
        block_settings: BlockSettings,
        template: str,
        script: str,
    ) -> None:
        style = await self.css_provider.compiled_css_for(record.id, ArtifactKind.STYLE)
        editor_style = await self.css_provider.compiled_css_for(record.id, ArtifactKind.EDITOR_STYLE)

        # (key, file, produced by this pass)
        candidates = [
            ("editorScript", "index.js", False),
            ("style", "style.css", bool(style)),
            ("editorStyle", "editor.css", bool(editor_style)),
            ("render", "render.php", bool(template)),
        ]
        for key, filename, generated in candidates:
            if generated or (output_dir / filename).is_file():
                document[key] = f"file:./{filename}"

        if script or (output_dir / "view.js").is_file():
            key = "viewScriptModule" if block_settings.view_script_module else "viewScript"
            document[key] = "file:./view.js"

    def required_fields(self) -> List[FieldKey]:
        return [FieldKey.ATTRIBUTES_SCHEMA]

    def output_filename(self, record: ContentRecord) -> str:
        return "block.json"
