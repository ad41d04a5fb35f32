"""
Generators Engine - turns stored content into on-disk block packages.

Per block: render.php, style.css, editor.css, view.js, block.json.
Per symbol: symbols/<name>.php.
"""

from blockforge.engines.generators.base import ArtifactGenerator, ArtifactKind
from blockforge.engines.generators.css import CompiledCssProvider, StoredCssProvider
from blockforge.engines.generators.schema_mapper import AttributeSchemaMapper, build_attribute_schema
from blockforge.engines.generators.render import RenderGenerator
from blockforge.engines.generators.manifest import ManifestGenerator
from blockforge.engines.generators.styles import StyleGenerator, EditorStyleGenerator
from blockforge.engines.generators.script import ScriptGenerator
from blockforge.engines.generators.symbol import SymbolGenerator, symbol_file_stem
from blockforge.engines.generators.pipeline import ArtifactPipeline

__all__ = [
    "ArtifactGenerator",
    "ArtifactKind",
    "CompiledCssProvider",
    "StoredCssProvider",
    "AttributeSchemaMapper",
    "build_attribute_schema",
    "RenderGenerator",
    "ManifestGenerator",
    "StyleGenerator",
    "EditorStyleGenerator",
    "ScriptGenerator",
    "SymbolGenerator",
    "symbol_file_stem",
    "ArtifactPipeline",
]
