"""
Shared symbol file generator.
"""

import re
from pathlib import Path
from typing import List, Union

from blockforge.engines.generators.base import ArtifactGenerator, ArtifactKind
from blockforge.kernel.models.content import ContentRecord, ContentType, FieldKey

_NON_ALNUM = re.compile(r"[^a-z0-9]+")
_CAMEL_BOUNDARY = re.compile(r"(?<=[a-z0-9])(?=[A-Z])")


def symbol_file_stem(title: str) -> str:
    """
    Hyphenated lowercase file name for a symbol title.

    "Product Card" and "ProductCard" both give "product-card", the name
    `<ProductCard />` resolves to.
    """
    spaced = _CAMEL_BOUNDARY.sub("-", title.strip())
    return _NON_ALNUM.sub("-", spaced.lower()).strip("-")


class SymbolGenerator(ArtifactGenerator):
    """
    Writes `symbols/<kebab-title>.php`.

    The output directory passed in is the shared symbols directory.
    """

    kind = ArtifactKind.SYMBOL
    content_type = ContentType.SYMBOL

    async def generate(self, record_id: int, output_dir: Union[str, Path]) -> bool:
        source = await self.store.get_field(record_id, FieldKey.SYMBOL_TEMPLATE)
        if not source:
            return False

        record = await self._load_record(record_id)
        await self._write(
            output_dir,
            self.output_filename(record),
            source,
            record.label,
            validate=True,
        )
        return True

    def required_fields(self) -> List[FieldKey]:
        return [FieldKey.SYMBOL_TEMPLATE]

    def output_filename(self, record: ContentRecord) -> str:
        stem = symbol_file_stem(record.title) or symbol_file_stem(record.slug)
        return f"{stem}.php"
