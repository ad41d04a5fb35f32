"""
Shared generator interface.
"""

import asyncio
from abc import ABC, abstractmethod
from enum import Enum
from pathlib import Path
from typing import List, Union

from blockforge.engines.files import AtomicFileWriter
from blockforge.errors import RecordNotFoundError
from blockforge.kernel.models.content import ContentRecord, ContentType, FieldKey
from blockforge.kernel.storage import ContentStore


class ArtifactKind(str, Enum):
    """Kinds of generated files."""
    MANIFEST = "manifest"
    RENDER = "render"
    STYLE = "style"
    EDITOR_STYLE = "editor_style"
    SCRIPT = "script"
    SYMBOL = "symbol"


def _content_type_value(content_type: Union[ContentType, str]) -> str:
    if isinstance(content_type, ContentType):
        return content_type.value
    return str(content_type)


class ArtifactGenerator(ABC):
    """
    Produces one artifact for one content record.

    `generate` returns False when the record has nothing to generate for
    this kind (a considered skip, not an error). Write and validation
    failures propagate unchanged.
    """

    kind: ArtifactKind
    content_type: ContentType = ContentType.BLOCK

    def __init__(self, store: ContentStore, writer: AtomicFileWriter):
        self.store = store
        self.writer = writer

    def can_generate(self, content_type: Union[ContentType, str]) -> bool:
        return _content_type_value(content_type) == self.content_type.value

    @abstractmethod
    async def generate(self, record_id: int, output_dir: Union[str, Path]) -> bool:
        ...

    @abstractmethod
    def required_fields(self) -> List[FieldKey]:
        ...

    @abstractmethod
    def output_filename(self, record: ContentRecord) -> str:
        ...

    async def _load_record(self, record_id: int) -> ContentRecord:
        record = await self.store.get_record(record_id)
        if record is None:
            raise RecordNotFoundError(record_id)
        return record

    async def _write(
        self,
        output_dir: Union[str, Path],
        filename: str,
        content: str,
        label: str,
        validate: bool = False,
    ) -> Path:
        # Lint and file I/O block; keep them off the event loop
        return await asyncio.to_thread(self.writer.write, output_dir, filename, content, label, validate)
