"""
Exception hierarchy for artifact generation.

Generators propagate these unchanged; the generation pipeline and the API
layer are responsible for reporting them.
"""

from typing import Optional


class ArtifactError(Exception):
    """
    Base exception for all generation failures.

    Carries the human-readable label of the record/artifact involved
    (e.g. 'block "Hero"') plus optional structured details.
    """

    def __init__(self, message: str, label: str = "", details: Optional[dict] = None):
        super().__init__(message)
        self.message = message
        self.label = label
        self.details = details or {}

    def __str__(self) -> str:
        return self.message


class TemplateSyntaxError(ArtifactError):
    """Generated PHP failed validation; never promoted to its destination."""

    def __init__(self, label: str, lint_message: str):
        super().__init__(
            f"PHP syntax error in {label}: {lint_message}",
            label=label,
            details={"lint_message": lint_message},
        )
        self.lint_message = lint_message


class WriteError(ArtifactError):
    """The temporary file could not be created or written."""


class OverwriteError(ArtifactError):
    """An existing destination could not be removed before promotion."""


class PersistError(ArtifactError):
    """Neither rename nor copy could promote the temporary file."""


class RenderError(ArtifactError):
    """A PHP template or symbol could not be rendered."""


class RecordNotFoundError(LookupError):
    """A content record id that does not exist."""

    def __init__(self, record_id: int):
        super().__init__(f"Content record {record_id} does not exist")
        self.record_id = record_id
