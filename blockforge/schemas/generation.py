"""
Generation report schemas.
"""

from typing import Dict, List

from pydantic import BaseModel, Field, computed_field


class GenerationReport(BaseModel):
    """Outcome of generating every artifact of one record."""

    record_id: int
    output_dir: str
    generated: List[str] = Field(default_factory=list)
    skipped: List[str] = Field(default_factory=list)
    errors: Dict[str, str] = Field(default_factory=dict)

    @computed_field  # type: ignore[prop-decorator]
    @property
    def ok(self) -> bool:
        """True only when no artifact kind failed."""
        return not self.errors
