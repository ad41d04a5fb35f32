"""
Symbol endpoints.
"""

from fastapi import APIRouter

from blockforge.api.deps import DbSession, Pipeline, require_record
from blockforge.kernel.models.content import ContentType
from blockforge.schemas.common import ErrorResponse
from blockforge.schemas.generation import GenerationReport

router = APIRouter(responses={404: {"model": ErrorResponse}})


@router.post("/{symbol_id}/generate", response_model=GenerationReport)
async def generate_symbol(symbol_id: int, db: DbSession, pipeline: Pipeline):
    """Write the shared symbol file."""
    await require_record(db, symbol_id, ContentType.SYMBOL)
    return await pipeline.generate(symbol_id)
