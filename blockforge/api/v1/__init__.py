"""
API v1 routes.
"""

from fastapi import APIRouter

from blockforge.api.v1 import blocks, partials, symbols

router = APIRouter()

router.include_router(blocks.router, prefix="/blocks", tags=["Blocks"])
router.include_router(symbols.router, prefix="/symbols", tags=["Symbols"])
router.include_router(partials.router, prefix="/partials", tags=["Partials"])
