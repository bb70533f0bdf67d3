"""
Register generated handlers on a FastAPI router.
"""

from __future__ import annotations

from typing import Sequence

from fastapi import APIRouter

from .handlers import Handler


def build_router(handlers: Sequence[Handler]) -> APIRouter:
    router = APIRouter()
    for handler in handlers:
        # The synthesized document describes these routes; keep them out of
        # FastAPI's own schema generation.
        router.add_api_route(
            handler.path,
            handler.endpoint,
            methods=[handler.method],
            name=handler.name,
            include_in_schema=False,
        )
    return router
