"""
Endpoints that serve the synthesized OpenAPI document.
"""

from __future__ import annotations

from fastapi import APIRouter
from fastapi.openapi.docs import get_swagger_ui_html
from fastapi.responses import HTMLResponse, JSONResponse


def build_router(document: dict, *, docs_path: str) -> APIRouter:
    router = APIRouter()
    openapi_url = f"{docs_path}/openapi.json"
    title = str(document.get("info", {}).get("title", "API"))

    @router.get(openapi_url, include_in_schema=False)
    async def openapi_document() -> JSONResponse:
        return JSONResponse(document)

    @router.get(docs_path, include_in_schema=False)
    async def swagger_ui() -> HTMLResponse:
        return get_swagger_ui_html(openapi_url=openapi_url, title=f"{title} - Docs")

    return router
