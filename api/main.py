from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import Sequence

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from apidoc import router as apidoc_router
from apidoc import service as apidoc_service
from core import db, log, settings
from crud import handlers as crud_handlers
from crud import router as crud_router
from introspection import repository as introspection_repository
from introspection import service as introspection_service

logger = logging.getLogger(__name__)


async def initialize(
    *,
    fetch: introspection_repository.FetchAll | None = None,
    execute: crud_handlers.Execute | None = None,
    schema_name: str | None = None,
) -> tuple[dict, list[crud_handlers.Handler]]:
    """
    Inspect the schema once and build the document and handlers from the same
    snapshot. Any failure here aborts startup; nothing is registered partially.
    """
    tables = await introspection_service.inspect(fetch, schema_name=schema_name)
    document = apidoc_service.synthesize(tables)
    handlers = crud_handlers.generate_routes(tables, execute or db.run)
    return document, handlers


def _registered_routes(app: FastAPI) -> set[tuple[str, str]]:
    return {
        (method, route.path)
        for route in app.routes
        for method in (getattr(route, "methods", None) or ())
    }


def install(app: FastAPI, document: dict, handlers: Sequence[crud_handlers.Handler]) -> None:
    app.include_router(apidoc_router.build_router(document, docs_path=settings.docs_path()))

    # Earlier routes win; a generated route on the same method and path never runs.
    fixed = _registered_routes(app)
    for handler in handlers:
        if (handler.method, handler.path) in fixed:
            logger.warning(
                "route_shadowed table=%s operation=%s method=%s path=%s",
                handler.table_name,
                handler.operation.value,
                handler.method,
                handler.path,
            )

    app.include_router(crud_router.build_router(handlers))


@asynccontextmanager
async def lifespan(app: FastAPI):
    log.setup_logging(settings.log_level(), settings.log_format())
    # Initialize the DB pool once per process.
    await db.init_pool()
    try:
        document, handlers = await initialize()
        install(app, document, handlers)
        logger.info("service_ready docs=%s routes=%s", settings.docs_path(), len(handlers))
        yield
    finally:
        await db.close_pool()


# The synthesized document replaces FastAPI's own docs.
app = FastAPI(lifespan=lifespan, docs_url=None, redoc_url=None, openapi_url=None)

if settings.cors_origins():
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins(),
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )


@app.get("/health")
def health() -> dict:
    return {"status": "ok"}


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host=settings.host(), port=settings.port())
