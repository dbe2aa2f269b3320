"""FastAPI lookup service.

Serves the remote side of the uniqueness lookup contract:

    GET /lookup/{collection}?q=<value>  ->  JSON array of matching entries

An empty array means the value is free; anything else means it is taken.
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, HTTPException, Query
from pydantic import BaseModel

from fieldrules.api.store import LookupStore
from fieldrules.settings import EngineSettings, configure_logging

logger = logging.getLogger(__name__)


class HealthResponse(BaseModel):
    status: str
    collections: list[str]


def create_app(store: LookupStore | None = None) -> FastAPI:
    """Create the lookup service.

    When ``store`` is omitted the collections are loaded at startup from
    ``FIELDRULES_LOOKUP_DATA`` (an empty store if unset).
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        if app.state.store is None:
            settings = EngineSettings.from_env()
            configure_logging(settings.log_level)
            if settings.lookup_data is not None:
                app.state.store = LookupStore.from_yaml(settings.lookup_data)
                logger.info("Loaded lookup collections from %s", settings.lookup_data)
            else:
                logger.warning("FIELDRULES_LOOKUP_DATA is not set; serving no collections")
                app.state.store = LookupStore()
        yield

    app = FastAPI(title="fieldrules lookup service", lifespan=lifespan)
    app.state.store = store

    def _store() -> LookupStore:
        if app.state.store is None:
            raise HTTPException(status_code=503, detail="Lookup store not initialized")
        return app.state.store

    @app.get("/health", response_model=HealthResponse)
    async def health() -> HealthResponse:
        return HealthResponse(status="ok", collections=_store().list_collections())

    @app.get("/lookup/{collection}", response_model=list[str])
    async def lookup(collection: str, q: str = Query("", description="Value to look up")) -> list[str]:
        store = _store()
        if not store.has_collection(collection):
            raise HTTPException(status_code=404, detail=f"Unknown collection '{collection}'")
        matches = store.find(collection, q)
        logger.debug("lookup %s q=%r -> %d match(es)", collection, q, len(matches))
        return matches

    return app
