from __future__ import annotations

from fastapi import Request

from inspection_api.services.schema_cache import SchemaCache

_EMPTY_CACHE = SchemaCache({})


def get_schema_cache(request: Request) -> SchemaCache:
    # Requests served before the lifespan finished loading see no tables.
    cache = getattr(request.app.state, "schema_cache", None)
    return cache if cache is not None else _EMPTY_CACHE
