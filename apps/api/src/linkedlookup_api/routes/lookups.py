from __future__ import annotations

import logging
from typing import Any

from fastapi import APIRouter, HTTPException, Query, Request
from pydantic import BaseModel, Field

from linkedlookup_connectors import LOOKUPS, UnknownLookupError, available_lookups, create_lookup
from linkedlookup_observability import bind_log_context

router = APIRouter(tags=["lookups"])

logger = logging.getLogger(__name__)


class LookupSourceOut(BaseModel):
    name: str
    default_type: str
    default_limit: int
    min_query_length: int


class LookupResponse(BaseModel):
    source: str
    query: str
    count: int
    results: list[dict[str, Any]] = Field(default_factory=list)


def _parse_fields(raw: str | None) -> list[str] | None:
    if not raw:
        return None
    fields = [part.strip() for part in raw.split(",") if part.strip()]
    return fields or None


@router.get("/lookups", response_model=list[LookupSourceOut])
def list_lookups() -> list[LookupSourceOut]:
    return [
        LookupSourceOut(
            name=name,
            default_type=LOOKUPS[name].DEFAULT_TYPE,
            default_limit=LOOKUPS[name].DEFAULT_LIMIT,
            min_query_length=LOOKUPS[name].MIN_QUERY_LENGTH,
        )
        for name in available_lookups()
    ]


@router.get("/lookups/{source}", response_model=LookupResponse)
async def run_lookup(
    request: Request,
    source: str,
    q: str = Query("", description="Free text or identifier"),
    limit: int | None = Query(None, ge=0, le=100, description="Max results; source default when omitted"),
    fields: str | None = Query(None, description="Comma separated output fields"),
    type: str | None = Query(None, description="Override for @type"),
) -> LookupResponse:
    bind_log_context(connector_value=source)
    try:
        connector = create_lookup(
            source,
            request.app.state.settings,
            fields=_parse_fields(fields),
            type=type,
            http_client=getattr(request.app.state, "http_client", None),
        )
    except UnknownLookupError as e:
        logger.info("lookup_unknown_source", extra={"connector": source})
        raise HTTPException(status_code=404, detail=str(e)) from e

    results = await connector.search(q, limit)
    return LookupResponse(source=source, query=q, count=len(results), results=results)
