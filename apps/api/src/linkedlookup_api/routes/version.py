from __future__ import annotations

from fastapi import APIRouter, Request

from linkedlookup_connectors import available_lookups
from linkedlookup_core import SERVICE_API

router = APIRouter()


@router.get("/version")
def version(request: Request) -> dict[str, object]:
    build = request.app.state.build_info
    return {
        "name": SERVICE_API,
        "version": build["version"],
        "git_sha": build["git_sha"],
        "build_time": build["build_time"],
        "lookups": len(available_lookups()),
    }
