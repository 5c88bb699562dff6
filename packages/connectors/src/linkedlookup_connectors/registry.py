"""
Name -> connector lookup.

Resolves the origin for each source (override, development relay, public
origin) from ``Settings`` so that connectors only ever see a ``ConnectorConfig``.
"""

from __future__ import annotations

from collections.abc import Sequence

import httpx
from linkedlookup_core import Settings, get_settings, resolve_base_url

from linkedlookup_connectors.aopwiki import AopWikiConnector
from linkedlookup_connectors.aopwiki_events import AopWikiEventsConnector
from linkedlookup_connectors.aopwiki_relationships import AopWikiRelationshipsConnector
from linkedlookup_connectors.bao import BaoConnector
from linkedlookup_connectors.base import ConnectorConfig, ConnectorError, LookupConnector
from linkedlookup_connectors.cellosaurus import CellosaurusConnector
from linkedlookup_connectors.compoundcloud import CompoundCloudConnector
from linkedlookup_connectors.crossref import CrossrefConnector
from linkedlookup_connectors.media_types import MediaTypeConnector
from linkedlookup_connectors.orcid import OrcidConnector
from linkedlookup_connectors.pubchem import PubChemConnector
from linkedlookup_connectors.ror import RorConnector

LOOKUPS: dict[str, type] = {
    "ror": RorConnector,
    "cellosaurus": CellosaurusConnector,
    "compoundcloud": CompoundCloudConnector,
    # Older profiles still refer to the Compound Cloud source by this name.
    "compoundwiki": CompoundCloudConnector,
    "pubchem": PubChemConnector,
    "bao": BaoConnector,
    "aopwiki": AopWikiConnector,
    "aopwikiEvents": AopWikiEventsConnector,
    "aopwikiRelationships": AopWikiRelationshipsConnector,
    "orcid": OrcidConnector,
    "mimetypes": MediaTypeConnector,
    "crossref": CrossrefConnector,
}


class UnknownLookupError(ConnectorError, KeyError):
    """No connector registered under the requested name."""

    def __init__(self, name: str) -> None:
        self.name = name
        super().__init__(f"Unknown lookup source: {name}")

    def __str__(self) -> str:
        return self.args[0]


def available_lookups() -> list[str]:
    return sorted(LOOKUPS)


def build_connector_config(
    name: str,
    settings: Settings | None = None,
    *,
    fields: Sequence[str] | None = None,
    type: str | None = None,
) -> ConnectorConfig:
    if name not in LOOKUPS:
        raise UnknownLookupError(name)
    settings = settings or get_settings()
    connector_cls = LOOKUPS[name]
    return ConnectorConfig(
        base_url=resolve_base_url(
            settings,
            name,
            connector_cls.DEFAULT_BASE_URL,
            relay_slug=connector_cls.RELAY_SLUG,
        ),
        headers={"User-Agent": settings.user_agent},
        fields=tuple(fields) if fields else None,
        type=type,
        timeout_seconds=settings.http_timeout_seconds,
    )


def create_lookup(
    name: str,
    settings: Settings | None = None,
    *,
    fields: Sequence[str] | None = None,
    type: str | None = None,
    http_client: httpx.AsyncClient | None = None,
) -> LookupConnector:
    """
    Build a ready-to-use connector.

    Raises:
        UnknownLookupError: ``name`` is not registered
    """
    config = build_connector_config(name, settings, fields=fields, type=type)
    return LOOKUPS[name](config, http_client=http_client)
