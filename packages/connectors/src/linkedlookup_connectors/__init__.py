"""
Lookup connectors for linked-data sources.

Each connector turns a free-text or identifier query into a list of
JSON-LD-shaped entities. Use ``create_lookup(name)`` to get one by name.
"""

from linkedlookup_connectors.aopwiki import AopWikiConnector
from linkedlookup_connectors.aopwiki_events import AopWikiEventsConnector
from linkedlookup_connectors.aopwiki_relationships import AopWikiRelationshipsConnector
from linkedlookup_connectors.bao import BaoConnector
from linkedlookup_connectors.base import (
    ConnectorConfig,
    ConnectorError,
    Entity,
    LookupConnector,
    UpstreamParseError,
    UpstreamStatusError,
    UpstreamTransportError,
)
from linkedlookup_connectors.cellosaurus import CellosaurusConnector
from linkedlookup_connectors.compoundcloud import CompoundCloudConnector
from linkedlookup_connectors.crossref import CrossrefConnector
from linkedlookup_connectors.media_types import MediaTypeConnector
from linkedlookup_connectors.orcid import OrcidConnector
from linkedlookup_connectors.pubchem import PubChemConnector
from linkedlookup_connectors.registry import (
    LOOKUPS,
    UnknownLookupError,
    available_lookups,
    build_connector_config,
    create_lookup,
)
from linkedlookup_connectors.ror import RorConnector

__all__ = [
    "LOOKUPS",
    "AopWikiConnector",
    "AopWikiEventsConnector",
    "AopWikiRelationshipsConnector",
    "BaoConnector",
    "CellosaurusConnector",
    "CompoundCloudConnector",
    "ConnectorConfig",
    "ConnectorError",
    "CrossrefConnector",
    "Entity",
    "LookupConnector",
    "MediaTypeConnector",
    "OrcidConnector",
    "PubChemConnector",
    "RorConnector",
    "UnknownLookupError",
    "UpstreamParseError",
    "UpstreamStatusError",
    "UpstreamTransportError",
    "available_lookups",
    "build_connector_config",
    "create_lookup",
]
