__all__ = [
    "IDENTITY_FIELDS",
    "JSON_LD_ID",
    "JSON_LD_TYPE",
    "SERVICE_API",
    "Settings",
    "get_settings",
    "resolve_base_url",
]

from linkedlookup_core.constants import IDENTITY_FIELDS, JSON_LD_ID, JSON_LD_TYPE, SERVICE_API
from linkedlookup_core.settings import Settings, get_settings, resolve_base_url
