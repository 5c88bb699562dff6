from __future__ import annotations

SERVICE_API = "linkedlookup-api"

JSON_LD_ID = "@id"
JSON_LD_TYPE = "@type"
IDENTITY_FIELDS = (JSON_LD_ID, JSON_LD_TYPE)
