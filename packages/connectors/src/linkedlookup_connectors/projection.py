"""
Field projection for canonical entities.

Removes empty values, then optionally restricts an entity to a caller-chosen
field list. ``@id`` and ``@type`` always survive when the entity has them,
and ``name`` survives as well when there is no ``@id``.
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import Any

from linkedlookup_core import IDENTITY_FIELDS, JSON_LD_ID

from linkedlookup_connectors.base import Entity


def is_empty(value: Any) -> bool:
    if value is None:
        return True
    if isinstance(value, str):
        return not value.strip()
    if isinstance(value, (list, tuple, dict, set)):
        return len(value) == 0
    return False


def clean_entity(entity: Entity | None) -> Entity:
    """Copy of ``entity`` without empty-valued fields, order preserved."""
    if not entity:
        return {}
    return {key: value for key, value in entity.items() if not is_empty(value)}


def project(entity: Entity | None, fields: Sequence[str] | None = None) -> Entity | None:
    """
    Clean ``entity`` and keep only ``fields`` (plus identity fields).

    Returns None when nothing is left.
    """
    cleaned = clean_entity(entity)
    if not fields:
        return cleaned or None

    projection: Entity = {}
    for field in fields:
        if field in cleaned:
            projection[field] = cleaned[field]
    for field in IDENTITY_FIELDS:
        if field not in projection and field in cleaned:
            projection[field] = cleaned[field]
    if JSON_LD_ID not in cleaned and "name" in cleaned and "name" not in projection:
        projection["name"] = cleaned["name"]
    return projection or None


class FieldProjector:
    """``project`` bound to one connector's configured field list."""

    def __init__(self, fields: Sequence[str] | None = None):
        self.fields = tuple(fields) if fields else None

    def __call__(self, entity: Entity | None) -> Entity | None:
        return project(entity, self.fields)
