"""Metadata sanitization for vector-store writes.

Chroma only accepts flat metadata whose values are strings, numbers,
booleans or null.  Loaders attach richer values (a PDF's document-info
dictionary, lists of authors), so every document passes through
:func:`sanitize_metadata` before it is split and stored.
"""

from __future__ import annotations

import json
from collections.abc import Mapping
from typing import Any

from ragapp.models.rag import MetadataValue

_PRIMITIVE_TYPES = (str, int, float, bool)


def _serialize(value: Any) -> str:
    try:
        return json.dumps(value, sort_keys=True, default=str)
    except TypeError:
        # Mixed key types cannot be sorted.
        return json.dumps(value, default=str)


def sanitize_metadata(metadata: Mapping[Any, Any]) -> dict[str, MetadataValue]:
    """Return a copy of *metadata* containing only primitive values.

    Primitive values (``str``, ``int``, ``float``, ``bool``, ``None``) are
    kept as they are.  Any other value (dicts, lists, dates, ...) is
    replaced by its JSON text.  Keys are coerced to ``str``.

    The function is pure and idempotent::

        sanitize_metadata(sanitize_metadata(m)) == sanitize_metadata(m)
    """
    cleaned: dict[str, MetadataValue] = {}
    for key, value in metadata.items():
        if value is None or isinstance(value, _PRIMITIVE_TYPES):
            cleaned[str(key)] = value
        else:
            cleaned[str(key)] = _serialize(value)
    return cleaned
