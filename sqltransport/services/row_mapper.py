from __future__ import annotations

import json
import warnings
from collections.abc import Mapping
from typing import Any, Dict, Optional

from sqltransport.core.errors import MetadataConflictError, ValidationError
from sqltransport.models.log import V2_EXTRA_COLUMNS

# canonical metadata key -> (legacy spelling, column)
FIELD_KEYS = {
    "ip": ("ip_address", "ip_address"),
    "session": ("sessionId", "session_id"),
}


def normalize_metadata(metadata: Any) -> Dict[str, Any]:
    """Return metadata as a plain dict, wrapping non-mapping values as ``{"meta": value}``."""

    if metadata is None:
        return {}
    if isinstance(metadata, Mapping):
        return dict(metadata)
    return {"meta": metadata}


def encode_json(value: Any) -> str:
    try:
        return json.dumps(value, ensure_ascii=False, sort_keys=True, default=str)
    except (TypeError, ValueError) as exc:
        raise ValidationError(f"metadata is not serializable: {exc}") from exc


def _as_text(value: Any) -> Optional[str]:
    if value is None:
        return None
    if isinstance(value, str):
        return value
    if isinstance(value, (Mapping, list, tuple)):
        return encode_json(value)
    return str(value)


def _lookup(metadata: Dict[str, Any], canonical: str, legacy: str) -> Any:
    if legacy not in metadata:
        return metadata.get(canonical)

    warnings.warn(
        f"metadata key {legacy!r} is deprecated, use {canonical!r}",
        DeprecationWarning,
        stacklevel=4,
    )
    if canonical in metadata and metadata[canonical] != metadata[legacy]:
        raise MetadataConflictError(
            f"metadata keys {canonical!r} and {legacy!r} disagree: "
            f"{metadata[canonical]!r} != {metadata[legacy]!r}"
        )
    return metadata[legacy]


def _extracted_keys(schema_version: int) -> set[str]:
    keys = set(FIELD_KEYS)
    keys.update(legacy for legacy, _ in FIELD_KEYS.values())
    if schema_version >= 2:
        keys.update(V2_EXTRA_COLUMNS)
    return keys


def map_row(level: str, message: str, metadata: Any = None, schema_version: int = 2) -> Dict[str, Any]:
    """Map one log call onto the columns of the log table.

    ``created_at`` is not part of the result; the transport stamps it when
    the call is made. The ``meta`` column receives the nested ``meta`` value
    when there is one, otherwise the whole mapping if it carries anything
    beyond the extracted field keys, otherwise NULL.
    """

    if not isinstance(level, str) or not level:
        raise ValidationError("level must be a non-empty string")
    if not isinstance(message, str) or not message:
        raise ValidationError("message must be a non-empty string")

    meta = normalize_metadata(metadata)
    row: Dict[str, Any] = {"level": level, "msg": message, "meta": None}

    for canonical, (legacy, column) in FIELD_KEYS.items():
        row[column] = _as_text(_lookup(meta, canonical, legacy))

    if schema_version >= 2:
        for key in V2_EXTRA_COLUMNS:
            row[key] = _as_text(meta.get(key))

    if "meta" in meta:
        nested = meta["meta"]
        row["meta"] = encode_json(nested) if nested is not None else None
    elif any(key not in _extracted_keys(schema_version) for key in meta):
        row["meta"] = encode_json(meta)

    return row


__all__ = ["normalize_metadata", "map_row", "encode_json", "FIELD_KEYS"]
