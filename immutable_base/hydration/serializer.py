"""Conversion of records to plain structures and JSON text.

Also holds the JSON decoding helpers shared by construction from JSON
and by patches given as JSON text.
"""

import json as json_module
from enum import Enum
from typing import Any, Dict, Mapping, Optional

from immutable_base.config import HydrationConfig, get_config
from immutable_base.exceptions import InvalidJsonException, SerializationException
from immutable_base.hydration.api import Record
from immutable_base.hydration.schema import get_schema


def to_dict(instance: Record) -> Dict[str, Any]:
    """Convert a record to a dictionary keyed by logical field name.

    Nested records are converted recursively, including those held in
    lists and dictionaries. Collections come out as lists. Enum members
    and other scalars are returned unchanged, so an input that named an
    enum member by name or value does not round-trip to the same mapping;
    :func:`to_json` encodes members by value.
    """
    schema = get_schema(type(instance))
    return {f.name: to_plain(getattr(instance, f.attribute)) for f in schema.fields}


def to_plain(value: Any) -> Any:
    """Convert a single field value to its plain form."""
    if isinstance(value, Record):
        return value.to_dict()
    if isinstance(value, (list, tuple)):
        return [to_plain(item) for item in value]
    if isinstance(value, Mapping):
        return {key: to_plain(item) for key, item in value.items()}
    return value


def _encode_default(obj: Any) -> Any:
    if isinstance(obj, Enum):
        return obj.value
    if isinstance(obj, Record):
        return obj.to_dict()
    raise TypeError(f"Object of type {type(obj).__name__} is not JSON serializable")


def to_json(instance: Record, config: Optional[HydrationConfig] = None) -> str:
    """Encode a record as JSON text.

    Args:
        instance: The record to encode.
        config: Encoding options; the process-wide configuration if None.

    Returns:
        The JSON text.

    Raises:
        SerializationException: If a field value cannot be encoded.
    """
    config = config or get_config()
    try:
        return json_module.dumps(
            to_dict(instance),
            default=_encode_default,
            ensure_ascii=config.json_ensure_ascii,
            sort_keys=config.json_sort_keys,
            indent=config.json_indent,
        )
    except (TypeError, ValueError) as e:
        raise SerializationException(
            f"Cannot encode {type(instance).__name__} as JSON: {e}", cause=e
        )


def decode_json(text: str) -> Any:
    """Decode JSON text.

    Raises:
        InvalidJsonException: If the text is not valid JSON.
    """
    try:
        return json_module.loads(text)
    except (TypeError, ValueError) as e:
        raise InvalidJsonException(f"Invalid JSON: {e}", cause=e)


def decode_json_object(text: str) -> Dict[str, Any]:
    """Decode JSON text whose root must be an object.

    Raises:
        InvalidJsonException: If the text is malformed or not an object.
    """
    data = decode_json(text)
    if not isinstance(data, dict):
        raise InvalidJsonException(
            f"Expected a JSON object, got {type(data).__name__}"
        )
    return data


def decode_structured(text: str) -> Any:
    """Decode text holding a JSON object or array.

    Returns:
        The decoded dict or list, or ``text`` itself when it does not
        hold a JSON object or array.
    """
    stripped = text.strip()
    if not stripped or stripped[0] not in "{[":
        return text
    try:
        data = json_module.loads(stripped)
    except ValueError:
        return text
    if isinstance(data, (dict, list)):
        return data
    return text
