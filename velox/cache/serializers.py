"""
VeloxCache — Value encoders used by the storing backends.

Every backend that keeps values (memory and redis) stores bytes, not the
objects themselves: a fetch always yields a fresh copy the caller may
mutate freely. Pickle is the default because cached dispatch data holds
``Route`` instances; JSON is there for tiers shared with other programs.
"""

from __future__ import annotations

import json
import logging
import pickle
from typing import Any

logger = logging.getLogger("velox.cache.serializers")

# What ``dumps`` may raise for a value the encoder cannot handle
SERIALIZATION_ERRORS = (pickle.PicklingError, TypeError, AttributeError, ValueError, OverflowError)
# What ``loads`` may raise for a corrupt or foreign payload
DESERIALIZATION_ERRORS = (
    pickle.UnpicklingError, EOFError, ValueError, TypeError, AttributeError, ImportError, IndexError,
)


class PickleCacheSerializer:
    """Encodes any picklable object. Only point it at a trusted store."""

    name = "pickle"

    def serialize(self, value: Any) -> bytes:
        try:
            return pickle.dumps(value, protocol=pickle.HIGHEST_PROTOCOL)
        except SERIALIZATION_ERRORS as e:
            logger.warning(f"Cannot pickle {type(value).__name__}: {e}")
            raise

    def deserialize(self, data: bytes) -> Any:
        try:
            return pickle.loads(data)
        except (pickle.UnpicklingError, EOFError) as e:
            logger.warning(f"Corrupt pickle payload ({len(data)} bytes): {e}")
            raise


class JsonCacheSerializer:
    """Encodes strings, numbers, lists and dicts as UTF-8 JSON."""

    name = "json"

    def serialize(self, value: Any) -> bytes:
        try:
            text = json.dumps(value, ensure_ascii=False)
        except (TypeError, ValueError, OverflowError) as e:
            logger.warning(f"Cannot encode {type(value).__name__} as JSON: {e}")
            raise
        return text.encode("utf-8")

    def deserialize(self, data: bytes) -> Any:
        try:
            return json.loads(data.decode("utf-8"))
        except (json.JSONDecodeError, UnicodeDecodeError) as e:
            logger.warning(f"Corrupt JSON payload ({len(data)} bytes): {e}")
            raise


_SERIALIZERS = {cls.name: cls for cls in (PickleCacheSerializer, JsonCacheSerializer)}


def get_serializer(name: str = "pickle"):
    """Return a new serializer for ``name`` ("pickle" or "json")."""
    try:
        return _SERIALIZERS[name]()
    except KeyError:
        raise ValueError(
            f"Unknown serializer {name!r}; choose one of {sorted(_SERIALIZERS)}"
        ) from None


def deserialize_or_miss(serializer, key: str, payload: bytes, miss: Any) -> Any:
    """Decode a stored payload; an undecodable one counts as a cache miss."""
    try:
        return serializer.deserialize(payload)
    except DESERIALIZATION_ERRORS as e:
        logger.warning(f"Treating '{key}' as a miss: stored payload cannot be decoded ({e!r})")
        return miss
