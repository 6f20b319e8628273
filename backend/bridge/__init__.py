"""
Value bridge between Hazelcast-native values and MCP JSON payloads.
"""

from .codec import EncodingError, JsonCodec, get_json_codec
from .values import ValueBridge, get_value_bridge
from .vector_capability import (
    VECTOR_UNAVAILABLE_MESSAGE,
    BoundVectorCapability,
    CapabilityError,
    StubVectorCapability,
    VectorCapability,
    create_vector_capability,
)

__all__ = [
    "EncodingError",
    "JsonCodec",
    "get_json_codec",
    "ValueBridge",
    "get_value_bridge",
    "VECTOR_UNAVAILABLE_MESSAGE",
    "BoundVectorCapability",
    "CapabilityError",
    "StubVectorCapability",
    "VectorCapability",
    "create_vector_capability",
]
