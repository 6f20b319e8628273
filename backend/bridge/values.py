"""
Conversion between Hazelcast-stored values and the JSON values MCP callers see.

Reading is total: whatever comes back from the cluster is turned into
something JSON can carry, degrading a single field, a malformed document or
an unsupported type instead of failing the whole response. Writing always
produces ``HazelcastJsonValue`` so every consumer of the cluster can read the
data back.
"""

import dataclasses
import enum
import logging
import math
from collections.abc import Iterable, Mapping, Sequence
from datetime import date, datetime, time
from decimal import Decimal
from typing import Any, Dict, Iterator, Optional, Tuple, Union

from hazelcast.core import HazelcastJsonValue

from .codec import EncodingError, JsonCodec, get_json_codec, non_finite_text
from .records import (
    FieldReadError,
    is_generic_record,
    read_field,
    record_field_names,
    record_type_name,
)

logger = logging.getLogger(__name__)

TYPE_KEY = "_type"
ERROR_KEY = "_error"
COMPACT_TYPE_KEY = "_compactType"

SUPPORTED_FORMATS = "HazelcastJsonValue, Compact, JSON primitives"


class DecodedSequence(Sequence):
    """
    Read-only view over stored items that decodes each item on access.

    Large lists coming back from the cluster are not copied into decoded form
    up front; the JSON codec walks the view when the response is written.
    """

    __slots__ = ("_items", "_bridge")

    def __init__(self, items: Tuple[Any, ...], bridge: "ValueBridge") -> None:
        self._items = items
        self._bridge = bridge

    def __len__(self) -> int:
        return len(self._items)

    def __getitem__(self, index: Union[int, slice]) -> Any:
        if isinstance(index, slice):
            return DecodedSequence(self._items[index], self._bridge)
        return self._bridge.decode(self._items[index])

    def __iter__(self) -> Iterator[Any]:
        for item in self._items:
            yield self._bridge.decode(item)

    def __eq__(self, other: Any) -> bool:
        if isinstance(other, (str, bytes)) or not isinstance(other, Sequence):
            return NotImplemented
        return list(self) == list(other)

    __hash__ = None  # type: ignore[assignment]

    def __repr__(self) -> str:
        return f"DecodedSequence({list(self)!r})"


class ValueBridge:
    """Decoder/encoder pair bound to one JSON codec."""

    def __init__(self, codec: Optional[JsonCodec] = None) -> None:
        self.codec = codec or get_json_codec()

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def decode(self, value: Any) -> Any:
        """Convert a stored value to a JSON-compatible value. Never raises."""
        try:
            return self._decode(value)
        except Exception as exc:
            logger.warning(
                "Failed to convert %s to JSON: %s", type(value).__name__, exc
            )
            return self._unsupported(value)

    def _decode(self, value: Any) -> Any:
        if value is None:
            return None

        if isinstance(value, HazelcastJsonValue):
            return self._decode_json_text(value.to_string())

        if isinstance(value, float) and not math.isfinite(value):
            return non_finite_text(value)

        if isinstance(value, (bool, int, float, str)):
            return value

        if is_generic_record(value):
            return self._decode_record(value)

        if isinstance(value, Mapping):
            return {str(key): self.decode(item) for key, item in value.items()}

        if isinstance(value, (datetime, date, time)):
            return value.isoformat()

        if isinstance(value, Decimal):
            return float(value) if value.is_finite() else str(value)

        if isinstance(value, enum.Enum):
            return self.decode(value.value)

        if dataclasses.is_dataclass(value) and not isinstance(value, type):
            return {
                field.name: self.decode(getattr(value, field.name))
                for field in dataclasses.fields(value)
            }

        if isinstance(value, (bytes, bytearray, memoryview)):
            return self._unsupported(value)

        if isinstance(value, Iterable):
            return DecodedSequence(tuple(value), self)

        return self._unsupported(value)

    def _decode_json_text(self, text: str) -> Any:
        try:
            return self.codec.loads(text)
        except (TypeError, ValueError) as exc:
            logger.warning(
                "Failed to parse HazelcastJsonValue, returning as string: %s", exc
            )
            return text

    def _decode_record(self, record: Any) -> Dict[str, Any]:
        result: Dict[str, Any] = {}
        for field_name in record_field_names(record):
            try:
                result[field_name] = self.decode(read_field(record, field_name))
            except FieldReadError as exc:
                logger.warning(
                    "Failed to read Compact field '%s': %s", field_name, exc
                )
                result[field_name] = f"<unreadable: {exc}>"

        result[COMPACT_TYPE_KEY] = record_type_name(record)
        return result

    @staticmethod
    def _unsupported(value: Any) -> Dict[str, str]:
        value_type = type(value)
        return {
            TYPE_KEY: f"{value_type.__module__}.{value_type.__qualname__}",
            ERROR_KEY: (
                "Cannot serialize to JSON. Type "
                f"'{value_type.__name__}' is not supported. "
                f"Supported formats: {SUPPORTED_FORMATS}."
            ),
        }

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    def encode(self, value: Any) -> HazelcastJsonValue:
        """
        Convert a JSON value from an MCP request to ``HazelcastJsonValue``.

        Raises:
            EncodingError: if the value is cyclic or not JSON-serialisable.
        """
        return HazelcastJsonValue(self.codec.dumps(value, strict=True))

    def to_json_text(self, value: Any) -> str:
        """Serialize an already-decoded value for a tool response."""
        return self.codec.dumps(value)


_value_bridge: Optional[ValueBridge] = None


def get_value_bridge() -> ValueBridge:
    """Get the global ValueBridge instance."""
    global _value_bridge
    if _value_bridge is None:
        _value_bridge = ValueBridge(get_json_codec())
    return _value_bridge


__all__ = [
    "COMPACT_TYPE_KEY",
    "DecodedSequence",
    "ERROR_KEY",
    "EncodingError",
    "TYPE_KEY",
    "ValueBridge",
    "get_value_bridge",
]
