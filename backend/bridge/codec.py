"""
Process-wide JSON codec shared by the value bridge and the MCP tool layer.
"""

import json
import math
from collections.abc import Mapping, Sequence
from typing import Any, Optional


class EncodingError(ValueError):
    """Raised when a value cannot be written as JSON text."""


def non_finite_text(value: float) -> str:
    """Spell NaN and the infinities the way JSON parsers print them."""
    if math.isnan(value):
        return "NaN"
    return "Infinity" if value > 0 else "-Infinity"


class JsonCodec:
    """
    Thin wrapper over the stdlib ``json`` module.

    ``dumps`` knows how to materialise the lazy sequence views produced by the
    decoder, so decoded values can be serialised without an eager copy.
    """

    def __init__(self, *, ensure_ascii: bool = False) -> None:
        self._ensure_ascii = ensure_ascii

    def loads(self, text: str) -> Any:
        # NaN and Infinity tokens stay strings so the result is standard JSON.
        return json.loads(text, parse_constant=str)

    def dumps(self, value: Any, *, strict: bool = False) -> str:
        """
        Serialize ``value``.

        With ``strict=True`` NaN/Infinity are rejected and any failure is
        raised as ``EncodingError``; this is the mode used for store writes.
        """
        if not strict:
            return json.dumps(
                value, ensure_ascii=self._ensure_ascii, default=self._default
            )
        try:
            return json.dumps(
                value,
                ensure_ascii=self._ensure_ascii,
                allow_nan=False,
                default=self._default,
            )
        except (TypeError, ValueError, RecursionError) as exc:
            raise EncodingError(f"Cannot convert value to JSON: {exc}") from exc

    @staticmethod
    def _default(value: Any) -> Any:
        if isinstance(value, Mapping):
            return dict(value)
        if isinstance(value, Sequence) and not isinstance(value, (str, bytes)):
            return list(value)
        raise TypeError(
            f"Object of type {type(value).__name__} is not JSON serializable"
        )


_json_codec: Optional[JsonCodec] = None


def get_json_codec() -> JsonCodec:
    """Get the global JsonCodec instance."""
    global _json_codec
    if _json_codec is None:
        _json_codec = JsonCodec()
    return _json_codec
