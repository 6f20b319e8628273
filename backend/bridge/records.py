"""
Field access for Compact generic records.

A generic record lists its field names but, depending on the client version,
may not say which kind each field holds. When the record can report a field
kind we dispatch on it directly; otherwise every typed accessor is tried in a
fixed order and the first one that does not raise wins.
"""

import logging
from typing import Any, Callable, List, Optional, Tuple

logger = logging.getLogger(__name__)

UNKNOWN_FIELD_TYPE = "<unknown field type>"

# Ordered by how often each kind shows up in JSON-originated data.
PROBE_ORDER: Tuple[Tuple[str, str], ...] = (
    ("string", "get_string"),
    ("int32", "get_int32"),
    ("int64", "get_int64"),
    ("float64", "get_float64"),
    ("float32", "get_float32"),
    ("boolean", "get_boolean"),
    ("int16", "get_int16"),
    ("int8", "get_int8"),
    ("compact", "get_generic_record"),
    ("array_of_string", "get_array_of_string"),
    ("array_of_int32", "get_array_of_int32"),
    ("array_of_int64", "get_array_of_int64"),
    ("array_of_float64", "get_array_of_float64"),
    ("array_of_boolean", "get_array_of_boolean"),
    ("array_of_compact", "get_array_of_generic_record"),
    ("nullable_boolean", "get_nullable_boolean"),
    ("nullable_int32", "get_nullable_int32"),
    ("nullable_int64", "get_nullable_int64"),
    ("nullable_float64", "get_nullable_float64"),
    ("decimal", "get_decimal"),
    ("time", "get_time"),
    ("date", "get_date"),
    ("timestamp", "get_timestamp"),
    ("timestamp_with_timezone", "get_timestamp_with_timezone"),
)

_NO_KIND_NAMES = {"NOT_AVAILABLE", "NONE", ""}


class FieldReadError(Exception):
    """A field could not be read with the accessor its kind calls for."""


def is_generic_record(value: Any) -> bool:
    return callable(getattr(value, "get_field_names", None))


def record_field_names(record: Any) -> List[str]:
    return [str(name) for name in record.get_field_names()]


def record_type_name(record: Any) -> str:
    return type(record).__name__


def accessor_for_kind(kind: Any) -> Optional[str]:
    """
    Map a field kind (an enum member or its name) to the accessor name.

    ``COMPACT`` kinds read through the generic-record accessors.
    """
    name = getattr(kind, "name", kind)
    if not isinstance(name, str):
        return None
    name = name.strip().upper()
    if name in _NO_KIND_NAMES:
        return None
    return "get_" + name.lower().replace("compact", "generic_record")


def read_field(record: Any, field_name: str) -> Any:
    """
    Read one field value, dispatching on its kind when the record reports it.

    Raises ``FieldReadError`` when the kind is known but reading it fails.
    Returns ``UNKNOWN_FIELD_TYPE`` when no accessor accepts the field.
    """
    get_kind = getattr(record, "get_field_kind", None)
    if callable(get_kind):
        try:
            accessor_name = accessor_for_kind(get_kind(field_name))
        except Exception as exc:
            raise FieldReadError(f"field kind lookup failed: {exc}") from exc
        if accessor_name is not None:
            accessor = getattr(record, accessor_name, None)
            if callable(accessor):
                try:
                    return accessor(field_name)
                except Exception as exc:
                    raise FieldReadError(str(exc) or type(exc).__name__) from exc
    return probe_field(record, field_name)


def probe_field(record: Any, field_name: str) -> Any:
    for label, accessor_name in PROBE_ORDER:
        accessor: Optional[Callable[[str], Any]] = getattr(record, accessor_name, None)
        if not callable(accessor):
            continue
        try:
            value = accessor(field_name)
        except Exception:
            continue
        if label == "compact" and value is None:
            continue
        return value

    logger.debug("No accessor matched Compact field '%s'", field_name)
    return UNKNOWN_FIELD_TYPE
