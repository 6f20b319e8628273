import enum
import json
import threading
from datetime import date, datetime, timezone
from decimal import Decimal

import pytest
from hazelcast.core import HazelcastJsonValue

from bridge import EncodingError, ValueBridge
from bridge.codec import JsonCodec
from bridge.records import PROBE_ORDER, UNKNOWN_FIELD_TYPE, accessor_for_kind
from bridge.values import COMPACT_TYPE_KEY, ERROR_KEY, TYPE_KEY, DecodedSequence

_ACCESSOR_LABELS = {accessor: label for label, accessor in PROBE_ORDER}


class ProbeRecord:
    """Generic record that cannot report field kinds; accessors raise on mismatch."""

    def __init__(self, fields):
        # field name -> (probe label, value)
        self._fields = fields
        self.calls = []

    def get_field_names(self):
        return list(self._fields)

    def _read(self, label, field_name):
        self.calls.append((label, field_name))
        kind, value = self._fields[field_name]
        if kind != label:
            raise TypeError(f"{field_name} is not {label}")
        return value

    def __getattr__(self, attr):
        label = _ACCESSOR_LABELS.get(attr)
        if label is None:
            raise AttributeError(attr)
        return lambda field_name: self._read(label, field_name)


class FieldKind(enum.Enum):
    NOT_AVAILABLE = 0
    STRING = 1
    INT32 = 2
    COMPACT = 3
    ARRAY_OF_COMPACT = 4


class KindRecord(ProbeRecord):
    """Generic record that reports each field's kind."""

    def __init__(self, fields, kinds, broken=()):
        super().__init__(fields)
        self._kinds = kinds
        self._broken = set(broken)

    def get_field_kind(self, field_name):
        return self._kinds.get(field_name, FieldKind.NOT_AVAILABLE)

    def _read(self, label, field_name):
        if field_name in self._broken:
            self.calls.append((label, field_name))
            raise RuntimeError("schema mismatch")
        return super()._read(label, field_name)


class Color(enum.Enum):
    RED = "red"


def _reject_constant(token):
    raise ValueError(f"non-standard JSON constant {token}")


@pytest.fixture
def bridge() -> ValueBridge:
    return ValueBridge(JsonCodec())


def test_decode_json_value_returns_mapping(bridge) -> None:
    value = HazelcastJsonValue('{"name":"Alice","age":30}')
    assert bridge.decode(value) == {"name": "Alice", "age": 30}


def test_decode_malformed_json_value_returns_raw_text(bridge) -> None:
    value = HazelcastJsonValue("not valid json{{{")
    assert bridge.decode(value) == "not valid json{{{"


def test_encode_null_produces_null_payload(bridge) -> None:
    assert bridge.encode(None).to_string() == "null"


def test_encode_mapping_payload_parses_back(bridge) -> None:
    encoded = bridge.encode({"name": "Bob", "active": True})
    assert isinstance(encoded, HazelcastJsonValue)
    assert json.loads(encoded.to_string()) == {"name": "Bob", "active": True}


def test_decode_unrepresentable_object_returns_diagnostic_only(bridge) -> None:
    decoded = bridge.decode(threading.Lock())
    assert set(decoded) == {TYPE_KEY, ERROR_KEY}
    assert "is not supported" in decoded[ERROR_KEY]
    assert "HazelcastJsonValue, Compact, JSON primitives" in decoded[ERROR_KEY]


@pytest.mark.parametrize(
    "value",
    [
        None,
        True,
        0,
        -17,
        2.5,
        "",
        "héllo",
        [],
        [1, "two", None, [3.0]],
        {},
        {"nested": {"list": [1, {"deep": False}]}, "empty": ""},
    ],
)
def test_encode_then_decode_round_trips_json_values(bridge, value) -> None:
    assert bridge.decode(bridge.encode(value)) == value


def test_encode_rejects_cyclic_value(bridge) -> None:
    cyclic = {}
    cyclic["self"] = cyclic
    with pytest.raises(EncodingError):
        bridge.encode(cyclic)


def test_encode_rejects_non_finite_numbers(bridge) -> None:
    with pytest.raises(EncodingError):
        bridge.encode({"score": float("nan")})


def test_encoding_error_is_a_value_error() -> None:
    assert issubclass(EncodingError, ValueError)


def test_decode_primitives_pass_through(bridge) -> None:
    assert bridge.decode("text") == "text"
    assert bridge.decode(42) == 42
    assert bridge.decode(1.5) == 1.5
    assert bridge.decode(False) is False
    assert bridge.decode(None) is None


def test_decode_non_finite_float_becomes_text(bridge) -> None:
    assert bridge.decode(float("inf")) == "Infinity"
    assert bridge.decode(float("-inf")) == "-Infinity"
    assert bridge.decode(float("nan")) == "NaN"

    text = bridge.to_json_text({"value": bridge.decode([float("inf"), 1.5])})

    assert json.loads(text, parse_constant=_reject_constant) == {"value": ["Infinity", 1.5]}


def test_decode_json_value_with_nan_token_is_standard_json(bridge) -> None:
    decoded = bridge.decode(HazelcastJsonValue('{"x": NaN, "y": -Infinity, "z": 1}'))

    assert decoded == {"x": "NaN", "y": "-Infinity", "z": 1}
    text = bridge.to_json_text({"value": decoded})
    assert json.loads(text, parse_constant=_reject_constant)["value"]["x"] == "NaN"


def test_decode_mapping_stringifies_keys_and_decodes_values(bridge) -> None:
    decoded = bridge.decode({1: HazelcastJsonValue('{"a": 1}'), "b": threading.Lock()})
    assert decoded["1"] == {"a": 1}
    assert set(decoded["b"]) == {TYPE_KEY, ERROR_KEY}


def test_decode_sequence_is_lazy_view(bridge) -> None:
    items = [HazelcastJsonValue('{"n": 1}'), 2, threading.Lock()]
    decoded = bridge.decode(items)

    assert isinstance(decoded, DecodedSequence)
    assert len(decoded) == 3
    assert decoded[0] == {"n": 1}
    assert decoded[1] == 2
    assert set(decoded[2]) == {TYPE_KEY, ERROR_KEY}
    assert decoded[:2] == [{"n": 1}, 2]

    text = bridge.to_json_text({"items": decoded})
    assert json.loads(text)["items"][1] == 2


def test_decode_temporal_decimal_and_enum_values(bridge) -> None:
    stamp = datetime(2024, 5, 1, 12, 30, tzinfo=timezone.utc)
    assert bridge.decode(stamp) == "2024-05-01T12:30:00+00:00"
    assert bridge.decode(date(2024, 5, 1)) == "2024-05-01"
    assert bridge.decode(Decimal("12.50")) == 12.5
    assert bridge.decode(Decimal("NaN")) == "NaN"
    assert bridge.decode(Color.RED) == "red"


def test_decode_bytes_is_unsupported(bridge) -> None:
    decoded = bridge.decode(b"\x00\x01")
    assert decoded[TYPE_KEY] == "builtins.bytes"


def test_decode_never_raises_for_broken_iterables(bridge) -> None:
    class Exploding:
        def __iter__(self):
            raise RuntimeError("boom")

    decoded = bridge.decode(Exploding())
    assert set(decoded) == {TYPE_KEY, ERROR_KEY}


def test_decode_probe_record_reads_every_field(bridge) -> None:
    record = ProbeRecord(
        {
            "name": ("string", "Alice"),
            "age": ("int32", 30),
            "balance": ("float64", 10.5),
            "tags": ("array_of_string", ["a", "b"]),
            "joined": ("date", date(2020, 1, 2)),
        }
    )

    decoded = bridge.decode(record)

    assert decoded == {
        "name": "Alice",
        "age": 30,
        "balance": 10.5,
        "tags": ["a", "b"],
        "joined": "2020-01-02",
        COMPACT_TYPE_KEY: "ProbeRecord",
    }


def test_probe_order_is_deterministic(bridge) -> None:
    record = ProbeRecord({"count": ("int64", 7)})

    assert bridge.decode(record)["count"] == 7
    assert [label for label, _ in record.calls] == ["string", "int32", "int64"]


def test_string_accessor_wins_when_later_accessor_also_succeeds(bridge) -> None:
    class Lenient(ProbeRecord):
        def _read(self, label, field_name):
            self.calls.append((label, field_name))
            if label == "string":
                return "42"
            if label == "int32":
                return 42
            raise TypeError(label)

    record = Lenient({"code": ("int32", 42)})

    assert bridge.decode(record)["code"] == "42"
    assert record.calls == [("string", "code")]


def test_unreadable_field_without_kinds_keeps_sibling_fields(bridge) -> None:
    class HalfBroken(ProbeRecord):
        def _read(self, label, field_name):
            if field_name == "corrupt":
                self.calls.append((label, field_name))
                raise RuntimeError("schema mismatch")
            return super()._read(label, field_name)

    record = HalfBroken({"name": ("string", "Alice"), "corrupt": ("int32", 1), "age": ("int32", 30)})

    decoded = bridge.decode(record)

    assert decoded["name"] == "Alice"
    assert decoded["age"] == 30
    assert decoded["corrupt"] == UNKNOWN_FIELD_TYPE
    assert len([call for call in record.calls if call[1] == "corrupt"]) > 1


def test_probe_skips_null_nested_record(bridge) -> None:
    class NullNested(ProbeRecord):
        def get_generic_record(self, field_name):
            self.calls.append(("compact", field_name))
            return None

    record = NullNested({"ids": ("array_of_int32", [1, 2])})

    assert bridge.decode(record)["ids"] == [1, 2]
    assert ("compact", "ids") in record.calls


def test_probe_falls_back_to_unknown_marker(bridge) -> None:
    record = ProbeRecord({"mystery": ("no_such_kind", object())})
    assert bridge.decode(record)["mystery"] == UNKNOWN_FIELD_TYPE


def test_nested_records_decode_recursively(bridge) -> None:
    inner = ProbeRecord({"city": ("string", "Oslo")})
    outer = ProbeRecord({"address": ("compact", inner)})

    decoded = bridge.decode(outer)

    assert decoded["address"] == {"city": "Oslo", COMPACT_TYPE_KEY: "ProbeRecord"}


def test_kind_dispatch_calls_single_accessor(bridge) -> None:
    record = KindRecord(
        {"name": ("string", "Alice"), "age": ("int32", 30)},
        {"name": FieldKind.STRING, "age": FieldKind.INT32},
    )

    decoded = bridge.decode(record)

    assert decoded["name"] == "Alice"
    assert decoded["age"] == 30
    assert record.calls == [("string", "name"), ("int32", "age")]


def test_kind_dispatch_isolates_failing_field(bridge) -> None:
    record = KindRecord(
        {"name": ("string", "Alice"), "age": ("int32", 30)},
        {"name": FieldKind.STRING, "age": FieldKind.INT32},
        broken={"age"},
    )

    decoded = bridge.decode(record)

    assert decoded["name"] == "Alice"
    assert decoded["age"] == "<unreadable: schema mismatch>"
    assert decoded[COMPACT_TYPE_KEY] == "KindRecord"


def test_kind_not_available_uses_probe(bridge) -> None:
    record = KindRecord({"score": ("float64", 1.25)}, {})
    assert bridge.decode(record)["score"] == 1.25


def test_reserved_key_in_record_is_overwritten_by_type_name(bridge) -> None:
    record = ProbeRecord({COMPACT_TYPE_KEY: ("string", "user-value")})
    assert bridge.decode(record)[COMPACT_TYPE_KEY] == "ProbeRecord"


@pytest.mark.parametrize(
    "kind,expected",
    [
        (FieldKind.STRING, "get_string"),
        (FieldKind.COMPACT, "get_generic_record"),
        (FieldKind.ARRAY_OF_COMPACT, "get_array_of_generic_record"),
        ("nullable_int32", "get_nullable_int32"),
        (FieldKind.NOT_AVAILABLE, None),
        (None, None),
    ],
)
def test_accessor_for_kind(kind, expected) -> None:
    assert accessor_for_kind(kind) == expected
