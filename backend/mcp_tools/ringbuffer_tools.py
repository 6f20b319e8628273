"""
Ringbuffer tools.
"""

from typing import Any, Dict

from .common import call_store, check_access, decode, deny, encode, reject

MAX_READ_COUNT = 1000


def _ringbuffer(client: Any, ringbuffer_name: str) -> Any:
    return client.get_ringbuffer(ringbuffer_name).blocking()


def _as_sequence(value: Any) -> Any:
    if isinstance(value, bool):
        return None
    try:
        sequence = int(value)
    except (TypeError, ValueError):
        return None
    return sequence if sequence >= 0 else None


async def ringbuffer_add(ringbuffer_name: str, value: Any) -> str:
    """Add a value to a Hazelcast Ringbuffer; returns its sequence number."""
    denied = check_access("ringbuffer", ringbuffer_name, "add", write=True)
    if denied:
        return await deny("ringbuffer_add", denied)

    def _op(client: Any) -> Dict[str, Any]:
        sequence = _ringbuffer(client, ringbuffer_name).add(encode(value))
        return {"ringbuffer": ringbuffer_name, "sequence": sequence}

    return await call_store("ringbuffer_add", _op)


async def ringbuffer_read(ringbuffer_name: str, sequence: int) -> str:
    """Read a single item from a Ringbuffer by sequence."""
    denied = check_access("ringbuffer", ringbuffer_name, "read")
    if denied:
        return await deny("ringbuffer_read", denied)
    position = _as_sequence(sequence)
    if position is None:
        return await reject("ringbuffer_read", "sequence must be a non-negative integer.")

    def _op(client: Any) -> Dict[str, Any]:
        item = _ringbuffer(client, ringbuffer_name).read_one(position)
        return {"ringbuffer": ringbuffer_name, "sequence": position, "value": decode(item)}

    return await call_store("ringbuffer_read", _op)


async def ringbuffer_read_many(
    ringbuffer_name: str,
    start_sequence: int,
    min_count: int = 0,
    max_count: int = 100,
) -> str:
    """
    Read a batch of items starting at ``start_sequence``.

    Args:
        ringbuffer_name: Name of the Ringbuffer
        start_sequence: Starting sequence number
        min_count: Minimum number of items to wait for
        max_count: Maximum number of items to read (up to 1000)
    """
    denied = check_access("ringbuffer", ringbuffer_name, "read")
    if denied:
        return await deny("ringbuffer_read_many", denied)
    start = _as_sequence(start_sequence)
    low = _as_sequence(min_count)
    high = _as_sequence(max_count)
    if start is None or low is None or high is None:
        return await reject(
            "ringbuffer_read_many",
            "start_sequence, min_count and max_count must be non-negative integers.",
        )
    if high < 1 or high > MAX_READ_COUNT or low > high:
        return await reject(
            "ringbuffer_read_many",
            f"max_count must be between 1 and {MAX_READ_COUNT} and not less than min_count.",
        )

    def _op(client: Any) -> Dict[str, Any]:
        result = _ringbuffer(client, ringbuffer_name).read_many(start, low, high)
        items = [decode(item) for item in result]
        return {
            "ringbuffer": ringbuffer_name,
            "startSequence": start,
            "itemsRead": len(items),
            "items": items,
        }

    return await call_store("ringbuffer_read_many", _op)


async def ringbuffer_size(ringbuffer_name: str) -> str:
    denied = check_access("ringbuffer", ringbuffer_name, "get")
    if denied:
        return await deny("ringbuffer_size", denied)

    def _op(client: Any) -> Dict[str, Any]:
        return {"ringbuffer": ringbuffer_name, "size": _ringbuffer(client, ringbuffer_name).size()}

    return await call_store("ringbuffer_size", _op)


async def ringbuffer_capacity(ringbuffer_name: str) -> str:
    denied = check_access("ringbuffer", ringbuffer_name, "get")
    if denied:
        return await deny("ringbuffer_capacity", denied)

    def _op(client: Any) -> Dict[str, Any]:
        capacity = _ringbuffer(client, ringbuffer_name).capacity()
        return {"ringbuffer": ringbuffer_name, "capacity": capacity}

    return await call_store("ringbuffer_capacity", _op)


TOOLS = [
    ringbuffer_add,
    ringbuffer_read,
    ringbuffer_read_many,
    ringbuffer_size,
    ringbuffer_capacity,
]
