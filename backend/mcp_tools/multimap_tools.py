"""
MultiMap tools.
"""

from typing import Any, Dict

from .common import (
    DEFAULT_LIMIT,
    bounded_limit,
    call_store,
    check_access,
    decode,
    deny,
    encode,
)


def _multimap(client: Any, multimap_name: str) -> Any:
    return client.get_multi_map(multimap_name).blocking()


async def multimap_put(multimap_name: str, key: str, value: Any) -> str:
    """
    Add a value under ``key`` in a Hazelcast MultiMap.

    Args:
        multimap_name: Name of the MultiMap
        key: Key to add under
        value: Value to add (any JSON)
    """
    denied = check_access("multimap", multimap_name, "put", write=True)
    if denied:
        return await deny("multimap_put", denied)

    def _op(client: Any) -> Dict[str, Any]:
        added = bool(_multimap(client, multimap_name).put(key, encode(value)))
        return {"multimap": multimap_name, "key": key, "added": added}

    return await call_store("multimap_put", _op)


async def multimap_get(multimap_name: str, key: str) -> str:
    """Read every value stored under ``key``."""
    denied = check_access("multimap", multimap_name, "get")
    if denied:
        return await deny("multimap_get", denied)

    def _op(client: Any) -> Dict[str, Any]:
        values = [decode(item) for item in _multimap(client, multimap_name).get(key) or []]
        return {"multimap": multimap_name, "key": key, "count": len(values), "values": values}

    return await call_store("multimap_get", _op)


async def multimap_remove(multimap_name: str, key: str, value: Any = None) -> str:
    """
    Remove one value, or every value when ``value`` is omitted, under ``key``.
    """
    denied = check_access("multimap", multimap_name, "remove", write=True)
    if denied:
        return await deny("multimap_remove", denied)
    remove_all = value is None

    def _op(client: Any) -> Dict[str, Any]:
        multimap = _multimap(client, multimap_name)
        if remove_all:
            removed = [decode(item) for item in multimap.remove_all(key) or []]
            return {
                "multimap": multimap_name,
                "key": key,
                "removedCount": len(removed),
                "removed": removed,
            }
        removed_one = bool(multimap.remove(key, encode(value)))
        return {
            "multimap": multimap_name,
            "key": key,
            "removedCount": 1 if removed_one else 0,
        }

    return await call_store("multimap_remove", _op)


async def multimap_keys(multimap_name: str, limit: int = DEFAULT_LIMIT) -> str:
    denied = check_access("multimap", multimap_name, "get")
    if denied:
        return await deny("multimap_keys", denied)
    limit = bounded_limit(limit)

    def _op(client: Any) -> Dict[str, Any]:
        keys = _multimap(client, multimap_name).key_set()
        return {
            "multimap": multimap_name,
            "totalKeys": len(keys),
            "keys": [decode(item) for item in keys[:limit]],
        }

    return await call_store("multimap_keys", _op)


async def multimap_values(multimap_name: str, limit: int = DEFAULT_LIMIT) -> str:
    denied = check_access("multimap", multimap_name, "get")
    if denied:
        return await deny("multimap_values", denied)
    limit = bounded_limit(limit)

    def _op(client: Any) -> Dict[str, Any]:
        values = _multimap(client, multimap_name).values()
        return {
            "multimap": multimap_name,
            "totalValues": len(values),
            "values": [decode(item) for item in values[:limit]],
        }

    return await call_store("multimap_values", _op)


async def multimap_size(multimap_name: str) -> str:
    """Total number of key-value pairs in a MultiMap."""
    denied = check_access("multimap", multimap_name, "size")
    if denied:
        return await deny("multimap_size", denied)

    def _op(client: Any) -> Dict[str, Any]:
        return {"multimap": multimap_name, "size": _multimap(client, multimap_name).size()}

    return await call_store("multimap_size", _op)


async def multimap_value_count(multimap_name: str, key: str) -> str:
    """Number of values stored under ``key``."""
    denied = check_access("multimap", multimap_name, "get")
    if denied:
        return await deny("multimap_value_count", denied)

    def _op(client: Any) -> Dict[str, Any]:
        count = _multimap(client, multimap_name).value_count(key)
        return {"multimap": multimap_name, "key": key, "count": count}

    return await call_store("multimap_value_count", _op)


TOOLS = [
    multimap_put,
    multimap_get,
    multimap_remove,
    multimap_keys,
    multimap_values,
    multimap_size,
    multimap_value_count,
]
