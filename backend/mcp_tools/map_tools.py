"""
IMap tools: key/value reads and writes, bulk access, and structure discovery.
"""

from typing import Any, Dict, List, Optional

from hazelcast import predicate as predicates

from hz import simple_type_name
from runtime_state import runtime_state

from .common import (
    DEFAULT_LIMIT,
    bounded_limit,
    call_store,
    check_access,
    decode,
    deny,
    encode,
    reject,
)


def _map(client: Any, map_name: str) -> Any:
    return client.get_map(map_name).blocking()


def _ttl_suffix(ttl: Optional[int]) -> str:
    return f" (TTL: {ttl}s)" if ttl else ""


def _positive_ttl(ttl: Optional[int]) -> Optional[int]:
    if ttl is None:
        return None
    ttl = int(ttl)
    return ttl if ttl > 0 else None


async def map_get(map_name: str, key: str) -> str:
    """
    Retrieve a value from a Hazelcast Map by key.

    Args:
        map_name: Name of the Hazelcast IMap
        key: Key to retrieve

    Returns:
        JSON with the decoded value, or found=false with the map size.

    Examples:
        map_get("customers", "c-42")
    """
    denied = check_access("map", map_name, "get")
    if denied:
        return await deny("map_get", denied)

    def _op(client: Any) -> Dict[str, Any]:
        hz_map = _map(client, map_name)
        value = hz_map.get(key)
        if value is None:
            return {
                "map": map_name,
                "key": key,
                "found": False,
                "message": f"Key '{key}' not found in map '{map_name}'. Map size: {hz_map.size()}",
            }
        return {"map": map_name, "key": key, "found": True, "value": decode(value)}

    return await call_store("map_get", _op)


async def map_put(map_name: str, key: str, value: Any, ttl: Optional[int] = None) -> str:
    """
    Store a key-value pair in a Hazelcast Map.

    The value is stored as HazelcastJsonValue so any client can read it.

    Args:
        map_name: Name of the Hazelcast IMap
        key: Key to store
        value: Value to store (any JSON)
        ttl: Time-to-live in seconds (optional)
    """
    denied = check_access("map", map_name, "put", write=True)
    if denied:
        return await deny("map_put", denied)

    def _op(client: Any) -> Dict[str, Any]:
        stored = encode(value)
        seconds = _positive_ttl(ttl)
        if seconds:
            _map(client, map_name).put(key, stored, ttl=seconds)
        else:
            _map(client, map_name).put(key, stored)
        return {
            "map": map_name,
            "key": key,
            "message": f"Stored key '{key}' in map '{map_name}'{_ttl_suffix(seconds)}",
        }

    return await call_store("map_put", _op)


async def map_delete(map_name: str, key: str) -> str:
    """Remove an entry from a Hazelcast Map by key."""
    denied = check_access("map", map_name, "delete", write=True)
    if denied:
        return await deny("map_delete", denied)

    def _op(client: Any) -> Dict[str, Any]:
        removed = _map(client, map_name).remove(key)
        if removed is None:
            return {
                "map": map_name,
                "key": key,
                "removed": False,
                "message": f"Key '{key}' was not present in map '{map_name}'",
            }
        return {
            "map": map_name,
            "key": key,
            "removed": True,
            "message": f"Removed key '{key}' from map '{map_name}'",
        }

    return await call_store("map_delete", _op)


async def map_get_all(map_name: str, keys: List[str]) -> str:
    """Retrieve multiple entries from a Hazelcast Map by keys."""
    denied = check_access("map", map_name, "get")
    if denied:
        return await deny("map_get_all", denied)
    if not isinstance(keys, list):
        return await reject("map_get_all", "keys must be an array of strings.")

    def _op(client: Any) -> Dict[str, Any]:
        found = _map(client, map_name).get_all(list(dict.fromkeys(keys)))
        entries = {str(entry_key): decode(entry_value) for entry_key, entry_value in found.items()}
        return {
            "map": map_name,
            "found": len(entries),
            "requested": len(keys),
            "entries": entries,
        }

    return await call_store("map_get_all", _op)


async def map_put_all(map_name: str, entries: List[Dict[str, Any]]) -> str:
    """
    Store multiple key-value pairs in a Hazelcast Map.

    Args:
        map_name: Name of the Hazelcast IMap
        entries: Array of {"key": ..., "value": ...} objects
    """
    denied = check_access("map", map_name, "put", write=True)
    if denied:
        return await deny("map_put_all", denied)
    if not isinstance(entries, list) or not all(
        isinstance(item, dict) and "key" in item and "value" in item for item in entries
    ):
        return await reject("map_put_all", "entries must be an array of {key, value} objects.")

    def _op(client: Any) -> Dict[str, Any]:
        batch = {str(item["key"]): encode(item["value"]) for item in entries}
        _map(client, map_name).put_all(batch)
        return {
            "map": map_name,
            "stored": len(batch),
            "message": f"Stored {len(batch)} entries in map '{map_name}'",
        }

    return await call_store("map_put_all", _op)


async def map_size(map_name: str) -> str:
    """Get the number of entries in a Hazelcast Map."""
    denied = check_access("map", map_name, "get")
    if denied:
        return await deny("map_size", denied)

    def _op(client: Any) -> Dict[str, Any]:
        return {"map": map_name, "size": _map(client, map_name).size()}

    return await call_store("map_size", _op)


async def map_keys(map_name: str, limit: int = DEFAULT_LIMIT) -> str:
    """List keys in a Hazelcast Map (default limit 100)."""
    denied = check_access("map", map_name, "get")
    if denied:
        return await deny("map_keys", denied)
    limit = bounded_limit(limit)

    def _op(client: Any) -> Dict[str, Any]:
        all_keys = _map(client, map_name).key_set()
        keys = [decode(item) for item in all_keys[:limit]]
        return {
            "map": map_name,
            "totalKeys": len(all_keys),
            "returned": len(keys),
            "limit": limit,
            "keys": keys,
        }

    return await call_store("map_keys", _op)


async def map_values(map_name: str, limit: int = DEFAULT_LIMIT) -> str:
    """List values in a Hazelcast Map (default limit 100)."""
    denied = check_access("map", map_name, "get")
    if denied:
        return await deny("map_values", denied)
    limit = bounded_limit(limit)

    def _op(client: Any) -> Dict[str, Any]:
        hz_map = _map(client, map_name)
        total = hz_map.size()
        values = [decode(item) for item in hz_map.values()[:limit]]
        return {
            "map": map_name,
            "totalEntries": total,
            "returned": len(values),
            "limit": limit,
            "values": values,
        }

    return await call_store("map_values", _op)


async def map_contains_key(map_name: str, key: str) -> str:
    """Check if a key exists in a Hazelcast Map."""
    denied = check_access("map", map_name, "get")
    if denied:
        return await deny("map_contains_key", denied)

    def _op(client: Any) -> Dict[str, Any]:
        return {"map": map_name, "key": key, "exists": bool(_map(client, map_name).contains_key(key))}

    return await call_store("map_contains_key", _op)


async def map_clear(map_name: str, confirm: bool = False) -> str:
    """
    Remove ALL entries from a Hazelcast Map.

    Requires ``access.operations.clear: true`` in the server configuration and
    ``confirm=true`` on the call. This cannot be undone.
    """
    denied = check_access("map", map_name, "clear", write=True, clear=True)
    if denied:
        return await deny("map_clear", denied)
    if confirm is not True:
        return await reject(
            "map_clear",
            f"Safety check: set 'confirm: true' to clear all entries from map '{map_name}'. "
            "This operation cannot be undone.",
        )

    def _op(client: Any) -> Dict[str, Any]:
        hz_map = _map(client, map_name)
        size_before = hz_map.size()
        hz_map.clear()
        return {
            "map": map_name,
            "removed": size_before,
            "message": f"Cleared map '{map_name}'. Removed {size_before} entries.",
        }

    return await call_store("map_clear", _op)


async def map_put_if_absent(
    map_name: str, key: str, value: Any, ttl: Optional[int] = None
) -> str:
    """Atomic insert-only put; reports the existing value when the key is taken."""
    denied = check_access("map", map_name, "put_if_absent", write=True)
    if denied:
        return await deny("map_put_if_absent", denied)

    def _op(client: Any) -> Dict[str, Any]:
        stored = encode(value)
        seconds = _positive_ttl(ttl)
        hz_map = _map(client, map_name)
        if seconds:
            previous = hz_map.put_if_absent(key, stored, ttl=seconds)
        else:
            previous = hz_map.put_if_absent(key, stored)
        if previous is None:
            return {
                "map": map_name,
                "key": key,
                "inserted": True,
                "message": f"Successfully inserted key '{key}' in map '{map_name}'{_ttl_suffix(seconds)}",
            }
        return {
            "map": map_name,
            "key": key,
            "inserted": False,
            "previous": decode(previous),
            "message": f"Key '{key}' already exists in map '{map_name}'",
        }

    return await call_store("map_put_if_absent", _op)


async def map_replace(map_name: str, key: str, value: Any, old_value: Any = None) -> str:
    """
    Atomic replace, with compare-and-set when ``old_value`` is given.

    Args:
        map_name: Name of the Hazelcast IMap
        key: Key to replace
        value: New value (any JSON)
        old_value: Expected current value (optional)
    """
    denied = check_access("map", map_name, "replace", write=True)
    if denied:
        return await deny("map_replace", denied)

    def _op(client: Any) -> Dict[str, Any]:
        hz_map = _map(client, map_name)
        new_value = encode(value)
        if old_value is not None:
            replaced = bool(hz_map.replace_if_same(key, encode(old_value), new_value))
            message = (
                f"Successfully replaced key '{key}' in map '{map_name}'"
                if replaced
                else f"Key '{key}' or old value did not match in map '{map_name}'"
            )
            return {"map": map_name, "key": key, "replaced": replaced, "message": message}

        previous = hz_map.replace(key, new_value)
        if previous is None:
            return {
                "map": map_name,
                "key": key,
                "replaced": False,
                "message": f"Key '{key}' was not present in map '{map_name}'",
            }
        return {
            "map": map_name,
            "key": key,
            "replaced": True,
            "previous": decode(previous),
            "message": f"Replaced key '{key}' in map '{map_name}'",
        }

    return await call_store("map_replace", _op)


async def map_entry_set(
    map_name: str, predicate: Optional[str] = None, limit: int = DEFAULT_LIMIT
) -> str:
    """
    Bulk key-value retrieval with an optional SQL predicate.

    Examples:
        map_entry_set("customers", predicate="age > 30", limit=20)
    """
    denied = check_access("map", map_name, "entry_set", sql=bool(predicate))
    if denied:
        return await deny("map_entry_set", denied)
    limit = bounded_limit(limit)

    def _op(client: Any) -> Dict[str, Any]:
        hz_map = _map(client, map_name)
        if predicate:
            entries = hz_map.entry_set(predicates.sql(predicate))
        else:
            entries = hz_map.entry_set()
        results = [
            {"key": decode(entry_key), "value": decode(entry_value)}
            for entry_key, entry_value in entries[:limit]
        ]
        return {
            "map": map_name,
            "predicate": predicate or "none",
            "totalMatched": len(entries),
            "returned": len(results),
            "limit": limit,
            "entries": results,
        }

    return await call_store("map_entry_set", _op)


async def list_structures(type: Optional[str] = None) -> str:
    """
    Discover all distributed objects on the cluster.

    Args:
        type: Filter by type (IMap, IQueue, IList, ISet, MultiMap, ITopic,
            Ringbuffer, AtomicLong, VectorCollection)
    """

    access = runtime_state.access

    def _op(client: Any) -> Dict[str, Any]:
        results: List[Dict[str, Any]] = []
        for obj in client.get_distributed_objects():
            if not access.is_visible(obj.service_name, obj.name):
                continue
            simple_type = simple_type_name(obj.service_name)
            if type and type != simple_type:
                continue
            results.append({"name": obj.name, "type": simple_type})
        results.sort(key=lambda item: (item["type"], item["name"]))
        return {"total": len(results), "filter": type or "none", "objects": results}

    return await call_store("list_structures", _op)


TOOLS = [
    map_get,
    map_put,
    map_delete,
    map_get_all,
    map_put_all,
    map_size,
    map_keys,
    map_values,
    map_contains_key,
    map_clear,
    list_structures,
    map_put_if_absent,
    map_replace,
    map_entry_set,
]
