"""
IList and ISet tools.
"""

from typing import Any, Dict, Optional

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


def _list(client: Any, list_name: str) -> Any:
    return client.get_list(list_name).blocking()


def _set(client: Any, set_name: str) -> Any:
    return client.get_set(set_name).blocking()


def _as_index(value: Any) -> Optional[int]:
    if isinstance(value, bool):
        return None
    try:
        index = int(value)
    except (TypeError, ValueError):
        return None
    return index if index >= 0 else None


# ---------------------------------------------------------------------------
# IList
# ---------------------------------------------------------------------------


async def list_add(list_name: str, value: Any, index: Optional[int] = None) -> str:
    """
    Append an item to a Hazelcast List, or insert it at ``index``.

    Args:
        list_name: Name of the Hazelcast IList
        value: Item to add (any JSON)
        index: Position to insert at (optional, appends when omitted)
    """
    denied = check_access("list", list_name, "add", write=True)
    if denied:
        return await deny("list_add", denied)
    position = None
    if index is not None:
        position = _as_index(index)
        if position is None:
            return await reject("list_add", "index must be a non-negative integer.")

    def _op(client: Any) -> Dict[str, Any]:
        hz_list = _list(client, list_name)
        item = encode(value)
        if position is None:
            hz_list.add(item)
            message = f"Appended item to list '{list_name}'"
        else:
            hz_list.add_at(position, item)
            message = f"Inserted item at index {position} in list '{list_name}'"
        return {"list": list_name, "index": position, "message": message}

    return await call_store("list_add", _op)


async def list_get(list_name: str, index: int) -> str:
    """Read the item at ``index`` in a Hazelcast List."""
    denied = check_access("list", list_name, "get")
    if denied:
        return await deny("list_get", denied)
    position = _as_index(index)
    if position is None:
        return await reject("list_get", "index must be a non-negative integer.")

    def _op(client: Any) -> Dict[str, Any]:
        hz_list = _list(client, list_name)
        size = hz_list.size()
        if position >= size:
            return {
                "ok": False,
                "error": f"Index {position} is out of range for list '{list_name}' (size {size}).",
            }
        return {"list": list_name, "index": position, "value": decode(hz_list.get(position))}

    return await call_store("list_get", _op)


async def list_remove(list_name: str, index: int) -> str:
    """Remove and return the item at ``index`` in a Hazelcast List."""
    denied = check_access("list", list_name, "remove", write=True)
    if denied:
        return await deny("list_remove", denied)
    position = _as_index(index)
    if position is None:
        return await reject("list_remove", "index must be a non-negative integer.")

    def _op(client: Any) -> Dict[str, Any]:
        hz_list = _list(client, list_name)
        size = hz_list.size()
        if position >= size:
            return {
                "ok": False,
                "error": f"Index {position} is out of range for list '{list_name}' (size {size}).",
            }
        removed = hz_list.remove_at(position)
        return {"list": list_name, "index": position, "removed": decode(removed)}

    return await call_store("list_remove", _op)


async def list_size(list_name: str) -> str:
    denied = check_access("list", list_name, "size")
    if denied:
        return await deny("list_size", denied)

    def _op(client: Any) -> Dict[str, Any]:
        return {"list": list_name, "size": _list(client, list_name).size()}

    return await call_store("list_size", _op)


async def list_sublist(list_name: str, from_index: int = 0, to_index: Optional[int] = None) -> str:
    """
    Read the items in ``[from_index, to_index)`` of a Hazelcast List.

    ``to_index`` defaults to the list size and is clamped to it.
    """
    denied = check_access("list", list_name, "get")
    if denied:
        return await deny("list_sublist", denied)
    start = _as_index(from_index)
    if start is None:
        return await reject("list_sublist", "from_index must be a non-negative integer.")
    end = None
    if to_index is not None:
        end = _as_index(to_index)
        if end is None:
            return await reject("list_sublist", "to_index must be a non-negative integer.")

    def _op(client: Any) -> Dict[str, Any]:
        hz_list = _list(client, list_name)
        size = hz_list.size()
        stop = size if end is None else min(end, size)
        if start > stop:
            raise ValueError(f"from_index {start} is greater than to_index {stop}.")
        items = hz_list.sub_list(start, stop) if stop > start else []
        return {
            "list": list_name,
            "fromIndex": start,
            "toIndex": stop,
            "size": size,
            "items": [decode(item) for item in items],
        }

    return await call_store("list_sublist", _op)


# ---------------------------------------------------------------------------
# ISet
# ---------------------------------------------------------------------------


async def set_add(set_name: str, value: Any) -> str:
    """Add an item to a Hazelcast Set; reports whether it was new."""
    denied = check_access("set", set_name, "add", write=True)
    if denied:
        return await deny("set_add", denied)

    def _op(client: Any) -> Dict[str, Any]:
        added = bool(_set(client, set_name).add(encode(value)))
        message = (
            f"Added item to set '{set_name}'"
            if added
            else f"Item already present in set '{set_name}'"
        )
        return {"set": set_name, "added": added, "message": message}

    return await call_store("set_add", _op)


async def set_remove(set_name: str, value: Any) -> str:
    denied = check_access("set", set_name, "remove", write=True)
    if denied:
        return await deny("set_remove", denied)

    def _op(client: Any) -> Dict[str, Any]:
        removed = bool(_set(client, set_name).remove(encode(value)))
        return {"set": set_name, "removed": removed}

    return await call_store("set_remove", _op)


async def set_contains(set_name: str, value: Any) -> str:
    """Check whether a Hazelcast Set contains an item."""
    denied = check_access("set", set_name, "contains")
    if denied:
        return await deny("set_contains", denied)

    def _op(client: Any) -> Dict[str, Any]:
        return {"set": set_name, "contains": bool(_set(client, set_name).contains(encode(value)))}

    return await call_store("set_contains", _op)


async def set_size(set_name: str) -> str:
    denied = check_access("set", set_name, "size")
    if denied:
        return await deny("set_size", denied)

    def _op(client: Any) -> Dict[str, Any]:
        return {"set": set_name, "size": _set(client, set_name).size()}

    return await call_store("set_size", _op)


async def set_get_all(set_name: str, limit: int = DEFAULT_LIMIT) -> str:
    """List the items of a Hazelcast Set (default limit 100)."""
    denied = check_access("set", set_name, "get")
    if denied:
        return await deny("set_get_all", denied)
    limit = bounded_limit(limit)

    def _op(client: Any) -> Dict[str, Any]:
        items = _set(client, set_name).get_all()
        returned = [decode(item) for item in items[:limit]]
        return {
            "set": set_name,
            "totalItems": len(items),
            "returned": len(returned),
            "limit": limit,
            "items": returned,
        }

    return await call_store("set_get_all", _op)


LIST_TOOLS = [list_add, list_get, list_remove, list_size, list_sublist]
SET_TOOLS = [set_add, set_remove, set_contains, set_size, set_get_all]
TOOLS = LIST_TOOLS + SET_TOOLS
