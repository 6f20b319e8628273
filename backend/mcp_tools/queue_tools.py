"""
IQueue tools.
"""

from typing import Any, Dict

from .common import call_store, check_access, decode, deny, encode, reject


def _queue(client: Any, queue_name: str) -> Any:
    return client.get_queue(queue_name).blocking()


async def queue_offer(queue_name: str, value: Any) -> str:
    """Add an item to the tail of a Hazelcast Queue."""
    denied = check_access("queue", queue_name, "offer", write=True)
    if denied:
        return await deny("queue_offer", denied)

    def _op(client: Any) -> Dict[str, Any]:
        accepted = bool(_queue(client, queue_name).offer(encode(value)))
        message = (
            f"Offered item to queue '{queue_name}'"
            if accepted
            else f"Queue '{queue_name}' is full; item was not added"
        )
        return {"queue": queue_name, "accepted": accepted, "message": message}

    return await call_store("queue_offer", _op)


async def queue_poll(queue_name: str) -> str:
    """Remove and return the head of a Hazelcast Queue (empty queues return null)."""
    denied = check_access("queue", queue_name, "poll", write=True)
    if denied:
        return await deny("queue_poll", denied)

    def _op(client: Any) -> Dict[str, Any]:
        item = _queue(client, queue_name).poll()
        return {"queue": queue_name, "empty": item is None, "value": decode(item)}

    return await call_store("queue_poll", _op)


async def queue_peek(queue_name: str) -> str:
    """Read the head of a Hazelcast Queue without removing it."""
    denied = check_access("queue", queue_name, "peek")
    if denied:
        return await deny("queue_peek", denied)

    def _op(client: Any) -> Dict[str, Any]:
        item = _queue(client, queue_name).peek()
        return {"queue": queue_name, "empty": item is None, "value": decode(item)}

    return await call_store("queue_peek", _op)


async def queue_size(queue_name: str) -> str:
    denied = check_access("queue", queue_name, "size")
    if denied:
        return await deny("queue_size", denied)

    def _op(client: Any) -> Dict[str, Any]:
        return {"queue": queue_name, "size": _queue(client, queue_name).size()}

    return await call_store("queue_size", _op)


async def queue_drain(queue_name: str, max_items: int = 100) -> str:
    """
    Remove up to ``max_items`` items from the head of a Hazelcast Queue.

    Args:
        queue_name: Name of the Hazelcast IQueue
        max_items: Maximum number of items to drain (1-1000)
    """
    denied = check_access("queue", queue_name, "drain", write=True)
    if denied:
        return await deny("queue_drain", denied)
    try:
        max_items = int(max_items)
    except (TypeError, ValueError):
        return await reject("queue_drain", "max_items must be an integer.")
    if not 1 <= max_items <= 1000:
        return await reject("queue_drain", "max_items must be between 1 and 1000.")

    def _op(client: Any) -> Dict[str, Any]:
        drained: list = []
        _queue(client, queue_name).drain_to(drained, max_items)
        return {
            "queue": queue_name,
            "drained": len(drained),
            "items": [decode(item) for item in drained],
        }

    return await call_store("queue_drain", _op)


async def queue_clear(queue_name: str, confirm: bool = False) -> str:
    """Remove ALL items from a Hazelcast Queue. Requires clear permission and confirm=true."""
    denied = check_access("queue", queue_name, "clear", write=True, clear=True)
    if denied:
        return await deny("queue_clear", denied)
    if confirm is not True:
        return await reject(
            "queue_clear",
            f"Safety check: set 'confirm: true' to clear all items from queue '{queue_name}'. "
            "This operation cannot be undone.",
        )

    def _op(client: Any) -> Dict[str, Any]:
        queue = _queue(client, queue_name)
        size_before = queue.size()
        queue.clear()
        return {
            "queue": queue_name,
            "removed": size_before,
            "message": f"Cleared queue '{queue_name}'. Removed {size_before} items.",
        }

    return await call_store("queue_clear", _op)


TOOLS = [queue_offer, queue_poll, queue_peek, queue_size, queue_drain, queue_clear]
