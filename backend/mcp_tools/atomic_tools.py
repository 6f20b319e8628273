"""
CP AtomicLong tools.
"""

from typing import Any, Callable, Dict

from .common import call_store, check_access, deny, reject

CP_SUBSYSTEM_ERROR = (
    "CP Subsystem is not configured on this cluster. "
    "AtomicLong requires CP Subsystem to be enabled."
)


def _atomic(client: Any, name: str) -> Any:
    return client.cp_subsystem.get_atomic_long(name).blocking()


def _with_cp_hint(operation: Callable[[Any], Dict[str, Any]]) -> Callable[[Any], Dict[str, Any]]:
    def _run(client: Any) -> Dict[str, Any]:
        try:
            return operation(client)
        except Exception as exc:
            if "CP Subsystem" in str(exc):
                return {"ok": False, "error": CP_SUBSYSTEM_ERROR}
            raise

    return _run


def _as_long(value: Any) -> Any:
    if isinstance(value, bool):
        return None
    if isinstance(value, float) and not value.is_integer():
        return None
    try:
        return int(value)
    except (TypeError, ValueError):
        return None


async def atomic_get(name: str) -> str:
    """Get the current value of an AtomicLong."""
    denied = check_access("atomic", name, "get")
    if denied:
        return await deny("atomic_get", denied)

    def _op(client: Any) -> Dict[str, Any]:
        return {"name": name, "value": _atomic(client, name).get()}

    return await call_store("atomic_get", _with_cp_hint(_op))


async def atomic_set(name: str, value: int) -> str:
    """Set the value of an AtomicLong."""
    denied = check_access("atomic", name, "set", write=True)
    if denied:
        return await deny("atomic_set", denied)
    new_value = _as_long(value)
    if new_value is None:
        return await reject("atomic_set", "value must be an integer.")

    def _op(client: Any) -> Dict[str, Any]:
        _atomic(client, name).set(new_value)
        return {"name": name, "value": new_value, "message": f"Set AtomicLong '{name}' to {new_value}"}

    return await call_store("atomic_set", _with_cp_hint(_op))


async def atomic_increment(name: str) -> str:
    """Atomically increment an AtomicLong and return the new value."""
    denied = check_access("atomic", name, "increment", write=True)
    if denied:
        return await deny("atomic_increment", denied)

    def _op(client: Any) -> Dict[str, Any]:
        return {"name": name, "value": _atomic(client, name).increment_and_get()}

    return await call_store("atomic_increment", _with_cp_hint(_op))


async def atomic_decrement(name: str) -> str:
    """Atomically decrement an AtomicLong and return the new value."""
    denied = check_access("atomic", name, "decrement", write=True)
    if denied:
        return await deny("atomic_decrement", denied)

    def _op(client: Any) -> Dict[str, Any]:
        return {"name": name, "value": _atomic(client, name).decrement_and_get()}

    return await call_store("atomic_decrement", _with_cp_hint(_op))


async def atomic_compare_and_set(name: str, expected: int, new_value: int) -> str:
    """
    Set an AtomicLong to ``new_value`` only if it currently equals ``expected``.

    Args:
        name: Name of the AtomicLong
        expected: Expected current value
        new_value: Value to set when the expectation holds
    """
    denied = check_access("atomic", name, "compare_and_set", write=True)
    if denied:
        return await deny("atomic_compare_and_set", denied)
    expect = _as_long(expected)
    update = _as_long(new_value)
    if expect is None or update is None:
        return await reject("atomic_compare_and_set", "expected and new_value must be integers.")

    def _op(client: Any) -> Dict[str, Any]:
        success = bool(_atomic(client, name).compare_and_set(expect, update))
        return {"name": name, "success": success, "expected": expect, "newValue": update}

    return await call_store("atomic_compare_and_set", _with_cp_hint(_op))


TOOLS = [atomic_get, atomic_set, atomic_increment, atomic_decrement, atomic_compare_and_set]
