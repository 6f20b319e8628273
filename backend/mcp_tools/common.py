"""
Shared plumbing for MCP tools: access checks, blocking store calls and the
JSON envelope every tool returns.
"""

import asyncio
import logging
from typing import Any, Callable, Dict, Optional

from bridge import CapabilityError
from hz import translate_error
from runtime_state import runtime_state

logger = logging.getLogger(__name__)

DEFAULT_LIMIT = 100


def _to_json(payload: Dict[str, Any]) -> str:
    """Serialize payload for MCP string responses."""
    return runtime_state.bridge.to_json_text(payload)


def _tool_response(*, ok: bool, **extra: Any) -> str:
    payload: Dict[str, Any] = {"ok": bool(ok)}
    payload.update(extra)
    return _to_json(payload)


def decode(value: Any) -> Any:
    return runtime_state.bridge.decode(value)


def encode(value: Any) -> Any:
    return runtime_state.bridge.encode(value)


def check_access(
    kind: str,
    name: str,
    operation: str,
    *,
    write: bool = False,
    clear: bool = False,
    sql: bool = False,
) -> Optional[str]:
    """Return a denial message, or None when the call may proceed."""
    access = runtime_state.access
    if not isinstance(name, str) or not name.strip():
        return f"{kind} name must be a non-empty string."
    if not access.is_accessible(kind, name):
        return access.denial_message(operation, name)
    if write and not access.is_write_allowed():
        return access.denial_message(operation, name)
    if clear and not access.is_clear_allowed():
        return access.denial_message("clear", name)
    if sql and not access.is_sql_allowed():
        return access.denial_message("sql", name)
    return None


async def deny(tool: str, message: str) -> str:
    await runtime_state.tool_calls.record_event(tool=tool, ok=False, denied=True, error=message)
    return _tool_response(ok=False, error=message)


async def reject(tool: str, message: str) -> str:
    """Input validation failure; the store is not contacted."""
    await runtime_state.tool_calls.record_event(tool=tool, ok=False, error=message)
    return _tool_response(ok=False, error=message)


def _error_message(tool: str, exc: Exception) -> str:
    if isinstance(exc, CapabilityError):
        cause = exc.__cause__ if isinstance(exc.__cause__, Exception) else RuntimeError(exc.cause)
        return translate_error(cause, exc.operation, _safe_current_client(), _listable)
    return translate_error(exc, tool, _safe_current_client(), _listable)


def _listable(obj: Any) -> bool:
    return runtime_state.access.is_visible(obj.service_name, obj.name)


def _safe_current_client() -> Optional[Any]:
    try:
        return runtime_state.current_client()
    except Exception:
        return None


async def call_store(
    tool: str,
    operation: Callable[[Any], Dict[str, Any]],
    *,
    needs_client: bool = True,
) -> str:
    """
    Run a blocking store operation off the event loop.

    ``operation`` receives the connected client and returns the payload
    merged into ``{"ok": true, ...}``. Failures become ``{"ok": false,
    "error": ...}`` with a translated message.
    """

    def _run() -> Dict[str, Any]:
        return operation(runtime_state.get_client() if needs_client else None)

    try:
        payload = await asyncio.to_thread(_run)
    except ValueError as exc:
        # Input validation and EncodingError: the caller can fix the request.
        message = f"{tool}: {exc}"
        await runtime_state.tool_calls.record_event(tool=tool, ok=False, error=message)
        return _tool_response(ok=False, error=message)
    except Exception as exc:
        logger.warning("%s failed: %s", tool, exc)
        message = _error_message(tool, exc)
        await runtime_state.tool_calls.record_event(tool=tool, ok=False, error=message)
        return _tool_response(ok=False, error=message)

    ok = bool(payload.pop("ok", True))
    if ok:
        await runtime_state.tool_calls.record_event(tool=tool, ok=True)
    else:
        await runtime_state.tool_calls.record_event(
            tool=tool, ok=False, error=str(payload.get("error") or "")
        )
    return _tool_response(ok=ok, **payload)


def bounded_limit(limit: Any, default: int = DEFAULT_LIMIT) -> int:
    try:
        value = int(limit)
    except (TypeError, ValueError):
        return default
    return max(0, value)
