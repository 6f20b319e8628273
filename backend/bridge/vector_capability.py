"""
Optional binding to Hazelcast VectorCollection.

Vector collections ship with newer Hazelcast clients only. The binding is
resolved once, when the capability is created, by importing the vector
module by name; nothing in this package imports it statically. When the
module is missing every operation answers with the same actionable message
and the cluster is never contacted.
"""

import importlib
import logging
import math
from abc import ABC, abstractmethod
from numbers import Real
from types import ModuleType
from typing import Any, Callable, Dict, List, Optional, Sequence

from .values import ValueBridge, get_value_bridge

logger = logging.getLogger(__name__)

VECTOR_MODULE = "hazelcast.vector"

VECTOR_UNAVAILABLE_MESSAGE = (
    "VectorCollection module is not available in this Hazelcast client. "
    "Vector operations require hazelcast-python-client 5.5+ with the "
    "hazelcast.vector module against a Hazelcast 5.5+ cluster with vector "
    "collections enabled. Upgrade the client package and restart the server "
    "to enable vector search, put, get, and delete operations."
)

DEFAULT_TOP_K = 10


class CapabilityError(RuntimeError):
    """A vector operation failed while the module is available."""

    def __init__(self, operation: str, cause: str) -> None:
        self.operation = operation
        self.cause = cause
        super().__init__(f"{operation}: {cause}")


def _plain_cause(exc: BaseException) -> str:
    message = str(exc).strip()
    return message or type(exc).__name__


def _is_signature_mismatch(exc: TypeError) -> bool:
    """Best-effort check for a call signature mismatch."""
    message = str(exc)
    markers = (
        "unexpected keyword argument",
        "required positional argument",
        "required keyword-only argument",
        "positional arguments but",
        "got multiple values for argument",
    )
    return any(marker in message for marker in markers)


def to_float_vector(values: Any) -> List[float]:
    """Validate a caller-supplied vector and coerce it to floats."""
    if isinstance(values, (str, bytes)) or not isinstance(values, Sequence):
        raise ValueError("vector must be an array of numbers.")
    if not values:
        raise ValueError("vector must not be empty.")
    result: List[float] = []
    for item in values:
        if isinstance(item, bool) or not isinstance(item, Real):
            raise ValueError("vector must contain only numbers.")
        number = float(item)
        if not math.isfinite(number):
            raise ValueError("vector must contain only finite numbers.")
        result.append(number)
    return result


class VectorCapability(ABC):
    """Search/put/get/delete over a vector collection."""

    @abstractmethod
    def search(
        self,
        collection_name: str,
        query_vector: Sequence[float],
        top_k: int = DEFAULT_TOP_K,
        include_value: bool = True,
        include_vectors: bool = False,
    ) -> Dict[str, Any]:
        ...

    @abstractmethod
    def put(
        self,
        collection_name: str,
        key: str,
        value: Any,
        vector: Sequence[float],
        index_name: str = "",
    ) -> Dict[str, Any]:
        ...

    @abstractmethod
    def get(self, collection_name: str, key: str) -> Dict[str, Any]:
        ...

    @abstractmethod
    def delete(self, collection_name: str, key: str) -> Dict[str, Any]:
        ...


class StubVectorCapability(VectorCapability):
    """Answers every operation with the unavailable diagnostic."""

    def __init__(self, reason: str = "") -> None:
        self.reason = reason

    @staticmethod
    def _unavailable() -> Dict[str, Any]:
        return {"ok": False, "available": False, "error": VECTOR_UNAVAILABLE_MESSAGE}

    def search(self, collection_name, query_vector, top_k=DEFAULT_TOP_K,
               include_value=True, include_vectors=False):
        return self._unavailable()

    def put(self, collection_name, key, value, vector, index_name=""):
        return self._unavailable()

    def get(self, collection_name, key):
        return self._unavailable()

    def delete(self, collection_name, key):
        return self._unavailable()


_MISSING = object()


class BoundVectorCapability(VectorCapability):
    """
    Vector operations bound to the module resolved at start-up.

    Each call resolves the collection proxy and its entry point by name,
    invokes the non-blocking variant and waits on the returned future.
    """

    def __init__(
        self,
        module: ModuleType,
        client_provider: Callable[[], Any],
        bridge: Optional[ValueBridge] = None,
    ) -> None:
        self._client_provider = client_provider
        self._bridge = bridge or get_value_bridge()
        # Missing handles here mean the module is not usable at all.
        self._document_type = getattr(module, "Document")
        self._vector_type = getattr(module, "Vector")
        self._vector_kind = getattr(module, "Type")
        self._dense_kind = getattr(self._vector_kind, "DENSE")

    # ------------------------------------------------------------------
    # Dynamic call plumbing
    # ------------------------------------------------------------------

    def _collection(self, operation: str, name: str) -> Any:
        client = self._client_provider()
        factory = getattr(client, "get_vector_collection", None)
        if not callable(factory):
            raise CapabilityError(
                operation,
                "the connected client does not provide vector collections",
            )
        try:
            return factory(name)
        except Exception as exc:
            raise CapabilityError(operation, _plain_cause(exc)) from exc

    @staticmethod
    def _invoke(operation: str, target: Any, method_name: str, *args: Any, **kwargs: Any) -> Any:
        method = getattr(target, method_name, None)
        if not callable(method):
            raise CapabilityError(
                operation,
                f"vector collection has no '{method_name}' operation in this client version",
            )
        try:
            pending = method(*args, **kwargs)
            result = getattr(pending, "result", None)
            return result() if callable(result) else pending
        except TypeError as exc:
            if _is_signature_mismatch(exc):
                raise CapabilityError(
                    operation,
                    f"'{method_name}' signature does not match this client version ({_plain_cause(exc)})",
                ) from exc
            raise CapabilityError(operation, _plain_cause(exc)) from exc
        except Exception as exc:
            raise CapabilityError(operation, _plain_cause(exc)) from exc

    def _wrap_vector(self, operation: str, values: Sequence[float], index_name: str = "") -> Any:
        try:
            return self._vector_type(index_name, self._dense_kind, list(values))
        except Exception as exc:
            raise CapabilityError(operation, f"cannot build vector value: {_plain_cause(exc)}") from exc

    # ------------------------------------------------------------------
    # Operations
    # ------------------------------------------------------------------

    def search(self, collection_name, query_vector, top_k=DEFAULT_TOP_K,
               include_value=True, include_vectors=False):
        vector = to_float_vector(query_vector)
        top_k = max(1, int(top_k))
        collection = self._collection("vector_search", collection_name)
        options = {
            "limit": top_k,
            "include_value": bool(include_value),
            "include_vectors": bool(include_vectors),
        }
        raw_results = self._invoke(
            "vector_search",
            collection,
            "search_near_vector",
            self._wrap_vector("vector_search", vector),
            **options,
        )

        results = [
            self._search_entry(item, include_value, include_vectors)
            for item in (raw_results or [])
        ]
        return {
            "ok": True,
            "collection": collection_name,
            "topK": top_k,
            "dimensions": len(vector),
            "resultCount": len(results),
            "results": results,
        }

    def _search_entry(self, item: Any, include_value: bool, include_vectors: bool) -> Dict[str, Any]:
        entry: Dict[str, Any] = {}

        key = _extract(item, "key")
        if key is not _MISSING:
            entry["key"] = str(key)

        score = _extract(item, "score")
        if score is not _MISSING:
            try:
                entry["score"] = float(score)
            except (TypeError, ValueError):
                logger.debug("Dropping non-numeric search score %r", score)

        if include_value:
            value = _extract(item, "value")
            if value is not _MISSING:
                entry["value"] = self._bridge.decode(value)

        if include_vectors:
            vectors = _extract(item, "vectors")
            if vectors is not _MISSING:
                entry["vectors"] = _vectors_to_json(vectors)

        return entry

    def put(self, collection_name, key, value, vector, index_name=""):
        floats = to_float_vector(vector)
        stored_value = self._bridge.encode(value)
        collection = self._collection("vector_put", collection_name)
        try:
            document = self._document_type(
                stored_value, self._wrap_vector("vector_put", floats, index_name or "")
            )
        except CapabilityError:
            raise
        except Exception as exc:
            raise CapabilityError("vector_put", f"cannot build document: {_plain_cause(exc)}") from exc

        self._invoke("vector_put", collection, "set", key, document)
        return {
            "ok": True,
            "status": "ok",
            "collection": collection_name,
            "key": key,
            "dimensions": len(floats),
        }

    def get(self, collection_name, key):
        collection = self._collection("vector_get", collection_name)
        document = self._invoke("vector_get", collection, "get", key)
        if document is None:
            return {"ok": True, "found": False, "collection": collection_name, "key": key}

        response: Dict[str, Any] = {
            "ok": True,
            "found": True,
            "collection": collection_name,
            "key": key,
        }
        value = _extract(document, "value")
        if value is not _MISSING:
            response["value"] = self._bridge.decode(value)
        return response

    def delete(self, collection_name, key):
        collection = self._collection("vector_delete", collection_name)
        self._invoke("vector_delete", collection, "delete", key)
        return {"ok": True, "status": "deleted", "collection": collection_name, "key": key}


def _extract(item: Any, attribute: str) -> Any:
    try:
        return getattr(item, attribute)
    except Exception as exc:
        logger.debug("Could not read '%s' from %s: %s", attribute, type(item).__name__, exc)
        return _MISSING


def _vectors_to_json(vectors: Any) -> Any:
    if vectors is None:
        return None
    if not isinstance(vectors, (list, tuple)):
        vectors = [vectors]
    result = []
    for vector in vectors:
        values = _extract(vector, "vector")
        if values is _MISSING:
            continue
        result.append({"name": getattr(vector, "name", "") or "", "vector": list(values or [])})
    return result


def create_vector_capability(
    client_provider: Callable[[], Any],
    importer: Callable[[str], ModuleType] = importlib.import_module,
    bridge: Optional[ValueBridge] = None,
) -> VectorCapability:
    """
    Probe for the vector module once and bind to it when present.

    The probe result is final for the process: the installed packages cannot
    change underneath a running server.
    """
    try:
        module = importer(VECTOR_MODULE)
        capability = BoundVectorCapability(module, client_provider, bridge)
    except (ImportError, AttributeError) as exc:
        logger.info(
            "VectorCollection module not found (%s). Vector tools will return "
            "informational messages. To enable vector operations, install "
            "hazelcast-python-client 5.5 or newer.",
            exc,
        )
        return StubVectorCapability(reason=str(exc))

    logger.info("VectorCollection module detected; vector tools fully operational")
    return capability
