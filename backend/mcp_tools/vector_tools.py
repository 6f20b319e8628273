"""
VectorCollection tools.

These delegate to the vector capability resolved at startup. When the
installed client has no vector module every call answers with the
unavailable diagnostic instead of failing.
"""

from typing import Any, Dict, List

from runtime_state import runtime_state

from .common import call_store, check_access, deny


async def vector_search(
    collection_name: str,
    vector: List[float],
    top_k: int = 10,
    include_value: bool = True,
    include_vectors: bool = False,
) -> str:
    """
    Perform similarity search on a Hazelcast VectorCollection.

    Args:
        collection_name: Name of the VectorCollection
        vector: Query vector (array of floats)
        top_k: Number of nearest neighbors to return (default 10)
        include_value: Whether to include document values in results
        include_vectors: Whether to include vectors in results

    Returns:
        JSON with ``results``: one ``{key, score, value?, vectors?}`` per hit.
    """
    denied = check_access("vector", collection_name, "search")
    if denied:
        return await deny("vector_search", denied)

    def _op(_client: Any) -> Dict[str, Any]:
        return runtime_state.vector.search(
            collection_name,
            vector,
            top_k=top_k,
            include_value=include_value,
            include_vectors=include_vectors,
        )

    return await call_store("vector_search", _op, needs_client=False)


async def vector_put(
    collection_name: str,
    key: str,
    value: Any,
    vector: List[float],
    index_name: str = "",
) -> str:
    """
    Store a document with its vector embedding in a VectorCollection.

    Args:
        collection_name: Name of the VectorCollection
        key: Document key
        value: Document value (any JSON)
        vector: Vector embedding for the document
        index_name: Name of the vector index (required if the collection has several)
    """
    denied = check_access("vector", collection_name, "put", write=True)
    if denied:
        return await deny("vector_put", denied)

    def _op(_client: Any) -> Dict[str, Any]:
        return runtime_state.vector.put(collection_name, key, value, vector, index_name=index_name)

    return await call_store("vector_put", _op, needs_client=False)


async def vector_get(collection_name: str, key: str) -> str:
    """Retrieve a document by key from a VectorCollection."""
    denied = check_access("vector", collection_name, "get")
    if denied:
        return await deny("vector_get", denied)

    def _op(_client: Any) -> Dict[str, Any]:
        return runtime_state.vector.get(collection_name, key)

    return await call_store("vector_get", _op, needs_client=False)


async def vector_delete(collection_name: str, key: str) -> str:
    """Remove a document by key from a VectorCollection."""
    denied = check_access("vector", collection_name, "delete", write=True)
    if denied:
        return await deny("vector_delete", denied)

    def _op(_client: Any) -> Dict[str, Any]:
        return runtime_state.vector.delete(collection_name, key)

    return await call_store("vector_delete", _op, needs_client=False)


TOOLS = [vector_search, vector_put, vector_get, vector_delete]
