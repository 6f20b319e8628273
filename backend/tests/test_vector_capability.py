from types import SimpleNamespace

import pytest
from hazelcast.core import HazelcastJsonValue

from bridge import (
    VECTOR_UNAVAILABLE_MESSAGE,
    BoundVectorCapability,
    CapabilityError,
    StubVectorCapability,
    ValueBridge,
    create_vector_capability,
)
from bridge.vector_capability import to_float_vector


class CountingImporter:
    def __init__(self, module=None, error=None):
        self.module = module
        self.error = error
        self.calls = []

    def __call__(self, name):
        self.calls.append(name)
        if self.error is not None:
            raise self.error
        return self.module


class _Done:
    def __init__(self, value):
        self._value = value

    def result(self):
        return self._value


class FakeVector:
    def __init__(self, name, kind, vector):
        self.name = name
        self.type = kind
        self.vector = vector


class FakeDocument:
    def __init__(self, value, vector):
        self.value = value
        self.vectors = vector


def _fake_module():
    return SimpleNamespace(
        Document=FakeDocument,
        Vector=FakeVector,
        Type=SimpleNamespace(DENSE="DENSE"),
    )


class FakeVectorCollection:
    def __init__(self):
        self.documents = {}
        self.search_calls = []

    def set(self, key, document):
        self.documents[key] = document
        return _Done(None)

    def get(self, key):
        return _Done(self.documents.get(key))

    def delete(self, key):
        self.documents.pop(key, None)
        return _Done(None)

    def search_near_vector(self, vector, limit=10, include_value=False, include_vectors=False):
        self.search_calls.append(
            {
                "vector": vector,
                "limit": limit,
                "include_value": include_value,
                "include_vectors": include_vectors,
            }
        )
        hits = []
        for index, (key, document) in enumerate(sorted(self.documents.items())):
            hits.append(
                SimpleNamespace(
                    key=key,
                    score=1.0 - index * 0.1,
                    value=document.value if include_value else None,
                    vectors=document.vectors if include_vectors else None,
                )
            )
        return _Done(hits[:limit])


class FakeVectorClient:
    def __init__(self):
        self.collections = {}
        self.requests = 0

    def get_vector_collection(self, name):
        self.requests += 1
        return self.collections.setdefault(name, FakeVectorCollection())


def _bound(client):
    return BoundVectorCapability(_fake_module(), lambda: client, ValueBridge())


def test_missing_module_yields_stub_and_probes_once() -> None:
    importer = CountingImporter(error=ImportError("No module named 'hazelcast.vector'"))
    provider_calls = []

    capability = create_vector_capability(lambda: provider_calls.append(1), importer=importer)

    assert isinstance(capability, StubVectorCapability)
    for _ in range(3):
        capability.search("docs", [1.0, 2.0, 3.0], top_k=5)
        capability.get("docs", "k")
    assert importer.calls == ["hazelcast.vector"]
    assert provider_calls == []


def test_stub_search_returns_unavailable_diagnostic() -> None:
    capability = create_vector_capability(
        lambda: None, importer=CountingImporter(error=ImportError("missing"))
    )

    result = capability.search("docs", [1.0, 2.0, 3.0], top_k=5)

    assert result == {"ok": False, "available": False, "error": VECTOR_UNAVAILABLE_MESSAGE}
    assert capability.put("docs", "k", {}, [1.0])["error"] == VECTOR_UNAVAILABLE_MESSAGE
    assert capability.delete("docs", "k")["available"] is False


def test_module_without_expected_symbols_yields_stub() -> None:
    importer = CountingImporter(module=SimpleNamespace(Document=FakeDocument))
    capability = create_vector_capability(lambda: None, importer=importer)
    assert isinstance(capability, StubVectorCapability)


def test_present_module_yields_bound_capability() -> None:
    importer = CountingImporter(module=_fake_module())
    capability = create_vector_capability(lambda: FakeVectorClient(), importer=importer)
    assert isinstance(capability, BoundVectorCapability)
    assert importer.calls == ["hazelcast.vector"]


def test_put_stores_json_document_with_dense_vector() -> None:
    client = FakeVectorClient()
    capability = _bound(client)

    result = capability.put("docs", "d1", {"title": "intro"}, [0.1, 0.2], index_name="main")

    assert result == {
        "ok": True,
        "status": "ok",
        "collection": "docs",
        "key": "d1",
        "dimensions": 2,
    }
    document = client.collections["docs"].documents["d1"]
    assert isinstance(document.value, HazelcastJsonValue)
    assert document.vectors.name == "main"
    assert document.vectors.type == "DENSE"
    assert document.vectors.vector == [0.1, 0.2]


def test_get_decodes_stored_value_and_reports_missing() -> None:
    client = FakeVectorClient()
    capability = _bound(client)
    capability.put("docs", "d1", {"title": "intro"}, [1.0])

    found = capability.get("docs", "d1")
    missing = capability.get("docs", "nope")

    assert found["found"] is True
    assert found["value"] == {"title": "intro"}
    assert missing == {"ok": True, "found": False, "collection": "docs", "key": "nope"}


def test_search_returns_scored_results() -> None:
    client = FakeVectorClient()
    capability = _bound(client)
    capability.put("docs", "a", {"n": 1}, [1.0, 0.0])
    capability.put("docs", "b", {"n": 2}, [0.0, 1.0])

    result = capability.search("docs", [1, 0], top_k=1, include_vectors=True)

    assert result["ok"] is True
    assert result["topK"] == 1
    assert result["dimensions"] == 2
    assert result["resultCount"] == 1
    hit = result["results"][0]
    assert hit["key"] == "a"
    assert hit["score"] == 1.0
    assert hit["value"] == {"n": 1}
    assert hit["vectors"] == [{"name": "", "vector": [1.0, 0.0]}]
    call = client.collections["docs"].search_calls[0]
    assert call["limit"] == 1
    assert call["include_value"] is True


def test_search_keeps_hit_when_one_property_fails() -> None:
    class BrokenScoreHit:
        key = "a"
        value = HazelcastJsonValue('{"n": 1}')
        vectors = None

        @property
        def score(self):
            raise RuntimeError("score unavailable")

    class BrokenScoreCollection(FakeVectorCollection):
        def search_near_vector(self, vector, limit=10, include_value=False, include_vectors=False):
            return _Done([BrokenScoreHit()])

    client = FakeVectorClient()
    client.collections["docs"] = BrokenScoreCollection()

    result = _bound(client).search("docs", [1.0, 0.0], top_k=5)

    assert result["ok"] is True
    assert result["resultCount"] == 1
    assert result["results"][0] == {"key": "a", "value": {"n": 1}}


def test_delete_reports_deleted_status() -> None:
    client = FakeVectorClient()
    capability = _bound(client)
    capability.put("docs", "a", 1, [1.0])

    assert capability.delete("docs", "a")["status"] == "deleted"
    assert "a" not in client.collections["docs"].documents


def test_collection_failure_raises_capability_error() -> None:
    class BrokenCollection(FakeVectorCollection):
        def get(self, key):
            raise RuntimeError("partition lost")

    client = FakeVectorClient()
    client.collections["docs"] = BrokenCollection()

    with pytest.raises(CapabilityError) as excinfo:
        _bound(client).get("docs", "a")

    assert excinfo.value.operation == "vector_get"
    assert str(excinfo.value) == "vector_get: partition lost"


def test_signature_mismatch_is_reported() -> None:
    class OldCollection(FakeVectorCollection):
        def search_near_vector(self, vector):
            return _Done([])

    client = FakeVectorClient()
    client.collections["docs"] = OldCollection()

    with pytest.raises(CapabilityError) as excinfo:
        _bound(client).search("docs", [1.0])

    assert "signature does not match" in excinfo.value.cause


def test_client_without_vector_support_raises_capability_error() -> None:
    capability = BoundVectorCapability(_fake_module(), lambda: object(), ValueBridge())
    with pytest.raises(CapabilityError):
        capability.delete("docs", "a")


@pytest.mark.parametrize(
    "raw",
    ["1,2", [], [1, "2"], [True], [float("inf")], None],
)
def test_to_float_vector_rejects_invalid_input(raw) -> None:
    with pytest.raises(ValueError):
        to_float_vector(raw)


def test_to_float_vector_coerces_integers() -> None:
    assert to_float_vector((1, 2.5)) == [1.0, 2.5]
