"""Tests for entity tags on GET responses."""
from hashlib import md5

from attrs import define

from simplerest import Request, Response, Router
from simplerest.base import HostBase

from .utils import call


@define
class Item:
    id: str
    tags: list[str]


def make_router(**options) -> Router:
    router = Router("api", options)
    router.get("/items/{id}", lambda id: {"id": id, "name": "thing"})
    router.get("/models/{id}", lambda id: Item(id, ["a"]))
    router.get("/bytes", lambda: b"raw")
    router.get("/empty", lambda: None)
    router.post("/items", lambda: {"id": "1"})
    router.get("/created", lambda: Response({"id": "1"}, 201))
    router.after(lambda response: response.set_header("X-After", "1"))
    return router


def test_etag_stable(host: HostBase):
    """Identical bodies produce identical tags."""
    make_router().register(host)

    first = call(host, "GET", "/api/items/1")
    second = call(host, "GET", "/api/items/1")
    other = call(host, "GET", "/api/items/2")

    assert first.headers["Etag"] == second.headers["Etag"]
    assert first.headers["Etag"] != other.headers["Etag"]
    assert (
        first.headers["Etag"]
        == md5(b'{"id":"1","name":"thing"}').hexdigest()
    )


def test_not_modified(host: HostBase):
    make_router().register(host)
    etag = call(host, "GET", "/api/items/1").headers["Etag"]

    resp = call(host, "GET", "/api/items/1", {"If-None-Match": etag})

    assert resp.status == 304
    assert resp.data is None
    assert resp.headers == {"X-After": "1", "Etag": etag}


def test_header_name_variants(host: HostBase):
    make_router().register(host)
    etag = call(host, "GET", "/api/items/1").headers["Etag"]

    assert call(host, "GET", "/api/items/1", {"if_none_match": etag}).status == 304
    assert call(host, "GET", "/api/items/1", {"IF-NONE-MATCH": etag}).status == 304


def test_stale_tag(host: HostBase):
    make_router().register(host)
    etag = call(host, "GET", "/api/items/1").headers["Etag"]

    resp = call(host, "GET", "/api/items/2", {"If-None-Match": etag})
    assert resp.status == 200
    assert resp.data == {"id": "2", "name": "thing"}

    resp = call(host, "GET", "/api/items/1", {"If-None-Match": f'"{etag}"'})
    assert resp.status == 200


def test_models_and_bytes(host: HostBase):
    """Models are unstructured before hashing, bytes are hashed as they are."""
    make_router().register(host)

    model = call(host, "GET", "/api/models/1")
    assert model.headers["Etag"] == md5(b'{"id":"1","tags":["a"]}').hexdigest()

    raw = call(host, "GET", "/api/bytes")
    assert raw.headers["Etag"] == md5(b"raw").hexdigest()

    empty = call(host, "GET", "/api/empty")
    assert empty.headers["Etag"] == md5(b"null").hexdigest()


def test_only_successful_gets(host: HostBase):
    make_router().register(host)

    assert "Etag" not in call(host, "POST", "/api/items").headers
    created = call(host, "GET", "/api/created")
    assert created.status == 201
    assert "Etag" not in created.headers


def test_disabled(host: HostBase):
    make_router(etag=False).register(host)

    resp = call(host, "GET", "/api/items/1")
    assert "Etag" not in resp.headers
    assert resp.headers == {"X-After": "1"}


def test_maybe_add_etag_after_pipeline():
    """Tags are computed from the final body, after all hooks ran."""
    router = Router("api")
    response = Response({"a": 1})
    router.maybe_add_etag(Request("GET", "/"), response)
    assert response.headers["Etag"] == md5(b'{"a":1}').hexdigest()

    response = Response({"b": 2, "a": 1})
    router.maybe_add_etag(Request("GET", "/"), response)
    assert response.headers["Etag"] == md5(b'{"a":1,"b":2}').hexdigest()

    response = Response("x")
    router.maybe_add_etag(Request("head", "/"), response)
    assert response.headers == {}
