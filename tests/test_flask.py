"""Routers on Flask."""
import pytest
from flask.testing import FlaskClient

from simplerest.flask import FlaskHost

from .apps import make_router


@pytest.fixture
def client() -> FlaskClient:
    host = FlaskHost()
    make_router().register(host)
    return host.to_framework_app(__name__, prefix="/wp-json").test_client()


def test_get(client: FlaskClient):
    resp = client.get("/wp-json/api/items/1")
    assert resp.status_code == 200
    assert resp.get_json() == {"id": 1, "name": "first"}
    assert resp.headers["content-type"] == "application/json"
    assert resp.headers["X-Api"] == "1"
    assert resp.headers["Etag"]


def test_not_modified(client: FlaskClient):
    etag = client.get("/wp-json/api/items/1").headers["Etag"]

    resp = client.get("/wp-json/api/items/1", headers={"If-None-Match": etag})
    assert resp.status_code == 304
    assert resp.data == b""
    assert resp.headers["Etag"] == etag


def test_not_found(client: FlaskClient):
    assert client.get("/wp-json/api/items/7").status_code == 404
    assert client.get("/wp-json/api/items/abc").status_code == 404
    assert client.get("/wp-json/api/nothing").status_code == 404
    assert client.get("/api/items/1").status_code == 404


def test_method_not_allowed(client: FlaskClient):
    assert client.delete("/wp-json/api/items/1").status_code == 405


def test_post_json(client: FlaskClient):
    resp = client.post("/wp-json/api/items", json={"name": "second"})
    assert resp.status_code == 201
    assert resp.get_json() == {"id": 2, "name": "second"}
    assert "Etag" not in resp.headers

    resp = client.post(
        "/wp-json/api/items", data="{", headers={"content-type": "application/json"}
    )
    assert resp.status_code == 400


def test_query(client: FlaskClient):
    resp = client.get("/wp-json/api/echo/hi", query_string={"q": "there"})
    assert resp.get_json() == ["hi", "there"]


def test_custom_method(client: FlaskClient):
    """Routes for methods outside the usual set are reachable."""
    resp = client.open("/wp-json/api/items/1", method="PURGE")
    assert resp.status_code == 200
    assert resp.get_json() == {"purged": "1"}
