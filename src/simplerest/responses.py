from hashlib import md5
from typing import Any

from attrs import Factory, define
from cattrs import Converter
from orjson import OPT_SORT_KEYS, dumps

__all__ = [
    "Response",
    "ResponseException",
    "body_digest",
    "render_body",
    "render_headers",
]


@define
class Response:
    """The response being built for a request."""

    data: Any = None
    status: int = 200
    headers: dict[str, str] = Factory(dict)

    def set_header(self, name: str, value: str) -> None:
        self.headers[name] = value


class ResponseException(Exception):
    """
    Abort the request with the given response.

    Not handled by routes; host adapters render it as a normal response.
    """

    def __init__(self, response: Response):
        super().__init__(response)
        self.response = response


def render_body(response: Response, converter: Converter) -> tuple[bytes, str | None]:
    """Turn a response body into bytes and a content type."""
    data = response.data
    if data is None:
        return b"", None
    if isinstance(data, bytes):
        return data, "application/octet-stream"
    return dumps(converter.unstructure(data)), "application/json"


def body_digest(data: Any, converter: Converter) -> str:
    """A stable digest of a response body, for entity tags."""
    if isinstance(data, bytes):
        payload = data
    else:
        payload = dumps(converter.unstructure(data), option=OPT_SORT_KEYS)
    return md5(payload).hexdigest()


def render_headers(response: Response, content_type: str | None) -> dict[str, str]:
    """Response headers, with the content type unless already set."""
    headers = dict(response.headers)
    if content_type is not None and not any(
        k.lower() == "content-type" for k in headers
    ):
        headers["content-type"] = content_type
    return headers
