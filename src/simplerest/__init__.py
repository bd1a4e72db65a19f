from .path import CompiledPath, compile_path
from .requests import Request
from .responses import Response, ResponseException
from .route import AlreadyRegistered, Route
from .router import Router, RouterOptions
from .types import Host, Method

__all__ = [
    "AlreadyRegistered",
    "CompiledPath",
    "compile_path",
    "Host",
    "Method",
    "redirect",
    "Request",
    "Response",
    "ResponseException",
    "Route",
    "Router",
    "RouterOptions",
]


def redirect(location: str, headers: dict[str, str] = {}) -> Response:
    return Response(None, 302, headers | {"Location": location})
