from collections.abc import Mapping

from simplerest import Request, Response
from simplerest.base import HostBase


def call(
    host: HostBase, method: str, path: str, headers: Mapping[str, str] = {}
) -> Response:
    """Dispatch a request through a host, keeping the response object."""
    resolved = host.resolve(method, path)
    assert not isinstance(resolved, int), f"{method} {path} -> {resolved}"
    route, url_params = resolved
    return route.dispatch(Request(method, path, dict(headers), url_params))
