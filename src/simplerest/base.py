from collections.abc import Collection, Mapping
from logging import getLogger
from re import IGNORECASE, Pattern, compile
from typing import Any, get_args

from attrs import Factory, define, frozen
from cattrs import Converter
from cattrs.preconf.orjson import make_converter
from orjson import JSONDecodeError, loads

from .requests import Request
from .responses import Response, ResponseException, render_body, render_headers
from .types import Dispatch, Method

__all__ = ["HostBase", "RegisteredRoute"]

log = getLogger(__name__)


@frozen
class RegisteredRoute:
    methods: frozenset[str]
    dispatch: Dispatch
    accept_json: bool = False


@define
class _PathEntry:
    path: str
    regex: Pattern[str]
    routes: list[RegisteredRoute]


@define
class HostBase:
    """
    The common base for host adapters.

    Keeps registered routes in registration order and matches request
    paths against them; the first matching path wins.
    """

    #: The converter used to serialize response bodies.
    converter: Converter = Factory(make_converter)
    _paths: dict[str, _PathEntry] = Factory(dict)

    def register_route(
        self,
        namespace: str,
        methods: Collection[str],
        pattern: str,
        dispatch: Dispatch,
        allow_multiple: bool,
        accept_json: bool = False,
    ) -> None:
        path = f"/{namespace}{pattern}" if namespace else pattern
        route = RegisteredRoute(
            frozenset(m.upper() for m in methods), dispatch, accept_json
        )
        entry = self._paths.get(path)
        if entry is None:
            self._paths[path] = _PathEntry(path, compile(path, IGNORECASE), [route])
        elif allow_multiple:
            entry.routes.append(route)
        else:
            entry.routes = [route]

    def methods(self) -> list[str]:
        """Standard methods, plus any others routes were registered for."""
        res = dict.fromkeys(get_args(Method))
        for entry in self._paths.values():
            for route in entry.routes:
                res.update(dict.fromkeys(sorted(route.methods)))
        return list(res)

    def resolve(
        self, method: str, path: str
    ) -> tuple[RegisteredRoute, dict[int, Any]] | int:
        """
        Find the route for a request.

        :return: The route and its positional path captures, or the
            status code to respond with (404 or 405).
        """
        method = method.upper()
        path_matched = False
        for entry in self._paths.values():
            match = entry.regex.fullmatch(path)
            if match is None:
                continue
            path_matched = True
            for route in entry.routes:
                if method in route.methods:
                    return route, dict(enumerate(match.groups(), 1))
        log.debug("No route for %s %s", method, path)
        return 405 if path_matched else 404

    def handle(
        self,
        method: str,
        path: str,
        headers: Mapping[str, str],
        query: Mapping[str, str],
        body: bytes,
        raw: Any = None,
    ) -> tuple[int, bytes, dict[str, str]]:
        """Run a framework request through the matching route."""
        resolved = self.resolve(method, path)
        if isinstance(resolved, int):
            return self.render(Response(None, resolved))
        route, url_params = resolved
        request = Request(method, path, headers, url_params, query, body, raw=raw)
        if route.accept_json and body:
            try:
                request.json = loads(body)
            except JSONDecodeError:
                return self.render(Response({"message": "Invalid JSON body."}, 400))
        try:
            response = route.dispatch(request)
        except ResponseException as exc:
            response = exc.response
        return self.render(response)

    def render(self, response: Response) -> tuple[int, bytes, dict[str, str]]:
        body, content_type = render_body(response, self.converter)
        return response.status, body, render_headers(response, content_type)
