from collections.abc import Callable, Iterable, Mapping
from logging import getLogger
from typing import Any

from attrs import Factory, define, field, frozen
from attrs.validators import instance_of
from cattrs import Converter
from cattrs.preconf.orjson import make_converter
from incant import Incanter

from .requests import Request
from .responses import Response, body_digest
from .route import AlreadyRegistered, Route
from .types import Callback, Dispatch, Host

__all__ = ["Router", "RouterOptions"]

log = getLogger(__name__)

_options_converter = Converter(forbid_extra_keys=True)


@frozen
class RouterOptions:
    #: Add entity tags to successful GET responses and honor `If-None-Match`.
    etag: bool = field(default=True, validator=instance_of(bool))

    @classmethod
    def from_mapping(cls, options: Mapping[str, Any]) -> "RouterOptions":
        """Merge a mapping of options with the defaults."""
        return _options_converter.structure(options, cls)


def _to_options(options: RouterOptions | Mapping[str, Any]) -> RouterOptions:
    if isinstance(options, RouterOptions):
        return options
    return RouterOptions.from_mapping(options)


@define(eq=False)
class Router:
    """A collection of routes under a namespace."""

    namespace: str = field(converter=lambda n: n.strip("/"))
    options: RouterOptions = field(
        default=Factory(RouterOptions), converter=_to_options
    )
    #: The converter used to serialize bodies for entity tags.
    converter: Converter = Factory(make_converter)
    #: The incanter shared by all routes of this router.
    incant: Incanter = Factory(Incanter)
    _routes: list[Route] = Factory(list)
    _before: list[Callback] = Factory(list)
    _after: list[Callback] = Factory(list)
    _registered: bool = field(default=False, init=False)

    @property
    def routes(self) -> tuple[Route, ...]:
        return tuple(self._routes)

    def match(self, method: str, path: str, handler: Callback) -> Route:
        """
        Map a request method and a path to a handler.

        :param method: The HTTP method, in any case.
        :param path: The path template, like `/users/{id}`.
        :param handler: Returns the response body, or a `Response`.
        """
        self._check_unregistered()
        route = Route(method.upper(), path, handler, incant=self.incant)
        self._routes.append(route)
        return route

    def get(self, path: str, handler: Callback) -> Route:
        return self.match("GET", path, handler)

    def post(self, path: str, handler: Callback) -> Route:
        return self.match("POST", path, handler)

    def put(self, path: str, handler: Callback) -> Route:
        return self.match("PUT", path, handler)

    def patch(self, path: str, handler: Callback) -> Route:
        return self.match("PATCH", path, handler)

    def delete(self, path: str, handler: Callback) -> Route:
        return self.match("DELETE", path, handler)

    def route(
        self, path: str, methods: Iterable[str] = ("GET",)
    ) -> Callable[[Callback], Callback]:
        """Register the decorated function for the given methods."""

        def decorator(handler: Callback) -> Callback:
            for method in methods:
                self.match(method, path, handler)
            return handler

        return decorator

    def before(self, callback: Callback) -> "Router":
        """Run `callback` before the handler of every route, after their own hooks."""
        self._check_unregistered()
        self._before.append(callback)
        return self

    def after(self, callback: Callback) -> "Router":
        """Run `callback` after the handler of every route, after their own hooks."""
        self._check_unregistered()
        self._after.append(callback)
        return self

    def register(self, host: Host) -> None:
        """
        Hand all routes over to the host.

        Call this once, when the host application starts up. The routes and
        the router cannot be configured afterwards.
        """
        self._check_unregistered()
        self._registered = True
        for route in self._routes:
            route._extend_hooks(self._before, self._after)
            route.freeze()
            pattern = route.compiled_path
            log.debug("Registering %s /%s%s", route.method, self.namespace, pattern)
            host.register_route(
                self.namespace,
                {route.method},
                pattern,
                self._make_dispatch(route),
                True,
                accept_json=route.is_accept_json,
            )

    def maybe_add_etag(self, request: Request, response: Response) -> None:
        """Tag successful GET responses, and turn matching ones into 304s."""
        if (
            not self.options.etag
            or request.method != "GET"
            or response.status != 200
        ):
            return
        etag = body_digest(response.data, self.converter)
        response.set_header("Etag", etag)
        if etag == request.get_header("If-None-Match"):
            response.status = 304
            response.data = None

    def _make_dispatch(self, route: Route) -> Dispatch:
        def dispatch(request: Request) -> Response:
            response = route.execute(request)
            self.maybe_add_etag(request, response)
            return response

        return dispatch

    def _check_unregistered(self) -> None:
        if self._registered:
            raise AlreadyRegistered(f"router /{self.namespace} is registered")
