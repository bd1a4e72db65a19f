from collections.abc import Callable, Iterable, Mapping
from inspect import signature
from typing import Any

from attrs import Factory, define, field, frozen
from incant import Hook, Incanter

from .path import CompiledPath, compile_path
from .requests import Request
from .responses import Response
from .types import Callback

__all__ = ["AlreadyRegistered", "Binding", "Route", "make_binding"]

#: Parameters with these names receive the request and the response.
REQUEST = "request"
RESPONSE = "response"


class AlreadyRegistered(Exception):
    """The route or router has already been handed to a host."""


@frozen
class Binding:
    """A callable and the names of the arguments it takes."""

    fn: Callable[..., Any]
    names: tuple[str, ...]

    def __call__(self, values: Mapping[str, Any]) -> Any:
        return self.fn(**{n: values[n] for n in self.names if n in values})


def make_binding(
    fn: Callback, path_params: Iterable[str], incant: Incanter
) -> Binding:
    """
    Prepare a callable for named-argument binding.

    The request, the response and the path parameters are left as
    parameters of the composed function; anything else the incanter
    knows how to provide is resolved by it.
    """
    hooks = [Hook.for_name(n, None) for n in (REQUEST, RESPONSE, *path_params)]
    prepared = incant.compose(fn, hooks, is_async=False)
    return Binding(prepared, tuple(signature(prepared).parameters))


def _is_empty(value: Any) -> bool:
    # `0`, `False` and `"0"` are empty too.
    return not value or (isinstance(value, str) and value == "0")


def _with_leading_slash(path: str) -> str:
    return path if path.startswith("/") else f"/{path}"


@frozen
class _Pipeline:
    compiled: CompiledPath
    indices: Mapping[str, int]
    converters: tuple[tuple[int, Binding], ...]
    before: tuple[Binding, ...]
    handler: Binding
    after: tuple[Binding, ...]

    def values(self, request: Request, response: Response) -> dict[str, Any]:
        res = {
            name: request.url_params[index]
            for name, index in self.indices.items()
            if index in request.url_params
        }
        res[REQUEST] = request
        res[RESPONSE] = response
        return res


@define(eq=False)
class Route:
    """A method, a path template and a handler, with their hooks."""

    _method: str
    _path: str = field(converter=_with_leading_slash)
    handler: Callback
    #: The incanter used to compose handlers, hooks and converters.
    incant: Incanter = Factory(Incanter)
    _constraints: dict[str, str] = Factory(dict)
    _converters: dict[str, Callback] = Factory(dict)
    _before: list[Callback] = Factory(list)
    _after: list[Callback] = Factory(list)
    _accept_json: bool = False
    _pipeline: _Pipeline | None = field(default=None, init=False)

    @property
    def method(self) -> str:
        return self._method

    @property
    def path(self) -> str:
        """The path template, as given."""
        return self._path

    @property
    def compiled_path(self) -> str:
        """The path pattern, using the current constraints."""
        return self.compile().pattern

    @property
    def is_accept_json(self) -> bool:
        return self._accept_json

    @property
    def is_registered(self) -> bool:
        return self._pipeline is not None

    def compile(self) -> CompiledPath:
        return compile_path(self._path, self._constraints)

    def accept_json(self, accept: bool = True) -> "Route":
        self._check_unregistered()
        self._accept_json = bool(accept)
        return self

    def before(self, callback: Callback) -> "Route":
        """Run `callback` when the route is matched, before the handler."""
        self._check_unregistered()
        self._before.append(callback)
        return self

    def after(self, callback: Callback) -> "Route":
        """Run `callback` after the handler."""
        self._check_unregistered()
        self._after.append(callback)
        return self

    def assert_(self, variable: str, pattern: str) -> "Route":
        """
        Constrain a path variable.

        :param variable: The placeholder name.
        :param pattern: The regular expression the variable must match.
        """
        self._check_unregistered()
        self._constraints[variable] = pattern
        return self

    def convert(self, variable: str, callback: Callback) -> "Route":
        """
        Convert a path variable before hooks and the handler see it.

        :param variable: The placeholder name.
        :param callback: Called with named-argument binding; the return
            value replaces the variable.
        """
        self._check_unregistered()
        self._converters[variable] = callback
        return self

    def execute(self, request: Request) -> Response:
        """Run converters, before hooks, the handler and after hooks."""
        pipeline = self._pipeline or self._prepare()
        response = Response()

        for index, converter in pipeline.converters:
            request.url_params[index] = converter(pipeline.values(request, response))

        for hook in pipeline.before:
            hook(pipeline.values(request, response))

        result = pipeline.handler(pipeline.values(request, response))
        if isinstance(result, Response):
            if result is not response:
                response.status = result.status
                response.data = result.data
                response.headers.update(result.headers)
        elif not _is_empty(result):
            response.data = result

        for hook in pipeline.after:
            hook(pipeline.values(request, response))

        return response

    def freeze(self) -> None:
        """Prepare the pipeline. No configuration is allowed afterwards."""
        self._check_unregistered()
        self._pipeline = self._prepare()

    def _extend_hooks(
        self, before: Iterable[Callback], after: Iterable[Callback]
    ) -> None:
        self._check_unregistered()
        self._before.extend(before)
        self._after.extend(after)

    def _check_unregistered(self) -> None:
        if self._pipeline is not None:
            raise AlreadyRegistered(f"{self._method} {self._path} is registered")

    def _prepare(self) -> _Pipeline:
        compiled = self.compile()
        indices = compiled.indices
        names = compiled.names

        def bind(fn: Callback) -> Binding:
            return make_binding(fn, names, self.incant)

        return _Pipeline(
            compiled,
            indices,
            tuple(
                (indices[name], bind(conv))
                for name, conv in self._converters.items()
                if name in indices
            ),
            tuple(bind(h) for h in self._before),
            bind(self.handler),
            tuple(bind(h) for h in self._after),
        )
