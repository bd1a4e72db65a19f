from collections.abc import Callable, Collection
from typing import TYPE_CHECKING, Any, Literal, Protocol, TypeAlias

if TYPE_CHECKING:
    from .requests import Request
    from .responses import Response

#: A handler, hook or converter. Parameters are bound by name.
Callback: TypeAlias = Callable[..., Any]

#: The HTTP request method.
Method: TypeAlias = Literal["GET", "POST", "PUT", "PATCH", "DELETE", "HEAD", "OPTIONS"]

#: What a host calls for a matched request.
Dispatch: TypeAlias = Callable[["Request"], "Response"]


class Host(Protocol):
    """The web framework side of a router registration."""

    def register_route(
        self,
        namespace: str,
        methods: Collection[str],
        pattern: str,
        dispatch: Dispatch,
        allow_multiple: bool,
        accept_json: bool = False,
    ) -> None:
        """
        Make `dispatch` reachable for `methods` on `/{namespace}{pattern}`.

        :param pattern: A regular expression with positional capture groups.
        :param allow_multiple: Whether to keep the handlers already
            registered for the same path, or replace them.
        :param accept_json: Whether the request body should be parsed as JSON.
        """
        ...
