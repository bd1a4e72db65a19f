from collections.abc import Mapping
from typing import Any

from attrs import Factory, define, field

__all__ = ["Request", "normalize_header_name"]


def normalize_header_name(name: str) -> str:
    """`If_None_Match` and `if-none-match` are the same header."""
    return name.lower().replace("_", "-")


def _normalize_headers(headers: Mapping[str, str]) -> dict[str, str]:
    return {normalize_header_name(k): v for k, v in headers.items()}


@define
class Request:
    """A request, as seen by route handlers, hooks and converters."""

    method: str = field(converter=str.upper)
    path: str = "/"
    headers: dict[str, str] = field(
        factory=dict, converter=_normalize_headers, repr=False
    )
    #: Positional path captures, 1-based. Converters overwrite them in place.
    url_params: dict[int, Any] = Factory(dict)
    query: Mapping[str, str] = Factory(dict)
    body: bytes = field(default=b"", repr=False)
    #: The decoded body, for routes accepting JSON.
    json: Any = field(default=None, repr=False)
    #: The underlying framework request.
    raw: Any = field(default=None, repr=False)

    def get_header(self, name: str, default: str | None = None) -> str | None:
        return self.headers.get(normalize_header_name(name), default)
