from typing import TypeAlias

from attrs import define
from flask import Flask
from flask import Response as FrameworkResponse
from flask import request

from .base import HostBase

__all__ = ["FlaskHost", "Host"]


@define
class FlaskHost(HostBase):
    """Serve registered routers using Flask."""

    def to_framework_app(self, import_name: str, prefix: str = "") -> Flask:
        """
        Create a Flask app routing every request under `prefix` to the
        registered routes.
        """
        f = Flask(import_name)
        prefix = prefix.rstrip("/")
        methods = self.methods()

        def dispatch(path: str = "") -> FrameworkResponse:
            status, body, headers = self.handle(
                request.method,
                f"/{path}",
                request.headers,
                request.args.to_dict(),
                request.get_data(),
                raw=request._get_current_object(),  # type: ignore
            )
            return FrameworkResponse(body, status, list(headers.items()))

        f.add_url_rule(f"{prefix}/", "simplerest", dispatch, methods=methods)
        f.add_url_rule(
            f"{prefix}/<path:path>", "simplerest", dispatch, methods=methods
        )
        return f

    def run(self, import_name: str, port: int = 8000, prefix: str = "") -> None:
        self.to_framework_app(import_name, prefix).run(port=port)


Host: TypeAlias = FlaskHost
