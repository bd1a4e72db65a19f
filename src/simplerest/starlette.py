from typing import TypeAlias

from attrs import define
from starlette.applications import Starlette
from starlette.concurrency import run_in_threadpool
from starlette.requests import Request as FrameworkRequest
from starlette.responses import Response as FrameworkResponse
from starlette.routing import Route as FrameworkRoute

from .base import HostBase

__all__ = ["StarletteHost", "Host"]


@define
class StarletteHost(HostBase):
    """Serve registered routers using Starlette."""

    def to_framework_app(self, prefix: str = "") -> Starlette:
        async def endpoint(request: FrameworkRequest) -> FrameworkResponse:
            body = await request.body()
            # Routes are synchronous.
            status, payload, headers = await run_in_threadpool(
                self.handle,
                request.method,
                f"/{request.path_params['path']}",
                request.headers,
                dict(request.query_params),
                body,
                raw=request,
            )
            return FrameworkResponse(payload, status, headers)

        return Starlette(
            routes=[
                FrameworkRoute(
                    f"{prefix.rstrip('/')}/{{path:path}}",
                    endpoint,
                    methods=self.methods(),
                )
            ]
        )

    async def run(self, port: int = 8000, prefix: str = "") -> None:
        """Start serving using uvicorn.

        Cancel the task running this to shut down uvicorn.
        """
        from uvicorn import Config, Server

        config = Config(self.to_framework_app(prefix), port=port, access_log=False)
        await Server(config=config).serve()


Host: TypeAlias = StarletteHost
