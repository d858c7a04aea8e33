"""Lifespan dependency injection bridge.

``inject`` lets the FastAPI lifespan declare ``Depends()`` parameters
the same way a route does, so the interaction store, the vector index
client and telemetry are each set up by one generator dependency that
also owns the matching teardown.

Based on https://github.com/fastapi/fastapi/discussions/11742
"""

from contextlib import AsyncExitStack, asynccontextmanager
from functools import partial
from typing import Any, Callable

from fastapi import FastAPI, Request
from fastapi.dependencies.utils import get_dependant, solve_dependencies

# Synthetic ASGI scope for resolving dependencies outside a request.
_LIFESPAN_SCOPE: dict[str, Any] = {
    "type": "http",
    "http_version": "1.1",
    "method": "GET",
    "scheme": "http",
    "path": "/",
    "raw_path": b"/",
    "query_string": b"",
    "root_path": "",
    "headers": ((b"x-request-scope", b"lifespan"),),
    "client": ("localhost", 80),
    "server": ("localhost", 80),
}


def get_app(request: Request) -> FastAPI:
    """Lifespan dependency that returns the ``FastAPI`` application."""
    return request.app


def inject(
    lifespan: Callable[..., Any],
) -> Callable[[FastAPI], Any]:
    """Resolve ``Depends()`` parameters for a lifespan function.

    Usage::

        @inject
        async def lifespan(
            app: FastAPI,
            _db: Annotated[None, Depends(build_db)],
            _index: Annotated[None, Depends(build_vector_index)],
        ):
            yield

    Cleanups run in reverse resolution order on shutdown, and
    ``app.dependency_overrides`` is honoured so tests can swap any of
    them out.
    """

    @asynccontextmanager
    async def wrapper(app: FastAPI):  # type: ignore[misc]
        dependant = get_dependant(path="/", call=partial(lifespan, app))

        async with AsyncExitStack() as stack:
            # Newer FastAPI releases look up generator teardown stacks in
            # the scope; all of them close with the application.
            request = Request(
                scope={
                    **_LIFESPAN_SCOPE,
                    "state": app.state,
                    "app": app,
                    "fastapi_astack": stack,
                    "fastapi_inner_astack": stack,
                    "fastapi_function_astack": stack,
                }
            )
            solved = await solve_dependencies(
                request=request,
                dependant=dependant,
                async_exit_stack=stack,
                embed_body_fields=False,
                dependency_overrides_provider=app,
            )
            async with asynccontextmanager(lifespan)(app, **solved.values):
                yield

    return wrapper
