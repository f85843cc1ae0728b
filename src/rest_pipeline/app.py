"""The Pipeline application class.

Controllers, middleware and the API document are registered during
setup. The route table is compiled into a Router on the first request
and recompiled on the next request after any later registration.
"""

import logging
import threading
from collections.abc import Mapping
from typing import Any

from rest_pipeline._internal.asgi import Receive, Scope, Send
from rest_pipeline.config import PipelineConfig
from rest_pipeline.errors import ConfigurationError
from rest_pipeline.middleware.api_key import ApiKeyToBearer
from rest_pipeline.middleware.protocol import Middleware
from rest_pipeline.routing.route import Route
from rest_pipeline.routing.router import Router
from rest_pipeline.routing.table import Controller, RouteTable
from rest_pipeline.schema.generator import build_document
from rest_pipeline.schema.ui import ApiDocs
from rest_pipeline.schema.validate import validate_document
from rest_pipeline.server.handler import handle_request

logger = logging.getLogger("rest_pipeline.server")


class Pipeline:
    """A REST dispatch pipeline served as an ASGI 3.0 application.

    Usage::

        pipeline = Pipeline(PipelineConfig(default_authentication="bearer", ...))

        pipeline.register("users", {
            "/": {"GET": list_users, "POST": {"action": create_user, "authorization": "admin"}},
            "/:id": {"GET": show_user},
        }, prefix="/v1")

        pipeline.swagger({"title": "Users", "version": "1.0"}, enable_ui=True)

    Thread safety:
        Compilation uses a Lock + double-check so exactly one thread
        builds the router for a given set of registrations, even when
        several workers take their first request at once.
    """

    __slots__ = (
        "_compile_lock",
        "_compiled",
        "_docs",
        "_middleware",
        "_middleware_list",
        "_router",
        "_stale",
        "_table",
        "config",
    )

    def __init__(self, config: PipelineConfig | None = None) -> None:
        self.config: PipelineConfig = config or PipelineConfig()
        self._table = RouteTable()
        self._middleware_list: list[Middleware] = []
        self._docs: ApiDocs | None = None
        self._compile_lock = threading.Lock()
        self._stale = True

        # Compiled state: set by _compile()
        self._router: Router | None = None
        self._middleware: tuple[Middleware, ...] = ()
        self._compiled = False

    # -- Registration --

    def register(
        self,
        name_or_definition: str | Mapping[str, Any] | None,
        definition: Mapping[str, Any] | None = None,
        prefix: str = "",
    ) -> Controller:
        """Register a controller.

        ``register({...})`` mounts the definition at the root (under
        *prefix*); ``register("test", {...}, prefix="/dev")`` mounts it at
        ``/dev/test``. Registering the same mount point again replaces the
        earlier controller.
        """
        if isinstance(name_or_definition, Mapping):
            if definition is not None:
                msg = "Pass either a definition alone or a name and a definition, not two definitions."
                raise ConfigurationError(msg)
            name, definition = None, name_or_definition
        else:
            name = name_or_definition
        if definition is None:
            msg = f"Controller {name!r} needs a definition mapping."
            raise ConfigurationError(msg)

        controller = self._table.register(name, definition, prefix)
        self._stale = True
        logger.debug("Registered controller %r at %r", controller.tag, controller.prefix or "/")
        return controller

    def add_middleware(self, middleware: Middleware) -> None:
        """Add a middleware function or callable object.

        Middleware runs in the order added, outermost first.
        """
        self._middleware_list.append(middleware)
        self._stale = True

    def swagger(
        self,
        info: Mapping[str, Any] | None = None,
        *,
        enable_ui: bool = False,
        host: str | None = None,
        base_path: str | None = None,
    ) -> dict[str, Any]:
        """Generate, validate and mount the Swagger 2.0 document.

        Serves ``GET /swagger.json``; with *enable_ui*, also the browser
        page at ``/swagger``. Raises ``SchemaValidationError`` and mounts
        nothing when the document is invalid.
        """
        document = build_document(self._table, info, host=host, base_path=base_path)
        validate_document(document)

        self._docs = ApiDocs.mount(document, enable_ui=enable_ui)
        self._stale = True
        logger.debug("Mounted API document with %d paths (ui=%s)", len(document["paths"]), enable_ui)
        return document

    # -- Introspection --

    @property
    def table(self) -> RouteTable:
        return self._table

    @property
    def routes(self) -> list[Route]:
        """Every (path, method) route currently registered."""
        return list(self._table.routes())

    # -- ASGI interface --

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        """ASGI 3.0 entry point."""
        if scope["type"] == "lifespan":
            await self._handle_lifespan(scope, receive, send)
            return

        self._ensure_compiled()

        assert self._router is not None

        await handle_request(
            scope,
            receive,
            send,
            router=self._router,
            middleware=self._middleware,
            config=self.config,
            docs=self._docs,
        )

    async def _handle_lifespan(
        self,
        scope: Scope,
        receive: Receive,
        send: Send,
    ) -> None:
        """Run the ASGI lifespan protocol.

        Compiles the route table at startup so the first request does not
        pay for it.
        """
        while True:
            message = await receive()
            msg_type = message["type"]

            if msg_type == "lifespan.startup":
                try:
                    self._ensure_compiled()
                except Exception as exc:
                    await send({"type": "lifespan.startup.failed", "message": str(exc)})
                    return
                await send({"type": "lifespan.startup.complete"})

            elif msg_type == "lifespan.shutdown":
                await send({"type": "lifespan.shutdown.complete"})
                return

    # -- Internal --

    def _ensure_compiled(self) -> None:
        """Thread-safe compile with double-check locking."""
        if not self._stale:
            return
        with self._compile_lock:
            if not self._stale:
                return
            self._compile()

    def _compile(self) -> None:
        """Build the runtime state from the current registrations.

        MUST only be called while holding _compile_lock.
        """
        # Clear first so a registration landing mid-compile marks it stale again
        self._stale = False

        self._router = self._table.compile()

        middleware: list[Middleware] = []
        if self._docs is not None:
            middleware.append(ApiKeyToBearer())
        middleware.extend(self._middleware_list)
        self._middleware = tuple(middleware)

        if self._compiled:
            logger.debug("Recompiled router after registration change (table v%d)", self._table.version)
        self._compiled = True
