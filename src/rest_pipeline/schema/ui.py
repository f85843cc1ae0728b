"""API document endpoints and the interactive browser page.

``ApiDocs`` is consulted by the ASGI handler before routing, inside the
middleware chain, so the api-key rewrite and any user middleware apply
to it as well:

    GET /swagger.json   -> the document (200, JSON)
    GET /swagger[/]     -> the browser page, or 404 when the UI is disabled

The page is rendered once with kida when the docs are mounted.
"""

from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

from kida import Environment

from rest_pipeline.errors import NotFound
from rest_pipeline.http.request import Request
from rest_pipeline.http.response import Response
from rest_pipeline.server.normalize import json_response

HTML_CONTENT_TYPE = "text/html; charset=utf-8"

UI_TEMPLATE = """\
<!DOCTYPE html>
<html lang="en">
<head>
  <meta charset="utf-8">
  <title>{{ title }}</title>
  <link rel="stylesheet" href="{{ assets }}/swagger-ui.css">
</head>
<body>
  <div id="swagger-ui"></div>
  <script src="{{ assets }}/swagger-ui-bundle.js"></script>
  <script>
    window.ui = SwaggerUIBundle({
      url: "{{ json_url }}",
      dom_id: "#swagger-ui",
      deepLinking: true,
    });
  </script>
</body>
</html>
"""

SWAGGER_UI_ASSETS = "https://unpkg.com/swagger-ui-dist@5"


def render_ui_page(
    document: Mapping[str, Any],
    json_url: str,
    *,
    assets: str = SWAGGER_UI_ASSETS,
) -> str:
    """Render the browser page pointing at *json_url*."""
    env = Environment(autoescape=True)
    template = env.from_string(UI_TEMPLATE)
    title = document.get("info", {}).get("title", "API")
    return template.render({"title": title, "json_url": json_url, "assets": assets})


@dataclass(frozen=True, slots=True)
class ApiDocs:
    """Mounted API document endpoints.

    ``page`` holds the rendered browser page; it is empty when the UI
    is disabled.
    """

    document: dict[str, Any]
    enable_ui: bool = False
    page: str = ""
    json_path: str = "/swagger.json"
    ui_path: str = "/swagger"

    @classmethod
    def mount(cls, document: dict[str, Any], *, enable_ui: bool = False) -> "ApiDocs":
        page = render_ui_page(document, "/swagger.json") if enable_ui else ""
        return cls(document=document, enable_ui=enable_ui, page=page)

    def serve(self, request: Request) -> Response | None:
        """Answer *request* if it targets a docs path, else ``None``."""
        if request.method != "GET":
            return None
        if request.path == self.json_path:
            return json_response(self.document)
        if request.path in (self.ui_path, f"{self.ui_path}/"):
            if not self.enable_ui:
                raise NotFound("API browser page is disabled")
            return Response(body=self.page, content_type=HTML_CONTENT_TYPE)
        return None
