"""Document rendering — page markup wrapped in the HTML shell.

A page component is rendered through a :class:`ComponentRenderer`, then
placed inside the ``document.html`` shell together with the initial-load
data block the client reads once on hydration::

    <div id="__prowl">...page markup...</div>
    <script id="__PROWL_DATA__" type="application/json">
      {"props": {"pageProps": {...}}, "page": "/blog/:id", "query": {"id": "1"},
       "buildId": "static", "manifest": [...], "gssp": true}
    </script>

The default renderer treats a page's component as a kida template name.
"""

from __future__ import annotations

import json
import re
from typing import TYPE_CHECKING, Any, Protocol

from kida import Environment, FileSystemLoader
from kida.template import Markup

from prowl._errors import RenderError

if TYPE_CHECKING:
    from prowl._types import Params, Props
    from prowl.config import ProwlConfig
    from prowl.routes.manifest import ClientRouteEntry

DOCUMENT_TEMPLATE = "document.html"
NOT_FOUND_TEMPLATE = "404.html"
SERVER_ERROR_TEMPLATE = "500.html"

# DOM ids shared with the client
MOUNT_ID = "__prowl"
DATA_BLOCK_ID = "__PROWL_DATA__"

# buildId values
STATIC_BUILD_ID = "static"
SERVER_BUILD_ID = "server"

_DATA_BLOCK_RE = re.compile(
    r'<script id="' + DATA_BLOCK_ID + r'" type="application/json">(.*?)</script>',
    re.DOTALL,
)


class ComponentRenderer(Protocol):
    """Turns a page component plus props into markup."""

    def render(self, component: Any, props: Props) -> str: ...


class KidaRenderer:
    """Renders a page whose component is a kida template name.

    Args:
        env: The kida environment holding page templates.

    """

    __slots__ = ("_env",)

    def __init__(self, env: Environment) -> None:
        self._env = env

    def render(self, component: Any, props: Props) -> str:
        if not isinstance(component, str):
            msg = f"Page component must be a template name, got {type(component).__name__}"
            raise RenderError(msg)
        template = self._env.get_template(component)
        return template.render(**props)


def create_environment(config: ProwlConfig) -> Environment:
    """Create the kida environment for pages and the document shell.

    Uses the theme fallback chain, so user templates override the bundled
    ``document.html``, ``404.html`` and ``500.html``.  Registers the
    ``link()`` global for client-routable anchors.
    """
    from prowl.client.link import link
    from prowl.theme import get_template_dirs

    env = Environment(
        loader=FileSystemLoader([str(d) for d in get_template_dirs(config)]),
        autoescape=True,
    )
    env.add_global("link", link)
    return env


def serialize_data_block(data: dict[str, Any]) -> str:
    """JSON for an inline ``<script>``; ``<`` is escaped so it cannot close the tag."""
    payload = json.dumps(data, separators=(",", ":"), ensure_ascii=False)
    return payload.replace("<", "\\u003c")


def read_data_block(html: str) -> dict[str, Any]:
    """Extract the initial-load data block from a rendered document.

    Raises:
        RenderError: If the document carries no (valid) data block.

    """
    match = _DATA_BLOCK_RE.search(html)
    if match is None:
        msg = f"Document has no #{DATA_BLOCK_ID} data block"
        raise RenderError(msg)
    try:
        data = json.loads(match.group(1))
    except json.JSONDecodeError as exc:
        msg = f"#{DATA_BLOCK_ID} is not valid JSON: {exc}"
        raise RenderError(msg) from exc
    if not isinstance(data, dict):
        msg = f"#{DATA_BLOCK_ID} must hold a JSON object"
        raise RenderError(msg)
    return data


class DocumentRenderer:
    """Builds full HTML documents for pages and error responses.

    Args:
        env: Kida environment holding the shell and error templates.
        renderer: Renders page components to markup.
        lang: ``<html lang>`` attribute.
        title: Default ``<title>`` (a ``title`` prop overrides it).

    """

    __slots__ = ("_env", "_lang", "_renderer", "_title")

    def __init__(
        self,
        env: Environment,
        renderer: ComponentRenderer,
        *,
        lang: str = "en",
        title: str = "prowl",
    ) -> None:
        self._env = env
        self._renderer = renderer
        self._lang = lang
        self._title = title

    @classmethod
    def from_config(cls, config: ProwlConfig) -> DocumentRenderer:
        env = create_environment(config)
        return cls(env, KidaRenderer(env), lang=config.lang, title=config.title)

    def page(
        self,
        component: Any,
        props: Props,
        *,
        page: str,
        query: Params,
        build_id: str,
        manifest: list[ClientRouteEntry],
        gssp: bool = False,
    ) -> str:
        """Render *component* and wrap it with the initial-load data block."""
        body = self._renderer.render(component, props)
        data: dict[str, Any] = {
            "props": {"pageProps": props},
            "page": page,
            "query": dict(query),
            "buildId": build_id,
            "manifest": [entry.to_dict() for entry in manifest],
        }
        if gssp:
            data["gssp"] = True

        title = props.get("title")
        shell = self._env.get_template(DOCUMENT_TEMPLATE)
        return shell.render(
            lang=self._lang,
            title=title if isinstance(title, str) else self._title,
            mount_id=MOUNT_ID,
            data_id=DATA_BLOCK_ID,
            body=Markup(body),
            data_json=Markup(serialize_data_block(data)),
        )

    def not_found(self, path: str) -> str:
        return self._env.get_template(NOT_FOUND_TEMPLATE).render(lang=self._lang, path=path)

    def server_error(self, path: str, message: str) -> str:
        return self._env.get_template(SERVER_ERROR_TEMPLATE).render(
            lang=self._lang, path=path, message=message,
        )
