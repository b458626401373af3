"""Link — an anchor that navigates through the client router.

Without a client router (server rendering, no window) a link is a plain
anchor.  With one, a click without Meta/Ctrl becomes ``router.push(href)``
and hovering prefetches the target's data unless prefetching is disabled.

Templates use the ``link()`` global::

    {{ link("/blog/1", "First post") }}
    {{ link("/about", "About", prefetch=False, class_="nav") }}
"""

from __future__ import annotations

from dataclasses import dataclass, field
from html import escape
from typing import TYPE_CHECKING

from kida.template import Markup

if TYPE_CHECKING:
    from prowl.client.router import ClientRouter

# Marker attributes the rendered anchor carries
LINK_ATTR = "data-prowl-link"
PREFETCH_ATTR = "data-prowl-prefetch"


@dataclass(slots=True)
class ClickEvent:
    """The parts of a DOM click a link cares about."""

    meta_key: bool = False
    ctrl_key: bool = False
    default_prevented: bool = False

    def prevent_default(self) -> None:
        self.default_prevented = True


def _render_attrs(attrs: dict[str, object]) -> str:
    parts: list[str] = []
    for name, value in attrs.items():
        if value is None or value is False:
            continue
        # ``class_`` -> ``class``, ``aria_label`` -> ``aria-label``
        attr = name.rstrip("_").replace("_", "-")
        if value is True:
            parts.append(f" {attr}")
        else:
            parts.append(f' {attr}="{escape(str(value))}"')
    return "".join(parts)


@dataclass(slots=True)
class Link:
    """One client-routable anchor.

    Attributes:
        href: Target URL.
        text: Anchor text (escaped on render).
        router: The client router, or ``None`` for a plain anchor.
        prefetch: Prefetch page data on hover.
        attrs: Extra HTML attributes.

    """

    href: str
    text: str = ""
    router: ClientRouter | None = None
    prefetch: bool = True
    attrs: dict[str, object] = field(default_factory=dict)

    def render(self) -> Markup:
        marker: dict[str, object] = {LINK_ATTR: True}
        if not self.prefetch:
            marker[PREFETCH_ATTR] = "false"
        return Markup(
            f'<a href="{escape(self.href)}"'
            f"{_render_attrs({**marker, **self.attrs})}>{escape(self.text)}</a>"
        )

    async def on_click(self, event: ClickEvent) -> None:
        """Handle a click; modified clicks keep the browser's behavior."""
        if self.router is None or event.meta_key or event.ctrl_key:
            return
        event.prevent_default()
        await self.router.push(self.href)

    def on_mouse_enter(self) -> None:
        if self.router is not None and self.prefetch:
            self.router.prefetch_nowait(self.href)

    def __html__(self) -> str:
        return str(self.render())


def link(href: str, text: str = "", *, prefetch: bool = True, **attrs: object) -> Markup:
    """Kida global rendering a client-routable anchor."""
    return Link(href, text, prefetch=prefetch, attrs=attrs).render()
