"""Prowl — a file-system page router with build-time SSG/SSR resolution.

Every file under ``pages/`` is a route.  ``prowl build`` decides once, per
route, whether it is prerendered (SSG) or rendered per request (SSR) and
writes the route manifest; ``prowl serve`` answers both kinds from that
manifest; the client layer navigates without full reloads.

Quick start::

    import prowl

    prowl.build("my-site/")        # Resolve modes, prerender SSG pages
    prowl.serve("my-site/")        # Serve the build on Pounce

Built on:

    pounce      ASGI server       (serves apps)
    chirp       Web framework     (routes requests)
    kida        Template engine   (renders HTML)

"""

# PEP 703: Declare this module as free-threading safe
_Py_mod_gil = 0

__version__ = "0.1.0-dev"
__all__ = [
    "ProwlConfig",
    "__version__",
    "build",
    "list_routes",
    "serve",
]

# Public name -> defining module, imported on first access
_LAZY: dict[str, str] = {
    "ProwlConfig": "prowl.config",
    "build": "prowl.app",
    "list_routes": "prowl.app",
    "serve": "prowl.app",
}


def __getattr__(name: str) -> object:
    """Resolve the public API lazily so ``import prowl`` stays cheap."""
    module_name = _LAZY.get(name)
    if module_name is None:
        msg = f"module {__name__!r} has no attribute {name!r}"
        raise AttributeError(msg)

    from importlib import import_module

    return getattr(import_module(module_name), name)
