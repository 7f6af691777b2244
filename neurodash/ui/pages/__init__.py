from dash import Input, Output
import dash_bootstrap_components as dbc

from neurodash import config
from neurodash.app_state import registry
from neurodash.utils.logging_cfg import get_logger

from . import dashboard

log = get_logger(__name__)


PAGES = [
    {"name": "Dashboard", "path": "/", "variant": config.DEFAULT_VARIANT},
] + [
    {"name": variant.title, "path": f"/{name}", "variant": name}
    for name, variant in config.DASHBOARD_VARIANTS.items()
]

PAGE_MAP = {page["path"]: page for page in PAGES}


def get_nav_links():
    """Return navigation links for the sidebar."""
    return [
        dbc.NavLink(page["name"], href=page["path"], active="exact", className="sidebar-link")
        for page in PAGES
    ]


def register_page_callbacks(app):
    """Wire routing callback that swaps page content based on pathname."""

    @app.callback(Output("page-content", "children"), Input("url", "pathname"))
    def render_page_content(pathname: str):
        engine = registry.playback_engine
        page = PAGE_MAP.get(pathname or "/")
        if page:
            engine.attach()
            return dashboard.layout(page["variant"])
        # Leaving the dashboard: stop frames from reaching the engine.
        engine.detach()
        log.info("Unknown path %s", pathname)
        return dbc.Container(
            [dbc.Alert(f"404: {pathname} not found", color="danger", className="mt-3")],
            fluid=True,
            className="page-container",
        )


__all__ = ["PAGES", "get_nav_links", "register_page_callbacks"]
