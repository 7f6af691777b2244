from dash import Dash
import dash_bootstrap_components as dbc

from neurodash import config
from neurodash.app_state import registry
from neurodash.utils.logging_cfg import get_logger

log = get_logger("neurodash.app")


def create_app(data_path=None) -> Dash:
    """Instantiate the Dash app with sidebar layout and routing callbacks."""
    config.ensure_required_paths()
    app = Dash(
        __name__,
        external_stylesheets=[dbc.themes.CYBORG],
        suppress_callback_exceptions=True,
        assets_folder="neurodash/ui",
    )
    app.title = "neurodash"

    # Import layout and pages AFTER app is created so @callback decorators bind to this app.
    from neurodash.ui import pages
    from neurodash.ui.layout import build_layout

    app.layout = build_layout()
    pages.register_page_callbacks(app)
    app.registry = registry

    # Dashboard renders a loading state until the fetch-then-replace completes.
    path = data_path or config.DATA_PATH
    log.info("Loading dataset from %s", path)
    registry.playback_engine.load_async(path)
    return app


app = create_app()
server = app.server


if __name__ == "__main__":
    app.run(debug=True)
