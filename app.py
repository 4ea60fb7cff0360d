import logging

import dash
from dash import Dash, dcc, Output, Input, State, no_update
import dash_mantine_components as dmc

from config import APP_TITLE, LOG_LEVEL
from services.cache import init_cache
from services.inventory_metrics import invalidate_inventory_snapshot
from services.session import resolve_redirect

logging.basicConfig(
    level=LOG_LEVEL,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
)
logger = logging.getLogger(__name__)

# DMC 2.x needs React 18
try:
    from dash._dash_renderer import _set_react_version
    _set_react_version("18.2.0")
except (ImportError, AttributeError):
    pass


def _check_versions():
    dmc_version = getattr(dmc, "__version__", "unknown")
    if not dmc_version.startswith("2."):
        raise RuntimeError(
            f"Version mismatch. Expected dash-mantine-components 2.x, found {dmc_version}. "
            f"Reinstall the project dependencies."
        )
_check_versions()

NAV_LINKS = [
    ("Dashboard", "/dashboard"),
    ("Categories", "/categories"),
    ("Products", "/products"),
    ("Stock", "/stock"),
]

app = Dash(__name__, use_pages=True, suppress_callback_exceptions=True, title=APP_TITLE)

# Expose Flask server for Gunicorn
server = app.server
init_cache(server)


def sidebar_links():
    return [
        dmc.NavLink(label=label, href=href, variant="subtle", fw=500)
        for label, href in NAV_LINKS
    ]


app.layout = dmc.MantineProvider(
    theme={
        "fontFamily": "'Inter', -apple-system, BlinkMacSystemFont, 'Segoe UI', Roboto, sans-serif",
        "headings": {
            "fontFamily": "'Inter', -apple-system, BlinkMacSystemFont, 'Segoe UI', Roboto, sans-serif",
            "fontWeight": "600"
        }
    },
    children=[
        dcc.Store(id="auth-token", storage_type="session"),
        dcc.Location(id="url"),
        dcc.Location(id="auth-redirect", refresh=True),
        dmc.AppShell(
            id="appshell",
            padding="sm",
            navbar={
                "width": 240,
                "breakpoint": "sm",
                "collapsed": {"mobile": True, "desktop": False},
            },
            header={
                "height": 60,
                "collapseOffset": 60,
            },
            children=[
                dmc.AppShellHeader(
                    children=[
                        dmc.Group(
                            children=[
                                dmc.Group(
                                    [
                                        dmc.Burger(
                                            id="nav-burger",
                                            opened=False,
                                            size="sm",
                                            hiddenFrom="sm",
                                        ),
                                        dmc.Title(APP_TITLE, order=4, ml="md"),
                                    ],
                                    gap="xs",
                                ),
                                dmc.Button(
                                    "Log out",
                                    id="logout-btn",
                                    variant="subtle",
                                    color="gray",
                                    size="sm",
                                    style={"display": "none"},
                                ),
                            ],
                            h="100%",
                            px="md",
                            justify="space-between",
                            align="center",
                        )
                    ]
                ),
                dmc.AppShellNavbar(
                    id="app-navbar",
                    p="md",
                    children=[
                        dmc.Stack(
                            [
                                dmc.Title(APP_TITLE, order=3),
                                dmc.Divider(),
                                *sidebar_links(),
                            ],
                            gap="sm",
                        )
                    ],
                ),
                dmc.AppShellMain(
                    dmc.Container(dash.page_container, size="responsive", px="md", py="lg"),
                ),
            ],
        ),
    ],
)


@app.callback(
    Output("appshell", "navbar"),
    Input("nav-burger", "opened"),
    State("appshell", "navbar"),
    prevent_initial_call=False,
)
def toggle_navbar(opened, navbar):
    navbar["collapsed"] = {"mobile": not opened, "desktop": False}
    logger.debug(f"Toggle navbar: opened={opened} -> collapsed.mobile={not opened}")
    return navbar


@app.callback(
    Output("auth-redirect", "href"),
    Output("logout-btn", "style"),
    Input("url", "pathname"),
    Input("auth-token", "data"),
)
def guard_routes(pathname, token):
    logout_style = {} if token else {"display": "none"}
    target = resolve_redirect(pathname, token)
    if target is None:
        return no_update, logout_style
    logger.info(f"Redirecting {pathname} -> {target}")
    return target, logout_style


@app.callback(
    Output("auth-token", "data", allow_duplicate=True),
    Input("logout-btn", "n_clicks"),
    State("auth-token", "data"),
    prevent_initial_call=True,
)
def logout(n_clicks, token):
    if not n_clicks:
        return no_update
    if token:
        invalidate_inventory_snapshot(token)
    logger.info("User logged out")
    return None


if __name__ == '__main__':
    app.run(debug=True)
