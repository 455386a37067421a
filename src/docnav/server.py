"""aiohttp server for Docnav.

Application factory and route registration for the query server.
"""

import logging

from aiohttp import web

from docnav.api.config import create_config_routes
from docnav.api.docs import create_docs_routes
from docnav.api.navigation import create_navigation_routes
from docnav.app_keys import live_reload_enabled_key, site_loader_key
from docnav.config import Config
from docnav.core.site import SiteLoader

logger = logging.getLogger(__name__)


def create_app(config: Config, loader: SiteLoader | None = None) -> web.Application:
    """Create aiohttp application.

    Args:
        config: Application configuration
        loader: Site loader to serve from (default: a new one for config)

    Returns:
        Configured aiohttp application
    """
    app = web.Application()

    if loader is None:
        loader = SiteLoader(config)

    app[site_loader_key] = loader
    app[live_reload_enabled_key] = config.live_reload.enabled

    app.router.add_routes(create_docs_routes())
    app.router.add_routes(create_navigation_routes())
    app.router.add_routes(create_config_routes())

    # Live reload WebSocket endpoint
    if config.live_reload.enabled:
        from docnav.live import LiveReloadManager
        from docnav.live.reload import create_live_reload_routes

        manager = LiveReloadManager(loader)
        app["live_reload_manager"] = manager
        app.router.add_routes(create_live_reload_routes(manager))
        app.on_startup.append(_start_live_reload)
        app.on_cleanup.append(_stop_live_reload)

    return app


async def _start_live_reload(app: web.Application) -> None:
    """Start live reload on application startup."""
    from docnav.live import LiveReloadManager

    manager: LiveReloadManager = app["live_reload_manager"]
    await manager.start()


async def _stop_live_reload(app: web.Application) -> None:
    """Stop live reload on application cleanup."""
    from docnav.live import LiveReloadManager

    manager: LiveReloadManager = app["live_reload_manager"]
    await manager.stop()


def run_server(config: Config, loader: SiteLoader | None = None) -> None:
    """Run the server.

    Args:
        config: Application configuration
        loader: Site loader holding an already built snapshot
    """
    app = create_app(config, loader)
    logger.info(f"Serving on {config.server.host}:{config.server.port}")
    web.run_app(app, host=config.server.host, port=config.server.port, print=None)
