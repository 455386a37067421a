"""Navigation API endpoints.

Provides all sidebar trees and single named sidebar endpoints.
"""

from aiohttp import web

from docnav.app_keys import site_loader_key
from docnav.core.errors import NotFoundError
from docnav.core.navigation import build_navigation


def create_navigation_routes() -> list[web.RouteDef]:
    return [
        web.get("/api/navigation", get_navigation),
        web.get("/api/navigation/{sidebar}", get_sidebar_navigation),
    ]


async def get_navigation(request: web.Request) -> web.Response:
    site = request.app[site_loader_key].load()
    sidebars = {
        name: [item.to_dict() for item in build_navigation(site, tree)]
        for name, tree in site.sidebars.items()
    }
    return web.json_response({"sidebars": sidebars})


async def get_sidebar_navigation(request: web.Request) -> web.Response:
    name = request.match_info["sidebar"]
    site = request.app[site_loader_key].load()

    try:
        tree = site.sidebar(name)
    except NotFoundError:
        return web.json_response(
            {"error": "Sidebar not found", "sidebar": name},
            status=404,
        )

    items = build_navigation(site, tree)
    return web.json_response({"items": [item.to_dict() for item in items]})
