"""Documents API endpoints.

Serves document metadata together with breadcrumbs and previous/next
links for the rendering layer.
"""

import logging

from aiohttp import web

from docnav.app_keys import site_loader_key
from docnav.core.errors import NotFoundError
from docnav.core.registry import Document

logger = logging.getLogger(__name__)


def create_docs_routes() -> list[web.RouteDef]:
    return [
        web.get("/api/docs", list_docs),
        web.get("/api/docs/{doc_id:.*}", get_doc),
    ]


async def list_docs(request: web.Request) -> web.Response:
    site = request.app[site_loader_key].load()
    return web.json_response({"items": [doc.to_dict() for doc in site.all()]})


async def get_doc(request: web.Request) -> web.Response:
    doc_id = request.match_info["doc_id"].strip("/")
    site = request.app[site_loader_key].load()

    try:
        doc = site.get(doc_id)
    except NotFoundError:
        logger.debug(f"Unknown document requested: {doc_id}")
        return web.json_response(
            {"error": "Document not found", "id": doc_id},
            status=404,
        )

    sidebar = site.sidebar_of(doc.id)
    previous: Document | None = None
    following: Document | None = None
    path: list[str] = []
    breadcrumbs: list[dict[str, str | None]] = []
    # Unlisted documents have no place in navigation
    if sidebar is not None:
        neighbors = site.neighbors_of(doc.id)
        previous, following = neighbors.previous, neighbors.next
        path = site.path_of(doc.id)
        breadcrumbs = [crumb.to_dict() for crumb in site.breadcrumbs(doc.id)]

    return web.json_response(
        {
            "meta": doc.to_dict(),
            "sidebar": sidebar,
            "path": path,
            "breadcrumbs": breadcrumbs,
            "previous": _nav_link(previous),
            "next": _nav_link(following),
        }
    )


def _nav_link(doc: Document | None) -> dict[str, str] | None:
    if doc is None:
        return None
    return {"id": doc.id, "title": doc.title, "permalink": doc.permalink}
