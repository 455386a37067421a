"""Application keys for type-safe app configuration access."""

from aiohttp import web

from docnav.core.site import SiteLoader

site_loader_key = web.AppKey("site_loader", SiteLoader)
live_reload_enabled_key = web.AppKey("live_reload_enabled", bool)
