"""Site snapshot and loader.

A Site bundles the content registry and every named sidebar tree of one
successful build. Sites are immutable; SiteLoader replaces its snapshot
wholesale on rebuild and keeps the last good one when a rebuild fails.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Iterator, Mapping, Sequence
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from docnav.config import Config
from docnav.core.errors import (
    DuplicateIdError,
    DuplicateReferenceError,
    ManifestError,
    NotFoundError,
)
from docnav.core.registry import ContentRegistry, Document, join_url
from docnav.core.sidebar import (
    Neighbors,
    SidebarCategory,
    SidebarTree,
    build_sidebar,
    iter_nodes,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class BreadcrumbItem:
    """Breadcrumb navigation item."""

    title: str
    path: str | None

    def to_dict(self) -> dict[str, str | None]:
        """Convert to dictionary for JSON serialization."""
        return {"title": self.title, "path": self.path}


class Site:
    """Read-only site graph: documents plus resolved sidebars."""

    __slots__ = (
        "_base_url",
        "_membership",
        "_registry",
        "_route_base_path",
        "_sidebars",
    )

    def __init__(
        self,
        registry: ContentRegistry,
        sidebars: dict[str, SidebarTree],
        *,
        base_url: str = "/",
        route_base_path: str = "docs",
    ) -> None:
        """Initialize site.

        Args:
            registry: Populated content registry
            sidebars: Resolved sidebar trees by name, in declaration order
            base_url: Site base path
            route_base_path: Path prefix of the docs section

        Raises:
            DuplicateReferenceError: If a document is listed in two sidebars
            DuplicateIdError: If a category index page shares a route with a
                document or another category
        """
        self._registry = registry
        self._sidebars = sidebars
        self._base_url = base_url
        self._route_base_path = route_base_path
        self._membership: dict[str, str] = {}
        for name, tree in sidebars.items():
            for doc in tree.documents():
                owner = self._membership.get(doc.id)
                if owner is not None:
                    raise DuplicateReferenceError(doc.id, [owner, name])
                self._membership[doc.id] = name
        self._check_index_routes()

    @classmethod
    def build(
        cls,
        registry: ContentRegistry,
        sidebars: Mapping[str, Sequence[Any]],
        *,
        base_url: str = "/",
        route_base_path: str = "docs",
    ) -> Site:
        """Resolve every named sidebar against the registry.

        Args:
            registry: Populated content registry
            sidebars: Sidebar specifications by name
            base_url: Site base path
            route_base_path: Path prefix of the docs section

        Returns:
            Site instance
        """
        trees = {
            name: build_sidebar(spec, registry) for name, spec in sidebars.items()
        }
        return cls(
            registry,
            trees,
            base_url=base_url,
            route_base_path=route_base_path,
        )

    @property
    def registry(self) -> ContentRegistry:
        return self._registry

    @property
    def sidebars(self) -> dict[str, SidebarTree]:
        return dict(self._sidebars)

    def get(self, doc_id: str) -> Document:
        return self._registry.get(doc_id)

    def all(self) -> Iterator[Document]:
        return self._registry.all()

    def sidebar(self, name: str) -> SidebarTree:
        """Get sidebar by name.

        Raises:
            NotFoundError: If no sidebar has this name
        """
        tree = self._sidebars.get(name)
        if tree is None:
            raise NotFoundError(name, f"Sidebar not found: {name}")
        return tree

    def sidebar_of(self, doc_id: str) -> str | None:
        """Name of the sidebar listing the document, None for unlisted documents.

        Raises:
            NotFoundError: If the document is not registered
        """
        self._registry.get(doc_id)
        return self._membership.get(doc_id)

    def neighbors_of(self, doc_id: str) -> Neighbors:
        """Get previous and next documents.

        Raises:
            NotFoundError: If the document is unknown or not in any sidebar
        """
        return self._owning_tree(doc_id).neighbors_of(doc_id)

    def path_of(self, doc_id: str) -> list[str]:
        """Get ancestor category labels, root first.

        Raises:
            NotFoundError: If the document is unknown or not in any sidebar
        """
        return self._owning_tree(doc_id).path_of(doc_id)

    def breadcrumbs(self, doc_id: str) -> list[BreadcrumbItem]:
        """Build breadcrumbs from ancestor categories.

        Categories without a landing page or generated index have no path.

        Raises:
            NotFoundError: If the document is unknown or not in any sidebar
        """
        return [
            BreadcrumbItem(title=category.label, path=self.category_path(category))
            for category in self._owning_tree(doc_id).ancestors_of(doc_id)
        ]

    def category_path(self, category: SidebarCategory) -> str | None:
        """Site path of a category page, None if the category has no page."""
        if category.doc_id is not None:
            return self._registry.get(category.doc_id).permalink
        if category.index_slug is not None:
            return self.index_permalink(category.index_slug)
        return category.href

    def index_permalink(self, index_slug: str) -> str:
        """Resolve a generated index slug to a site path."""
        return join_url(self._base_url, self._route_base_path, index_slug)

    def _owning_tree(self, doc_id: str) -> SidebarTree:
        name = self.sidebar_of(doc_id)
        if name is None:
            raise NotFoundError(doc_id, f"Document is not in any sidebar: {doc_id}")
        return self._sidebars[name]

    def _check_index_routes(self) -> None:
        routes = {doc.permalink: doc.id for doc in self._registry.all()}
        for tree in self._sidebars.values():
            for _, node in iter_nodes(tree.items):
                if not isinstance(node, SidebarCategory) or node.doc_id is not None:
                    continue
                path = self.category_path(node)
                if path is None:
                    continue
                owner = routes.get(path)
                if owner is not None:
                    raise DuplicateIdError(
                        node.label,
                        f"Category {node.label!r} index page {path} "
                        f"collides with {owner!r}",
                    )
                routes[path] = f"category {node.label}"


def _read_json(path: Path) -> Any:
    try:
        with path.open(encoding="utf-8") as f:
            return json.load(f)
    except FileNotFoundError as e:
        raise ManifestError(f"Manifest file not found: {path}") from e
    except json.JSONDecodeError as e:
        raise ManifestError(f"Invalid JSON in {path}: {e}") from e
    except UnicodeDecodeError as e:
        raise ManifestError(f"Manifest file is not valid UTF-8: {path}") from e
    except OSError as e:
        raise ManifestError(f"Cannot read manifest file {path}: {e}") from e


def load_site(config: Config) -> Site:
    """Build a site from the manifest files named in the configuration.

    The metadata file holds a list of document descriptors, or an object
    with a "docs" key holding that list or a mapping of id to descriptor.
    The sidebars file holds an object mapping sidebar names to item lists
    (or an object with a "docsSidebars" key).

    Args:
        config: Application configuration

    Returns:
        Site instance

    Raises:
        ManifestError: If a manifest cannot be read or has the wrong shape
        DocnavError: If the content graph is invalid
    """
    metadata = _read_json(config.docs.metadata_file)
    if isinstance(metadata, dict):
        metadata = metadata.get("docs")
    if isinstance(metadata, dict):
        metadata = list(metadata.values())
    if not isinstance(metadata, list):
        raise ManifestError(
            f"{config.docs.metadata_file}: expected a list of document descriptors"
        )

    sidebars = _read_json(config.docs.sidebars_file)
    if isinstance(sidebars, dict) and "docsSidebars" in sidebars:
        sidebars = sidebars["docsSidebars"]
    if not isinstance(sidebars, dict):
        raise ManifestError(
            f"{config.docs.sidebars_file}: expected an object of named sidebars"
        )

    registry = ContentRegistry.from_descriptors(
        metadata,
        base_url=config.site.base_url,
        route_base_path=config.site.route_base_path,
    )
    site = Site.build(
        registry,
        sidebars,
        base_url=config.site.base_url,
        route_base_path=config.site.route_base_path,
    )
    logger.info(
        f"Built site with {len(registry)} documents and {len(sidebars)} sidebar(s)"
    )
    return site


class SiteLoader:
    """Owns the current Site snapshot.

    load() builds on first use; reload() builds a fresh snapshot and swaps
    it in with a single assignment, so readers see either the old or the
    new site, never a mix.
    """

    def __init__(self, config: Config) -> None:
        self._config = config
        self._site: Site | None = None

    @property
    def config(self) -> Config:
        return self._config

    @property
    def watch_paths(self) -> list[Path]:
        return [self._config.docs.metadata_file, self._config.docs.sidebars_file]

    def load(self) -> Site:
        """Return the current snapshot, building it on first use."""
        site = self._site
        if site is None:
            site = self.reload()
        return site

    def reload(self) -> Site:
        """Rebuild the snapshot.

        On failure the previous snapshot stays in service.

        Returns:
            The new snapshot

        Raises:
            DocnavError: If the build fails
        """
        site = load_site(self._config)
        self._site = site
        return site
