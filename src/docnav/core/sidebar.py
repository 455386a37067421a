"""Sidebar tree resolver.

Materializes a navigation tree from a declarative sidebar specification,
resolving every document reference against the content registry, and
derives previous/next neighbours and ancestor paths from the pre-order
flattening of the tree.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Iterator, Mapping, Sequence
from dataclasses import dataclass
from typing import Any

from docnav.core.errors import (
    CyclicSidebarError,
    DanglingReferenceError,
    DuplicateReferenceError,
    InvalidDescriptorError,
    NotFoundError,
)
from docnav.core.registry import ContentRegistry, Document
from docnav.core.types import DocId

logger = logging.getLogger(__name__)

_DOC_ID_KEYS = ("documentId", "docId", "id")


@dataclass(frozen=True)
class SidebarLink:
    """Leaf node pointing at a document."""

    label: str
    doc_id: DocId


@dataclass(frozen=True)
class SidebarCategory:
    """Interior node grouping other nodes.

    A category may have its own landing document (``doc_id``), a generated
    index page (``index_slug``, relative to the docs route) or an index page
    the site generator already placed at an absolute ``href``.
    """

    label: str
    items: tuple[SidebarNode, ...]
    collapsed: bool = True
    collapsible: bool = True
    doc_id: DocId | None = None
    index_slug: str | None = None
    href: str | None = None


SidebarNode = SidebarLink | SidebarCategory


@dataclass(frozen=True)
class Neighbors:
    """Previous and next documents in traversal order."""

    previous: Document | None
    next: Document | None


def slugify(label: str) -> str:
    """Turn a label into a URL segment ("SYCL Quickstart" -> "sycl-quickstart")."""
    return re.sub(r"[^a-z0-9]+", "-", label.lower()).strip("-")


class SidebarTree:
    """Resolved, immutable sidebar tree with navigation lookups."""

    __slots__ = ("_index", "_items", "_order", "_paths", "_registry")

    def __init__(
        self,
        items: tuple[SidebarNode, ...],
        order: list[DocId],
        paths: dict[DocId, tuple[str, ...]],
        registry: ContentRegistry,
    ) -> None:
        """Initialize tree.

        Args:
            items: Top-level sidebar nodes
            order: Flattened pre-order document sequence
            paths: Ancestor category labels for each listed document
            registry: Registry the references were resolved against
        """
        self._items = items
        self._order = order
        self._index = {doc_id: i for i, doc_id in enumerate(order)}
        self._paths = paths
        self._registry = registry

    @property
    def items(self) -> tuple[SidebarNode, ...]:
        return self._items

    def documents(self) -> list[Document]:
        """Return the flattened pre-order document sequence."""
        return [self._registry.get(doc_id) for doc_id in self._order]

    def contains(self, doc_id: str) -> bool:
        return doc_id in self._index

    def neighbors_of(self, doc_id: str) -> Neighbors:
        """Get previous and next documents.

        Raises:
            NotFoundError: If the document is not listed in this tree
        """
        idx = self._index.get(doc_id)
        if idx is None:
            raise NotFoundError(doc_id, f"Document not in sidebar: {doc_id}")

        previous = self._registry.get(self._order[idx - 1]) if idx > 0 else None
        following = (
            self._registry.get(self._order[idx + 1])
            if idx + 1 < len(self._order)
            else None
        )
        return Neighbors(previous=previous, next=following)

    def path_of(self, doc_id: str) -> list[str]:
        """Get ancestor category labels, root first.

        Raises:
            NotFoundError: If the document is not listed in this tree
        """
        path = self._paths.get(DocId(doc_id))
        if path is None:
            raise NotFoundError(doc_id, f"Document not in sidebar: {doc_id}")
        return list(path)

    def ancestors_of(self, doc_id: str) -> list[SidebarCategory]:
        """Get ancestor category nodes, root first.

        Raises:
            NotFoundError: If the document is not listed in this tree
        """
        if doc_id not in self._index:
            raise NotFoundError(doc_id, f"Document not in sidebar: {doc_id}")
        chain: list[SidebarCategory] = []
        _find_ancestors(self._items, doc_id, chain)
        return chain


def _find_ancestors(
    items: Sequence[SidebarNode], doc_id: str, chain: list[SidebarCategory]
) -> bool:
    for node in items:
        if isinstance(node, SidebarLink):
            if node.doc_id == doc_id:
                return True
            continue
        if node.doc_id == doc_id:
            return True
        chain.append(node)
        if _find_ancestors(node.items, doc_id, chain):
            return True
        chain.pop()
    return False


class SidebarResolver:
    """Builds a SidebarTree from a declarative specification.

    Each build() starts from empty state. The walk is depth-first and
    keeps declared order at every level; hand-authored order always wins
    over a document's ``sidebar_position``, which only orders
    auto-generated sections.
    """

    def __init__(self, registry: ContentRegistry) -> None:
        self._registry = registry
        self._order: list[DocId] = []
        self._paths: dict[DocId, tuple[str, ...]] = {}
        # Descriptors currently being expanded, by identity
        self._active: list[int] = []

    def build(self, spec: Sequence[Any]) -> SidebarTree:
        """Resolve a sidebar specification.

        Args:
            spec: Ordered sequence of node descriptors (mappings, nested)

        Returns:
            Resolved SidebarTree

        Raises:
            DanglingReferenceError: If a reference names an unknown document
            DuplicateReferenceError: If a document is listed twice
            CyclicSidebarError: If a descriptor contains itself
            InvalidDescriptorError: If a descriptor is malformed
        """
        self._order = []
        self._paths = {}
        self._active = []
        items = self._resolve_items(spec, [])
        logger.debug(f"Resolved sidebar with {len(self._order)} documents")
        return SidebarTree(items, self._order, self._paths, self._registry)

    def _resolve_items(
        self, spec: Sequence[Any], path: list[str]
    ) -> tuple[SidebarNode, ...]:
        if isinstance(spec, (str, bytes)) or not isinstance(spec, Sequence):
            raise InvalidDescriptorError(
                f"Sidebar items must be a list (at {' > '.join(path) or '<root>'})"
            )

        marker = id(spec)
        if marker in self._active:
            raise CyclicSidebarError(path)
        self._active.append(marker)
        try:
            nodes: list[SidebarNode] = []
            for item in spec:
                nodes.extend(self._resolve_item(item, path))
        finally:
            self._active.pop()
        return tuple(nodes)

    def _resolve_item(self, item: Any, path: list[str]) -> list[SidebarNode]:
        # A bare string is shorthand for a doc link
        if isinstance(item, str):
            item = {"type": "doc", "id": item}
        if not isinstance(item, Mapping):
            raise InvalidDescriptorError(
                f"Sidebar item must be a mapping (at {' > '.join(path) or '<root>'})"
            )

        marker = id(item)
        if marker in self._active:
            raise CyclicSidebarError([*path, str(item.get("label", "?"))])
        self._active.append(marker)
        try:
            item_type = item.get("type", "link")
            if item_type in ("link", "doc"):
                return [self._resolve_link(item, path)]
            if item_type == "category":
                return [self._resolve_category(item, path)]
            if item_type == "autogenerated":
                return self._resolve_autogenerated(item, path)
            raise InvalidDescriptorError(f"Unknown sidebar item type: {item_type!r}")
        finally:
            self._active.pop()

    def _resolve_link(self, item: Mapping[str, Any], path: list[str]) -> SidebarLink:
        doc_id = _reference_of(item)
        if doc_id is None:
            raise InvalidDescriptorError(
                f"Sidebar link without document id (at {' > '.join(path) or '<root>'})"
            )
        doc = self._visit(doc_id, path)
        label = item.get("label") or doc.title
        if not isinstance(label, str):
            raise InvalidDescriptorError(f"Sidebar label must be a string: {label!r}")
        return SidebarLink(label=label, doc_id=doc.id)

    def _resolve_category(
        self, item: Mapping[str, Any], path: list[str]
    ) -> SidebarCategory:
        label = item.get("label")
        if not isinstance(label, str) or not label:
            raise InvalidDescriptorError(
                f"Sidebar category needs a label (at {' > '.join(path) or '<root>'})"
            )

        collapsible = item.get("collapsible", True)
        collapsed = item.get("collapsed", True)
        if not isinstance(collapsible, bool) or not isinstance(collapsed, bool):
            raise InvalidDescriptorError(
                f"Category {label!r}: collapsible and collapsed must be booleans"
            )

        doc_id: DocId | None = None
        index_slug: str | None = None
        index_href: str | None = None
        link = item.get("link")
        href = _reference_of(item)
        if isinstance(link, Mapping):
            if link.get("type") == "generated-index":
                index_slug = link.get("slug") or f"/category/{slugify(label)}"
            elif link.get("type") == "doc":
                href = _reference_of(link)
        elif href is None and _is_absolute(item.get("href")):
            # Index page already routed by the site generator
            index_href = item["href"]

        # The landing document sits at the category's own position
        if href is not None:
            doc_id = self._visit(href, path).id

        items = self._resolve_items(item.get("items", []), [*path, label])
        return SidebarCategory(
            label=label,
            items=items,
            collapsed=collapsed,
            collapsible=collapsible,
            doc_id=doc_id,
            index_slug=index_slug,
            href=index_href,
        )

    def _resolve_autogenerated(
        self, item: Mapping[str, Any], path: list[str]
    ) -> list[SidebarNode]:
        dir_name = item.get("dirName", ".")
        if not isinstance(dir_name, str):
            raise InvalidDescriptorError("autogenerated dirName must be a string")
        dir_name = dir_name.strip("/") or "."
        return self._generate_dir(dir_name, path)

    def _generate_dir(self, dir_name: str, path: list[str]) -> list[SidebarNode]:
        prefix = "" if dir_name == "." else f"{dir_name}/"
        docs: list[Document] = []
        subdirs: list[str] = []
        for doc in self._registry.all():
            if doc.draft or doc.unlisted or not doc.id.startswith(prefix):
                continue
            rest = doc.id[len(prefix) :]
            if "/" in rest:
                subdir = prefix + rest.split("/", 1)[0]
                if subdir not in subdirs:
                    subdirs.append(subdir)
            else:
                docs.append(doc)

        entries: list[tuple[int | None, int, Document | str]] = []
        for position, doc in enumerate(docs):
            entries.append((doc.sidebar_position, position, doc))
        for position, subdir in enumerate(subdirs, start=len(docs)):
            entries.append((self._dir_position(subdir), position, subdir))
        # Explicit positions first, then registration order
        entries.sort(key=lambda e: (e[0] is None, e[0] or 0, e[1]))

        nodes: list[SidebarNode] = []
        for _, _, entry in entries:
            if isinstance(entry, Document):
                doc = self._visit(entry.id, path)
                nodes.append(SidebarLink(label=doc.title, doc_id=doc.id))
                continue
            label = entry.rsplit("/", 1)[-1]
            children = self._generate_dir(entry, [*path, label])
            nodes.append(SidebarCategory(label=label, items=tuple(children)))
        return nodes

    def _dir_position(self, dir_name: str) -> int | None:
        """Order a generated sub-directory by its lowest document position."""
        positions = [
            doc.sidebar_position
            for doc in self._registry.all()
            if doc.id.startswith(f"{dir_name}/")
            and doc.sidebar_position is not None
            and not (doc.draft or doc.unlisted)
        ]
        return min(positions) if positions else None

    def _visit(self, doc_id: str, path: list[str]) -> Document:
        if doc_id not in self._registry:
            raise DanglingReferenceError(doc_id, path)
        doc = self._registry.get(doc_id)
        if doc.id in self._paths:
            raise DuplicateReferenceError(doc.id, path)
        self._order.append(doc.id)
        self._paths[doc.id] = tuple(path)
        return doc


def _reference_of(item: Mapping[str, Any]) -> str | None:
    for key in _DOC_ID_KEYS:
        value = item.get(key)
        if isinstance(value, str):
            return value
    # Categories with a landing document declare it as href
    href = item.get("href")
    if isinstance(href, str) and not _is_absolute(href):
        return href
    return None


def _is_absolute(href: Any) -> bool:
    return isinstance(href, str) and href.startswith(("/", "http://", "https://"))


def build_sidebar(spec: Sequence[Any], registry: ContentRegistry) -> SidebarTree:
    """Build a sidebar tree from a specification.

    Args:
        spec: Ordered sequence of node descriptors
        registry: Registry to resolve document references against

    Returns:
        Resolved SidebarTree
    """
    return SidebarResolver(registry).build(spec)


def iter_nodes(
    items: Sequence[SidebarNode], depth: int = 0
) -> Iterator[tuple[int, SidebarNode]]:
    """Yield (depth, node) pairs in pre-order."""
    for node in items:
        yield depth, node
        if isinstance(node, SidebarCategory):
            yield from iter_nodes(node.items, depth + 1)
