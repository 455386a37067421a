"""Content registry.

Holds one record per authored document, keyed by id, in registration
order. Built once per site build and read-only afterwards.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Iterator, Mapping
from dataclasses import dataclass, field
from typing import Any

from docnav.core.errors import DuplicateIdError, InvalidDescriptorError, NotFoundError
from docnav.core.types import DocId, URLPath

logger = logging.getLogger(__name__)


def join_url(*parts: str) -> URLPath:
    """Join URL path parts with single slashes and a leading slash.

    Args:
        parts: Path fragments, each may carry leading/trailing slashes

    Returns:
        Normalized absolute URL path
    """
    segments = [segment for part in parts for segment in part.split("/") if segment]
    return URLPath("/" + "/".join(segments))


@dataclass(frozen=True)
class Document:
    """Document metadata record."""

    id: DocId
    title: str
    description: str
    slug: URLPath
    permalink: URLPath
    sidebar_position: int | None = None
    source: str | None = None
    tags: tuple[str, ...] = field(default_factory=tuple)
    draft: bool = False
    unlisted: bool = False
    edit_url: str | None = None

    @property
    def source_dir_name(self) -> str:
        """Directory owning the document, "." for top-level documents."""
        head, sep, _ = self.id.rpartition("/")
        return head if sep else "."

    @classmethod
    def create(
        cls,
        doc_id: str,
        title: str,
        description: str = "",
        *,
        base_url: str = "/",
        route_base_path: str = "docs",
        **extra: Any,
    ) -> Document:
        """Create a document with slug and permalink derived from its id.

        Args:
            doc_id: Path-like document id (e.g., "sycl/memory")
            title: Human-readable title
            description: Short description
            base_url: Site base path
            route_base_path: Path prefix of the docs section
            extra: Optional fields (sidebar_position, source, tags, ...)

        Returns:
            Document instance

        Raises:
            InvalidDescriptorError: If the id or title is malformed
        """
        _validate_id(doc_id)
        if not title.strip():
            raise InvalidDescriptorError(f"Document {doc_id!r} has an empty title")
        slug = join_url(doc_id)
        return cls(
            id=DocId(doc_id),
            title=title,
            description=description,
            slug=slug,
            permalink=join_url(base_url, route_base_path, slug),
            **extra,
        )

    @classmethod
    def from_descriptor(
        cls,
        data: Mapping[str, Any],
        *,
        base_url: str = "/",
        route_base_path: str = "docs",
    ) -> Document:
        """Create a document from a raw metadata descriptor.

        Accepts both camelCase keys (as emitted by site generators) and
        snake_case keys.

        Args:
            data: Descriptor mapping with at least "id" and "title"
            base_url: Site base path
            route_base_path: Path prefix of the docs section

        Returns:
            Document instance

        Raises:
            InvalidDescriptorError: If the descriptor is malformed
        """
        if not isinstance(data, Mapping):
            raise InvalidDescriptorError("Document descriptor must be a mapping")

        doc_id = data.get("id")
        if not isinstance(doc_id, str):
            raise InvalidDescriptorError("Document descriptor id must be a string")

        title = data.get("title")
        if not isinstance(title, str):
            raise InvalidDescriptorError(f"Document {doc_id!r}: title must be a string")

        description = data.get("description")
        if description is None:
            description = ""
        elif not isinstance(description, str):
            raise InvalidDescriptorError(
                f"Document {doc_id!r}: description must be a string"
            )

        position = data.get("sidebarPosition", data.get("sidebar_position"))
        # bool is an int subclass
        if position is not None and (
            not isinstance(position, int) or isinstance(position, bool)
        ):
            raise InvalidDescriptorError(
                f"Document {doc_id!r}: sidebarPosition must be an integer"
            )

        source = data.get("source")
        if source is not None and not isinstance(source, str):
            raise InvalidDescriptorError(
                f"Document {doc_id!r}: source must be a string"
            )

        tags_raw = data.get("tags", [])
        if not isinstance(tags_raw, list):
            raise InvalidDescriptorError(f"Document {doc_id!r}: tags must be a list")
        tags: list[str] = []
        for tag in tags_raw:
            # Site generators emit tags as {"label": ..., "permalink": ...}
            if isinstance(tag, Mapping):
                tag = tag.get("label")
            if not isinstance(tag, str):
                raise InvalidDescriptorError(
                    f"Document {doc_id!r}: tags items must be strings"
                )
            tags.append(tag)

        draft = data.get("draft", False)
        unlisted = data.get("unlisted", False)
        if not isinstance(draft, bool) or not isinstance(unlisted, bool):
            raise InvalidDescriptorError(
                f"Document {doc_id!r}: draft and unlisted must be booleans"
            )

        edit_url = data.get("editUrl", data.get("edit_url"))
        if edit_url is not None and not isinstance(edit_url, str):
            raise InvalidDescriptorError(
                f"Document {doc_id!r}: editUrl must be a string"
            )

        return cls.create(
            doc_id,
            title,
            description,
            base_url=base_url,
            route_base_path=route_base_path,
            sidebar_position=position,
            source=source,
            tags=tuple(tags),
            draft=draft,
            unlisted=unlisted,
            edit_url=edit_url,
        )

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "id": self.id,
            "title": self.title,
            "description": self.description,
            "slug": self.slug,
            "permalink": self.permalink,
            "sidebarPosition": self.sidebar_position,
            "source": self.source,
            "sourceDirName": self.source_dir_name,
            "tags": list(self.tags),
            "draft": self.draft,
            "unlisted": self.unlisted,
            "editUrl": self.edit_url,
        }


def _validate_id(doc_id: str) -> None:
    if not doc_id or doc_id.startswith("/") or doc_id.endswith("/"):
        raise InvalidDescriptorError(f"Invalid document id: {doc_id!r}")
    if any(not segment.strip() for segment in doc_id.split("/")):
        raise InvalidDescriptorError(f"Invalid document id: {doc_id!r}")


class ContentRegistry:
    """Unique-key mapping of document id to Document.

    Iteration follows registration order, which is the default document
    order for auto-generated sidebar sections.
    """

    __slots__ = ("_docs", "_permalinks")

    def __init__(self) -> None:
        self._docs: dict[str, Document] = {}
        self._permalinks: dict[str, str] = {}

    @classmethod
    def from_descriptors(
        cls,
        descriptors: Iterable[Mapping[str, Any]],
        *,
        base_url: str = "/",
        route_base_path: str = "docs",
    ) -> ContentRegistry:
        """Build a registry from raw metadata descriptors.

        Args:
            descriptors: Document descriptors in discovery order
            base_url: Site base path
            route_base_path: Path prefix of the docs section

        Returns:
            Populated registry

        Raises:
            InvalidDescriptorError: If a descriptor is malformed
            DuplicateIdError: If two descriptors share an id
        """
        registry = cls()
        for data in descriptors:
            registry.register(
                Document.from_descriptor(
                    data, base_url=base_url, route_base_path=route_base_path
                )
            )
        logger.debug(f"Registered {len(registry)} documents")
        return registry

    def register(self, doc: Document) -> None:
        """Add a document.

        Raises:
            DuplicateIdError: If the id or the permalink is already taken
        """
        if doc.id in self._docs:
            raise DuplicateIdError(doc.id)
        owner = self._permalinks.get(doc.permalink)
        if owner is not None:
            raise DuplicateIdError(
                doc.id,
                f"Document {doc.id!r} has the same permalink as {owner!r}: "
                f"{doc.permalink}",
            )
        self._docs[doc.id] = doc
        self._permalinks[doc.permalink] = doc.id

    def get(self, doc_id: str) -> Document:
        """Get document by id.

        Raises:
            NotFoundError: If no document has this id
        """
        try:
            return self._docs[doc_id]
        except KeyError:
            raise NotFoundError(doc_id) from None

    def by_permalink(self, permalink: str) -> Document:
        """Get document by permalink.

        Raises:
            NotFoundError: If no document has this permalink
        """
        doc_id = self._permalinks.get(permalink)
        if doc_id is None:
            raise NotFoundError(permalink, f"No document at permalink: {permalink}")
        return self._docs[doc_id]

    def all(self) -> Iterator[Document]:
        """Iterate documents in registration order.

        Each call returns a fresh iterator.
        """
        return iter(self._docs.values())

    def __contains__(self, doc_id: object) -> bool:
        return doc_id in self._docs

    def __len__(self) -> int:
        return len(self._docs)
