"""Error taxonomy for site builds and queries.

Build errors abort the whole build: no partially resolved registry or
sidebar tree is ever returned. Query errors are raised to the caller.
"""


class DocnavError(Exception):
    """Base class for all docnav errors."""


class DuplicateIdError(DocnavError):
    """Two documents share an id or a permalink."""

    def __init__(self, doc_id: str, message: str | None = None) -> None:
        self.doc_id = doc_id
        super().__init__(message or f"Duplicate document id: {doc_id}")


class DuplicateReferenceError(DuplicateIdError):
    """A document is reachable from more than one sidebar position."""

    def __init__(self, doc_id: str, path: list[str]) -> None:
        self.path = path
        location = " > ".join(path) if path else "<root>"
        super().__init__(
            doc_id,
            f"Document {doc_id!r} is listed more than once in the sidebar "
            f"(again at {location})",
        )


class NotFoundError(DocnavError, KeyError):
    """Lookup of an id that is not registered or not reachable."""

    def __init__(self, doc_id: str, message: str | None = None) -> None:
        self.doc_id = doc_id
        self.message = message or f"Document not found: {doc_id}"
        super().__init__(self.message)

    def __str__(self) -> str:
        # KeyError quotes its argument otherwise
        return self.message


class DanglingReferenceError(DocnavError):
    """A sidebar node references a document that does not exist."""

    def __init__(self, doc_id: str, path: list[str]) -> None:
        self.doc_id = doc_id
        self.path = path
        location = " > ".join(path) if path else "<root>"
        super().__init__(
            f"Sidebar references unknown document {doc_id!r} (at {location})"
        )


class CyclicSidebarError(DocnavError):
    """The sidebar specification is not a tree."""

    def __init__(self, path: list[str]) -> None:
        self.path = path
        super().__init__(
            f"Sidebar item contains itself: {' > '.join(path) or '<root>'}"
        )


class InvalidDescriptorError(DocnavError, ValueError):
    """A document or sidebar descriptor does not match its schema."""


class ManifestError(DocnavError, ValueError):
    """A manifest file cannot be read or has the wrong shape."""
