"""Navigation tree builder.

Builds navigation trees from resolved sidebars for UI presentation.
Navigation is a view layer over the site's sidebar trees.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Literal, NotRequired, TypedDict

from docnav.core.sidebar import SidebarCategory, SidebarNode, SidebarTree
from docnav.core.site import Site


class NavItemDict(TypedDict):
    """Dictionary representation of a navigation item."""

    type: Literal["link", "category"]
    title: str
    path: str | None
    docId: NotRequired[str]
    collapsed: NotRequired[bool]
    collapsible: NotRequired[bool]
    unlisted: NotRequired[bool]
    children: NotRequired[list[NavItemDict]]


@dataclass
class NavItem:
    """Navigation item with children for UI tree."""

    title: str
    path: str | None
    type: Literal["link", "category"] = "link"
    doc_id: str | None = None
    collapsed: bool = True
    collapsible: bool = True
    unlisted: bool = False
    children: list[NavItem] = field(default_factory=list)

    def to_dict(self) -> NavItemDict:
        """Convert to dictionary for JSON serialization."""
        result: NavItemDict = {
            "type": self.type,
            "title": self.title,
            "path": self.path,
        }
        if self.doc_id is not None:
            result["docId"] = self.doc_id
        if self.type == "category":
            result["collapsed"] = self.collapsed
            result["collapsible"] = self.collapsible
            result["children"] = [child.to_dict() for child in self.children]
        else:
            result["unlisted"] = self.unlisted
        return result


def build_navigation(site: Site, tree: SidebarTree) -> list[NavItem]:
    """Build navigation tree from a resolved sidebar.

    Args:
        site: Site the sidebar belongs to
        tree: Resolved sidebar tree

    Returns:
        List of NavItem trees for navigation UI
    """
    return [_build_nav_item(site, node) for node in tree.items]


def _build_nav_item(site: Site, node: SidebarNode) -> NavItem:
    """Recursively build NavItem from a sidebar node."""
    if not isinstance(node, SidebarCategory):
        doc = site.get(node.doc_id)
        return NavItem(
            title=node.label,
            path=doc.permalink,
            doc_id=doc.id,
            unlisted=doc.unlisted,
        )

    return NavItem(
        title=node.label,
        path=site.category_path(node),
        type="category",
        doc_id=node.doc_id,
        collapsed=node.collapsed,
        collapsible=node.collapsible,
        children=[_build_nav_item(site, child) for child in node.items],
    )
