"""Tests for Site snapshot and SiteLoader."""

import json
from pathlib import Path
from typing import Any

import pytest
from docnav.config import Config
from docnav.core.errors import (
    DanglingReferenceError,
    DuplicateIdError,
    DuplicateReferenceError,
    ManifestError,
    NotFoundError,
)
from docnav.core.registry import ContentRegistry
from docnav.core.site import BreadcrumbItem, Site, SiteLoader, load_site


@pytest.fixture
def site(sidebar_spec: list[dict[str, Any]], registry: ContentRegistry) -> Site:
    return Site.build(
        registry,
        {"tutorialSidebar": sidebar_spec},
        base_url="/parallel-programming-essentials/",
    )


class TestSite:
    """Tests for Site queries."""

    def test__get__returns_document(self, site: Site) -> None:
        """Get document by id."""
        doc = site.get("sycl/basic-kernel")

        assert doc.title == "Basic Kernel"
        assert doc.permalink == "/parallel-programming-essentials/docs/sycl/basic-kernel"

    def test__get__unknown__raises(self, site: Site) -> None:
        """Unknown ids raise NotFoundError."""
        with pytest.raises(NotFoundError):
            site.get("sycl/unknown")

    def test__all__registration_order(self, site: Site) -> None:
        """All documents, including unlisted ones."""
        ids = [doc.id for doc in site.all()]

        assert len(ids) == 9
        assert "drafts/notes" in ids

    def test__sidebar_of__listed_document(self, site: Site) -> None:
        """Listed documents name their sidebar."""
        assert site.sidebar_of("sycl/memory") == "tutorialSidebar"

    def test__sidebar_of__unlisted_document__none(self, site: Site) -> None:
        """Unlisted documents belong to no sidebar."""
        assert site.sidebar_of("drafts/notes") is None

    def test__sidebar_of__unknown__raises(self, site: Site) -> None:
        """Unknown ids raise NotFoundError."""
        with pytest.raises(NotFoundError):
            site.sidebar_of("nope")

    def test__neighbors_of__delegates_to_owning_tree(self, site: Site) -> None:
        """Neighbours come from the sidebar listing the document."""
        neighbors = site.neighbors_of("sycl/memory")

        assert neighbors.previous.id == "sycl/first-step"
        assert neighbors.next.id == "sycl/basic-kernel"

    def test__neighbors_of__unlisted__raises(self, site: Site) -> None:
        """Unlisted documents have no neighbours."""
        with pytest.raises(NotFoundError, match="not in any sidebar"):
            site.neighbors_of("drafts/notes")

    def test__path_of__nested(self, site: Site) -> None:
        """Ancestor labels for nested documents."""
        assert site.path_of("parallel-sorting/merge-sort") == ["Parallel Sorting"]

    def test__breadcrumbs__generated_index_path(self, site: Site) -> None:
        """Categories with a generated index link to it."""
        crumbs = site.breadcrumbs("parallel-sorting/bitonic-sort")

        assert crumbs == [
            BreadcrumbItem(
                title="Parallel Sorting",
                path="/parallel-programming-essentials/docs/category/parallel-sorting",
            )
        ]

    def test__breadcrumbs__category_without_page__no_path(self, site: Site) -> None:
        """Categories without a page are not linkable."""
        crumbs = site.breadcrumbs("sycl/memory")

        assert crumbs == [BreadcrumbItem(title="SYCL Quickstart", path=None)]

    def test__breadcrumbs__landing_document_path(
        self, registry: ContentRegistry
    ) -> None:
        """Categories with a landing document link to its permalink."""
        site = Site.build(
            registry,
            {
                "main": [
                    {
                        "type": "category",
                        "label": "SYCL",
                        "href": "sycl/first-step",
                        "items": ["sycl/memory"],
                    }
                ]
            },
        )

        crumbs = site.breadcrumbs("sycl/memory")

        assert crumbs == [
            BreadcrumbItem(
                title="SYCL",
                path="/parallel-programming-essentials/docs/sycl/first-step",
            )
        ]

    def test__breadcrumbs__top_level__empty(self, site: Site) -> None:
        """Top-level documents have no breadcrumbs."""
        assert site.breadcrumbs("parallel-patterns") == []

    def test__sidebar__unknown__raises(self, site: Site) -> None:
        """Unknown sidebar names raise NotFoundError."""
        with pytest.raises(NotFoundError, match="Sidebar not found"):
            site.sidebar("missing")

    def test__multiple_sidebars__independent_neighbors(
        self, registry: ContentRegistry
    ) -> None:
        """Each sidebar has its own traversal order."""
        site = Site.build(
            registry,
            {
                "sycl": ["sycl/first-step", "sycl/memory"],
                "patterns": ["parallel-patterns", "parallel-prefix-sum"],
            },
        )

        assert site.neighbors_of("sycl/memory").next is None
        assert site.neighbors_of("parallel-patterns").previous is None
        assert site.sidebar_of("parallel-prefix-sum") == "patterns"

    def test__document_in_two_sidebars__raises(self, registry: ContentRegistry) -> None:
        """A document may appear in one sidebar only."""
        with pytest.raises(DuplicateReferenceError) as exc_info:
            Site.build(registry, {"a": ["sycl/memory"], "b": ["sycl/memory"]})

        assert exc_info.value.path == ["a", "b"]

    def test__generator_sidebar__absolute_category_href(
        self, generator_sidebar: list[dict[str, Any]], registry: ContentRegistry
    ) -> None:
        """Routed category index pages from the site generator are kept."""
        site = Site.build(
            registry,
            {"tutorialSidebar": generator_sidebar},
            base_url="/parallel-programming-essentials/",
        )

        assert site.breadcrumbs("sycl/memory") == [
            BreadcrumbItem(
                title="SYCL Quickstart",
                path="/parallel-programming-essentials/docs/category/sycl-quickstart",
            )
        ]

    def test__index_page_collides_with_document__raises(self) -> None:
        """A generated index may not take a document's route."""
        registry = ContentRegistry.from_descriptors(
            [
                {"id": "category/sorting", "title": "Sorting overview"},
                {"id": "merge", "title": "Merge"},
            ]
        )
        sidebar = [
            {
                "type": "category",
                "label": "Sorting",
                "link": {"type": "generated-index"},
                "items": ["merge"],
            }
        ]

        with pytest.raises(DuplicateIdError, match="category/sorting"):
            Site.build(registry, {"main": sidebar})

    def test__index_pages_with_same_label__raise(
        self, registry: ContentRegistry
    ) -> None:
        """Two generated indexes may not share a route."""
        sidebar = [
            {
                "type": "category",
                "label": "Sorting",
                "link": {"type": "generated-index"},
                "items": ["parallel-sorting/merge-sort"],
            },
            {
                "type": "category",
                "label": "Sorting",
                "link": {"type": "generated-index"},
                "items": ["parallel-sorting/bitonic-sort"],
            },
        ]

        with pytest.raises(DuplicateIdError, match="collides"):
            Site.build(registry, {"main": sidebar})


class TestBreadcrumbItem:
    """Tests for BreadcrumbItem dataclass."""

    def test__to_dict__returns_dict(self) -> None:
        """Convert to dictionary."""
        item = BreadcrumbItem(title="Parallel Sorting", path=None)

        assert item.to_dict() == {"title": "Parallel Sorting", "path": None}


class TestLoadSite:
    """Tests for load_site()."""

    def test__manifest_files__builds_site(self, test_config: Config) -> None:
        """Build a site from docs.json and sidebars.json."""
        site = load_site(test_config)

        assert len(site.registry) == 9
        assert list(site.sidebars) == ["tutorialSidebar"]
        assert site.neighbors_of("parallel-prefix-sum").next.id == (
            "parallel-sorting/merge-sort"
        )

    def test__wrapped_manifests__accepted(
        self,
        test_config: Config,
        doc_descriptors: list[dict[str, Any]],
        sidebar_spec: list[dict[str, Any]],
    ) -> None:
        """Accept {"docs": [...]} and {"docsSidebars": {...}} wrappers."""
        test_config.docs.metadata_file.write_text(json.dumps({"docs": doc_descriptors}))
        test_config.docs.sidebars_file.write_text(
            json.dumps({"docsSidebars": {"tutorialSidebar": sidebar_spec}})
        )

        site = load_site(test_config)

        assert site.sidebar_of("sycl/memory") == "tutorialSidebar"

    def test__missing_file__raises_manifest_error(self, test_config: Config) -> None:
        """Missing manifest files are reported."""
        test_config.docs.metadata_file.unlink()

        with pytest.raises(ManifestError, match="not found"):
            load_site(test_config)

    def test__invalid_json__raises_manifest_error(self, test_config: Config) -> None:
        """Malformed JSON is reported."""
        test_config.docs.sidebars_file.write_text("{not json")

        with pytest.raises(ManifestError, match="Invalid JSON"):
            load_site(test_config)

    def test__wrong_shape__raises_manifest_error(self, test_config: Config) -> None:
        """Sidebars must be an object of named lists."""
        test_config.docs.sidebars_file.write_text("[]")

        with pytest.raises(ManifestError, match="named sidebars"):
            load_site(test_config)

    def test__dangling_reference__fails_build(self, test_config: Config) -> None:
        """Broken references fail the whole build."""
        test_config.docs.sidebars_file.write_text(
            json.dumps({"main": [{"type": "link", "documentId": "sycl/unknown"}]})
        )

        with pytest.raises(DanglingReferenceError, match="sycl/unknown"):
            load_site(test_config)

    def test__generator_version_data__accepted(
        self,
        test_config: Config,
        doc_descriptors: list[dict[str, Any]],
        generator_sidebar: list[dict[str, Any]],
    ) -> None:
        """Accept docs keyed by id, as the site generator writes them."""
        test_config.docs.metadata_file.write_text(
            json.dumps({"docs": {doc["id"]: doc for doc in doc_descriptors}})
        )
        test_config.docs.sidebars_file.write_text(
            json.dumps({"docsSidebars": {"tutorialSidebar": generator_sidebar}})
        )

        site = load_site(test_config)

        assert len(site.registry) == 9
        assert site.neighbors_of("sycl/exception").next.id == "parallel-patterns"
        assert site.breadcrumbs("parallel-sorting/merge-sort")[0].path == (
            "/parallel-programming-essentials/docs/category/parallel-sorting"
        )

    def test__invalid_utf8__raises_manifest_error(self, test_config: Config) -> None:
        """Undecodable manifests are reported as manifest errors."""
        test_config.docs.sidebars_file.write_bytes(b'{"main": ["\xff"]}')

        with pytest.raises(ManifestError, match="UTF-8"):
            load_site(test_config)

    def test__unreadable_path__raises_manifest_error(self, test_config: Config) -> None:
        """A directory in place of a manifest is reported."""
        test_config.docs.metadata_file.unlink()
        test_config.docs.metadata_file.mkdir()

        with pytest.raises(ManifestError, match="Cannot read"):
            load_site(test_config)


class TestSiteLoader:
    """Tests for SiteLoader."""

    def test__load__builds_once(self, test_config: Config) -> None:
        """Repeated loads return the same snapshot."""
        loader = SiteLoader(test_config)

        assert loader.load() is loader.load()

    def test__reload__swaps_snapshot(self, test_config: Config) -> None:
        """Reload replaces the snapshot wholesale."""
        loader = SiteLoader(test_config)
        old = loader.load()
        test_config.docs.sidebars_file.write_text(
            json.dumps({"main": ["parallel-patterns"]})
        )

        new = loader.reload()

        assert new is not old
        assert loader.load() is new
        assert old.sidebar_of("sycl/memory") == "tutorialSidebar"
        assert new.sidebar_of("sycl/memory") is None

    def test__reload__failure_keeps_previous(self, test_config: Config) -> None:
        """A failed rebuild leaves the previous snapshot in service."""
        loader = SiteLoader(test_config)
        old = loader.load()
        test_config.docs.sidebars_file.write_text(
            json.dumps({"main": ["sycl/unknown"]})
        )

        with pytest.raises(DanglingReferenceError):
            loader.reload()

        assert loader.load() is old

    def test__load__first_build_failure__raises(self, test_config: Config) -> None:
        """Without a previous snapshot the failure propagates."""
        test_config.docs.metadata_file.write_text("{}")
        loader = SiteLoader(test_config)

        with pytest.raises(ManifestError):
            loader.load()

    def test__watch_paths__manifest_files(self, test_config: Config) -> None:
        """Watch both manifest files."""
        loader = SiteLoader(test_config)

        assert loader.watch_paths == [
            test_config.docs.metadata_file,
            test_config.docs.sidebars_file,
        ]

    def test__config_file__relative_paths(self, site_dir: Path) -> None:
        """Manifest paths resolve relative to docnav.toml."""
        config = Config.load(site_dir / "docnav.toml")

        site = SiteLoader(config).load()

        assert site.get("sycl/memory").permalink == (
            "/parallel-programming-essentials/docs/sycl/memory"
        )
