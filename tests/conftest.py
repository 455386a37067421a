"""Shared test fixtures."""

import json
from pathlib import Path
from typing import Any

import pytest
from docnav.config import Config, DocsConfig, LiveReloadConfig, ServerConfig, SiteConfig
from docnav.core.registry import ContentRegistry

BASE_URL = "/parallel-programming-essentials/"


@pytest.fixture
def doc_descriptors() -> list[dict[str, Any]]:
    """Document metadata of the parallel programming tutorial."""
    return [
        {
            "id": "sycl/first-step",
            "title": "First Step into SYCL",
            "description": "Set up a SYCL toolchain and run a first kernel.",
            "source": "@site/docs/sycl/first-step.mdx",
            "sidebarPosition": 1,
        },
        {
            "id": "sycl/memory",
            "title": "Memory",
            "description": "Buffers, accessors and unified shared memory.",
            "source": "@site/docs/sycl/memory.mdx",
            "sidebarPosition": 2,
        },
        {
            "id": "sycl/basic-kernel",
            "title": "Basic Kernel",
            "description": "A kernel is a task that is distributed to each "
            "processing element on a computation device.",
            "source": "@site/docs/sycl/basic-kernel.mdx",
            "sidebarPosition": 3,
        },
        {
            "id": "sycl/exception",
            "title": "Exception in SYCL",
            "description": "Synchronous and asynchronous errors.",
            "source": "@site/docs/sycl/exception.mdx",
            "sidebarPosition": 4,
        },
        {
            "id": "parallel-patterns",
            "title": "Parallel Patterns",
            "description": "Parallel patterns are fundamental building blocks.",
            "sidebarPosition": 5,
        },
        {
            "id": "parallel-prefix-sum",
            "title": "Parallel Prefix Sum",
            "description": "Scan in logarithmic depth.",
            "sidebarPosition": 6,
        },
        {
            "id": "parallel-sorting/merge-sort",
            "title": "Parallel Merge Sort",
            "description": "Merge sort with parallel merging.",
            "sidebarPosition": 1,
        },
        {
            "id": "parallel-sorting/bitonic-sort",
            "title": "Bitonic Sort",
            "description": "A sorting network for power-of-two inputs.",
            "sidebarPosition": 2,
        },
        {
            "id": "drafts/notes",
            "title": "Notes",
            "description": "",
            "unlisted": True,
        },
    ]


@pytest.fixture
def sidebar_spec() -> list[dict[str, Any]]:
    """Hand-authored tutorial sidebar."""
    return [
        {
            "type": "category",
            "label": "SYCL Quickstart",
            "collapsible": True,
            "collapsed": True,
            "items": [
                {
                    "type": "link",
                    "label": "First Step into SYCL",
                    "docId": "sycl/first-step",
                },
                {"type": "link", "label": "Memory", "docId": "sycl/memory"},
                {
                    "type": "link",
                    "label": "Basic Kernel",
                    "docId": "sycl/basic-kernel",
                },
                {
                    "type": "link",
                    "label": "Exception in SYCL",
                    "docId": "sycl/exception",
                },
            ],
        },
        {"type": "link", "label": "Parallel Patterns", "docId": "parallel-patterns"},
        {
            "type": "link",
            "label": "Parallel Prefix Sum",
            "docId": "parallel-prefix-sum",
        },
        {
            "type": "category",
            "label": "Parallel Sorting",
            "collapsible": True,
            "collapsed": False,
            "link": {"type": "generated-index"},
            "items": [
                {
                    "type": "link",
                    "label": "Parallel Merge Sort",
                    "docId": "parallel-sorting/merge-sort",
                },
                {
                    "type": "link",
                    "label": "Bitonic Sort",
                    "docId": "parallel-sorting/bitonic-sort",
                },
            ],
        },
    ]


@pytest.fixture
def registry(doc_descriptors: list[dict[str, Any]]) -> ContentRegistry:
    return ContentRegistry.from_descriptors(doc_descriptors, base_url=BASE_URL)


@pytest.fixture
def site_dir(
    tmp_path: Path,
    doc_descriptors: list[dict[str, Any]],
    sidebar_spec: list[dict[str, Any]],
) -> Path:
    """Write manifest files and docnav.toml into a temporary site directory."""
    site = tmp_path / "site"
    site.mkdir()
    (site / "docs.json").write_text(json.dumps(doc_descriptors))
    (site / "sidebars.json").write_text(json.dumps({"tutorialSidebar": sidebar_spec}))
    (site / "docnav.toml").write_text(
        f'[site]\nbase_url = "{BASE_URL}"\n\n[live_reload]\nenabled = false\n'
    )
    return site


@pytest.fixture
def test_config(site_dir: Path) -> Config:
    """Create a test configuration pointing at the temporary manifests."""
    return Config(
        server=ServerConfig(),
        site=SiteConfig(base_url=BASE_URL),
        docs=DocsConfig(
            metadata_file=site_dir / "docs.json",
            sidebars_file=site_dir / "sidebars.json",
        ),
        live_reload=LiveReloadConfig(enabled=False),
    )


@pytest.fixture
def generator_sidebar() -> list[dict[str, Any]]:
    """Tutorial sidebar as emitted by the site generator, with routed hrefs."""

    def link(doc_id: str, label: str) -> dict[str, Any]:
        return {
            "type": "link",
            "label": label,
            "href": f"{BASE_URL}docs/{doc_id}",
            "docId": doc_id,
            "unlisted": False,
        }

    return [
        {
            "type": "category",
            "label": "SYCL Quickstart",
            "collapsible": True,
            "collapsed": True,
            "items": [
                link("sycl/first-step", "First Step into SYCL"),
                link("sycl/memory", "Memory"),
                link("sycl/basic-kernel", "Basic Kernel"),
                link("sycl/exception", "Exception in SYCL"),
            ],
            "href": f"{BASE_URL}docs/category/sycl-quickstart",
        },
        link("parallel-patterns", "Parallel Patterns"),
        link("parallel-prefix-sum", "Parallel Prefix Sum"),
        {
            "type": "category",
            "label": "Parallel Sorting",
            "collapsible": True,
            "collapsed": True,
            "items": [
                link("parallel-sorting/merge-sort", "Parallel Merge Sort"),
                link("parallel-sorting/bitonic-sort", "Bitonic Sort"),
            ],
            "href": f"{BASE_URL}docs/category/parallel-sorting",
        },
    ]
