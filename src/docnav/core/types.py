"""Core type definitions."""

from typing import NewType

# Document identifier (e.g., "sycl/basic-kernel")
DocId = NewType("DocId", str)

# URL path for routing (e.g., "/docs/sycl/memory")
# Distinct from filesystem Path to catch type mismatches
URLPath = NewType("URLPath", str)
