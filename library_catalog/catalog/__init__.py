"""
Catalog package for the library catalogue API.

This package contains the book schemas, the in-memory ``CatalogStore``
that owns the collection, the domain errors it raises and the route
definitions that expose it over HTTP: listing with filters and
pagination, CRUD on single records, and the borrow/return actions.
"""

from .router import router as catalog_router  # noqa: F401
from .store import CatalogStore, load_sample_books  # noqa: F401
