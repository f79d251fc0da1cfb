from __future__ import annotations

from pathlib import Path

from meaningless.catalog.registry import Catalog, load_catalog


_CATALOG: Catalog | None = None


def init_catalog(*, root: Path | None = None) -> Catalog:
    """Load the word catalog and educational content once and cache them.

    Safe to call multiple times; subsequent calls return the already loaded instance.
    The catalog is read-only, so sharing it is fine. Per-player state (recently used
    words) lives on `WordSelector`, never here.
    """

    global _CATALOG
    if _CATALOG is None:
        _CATALOG = load_catalog(root=root)
    return _CATALOG


def reset_catalog_for_tests() -> None:
    global _CATALOG
    _CATALOG = None


def get_catalog() -> Catalog:
    if _CATALOG is None:
        raise RuntimeError("Catalog not initialized. Call init_catalog() at startup.")
    return _CATALOG
