from __future__ import annotations

import json
from pathlib import Path

import pytest

from meaningless.catalog.registry import DEFAULT_ROOT, load_catalog, load_word_catalog
from meaningless.errors import CatalogLoadError


def test_packaged_catalog_loads() -> None:
    catalog = load_catalog(root=DEFAULT_ROOT)

    assert len(catalog.words) == 10
    assert "word_001" in catalog.words
    assert catalog.words.get("word_001").text == "bank"
    assert catalog.education.concept("homonym") is not None
    assert catalog.education.takeaways_for("homonym")


def _write(tmp_path: Path, name: str, data: object) -> Path:
    assets = tmp_path / "assets"
    assets.mkdir(exist_ok=True)
    path = assets / name
    path.write_text(json.dumps(data) if not isinstance(data, str) else data, encoding="utf-8")
    return path


def test_missing_file(tmp_path: Path) -> None:
    with pytest.raises(CatalogLoadError) as e:
        load_catalog(root=tmp_path)
    assert "not found" in str(e.value)


def test_bad_json(tmp_path: Path) -> None:
    path = _write(tmp_path, "words.json", "{not json")
    with pytest.raises(CatalogLoadError) as e:
        load_word_catalog(path)
    assert "Invalid JSON" in str(e.value)


def test_word_without_meanings_is_rejected(tmp_path: Path) -> None:
    path = _write(
        tmp_path,
        "words.json",
        {"words": [{"id": "w1", "text": "bank", "difficulty": "easy", "categories": ["noun"], "meanings": []}]},
    )
    with pytest.raises(CatalogLoadError):
        load_word_catalog(path)


def test_empty_catalog_is_rejected(tmp_path: Path) -> None:
    path = _write(tmp_path, "words.json", {"words": []})
    with pytest.raises(CatalogLoadError):
        load_word_catalog(path)
