from __future__ import annotations

import json
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from pydantic import TypeAdapter, ValidationError

from meaningless.api.models import Difficulty, EducationalMessage, EducationalTakeaway, LinguisticConcept, Word
from meaningless.errors import CatalogLoadError

# Package directory; assets/ lives next to this package's modules.
DEFAULT_ROOT = Path(__file__).resolve().parents[1]

_WORDS = TypeAdapter(list[Word])
_CONCEPTS = TypeAdapter(list[LinguisticConcept])
_TAKEAWAYS = TypeAdapter(list[EducationalTakeaway])
_MESSAGES = TypeAdapter(list[EducationalMessage])


@dataclass(frozen=True, slots=True)
class WordCatalog:
    """Static word/meaning reference data.

    Order of `words` is the file order; lookups by id are exact.
    """

    words: tuple[Word, ...]
    _by_id: dict[str, Word]

    @staticmethod
    def from_rows(rows: list[Word]) -> "WordCatalog":
        by_id: dict[str, Word] = {}
        for w in rows:
            if w.id in by_id:
                raise CatalogLoadError(f"Duplicate word id: {w.id}")
            by_id[w.id] = w
        return WordCatalog(words=tuple(rows), _by_id=by_id)

    def get(self, id: str) -> Word | None:
        return self._by_id.get(id)

    def by_difficulty(self, difficulty: Difficulty | str) -> tuple[Word, ...]:
        return tuple(w for w in self.words if w.difficulty == difficulty)

    def by_category(self, category: str) -> tuple[Word, ...]:
        return tuple(w for w in self.words if category in w.categories)

    def __contains__(self, item: object) -> bool:
        return isinstance(item, str) and item in self._by_id

    def __len__(self) -> int:
        return len(self.words)


@dataclass(frozen=True, slots=True)
class EducationalContent:
    concepts: tuple[LinguisticConcept, ...]
    takeaways: tuple[EducationalTakeaway, ...]
    messages: tuple[EducationalMessage, ...]
    _concept_by_id: dict[str, LinguisticConcept]

    @staticmethod
    def from_rows(
        *,
        concepts: list[LinguisticConcept],
        takeaways: list[EducationalTakeaway],
        messages: list[EducationalMessage],
    ) -> "EducationalContent":
        by_id: dict[str, LinguisticConcept] = {}
        for c in concepts:
            if c.id in by_id:
                raise CatalogLoadError(f"Duplicate concept id: {c.id}")
            by_id[c.id] = c
        return EducationalContent(
            concepts=tuple(concepts),
            takeaways=tuple(takeaways),
            messages=tuple(messages),
            _concept_by_id=by_id,
        )

    def concept(self, id: str) -> LinguisticConcept | None:
        return self._concept_by_id.get(id)

    def takeaways_for(self, concept_id: str) -> tuple[EducationalTakeaway, ...]:
        return tuple(t for t in self.takeaways if t.concept_id == concept_id)


@dataclass(frozen=True, slots=True)
class Catalog:
    words: WordCatalog
    education: EducationalContent


def _read_json(path: Path) -> dict[str, Any]:
    try:
        raw = path.read_text(encoding="utf-8")
    except FileNotFoundError as e:
        raise CatalogLoadError(f"Catalog file not found: {path}") from e

    try:
        data = json.loads(raw)
    except json.JSONDecodeError as e:
        raise CatalogLoadError(f"Invalid JSON in {path}: {e}") from e

    if not isinstance(data, dict):
        raise CatalogLoadError(f"Expected a JSON object at top level of {path}")
    return data


def load_word_catalog(path: Path) -> WordCatalog:
    data = _read_json(path)
    try:
        rows = _WORDS.validate_python(data.get("words", []))
    except ValidationError as e:
        raise CatalogLoadError(f"Invalid word data in {path}: {e}") from e

    if not rows:
        raise CatalogLoadError(f"No words in {path}")
    return WordCatalog.from_rows(rows)


def load_educational_content(path: Path) -> EducationalContent:
    data = _read_json(path)
    try:
        return EducationalContent.from_rows(
            concepts=_CONCEPTS.validate_python(data.get("concepts", [])),
            takeaways=_TAKEAWAYS.validate_python(data.get("takeaways", [])),
            messages=_MESSAGES.validate_python(data.get("messages", [])),
        )
    except ValidationError as e:
        raise CatalogLoadError(f"Invalid educational content in {path}: {e}") from e


def load_catalog(*, root: Path | None = None) -> Catalog:
    assets_dir = (root or DEFAULT_ROOT) / "assets"
    return Catalog(
        words=load_word_catalog(assets_dir / "words.json"),
        education=load_educational_content(assets_dir / "educational_content.json"),
    )
