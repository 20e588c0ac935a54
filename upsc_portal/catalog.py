from __future__ import annotations

"""
Catalog loading and lookup for the prep portal.

The catalog is two read-only collections supplied as JSON at startup:
subjects (each with its topics) and previous exam years (each with its
papers).  :func:`load_catalog` validates both files into frozen pydantic
models and wraps them in a :class:`CatalogStore`, which is the only
object the search and navigation layers read from.

Topic and paper ids share one namespace so that a search result or a
view count can be resolved without knowing which collection it came
from.  Duplicate ids, slugs or years are rejected at load time.
"""

from dataclasses import dataclass
from pathlib import Path
from typing import Dict, Iterable, List, Sequence, Tuple, Union

from loguru import logger
from pydantic import TypeAdapter, ValidationError

from .config import PREVIOUS_YEARS_PATH, SUBJECTS_PATH, ExamYear, Paper, Subject, Topic


class CatalogError(ValueError):
    """Raised when catalog data is malformed or breaks a uniqueness rule."""


class NotFound(LookupError):
    """Raised when a slug, year or item id is absent from the catalog."""


_SUBJECTS_ADAPTER = TypeAdapter(List[Subject])
_YEARS_ADAPTER = TypeAdapter(List[ExamYear])


@dataclass(frozen=True)
class CatalogItem:
    """A topic or paper together with the subject or year that owns it."""

    item: Union[Topic, Paper]
    subject: Subject | None = None
    year: ExamYear | None = None

    @property
    def id(self) -> str:
        return self.item.id

    @property
    def title(self) -> str:
        return self.item.title

    @property
    def file(self) -> str:
        return self.item.file


class CatalogStore:
    """Immutable in-memory catalog with key lookups."""

    def __init__(self, subjects: Iterable[Subject], previous_years: Iterable[ExamYear]) -> None:
        self._subjects: Tuple[Subject, ...] = tuple(subjects)
        self._years: Tuple[ExamYear, ...] = tuple(previous_years)

        self._by_slug: Dict[str, Subject] = {}
        for s in self._subjects:
            if s.slug in self._by_slug:
                raise CatalogError(f"Duplicate subject slug: {s.slug!r}")
            self._by_slug[s.slug] = s

        self._by_year: Dict[int, ExamYear] = {}
        for y in self._years:
            if y.year in self._by_year:
                raise CatalogError(f"Duplicate exam year: {y.year}")
            self._by_year[y.year] = y

        self._items: Dict[str, CatalogItem] = {}
        for s in self._subjects:
            for t in s.topics:
                self._add_item(CatalogItem(item=t, subject=s))
        for y in self._years:
            for p in y.papers:
                self._add_item(CatalogItem(item=p, year=y))

    def _add_item(self, entry: CatalogItem) -> None:
        if entry.id in self._items:
            raise CatalogError(f"Duplicate item id across catalog: {entry.id!r}")
        self._items[entry.id] = entry

    def subjects(self) -> Sequence[Subject]:
        return self._subjects

    def previous_years(self) -> Sequence[ExamYear]:
        return self._years

    def subject_by_slug(self, slug: str) -> Subject:
        try:
            return self._by_slug[slug]
        except KeyError:
            raise NotFound(f"Subject not found: {slug!r}") from None

    def year_by_number(self, year: int) -> ExamYear:
        try:
            return self._by_year[int(year)]
        except (KeyError, TypeError, ValueError):
            raise NotFound(f"Year not found: {year!r}") from None

    def item_by_id(self, item_id: str) -> CatalogItem:
        try:
            return self._items[item_id]
        except KeyError:
            raise NotFound(f"Item not found: {item_id!r}") from None

    def topic_count(self) -> int:
        return sum(len(s.topics) for s in self._subjects)

    def paper_count(self) -> int:
        return sum(len(y.papers) for y in self._years)

    def __repr__(self) -> str:
        return (
            f"CatalogStore(subjects={len(self._subjects)}, topics={self.topic_count()}, "
            f"years={len(self._years)}, papers={self.paper_count()})"
        )


def _read_json(path: Path, adapter: TypeAdapter):
    try:
        raw = Path(path).read_text(encoding="utf-8")
    except OSError as e:
        raise CatalogError(f"Cannot read catalog file {path}: {e}") from e
    try:
        return adapter.validate_json(raw)
    except ValidationError as e:
        raise CatalogError(f"Invalid catalog data in {path}: {e}") from e


def load_catalog(
    subjects_path: Path = SUBJECTS_PATH,
    previous_years_path: Path = PREVIOUS_YEARS_PATH,
) -> CatalogStore:
    """Load and validate both catalog files into a :class:`CatalogStore`.

    The whole catalog is read before the store is returned; there is no
    partial or streaming load.  Any read, validation or uniqueness problem
    raises :class:`CatalogError`.
    """
    subjects = _read_json(subjects_path, _SUBJECTS_ADAPTER)
    years = _read_json(previous_years_path, _YEARS_ADAPTER)
    store = CatalogStore(subjects, years)
    logger.info(
        "Loaded catalog: {} subjects / {} topics, {} exam years / {} papers",
        len(store.subjects()),
        store.topic_count(),
        len(store.previous_years()),
        store.paper_count(),
    )
    return store
