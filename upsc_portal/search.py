from __future__ import annotations

"""
Substring search over the portal catalog.

Matching is deliberately simple: a lower-cased substring test against
topic titles and tags, and against paper titles.  Results come back in
catalog scan order (subjects → topics, then years → papers) and are
truncated at ``SEARCH_RESULT_CAP``.  There is no scoring; an item found
later in the scan is dropped once the cap is reached, however good the
match.

Example::

    from upsc_portal.catalog import load_catalog
    from upsc_portal.search import search_catalog
    results = search_catalog(load_catalog(), "mughal")
    for r in results:
        print(r.title, r.context_label)

"""

from typing import Iterator, List, Union

from loguru import logger

from .catalog import CatalogStore
from .config import (
    SEARCH_MIN_QUERY_LENGTH,
    SEARCH_RESULT_CAP,
    Paper,
    PaperResult,
    Topic,
    TopicResult,
)

SearchResult = Union[TopicResult, PaperResult]


def normalize_query(text: str | None) -> str:
    """Trim and lower-case raw input; ``None`` becomes the empty string."""
    if not text:
        return ""
    return str(text).strip().lower()


def is_searchable(text: str | None, min_length: int = SEARCH_MIN_QUERY_LENGTH) -> bool:
    return len(normalize_query(text)) >= min_length


def topic_matches(topic: Topic, needle: str) -> bool:
    if needle in topic.title.lower():
        return True
    return any(needle in tag.lower() for tag in topic.tags)


def paper_matches(paper: Paper, needle: str) -> bool:
    return needle in paper.title.lower()


def _iter_matches(catalog: CatalogStore, needle: str) -> Iterator[SearchResult]:
    for subject in catalog.subjects():
        for topic in subject.topics:
            if topic_matches(topic, needle):
                yield TopicResult(
                    id=topic.id,
                    title=topic.title,
                    file=topic.file,
                    difficulty=topic.difficulty,
                    tags=topic.tags,
                    subject_name=subject.name,
                    subject_slug=subject.slug,
                )
    for exam_year in catalog.previous_years():
        for paper in exam_year.papers:
            if paper_matches(paper, needle):
                yield PaperResult(
                    id=paper.id,
                    title=paper.title,
                    file=paper.file,
                    category=paper.category,
                    year=exam_year.year,
                )


def search_catalog(
    catalog: CatalogStore,
    text: str | None,
    limit: int = SEARCH_RESULT_CAP,
) -> List[SearchResult]:
    """Return at most ``limit`` matches for ``text`` in scan order.

    Empty, whitespace-only and too-short queries return ``[]`` without
    touching the catalog.
    """
    needle = normalize_query(text)
    if len(needle) < SEARCH_MIN_QUERY_LENGTH:
        return []

    results: List[SearchResult] = []
    for match in _iter_matches(catalog, needle):
        if len(results) >= limit:
            break
        results.append(match)
    logger.debug("Search {!r}: {} results", needle, len(results))
    return results


class SearchIndex:
    """Callable wrapper binding :func:`search_catalog` to one catalog.

    Instances are usable directly as the dispatch function of a
    :class:`~upsc_portal.controller.SearchController`.
    """

    def __init__(self, catalog: CatalogStore, limit: int = SEARCH_RESULT_CAP) -> None:
        self.catalog = catalog
        self.limit = limit

    def query(self, text: str | None) -> List[SearchResult]:
        return search_catalog(self.catalog, text, limit=self.limit)

    __call__ = query
