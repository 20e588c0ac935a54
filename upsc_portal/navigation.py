from __future__ import annotations

"""
Section navigation for the portal front end.

The state machine knows which section is visible and where the viewer's
back action should lead.  Any section may follow any other; there is no
transition table.  The return target is a single slot written right
before entering the viewer, so opening the viewer twice without going
back keeps only the latest origin.

Presentation code subscribes with :meth:`NavigationStateMachine.subscribe`
and re-renders from the :class:`NavigationSnapshot` it receives.
"""

from dataclasses import dataclass
from typing import Callable, List, Optional, Tuple, Union

from loguru import logger

from .catalog import CatalogItem, CatalogStore, NotFound
from .config import (
    BACK_TARGETS,
    INITIAL_RETURN_TARGET,
    INITIAL_SECTION,
    NAV_PARENTS,
    ExamYear,
    Paper,
    PaperResult,
    Section,
    Subject,
    Topic,
    TopicResult,
)

Openable = Union[CatalogItem, Topic, Paper, TopicResult, PaperResult]


@dataclass(frozen=True)
class ViewerContext:
    item_id: str
    title: str
    file: str


@dataclass(frozen=True)
class NavigationSnapshot:
    section: Section
    return_target: Section
    highlighted: Tuple[Section, ...] = ()
    subject: Optional[Subject] = None
    exam_year: Optional[ExamYear] = None
    viewer: Optional[ViewerContext] = None


def highlighted_sections(section: Section) -> Tuple[Section, ...]:
    """Nav entries to mark active while ``section`` is shown."""
    return (section,) + NAV_PARENTS.get(section, ())


def _coerce_section(section: Union[Section, str]) -> Section | None:
    if isinstance(section, Section):
        return section
    try:
        return Section(section)
    except ValueError:
        return None


class NavigationStateMachine:
    def __init__(self, catalog: CatalogStore, views=None) -> None:
        self.catalog = catalog
        self.views = views
        self._section: Section = INITIAL_SECTION
        self._return_target: Section = INITIAL_RETURN_TARGET
        self._subject: Subject | None = None
        self._exam_year: ExamYear | None = None
        self._viewer: ViewerContext | None = None
        self._listeners: List[Callable[[NavigationSnapshot], None]] = []

    # ------------------------------------------------------------------
    # State
    # ------------------------------------------------------------------

    @property
    def current_section(self) -> Section:
        return self._section

    @property
    def return_target(self) -> Section:
        return self._return_target

    @property
    def subject(self) -> Subject | None:
        return self._subject

    @property
    def exam_year(self) -> ExamYear | None:
        return self._exam_year

    @property
    def viewer(self) -> ViewerContext | None:
        return self._viewer

    def snapshot(self) -> NavigationSnapshot:
        return NavigationSnapshot(
            section=self._section,
            return_target=self._return_target,
            highlighted=highlighted_sections(self._section),
            subject=self._subject,
            exam_year=self._exam_year,
            viewer=self._viewer,
        )

    def subscribe(self, listener: Callable[[NavigationSnapshot], None]) -> Callable[[], None]:
        """Register a listener; returns a function that unregisters it."""
        self._listeners.append(listener)

        def _unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return _unsubscribe

    def _notify(self) -> None:
        snap = self.snapshot()
        for listener in list(self._listeners):
            try:
                listener(snap)
            except Exception as e:
                logger.exception("Navigation listener failed: {}", e)

    # ------------------------------------------------------------------
    # Transitions
    # ------------------------------------------------------------------

    def go_to(self, section: Union[Section, str]) -> bool:
        """Make ``section`` the active one.  Unknown names are ignored."""
        target = _coerce_section(section)
        if target is None:
            logger.warning("Ignoring navigation to unknown section {!r}", section)
            return False
        self._section = target
        self._notify()
        return True

    def set_return_target(self, section: Union[Section, str]) -> None:
        target = _coerce_section(section)
        if target is None:
            raise ValueError(f"Unknown section: {section!r}")
        self._return_target = target

    def back(self) -> Section:
        """Leave the current section and return the section now shown.

        From the viewer this goes to the stored return target.  Detail
        sections go back to their listing; anything else goes home.
        """
        if self._section is Section.VIEWER:
            target = self._return_target
        else:
            target = BACK_TARGETS.get(self._section, Section.HOME)
        self.go_to(target)
        return target

    def open_subject(self, slug: str) -> bool:
        try:
            subject = self.catalog.subject_by_slug(slug)
        except NotFound as e:
            logger.info("{}; staying on {}", e, self._section.value)
            return False
        self._subject = subject
        return self.go_to(Section.SUBJECT_DETAIL)

    def open_year(self, year: int) -> bool:
        try:
            exam_year = self.catalog.year_by_number(year)
        except NotFound as e:
            logger.info("{}; staying on {}", e, self._section.value)
            return False
        self._exam_year = exam_year
        return self.go_to(Section.YEAR_DETAIL)

    def open_item(
        self,
        item: Union[Openable, str],
        return_target: Union[Section, str, None] = None,
    ) -> bool:
        """Show ``item`` in the viewer, remembering where to come back to.

        ``item`` may be a catalog id, a topic/paper, or a search result.
        The return target defaults to the section being left; an unknown
        return target or item id leaves the current section unchanged.
        """
        target = _coerce_section(return_target if return_target is not None else self._section)
        if target is None:
            logger.warning("Ignoring viewer open with unknown return target {!r}", return_target)
            return False
        if isinstance(item, str):
            try:
                item = self.catalog.item_by_id(item)
            except NotFound as e:
                logger.info("{}; staying on {}", e, self._section.value)
                return False

        self._return_target = target
        self._viewer = ViewerContext(item_id=item.id, title=item.title, file=item.file)
        self._record_view(item.id)
        return self.go_to(Section.VIEWER)

    def open_topic(self, topic: Topic) -> bool:
        return self.open_item(topic, return_target=Section.SUBJECT_DETAIL)

    def open_paper(self, paper: Paper) -> bool:
        return self.open_item(paper, return_target=Section.YEAR_DETAIL)

    def _record_view(self, item_id: str) -> None:
        if self.views is None:
            return
        try:
            self.views.record(item_id)
        except Exception as e:
            # view counting is fire-and-forget
            logger.warning("Failed to record view for {}: {}", item_id, e)
