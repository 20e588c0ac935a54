from __future__ import annotations

import pytest

from upsc_portal.catalog import CatalogStore
from upsc_portal.config import ExamYear, Paper, Subject, Topic


class ManualHandle:
    def __init__(self, scheduler: "ManualScheduler", delay: float, callback) -> None:
        self.scheduler = scheduler
        self.delay = delay
        self.callback = callback
        self.cancelled = False

    def cancel(self) -> None:
        self.cancelled = True


class ManualScheduler:
    """Records scheduled callbacks; tests fire them explicitly."""

    def __init__(self) -> None:
        self.handles: list[ManualHandle] = []

    def schedule(self, delay: float, callback) -> ManualHandle:
        handle = ManualHandle(self, delay, callback)
        self.handles.append(handle)
        return handle

    @property
    def live(self) -> list[ManualHandle]:
        return [h for h in self.handles if not h.cancelled]

    def fire_all(self) -> None:
        for handle in self.live:
            handle.cancelled = True
            handle.callback()


def make_catalog() -> CatalogStore:
    history = Subject(
        slug="history",
        name="History",
        description="Indian history",
        color="#f59e0b",
        icon="landmark",
        topics=[
            Topic(id="t1", title="Mughal Empire", file="/h/mughal.html", tags=["medieval", "india"]),
            Topic(id="t2", title="Revolt of 1857", file="/h/1857.html", difficulty="Hard", tags=["modern"]),
        ],
    )
    polity = Subject(
        slug="polity",
        name="Indian Polity",
        topics=[
            Topic(id="t3", title="Fundamental Rights", file="/p/fr.html", tags=["constitution"]),
            Topic(id="t4", title="Parliament", file="/p/parl.html", tags=["Legislature", "India"]),
        ],
    )
    years = [
        ExamYear(year=2023, papers=[
            Paper(id="p5", title="GS Paper 1", file="/y/2023/gs1.pdf", category="GS"),
            Paper(id="p6", title="CSAT Paper", file="/y/2023/csat.pdf", category="CSAT"),
        ]),
        ExamYear(year=2022, papers=[
            Paper(id="p7", title="GS Paper 1", file="/y/2022/gs1.pdf", category="GS"),
        ]),
    ]
    return CatalogStore([history, polity], years)


@pytest.fixture
def catalog() -> CatalogStore:
    return make_catalog()


@pytest.fixture
def scheduler() -> ManualScheduler:
    return ManualScheduler()
