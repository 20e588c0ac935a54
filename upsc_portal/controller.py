from __future__ import annotations

"""
Debounced search orchestration for interactive input.

Every keystroke goes through :meth:`SearchController.input_changed`.
Input shorter than the minimum length clears results straight away;
anything longer is dispatched once the quiet period has passed with no
further typing.  The dispatch function may be the in-process
:class:`~upsc_portal.search.SearchIndex` or an async HTTP client.

Responses that arrive after the input has changed again are dropped: a
generation counter is bumped on every input change and captured at
dispatch time, so a slow earlier request can never overwrite the
results of a newer one.
"""

import asyncio
import inspect
from enum import Enum
from typing import Any, Awaitable, Callable, List, Optional, Sequence, Set, Union

from loguru import logger

from .config import SEARCH_DEBOUNCE_SECONDS, SEARCH_MIN_QUERY_LENGTH
from .search import SearchResult

DispatchFn = Callable[[str], Union[Sequence[SearchResult], Awaitable[Sequence[SearchResult]]]]


class SearchStatus(str, Enum):
    IDLE = "idle"  # nothing searched, or input too short
    PENDING = "pending"  # waiting for the quiet period or the response
    RESULTS = "results"
    NO_RESULTS = "no-results"


class LoopScheduler:
    """Schedules callbacks on the running asyncio loop."""

    def schedule(self, delay: float, callback: Callable[[], Any]) -> asyncio.TimerHandle:
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            raise RuntimeError(
                "No running asyncio loop to debounce on; call from a coroutine "
                "or pass scheduler= to SearchController"
            ) from None
        return loop.call_later(delay, callback)


class Debouncer:
    """Holds at most one outstanding scheduled callback."""

    def __init__(self, scheduler=None) -> None:
        self._scheduler = scheduler or LoopScheduler()
        self._handle = None

    @property
    def pending(self) -> bool:
        return self._handle is not None

    def schedule(self, delay: float, callback: Callable[[], Any]):
        self.cancel()

        def _fire() -> None:
            self._handle = None
            callback()

        self._handle = self._scheduler.schedule(delay, _fire)
        return self._handle

    def cancel(self) -> None:
        handle = self._handle
        self._handle = None
        if handle is not None:
            handle.cancel()


class SearchController:
    """Debounced search state for one input box.

    With the default scheduler the quiet period runs on the asyncio loop,
    so ``input_changed`` must be called while a loop is running.  Pass
    ``scheduler=`` (anything with ``schedule(delay, callback)`` returning a
    handle with ``cancel()``) to drive it from other event sources.
    """

    def __init__(
        self,
        dispatch: DispatchFn,
        *,
        navigator=None,
        debounce_seconds: float = SEARCH_DEBOUNCE_SECONDS,
        min_length: int = SEARCH_MIN_QUERY_LENGTH,
        scheduler=None,
    ) -> None:
        self._dispatch = dispatch
        self.navigator = navigator
        self.debounce_seconds = debounce_seconds
        self.min_length = min_length
        self._debouncer = Debouncer(scheduler)
        self._generation = 0
        self._input = ""
        self._results: List[SearchResult] = []
        self._status = SearchStatus.IDLE
        self._tasks: Set[asyncio.Task] = set()
        self._listeners: List[Callable[["SearchController"], None]] = []

    @property
    def input_text(self) -> str:
        return self._input

    @property
    def results(self) -> List[SearchResult]:
        return list(self._results)

    @property
    def status(self) -> SearchStatus:
        return self._status

    @property
    def shows_no_results(self) -> bool:
        return self._status is SearchStatus.NO_RESULTS

    def subscribe(self, listener: Callable[["SearchController"], None]) -> None:
        self._listeners.append(listener)

    def _set_state(self, status: SearchStatus, results: Optional[Sequence[SearchResult]] = None) -> None:
        self._status = status
        self._results = list(results or [])
        for listener in list(self._listeners):
            try:
                listener(self)
            except Exception as e:
                logger.exception("Search listener failed: {}", e)

    # ------------------------------------------------------------------

    def input_changed(self, text: str) -> None:
        self._generation += 1
        self._debouncer.cancel()
        self._input = text or ""
        query = self._input.strip()

        if len(query) < self.min_length:
            self._set_state(SearchStatus.IDLE)
            return

        generation = self._generation
        self._debouncer.schedule(self.debounce_seconds, lambda: self._fire(query, generation))
        self._status = SearchStatus.PENDING

    def clear(self) -> None:
        self._generation += 1
        self._debouncer.cancel()
        self._input = ""
        self._set_state(SearchStatus.IDLE)

    def _fire(self, query: str, generation: int) -> None:
        try:
            outcome = self._dispatch(query)
        except Exception as e:
            self._fail(query, generation, e)
            return
        if inspect.isawaitable(outcome):
            task = asyncio.ensure_future(self._await_response(query, generation, outcome))
            self._tasks.add(task)
            task.add_done_callback(self._tasks.discard)
        else:
            self._apply(query, generation, outcome)

    async def _await_response(self, query: str, generation: int, pending: Awaitable) -> None:
        try:
            results = await pending
        except Exception as e:
            self._fail(query, generation, e)
            return
        self._apply(query, generation, results)

    def _is_stale(self, generation: int) -> bool:
        return generation != self._generation

    def _apply(self, query: str, generation: int, results: Sequence[SearchResult]) -> None:
        if self._is_stale(generation):
            logger.debug("Discarding stale response for {!r}", query)
            return
        if results:
            self._set_state(SearchStatus.RESULTS, results)
        else:
            self._set_state(SearchStatus.NO_RESULTS)

    def _fail(self, query: str, generation: int, error: Exception) -> None:
        logger.warning("Search dispatch for {!r} failed: {}", query, error)
        if not self._is_stale(generation):
            self._set_state(SearchStatus.IDLE)

    async def wait_idle(self) -> None:
        """Wait for in-flight async dispatches to settle."""
        while self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)

    # ------------------------------------------------------------------

    def select(self, result: SearchResult) -> bool:
        """Open ``result`` in the viewer from whatever section is shown."""
        self.clear()
        if self.navigator is None:
            return False
        return self.navigator.open_item(result, return_target=self.navigator.current_section)
