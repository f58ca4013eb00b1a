"""Debounced address suggestion lookups."""
from __future__ import annotations

import logging
import os
import threading
from typing import Callable, List, Optional, Protocol

from shipcalc.locations import MIN_SUGGEST_LENGTH, LocationSuggestion, normalize_place

logger = logging.getLogger(__name__)

SUGGEST_DEBOUNCE_SECONDS = float(os.environ.get("SUGGEST_DEBOUNCE_SECONDS", "0.3"))

SuggestionFetcher = Callable[[str], List[LocationSuggestion]]
ResultsCallback = Callable[[str, List[LocationSuggestion]], None]


class _Timer(Protocol):
    def start(self) -> None: ...

    def cancel(self) -> None: ...


TimerFactory = Callable[[float, Callable[[], None]], _Timer]


def _thread_timer(delay: float, callback: Callable[[], None]) -> _Timer:
    timer = threading.Timer(delay, callback)
    timer.daemon = True
    return timer


class ManualTimer:
    """Timer that only fires when told to.

    Used where there is no event loop to wait for a pause in typing: pending
    lookups run through ``DebouncedSuggestionSearch.flush()`` or ``fire()``.
    """

    def __init__(self, delay: float, callback: Callable[[], None]) -> None:
        self.delay = delay
        self.callback = callback
        self.started = False
        self.cancelled = False

    def start(self) -> None:
        self.started = True

    def cancel(self) -> None:
        self.cancelled = True

    def fire(self) -> None:
        if self.started and not self.cancelled:
            self.callback()


class DebouncedSuggestionSearch:
    """Run at most one suggestion lookup per pause in typing.

    Each call to :meth:`update` supersedes the previous one: a pending lookup is
    cancelled and a lookup that is already running has its results dropped when
    it finishes. Only the most recent request reaches ``on_results``.
    """

    def __init__(
        self,
        fetch: SuggestionFetcher,
        on_results: ResultsCallback,
        *,
        delay: float = SUGGEST_DEBOUNCE_SECONDS,
        timer_factory: TimerFactory = _thread_timer,
    ) -> None:
        self._fetch = fetch
        self._on_results = on_results
        self._delay = delay
        self._timer_factory = timer_factory
        self._lock = threading.Lock()
        self._generation = 0
        self._timer: Optional[_Timer] = None
        self._pending: Optional[tuple[int, str]] = None

    @property
    def generation(self) -> int:
        return self._generation

    @property
    def pending(self) -> bool:
        return self._pending is not None

    def update(self, text: str) -> int:
        """Schedule a lookup for *text* and return its generation."""

        query = normalize_place(text)
        with self._lock:
            self._generation += 1
            generation = self._generation
            self._cancel_timer()
            timer: Optional[_Timer] = None
            if len(query) <= MIN_SUGGEST_LENGTH:
                self._pending = None
            else:
                self._pending = (generation, text)
                timer = self._timer_factory(
                    self._delay, lambda: self._run(generation, text)
                )
                self._timer = timer

        if timer is not None:
            timer.start()
        else:
            self._on_results(text, [])
        return generation

    def cancel(self) -> None:
        with self._lock:
            self._generation += 1
            self._pending = None
            self._cancel_timer()

    def flush(self) -> None:
        """Run the pending lookup now, on the calling thread."""

        with self._lock:
            pending = self._pending
            self._cancel_timer()
        if pending is not None:
            self._run(*pending)

    def _cancel_timer(self) -> None:
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None

    def _run(self, generation: int, text: str) -> None:
        with self._lock:
            if self._pending is None or self._pending[0] != generation:
                return
            self._pending = None
            self._timer = None

        results = self._fetch(text)

        with self._lock:
            if generation != self._generation:
                logger.debug(
                    "Dropping stale suggestions for %r (generation %s, latest %s)",
                    text,
                    generation,
                    self._generation,
                )
                return

        # Receivers re-check the query text, so a newer update that lands
        # before delivery still wins.
        self._on_results(text, results)


__all__ = ["DebouncedSuggestionSearch", "ManualTimer", "SUGGEST_DEBOUNCE_SECONDS"]
