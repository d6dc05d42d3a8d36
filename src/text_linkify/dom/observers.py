"""Visibility and mutation notification sources."""

import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from enum import Enum

from bs4 import PageElement, Tag

from text_linkify.dom.scheduler import Scheduler

logger = logging.getLogger(__name__)


class MutationKind(str, Enum):
    """Kind of tree change reported to mutation listeners."""

    CHILD_LIST = "childList"
    CHARACTER_DATA = "characterData"


@dataclass
class MutationRecord:
    """One tree change: inserted children of ``target``, or changed text ``target``."""

    kind: MutationKind
    target: PageElement
    added_nodes: list[PageElement] = field(default_factory=list)


# (element, root_margin_px, threshold) -> whether the element intersects the viewport
VisibilityPredicate = Callable[[Tag, int, float], bool]
VisibilityCallback = Callable[[list[Tag]], None]
MutationCallback = Callable[[list[MutationRecord]], None]


def always_visible(element: Tag, root_margin_px: int, threshold: float) -> bool:
    """Viewport of a static document: every element is on screen."""
    return True


class VisibilityObserver:
    """Report observed elements once they intersect the (pre-loaded) viewport.

    Checks run on a deferred turn after ``observe`` or ``viewport_changed``,
    and every visible observed element is delivered in one batch, the way an
    intersection observer reports entries.
    """

    def __init__(
        self,
        callback: VisibilityCallback,
        scheduler: Scheduler,
        is_visible: VisibilityPredicate = always_visible,
        root_margin_px: int = 200,
        threshold: float = 0.0,
    ):
        self._callback = callback
        self._scheduler = scheduler
        self._is_visible = is_visible
        self.root_margin_px = root_margin_px
        self.threshold = threshold
        # dict keeps insertion order; keyed by identity since bs4 Tags compare by content
        self._observed: dict[int, Tag] = {}
        self._check_scheduled = False

    def observe(self, element: Tag) -> None:
        self._observed[id(element)] = element
        self._schedule_check()

    def unobserve(self, element: Tag) -> None:
        self._observed.pop(id(element), None)

    def is_observed(self, element: Tag) -> bool:
        return id(element) in self._observed

    @property
    def observed(self) -> list[Tag]:
        return list(self._observed.values())

    def viewport_changed(self) -> None:
        """The host scrolled or resized; re-check observed elements."""
        self._schedule_check()

    def disconnect(self) -> None:
        self._observed.clear()

    def _schedule_check(self) -> None:
        if self._check_scheduled:
            return
        self._check_scheduled = True
        self._scheduler.defer(self._check)

    def _check(self) -> None:
        self._check_scheduled = False
        entries = [
            el
            for el in self._observed.values()
            if self._is_visible(el, self.root_margin_px, self.threshold)
        ]
        if entries:
            self._callback(entries)


class MutationSource:
    """Queue tree changes and deliver them to listeners in batches."""

    def __init__(self, scheduler: Scheduler):
        self._scheduler = scheduler
        self._listeners: list[MutationCallback] = []
        self._queue: list[MutationRecord] = []
        self._flush_scheduled = False

    def subscribe(self, callback: MutationCallback) -> None:
        self._listeners.append(callback)

    def unsubscribe(self, callback: MutationCallback) -> None:
        if callback in self._listeners:
            self._listeners.remove(callback)

    def record(self, record: MutationRecord) -> None:
        if not self._listeners:
            return
        self._queue.append(record)
        if not self._flush_scheduled:
            self._flush_scheduled = True
            self._scheduler.defer(self._flush)

    def _flush(self) -> None:
        self._flush_scheduled = False
        records, self._queue = self._queue, []
        if not records:
            return
        logger.debug("Delivering %d mutation record(s)", len(records))
        for listener in list(self._listeners):
            listener(records)
