"""Hosting document environment over a BeautifulSoup tree."""

import logging
from collections.abc import Sequence

from bs4 import BeautifulSoup, NavigableString, PageElement, Tag

from text_linkify.dom.observers import (
    MutationKind,
    MutationRecord,
    MutationSource,
    VisibilityCallback,
    VisibilityObserver,
    VisibilityPredicate,
    always_visible,
)
from text_linkify.dom.scheduler import Scheduler
from text_linkify.utils.url_utils import code_from_fragment, get_host

logger = logging.getLogger(__name__)


class DocumentHost:
    """A live document: tree, page URL, visibility and mutation sources.

    Edits that should be visible to mutation listeners go through the
    methods here, which mutate the tree and queue a ``MutationRecord``.
    """

    def __init__(
        self,
        soup: BeautifulSoup,
        scheduler: Scheduler,
        url: str = "",
        is_visible: VisibilityPredicate = always_visible,
    ):
        self.soup = soup
        self.scheduler = scheduler
        self.url = url
        self._is_visible = is_visible
        self.mutations = MutationSource(scheduler)
        self._visibility_observers: list[VisibilityObserver] = []

    @classmethod
    def from_html(
        cls,
        html: str,
        scheduler: Scheduler,
        url: str = "",
        is_visible: VisibilityPredicate = always_visible,
    ) -> "DocumentHost":
        return cls(BeautifulSoup(html, "lxml"), scheduler, url=url, is_visible=is_visible)

    @property
    def host(self) -> str:
        return get_host(self.url)

    @property
    def code_fragment(self) -> str | None:
        """Access code carried in the page URL fragment, if any."""
        return code_from_fragment(self.url)

    @property
    def body(self) -> Tag:
        return self.soup.body or self.soup

    def create_visibility_observer(
        self,
        callback: VisibilityCallback,
        root_margin_px: int = 200,
        threshold: float = 0.0,
    ) -> VisibilityObserver:
        observer = VisibilityObserver(
            callback,
            self.scheduler,
            is_visible=self._is_visible,
            root_margin_px=root_margin_px,
            threshold=threshold,
        )
        self._visibility_observers.append(observer)
        return observer

    def viewport_changed(self) -> None:
        """Re-check visibility for every observer (after a scroll or resize)."""
        for observer in self._visibility_observers:
            observer.viewport_changed()

    def is_attached(self, node: PageElement) -> bool:
        current: PageElement | None = node
        while current is not None:
            if current is self.soup:
                return True
            current = current.parent
        return False

    def select(self, selector: str) -> list[Tag]:
        return list(self.soup.select(selector))

    def serialize(self) -> str:
        return str(self.soup)

    # --- Mutations ---

    def replace_node(self, old: PageElement, new_nodes: Sequence[PageElement]) -> bool:
        """Replace ``old`` in place with ``new_nodes``; False when it is detached."""
        parent = old.parent
        if parent is None:
            logger.debug("Not replacing detached node %r", str(old)[:40])
            return False
        old.replace_with(*new_nodes)
        self.mutations.record(
            MutationRecord(MutationKind.CHILD_LIST, parent, list(new_nodes))
        )
        return True

    def append_html(self, parent: Tag, html: str) -> list[PageElement]:
        """Parse an HTML fragment and append its nodes to ``parent``."""
        nodes = self._parse_fragment(html)
        for node in nodes:
            parent.append(node)
        self.mutations.record(MutationRecord(MutationKind.CHILD_LIST, parent, nodes))
        return nodes

    def insert_html(self, parent: Tag, index: int, html: str) -> list[PageElement]:
        """Parse an HTML fragment and insert its nodes at ``index`` in ``parent``."""
        nodes = self._parse_fragment(html)
        for offset, node in enumerate(nodes):
            parent.insert(index + offset, node)
        self.mutations.record(MutationRecord(MutationKind.CHILD_LIST, parent, nodes))
        return nodes

    def append_text(self, parent: Tag, text: str) -> NavigableString:
        node = NavigableString(text)
        parent.append(node)
        self.mutations.record(MutationRecord(MutationKind.CHILD_LIST, parent, [node]))
        return node

    def set_text(self, node: NavigableString, value: str) -> NavigableString:
        """Change a text node's value; returns the node now holding the value."""
        replacement = NavigableString(value)
        node.replace_with(replacement)
        self.mutations.record(MutationRecord(MutationKind.CHARACTER_DATA, replacement))
        return replacement

    def remove(self, node: PageElement) -> None:
        parent = node.parent
        node.extract()
        if parent is not None:
            self.mutations.record(MutationRecord(MutationKind.CHILD_LIST, parent))

    @staticmethod
    def _parse_fragment(html: str) -> list[PageElement]:
        # html.parser keeps fragments as-is; lxml would wrap them in html/body/p
        fragment = BeautifulSoup(html, "html.parser")
        return [node.extract() for node in list(fragment.contents)]
