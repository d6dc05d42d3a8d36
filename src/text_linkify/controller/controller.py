"""Visibility- and mutation-driven traversal of a live document."""

import logging
from dataclasses import dataclass

from bs4 import NavigableString, PageElement, Tag

from text_linkify.config import CodeSearchConfig, LinkifyConfig
from text_linkify.dom.host import DocumentHost
from text_linkify.dom.observers import MutationKind, MutationRecord
from text_linkify.dom.scheduler import TimerHandle
from text_linkify.drives import DriveRegistry
from text_linkify.extractor.code import extract_code
from text_linkify.extractor.text import extract_text, is_text_node
from text_linkify.rewriter import NodeRewriter
from text_linkify.settings import SiteSettings
from text_linkify.utils.url_utils import has_code_fragment, with_code_fragment

logger = logging.getLogger(__name__)


@dataclass
class LinkifyStats:
    """Counters for one document session."""

    containers_processed: int = 0
    links_created: int = 0
    codes_attached: int = 0
    anchors_updated: int = 0
    rewrite_errors: int = 0
    invalidations: int = 0


class LinkifyController:
    """Drive the rewrite pipeline over a ``DocumentHost``.

    Containers move Unseen -> Observed -> Processing -> Processed, and back
    to Observed when a mutation invalidates them. The processed marker on a
    container is set before its chunked rewrite starts, so a container is
    never processed twice at once.
    """

    def __init__(
        self,
        document: DocumentHost,
        site: SiteSettings,
        config: LinkifyConfig | None = None,
        code_search: CodeSearchConfig | None = None,
    ):
        self.document = document
        self.site = site
        self.config = config or LinkifyConfig()
        self.code_search = code_search or CodeSearchConfig()
        self.stats = LinkifyStats()
        self.rewriter = NodeRewriter(
            document.soup,
            self.config,
            self.code_search,
            drive_enabled=site.drive_enabled,
        )
        self.visibility = document.create_visibility_observer(
            self.on_became_visible,
            root_margin_px=self.config.root_margin_px,
            threshold=self.config.threshold,
        )
        self._marker = self.config.processed_attribute
        self._skip_tags = frozenset(self.config.skip_tags)
        self._pending: dict[int, Tag] = {}
        self._debounce: TimerHandle | None = None
        self._in_flight = 0
        self.started = False

    @property
    def busy(self) -> bool:
        """True while chunked rewrites or a debounced re-scan are outstanding."""
        return self._in_flight > 0 or self._debounce is not None

    def start(self) -> None:
        """Observe the initial containers and subscribe to tree mutations."""
        if not self.site.linkify_enabled:
            logger.info("Linkify disabled for %s", self.site.host or "this document")
            return

        for element in self.document.select(self.config.relevant_selector):
            if not element.has_attr(self._marker):
                self.visibility.observe(element)

        self.document.mutations.subscribe(self.on_subtree_changed)
        self.started = True
        logger.debug("Observing %d container(s)", len(self.visibility.observed))

    def stop(self) -> None:
        self.visibility.disconnect()
        self.document.mutations.unsubscribe(self.on_subtree_changed)
        if self._debounce is not None:
            self._debounce.cancel()
            self._debounce = None
        self._pending.clear()
        self.started = False

    # --- Visibility ---

    def on_became_visible(self, elements: list[Tag]) -> None:
        # Deepest first, so outer containers find inner ones already marked
        for element in sorted(elements, key=_depth, reverse=True):
            self.visibility.unobserve(element)
            self.process_container(element)

    def process_container(self, container: Tag) -> None:
        if container.has_attr(self._marker):
            return
        if not self.document.is_attached(container):
            logger.debug("Skipping detached container <%s>", container.name)
            return

        container[self._marker] = "true"
        text_nodes = self.collect_text_nodes(container)
        self._in_flight += 1
        self._process_chunk(container, text_nodes, 0)

    def collect_text_nodes(self, root: Tag) -> list[NavigableString]:
        """Eligible text nodes under ``root`` in document order."""
        if self._inside_skip_tag(root):
            return []
        nodes: list[NavigableString] = []
        for node in root.descendants:
            if is_text_node(node) and self._accepts(node, root):
                nodes.append(node)
        return nodes

    def _accepts(self, node: NavigableString, root: Tag) -> bool:
        parent = node.parent
        if parent is None:
            return False
        if _is_content_editable(parent):
            return False
        current: Tag | None = parent
        while current is not None and current is not root:
            if current.name in self._skip_tags:
                return False
            # Already scanned by an inner container
            if current.has_attr(self._marker):
                return False
            current = current.parent
        return True

    def _inside_skip_tag(self, root: Tag) -> bool:
        current: Tag | None = root
        while current is not None:
            if current.name in self._skip_tags:
                return True
            current = current.parent
        return False

    def _process_chunk(self, container: Tag, text_nodes: list[NavigableString], index: int) -> None:
        end = min(index + self.config.chunk_size, len(text_nodes))
        for node in text_nodes[index:end]:
            if node.parent is None:
                # Removed by a mutation since it was collected
                continue
            fragments = self.rewriter.rewrite(node)
            if fragments:
                self.document.replace_node(node, fragments)

        if end < len(text_nodes):
            self.document.scheduler.defer(
                lambda: self._process_chunk(container, text_nodes, end)
            )
            return

        self.attach_drive_codes(container)
        self._in_flight -= 1
        self.stats.containers_processed += 1
        self._sync_rewriter_stats()
        logger.debug("Processed <%s> (%d text node(s))", container.name, len(text_nodes))

    def _sync_rewriter_stats(self) -> None:
        self.stats.links_created = self.rewriter.links_created
        self.stats.codes_attached = self.rewriter.codes_attached
        self.stats.rewrite_errors = self.rewriter.errors

    # --- Existing anchors ---

    def attach_drive_codes(self, root: Tag) -> int:
        """Attach nearby access codes to authored drive links under ``root``."""
        if not self.site.drive_enabled:
            return 0

        updated = 0
        for link in root.find_all("a", href=True):
            if link.has_attr(self._marker):
                continue
            href = link["href"]
            if not DriveRegistry.is_drive_url(href):
                continue

            link[self._marker] = "true"
            if has_code_fragment(href):
                continue

            text = extract_text(link)
            code = extract_code(link, 0, len(text), self.code_search)
            if code:
                logger.info("Found access code %s for existing link %s", code, href)
                link["href"] = with_code_fragment(href, code)
                updated += 1

        self.stats.anchors_updated += updated
        return updated

    # --- Mutations ---

    def on_subtree_changed(self, records: list[MutationRecord]) -> None:
        affected: dict[int, Tag] = {}

        for record in records:
            if self._is_self_triggered(record):
                continue

            if record.kind == MutationKind.CHILD_LIST:
                for node in record.added_nodes:
                    if isinstance(node, Tag):
                        affected[id(node)] = node
                        for child in node.select(self.config.relevant_selector):
                            affected[id(child)] = child
                    elif is_text_node(node) and isinstance(node.parent, Tag):
                        affected[id(node.parent)] = node.parent
            elif record.kind == MutationKind.CHARACTER_DATA:
                parent = record.target.parent
                if is_text_node(record.target) and isinstance(parent, Tag):
                    affected[id(parent)] = parent

        if not affected:
            return

        for element in affected.values():
            self._invalidate_ancestors(element)

        self._pending.update(affected)
        if self._debounce is not None:
            self._debounce.cancel()
        self._debounce = self.document.scheduler.call_later(
            self.config.debounce_seconds, self._flush_pending
        )

    def _is_self_triggered(self, record: MutationRecord) -> bool:
        return any(
            isinstance(node, Tag) and node.name == "a" and node.has_attr(self._marker)
            for node in record.added_nodes
        )

    def _invalidate_ancestors(self, element: Tag) -> None:
        current = element.parent
        depth = self.config.invalidate_depth
        while isinstance(current, Tag) and depth > 0:
            if current.has_attr(self._marker):
                del current[self._marker]
                self.stats.invalidations += 1
            current = current.parent
            depth -= 1

    def _flush_pending(self) -> None:
        self._debounce = None
        pending, self._pending = self._pending, {}
        for element in pending.values():
            if not self.document.is_attached(element):
                continue
            if element.has_attr(self._marker):
                del element[self._marker]
                self.stats.invalidations += 1
            self.visibility.observe(element)
        logger.debug("Re-observing %d element(s) after mutation", len(pending))


def _depth(node: PageElement) -> int:
    depth = 0
    current = node.parent
    while current is not None:
        depth += 1
        current = current.parent
    return depth


def _is_content_editable(element: Tag) -> bool:
    current: PageElement | None = element
    while isinstance(current, Tag):
        value = current.get("contenteditable")
        if value is not None:
            if isinstance(value, list):
                value = " ".join(value)
            return value.strip().lower() != "false"
        current = current.parent
    return False
