"""Rewrite a text node into text and link fragments."""

import logging

from bs4 import BeautifulSoup, NavigableString, PageElement, Tag

from text_linkify.config import CodeSearchConfig, LinkifyConfig
from text_linkify.drives import DriveRegistry
from text_linkify.extractor.code import extract_code
from text_linkify.matcher import find_urls
from text_linkify.utils.url_utils import with_code_fragment

logger = logging.getLogger(__name__)


class NodeRewriter:
    """Turn URLs inside a text node into ``<a>`` elements.

    Generated links carry the processed marker so later traversals never
    scan them again.
    """

    def __init__(
        self,
        soup: BeautifulSoup,
        config: LinkifyConfig | None = None,
        code_search: CodeSearchConfig | None = None,
        drive_enabled: bool = True,
    ):
        self.soup = soup
        self.config = config or LinkifyConfig()
        self.code_search = code_search or CodeSearchConfig()
        self.drive_enabled = drive_enabled
        self.links_created = 0
        self.codes_attached = 0
        self.errors = 0

    def rewrite(self, node: NavigableString) -> list[PageElement] | None:
        """Return the replacement fragments for ``node``, or None to leave it alone.

        The tree is not touched here; the caller swaps the node out. Errors are
        logged and reported as "no change" so one bad node never aborts a batch.
        """
        try:
            return self._rewrite(node)
        except Exception:
            self.errors += 1
            logger.exception("Failed to linkify text node %r", str(node)[:80])
            return None

    def _rewrite(self, node: NavigableString) -> list[PageElement] | None:
        text = str(node)
        if not text:
            return None

        fragments: list[PageElement] = []
        last_index = 0
        links = 0
        codes = 0

        for span in find_urls(text):
            # Guard against a pattern that steps backwards
            if span.start < last_index:
                break

            if span.start > last_index:
                fragments.append(NavigableString(text[last_index : span.start]))

            url = span.url
            href = span.href
            if self.drive_enabled and DriveRegistry.is_drive_url(url):
                code = extract_code(node, span.start, span.end, self.code_search)
                if code:
                    logger.info("Found access code %s for %s", code, url)
                    href = with_code_fragment(href, code)
                    codes += 1

            fragments.append(self.build_link(url, href))

            if span.trailing:
                fragments.append(NavigableString(span.trailing))

            last_index = span.end
            links += 1

        if not links:
            return None

        if last_index < len(text):
            fragments.append(NavigableString(text[last_index:]))

        self.links_created += links
        self.codes_attached += codes
        return fragments

    def build_link(self, text: str, href: str) -> Tag:
        attrs = {
            "href": href,
            "target": "_blank",
            "rel": "noopener noreferrer",
            "style": self.config.link_style,
            self.config.processed_attribute: "true",
        }
        return self.soup.new_tag("a", attrs=attrs, string=text)
