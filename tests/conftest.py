from __future__ import annotations

import pytest

from text_linkify.config import CodeSearchConfig, LinkifyConfig
from text_linkify.controller import LinkifyController
from text_linkify.dom import DocumentHost, ManualScheduler
from text_linkify.settings import SiteSettings


@pytest.fixture
def scheduler() -> ManualScheduler:
    return ManualScheduler()


@pytest.fixture
def make_controller(scheduler: ManualScheduler):
    """Build a document and controller over ``html``; nothing runs until the scheduler does."""

    def _make(
        html: str,
        *,
        site: SiteSettings | None = None,
        config: LinkifyConfig | None = None,
        code_search: CodeSearchConfig | None = None,
        url: str = "https://forum.example.com/thread/1",
        is_visible=None,
    ) -> tuple[DocumentHost, LinkifyController]:
        kwargs = {"url": url}
        if is_visible is not None:
            kwargs["is_visible"] = is_visible
        document = DocumentHost.from_html(html, scheduler, **kwargs)
        controller = LinkifyController(
            document,
            site or SiteSettings(host=document.host),
            config,
            code_search,
        )
        return document, controller

    return _make
