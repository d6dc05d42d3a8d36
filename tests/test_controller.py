from __future__ import annotations

from text_linkify.config import LinkifyConfig
from text_linkify.dom import DocumentHost, ManualScheduler
from text_linkify.settings import SiteSettings

MARKER = "data-linkified"


def _links(document: DocumentHost) -> list:
    return document.soup.find_all("a")


def test_plain_urls_become_links(make_controller, scheduler: ManualScheduler) -> None:
    document, controller = make_controller("<p>Visit https://example.com now.</p>")

    controller.start()
    scheduler.run_until_idle()

    [link] = _links(document)
    assert link["href"] == "https://example.com"
    assert link.has_attr(MARKER)
    assert document.soup.p[MARKER] == "true"
    assert document.soup.p.get_text() == "Visit https://example.com now."
    assert controller.stats.links_created == 1
    assert not controller.busy


def test_running_twice_changes_nothing(make_controller, scheduler: ManualScheduler) -> None:
    html = "<div><p>a.com and b.net</p><p>https://c.org/x).</p></div>"
    document, controller = make_controller(html)
    controller.start()
    scheduler.run_until_idle()
    once = document.serialize()

    for element in document.select("p, div"):
        controller.process_container(element)
    scheduler.run_until_idle()
    assert document.serialize() == once

    again, second = make_controller(once)
    second.start()
    scheduler.run_until_idle()
    assert again.serialize() == once
    assert second.stats.links_created == 0


def test_nested_containers_are_wrapped_once(make_controller, scheduler: ManualScheduler) -> None:
    document, controller = make_controller("<div><p>a.com</p><p>b.com</p>tail c.com</div>")

    controller.start()
    scheduler.run_until_idle()

    assert [a.get_text() for a in _links(document)] == ["a.com", "b.com", "c.com"]
    assert controller.stats.containers_processed == 3


def test_large_containers_are_chunked(make_controller, scheduler: ManualScheduler) -> None:
    html = "<p>" + "".join(f"<br>u{i}.com" for i in range(5)) + "</p>"
    document, controller = make_controller(html, config=LinkifyConfig(chunk_size=2))

    controller.start()
    scheduler.run_pending()

    assert len(_links(document)) == 2
    assert controller.busy

    scheduler.run_until_idle()

    assert len(_links(document)) == 5
    assert not controller.busy


def test_skipped_and_editable_regions(make_controller, scheduler: ManualScheduler) -> None:
    html = (
        "<div><pre>https://a.com</pre><code>b.com</code><textarea>c.com</textarea>"
        "<pre><span>x.com</span></pre><p>d.com</p></div>"
        "<div contenteditable='true'><p>e.com</p></div>"
    )
    document, controller = make_controller(html)

    controller.start()
    scheduler.run_until_idle()

    assert [a.get_text() for a in _links(document)] == ["d.com"]


def test_linkify_disabled_for_site(make_controller, scheduler: ManualScheduler) -> None:
    document, controller = make_controller(
        "<p>example.com</p>", site=SiteSettings(linkify_enabled=False)
    )

    controller.start()
    scheduler.run_until_idle()

    assert _links(document) == []
    assert not controller.started


def test_code_attached_to_generated_drive_link(make_controller, scheduler: ManualScheduler) -> None:
    document, controller = make_controller(
        "<div><p>https://pan.baidu.com/s/1abc</p><p>提取码：Qw12</p></div>"
    )

    controller.start()
    scheduler.run_until_idle()

    [link] = _links(document)
    assert link["href"] == "https://pan.baidu.com/s/1abc#pwd=Qw12"
    assert controller.stats.codes_attached == 1


def test_existing_drive_anchor_gets_code(make_controller, scheduler: ManualScheduler) -> None:
    document, controller = make_controller(
        '<p>资源 <a href="https://pan.baidu.com/s/1abc">link</a> 提取码: Qw12</p>'
    )

    controller.start()
    scheduler.run_until_idle()

    [link] = _links(document)
    assert link["href"] == "https://pan.baidu.com/s/1abc#pwd=Qw12"
    assert link.has_attr(MARKER)
    assert controller.stats.anchors_updated == 1


def test_existing_anchor_with_code_is_left_alone(make_controller, scheduler: ManualScheduler) -> None:
    href = "https://pan.baidu.com/s/1abc#pwd=zzzz"
    document, controller = make_controller(f'<p><a href="{href}">提取码: Qw12</a></p>')

    controller.start()
    scheduler.run_until_idle()

    assert _links(document)[0]["href"] == href
    assert controller.stats.anchors_updated == 0


def test_drive_disabled_skips_codes(make_controller, scheduler: ManualScheduler) -> None:
    document, controller = make_controller(
        '<p>https://pan.baidu.com/s/1abc pwd: Qw12 <a href="https://pan.quark.cn/s/9">q</a> code: Zz99</p>',
        site=SiteSettings(drive_enabled=False),
    )

    controller.start()
    scheduler.run_until_idle()

    hrefs = [a["href"] for a in _links(document)]
    assert hrefs == ["https://pan.baidu.com/s/1abc", "https://pan.quark.cn/s/9"]


def test_own_edits_do_not_trigger_rescans(make_controller, scheduler: ManualScheduler) -> None:
    document, controller = make_controller("<div><p>a.com</p><p>b.com</p></div>")

    controller.start()
    scheduler.run_until_idle()

    assert controller.stats.invalidations == 0
    assert all(el.has_attr(MARKER) for el in document.select("div, p"))


def test_inserted_text_invalidates_container_and_ancestors(
    make_controller, scheduler: ManualScheduler
) -> None:
    html = '<div id="outer"><p id="a">first a.com</p><p id="b">second b.com</p></div>'
    document, controller = make_controller(html)
    controller.start()
    scheduler.run_until_idle()
    processed = controller.stats.containers_processed
    outer = document.soup.find(id="outer")
    first = document.soup.find(id="a")
    second = document.soup.find(id="b")

    document.append_text(first, " more c.com")
    scheduler.run_pending()

    assert not outer.has_attr(MARKER)
    assert second.has_attr(MARKER)

    scheduler.advance(LinkifyConfig().debounce_seconds)

    assert [a.get_text() for a in first.find_all("a")] == ["a.com", "c.com"]
    assert len(second.find_all("a")) == 1
    assert first.has_attr(MARKER)
    assert controller.stats.containers_processed == processed + 1


def test_inserted_elements_are_scanned(make_controller, scheduler: ManualScheduler) -> None:
    document, controller = make_controller("<div><p>a.com</p></div>")
    controller.start()
    scheduler.run_until_idle()

    document.append_html(document.soup.div, "<section><p>new d.com</p></section>")
    scheduler.run_until_idle()

    assert [a.get_text() for a in _links(document)] == ["a.com", "d.com"]


def test_mutation_bursts_are_coalesced(make_controller, scheduler: ManualScheduler) -> None:
    html = '<div><p id="a">a.com</p><p id="b">b.com</p></div>'
    document, controller = make_controller(html)
    controller.start()
    scheduler.run_until_idle()
    processed = controller.stats.containers_processed

    document.append_text(document.soup.find(id="a"), " x.com")
    scheduler.run_pending()
    scheduler.advance(0.1)
    document.append_text(document.soup.find(id="b"), " y.com")
    scheduler.run_pending()
    scheduler.advance(0.1)

    assert controller.stats.containers_processed == processed
    assert controller.busy

    scheduler.advance(0.2)

    assert controller.stats.containers_processed == processed + 2
    assert [a.get_text() for a in _links(document)] == ["a.com", "x.com", "b.com", "y.com"]


def test_removed_text_is_skipped(make_controller, scheduler: ManualScheduler) -> None:
    document, controller = make_controller(
        "<p>a.com<br>b.com</p>", config=LinkifyConfig(chunk_size=1)
    )
    pending = document.soup.p.contents[2]

    controller.start()
    scheduler.run_pending()
    document.remove(pending)
    scheduler.run_until_idle()

    assert [a.get_text() for a in _links(document)] == ["a.com"]
    assert controller.stats.rewrite_errors == 0


def test_detached_container_is_ignored(make_controller, scheduler: ManualScheduler) -> None:
    document, controller = make_controller("<p>a.com</p>")
    orphan = document.soup.new_tag("p")
    orphan.string = "b.com"

    controller.process_container(orphan)
    scheduler.run_until_idle()

    assert not orphan.has_attr(MARKER)
    assert orphan.find("a") is None


def test_only_visible_containers_are_processed(make_controller, scheduler: ManualScheduler) -> None:
    visible = {"top"}
    document, controller = make_controller(
        '<p id="top">a.com</p><p id="below">b.com</p>',
        is_visible=lambda el, margin, threshold: el.get("id") in visible,
    )

    controller.start()
    scheduler.run_until_idle()

    assert [a.get_text() for a in _links(document)] == ["a.com"]

    visible.add("below")
    document.viewport_changed()
    scheduler.run_until_idle()

    assert [a.get_text() for a in _links(document)] == ["a.com", "b.com"]


def test_stop_cancels_pending_rescan(make_controller, scheduler: ManualScheduler) -> None:
    document, controller = make_controller('<p id="a">a.com</p>')
    controller.start()
    scheduler.run_until_idle()

    document.append_text(document.soup.p, " z.com")
    scheduler.run_pending()
    controller.stop()
    scheduler.run_until_idle()

    assert [a.get_text() for a in _links(document)] == ["a.com"]
    assert not controller.busy
