from __future__ import annotations

import asyncio

import pytest

from text_linkify.dom import (
    AsyncioScheduler,
    DocumentHost,
    ManualScheduler,
    MutationKind,
    MutationRecord,
)


def test_manual_scheduler_runs_turns_in_order(scheduler: ManualScheduler) -> None:
    calls: list[str] = []
    scheduler.defer(lambda: calls.append("a"))
    scheduler.defer(lambda: scheduler.defer(lambda: calls.append("c")))
    scheduler.defer(lambda: calls.append("b"))

    assert scheduler.run_pending() == 3
    assert calls == ["a", "b"]
    assert scheduler.pending_turns == 1

    scheduler.run_pending()
    assert calls == ["a", "b", "c"]


def test_manual_timers_fire_on_advance(scheduler: ManualScheduler) -> None:
    calls: list[float] = []
    scheduler.call_later(0.5, lambda: calls.append(scheduler.now))
    cancelled = scheduler.call_later(0.2, lambda: calls.append(-1))
    cancelled.cancel()

    scheduler.advance(0.4)
    assert calls == []
    assert scheduler.pending_timers == 1

    scheduler.advance(0.1)
    assert calls == [0.5]
    assert scheduler.now == pytest.approx(0.5)


def test_run_until_idle_follows_timers(scheduler: ManualScheduler) -> None:
    calls: list[str] = []
    scheduler.call_later(1.0, lambda: scheduler.defer(lambda: calls.append("done")))

    scheduler.run_until_idle()

    assert calls == ["done"]
    assert scheduler.now == pytest.approx(1.0)


def test_mutations_are_batched(scheduler: ManualScheduler) -> None:
    document = DocumentHost.from_html("<div><p>a</p></div>", scheduler)
    batches: list[list[MutationRecord]] = []
    document.mutations.subscribe(batches.append)

    document.append_text(document.soup.p, "b")
    document.append_html(document.soup.div, "<p>c</p>")
    assert batches == []

    scheduler.run_pending()

    [batch] = batches
    assert [r.kind for r in batch] == [MutationKind.CHILD_LIST, MutationKind.CHILD_LIST]
    assert batch[1].target is document.soup.div
    assert batch[1].added_nodes[0].name == "p"


def test_mutations_without_listeners_are_dropped(scheduler: ManualScheduler) -> None:
    document = DocumentHost.from_html("<p>a</p>", scheduler)

    document.append_text(document.soup.p, "b")

    assert scheduler.pending_turns == 0


def test_set_text_reports_character_data(scheduler: ManualScheduler) -> None:
    document = DocumentHost.from_html("<p>old</p>", scheduler)
    batches: list[list[MutationRecord]] = []
    document.mutations.subscribe(batches.append)

    node = document.set_text(document.soup.p.string, "new example.com")
    scheduler.run_pending()

    [[record]] = batches
    assert record.kind == MutationKind.CHARACTER_DATA
    assert record.target is node
    assert document.soup.p.get_text() == "new example.com"


def test_replace_detached_node_is_refused(scheduler: ManualScheduler) -> None:
    document = DocumentHost.from_html("<p>a</p>", scheduler)
    node = document.soup.p.string
    node.extract()

    assert document.replace_node(node, []) is False
    assert not document.is_attached(node)


def test_insert_html_at_index(scheduler: ManualScheduler) -> None:
    document = DocumentHost.from_html("<ul><li>b</li></ul>", scheduler)

    document.insert_html(document.soup.ul, 0, "<li>a</li>")

    assert [li.get_text() for li in document.soup.find_all("li")] == ["a", "b"]


def test_visibility_observer_delivers_visible_elements(scheduler: ManualScheduler) -> None:
    shown = {"one"}
    document = DocumentHost.from_html(
        '<p id="one">1</p><p id="two">2</p>',
        scheduler,
        is_visible=lambda el, margin, threshold: el["id"] in shown,
    )
    seen: list[list[str]] = []
    observer = document.create_visibility_observer(lambda els: seen.append([e["id"] for e in els]))
    for p in document.select("p"):
        observer.observe(p)

    scheduler.run_pending()
    assert seen == [["one"]]

    observer.unobserve(document.soup.find(id="one"))
    shown.add("two")
    document.viewport_changed()
    scheduler.run_pending()
    assert seen[-1] == ["two"]


def test_document_properties(scheduler: ManualScheduler) -> None:
    document = DocumentHost.from_html(
        "<p>x</p>", scheduler, url="https://Pan.Baidu.com/s/1#pwd=ab12"
    )

    assert document.host == "pan.baidu.com"
    assert document.code_fragment == "ab12"
    assert document.body.name == "body"


def test_asyncio_scheduler_waits_for_idle() -> None:
    async def _run() -> list[str]:
        scheduler = AsyncioScheduler()
        calls: list[str] = []
        scheduler.defer(lambda: scheduler.call_later(0.01, lambda: calls.append("timer")))
        scheduler.defer(lambda: calls.append("turn"))
        cancelled = scheduler.call_later(5.0, lambda: calls.append("never"))
        cancelled.cancel()
        await scheduler.wait_idle()
        assert scheduler.idle
        return calls

    assert asyncio.run(_run()) == ["turn", "timer"]
