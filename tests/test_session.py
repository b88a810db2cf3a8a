# File: tests/test_session.py
import threading
import time

import pytest

from sitecrawl.crawler.session import CrawlSession, WorkCounter


def test_counter_rejects_underflow():
    counter = WorkCounter()
    with pytest.raises(RuntimeError):
        counter.decrement()
    assert counter.value == 0


def test_wait_for_zero_times_out_while_work_is_pending():
    counter = WorkCounter()
    counter.increment()
    start = time.monotonic()
    assert counter.wait_for_zero(timeout=0.1) is False
    assert time.monotonic() - start >= 0.09


def test_wait_for_zero_wakes_when_last_unit_finishes():
    counter = WorkCounter()
    counter.increment()
    counter.increment()

    def finish():
        time.sleep(0.05)
        counter.decrement()
        time.sleep(0.05)
        counter.decrement()

    threading.Thread(target=finish).start()
    assert counter.wait_for_zero(timeout=2) is True
    assert counter.value == 0


def test_track_releases_on_error():
    counter = WorkCounter()
    with pytest.raises(ValueError):
        with counter.track():
            assert counter.value == 1
            raise ValueError("boom")
    assert counter.value == 0


def test_session_canonicalises_seed_and_scope():
    session = CrawlSession("HTTPS://Site.Test")
    assert session.seed == "https://site.test/"
    assert session.scope == "https://site.test"


def test_session_rejects_relative_seed():
    with pytest.raises(ValueError):
        CrawlSession("/just/a/path")


def test_schedule_counts_before_pushing():
    session = CrawlSession("https://site.test/")
    session.schedule(session.seed)
    assert session.pending.value == 1
    assert session.frontier.pop() == "https://site.test/"
    session.item_done()
    assert session.pending.value == 0


@pytest.mark.parametrize(
    "href,expected",
    [
        ("/page1", "https://site.test/page1"),
        ("sub/page", "https://site.test/docs/sub/page"),
        ("https://SITE.test/docs/../x", "https://site.test/x"),
        ("//site.test/y", "https://site.test/y"),
        ("https://external.test/x", None),
        ("http://site.test/insecure", None),
        ("https://site.test:8443/port", None),
        ("#frag", None),
        ("mailto:a@site.test", None),
    ],
)
def test_admit_applies_resolution_and_scope(href, expected):
    session = CrawlSession("https://site.test/")
    assert session.admit("https://site.test/docs/index.html", href) == expected
