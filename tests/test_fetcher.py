# File: tests/test_fetcher.py
from __future__ import annotations

import asyncio
from collections.abc import AsyncIterator

import pytest
import pytest_asyncio
from aiohttp import web

from sitecrawl.config import CrawlerConfig
from sitecrawl.crawler.fetcher import FetchError, Fetcher

SLOW_SLEEP: float = 1.5


def make_config(base: str, **overrides) -> CrawlerConfig:
    values = dict(start_url=base, connect_timeout=1.0, total_timeout=5.0, user_agent="TestAgent/1.0")
    values.update(overrides)
    return CrawlerConfig(**values)


def fetch_once(config: CrawlerConfig, url: str):
    """Open a fetcher, fetch one URL, close it again (runs in a worker thread)."""
    with Fetcher(config) as fetcher:
        return fetcher.fetch(url)


@pytest_asyncio.fixture
async def test_server(unused_tcp_port: int, serve_app) -> AsyncIterator[str]:
    app = web.Application()

    async def handle_root(request):
        agent = request.headers.get("User-Agent", "")
        return web.Response(text=f'<a href="/page1">{agent}</a>', content_type="text/html")

    async def handle_plain(_):
        return web.Response(text="User-agent: *\nDisallow:", content_type="text/plain")

    async def handle_image(_):
        return web.Response(body=b"\x89PNG\r\n", content_type="image/png")

    async def handle_redirect(_):
        raise web.HTTPFound("/")

    async def handle_slow(_):
        await asyncio.sleep(SLOW_SLEEP)
        return web.Response(text="<h1>late</h1>", content_type="text/html")

    app.router.add_get("/", handle_root)
    app.router.add_get("/robots.txt", handle_plain)
    app.router.add_get("/logo.png", handle_image)
    app.router.add_get("/old", handle_redirect)
    app.router.add_get("/slow", handle_slow)

    async for url in serve_app(app, unused_tcp_port):
        yield url


@pytest.mark.asyncio()
async def test_fetch_html_page(test_server: str):
    result = await asyncio.to_thread(fetch_once, make_config(test_server), f"{test_server}/")

    assert result.status == 200
    assert result.ok and result.is_html
    assert '<a href="/page1">' in result.body
    assert "TestAgent/1.0" in result.body


@pytest.mark.asyncio()
async def test_fetch_follows_redirects(test_server: str):
    result = await asyncio.to_thread(fetch_once, make_config(test_server), f"{test_server}/old")

    assert result.status == 200
    assert result.url == f"{test_server}/"
    assert result.is_html


@pytest.mark.asyncio()
async def test_fetch_reports_non_success_status(test_server: str):
    result = await asyncio.to_thread(fetch_once, make_config(test_server), f"{test_server}/missing")

    assert result.status == 404
    assert not result.ok
    assert result.body == ""


@pytest.mark.asyncio()
async def test_text_bodies_are_read_binaries_are_not(test_server: str):
    config = make_config(test_server)
    plain = await asyncio.to_thread(fetch_once, config, f"{test_server}/robots.txt")
    image = await asyncio.to_thread(fetch_once, config, f"{test_server}/logo.png")

    assert plain.body.startswith("User-agent")
    assert not plain.is_html
    assert image.ok
    assert image.content_type == "image/png"
    assert image.body == ""


@pytest.mark.asyncio()
async def test_total_timeout_raises_fetch_error(test_server: str):
    config = make_config(test_server, connect_timeout=0.5, total_timeout=0.5)
    with pytest.raises(FetchError) as excinfo:
        await asyncio.to_thread(fetch_once, config, f"{test_server}/slow")
    assert excinfo.value.url == f"{test_server}/slow"


@pytest.mark.asyncio()
async def test_refused_connection_raises_fetch_error(unused_tcp_port_factory):
    base = f"http://localhost:{unused_tcp_port_factory()}"
    with pytest.raises(FetchError):
        await asyncio.to_thread(fetch_once, make_config(base), f"{base}/")


def test_fetch_requires_an_open_fetcher():
    fetcher = Fetcher(make_config("http://localhost:1"))
    with pytest.raises(RuntimeError):
        fetcher.fetch("http://localhost:1/")


def test_close_is_idempotent():
    fetcher = Fetcher(make_config("http://localhost:1"))
    with fetcher:
        pass
    fetcher.close()
    with pytest.raises(RuntimeError):
        fetcher.fetch("http://localhost:1/")
