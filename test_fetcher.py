#!/usr/bin/env python3
"""
Fetcher tests without network access: bot-wall detection, HTTP error
mapping, and browser cleanup.
"""

import sys
from pathlib import Path

import pytest
import requests

# Add the src directory to the path
src_path = Path(__file__).parent / "src"
sys.path.insert(0, str(src_path))

from javawatch.cli import main
from javawatch.core import fetcher as fetcher_module
from javawatch.core.errors import FetchError
from javawatch.core.fetcher import BrowserFetcher, HttpFetcher, create_fetcher, looks_blocked
from javawatch.utils.journal import RunJournal


URL = "https://www.java.com/en/download/manual.jsp"


class FakeResponse:
    def __init__(self, text="", status_code=200, content_type="text/html; charset=utf-8"):
        self.text = text
        self.status_code = status_code
        self.headers = {"content-type": content_type}

    def raise_for_status(self):
        if self.status_code >= 400:
            raise requests.exceptions.HTTPError(f"{self.status_code} Error", response=self)


def test_looks_blocked():
    assert looks_blocked("<title>Just a moment...</title>")
    assert looks_blocked("<h1>Access Denied</h1> You don't have permission")
    assert looks_blocked('<div class="g-recaptcha">captcha</div>')
    assert not looks_blocked("<p>Version 8 Update 471</p>")
    assert not looks_blocked("")


def test_blocked_marker_beyond_scan_window_is_ignored():
    html = "<p>Version 8 Update 471</p>" + " " * 25000 + "captcha"
    assert not looks_blocked(html)


def test_http_fetch_success(monkeypatch, page_html):
    calls = []

    def fake_get(self, url, timeout=None):
        calls.append((url, timeout))
        return FakeResponse(page_html)

    monkeypatch.setattr(requests.Session, "get", fake_get)

    with HttpFetcher(timeout=12) as fetcher:
        assert fetcher.fetch(URL) == page_html
    assert calls == [(URL, 12)]


def test_http_status_error(monkeypatch):
    monkeypatch.setattr(requests.Session, "get", lambda self, url, timeout=None: FakeResponse("", 403))
    with pytest.raises(FetchError, match="HTTP 403"):
        HttpFetcher().fetch(URL)


def test_http_timeout(monkeypatch):
    def fake_get(self, url, timeout=None):
        raise requests.exceptions.Timeout("read timed out")

    monkeypatch.setattr(requests.Session, "get", fake_get)
    with pytest.raises(FetchError, match="Timed out"):
        HttpFetcher(timeout=5).fetch(URL)


def test_http_connection_error(monkeypatch):
    def fake_get(self, url, timeout=None):
        raise requests.exceptions.ConnectionError("name resolution failed")

    monkeypatch.setattr(requests.Session, "get", fake_get)
    with pytest.raises(FetchError) as exc_info:
        HttpFetcher().fetch(URL)
    assert exc_info.value.url == URL


def test_http_blocked_page(monkeypatch):
    monkeypatch.setattr(requests.Session, "get",
                        lambda self, url, timeout=None: FakeResponse("<title>Attention Required! | Cloudflare</title>"))
    with pytest.raises(FetchError, match="blocked"):
        HttpFetcher().fetch(URL)


def test_http_empty_page(monkeypatch):
    monkeypatch.setattr(requests.Session, "get", lambda self, url, timeout=None: FakeResponse("   "))
    with pytest.raises(FetchError, match="Empty page"):
        HttpFetcher().fetch(URL)


class FakePage:
    def __init__(self, html, status=200, error=None):
        self.html = html
        self.status = status
        self.error = error
        self.goto_calls = []

    def goto(self, url, timeout=None, wait_until=None):
        self.goto_calls.append((url, timeout, wait_until))
        if self.error is not None:
            raise self.error
        return type("Response", (), {"status": self.status})()

    def content(self):
        return self.html


class FakeContext:
    def __init__(self, page):
        self.page = page
        self.closed = False

    def new_page(self):
        return self.page

    def close(self):
        self.closed = True


class FakeBrowser:
    def __init__(self, page):
        self.page = page
        self.contexts = []
        self.closed = False

    def new_context(self, user_agent=None):
        context = FakeContext(self.page)
        self.contexts.append(context)
        return context

    def close(self):
        self.closed = True


class FakePlaywright:
    def __init__(self, browser):
        self.browser = browser
        self.stopped = False
        self.chromium = self

    def launch(self, headless=True):
        return self.browser

    def start(self):
        return self

    def stop(self):
        self.stopped = True


def install_fake_playwright(monkeypatch, page):
    browser = FakeBrowser(page)
    playwright = FakePlaywright(browser)
    monkeypatch.setattr(fetcher_module, "sync_playwright", lambda: playwright)
    return playwright, browser


def test_browser_fetch_releases_everything(monkeypatch, page_html):
    page = FakePage(page_html)
    playwright, browser = install_fake_playwright(monkeypatch, page)

    with BrowserFetcher(timeout=30) as fetcher:
        assert fetcher.fetch(URL) == page_html

    assert page.goto_calls == [(URL, 30000, "domcontentloaded")]
    assert browser.contexts[0].closed
    assert browser.closed
    assert playwright.stopped


def test_browser_timeout_still_releases_browser(monkeypatch):
    page = FakePage("", error=fetcher_module.PlaywrightTimeoutError("Timeout 30000ms exceeded"))
    playwright, browser = install_fake_playwright(monkeypatch, page)

    with pytest.raises(FetchError, match="Timed out"):
        with BrowserFetcher(timeout=30) as fetcher:
            fetcher.fetch(URL)

    assert browser.contexts[0].closed
    assert browser.closed
    assert playwright.stopped


def test_browser_http_error_status(monkeypatch):
    page = FakePage("<html>gone</html>", status=503)
    playwright, browser = install_fake_playwright(monkeypatch, page)

    with pytest.raises(FetchError, match="HTTP 503"):
        with BrowserFetcher() as fetcher:
            fetcher.fetch(URL)
    assert playwright.stopped


class ClosedBrowser(FakeBrowser):
    def new_context(self, user_agent=None):
        raise fetcher_module.PlaywrightError("Target page, context or browser has been closed")


def install_closed_browser(monkeypatch):
    browser = ClosedBrowser(FakePage(""))
    playwright = FakePlaywright(browser)
    monkeypatch.setattr(fetcher_module, "sync_playwright", lambda: playwright)
    return playwright, browser


def test_browser_context_failure_is_fetch_error(monkeypatch):
    playwright, browser = install_closed_browser(monkeypatch)

    with pytest.raises(FetchError, match="has been closed"):
        with BrowserFetcher() as fetcher:
            fetcher.fetch(URL)

    assert browser.closed
    assert playwright.stopped


def test_cli_reports_browser_failure(monkeypatch, tmp_path):
    install_closed_browser(monkeypatch)

    rc = main(["--output-dir", str(tmp_path / "out"), "--log-dir", str(tmp_path / "logs"), "--journal"],
              fetcher_factory=lambda: BrowserFetcher())

    assert rc == 1
    assert RunJournal(str(tmp_path / "out")).last_record()["status"] == "failed"


def test_create_fetcher():
    assert isinstance(create_fetcher("http", timeout=5), HttpFetcher)
    assert isinstance(create_fetcher("browser"), BrowserFetcher)
    with pytest.raises(ValueError):
        create_fetcher("curl")


if __name__ == "__main__":
    sys.exit(pytest.main([__file__, "-q"]))
