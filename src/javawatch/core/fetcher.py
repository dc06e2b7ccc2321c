"""
Page Fetching Module

This module loads the download page and returns its HTML. Two fetchers are
available:
- BrowserFetcher renders the page in headless Chromium (Playwright)
- HttpFetcher performs a single plain HTTP GET (requests)

Each fetch is a single attempt. Failures, timeouts and pages that look like
a bot wall raise FetchError. Both fetchers are context managers so the
browser or HTTP session is released on every exit path.
"""

import logging
import re
from typing import Optional

import requests
from playwright.sync_api import Error as PlaywrightError
from playwright.sync_api import TimeoutError as PlaywrightTimeoutError
from playwright.sync_api import sync_playwright

from .. import config
from .errors import FetchError


# Markers of challenge / denial pages served instead of the real content
BLOCK_PATTERNS = (
    r"captcha",
    r"access\s+denied",
    r"just\s+a\s+moment",
    r"cf-chl-",
    r"attention\s+required!\s*\|\s*cloudflare",
    r"request\s+unsuccessful\.\s+incapsula",
    r"are\s+you\s+a\s+robot",
)

# Only the head of the page is inspected
BLOCK_SCAN_CHARS = 20000


def looks_blocked(html_content: str) -> bool:
    """Return True if the page looks like a bot wall rather than content."""
    text = (html_content or "")[:BLOCK_SCAN_CHARS].lower()
    return any(re.search(pattern, text) for pattern in BLOCK_PATTERNS)


class BaseFetcher:
    """Common checks shared by the fetchers."""

    def __init__(self, timeout: float = config.PAGE_TIMEOUT, user_agent: str = config.USER_AGENT):
        self.timeout = timeout
        self.user_agent = user_agent
        self.logger = logging.getLogger(__name__)

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()
        return False

    def fetch(self, url: str) -> str:
        raise NotImplementedError("Subclasses must implement fetch()")

    def close(self):
        pass

    def _check_content(self, html_content: str, url: str) -> str:
        if not html_content or not html_content.strip():
            raise FetchError(f"Empty page returned for {url}", url=url)
        if looks_blocked(html_content):
            raise FetchError(f"Page looks blocked by a bot or consent wall: {url}", url=url)
        self.logger.info(f"Retrieved {len(html_content.encode('utf-8'))} bytes from {url}")
        return html_content


class BrowserFetcher(BaseFetcher):
    """
    Renders pages with headless Chromium.

    Usage:
        with BrowserFetcher(timeout=60) as fetcher:
            html = fetcher.fetch(url)
    """

    def __init__(self, timeout: float = config.PAGE_TIMEOUT, user_agent: str = config.USER_AGENT,
                 headless: bool = True):
        super().__init__(timeout=timeout, user_agent=user_agent)
        self.headless = headless
        self._playwright = None
        self._browser = None

    def __enter__(self):
        self.start()
        return self

    def start(self):
        """Launch the Playwright driver and the browser."""
        if self._browser is not None:
            return
        try:
            self._playwright = sync_playwright().start()
            self._browser = self._playwright.chromium.launch(headless=self.headless)
            self.logger.debug("Headless browser launched")
        except PlaywrightError as e:
            self.close()
            raise FetchError(f"Could not launch headless browser: {e}") from e

    def fetch(self, url: str) -> str:
        self.start()
        self.logger.info(f"Fetching with headless browser: {url}")

        context = None
        try:
            context = self._browser.new_context(user_agent=self.user_agent)
            page = context.new_page()
            response = page.goto(url, timeout=self.timeout * 1000, wait_until="domcontentloaded")
            if response is not None and response.status >= 400:
                raise FetchError(f"HTTP {response.status} loading {url}", url=url)
            html_content = page.content()
        except PlaywrightTimeoutError as e:
            raise FetchError(f"Timed out after {self.timeout:.0f}s loading {url}", url=url) from e
        except PlaywrightError as e:
            raise FetchError(f"Navigation to {url} failed: {e}", url=url) from e
        finally:
            if context is not None:
                context.close()

        return self._check_content(html_content, url)

    def close(self):
        """Close the browser and stop the Playwright driver."""
        try:
            if self._browser is not None:
                self._browser.close()
        finally:
            self._browser = None
            if self._playwright is not None:
                self._playwright.stop()
                self._playwright = None
                self.logger.debug("Headless browser closed")


class HttpFetcher(BaseFetcher):
    """Fetches pages with a single plain HTTP GET."""

    def __init__(self, timeout: float = config.PAGE_TIMEOUT, user_agent: str = config.USER_AGENT):
        super().__init__(timeout=timeout, user_agent=user_agent)
        self.session = requests.Session()
        self.session.headers.update({
            'User-Agent': self.user_agent,
            'Accept': 'text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8',
            'Accept-Language': 'en-US,en;q=0.5',
            'Accept-Encoding': 'gzip, deflate',
            'Connection': 'keep-alive',
            'Upgrade-Insecure-Requests': '1'
        })

    def fetch(self, url: str) -> str:
        self.logger.info(f"Fetching over HTTP: {url}")
        try:
            response = self.session.get(url, timeout=self.timeout)
            response.raise_for_status()
        except requests.exceptions.Timeout as e:
            raise FetchError(f"Timed out after {self.timeout:.0f}s loading {url}", url=url) from e
        except requests.exceptions.HTTPError as e:
            status_code = e.response.status_code if e.response is not None else 'unknown'
            raise FetchError(f"HTTP {status_code} loading {url}", url=url) from e
        except requests.exceptions.RequestException as e:
            raise FetchError(f"Request to {url} failed: {e}", url=url) from e

        content_type = response.headers.get('content-type', '').lower()
        if content_type and 'text/html' not in content_type:
            self.logger.warning(f"Non-HTML content type for {url}: {content_type}")

        return self._check_content(response.text, url)

    def close(self):
        self.session.close()


def create_fetcher(kind: str = "browser",
                   timeout: float = config.PAGE_TIMEOUT,
                   user_agent: Optional[str] = None) -> BaseFetcher:
    """Create a fetcher by name ('browser' or 'http')."""
    user_agent = user_agent or config.USER_AGENT
    if kind == "browser":
        return BrowserFetcher(timeout=timeout, user_agent=user_agent)
    if kind == "http":
        return HttpFetcher(timeout=timeout, user_agent=user_agent)
    raise ValueError(f"Unknown fetcher: {kind}")
