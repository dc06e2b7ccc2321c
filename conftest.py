"""
Shared fixtures: HTML in the shape of the Java manual download page.
"""

import logging

import pytest


DOWNLOAD_BASE = "https://javadl.oracle.com/webapps/download/AutoDL?BundleId="


def download_link(bundle_id, label, size=None, digest="f8e4bcd2a9a8483b9a4c1c2be7f28e21"):
    """Render one download row the way the download page lists it."""
    row = (f'<a title="Download Java software for {label}" '
           f'href="{DOWNLOAD_BASE}{bundle_id}_{digest}">{label}</a>')
    if size:
        row += f'\n      filesize: {size}'
    return f'<li>\n      {row}\n    </li>'


def download_page(version_line="Version 8 Update 471",
                  release_date="October 21, 2025",
                  links=None):
    """Build a download page with the given banner, date line and links."""
    if links is None:
        links = [
            download_link("252627", "Windows Online", "2.26 MB"),
            download_link("252628", "Windows Offline", "38.43 MB"),
            download_link("252629", "Windows Offline (64-bit)", "43.07 MB"),
            download_link("252631", "macOS x64", "61.15 MB"),
            download_link("252632", "macOS ARM64", "56.38 MB"),
            download_link("252633", "Linux RPM", "45.12 MB"),
            download_link("252634", "Linux", "50.21 MB"),
            download_link("252635", "Linux x64 RPM", "43.58 MB"),
            download_link("252636", "Linux x64", "50.10 MB"),
            download_link("252637", "Solaris SPARC 64-bit (SVR4 package)", "47.66 MB"),
            download_link("252638", "Solaris x64 (SVR4 package)", "44.89 MB"),
        ]
    date_html = f'<br>Release date: {release_date}</p>' if release_date is not None else '</p>'
    return f"""<!DOCTYPE html>
<html lang="en">
<head><title>Download Java for all operating systems</title></head>
<body>
  <div id="main">
    <h4 class="sub">Recommended {version_line}</h4>
    <p>{version_line}{date_html}
    <ul>
    {chr(10).join(links)}
    </ul>
    <p><a href="https://www.java.com/en/download/help/">Help Resources</a></p>
  </div>
</body>
</html>
"""


@pytest.fixture
def page_html():
    return download_page()


@pytest.fixture
def page_html_461():
    return download_page(
        version_line="Version 8 Update 461",
        release_date="July 15, 2025",
        links=[
            download_link("252100", "Windows Online", "2.25 MB"),
            download_link("252101", "Windows Offline (64-bit)", "42.90 MB"),
        ],
    )


class FakeFetcher:
    """Fetcher stand-in that serves canned HTML and records its lifecycle."""

    def __init__(self, html=None, error=None):
        self.html = html
        self.error = error
        self.fetched = []
        self.closed = False

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()
        return False

    def fetch(self, url):
        self.fetched.append(url)
        if self.error is not None:
            raise self.error
        return self.html

    def close(self):
        self.closed = True


@pytest.fixture(autouse=True)
def detach_log_handlers():
    """Drop handlers the CLI attaches so later tests don't log into closed streams."""
    yield
    logger = logging.getLogger("javawatch")
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()
