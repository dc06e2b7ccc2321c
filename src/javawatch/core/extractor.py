"""
Release Extraction Module

This module turns the HTML of the Java manual download page into a
ReleaseRecord: the "Version 8 Update N" banner, the release date line, and one
download entry per recognized platform link.

The matching rules are tied to the current page markup. They live on
ReleaseExtractor so they can be swapped without touching the merge logic.
"""

import logging
import re
from typing import Dict, List, Optional, Tuple

from bs4 import BeautifulSoup

from .errors import ExtractionError, ExtractionFailure
from .models import DownloadEntry, Platform, ReleaseRecord


# Visible link text -> platform key. Matched exactly after whitespace is
# collapsed; anything else on the page is ignored.
PLATFORM_LABELS: Dict[str, Platform] = {
    'Windows Online': Platform.WINDOWS_ONLINE,
    'Windows Offline': Platform.WINDOWS_X86,
    'Windows Offline (32-bit)': Platform.WINDOWS_X86,
    'Windows Offline (64-bit)': Platform.WINDOWS_X64,
    'macOS x64': Platform.MACOS_X64,
    'macOS x64 .dmg': Platform.MACOS_X64,
    'Mac OS X x64': Platform.MACOS_X64,
    'macOS ARM64': Platform.MACOS_ARM64,
    'macOS ARM64 .dmg': Platform.MACOS_ARM64,
    'Linux': Platform.LINUX_X86,
    'Linux x86': Platform.LINUX_X86,
    'Linux RPM': Platform.LINUX_X86_RPM,
    'Linux x86 RPM': Platform.LINUX_X86_RPM,
    'Linux x64': Platform.LINUX_X64,
    'Linux x64 RPM': Platform.LINUX_X64_RPM,
    'Solaris SPARC 64-bit': Platform.SOLARIS_SPARC64,
    'Solaris SPARC 64-bit (SVR4 package)': Platform.SOLARIS_SPARC64,
    'Solaris x64': Platform.SOLARIS_X64,
    'Solaris x64 (SVR4 package)': Platform.SOLARIS_X64,
}


class ReleaseExtractor:
    """
    Extracts release metadata from the Java download page.

    The extractor holds no state between calls; one instance can be reused.
    """

    # Characters after the BundleId searched for the "filesize: N MB" note
    FILESIZE_WINDOW = 600

    def __init__(self, platform_labels: Optional[Dict[str, Platform]] = None):
        self.logger = logging.getLogger(__name__)
        self.platform_labels = platform_labels or PLATFORM_LABELS

        self.version_pattern = re.compile(r'Version\s+8\s+Update\s+(\d+)', re.IGNORECASE)
        self.release_date_pattern = re.compile(r'Release\s+date:\s*([^<]*)', re.IGNORECASE)
        self.download_href_pattern = re.compile(
            r'^https?://javadl\.oracle\.com/webapps/download/AutoDL\?BundleId=(\d+)_([0-9a-fA-F]+)',
            re.IGNORECASE
        )
        self.filesize_pattern = re.compile(r'filesize:\s*([\d.,]+\s*[KMG]B)', re.IGNORECASE)

    def extract(self, html_content: str) -> ReleaseRecord:
        """
        Extract a release record from page HTML.

        Args:
            html_content: Rendered HTML of the download page

        Returns:
            The extracted ReleaseRecord

        Raises:
            ExtractionError: if the version banner is missing or no download
                link could be classified
        """
        html_content = html_content or ""

        version, update_number = self.extract_version(html_content)
        release_date = self.extract_release_date(html_content)

        downloads: Dict[str, DownloadEntry] = {}
        for bundle_id, url, label in self.find_download_links(html_content):
            platform = self.classify_platform(label)
            if platform is None:
                self.logger.debug(f"Ignoring download link with unrecognized text: {label!r}")
                continue
            if platform.value in downloads:
                self.logger.debug(f"Duplicate link for {platform.value} ignored: {url}")
                continue
            downloads[platform.value] = DownloadEntry(
                platform=platform.value,
                bundle_id=bundle_id,
                url=url,
                file_size=self.find_file_size(html_content, bundle_id),
            )

        if not downloads:
            raise ExtractionError(
                ExtractionFailure.NO_DOWNLOADS_FOUND,
                f"No recognized download links found for {version}"
            )

        self.logger.info(f"Extracted {version} (released {release_date or 'unknown'}) "
                         f"with {len(downloads)} downloads")
        return ReleaseRecord(
            version=version,
            update_number=update_number,
            release_date=release_date,
            downloads=downloads,
        )

    def extract_version(self, html_content: str) -> Tuple[str, int]:
        match = self.version_pattern.search(html_content)
        if not match:
            raise ExtractionError(
                ExtractionFailure.MISSING_VERSION,
                "Version banner 'Version 8 Update N' not found in page"
            )
        update_number = int(match.group(1))
        return f"8u{update_number}", update_number

    def extract_release_date(self, html_content: str) -> Optional[str]:
        match = self.release_date_pattern.search(html_content)
        if not match:
            return None
        release_date = ' '.join(match.group(1).split())
        return release_date or None

    def find_download_links(self, html_content: str) -> List[Tuple[str, str, str]]:
        """
        Find vendor download anchors in document order.

        Returns:
            List of (bundle_id, url, visible_text) tuples
        """
        soup = BeautifulSoup(html_content, 'lxml')
        links = []

        for anchor in soup.find_all('a', href=True):
            href = anchor['href'].strip()
            match = self.download_href_pattern.match(href)
            if not match:
                continue
            label = ' '.join(anchor.get_text(' ', strip=True).split())
            links.append((match.group(1), href, label))

        self.logger.debug(f"Found {len(links)} download links")
        return links

    def classify_platform(self, label: str) -> Optional[Platform]:
        return self.platform_labels.get(' '.join(label.split()))

    def find_file_size(self, html_content: str, bundle_id: str) -> Optional[str]:
        """Best-effort lookup of the size note printed after a download link."""
        # The id must not run on into a longer id (2526 vs 25262)
        marker = re.search(rf"BundleId={re.escape(bundle_id)}(?!\d)", html_content)
        if marker is None:
            return None
        window = html_content[marker.start():marker.start() + self.FILESIZE_WINDOW]
        # Stop at the next download link so its size is not borrowed
        next_link = window.find("BundleId=", marker.end() - marker.start())
        if next_link > 0:
            window = window[:next_link]
        match = self.filesize_pattern.search(window)
        if not match:
            return None
        return ' '.join(match.group(1).split())


def extract_release(html_content: str) -> ReleaseRecord:
    """Extract a ReleaseRecord with the default matching rules."""
    return ReleaseExtractor().extract(html_content)
