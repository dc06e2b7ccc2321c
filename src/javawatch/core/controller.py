"""
javawatch Orchestrator: runs fetch -> extract -> merge -> write once.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Callable, Optional

from .. import config as settings
from .errors import ExtractionError, FetchError, PersistenceError
from .extractor import ReleaseExtractor
from .fetcher import BaseFetcher, create_fetcher
from .logger import ErrorTracker
from .merger import merge_release, utc_timestamp
from ..utils.archive_store import ArchiveStore
from ..utils.journal import RunJournal, RunRecord


@dataclass
class RunConfig:
    output_dir: str = settings.OUTPUT_DIR
    source_url: str = settings.SOURCE_URL
    product: str = settings.PRODUCT_NAME
    filename: str = settings.OUTPUT_FILENAME
    force: bool = False
    fetcher: str = "browser"  # browser|http
    timeout: float = settings.PAGE_TIMEOUT
    save_html: bool = False
    journal: bool = False


@dataclass
class RunSummary:
    status: str  # updated|unchanged
    version: str
    changed: bool
    archive_path: str
    archived_version: Optional[str] = None
    snapshot_path: Optional[str] = None


class JavaWatchController:
    def __init__(self,
                 config: RunConfig,
                 logger: Optional[logging.Logger] = None,
                 fetcher_factory: Optional[Callable[[], BaseFetcher]] = None,
                 clock: Optional[Callable[[], datetime]] = None):
        self.config = config
        self.logger = logger or logging.getLogger(__name__)
        self.errors = ErrorTracker(self.logger)
        self.fetcher_factory = fetcher_factory or (
            lambda: create_fetcher(config.fetcher, timeout=config.timeout)
        )
        self.clock = clock or (lambda: datetime.now(timezone.utc))
        self.extractor = ReleaseExtractor()
        self.store = ArchiveStore(config.output_dir, config.filename)
        self.journal = RunJournal(config.output_dir) if config.journal else None

    def run(self) -> RunSummary:
        """
        Run one update.

        Returns:
            RunSummary describing what happened

        Raises:
            FetchError: the page could not be loaded
            ExtractionError: the page did not contain a release
            PersistenceError: the updated archive could not be written
        """
        started_at = utc_timestamp(self.clock())
        url = self.config.source_url
        self.logger.info(f"Checking {self.config.product} releases at {url}")

        snapshot_path = None
        try:
            with self.fetcher_factory() as fetcher:
                html_content = fetcher.fetch(url)
            if self.config.save_html:
                snapshot_path = self.store.save_snapshot(html_content, self.config.product,
                                                         when=self.clock())
            record = self.extractor.extract(html_content)
        except (FetchError, ExtractionError) as e:
            stage = "fetch" if isinstance(e, FetchError) else "extraction"
            self.errors.log_error(e, stage=stage, url=url)
            self._journal(started_at, "failed", error=str(e))
            raise

        existing = self._load_existing()

        now = utc_timestamp(self.clock())
        result = merge_release(
            record,
            existing,
            now=now,
            source_url=url,
            product=self.config.product,
            force=self.config.force,
        )

        archived_version = None
        if result.changed:
            previous = existing.latest if existing else None
            if previous is not None and previous.version != record.version:
                archived_version = previous.version
            try:
                archive_path = self.store.save(result.document)
            except PersistenceError as e:
                self.errors.log_error(e, stage="write", details={'path': e.path})
                self._journal(started_at, "failed", version=record.version, error=str(e))
                raise
            status = "updated"
            self.logger.info(f"Archive updated to {record.version}"
                             + (f" (archived {archived_version})" if archived_version else ""))
        else:
            archive_path = str(self.store.path)
            status = "unchanged"
            self.logger.info(f"No new release; {record.version} is already the latest")

        self._journal(started_at, status, version=record.version)

        return RunSummary(
            status=status,
            version=record.version,
            changed=result.changed,
            archive_path=archive_path,
            archived_version=archived_version,
            snapshot_path=snapshot_path,
        )

    def _load_existing(self):
        try:
            return self.store.load()
        except PersistenceError as e:
            self.errors.log_warning(f"Ignoring unreadable archive, starting a fresh one: {e}",
                                    stage="load")
            return None

    def _journal(self, started_at: str, status: str, version: Optional[str] = None,
                 error: Optional[str] = None):
        if self.journal is None:
            return
        try:
            self.journal.append(RunRecord(
                started_at=started_at,
                finished_at=utc_timestamp(self.clock()),
                status=status,
                source_url=self.config.source_url,
                version=version,
                error=error,
            ))
        except OSError as e:
            self.errors.log_warning(f"Could not append to run journal: {e}", stage="journal")
