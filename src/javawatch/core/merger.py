"""
Archive merging: folds a freshly extracted release into the persisted
document, moving the superseded latest release into the version history.
"""

import logging
from dataclasses import dataclass, replace
from datetime import datetime, timezone
from typing import Optional

from .models import ArchiveDocument, ReleaseRecord


logger = logging.getLogger(__name__)

TIMESTAMP_FORMAT = "%Y-%m-%dT%H:%M:%SZ"


@dataclass
class MergeResult:
    document: ArchiveDocument
    changed: bool


def utc_timestamp(moment: Optional[datetime] = None) -> str:
    """Format a moment (default: now) as a UTC ISO-8601 timestamp."""
    moment = moment or datetime.now(timezone.utc)
    if moment.tzinfo is not None:
        moment = moment.astimezone(timezone.utc)
    return moment.strftime(TIMESTAMP_FORMAT)


def new_document(product: str, source_url: str) -> ArchiveDocument:
    return ArchiveDocument(product=product, source_url=source_url)


def merge_release(record: ReleaseRecord,
                  existing: Optional[ArchiveDocument],
                  *,
                  now: str,
                  source_url: str,
                  product: str = "Java",
                  force: bool = False) -> MergeResult:
    """
    Merge a new release record into an archive document.

    Args:
        record: Release freshly extracted from the download page
        existing: Previously persisted document, or None
        now: Timestamp used for updatedOn, archivedOn and lastUpdated
        source_url: Page the record was scraped from
        product: Product name for a newly created document
        force: Update even if the latest version is unchanged

    Returns:
        MergeResult with the document to persist and whether it changed.
        When nothing changed the existing document is returned as-is. An
        unchanged document whose history also holds the latest version (a
        hand-edited file) comes back without that history entry and
        ``changed=True``, with its timestamps untouched.
    """
    if existing is not None and existing.latest is not None \
            and existing.latest.version == record.version and not force:
        if record.version in existing.versions:
            logger.warning(f"History also lists latest version {record.version}; dropping it")
            versions = {v: rec for v, rec in existing.versions.items() if v != record.version}
            return MergeResult(document=replace(existing, versions=versions), changed=True)
        logger.info(f"Latest version {record.version} unchanged, skipping update")
        return MergeResult(document=existing, changed=False)

    base = existing or new_document(product, source_url)
    versions = dict(base.versions)
    previous = base.latest

    if previous is not None and previous.version != record.version:
        logger.info(f"Archiving previous release {previous.version}")
        versions[previous.version] = previous.stamped(archived_on=now)

    # A version that reappears as latest (upstream rollback) leaves the history
    versions.pop(record.version, None)

    document = ArchiveDocument(
        product=base.product,
        source_url=source_url,
        last_updated=now,
        latest=record.stamped(updated_on=now, archived_on=None),
        versions=versions,
    )
    logger.info(f"Latest release set to {record.version}")
    return MergeResult(document=document, changed=True)
