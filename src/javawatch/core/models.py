"""
Release data model.

Records are plain dataclasses that serialize to the persisted JSON shape
(camelCase keys, nested maps keyed by platform and version strings).
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Any, Dict, Optional


class Platform(str, Enum):
    WINDOWS_ONLINE = "Windows_Online"
    WINDOWS_X86 = "Windows_x86"
    WINDOWS_X64 = "Windows_x64"
    MACOS_X64 = "macOS_x64"
    MACOS_ARM64 = "macOS_ARM64"
    LINUX_X86 = "Linux_x86"
    LINUX_X86_RPM = "Linux_x86_RPM"
    LINUX_X64 = "Linux_x64"
    LINUX_X64_RPM = "Linux_x64_RPM"
    SOLARIS_SPARC64 = "Solaris_SPARC64"
    SOLARIS_X64 = "Solaris_x64"

    @classmethod
    def keys(cls) -> set:
        return {p.value for p in cls}


@dataclass(frozen=True)
class DownloadEntry:
    platform: str
    bundle_id: str
    url: str
    file_size: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            'platform': self.platform,
            'bundleId': self.bundle_id,
            'url': self.url,
            'fileSize': self.file_size,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> DownloadEntry:
        return cls(
            platform=data['platform'],
            bundle_id=str(data['bundleId']),
            url=data['url'],
            file_size=data.get('fileSize'),
        )


@dataclass(frozen=True)
class ReleaseRecord:
    """
    One release as seen on the download page.

    ``updated_on`` is stamped while the record is the archive's latest entry,
    ``archived_on`` once it has been superseded and moved into the history.
    """

    version: str
    update_number: int
    release_date: Optional[str] = None
    downloads: Dict[str, DownloadEntry] = field(default_factory=dict)
    updated_on: Optional[str] = None
    archived_on: Optional[str] = None

    def stamped(self, **stamps) -> ReleaseRecord:
        """Return a copy with ``updated_on`` and/or ``archived_on`` set."""
        return replace(self, **stamps)

    def to_dict(self) -> Dict[str, Any]:
        data = {
            'version': self.version,
            'updateNumber': self.update_number,
            'releaseDate': self.release_date,
            'downloads': {key: entry.to_dict() for key, entry in self.downloads.items()},
        }
        if self.updated_on is not None:
            data['updatedOn'] = self.updated_on
        if self.archived_on is not None:
            data['archivedOn'] = self.archived_on
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> ReleaseRecord:
        known = Platform.keys()
        downloads = {
            key: DownloadEntry.from_dict(entry)
            for key, entry in (data.get('downloads') or {}).items()
            if key in known and isinstance(entry, dict) and entry.get('platform') == key
        }
        return cls(
            version=data['version'],
            update_number=int(data['updateNumber']),
            release_date=data.get('releaseDate'),
            downloads=downloads,
            updated_on=data.get('updatedOn'),
            archived_on=data.get('archivedOn'),
        )


@dataclass
class ArchiveDocument:
    product: str
    source_url: str
    last_updated: Optional[str] = None
    latest: Optional[ReleaseRecord] = None
    versions: Dict[str, ReleaseRecord] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'product': self.product,
            'lastUpdated': self.last_updated,
            'sourceUrl': self.source_url,
            'latest': self.latest.to_dict() if self.latest else None,
            'versions': {version: rec.to_dict() for version, rec in self.versions.items()},
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> ArchiveDocument:
        if not isinstance(data, dict):
            raise ValueError(f"Archive document must be a JSON object, got {type(data).__name__}")
        latest = data.get('latest')
        return cls(
            product=data['product'],
            source_url=data.get('sourceUrl', ''),
            last_updated=data.get('lastUpdated'),
            latest=ReleaseRecord.from_dict(latest) if latest else None,
            versions={
                version: ReleaseRecord.from_dict(rec)
                for version, rec in (data.get('versions') or {}).items()
            },
        )
