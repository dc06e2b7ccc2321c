"""
Archive File Management

Reads and writes the versioned JSON archive (Java.json) and the optional
page snapshots kept next to it.
"""

import json
import logging
import os
import tempfile
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional

from ..core.errors import PersistenceError
from ..core.models import ArchiveDocument


def dump_document(document: ArchiveDocument) -> str:
    """Serialize a document to the persisted JSON text."""
    return json.dumps(document.to_dict(), ensure_ascii=False, indent=2) + "\n"


def parse_document(text: str) -> ArchiveDocument:
    """
    Parse persisted JSON text into a document.

    Raises:
        PersistenceError: if the text is not JSON or not an archive document
    """
    try:
        data = json.loads(text)
    except json.JSONDecodeError as e:
        raise PersistenceError(f"Archive is not valid JSON: {e}") from e

    try:
        return ArchiveDocument.from_dict(data)
    except (KeyError, TypeError, ValueError, AttributeError) as e:
        raise PersistenceError(f"Archive has an unexpected shape: {e!r}") from e


class ArchiveStore:
    """
    Manages the archive file and snapshot directory for one product.
    """

    def __init__(self, output_dir: str = "output", filename: str = "Java.json"):
        """
        Args:
            output_dir: Directory holding the archive file
            filename: Name of the archive file
        """
        self.output_dir = Path(output_dir)
        self.path = self.output_dir / filename
        self.snapshot_dir = self.output_dir / "snapshots"
        self.logger = logging.getLogger(__name__)

    def load(self) -> Optional[ArchiveDocument]:
        """
        Load the persisted document.

        Returns:
            The document, or None if no archive file exists yet

        Raises:
            PersistenceError: if the file exists but cannot be read or parsed
        """
        if not self.path.exists():
            self.logger.info(f"No existing archive at {self.path}")
            return None

        try:
            text = self.path.read_text(encoding='utf-8')
        except (OSError, UnicodeDecodeError) as e:
            raise PersistenceError(f"Cannot read archive: {e}", path=str(self.path)) from e

        try:
            document = parse_document(text)
        except PersistenceError as e:
            e.path = str(self.path)
            raise

        self.logger.debug(f"Loaded archive {self.path} "
                          f"(latest={document.latest.version if document.latest else None}, "
                          f"{len(document.versions)} archived versions)")
        return document

    def save(self, document: ArchiveDocument) -> str:
        """
        Write the document, replacing the archive file in one step.

        The JSON is written to a temporary file in the same directory and
        moved over the archive, so readers never see a partial file.

        Returns:
            Path of the written archive

        Raises:
            PersistenceError: if the file cannot be written
        """
        content = dump_document(document)

        try:
            self.output_dir.mkdir(parents=True, exist_ok=True)
            fd, tmp_path = tempfile.mkstemp(prefix=f".{self.path.name}.", suffix=".tmp",
                                            dir=str(self.output_dir))
            try:
                with os.fdopen(fd, 'w', encoding='utf-8') as f:
                    f.write(content)
                os.replace(tmp_path, self.path)
            except BaseException:
                if os.path.exists(tmp_path):
                    os.unlink(tmp_path)
                raise
        except OSError as e:
            raise PersistenceError(f"Cannot write archive: {e}", path=str(self.path)) from e

        self.logger.info(f"Saved archive ({len(content.encode('utf-8'))} bytes): {self.path}")
        return str(self.path)

    def save_snapshot(self, html_content: str, product: str, when: Optional[datetime] = None) -> Optional[str]:
        """
        Save the fetched page HTML for later inspection.

        Returns:
            Path to the snapshot, or None if it could not be written
        """
        when = when or datetime.now(timezone.utc)
        snapshot_path = self.snapshot_dir / f"{product}_{when.strftime('%Y%m%d_%H%M%S')}.html"

        try:
            self.snapshot_dir.mkdir(parents=True, exist_ok=True)
            snapshot_path.write_text(html_content, encoding='utf-8')
        except OSError as e:
            self.logger.error(f"Failed to save page snapshot: {e}")
            return None

        self.logger.info(f"Saved page snapshot: {snapshot_path.name}")
        return str(snapshot_path)
