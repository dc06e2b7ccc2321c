"""
Run journal: an append-only JSON Lines file with one record per run.
"""

import json
import os
from dataclasses import dataclass, asdict
from typing import Optional, Dict, Any, Iterable


DEFAULT_JOURNAL_NAME = "runs.jsonl"


@dataclass
class RunRecord:
    started_at: str
    finished_at: str
    status: str  # updated|unchanged|failed
    source_url: str
    version: Optional[str] = None
    error: Optional[str] = None


class RunJournal:
    def __init__(self, output_dir: str):
        self.output_dir = output_dir
        self.path = os.path.join(self.output_dir, DEFAULT_JOURNAL_NAME)

    def append(self, rec: RunRecord) -> None:
        os.makedirs(self.output_dir, exist_ok=True)
        with open(self.path, 'a', encoding='utf-8') as f:
            f.write(json.dumps(asdict(rec), ensure_ascii=False) + "\n")

    def iter_records(self) -> Iterable[Dict[str, Any]]:
        if not os.path.exists(self.path):
            return
        with open(self.path, 'r', encoding='utf-8') as f:
            for line in f:
                line = line.strip()
                if not line:
                    continue
                try:
                    yield json.loads(line)
                except json.JSONDecodeError:
                    continue

    def last_record(self) -> Optional[Dict[str, Any]]:
        last = None
        for rec in self.iter_records():
            last = rec
        return last

    def status_counts(self) -> Dict[str, int]:
        counts: Dict[str, int] = {}
        for rec in self.iter_records():
            status = rec.get('status')
            if status:
                counts[status] = counts.get(status, 0) + 1
        return counts
