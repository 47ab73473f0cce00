"""Collects recoverable problems found during a run and reports them at the end."""

import hashlib
import json
import logging
import threading
import time
from dataclasses import asdict, dataclass
from pathlib import Path
from typing import Any

logger = logging.getLogger(__name__)

SKIPPED_RECORD = "skipped_record"
DUPLICATE_UID = "duplicate_uid"
UNRESOLVED_REFERENCE = "unresolved_reference"
UNPARSEABLE_FILE = "unparseable_file"
PATH_COLLISION = "path_collision"

REPORT_SCHEMA_VERSION = 1


@dataclass(frozen=True)
class Diagnostic:
    """A single recoverable problem."""

    category: str
    uid: str
    message: str
    source: str = ""  # input file or output document the problem was found in


def compute_config_hash(config: dict[str, Any]) -> str:
    """Compute a stable hash of the configuration.

    Uses canonical JSON serialization (sorted keys).
    """
    config_json = json.dumps(config, sort_keys=True, ensure_ascii=True, default=str)
    return hashlib.sha256(config_json.encode("utf-8")).hexdigest()


class Diagnostics:
    """Accumulates per-record and per-marker problems without interrupting work."""

    def __init__(self) -> None:
        """Start an empty collection and the run clock."""
        self.entries: list[Diagnostic] = []
        self.start_time = time.time()
        self._lock = threading.Lock()

    def add(self, category: str, uid: str, message: str, source: str = "") -> None:
        """Record one problem."""
        with self._lock:
            self.entries.append(Diagnostic(category, uid, message, source))

    def skipped_record(self, source: str, reason: str = "missing uid") -> None:
        """Record a metadata item that was excluded from the link table."""
        logger.warning("Skipping record in %s: %s", source or "<unknown>", reason)
        self.add(SKIPPED_RECORD, "", reason, source)

    def duplicate_uid(self, uid: str, source: str = "") -> None:
        """Record a UID that appeared more than once."""
        logger.warning("Duplicate UID %s (keeping first occurrence)", uid)
        self.add(DUPLICATE_UID, uid, "UID defined more than once", source)

    def unresolved_reference(self, uid: str, document: str) -> None:
        """Record a cross-reference that matched nothing."""
        logger.debug("Unresolved reference %s in %s", uid, document)
        self.add(UNRESOLVED_REFERENCE, uid, "no file, reference or fallback", document)

    def unparseable_file(self, path: str, error: str) -> None:
        """Record an input file that could not be parsed."""
        logger.warning("Failed to parse %s: %s", path, error)
        self.add(UNPARSEABLE_FILE, "", error, path)

    def path_collision(self, uid: str, file_path: str, other_uid: str) -> None:
        """Record two standalone pages assigned to the same file."""
        logger.warning("%s and %s both map to %s", other_uid, uid, file_path)
        self.add(PATH_COLLISION, uid, f"shares {file_path} with {other_uid}", file_path)

    def by_category(self, category: str) -> list[Diagnostic]:
        """Return the problems recorded under one category."""
        with self._lock:
            return [d for d in self.entries if d.category == category]

    def counts(self) -> dict[str, int]:
        """Count problems per category."""
        counts: dict[str, int] = {}
        with self._lock:
            for d in self.entries:
                counts[d.category] = counts.get(d.category, 0) + 1
        return counts

    def __len__(self) -> int:
        """Total number of recorded problems."""
        with self._lock:
            return len(self.entries)

    def log_summary(self) -> None:
        """Log one line per category, plus the most common unresolved UIDs."""
        counts = self.counts()
        if not counts:
            logger.info("No problems recorded")
            return
        for category, count in sorted(counts.items()):
            logger.warning("%s: %d", category, count)

        unresolved: dict[str, int] = {}
        for d in self.by_category(UNRESOLVED_REFERENCE):
            unresolved[d.uid] = unresolved.get(d.uid, 0) + 1
        top = sorted(unresolved.items(), key=lambda kv: (-kv[1], kv[0]))[:10]
        for uid, count in top:
            logger.info("  unresolved %s (%d occurrences)", uid, count)

    def generate_report(
        self,
        path: str | Path,
        config_hash: str,
        stats: dict[str, Any] | None = None,
    ) -> None:
        """Write the summary report to a JSON file."""
        with self._lock:
            entries = [asdict(d) for d in self.entries]
        report = {
            "meta": {
                "timestamp": time.time(),
                "duration": time.time() - self.start_time,
                "config_hash": config_hash,
                "schema_version": REPORT_SCHEMA_VERSION,
                "total_problems": len(entries),
            },
            "counts": self.counts(),
            "stats": stats or {},
            "problems": entries,
        }
        Path(path).write_text(json.dumps(report, indent=2), encoding="utf-8")
