"""
translated_select Logging — Structured JSON file-based operation logging with async queue.

Implements:
- FileLogger: Per-object-type, per-category JSONL files (daily rotation)
- AsyncLogQueue: In-memory queue flushed by a background thread
- Log entry builders for attribute operations and system events

Files land in logs/{object_type}/{category}/{YYYY-MM-DD}.jsonl.
"""

from __future__ import annotations

import json
import logging
import threading
from collections import defaultdict
from datetime import date, datetime, timezone
from pathlib import Path
from queue import Empty, Full, Queue
from typing import Any, Dict, List, Optional

from translated_select.engine.config import LoggingConfig

logger = logging.getLogger("translated_select.engine.logging")

# Valid object types and their permitted categories
OBJECT_TYPE_CATEGORIES = {
    "attributes": ["execution", "performance"],
    "store": ["execution"],
    "system": ["execution"],
}


class LogEntry:
    """A structured log entry destined for a specific file."""

    __slots__ = ("object_type", "category", "data")

    def __init__(self, object_type: str, category: str, data: Dict[str, Any]):
        if object_type not in OBJECT_TYPE_CATEGORIES:
            raise ValueError(f"Unknown log object type '{object_type}'")
        if category not in OBJECT_TYPE_CATEGORIES[object_type]:
            raise ValueError(f"Category '{category}' not valid for '{object_type}'")
        self.object_type = object_type
        self.category = category
        self.data = data

    def to_json(self) -> str:
        return json.dumps(self.data, default=str, separators=(",", ":"))


class FileLogger:
    """
    Appends log entries to logs/{object_type}/{category}/{YYYY-MM-DD}.jsonl.

    One lock per target file; batches are grouped so each file is opened
    once per flush.
    """

    def __init__(self, log_dir: str = "logs"):
        self._root = Path(log_dir)
        self._locks: Dict[Path, threading.Lock] = defaultdict(threading.Lock)
        for object_type, categories in OBJECT_TYPE_CATEGORIES.items():
            for category in categories:
                (self._root / object_type / category).mkdir(parents=True, exist_ok=True)

    def resolve_path(self, object_type: str, category: str, day: Optional[date] = None) -> Path:
        """Log file of ``day`` (today by default)."""
        return self._root / object_type / category / f"{(day or date.today()).isoformat()}.jsonl"

    def write_batch(self, entries: List[LogEntry]) -> None:
        by_file: Dict[Path, List[str]] = defaultdict(list)
        for entry in entries:
            by_file[self.resolve_path(entry.object_type, entry.category)].append(entry.to_json())

        for path, lines in by_file.items():
            with self._locks[path], open(path, "a", encoding="utf-8") as f:
                f.write("\n".join(lines) + "\n")

    def read(self, object_type: str, category: str, day: Optional[date] = None) -> List[Dict[str, Any]]:
        """Entries of one day's file; malformed lines are skipped."""
        path = self.resolve_path(object_type, category, day)
        if not path.exists():
            return []
        entries: List[Dict[str, Any]] = []
        with open(path, "r", encoding="utf-8") as f:
            for line in filter(None, (raw.strip() for raw in f)):
                try:
                    entries.append(json.loads(line))
                except json.JSONDecodeError:
                    logger.warning("Skipping malformed log line in %s", path)
        return entries


class AsyncLogQueue:
    """
    Bounded queue between attribute operations and the FileLogger.

    push() never blocks; a full queue drops the entry. A daemon thread
    writes whatever has accumulated, at most flush_batch_size entries at a
    time, waiting up to flush_interval_ms for the first one.
    """

    def __init__(
        self,
        file_logger: FileLogger,
        flush_interval_ms: int = 100,
        flush_batch_size: int = 50,
        max_queue_size: int = 10000,
    ):
        self._file_logger = file_logger
        self._interval = flush_interval_ms / 1000.0
        self._batch_size = max(1, flush_batch_size)
        self._queue: Queue[LogEntry] = Queue(maxsize=max_queue_size)
        self._stopping = threading.Event()
        self._thread: Optional[threading.Thread] = None
        self._dropped = 0

    def start(self) -> None:
        if self._thread is not None:
            return
        self._stopping.clear()
        self._thread = threading.Thread(target=self._run, name="translated-select-log-flush", daemon=True)
        self._thread.start()
        logger.debug("Log queue started")

    def stop(self, timeout: float = 5.0) -> None:
        """Stop the flush thread, then write everything still queued."""
        self._stopping.set()
        if self._thread is not None:
            self._thread.join(timeout=timeout)
            self._thread = None
        while self._flush(block=False):
            pass
        if self._dropped:
            logger.warning(f"Log queue dropped {self._dropped} entries")

    def push(self, entry: LogEntry) -> bool:
        """Queue ``entry``; False when the queue is full and it was dropped."""
        try:
            self._queue.put_nowait(entry)
        except Full:
            self._dropped += 1
            return False
        return True

    def _run(self) -> None:
        while not self._stopping.is_set():
            self._flush(block=True)

    def _flush(self, block: bool) -> int:
        try:
            batch = [self._queue.get(timeout=self._interval) if block else self._queue.get_nowait()]
        except Empty:
            return 0
        while len(batch) < self._batch_size:
            try:
                batch.append(self._queue.get_nowait())
            except Empty:
                break
        try:
            self._file_logger.write_batch(batch)
        except OSError as e:
            logger.error(f"Log flush error: {e}")
        return len(batch)


# ---------------------------------------------------------------------------
# Log Entry Builders
# ---------------------------------------------------------------------------

def _base_entry(
    event: str,
    level: str,
    attribute_ref: str,
    **extra: Any,
) -> Dict[str, Any]:
    entry: Dict[str, Any] = {
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "level": level,
        "event": event,
        "attribute_ref": attribute_ref,
    }
    entry.update(extra)
    return entry


def log_attribute_operation(
    operation: str,
    attribute_ref: str,
    success: bool,
    duration_ms: float,
    language: Optional[str] = None,
    fallback_language: Optional[str] = None,
    input_count: Optional[int] = None,
    result_count: Optional[int] = None,
    error: Optional[Dict[str, Any]] = None,
) -> LogEntry:
    """Build an attribute operation log entry (resolve, sort, options, search, write)."""
    data = _base_entry(
        event=f"attribute_{operation}",
        level="INFO" if success else "ERROR",
        attribute_ref=attribute_ref,
        operation=operation,
        success=success,
        duration_ms=duration_ms,
    )
    if language:
        data["language"] = language
    if fallback_language and fallback_language != language:
        data["fallback_language"] = fallback_language
    if input_count is not None:
        data["input_count"] = input_count
    if result_count is not None:
        data["result_count"] = result_count
    if error:
        data["error"] = error
    return LogEntry("attributes", "execution", data)


def log_attribute_performance(
    operation: str,
    attribute_ref: str,
    duration_ms: float,
) -> LogEntry:
    """Build an attribute performance log entry."""
    data = _base_entry(
        event="attribute_performance",
        level="INFO",
        attribute_ref=attribute_ref,
        operation=operation,
        duration_ms=duration_ms,
    )
    return LogEntry("attributes", "performance", data)


def log_store_write(
    table: str,
    column: str,
    rows_affected: int,
    item_id: Optional[Any] = None,
) -> LogEntry:
    """Build a store write log entry (one per UPDATE)."""
    data = _base_entry(
        event="store_write",
        level="INFO",
        attribute_ref=f"{table}.{column}",
        table=table,
        column=column,
        rows_affected=rows_affected,
    )
    if item_id is not None:
        data["item_id"] = item_id
    return LogEntry("store", "execution", data)


def log_system_event(
    event: str,
    level: str = "INFO",
    details: Optional[Dict[str, Any]] = None,
) -> LogEntry:
    """Build a system event log entry (startup, shutdown, config changes)."""
    data = _base_entry(event=event, level=level, attribute_ref="system")
    if details:
        data["details"] = details
    return LogEntry("system", "execution", data)


# ---------------------------------------------------------------------------
# Convenience: Global Log Queue Singleton
# ---------------------------------------------------------------------------

_global_queue: Optional[AsyncLogQueue] = None


def init_logging(
    log_dir: str = "logs",
    flush_interval_ms: int = 100,
    flush_batch_size: int = 50,
    max_queue_size: int = 10000,
) -> AsyncLogQueue:
    """Initialize and start the global async log queue."""
    global _global_queue
    if _global_queue is not None:
        _global_queue.stop()
    _global_queue = AsyncLogQueue(
        file_logger=FileLogger(log_dir=log_dir),
        flush_interval_ms=flush_interval_ms,
        flush_batch_size=flush_batch_size,
        max_queue_size=max_queue_size,
    )
    _global_queue.start()
    return _global_queue


def init_logging_from_config(config: LoggingConfig) -> AsyncLogQueue:
    """Apply the settings file's logging section: package log level plus the JSONL queue."""
    logging.getLogger("translated_select").setLevel(config.level)
    return init_logging(
        log_dir=config.directory,
        flush_interval_ms=config.flush_interval_ms,
        flush_batch_size=config.flush_batch_size,
        max_queue_size=config.max_queue_size,
    )


def log(entry: LogEntry) -> bool:
    """Push a log entry to the global queue. Non-blocking; False when not initialized."""
    if _global_queue is None:
        return False
    return _global_queue.push(entry)


def shutdown_logging() -> None:
    """Flush and stop the global log queue."""
    global _global_queue
    if _global_queue:
        _global_queue.stop()
        _global_queue = None
