"""Logging utilities for the claim rewards bot.

Configures a standard library logger per component and provides an async
audit writer: structured events (claims, admin actions, command errors) are
queued and appended to a JSONL archive without blocking command handlers.
"""
import logging
import asyncio
import json
import os
import time
import traceback
from pathlib import Path
from typing import Optional

_queue: Optional[asyncio.Queue] = None
_queue_loop: Optional[asyncio.AbstractEventLoop] = None
_writer_task: Optional[asyncio.Task] = None
ARCHIVE_FILE: Optional[Path] = None


def get_logger(name: str = "claimrewards") -> logging.Logger:
    logger = logging.getLogger(name)
    if not logger.handlers:
        handler = logging.StreamHandler()
        fmt = logging.Formatter("%(asctime)s %(levelname)s %(name)s: %(message)s")
        handler.setFormatter(fmt)
        logger.addHandler(handler)
        logger.setLevel(os.getenv("LOG_LEVEL", "INFO").upper())
    return logger


def set_archive_path(path: Path) -> None:
    """Point the audit writer at `path` (defaults to ./data/logs.jsonl)."""
    global ARCHIVE_FILE
    ARCHIVE_FILE = Path(path)


def _archive_path() -> Path:
    if ARCHIVE_FILE is not None:
        return ARCHIVE_FILE
    return Path.cwd() / "data" / "logs.jsonl"


def write_archive_item(item: object) -> None:
    """Append one item to the JSONL archive, stamping `ts` on dicts."""
    if isinstance(item, dict) and "ts" not in item:
        item["ts"] = int(time.time())
    archive_file = _archive_path()
    archive_file.parent.mkdir(parents=True, exist_ok=True)
    with archive_file.open("a", encoding="utf-8") as f:
        f.write(json.dumps(item, default=str, ensure_ascii=False) + "\n")


def start_background_writer(loop: Optional[asyncio.AbstractEventLoop] = None) -> asyncio.Queue:
    """Start the audit queue and its writer coroutine.

    Returns the queue instance callers put dicts on. Calling it again from
    the same loop returns the already running queue.
    """
    global _queue, _queue_loop, _writer_task
    if loop is None:
        loop = asyncio.get_event_loop()

    # a queue is bound to the loop that created it
    if _queue is not None and _queue_loop is loop:
        return _queue

    queue: asyncio.Queue = asyncio.Queue()

    async def _writer():
        logger = get_logger("claimrewards.audit")
        while True:
            item = await queue.get()
            try:
                logger.debug("AUDIT: %s", item)
                write_archive_item(item)
            except Exception:
                logger.exception("Failed to append to audit archive")
            finally:
                queue.task_done()

    _queue = queue
    _queue_loop = loop
    _writer_task = loop.create_task(_writer())
    return queue


def stop_background_writer() -> None:
    """Flush queued items, cancel the writer and forget its queue.

    Items still waiting on the queue are written synchronously so nothing
    enqueued before shutdown is lost. The next enqueue starts afresh.
    """
    global _queue, _queue_loop, _writer_task
    if _queue is not None:
        while True:
            try:
                item = _queue.get_nowait()
            except asyncio.QueueEmpty:
                break
            try:
                write_archive_item(item)
            except Exception:
                get_logger("claimrewards.audit").exception("Failed to append to audit archive")
            finally:
                _queue.task_done()
    if _writer_task is not None and not _writer_task.done() and not _writer_task.get_loop().is_closed():
        _writer_task.cancel()
    _queue = None
    _queue_loop = None
    _writer_task = None


def enqueue_log(item: object) -> None:
    """Enqueue an audit item for asynchronous writing.

    Lazily starts the background writer. Outside a running event loop the
    item is written synchronously instead.
    """
    try:
        loop = asyncio.get_running_loop()
    except RuntimeError:
        loop = None

    if loop is None:
        write_archive_item(item)
        return

    q = start_background_writer(loop)
    q.put_nowait(item)


def audit_command_error(command: Optional[str], user_id: Optional[int], error: BaseException) -> None:
    """Log a failed command and queue a `command_error` audit entry for it."""
    get_logger("claimrewards.commands").error("Command %s failed for %s: %s", command, user_id, error)
    enqueue_log({
        "type": "command_error",
        "command": command,
        "user_id": user_id,
        "error": str(error),
        "trace": "".join(traceback.format_exception(type(error), error, error.__traceback__)),
    })
