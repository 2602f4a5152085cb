import asyncio
import json
import logging

import pytest

from claimrewards_bot.utils import logger as claim_logger


def test_enqueue_without_loop_writes_immediately(tmp_path, monkeypatch):
    archive = tmp_path / "logs.jsonl"
    monkeypatch.setattr(claim_logger, "ARCHIVE_FILE", archive)
    claim_logger.enqueue_log({"type": "reward_claim", "user_id": "u1"})
    entry = json.loads(archive.read_text(encoding="utf-8").strip())
    assert entry["type"] == "reward_claim"
    assert "ts" in entry


@pytest.mark.asyncio
async def test_background_writer_appends(tmp_path, monkeypatch):
    archive = tmp_path / "logs.jsonl"
    monkeypatch.setattr(claim_logger, "ARCHIVE_FILE", archive)
    claim_logger.stop_background_writer()
    claim_logger.enqueue_log({"type": "a"})
    claim_logger.enqueue_log({"type": "b"})
    q = claim_logger.start_background_writer(asyncio.get_running_loop())
    await asyncio.wait_for(q.join(), timeout=2)
    lines = [json.loads(l) for l in archive.read_text(encoding="utf-8").splitlines()]
    assert [l["type"] for l in lines] == ["a", "b"]
    claim_logger.stop_background_writer()


@pytest.mark.asyncio
async def test_stop_flushes_pending_items(tmp_path, monkeypatch):
    archive = tmp_path / "logs.jsonl"
    monkeypatch.setattr(claim_logger, "ARCHIVE_FILE", archive)
    claim_logger.stop_background_writer()
    for i in range(3):
        claim_logger.enqueue_log({"type": "reward_claim", "n": i})
    # writer has not had a chance to run yet
    claim_logger.stop_background_writer()
    lines = [json.loads(l) for l in archive.read_text(encoding="utf-8").splitlines()]
    assert [l["n"] for l in lines] == [0, 1, 2]


def test_audit_command_error_records_trace(tmp_path, monkeypatch):
    archive = tmp_path / "logs.jsonl"
    monkeypatch.setattr(claim_logger, "ARCHIVE_FILE", archive)
    try:
        raise OSError("disk full")
    except OSError as exc:
        claim_logger.audit_command_error("claim", 42, exc)
    entry = json.loads(archive.read_text(encoding="utf-8").strip())
    assert entry["type"] == "command_error"
    assert entry["command"] == "claim"
    assert entry["user_id"] == 42
    assert "OSError: disk full" in entry["trace"]


def test_get_logger_level_comes_from_environment(monkeypatch):
    monkeypatch.setenv("LOG_LEVEL", "warning")
    log = claim_logger.get_logger("claimrewards.test.level")
    assert log.level == logging.WARNING
