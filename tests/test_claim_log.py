import json
from datetime import datetime, timedelta, timezone

import pytest

from claimrewards_bot.utils.claim_log import ClaimLog
from claimrewards_bot.utils.models import LoadOutcome, parse_timestamp


class _Clock:
    def __init__(self, start):
        self.now = start

    def __call__(self):
        current = self.now
        self.now = self.now + timedelta(seconds=1)
        return current


def _log(tmp_path, content=None, clock=None):
    path = tmp_path / "claimed_rewards.json"
    if content is not None:
        path.write_text(content, encoding="utf-8")
    return ClaimLog(path, clock=clock)


def test_missing_file_is_created(tmp_path):
    log = _log(tmp_path)
    assert log.load().outcome is LoadOutcome.CREATED
    assert json.loads(log.path.read_text(encoding="utf-8")) == {"claims": []}


@pytest.mark.parametrize("content", ['{"claims": null}', "{}"])
def test_missing_claims_field_loads_empty(tmp_path, content):
    log = _log(tmp_path, content)
    result = log.load()
    assert result.outcome is LoadOutcome.LOADED
    assert len(log) == 0


@pytest.mark.parametrize("content", ["not json at all", '{"claims": "nope"}', '{"claims": [{"steamid": "x"}]}', "[]"])
def test_malformed_file_recovers_empty(tmp_path, content):
    log = _log(tmp_path, content)
    result = log.load()
    assert result.outcome is LoadOutcome.RECOVERED
    assert len(log) == 0


def test_null_document_recovers(tmp_path):
    log = _log(tmp_path, "null")
    assert log.load().recovered


def test_log_claim_appends_and_persists(tmp_path):
    clock = _Clock(datetime(2024, 5, 1, 12, 0, 0, 123456, tzinfo=timezone.utc))
    log = _log(tmp_path, clock=clock)
    log.load()
    record = log.log_claim("76561198000000001", 50)

    assert record.user_id == "76561198000000001"
    assert record.amount_claimed == 50
    assert record.timestamp == "2024-05-01T12:00:00.123456Z"

    on_disk = json.loads(log.path.read_text(encoding="utf-8"))
    assert on_disk == {
        "claims": [
            {"steamid": "76561198000000001", "timestamp": "2024-05-01T12:00:00.123456Z", "amount_claimed": 50}
        ]
    }


def test_timestamp_is_utc_and_round_trips(tmp_path):
    log = _log(tmp_path)
    log.load()
    before = datetime.now(timezone.utc)
    record = log.log_claim("u1", 3)
    after = datetime.now(timezone.utc)
    parsed = parse_timestamp(record.timestamp)
    assert before <= parsed <= after
    assert record.timestamp.endswith("Z")


def test_records_are_immutable(tmp_path):
    log = _log(tmp_path)
    log.load()
    record = log.log_claim("u1", 3)
    with pytest.raises(Exception):
        record.amount_claimed = 99


def test_round_trip_preserves_order(tmp_path):
    clock = _Clock(datetime(2024, 1, 1, tzinfo=timezone.utc))
    log = _log(tmp_path, clock=clock)
    log.load()
    written = [log.log_claim(f"user{i % 3}", i) for i in range(12)]

    reloaded = ClaimLog(log.path)
    assert reloaded.load().count == 12
    assert list(reloaded.records) == written
    timestamps = [r.timestamp for r in reloaded.records]
    assert timestamps == sorted(timestamps)


def test_claims_for_filters_by_user(tmp_path):
    log = _log(tmp_path)
    log.load()
    log.log_claim("a", 1)
    log.log_claim("b", 2)
    log.log_claim("a", 3)
    assert [r.amount_claimed for r in log.claims_for("a")] == [1, 3]


def test_save_failure_is_raised(tmp_path, monkeypatch):
    log = _log(tmp_path)
    log.load()

    def _fail(path, data):
        raise OSError("read-only filesystem")

    monkeypatch.setattr("claimrewards_bot.utils.persistence.write_json", _fail)
    with pytest.raises(OSError):
        log.log_claim("u1", 5)


def test_loads_existing_file_written_elsewhere(tmp_path):
    content = json.dumps({
        "claims": [
            {"steamid": "76561198000000001", "timestamp": "2024-09-01T10:00:00.1234567Z", "amount_claimed": 5}
        ]
    })
    log = _log(tmp_path, content)
    assert log.load().outcome is LoadOutcome.LOADED
    assert log.records[0].timestamp == "2024-09-01T10:00:00.1234567Z"


def test_byte_order_mark_is_tolerated(tmp_path):
    path = tmp_path / "claimed_rewards.json"
    document = {"claims": [{"steamid": "u1", "timestamp": "2024-01-01T00:00:00.000000Z", "amount_claimed": 4}]}
    path.write_bytes(b"\xef\xbb\xbf" + json.dumps(document).encode("utf-8"))
    log = ClaimLog(path)
    assert log.load().outcome is LoadOutcome.LOADED
    assert log.records[0].amount_claimed == 4
