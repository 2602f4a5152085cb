import json

import pytest

from claimrewards_bot.utils.ledger import RewardLedger
from claimrewards_bot.utils.models import LoadOutcome


def _ledger(tmp_path, content=None):
    path = tmp_path / "rewards.json"
    if content is not None:
        path.write_text(content, encoding="utf-8")
    return RewardLedger(path)


def test_missing_file_is_created_empty(tmp_path):
    ledger = _ledger(tmp_path)
    result = ledger.load()
    assert result.outcome is LoadOutcome.CREATED
    assert len(ledger) == 0
    assert json.loads(ledger.path.read_text(encoding="utf-8")) == {}


def test_load_existing_entries(tmp_path):
    ledger = _ledger(tmp_path, json.dumps({"76561198000000001": 50, "76561198000000002": 0}))
    result = ledger.load()
    assert result.outcome is LoadOutcome.LOADED
    assert result.count == 2
    assert ledger.has_reward("76561198000000001")
    assert ledger.get_reward_amount("76561198000000001") == 50
    # zero is still a pending entry
    assert ledger.has_reward("76561198000000002")


def test_absent_amount_is_zero(tmp_path):
    ledger = _ledger(tmp_path, "{}")
    ledger.load()
    assert ledger.has_reward("nobody") is False
    assert ledger.get_reward_amount("nobody") == 0


@pytest.mark.parametrize("content", ["{not json", "", "[1, 2, 3]", '{"a": "lots"}', '{"a": -5}'])
def test_malformed_file_recovers_empty(tmp_path, content):
    ledger = _ledger(tmp_path, content)
    result = ledger.load()
    assert result.outcome is LoadOutcome.RECOVERED
    assert result.error
    assert len(ledger) == 0


def test_null_document_recovers_empty(tmp_path):
    ledger = _ledger(tmp_path, "null")
    result = ledger.load()
    assert result.recovered
    assert len(ledger) == 0


def test_recovered_ledger_saves_valid_file(tmp_path):
    ledger = _ledger(tmp_path, "{oops")
    ledger.load()
    ledger.save()
    assert json.loads(ledger.path.read_text(encoding="utf-8")) == {}


def test_permission_error_on_load_propagates(tmp_path, monkeypatch):
    ledger = _ledger(tmp_path, "{}")

    def _denied(path):
        raise PermissionError("denied")

    monkeypatch.setattr("claimrewards_bot.utils.persistence.read_json", _denied)
    with pytest.raises(PermissionError):
        ledger.load()


def test_unexpected_error_on_load_propagates(tmp_path, monkeypatch):
    ledger = _ledger(tmp_path, "{}")

    def _boom(path):
        raise RuntimeError("boom")

    monkeypatch.setattr("claimrewards_bot.utils.persistence.read_json", _boom)
    with pytest.raises(RuntimeError):
        ledger.load()


def test_remove_reward_writes_only_on_change(tmp_path, monkeypatch):
    ledger = _ledger(tmp_path, json.dumps({"u1": 10}))
    ledger.load()
    saves = []
    monkeypatch.setattr(ledger, "save", lambda: saves.append(1))

    assert ledger.remove_reward("missing") is False
    assert saves == []

    assert ledger.remove_reward("u1") is True
    assert saves == [1]
    assert not ledger.has_reward("u1")


def test_remove_reward_persists(tmp_path):
    ledger = _ledger(tmp_path, json.dumps({"u1": 10, "u2": 20}))
    ledger.load()
    ledger.remove_reward("u1")
    assert json.loads(ledger.path.read_text(encoding="utf-8")) == {"u2": 20}


def test_save_failure_is_raised(tmp_path, monkeypatch):
    ledger = _ledger(tmp_path, json.dumps({"u1": 10}))
    ledger.load()

    def _fail(path, data):
        raise OSError("disk full")

    monkeypatch.setattr("claimrewards_bot.utils.persistence.write_json", _fail)
    with pytest.raises(OSError):
        ledger.remove_reward("u1")


def test_set_reward_validates_amount(tmp_path):
    ledger = _ledger(tmp_path)
    ledger.load()
    with pytest.raises(ValueError):
        ledger.set_reward("u1", -1)
    with pytest.raises(ValueError):
        ledger.set_reward("u1", 2.5)
    with pytest.raises(ValueError):
        ledger.set_reward("u1", True)
    assert not ledger.has_reward("u1")


def test_set_reward_overwrites(tmp_path):
    ledger = _ledger(tmp_path)
    ledger.load()
    ledger.set_reward("u1", 5)
    ledger.set_reward("u1", 7)
    assert ledger.get_reward_amount("u1") == 7
    assert len(ledger) == 1


def test_round_trip_many_entries(tmp_path):
    ledger = _ledger(tmp_path)
    ledger.load()
    expected = {f"7656119800000{i:04d}": i * 3 for i in range(40)}
    for uid, amount in expected.items():
        ledger.set_reward(uid, amount)

    reloaded = RewardLedger(ledger.path)
    assert reloaded.load().outcome is LoadOutcome.LOADED
    assert reloaded.rewards() == expected


def test_saved_file_is_indented(tmp_path):
    ledger = _ledger(tmp_path)
    ledger.load()
    ledger.set_reward("u1", 1)
    text = ledger.path.read_text(encoding="utf-8")
    assert text.startswith("{\n  ")


def test_byte_order_mark_is_tolerated(tmp_path):
    path = tmp_path / "rewards.json"
    path.write_bytes(b"\xef\xbb\xbf" + json.dumps({"76561198000000001": 50}).encode("utf-8"))
    ledger = RewardLedger(path)
    result = ledger.load()
    assert result.outcome is LoadOutcome.LOADED
    assert ledger.get_reward_amount("76561198000000001") == 50
