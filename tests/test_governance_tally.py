import json

import pytest

import governance_tally
from conftest import ZERO_ADDRESS
from mvx_governance.fetch_governance_events import FetchError, GovernanceEventsClient


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in ("ES_URL", "GOVERNANCE_SC", "EVENT_LIMIT", "CACHE_TTL_MS",
                 "FETCH_TIMEOUT", "FETCH_MAX_TRIES", "LEADERBOARD_SIZE"):
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def saved_response(tmp_path, make_vote, make_delegate_vote):
    hits = [
        {"_source": make_vote("yes", stake=10 ** 18, power=2 * 10 ** 18)},
        {"_source": make_delegate_vote("ncv", stake=5, power=7)},
    ]
    path = tmp_path / "events.json"
    path.write_text(json.dumps({"hits": {"total": {"value": 2}, "hits": hits}}))
    return path


def test_offline_report(saved_response, capsys):
    assert governance_tally.main(["--input", str(saved_response)]) == 0
    out = capsys.readouterr().out
    assert "[TOTALS]" in out
    assert "2.0000 EGLD" in out
    assert "Legacy Delegation" in out
    assert ZERO_ADDRESS in out


def test_offline_export(saved_response, tmp_path):
    out_dir = tmp_path / "export"
    assert governance_tally.main(
        ["--input", str(saved_response), "--output-dir", str(out_dir), "--format", "both", "-q"]) == 0
    assert (out_dir / "vote_totals.csv").exists()
    assert (out_dir / "leaderboard_veto.parquet").exists()


def test_bare_record_list(tmp_path, make_vote):
    path = tmp_path / "records.json"
    path.write_text(json.dumps([make_vote("no", power=1)]))
    assert governance_tally.load_hits_from_file(path)[0]["identifier"] == "vote"


def test_unreadable_input(tmp_path):
    path = tmp_path / "broken.json"
    path.write_text(json.dumps({"took": 1}))
    assert governance_tally.main(["--input", str(path)]) == 2
    assert governance_tally.main(["--input", str(tmp_path / "missing.json")]) == 2


def test_limit_out_of_range():
    assert governance_tally.main(["--limit", "10"]) == 2


def test_fetch_failure_exits_with_error(monkeypatch, capsys):
    def fail(self, limit):
        raise FetchError("HTTP 503", status_code=503)

    monkeypatch.setattr(GovernanceEventsClient, "fetch_events", fail)
    assert governance_tally.main(["--no-cache"]) == 1
    assert "Error fetching data" in capsys.readouterr().out


def test_live_fetch_uses_client(monkeypatch, make_vote, capsys):
    seen = {}

    def fetch(self, limit):
        seen["limit"] = limit
        seen["url"] = self.es_url
        return [{"_source": make_vote("abstain", power=10 ** 18)}]

    monkeypatch.setattr(GovernanceEventsClient, "fetch_events", fetch)
    assert governance_tally.main(["--limit", "200", "--es-url", "http://localhost:9200/events/_search"]) == 0
    assert seen == {"limit": 200, "url": "http://localhost:9200/events/_search"}
    assert "ABSTAIN" in capsys.readouterr().out
