import asyncio
import json
import logging
import runpy
import sys

import httpx
import pytest

from telemetry.cli import main, parse_args, replay

SNAPSHOT = {
    "timing": {"navigationStart": 0, "requestStart": 5, "responseStart": 30},
    "entries": [{"name": "", "entryType": "largest-contentful-paint", "startTime": 700.0}],
}


def test_parse_args():
    args = parse_args(
        ["--snapshot", "s.json", "--endpoint", "https://site.example", "--page-url", "/"]
    )

    assert args.snapshot == "s.json"
    assert args.timeout == 5.0


def test_replay_posts_lcp_and_bundle(tmp_path):
    path = tmp_path / "snapshot.json"
    path.write_text(json.dumps(SNAPSHOT), encoding="utf-8")
    paths = []

    def handler(request):
        paths.append(request.url.path)
        return httpx.Response(200, json={"success": True})

    started = asyncio.run(
        replay(
            str(path),
            "https://site.example",
            "https://site.example/",
            transport=httpx.MockTransport(handler),
        )
    )

    assert started is True
    assert sorted(paths) == ["/api/performance", "/api/performance/lcp"]


def _args(snapshot):
    return ["--snapshot", str(snapshot), "--endpoint", "https://site.example", "--page-url", "/"]


def test_missing_snapshot_file_exits_with_error(tmp_path, caplog):
    with caplog.at_level(logging.ERROR, logger="telemetry.cli"):
        assert main(_args(tmp_path / "missing.json")) == 1

    assert "Could not read snapshot" in caplog.text


def test_snapshot_that_is_not_json_exits_with_error(tmp_path):
    path = tmp_path / "snapshot.json"
    path.write_text("{not json", encoding="utf-8")

    assert main(_args(path)) == 1


def test_entry_without_entry_type_exits_with_error(tmp_path, caplog):
    path = tmp_path / "snapshot.json"
    path.write_text(
        json.dumps({"timing": {}, "entries": [{"name": "", "startTime": 1.0}]}),
        encoding="utf-8",
    )

    with caplog.at_level(logging.ERROR, logger="telemetry.cli"):
        assert main(_args(path)) == 1

    assert "entryType" in caplog.text


def test_module_entry_point_runs_main(tmp_path, monkeypatch):
    monkeypatch.setattr(sys, "argv", ["telemetry", *_args(tmp_path / "missing.json")])

    with pytest.raises(SystemExit) as exc_info:
        runpy.run_module("telemetry", run_name="__main__")

    assert exc_info.value.code == 1
