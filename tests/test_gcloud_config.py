from __future__ import annotations

import json
from typing import List

import pytest

from gae_deploy_kit import gcloud_config
from gae_deploy_kit.subprocess_utils import RunResult


def _fake_run(stdout: str, calls: List[list[str]]):
    def fake_run_command(cmd, *, timeout=None):  # noqa: ANN001, ARG001
        calls.append(list(cmd))
        return RunResult(returncode=0, stdout=stdout, stderr="")

    return fake_run_command


def test_get_project(monkeypatch: pytest.MonkeyPatch) -> None:
    calls: List[list[str]] = []
    payload = json.dumps({"core": {"account": "me@example.com", "project": "my-project"}})
    monkeypatch.setattr(gcloud_config, "run_command", _fake_run(payload, calls))

    config = gcloud_config.GcloudConfig("/sdk/bin/gcloud")

    assert config.get_project() == "my-project"
    assert calls == [["/sdk/bin/gcloud", "config", "list", "--format=json"]]


@pytest.mark.parametrize(
    "payload",
    [
        "{}",
        json.dumps({"core": {"account": "me@example.com"}}),
        json.dumps({"core": {"project": ""}}),
        "",
    ],
)
def test_get_project_absent(monkeypatch: pytest.MonkeyPatch, payload: str) -> None:
    monkeypatch.setattr(gcloud_config, "run_command", _fake_run(payload, []))

    assert gcloud_config.GcloudConfig("gcloud").get_project() is None


def test_invalid_json_raises_runtime_error(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(gcloud_config, "run_command", _fake_run("not json", []))

    with pytest.raises(RuntimeError):
        gcloud_config.GcloudConfig("gcloud").get_project()


def test_gcloud_located_lazily(monkeypatch: pytest.MonkeyPatch) -> None:
    calls: List[list[str]] = []
    monkeypatch.setattr(gcloud_config, "find_gcloud", lambda home: f"{home}/bin/gcloud")
    monkeypatch.setattr(gcloud_config, "run_command", _fake_run("{}", calls))

    config = gcloud_config.GcloudConfig(cloud_sdk_home="/opt/sdk")
    assert calls == []

    config.get_project()
    assert calls[0][0] == "/opt/sdk/bin/gcloud"
