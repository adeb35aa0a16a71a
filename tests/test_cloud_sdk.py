from __future__ import annotations

import os
import stat
from pathlib import Path

import pytest

from gae_deploy_kit import cloud_sdk


def _fake_sdk(root: Path, *, with_appcfg: bool = True) -> None:
    gcloud = root / "bin" / "gcloud"
    gcloud.parent.mkdir(parents=True)
    gcloud.write_text("#!/bin/sh\n", encoding="utf-8")
    gcloud.chmod(gcloud.stat().st_mode | stat.S_IXUSR)
    if with_appcfg:
        appcfg = root / cloud_sdk.APPCFG_RELATIVE_PATH
        appcfg.parent.mkdir(parents=True)
        appcfg.write_text("#!/bin/sh\n", encoding="utf-8")


def test_find_gcloud_from_cloud_sdk_home(tmp_path: Path) -> None:
    _fake_sdk(tmp_path)

    assert cloud_sdk.find_gcloud(str(tmp_path)) == os.path.join(str(tmp_path), "bin", "gcloud")


def test_find_gcloud_missing_in_cloud_sdk_home(tmp_path: Path) -> None:
    with pytest.raises(RuntimeError) as excinfo:
        cloud_sdk.find_gcloud(str(tmp_path))

    assert "CLOUD_SDK_HOME" in str(excinfo.value)


def test_find_gcloud_on_path(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    _fake_sdk(tmp_path)
    monkeypatch.setenv("PATH", str(tmp_path / "bin"))

    assert cloud_sdk.find_gcloud() == os.path.realpath(str(tmp_path / "bin" / "gcloud"))


def test_find_gcloud_not_installed(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("PATH", str(tmp_path))

    with pytest.raises(RuntimeError):
        cloud_sdk.find_gcloud()


def test_find_appcfg(tmp_path: Path) -> None:
    _fake_sdk(tmp_path)

    assert cloud_sdk.find_appcfg(str(tmp_path)) == os.path.join(
        str(tmp_path), cloud_sdk.APPCFG_RELATIVE_PATH
    )


def test_find_appcfg_missing_component(tmp_path: Path) -> None:
    _fake_sdk(tmp_path, with_appcfg=False)

    with pytest.raises(RuntimeError) as excinfo:
        cloud_sdk.find_appcfg(str(tmp_path))

    assert "app-engine-java" in str(excinfo.value)
