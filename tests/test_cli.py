from __future__ import annotations

from pathlib import Path

import pytest
from click.testing import CliRunner

from gae_deploy_kit import cli


def _write_env(tmp_path: Path, body: str) -> None:
    (tmp_path / ".env.gae").write_text(body, encoding="utf-8")


def test_plan_prints_config(tmp_path: Path) -> None:
    _write_env(tmp_path, "GAE_ENVIRONMENT=flexible\nGAE_PROJECT_ID=my-project\n")

    result = CliRunner().invoke(cli.main, ["-C", str(tmp_path), "plan", "-a"])

    assert result.exit_code == 0, result.output
    assert "# Deploy plan" in result.output
    assert "- projectId: 'my-project'" in result.output
    assert "GAE_PROJECT_ID=my-project" in result.output


def test_plan_without_environment_fails(tmp_path: Path) -> None:
    result = CliRunner().invoke(cli.main, ["-C", str(tmp_path), "plan"])

    assert result.exit_code == 1
    assert "GAE_ENVIRONMENT" in result.output


def test_deploy_rejects_unknown_task(tmp_path: Path) -> None:
    _write_env(tmp_path, "GAE_ENVIRONMENT=standard\n")

    result = CliRunner().invoke(cli.main, ["-C", str(tmp_path), "deploy", "--only", "cron,bogus"])

    assert result.exit_code == 1
    assert "bogus" in result.output


def test_deploy_all_and_only_are_exclusive(tmp_path: Path) -> None:
    _write_env(tmp_path, "GAE_ENVIRONMENT=standard\n")

    result = CliRunner().invoke(
        cli.main, ["-C", str(tmp_path), "deploy", "--all", "--only", "cron"]
    )

    assert result.exit_code == 1


def test_deploy_reports_target_error(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    _write_env(tmp_path, "GAE_ENVIRONMENT=flexible\nGAE_PROJECT_ID=APPENGINE_CONFIG\nGAE_VERSION=v1\n")
    staging = tmp_path / "build" / "staged-app"
    staging.mkdir(parents=True)
    (staging / "app.yaml").write_text("", encoding="utf-8")

    result = CliRunner().invoke(cli.main, ["-C", str(tmp_path), "deploy", "--skip-stage"])

    assert result.exit_code == 1
    assert "배포 대상 설정 오류" in result.output
    assert "flexible 환경 프로젝트에서 사용할 수 없습니다" in result.output


def test_deploy_passes_options(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    _write_env(tmp_path, "GAE_ENVIRONMENT=standard\n")
    seen = {}

    def fake_apply_all(cfg, **kwargs):  # noqa: ANN001, ANN003
        seen.update(kwargs)
        return "# Deploy summary", False

    monkeypatch.setattr(cli, "apply_all", fake_apply_all)

    result = CliRunner().invoke(
        cli.main, ["-C", str(tmp_path), "deploy", "--only", "queue, cron", "--skip-stage"]
    )

    assert result.exit_code == 0, result.output
    assert seen == {"deploy_all": False, "only_tasks": ["queue", "cron"], "skip_stage": True}
    assert "# Deploy summary" in result.output


def test_deploy_failure_exit_code(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    _write_env(tmp_path, "GAE_ENVIRONMENT=standard\n")
    monkeypatch.setattr(cli, "apply_all", lambda cfg, **kw: ("## Failed\n- app", True))  # noqa: ARG005

    result = CliRunner().invoke(cli.main, ["-C", str(tmp_path), "deploy", "--all"])

    assert result.exit_code == 1


def test_init_copies_template(tmp_path: Path) -> None:
    result = CliRunner().invoke(cli.main, ["-C", str(tmp_path), "init"])

    assert result.exit_code == 0, result.output
    assert "GAE_ENVIRONMENT" in (tmp_path / "env.gae.example").read_text(encoding="utf-8")

    again = CliRunner().invoke(cli.main, ["-C", str(tmp_path), "init"])
    assert "건너뜀" in again.output
