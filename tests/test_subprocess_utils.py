from __future__ import annotations

import io
import sys

import pytest

from gae_deploy_kit.subprocess_utils import run_command


def test_capture_mode_returns_output() -> None:
    result = run_command([sys.executable, "-c", "print('hello')"], timeout=10)

    assert result.returncode == 0
    assert result.stdout.strip() == "hello"


def test_capture_mode_failure_includes_stderr() -> None:
    cmd = [sys.executable, "-c", "import sys; sys.stderr.write('boom'); sys.exit(3)"]

    with pytest.raises(RuntimeError) as excinfo:
        run_command(cmd, timeout=10)

    assert "exit=3" in str(excinfo.value)
    assert "boom" in str(excinfo.value)


def test_missing_binary_raises_runtime_error() -> None:
    with pytest.raises(RuntimeError) as excinfo:
        run_command(["definitely-not-a-real-gcloud-binary"])

    assert "필요한 명령을 찾을 수 없습니다" in str(excinfo.value)


def test_stream_mode_echoes_and_collects(monkeypatch: pytest.MonkeyPatch) -> None:
    fake_out = io.StringIO()
    monkeypatch.setattr(sys, "stdout", fake_out)

    cmd = [sys.executable, "-c", "import sys; print('out'); sys.stderr.write('err\\n')"]
    result = run_command(cmd, stream_output=True, timeout=10)

    assert result.returncode == 0
    assert "out" in result.stdout
    assert "err" in result.stdout
    assert "out" in fake_out.getvalue()


def test_stream_mode_failure(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(sys, "stdout", io.StringIO())

    cmd = [sys.executable, "-c", "import sys; print('partial'); sys.exit(2)"]
    with pytest.raises(RuntimeError) as excinfo:
        run_command(cmd, stream_output=True, timeout=10)

    assert "exit=2" in str(excinfo.value)
    assert "partial" in str(excinfo.value)


def test_stream_mode_timeout(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(sys, "stdout", io.StringIO())

    cmd = [sys.executable, "-c", "import time; time.sleep(5)"]
    with pytest.raises(RuntimeError) as excinfo:
        run_command(cmd, stream_output=True, timeout=0.3)

    assert "초 안에 끝나지 않았습니다" in str(excinfo.value)
