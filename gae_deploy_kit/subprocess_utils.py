from __future__ import annotations

import subprocess
import sys
import threading
from dataclasses import dataclass
from textwrap import shorten
from typing import Mapping, Sequence

from .logging_utils import get_logger


logger = get_logger(__name__)


@dataclass(frozen=True)
class RunResult:
    returncode: int
    stdout: str
    stderr: str


def _not_found(cmd: Sequence[str]) -> RuntimeError:
    return RuntimeError(
        f"필요한 명령을 찾을 수 없습니다: {cmd[0]} "
        "(Cloud SDK 가 설치되어 있는지, CLOUD_SDK_HOME 이 올바른지 확인하세요)"
    )


def _timed_out(cmd: Sequence[str], timeout: float | None) -> RuntimeError:
    return RuntimeError(
        f"명령 실행이 {timeout}초 안에 끝나지 않았습니다: {' '.join(cmd)}"
    )


def _stream(
    cmd: Sequence[str],
    *,
    cwd: str | None,
    env: Mapping[str, str] | None,
    timeout: float | None,
) -> RunResult:
    # gcloud app deploy 는 진행 로그 대부분을 stderr 로 내보내므로 STDOUT 으로 합친다.
    try:
        proc = subprocess.Popen(  # noqa: S603
            list(cmd),
            cwd=cwd,
            env=dict(env) if env is not None else None,
            stdout=subprocess.PIPE,
            stderr=subprocess.STDOUT,
            text=True,
            bufsize=1,
        )
    except FileNotFoundError as e:
        raise _not_found(cmd) from e

    # 출력이 멈춘 채로 매달린 프로세스도 끊을 수 있도록 타이머로 kill 한다.
    timed_out = threading.Event()

    def _kill() -> None:
        timed_out.set()
        proc.kill()

    killer: threading.Timer | None = None
    if timeout is not None:
        killer = threading.Timer(float(timeout), _kill)
        killer.daemon = True
        killer.start()

    out_lines: list[str] = []
    try:
        assert proc.stdout is not None
        for line in proc.stdout:
            out_lines.append(line)
            sys.stdout.write(line)
            sys.stdout.flush()
        returncode = proc.wait()
    finally:
        if killer is not None:
            killer.cancel()
        if proc.stdout is not None:
            proc.stdout.close()

    if timed_out.is_set():
        raise _timed_out(cmd, timeout)

    if returncode != 0:
        combined = "".join(out_lines).strip()
        detail = "\nstdout/stderr:\n" + shorten(combined, width=2000) if combined else ""
        raise RuntimeError(
            f"명령 실행 실패: {' '.join(cmd)} (exit={returncode}){detail}"
        )

    return RunResult(returncode=returncode, stdout="".join(out_lines), stderr="")


def run_command(
    cmd: Sequence[str],
    *,
    cwd: str | None = None,
    env: Mapping[str, str] | None = None,
    timeout: float | None = 900.0,
    stream_output: bool = False,
) -> RunResult:
    """
    subprocess 실행 공통 유틸.

    - stream_output=False: stdout/stderr 캡처, 실패 시 요약 포함
    - stream_output=True : stdout/stderr 를 실시간으로 터미널에 흘린다(배포 진행 상황 확인 용이)
    """
    logger.info("명령 실행: %s", " ".join(cmd))

    if stream_output:
        return _stream(cmd, cwd=cwd, env=env, timeout=timeout)

    try:
        result = subprocess.run(
            list(cmd),
            check=True,
            capture_output=True,
            text=True,
            timeout=timeout,
            cwd=cwd,
            env=dict(env) if env is not None else None,
        )
    except FileNotFoundError as e:
        raise _not_found(cmd) from e
    except subprocess.TimeoutExpired as e:
        raise _timed_out(cmd, timeout) from e
    except subprocess.CalledProcessError as e:
        stdout = (e.stdout or "").strip()
        stderr = (e.stderr or "").strip()
        detail = ""
        if stderr:
            detail = "\nstderr:\n" + shorten(stderr, width=2000)
        elif stdout:
            detail = "\nstdout:\n" + shorten(stdout, width=2000)
        raise RuntimeError(
            f"명령 실행 실패: {' '.join(cmd)} (exit={e.returncode}){detail}"
        ) from e

    if result.stdout:
        logger.debug("명령 stdout: %s", shorten(result.stdout.strip(), width=2000))
    if result.stderr:
        logger.debug("명령 stderr: %s", shorten(result.stderr.strip(), width=2000))
    return RunResult(returncode=result.returncode, stdout=result.stdout or "", stderr=result.stderr or "")
