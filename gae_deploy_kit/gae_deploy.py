"""
gae_deploy
----------

`gcloud app deploy` 호출을 담당하는 모듈.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import List, Optional, Sequence

from .cloud_sdk import find_gcloud
from .config import DeployConfig
from .logging_utils import get_logger
from .subprocess_utils import run_command


logger = get_logger(__name__)


@dataclass(frozen=True)
class DeployTarget:
    project_id: Optional[str]
    # None 이면 gcloud 가 버전을 생성한다
    version: Optional[str]


def _bool_flag(name: str, value: Optional[bool]) -> List[str]:
    if value is None:
        return []
    return [f"--{name}" if value else f"--no-{name}"]


def build_deploy_command(
    gcloud: str,
    deployables: Sequence[str],
    *,
    project_id: Optional[str] = None,
    version: Optional[str] = None,
    bucket: Optional[str] = None,
    image_url: Optional[str] = None,
    promote: Optional[bool] = None,
    stop_previous_version: Optional[bool] = None,
    server: Optional[str] = None,
) -> List[str]:
    cmd = [gcloud, "app", "deploy", *deployables]
    if bucket:
        cmd.append(f"--bucket={bucket}")
    if image_url:
        cmd.append(f"--image-url={image_url}")
    cmd += _bool_flag("promote", promote)
    if server:
        cmd.append(f"--server={server}")
    cmd += _bool_flag("stop-previous-version", stop_previous_version)
    if version:
        cmd.append(f"--version={version}")
    if project_id:
        cmd.append(f"--project={project_id}")
    cmd.append("--quiet")
    return cmd


def deploy(cfg: DeployConfig, deployables: Sequence[str], target: DeployTarget) -> None:
    """
    주어진 파일들을 한 번의 gcloud app deploy 로 배포한다.
    """
    if not deployables:
        raise ValueError("배포할 파일이 없습니다. (staging 이 실행되었는지 확인하세요)")

    logger.info(
        "App Engine 배포: project=%s version=%s files=%s",
        target.project_id or "(gcloud 기본값)",
        target.version or "(gcloud 생성)",
        list(deployables),
    )
    cmd = build_deploy_command(
        find_gcloud(cfg.cloud_sdk_home),
        deployables,
        project_id=target.project_id,
        version=target.version,
        bucket=cfg.bucket,
        image_url=cfg.image_url,
        promote=cfg.promote,
        stop_previous_version=cfg.stop_previous_version,
        server=cfg.server,
    )
    run_command(cmd, timeout=cfg.command_timeout, stream_output=True)
