"""
deployables
-----------

`gcloud app deploy` 에 넘길 YAML 파일 목록을 결정하는 모듈.

- app.yaml 은 staging 단계에서 생성되므로 항상 staging 디렉토리에서만 찾는다.
- cron/dispatch/dos/index/queue.yaml 은 appengine_dir 이 지정되면 그곳에서만,
  아니면 staging 디렉토리에서만 찾는다.
- 정해진 경로에 실제로 있는 파일만 포함한다. 다른 디렉토리를 뒤지지 않는다.
"""

from __future__ import annotations

import os
from typing import List, Optional

from .logging_utils import get_logger


logger = get_logger(__name__)


APP_YAML = "app.yaml"

# 순서가 곧 배포 인자 순서다.
CONFIG_YAMLS = (
    "cron.yaml",
    "dispatch.yaml",
    "dos.yaml",
    "index.yaml",
    "queue.yaml",
)


def _config_dir(staging_dir: str, appengine_dir: Optional[str]) -> str:
    return appengine_dir if appengine_dir is not None else staging_dir


def collect_deployables(staging_dir: str, appengine_dir: Optional[str] = None) -> List[str]:
    """
    배포 가능한 파일의 절대 경로 목록.
    순서는 app, cron, dispatch, dos, index, queue 로 고정.
    """
    deployables: List[str] = []

    app_yaml = os.path.abspath(os.path.join(staging_dir, APP_YAML))
    if os.path.isfile(app_yaml):
        deployables.append(app_yaml)
    else:
        logger.debug("staging 디렉토리에 app.yaml 이 없습니다: %s", staging_dir)

    config_dir = _config_dir(staging_dir, appengine_dir)
    for name in CONFIG_YAMLS:
        path = os.path.abspath(os.path.join(config_dir, name))
        if os.path.isfile(path):
            deployables.append(path)

    logger.debug("deployables: %s", deployables)
    return deployables


def config_deployable(name: str, staging_dir: str, appengine_dir: Optional[str] = None) -> str:
    """
    단일 설정 파일(cron.yaml 등) 배포용 경로.
    collect_deployables 와 같은 디렉토리 규칙을 따르고, 없으면 FileNotFoundError.
    """
    if name not in CONFIG_YAMLS:
        raise ValueError(
            f"지원하지 않는 설정 파일입니다: {name} (허용: {', '.join(CONFIG_YAMLS)})"
        )

    path = os.path.abspath(os.path.join(_config_dir(staging_dir, appengine_dir), name))
    if not os.path.isfile(path):
        raise FileNotFoundError(f"설정 파일이 존재하지 않습니다: {path}")
    return path
