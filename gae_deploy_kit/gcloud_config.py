"""
gcloud_config
-------------

로컬에 저장된 gcloud 설정(`gcloud config list`)을 읽기 전용으로 조회하는 모듈.
이 패키지는 gcloud 설정을 절대 변경하지 않는다.
"""

from __future__ import annotations

import json
from typing import Any, Dict, Optional

from .cloud_sdk import find_gcloud
from .logging_utils import get_logger
from .subprocess_utils import run_command


logger = get_logger(__name__)


class GcloudConfig:
    """
    gcloud 경로는 실제 조회 시점에 찾는다. (리터럴 설정만 쓰면 SDK 가 없어도 된다)
    """

    def __init__(
        self,
        gcloud: Optional[str] = None,
        *,
        cloud_sdk_home: Optional[str] = None,
        timeout: float = 60.0,
    ) -> None:
        self._gcloud = gcloud
        self._cloud_sdk_home = cloud_sdk_home
        self._timeout = timeout

    def _list(self) -> Dict[str, Any]:
        gcloud = self._gcloud or find_gcloud(self._cloud_sdk_home)
        cmd = [gcloud, "config", "list", "--format=json"]
        result = run_command(cmd, timeout=self._timeout)
        try:
            data = json.loads(result.stdout or "{}")
        except json.JSONDecodeError as e:
            raise RuntimeError(
                f"gcloud config 출력 파싱 실패: {e}"
            ) from e
        return data if isinstance(data, dict) else {}

    def get_project(self) -> Optional[str]:
        """
        `core/project` 값. 설정되어 있지 않으면 None.
        """
        core = self._list().get("core") or {}
        project = core.get("project")
        if not project or not str(project).strip():
            logger.debug("gcloud config 에 core/project 가 없습니다.")
            return None
        return str(project).strip()
