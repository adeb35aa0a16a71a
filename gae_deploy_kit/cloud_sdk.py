"""
cloud_sdk
---------

Cloud SDK(gcloud, Java appcfg) 실행 파일 위치를 찾는 모듈.

CLOUD_SDK_HOME 이 지정되어 있으면 그 아래만 보고, 없으면 PATH 에서 gcloud 를 찾은 뒤
`<sdk_root>/bin/gcloud` 구조를 이용해 SDK 루트를 역산한다.
"""

from __future__ import annotations

import os
import shutil
from typing import Optional

from .logging_utils import get_logger


logger = get_logger(__name__)


INSTALL_HINT = "Google Cloud SDK 를 설치하세요: https://cloud.google.com/sdk/"

APPCFG_RELATIVE_PATH = os.path.join(
    "platform", "google_appengine", "google", "appengine", "tools", "java", "bin", "appcfg.sh"
)


def find_gcloud(cloud_sdk_home: Optional[str] = None) -> str:
    """
    gcloud 실행 파일의 절대 경로를 돌려준다.
    """
    if cloud_sdk_home:
        path = os.path.join(cloud_sdk_home, "bin", "gcloud")
        if os.path.isfile(path) and os.access(path, os.X_OK):
            return path
        raise RuntimeError(
            f"CLOUD_SDK_HOME 아래에서 gcloud 를 찾을 수 없습니다: {path}. {INSTALL_HINT}"
        )

    found = shutil.which("gcloud")
    if not found:
        raise RuntimeError(f"PATH 에서 gcloud 를 찾을 수 없습니다. {INSTALL_HINT}")
    return os.path.realpath(found)


def find_sdk_root(cloud_sdk_home: Optional[str] = None) -> str:
    if cloud_sdk_home:
        return cloud_sdk_home
    # gcloud 는 <sdk_root>/bin/gcloud
    return os.path.dirname(os.path.dirname(find_gcloud()))


def find_appcfg(cloud_sdk_home: Optional[str] = None) -> str:
    """
    standard 환경 staging 에 쓰는 Java appcfg.sh 경로.
    `gcloud components install app-engine-java` 로 설치된다.
    """
    path = os.path.join(find_sdk_root(cloud_sdk_home), APPCFG_RELATIVE_PATH)
    if not os.path.isfile(path):
        raise RuntimeError(
            f"appcfg.sh 를 찾을 수 없습니다: {path} "
            "(`gcloud components install app-engine-java` 로 설치하세요)"
        )
    logger.debug("appcfg 경로: %s", path)
    return path
