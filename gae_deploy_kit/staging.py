"""
staging
-------

배포 전에 staging 디렉토리를 만드는 모듈.

- standard : (WAR 가 있으면 먼저 풀고) appcfg.sh stage 로 app.yaml 등을 생성
- flexible : docker 컨텍스트, app.yaml, 빌드 산출물을 staging 디렉토리로 복사

두 경우 모두 이전 staging 결과는 지우고 새로 만든다.
"""

from __future__ import annotations

import os
import shutil
import zipfile

from .cloud_sdk import find_appcfg
from .config import DeployConfig
from .deployables import APP_YAML
from .logging_utils import get_logger
from .subprocess_utils import run_command


logger = get_logger(__name__)


def _recreate_dir(path: str) -> None:
    if os.path.exists(path):
        logger.debug("기존 디렉토리 삭제: %s", path)
        shutil.rmtree(path)
    os.makedirs(path)


def explode_war(war_file: str, exploded_dir: str) -> None:
    if not os.path.isfile(war_file):
        raise FileNotFoundError(f"WAR 파일이 존재하지 않습니다: {war_file}")

    logger.info("WAR 압축 해제: %s -> %s", war_file, exploded_dir)
    _recreate_dir(exploded_dir)
    with zipfile.ZipFile(war_file) as war:
        war.extractall(exploded_dir)


def stage_standard(cfg: DeployConfig) -> None:
    if not cfg.source_dir:
        raise ValueError("standard staging 에는 GAE_SOURCE_DIR 가 필요합니다.")

    if cfg.war_file:
        explode_war(cfg.war_file, cfg.source_dir)

    if not os.path.isdir(cfg.source_dir):
        raise FileNotFoundError(
            f"staging 할 애플리케이션 디렉토리가 없습니다: {cfg.source_dir} "
            "(GAE_WAR_FILE 을 지정하거나 빌드를 먼저 실행하세요)"
        )

    appcfg = find_appcfg(cfg.cloud_sdk_home)
    _recreate_dir(cfg.staging_dir)
    run_command(
        [appcfg, "stage", cfg.source_dir, cfg.staging_dir],
        timeout=cfg.command_timeout,
    )


def stage_flexible(cfg: DeployConfig) -> None:
    if not cfg.app_yaml_dir:
        raise ValueError("flexible staging 에는 GAE_APP_YAML_DIR 가 필요합니다.")
    if not cfg.artifact:
        raise ValueError("flexible staging 에는 GAE_ARTIFACT(jar/war 경로)가 필요합니다.")

    app_yaml = os.path.join(cfg.app_yaml_dir, APP_YAML)
    if not os.path.isfile(app_yaml):
        raise FileNotFoundError(f"app.yaml 이 존재하지 않습니다: {app_yaml}")
    if not os.path.isfile(cfg.artifact):
        raise FileNotFoundError(f"빌드 산출물이 존재하지 않습니다: {cfg.artifact}")

    _recreate_dir(cfg.staging_dir)

    if cfg.docker_dir and os.path.isdir(cfg.docker_dir):
        logger.info("docker 컨텍스트 복사: %s", cfg.docker_dir)
        shutil.copytree(cfg.docker_dir, cfg.staging_dir, dirs_exist_ok=True)
    else:
        logger.debug("docker 디렉토리가 없어 건너뜁니다: %s", cfg.docker_dir)

    shutil.copy2(app_yaml, os.path.join(cfg.staging_dir, APP_YAML))
    shutil.copy2(cfg.artifact, os.path.join(cfg.staging_dir, os.path.basename(cfg.artifact)))
    logger.info("flexible staging 완료: %s", cfg.staging_dir)


def stage(cfg: DeployConfig) -> None:
    logger.info("staging 시작 (%s): %s", cfg.environment, cfg.staging_dir)
    if cfg.is_standard:
        stage_standard(cfg)
    else:
        stage_flexible(cfg)
