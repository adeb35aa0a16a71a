from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Optional, List

from dotenv import load_dotenv


ENV_FILES_DEFAULT_ORDER = [".env", ".env.gae"]

ENVIRONMENT_STANDARD = "standard"
ENVIRONMENT_FLEXIBLE = "flexible"
ENVIRONMENTS = (ENVIRONMENT_STANDARD, ENVIRONMENT_FLEXIBLE)

DEFAULT_STAGING_DIR = os.path.join("build", "staged-app")
DEFAULT_SOURCE_DIR = os.path.join("build", "exploded-app")
DEFAULT_APPENGINE_WEB_XML = os.path.join("src", "main", "webapp", "WEB-INF", "appengine-web.xml")
DEFAULT_APP_YAML_DIR = os.path.join("src", "main", "appengine")
DEFAULT_DOCKER_DIR = os.path.join("src", "main", "docker")

# appcfg stage 가 XML 설정(cron.xml 등)을 YAML 로 변환해 두는 위치
STANDARD_GENERATED_DIR = os.path.join("WEB-INF", "appengine-generated")


def load_env_files(base_dir: str = ".",
                   files: Optional[List[str]] = None) -> None:
    """
    주어진 디렉토리에서 .env 계열 파일을 순서대로 로드한다.
    후순위 파일이 같은 키를 덮어쓴다.
    """
    order = files or ENV_FILES_DEFAULT_ORDER
    for name in order:
        path = os.path.join(base_dir, name)
        if os.path.exists(path):
            load_dotenv(path, override=True)


def _get_bool(name: str, default: bool = False) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.lower() in {"1", "true", "yes", "y"}


def _get_optional_bool(name: str) -> Optional[bool]:
    """
    미설정(None)과 false 를 구분해야 하는 gcloud 플래그용.
    None 이면 해당 플래그를 아예 넘기지 않는다.
    """
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return None
    return _get_bool(name)


def _anchor(raw: str, base_dir: str) -> str:
    if os.path.isabs(raw):
        return raw
    return os.path.abspath(os.path.join(base_dir, raw))


def _get_path(name: str, base_dir: str, default: Optional[str] = None) -> Optional[str]:
    raw = os.getenv(name) or default
    if not raw:
        return None
    return _anchor(raw, base_dir)


@dataclass
class DeployConfig:
    environment: str
    staging_dir: str

    # 배포 대상. 리터럴 또는 GCLOUD_CONFIG / APPENGINE_CONFIG
    project_id: Optional[str] = None
    version: Optional[str] = None

    # cron/dispatch/dos/index/queue.yaml 을 찾을 디렉토리 (없으면 staging_dir)
    appengine_dir: Optional[str] = None

    # standard
    appengine_web_xml: Optional[str] = None
    source_dir: Optional[str] = None
    war_file: Optional[str] = None

    # flexible
    app_yaml_dir: Optional[str] = None
    docker_dir: Optional[str] = None
    artifact: Optional[str] = None

    # gcloud app deploy 옵션
    bucket: Optional[str] = None
    image_url: Optional[str] = None
    server: Optional[str] = None
    promote: Optional[bool] = None
    stop_previous_version: Optional[bool] = None

    cloud_sdk_home: Optional[str] = None
    command_timeout: float = 1800.0

    @property
    def is_standard(self) -> bool:
        return self.environment == ENVIRONMENT_STANDARD

    @classmethod
    def from_env(cls, base_dir: str = ".") -> "DeployConfig":
        missing: List[str] = []
        def req(name: str) -> str:
            val = os.getenv(name)
            if not val:
                missing.append(name)
            return val or ""

        environment = req("GAE_ENVIRONMENT").strip().lower()
        if missing:
            raise ValueError(
                "필수 환경변수가 누락되었습니다: " + ", ".join(sorted(set(missing)))
            )
        if environment not in ENVIRONMENTS:
            raise ValueError(
                f"GAE_ENVIRONMENT 값이 올바르지 않습니다: {environment} "
                f"(허용: {', '.join(ENVIRONMENTS)})"
            )

        raw_timeout = os.getenv("GAE_COMMAND_TIMEOUT")
        try:
            command_timeout = float(raw_timeout) if raw_timeout else 1800.0
        except ValueError as e:
            raise ValueError(
                f"GAE_COMMAND_TIMEOUT 은 숫자(초)여야 합니다: {raw_timeout}"
            ) from e

        staging_dir = _anchor(os.getenv("GAE_STAGING_DIR") or DEFAULT_STAGING_DIR, base_dir)

        cfg = cls(
            environment=environment,
            staging_dir=staging_dir,
            project_id=os.getenv("GAE_PROJECT_ID"),
            version=os.getenv("GAE_VERSION"),
            appengine_dir=_get_path("GAE_APPENGINE_DIR", base_dir),
            appengine_web_xml=_get_path("GAE_APPENGINE_WEB_XML", base_dir, DEFAULT_APPENGINE_WEB_XML),
            source_dir=_get_path("GAE_SOURCE_DIR", base_dir, DEFAULT_SOURCE_DIR),
            war_file=_get_path("GAE_WAR_FILE", base_dir),
            app_yaml_dir=_get_path("GAE_APP_YAML_DIR", base_dir, DEFAULT_APP_YAML_DIR),
            docker_dir=_get_path("GAE_DOCKER_DIR", base_dir, DEFAULT_DOCKER_DIR),
            artifact=_get_path("GAE_ARTIFACT", base_dir),
            bucket=os.getenv("GAE_BUCKET"),
            image_url=os.getenv("GAE_IMAGE_URL"),
            server=os.getenv("GAE_SERVER"),
            promote=_get_optional_bool("GAE_PROMOTE"),
            stop_previous_version=_get_optional_bool("GAE_STOP_PREVIOUS_VERSION"),
            cloud_sdk_home=os.getenv("CLOUD_SDK_HOME"),
            command_timeout=command_timeout,
        )

        # standard 는 appcfg stage 결과물 안의 generated 디렉토리,
        # flexible 은 app.yaml 과 같은 소스 디렉토리가 기본값
        if not cfg.appengine_dir:
            if cfg.is_standard:
                cfg.appengine_dir = os.path.join(cfg.staging_dir, STANDARD_GENERATED_DIR)
            else:
                cfg.appengine_dir = cfg.app_yaml_dir

        return cfg
