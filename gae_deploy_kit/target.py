"""
target
------

배포 대상(projectId, version)을 해석하는 모듈.

설정값은 리터럴이거나 두 예약어 중 하나다.

- GCLOUD_CONFIG    : 로컬 gcloud 설정에서 읽는다.
- APPENGINE_CONFIG : appengine-web.xml 에서 읽는다. (standard 전용)

원문 문자열은 TargetValue.parse 에서 한 번만 분류하고,
이후에는 TargetSource 로만 분기한다.
"""

from __future__ import annotations

import enum
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Callable, List, Optional, Protocol

from .config import DeployConfig
from .appengine_web import AppEngineWebDescriptor, read_descriptor
from .logging_utils import get_logger


logger = get_logger(__name__)


# 사용자 설정에 그대로 노출되는 예약어. 문자열을 바꾸면 안 된다.
GCLOUD_CONFIG = "GCLOUD_CONFIG"
APPENGINE_CONFIG = "APPENGINE_CONFIG"

PROJECT_ENV = "GAE_PROJECT_ID"
VERSION_ENV = "GAE_VERSION"


class TargetSource(enum.Enum):
    UNSET = "unset"
    LITERAL = "literal"
    GCLOUD_CONFIG = "gcloud-config"
    APPENGINE_CONFIG = "appengine-config"


@dataclass(frozen=True)
class TargetValue:
    source: TargetSource
    literal: Optional[str] = None

    @classmethod
    def parse(cls, raw: Optional[str]) -> "TargetValue":
        if raw is None or not raw.strip():
            return cls(TargetSource.UNSET)
        if raw == GCLOUD_CONFIG:
            return cls(TargetSource.GCLOUD_CONFIG)
        if raw == APPENGINE_CONFIG:
            return cls(TargetSource.APPENGINE_CONFIG)
        return cls(TargetSource.LITERAL, raw)

    def describe(self) -> str:
        if self.source is TargetSource.LITERAL:
            return f"'{self.literal}'"
        if self.source is TargetSource.UNSET:
            return "(not set)"
        return f"{self.source.value} 에서 읽음"


class DeployTargetError(ValueError):
    """
    projectId/version 을 어떤 방법으로도 정할 수 없을 때의 설정 오류.
    메시지에는 현재 환경에서 쓸 수 있는 설정 방법이 모두 들어간다.
    """


class IllegalTargetSourceError(DeployTargetError):
    """flexible 환경에서 APPENGINE_CONFIG 를 사용한 경우."""


class ProjectConfigReader(Protocol):
    def get_project(self) -> Optional[str]:
        ...


def _headline(what: str) -> str:
    return f"배포 {what} 값을 직접 지정하거나 시스템 상태에서 읽도록 설정해야 합니다"


def _project_options(standard: bool) -> List[str]:
    options = [
        f"1. {PROJECT_ENV}=my-project-id 로 직접 지정",
        f"2. {PROJECT_ENV}={GCLOUD_CONFIG} 로 gcloud config 의 project 사용",
    ]
    if standard:
        options.append(
            f"3. {PROJECT_ENV}={APPENGINE_CONFIG} 로 appengine-web.xml 의 <application> 사용"
        )
    else:
        options.append(
            f"3. {APPENGINE_CONFIG} 는 flexible 환경 프로젝트에서 사용할 수 없습니다"
        )
    return options


def _version_options(standard: bool) -> List[str]:
    options = [
        f"1. {VERSION_ENV}=my-version 으로 직접 지정",
        f"2. {VERSION_ENV}={GCLOUD_CONFIG} 로 gcloud 가 버전을 생성하도록 위임",
    ]
    if standard:
        options.append(
            f"3. {VERSION_ENV}={APPENGINE_CONFIG} 로 appengine-web.xml 의 <version> 사용"
        )
    else:
        options.append(
            f"3. {APPENGINE_CONFIG} 는 flexible 환경 프로젝트에서 사용할 수 없습니다"
        )
    return options


class DeployTargetResolver(ABC):
    """
    standard/flexible 공통 해석 골격.

    리터럴은 그대로 통과, 미설정은 항상 실패한다.
    예약어 처리만 환경별 하위 클래스가 결정한다.
    """

    standard = False

    def __init__(self, gcloud_config: ProjectConfigReader) -> None:
        self._gcloud_config = gcloud_config

    def _error(self, headline: str, options: List[str],
               error_cls: type = DeployTargetError) -> DeployTargetError:
        return error_cls(headline + "\n" + "\n".join(options))

    def resolve_project_id(self, raw: Optional[str]) -> Optional[str]:
        value = TargetValue.parse(raw)
        options = _project_options(self.standard)

        if value.source is TargetSource.LITERAL:
            return value.literal
        if value.source is TargetSource.UNSET:
            raise self._error(_headline("projectId"), options)
        if value.source is TargetSource.GCLOUD_CONFIG:
            return self._project_from_gcloud(options)
        return self._project_from_descriptor(options)

    def resolve_version(self, raw: Optional[str]) -> Optional[str]:
        value = TargetValue.parse(raw)
        options = _version_options(self.standard)

        if value.source is TargetSource.LITERAL:
            return value.literal
        if value.source is TargetSource.UNSET:
            raise self._error(_headline("version"), options)
        if value.source is TargetSource.GCLOUD_CONFIG:
            # None 은 실패가 아니라 "gcloud 가 버전을 생성" 이라는 뜻
            logger.debug("version 은 gcloud 가 생성합니다.")
            return None
        return self._version_from_descriptor(options)

    @abstractmethod
    def _project_from_gcloud(self, options: List[str]) -> Optional[str]:
        ...

    @abstractmethod
    def _project_from_descriptor(self, options: List[str]) -> Optional[str]:
        ...

    @abstractmethod
    def _version_from_descriptor(self, options: List[str]) -> Optional[str]:
        ...


class StandardDeployTargetResolver(DeployTargetResolver):
    standard = True

    def __init__(
        self,
        gcloud_config: ProjectConfigReader,
        appengine_web_xml: Optional[str],
        *,
        descriptor_reader: Callable[[str], AppEngineWebDescriptor] = read_descriptor,
    ) -> None:
        super().__init__(gcloud_config)
        self._appengine_web_xml = appengine_web_xml
        self._descriptor_reader = descriptor_reader

    def _descriptor(self, options: List[str]) -> AppEngineWebDescriptor:
        if not self._appengine_web_xml:
            raise self._error(
                f"{APPENGINE_CONFIG} 를 쓰려면 GAE_APPENGINE_WEB_XML 경로가 필요합니다",
                options,
            )
        return self._descriptor_reader(self._appengine_web_xml)

    def _project_from_gcloud(self, options: List[str]) -> Optional[str]:
        project = self._gcloud_config.get_project()
        if not project:
            raise self._error("gcloud config 에서 project 를 찾을 수 없습니다", options)
        logger.info("gcloud config 의 project 를 사용합니다: %s", project)
        return project

    def _project_from_descriptor(self, options: List[str]) -> Optional[str]:
        application_id = self._descriptor(options).application_id
        if not application_id:
            raise self._error(
                f"<application> 이 없습니다: {self._appengine_web_xml}", options
            )
        logger.info("appengine-web.xml 의 <application> 을 사용합니다: %s", application_id)
        return application_id

    def _version_from_descriptor(self, options: List[str]) -> Optional[str]:
        version = self._descriptor(options).version
        if not version:
            raise self._error(
                f"<version> 이 없습니다: {self._appengine_web_xml}", options
            )
        logger.info("appengine-web.xml 의 <version> 을 사용합니다: %s", version)
        return version


class FlexibleDeployTargetResolver(DeployTargetResolver):
    standard = False

    def _project_from_gcloud(self, options: List[str]) -> Optional[str]:
        # standard 와 달리 값이 없어도 그대로 넘긴다 (gcloud 가 자체 기본값 사용)
        project = self._gcloud_config.get_project()
        logger.info("gcloud config 의 project 를 사용합니다: %s", project)
        return project

    def _illegal(self, what: str, options: List[str]) -> DeployTargetError:
        return self._error(_headline(what), options, IllegalTargetSourceError)

    def _project_from_descriptor(self, options: List[str]) -> Optional[str]:
        raise self._illegal("projectId", options)

    def _version_from_descriptor(self, options: List[str]) -> Optional[str]:
        raise self._illegal("version", options)


def make_resolver(cfg: DeployConfig, gcloud_config: ProjectConfigReader) -> DeployTargetResolver:
    if cfg.is_standard:
        return StandardDeployTargetResolver(gcloud_config, cfg.appengine_web_xml)
    return FlexibleDeployTargetResolver(gcloud_config)
