from __future__ import annotations

import os
from typing import Iterable, List, Optional

from .config import DeployConfig
from .deployables import APP_YAML, CONFIG_YAMLS, collect_deployables, config_deployable
from .gae_deploy import DeployTarget
from .gcloud_config import GcloudConfig
from .logging_utils import get_logger
from .target import DeployTargetError, ProjectConfigReader, TargetValue, make_resolver
from . import (
    cloud_sdk,
    gae_deploy,
    gcp_gcs,
    staging,
)
from .subprocess_utils import run_command


logger = get_logger(__name__)

# CLI 등에서 사용할 수 있도록 배포 단위 이름을 상수로 노출
ALL_TASKS: List[str] = [
    "app",
    "cron",
    "dispatch",
    "dos",
    "index",
    "queue",
]

DEPLOY_ALL = "all"


def resolve_target(cfg: DeployConfig,
                   gcloud_config: Optional[ProjectConfigReader] = None) -> DeployTarget:
    """
    배포 1회당 한 번만 projectId/version 을 해석한다.
    DeployTargetError 는 그대로 전파한다.
    """
    if gcloud_config is None:
        gcloud_config = GcloudConfig(cloud_sdk_home=cfg.cloud_sdk_home)
    resolver = make_resolver(cfg, gcloud_config)
    return DeployTarget(
        project_id=resolver.resolve_project_id(cfg.project_id),
        version=resolver.resolve_version(cfg.version),
    )


def _select_units(deploy_all: bool, only_tasks: Optional[Iterable[str]]) -> List[str]:
    """
    실제로 gcloud app deploy 를 호출할 단위 목록.
    """
    if deploy_all:
        return [DEPLOY_ALL]
    if only_tasks:
        requested = {t for t in only_tasks}
        return [t for t in ALL_TASKS if t in requested]
    return ["app"]


def _deployables_for(unit: str, cfg: DeployConfig) -> List[str]:
    if unit == DEPLOY_ALL:
        return collect_deployables(cfg.staging_dir, cfg.appengine_dir)
    if unit == "app":
        app_yaml = os.path.abspath(os.path.join(cfg.staging_dir, APP_YAML))
        if not os.path.isfile(app_yaml):
            raise FileNotFoundError(f"staging 디렉토리에 app.yaml 이 없습니다: {app_yaml}")
        return [app_yaml]
    return [config_deployable(f"{unit}.yaml", cfg.staging_dir, cfg.appengine_dir)]


def _append_list(lines: List[str], title: str, items: List[str]) -> None:
    lines.append(title)
    if items:
        for s in items:
            lines.append(f"- {s}")
    else:
        lines.append("- (none)")


def plan_all(cfg: DeployConfig) -> str:
    """
    현재 설정과 배포 대상 해석 방식을 요약 텍스트로 리턴한다.
    실제 gcloud/GCP 호출은 하지 않는다.
    """
    lines: List[str] = []
    lines.append("# Deploy plan")
    lines.append(f"- environment: {cfg.environment}")
    lines.append(f"- projectId: {TargetValue.parse(cfg.project_id).describe()}")
    lines.append(f"- version: {TargetValue.parse(cfg.version).describe()}")
    lines.append("")

    lines.append("## Config summary")
    lines.append(f"- staging_dir: {cfg.staging_dir}")
    lines.append(f"- appengine_dir: {cfg.appengine_dir or '(staging_dir 사용)'}")
    if cfg.is_standard:
        lines.append(f"- appengine_web_xml: {cfg.appengine_web_xml or '(not set)'}")
        lines.append(f"- source_dir: {cfg.source_dir or '(not set)'}")
        lines.append(f"- war_file: {cfg.war_file or '(not set)'}")
    else:
        lines.append(f"- app_yaml_dir: {cfg.app_yaml_dir or '(not set)'}")
        lines.append(f"- docker_dir: {cfg.docker_dir or '(not set)'}")
        lines.append(f"- artifact: {cfg.artifact or '(not set)'}")
    lines.append(f"- bucket: {cfg.bucket or '(not set)'}")
    lines.append(f"- image_url: {cfg.image_url or '(not set)'}")
    lines.append(f"- promote: {'(gcloud 기본값)' if cfg.promote is None else cfg.promote}")
    lines.append(
        "- stop_previous_version: "
        f"{'(gcloud 기본값)' if cfg.stop_previous_version is None else cfg.stop_previous_version}"
    )
    lines.append(f"- cloud_sdk_home: {cfg.cloud_sdk_home or '(PATH 사용)'}")
    lines.append("")

    lines.append("## Deployables")
    if os.path.isdir(cfg.staging_dir):
        found = collect_deployables(cfg.staging_dir, cfg.appengine_dir)
        names = {os.path.basename(p) for p in found}
        for name in (APP_YAML, *CONFIG_YAMLS):
            status = "FOUND" if name in names else "MISSING"
            lines.append(f"- {name}: {status}")
    else:
        lines.append("- (staging 전: 배포 시 staging 디렉토리가 생성됩니다)")

    return "\n".join(lines)


def apply_all(
    cfg: DeployConfig,
    *,
    deploy_all: bool = False,
    only_tasks: Optional[Iterable[str]] = None,
    skip_stage: bool = False,
    gcloud_config: Optional[ProjectConfigReader] = None,
) -> tuple[str, bool]:
    """
    staging → 배포 대상 해석 → 배포 단위별 gcloud app deploy.

    staging 실패와 배포 대상 해석 실패는 그대로 전파한다. (배포 자체가 불가능)
    배포 단위별 실패는 기록하고 다음 단위로 넘어간다.

    Returns:
        summary: 사람이 읽기 좋은 텍스트 요약
        has_failures: 하나 이상의 배포 단위에서 예외가 발생했는지 여부
    """
    if skip_stage:
        logger.info("--skip-stage: 기존 staging 결과를 사용합니다: %s", cfg.staging_dir)
    else:
        staging.stage(cfg)

    target = resolve_target(cfg, gcloud_config)

    executed: List[str] = []
    skipped: List[str] = []
    failed: List[str] = []

    units = _select_units(deploy_all, only_tasks)
    logger.info("배포 대상 단위: %s", units)

    if units != [DEPLOY_ALL]:
        skipped = [t for t in ALL_TASKS if t not in units]

    for unit in units:
        logger.info("배포 실행: %s", unit)
        try:
            deployables = _deployables_for(unit, cfg)
            gae_deploy.deploy(cfg, deployables, target)
        except Exception:  # noqa: BLE001
            failed.append(unit)
            logger.exception("배포 실패: %s", unit)
            continue

        if unit == DEPLOY_ALL:
            names = [os.path.basename(p) for p in deployables]
            executed += names
            skipped += [n for n in (APP_YAML, *CONFIG_YAMLS) if n not in names]
        else:
            executed.append(unit)

    lines: List[str] = []
    lines.append("# Deploy summary")
    lines.append(f"- project: {target.project_id or '(gcloud 기본값)'}")
    lines.append(f"- version: {target.version or '(gcloud 생성)'}")
    lines.append("")
    _append_list(lines, "## Executed", executed)
    lines.append("")
    _append_list(lines, "## Skipped", skipped)
    lines.append("")
    _append_list(lines, "## Failed", failed)

    summary = "\n".join(lines)
    return summary, bool(failed)


def check_all(
    cfg: DeployConfig,
    show_all: bool = False,
    gcloud_config: Optional[ProjectConfigReader] = None,
) -> tuple[str, bool]:
    """
    실제 배포 없이 Cloud SDK, 배포 대상, staging 결과물, staging 버킷 상태를 점검한다.

    Returns:
        summary: 사람이 읽기 좋은 텍스트 요약
        has_issues: 크리티컬 이슈 또는 경고가 있는지 여부
    """
    lines: List[str] = []
    critical: List[str] = []
    warnings: List[str] = []

    lines.append("# Deploy pre-check")
    lines.append(f"- environment: {cfg.environment}")
    lines.append(f"- staging_dir: {cfg.staging_dir}")
    lines.append("")

    # 1) Cloud SDK
    lines.append("## Cloud SDK")
    try:
        gcloud = cloud_sdk.find_gcloud(cfg.cloud_sdk_home)
        result = run_command([gcloud, "--version"], timeout=60.0)
        first_line = (result.stdout.strip().splitlines() or ["(버전 정보 없음)"])[0]
        msg = f"gcloud: {first_line}"
        if show_all:
            lines.append(f"- {msg}")
    except RuntimeError as e:
        msg = f"gcloud: 확인 불가 ({e})"
        if show_all:
            lines.append(f"- {msg}")
        critical.append(msg)
    lines.append("")

    # 2) 배포 대상
    lines.append("## Deploy target")
    project_id: Optional[str] = None
    try:
        target = resolve_target(cfg, gcloud_config)
        project_id = target.project_id
        msg = (
            f"target: project={target.project_id or '(gcloud 기본값)'} "
            f"version={target.version or '(gcloud 생성)'}"
        )
        if show_all:
            lines.append(f"- {msg}")
    except DeployTargetError as e:
        msg = f"target: 설정 오류\n{e}"
        if show_all:
            lines.append(f"- {msg}")
        critical.append(msg)
    except Exception as e:  # noqa: BLE001
        msg = f"target: 해석 중 예외 발생: {e}"
        if show_all:
            lines.append(f"- {msg}")
        critical.append(msg)
    lines.append("")

    # 3) staging 결과물
    lines.append("## Staging")
    if not os.path.isdir(cfg.staging_dir):
        # deploy 시 staging 이 먼저 실행되므로 경고
        msg = f"Staging: 디렉토리 없음 (deploy 시 생성됨) ({cfg.staging_dir})"
        if show_all:
            lines.append(f"- {msg}")
        warnings.append(msg)
    else:
        found = collect_deployables(cfg.staging_dir, cfg.appengine_dir)
        names = [os.path.basename(p) for p in found]
        if show_all:
            lines.append(f"- Staging: deployables = {', '.join(names) or '(none)'}")
        if APP_YAML not in names:
            warnings.append(f"Staging: app.yaml 없음 ({cfg.staging_dir})")
    if cfg.appengine_dir and not os.path.isdir(cfg.appengine_dir):
        msg = f"Staging: appengine_dir 없음 ({cfg.appengine_dir})"
        if show_all:
            lines.append(f"- {msg}")
        warnings.append(msg)
    lines.append("")

    # 4) staging 버킷
    lines.append("## Bucket")
    try:
        bucket_status = gcp_gcs.check_staging_bucket(cfg, project_id)
        if show_all:
            lines.append(f"- {bucket_status}")
        # 지정한 버킷이 없으면 gcloud app deploy 가 실패한다
        if "버킷 없음" in bucket_status:
            critical.append(bucket_status)
        elif "확인 불가" in bucket_status:
            warnings.append(bucket_status)
    except Exception as e:  # noqa: BLE001
        msg = f"Bucket: 체크 중 예외 발생: {e}"
        if show_all:
            lines.append(f"- {msg}")
        critical.append(msg)
    lines.append("")

    # Summary
    lines.append("## Summary")
    if critical:
        lines.append("- 상태: 크리티컬 이슈가 있습니다. 배포 전 반드시 해결해야 합니다.")
    elif warnings:
        lines.append("- 상태: 경고만 있습니다.")
    else:
        lines.append("- 상태: 주요 이슈 없음 (배포 가능 상태로 보입니다)")

    if show_all or critical:
        lines.append("")
        _append_list(lines, "### Critical issues", critical)

    if show_all or warnings:
        lines.append("")
        _append_list(lines, "### Warnings", warnings)

    if not show_all:
        lines.append("")
        lines.append("자세한 상태를 보려면 `deploy-gae check -a` 를 실행하세요.")

    summary = "\n".join(lines)
    return summary, bool(critical or warnings)
