import sys
from typing import Optional

import click
from dotenv import dotenv_values

from .config import load_env_files, DeployConfig
from .logging_utils import setup_logging, get_logger
from .orchestrator import ALL_TASKS, apply_all, plan_all, check_all
from .staging import stage as run_stage
from .target import DeployTargetError


logger = get_logger(__name__)


@click.group()
@click.option(
    "-C",
    "--chdir",
    "chdir",
    type=click.Path(file_okay=False, dir_okay=True, exists=True),
    default=".",
    help="작업 디렉토리 (기본: 현재 디렉토리)",
)
@click.option(
    "-v",
    "--verbose",
    count=True,
    help="로그 레벨을 DEBUG로 올립니다. (-vv 는 google 라이브러리 로그까지 출력)",
)
@click.pass_context
def main(ctx: click.Context, chdir: str, verbose: int) -> None:
    """Google App Engine(standard/flexible) staging 및 배포용 CLI"""
    setup_logging(verbose)
    ctx.ensure_object(dict)
    ctx.obj["chdir"] = chdir
    ctx.obj["verbose"] = verbose


def _load_config_from_ctx(ctx: click.Context) -> DeployConfig:
    base_dir: str = ctx.obj["chdir"]
    load_env_files(base_dir)
    cfg = DeployConfig.from_env(base_dir)
    logger.debug("Config loaded: %s", cfg)
    return cfg


def _load_config_or_exit(ctx: click.Context) -> DeployConfig:
    try:
        return _load_config_from_ctx(ctx)
    except ValueError as e:
        click.echo(f"[ERROR] 설정 로드 실패: {e}", err=True)
        sys.exit(1)


def _build_env_dump(base_dir: str) -> str:
    """
    .env / .env.gae 의 내용을 그대로 덤프한다.
    (주석/빈 줄은 제외)
    """
    lines: list[str] = []
    for filename in (".env", ".env.gae"):
        lines.append(f"## {filename}")
        path_values = dotenv_values(dotenv_path=f"{base_dir}/{filename}")
        if not path_values:
            lines.append("- (파일이 없거나 비어 있습니다)")
        else:
            for k, v in sorted(path_values.items()):
                # None 은 dotenv 에서 값이 없는 키를 의미하므로 스킵
                if v is None:
                    continue
                lines.append(f"- {k}={v}")
        lines.append("")
    return "\n".join(lines).rstrip()


@main.command()
@click.option(
    "-a",
    "--all",
    "show_all",
    is_flag=True,
    help=".env / .env.gae 에서 설정한 모든 값을 함께 출력합니다.",
)
@click.pass_context
def plan(ctx: click.Context, show_all: bool) -> None:
    """현재 설정과 projectId/version 해석 방식, staging 결과물 상태를 출력"""
    cfg = _load_config_or_exit(ctx)

    report = plan_all(cfg)

    if show_all:
        base_dir: str = ctx.obj["chdir"]
        env_dump = _build_env_dump(base_dir)
        report = report + "\n\n" + "## Raw env from files\n" + env_dump

    click.echo(report)


@main.command()
@click.pass_context
def stage(ctx: click.Context) -> None:
    """배포 없이 staging 만 실행"""
    cfg = _load_config_or_exit(ctx)

    try:
        run_stage(cfg)
    except Exception as e:  # noqa: BLE001
        logger.exception("staging 중 오류 발생")
        click.echo(f"[ERROR] staging 실패: {e}", err=True)
        sys.exit(1)

    click.echo(f"staging 완료: {cfg.staging_dir}")


@main.command(name="deploy")
@click.option(
    "--all",
    "deploy_all",
    is_flag=True,
    help="app.yaml 과 존재하는 cron/dispatch/dos/index/queue.yaml 을 한 번에 배포합니다.",
)
@click.option(
    "--only",
    "only",
    type=str,
    default="",
    help="쉼표로 구분된 배포 단위(app,cron,dispatch,dos,index,queue). "
    "단위마다 gcloud app deploy 를 따로 실행합니다. 기본은 app 만 배포합니다.",
)
@click.option(
    "--skip-stage",
    "skip_stage",
    is_flag=True,
    help="staging 을 건너뛰고 기존 staging 디렉토리를 그대로 배포합니다.",
)
@click.pass_context
def deploy(ctx: click.Context, deploy_all: bool, only: str, skip_stage: bool) -> None:
    """staging 후 App Engine 에 배포"""
    cfg = _load_config_or_exit(ctx)

    only_list: Optional[list[str]] = None
    if only.strip():
        if deploy_all:
            click.echo("[ERROR] --all 과 --only 는 함께 쓸 수 없습니다.", err=True)
            sys.exit(1)

        only_list = [p.strip() for p in only.split(",") if p.strip()]

        # --only 배포 단위 이름 검증
        invalid = sorted({s for s in only_list if s not in ALL_TASKS})
        if invalid:
            click.echo(
                "[ERROR] 잘못된 배포 단위 이름이 있습니다: "
                + ", ".join(invalid)
                + f"\n허용되는 단위: {', '.join(ALL_TASKS)}",
                err=True,
            )
            sys.exit(1)

    try:
        summary, has_failures = apply_all(
            cfg,
            deploy_all=deploy_all,
            only_tasks=only_list,
            skip_stage=skip_stage,
        )
    except DeployTargetError as e:
        # 사용자 설정 문제이므로 traceback 없이 안내만 출력
        click.echo(f"[ERROR] 배포 대상 설정 오류:\n{e}", err=True)
        sys.exit(1)
    except Exception as e:  # noqa: BLE001
        logger.exception("배포 중 오류 발생")
        click.echo(f"[ERROR] 배포 실패: {e}", err=True)
        sys.exit(1)

    click.echo(summary)

    # 단위별 실패가 있었다면 전체 명령은 실패(exit 1)로 간주
    if has_failures:
        sys.exit(1)


@main.command()
@click.pass_context
def init(ctx: click.Context) -> None:
    """
    현재 디렉토리에 env 템플릿(env.gae.example)을 복사하는 초기화.
    """
    import os
    from importlib import resources

    base_dir: str = ctx.obj["chdir"]

    for name in ("env.gae.example",):
        target = os.path.join(base_dir, name)
        if os.path.exists(target):
            click.echo(f"{name} 이(가) 이미 존재하여 건너뜀")
            continue
        try:
            with resources.files("gae_deploy_kit.examples").joinpath(name).open("r", encoding="utf-8") as src, open(
                target, "w", encoding="utf-8"
            ) as dst:
                dst.write(src.read())
            click.echo(f"{name} 템플릿을 생성했습니다.")
        except FileNotFoundError:
            click.echo(f"템플릿 {name} 을(를) 패키지에서 찾을 수 없습니다.", err=True)


@main.command()
@click.option(
    "-a",
    "--all",
    "show_all",
    is_flag=True,
    help="모든 체크 항목의 상세 상태를 출력합니다. (기본은 이슈만 요약)",
)
@click.pass_context
def check(ctx: click.Context, show_all: bool) -> None:
    """
    배포 전에 Cloud SDK, 배포 대상, staging 결과물, staging 버킷 상태를 점검한다.
    (실제 staging/배포는 하지 않는다)
    """
    cfg = _load_config_or_exit(ctx)

    try:
        report, has_issues = check_all(cfg, show_all=show_all)
    except Exception as e:  # noqa: BLE001
        logger.exception("사전 체크 중 오류 발생")
        click.echo(f"[ERROR] 체크 실패: {e}", err=True)
        sys.exit(1)

    click.echo(report)

    # 이슈가 있으면 exit 1 로 종료하여 CI 등에서 감지 가능하게 한다.
    if has_issues:
        sys.exit(1)
