"""
gae_deploy_kit
--------------

Google App Engine(standard / flexible) 애플리케이션 배포용 CLI 패키지.
staging → 배포 대상(projectId/version) 해석 → deployable YAML 수집 → `gcloud app deploy`
순서를 환경변수 기반 설정으로 한 번에 실행하는 것을 목표로 한다.
"""

__version__ = "0.1.0"

__all__ = [
    "config",
    "deployables",
    "orchestrator",
    "target",
]
