"""
gcp_gcs
-------

`gcloud app deploy --bucket` 에 쓸 staging 버킷 상태를 확인하는 모듈.
버킷을 만들지는 않는다. (없으면 gcloud 가 기본 staging 버킷을 쓴다)
"""

from __future__ import annotations

from typing import Optional

from google.api_core.exceptions import Forbidden
from google.cloud import storage

from .config import DeployConfig
from .logging_utils import get_logger


logger = get_logger(__name__)


def _bucket_name(raw: str) -> str:
    # gcloud 는 gs://bucket 형태도 받는다
    name = raw[len("gs://"):] if raw.startswith("gs://") else raw
    return name.split("/", 1)[0]


def check_staging_bucket(cfg: DeployConfig, project_id: Optional[str]) -> str:
    """
    GAE_BUCKET 버킷 존재 여부를 확인만 한다.
    """
    if not cfg.bucket:
        return "Bucket: GAE_BUCKET 미설정 (gcloud 기본 staging 버킷 사용)"

    bucket_name = _bucket_name(cfg.bucket)
    logger.info("staging 버킷 확인: %s", bucket_name)

    client = storage.Client(project=project_id)
    bucket = client.bucket(bucket_name)
    try:
        exists = bucket.exists()
    except Forbidden:
        return f"Bucket: 권한 부족으로 확인 불가 ({bucket_name})"

    if exists:
        return f"Bucket: 버킷 존재함 ({bucket_name})"
    return f"Bucket: 버킷 없음 ({bucket_name})"
