"""Gateway Proxy 서비스: 업로드를 백엔드 추론 서버로 중계

- 요청당 업스트림 호출은 정확히 1회 (재시도/캐시 없음, 리다이렉트는 따라감)
- 백엔드 에러 본문은 서버 로그에만 남기고, 호출자에게는 reason phrase만 전달
"""

import logging
from typing import Any

import httpx
from pydantic import BaseModel

from src.config import get_settings
from src.constants import ErrorMessage
from src.infra.http import get_http_client

logger = logging.getLogger(__name__)


class BackendNotConfiguredError(RuntimeError):
    """API_URL 미설정 (배포 오류)"""


class ProxyResult(BaseModel):
    status_code: int
    body: Any


def _backend_error(status_code: int, reason: str) -> ProxyResult:
    return ProxyResult(
        status_code=status_code,
        body={"error": f"{ErrorMessage.BACKEND_PREFIX}{reason}"},
    )


def _predict_url() -> str:
    api_url = get_settings().api_url
    if not api_url:
        raise BackendNotConfiguredError("API_URL이 설정되지 않았습니다")
    return f"{api_url.rstrip('/')}/predict/"


async def relay_prediction(body: bytes, content_type: str) -> ProxyResult:
    """multipart 본문을 그대로 백엔드 /predict/ 로 전달

    Args:
        body: 수신한 multipart 원문
        content_type: boundary 포함 원본 Content-Type

    Returns:
        ProxyResult: 호출자에게 돌려줄 상태 코드와 JSON 본문

    Raises:
        BackendNotConfiguredError: API_URL 미설정 시
    """
    url = _predict_url()
    client = get_http_client()

    try:
        resp = await client.post(
            url,
            content=body,
            headers={"Content-Type": content_type},
            follow_redirects=True,
        )
    except httpx.HTTPError as e:
        logger.error(f"Backend API 요청 실패: {e!r}")
        return _backend_error(502, httpx.codes.get_reason_phrase(502))

    reason = resp.reason_phrase or httpx.codes.get_reason_phrase(resp.status_code)

    if resp.status_code // 100 == 3:
        logger.error(f"Backend API 리다이렉트 처리 불가 ({resp.status_code})")
        return _backend_error(502, httpx.codes.get_reason_phrase(502))

    if not resp.is_success:
        logger.error(f"Backend API error ({resp.status_code}): {resp.text}")
        return _backend_error(resp.status_code, reason)

    try:
        data = resp.json()
    except ValueError:
        logger.error(f"Backend API 응답 JSON 파싱 실패: {resp.text[:200]}")
        return _backend_error(502, httpx.codes.get_reason_phrase(502))

    return ProxyResult(status_code=200, body=data)
