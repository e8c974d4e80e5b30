"""Inference 모듈

사용법:
    from src.services.inference import get_inference

    client = get_inference()
    detections = await client.detect(content, "image/jpeg")

구현 선택 (.env INFERENCE_PROVIDER):
    - "http": 게이트웨이 HTTP 호출 (기본값)
"""

from src.config import get_settings
from src.services.inference.base import (
    InferenceBackendError,
    InferenceClient,
    InferenceError,
    InferenceTransportError,
    MalformedResponseError,
)
from src.services.inference.http import HttpInferenceClient

__all__ = [
    "InferenceClient",
    "InferenceError",
    "InferenceTransportError",
    "InferenceBackendError",
    "MalformedResponseError",
    "get_inference",
    "set_inference",
]

_client: InferenceClient | None = None


def get_inference() -> InferenceClient:
    """설정에 따라 inference 클라이언트 반환"""
    global _client
    if _client is None:
        settings = get_settings()
        if settings.inference_provider == "http":
            _client = HttpInferenceClient(
                gateway_url=settings.gateway_url,
                timeout=settings.api_timeout,
            )
        else:
            raise ValueError(f"Unknown inference provider: {settings.inference_provider!r}")
    return _client


def set_inference(client: InferenceClient | None) -> None:
    """inference 클라이언트 설정 (테스트용)"""
    global _client
    _client = client
