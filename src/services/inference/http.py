"""게이트웨이 HTTP 호출 구현체"""

import httpx
from pydantic import ValidationError

from src.schemas.detection import Detection, DetectionsResponse
from src.services.inference.base import (
    InferenceBackendError,
    InferenceTransportError,
    MalformedResponseError,
)


class HttpInferenceClient:
    """게이트웨이 /predict 엔드포인트로 multipart 업로드

    재시도 없음: 실패는 그대로 호출자에게 전달되고, 재시도는 사용자가 결정한다.
    """

    def __init__(
        self,
        gateway_url: str,
        timeout: float = 60.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._endpoint = f"{gateway_url.rstrip('/')}/predict"
        self._timeout = timeout
        self._transport = transport

    async def detect(
        self, content: bytes, content_type: str, filename: str = "image"
    ) -> list[Detection]:
        try:
            async with httpx.AsyncClient(
                timeout=self._timeout, transport=self._transport
            ) as client:
                resp = await client.post(
                    self._endpoint,
                    files={"file": (filename, content, content_type)},
                )
        except httpx.TransportError as e:
            raise InferenceTransportError(f"게이트웨이 연결 실패: {e}") from e
        except httpx.DecodingError as e:
            raise MalformedResponseError(f"응답 디코딩 실패: {e}") from e
        except httpx.HTTPError as e:
            raise InferenceTransportError(f"게이트웨이 요청 실패: {e}") from e

        if not resp.is_success:
            raise InferenceBackendError(resp.status_code, self._error_message(resp))

        try:
            payload = DetectionsResponse.model_validate_json(resp.content)
        except ValidationError as e:
            raise MalformedResponseError(f"응답 형식 오류: {e.error_count()}개 필드") from e

        return payload.detections

    def _error_message(self, resp: httpx.Response) -> str:
        """게이트웨이 에러 본문({error})에서 메시지 추출, 없으면 reason phrase"""
        try:
            body = resp.json()
        except ValueError:
            body = None

        if isinstance(body, dict) and isinstance(body.get("error"), str):
            return body["error"]
        return resp.reason_phrase or httpx.codes.get_reason_phrase(resp.status_code)
