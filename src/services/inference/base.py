"""Inference Client Protocol

게이트웨이(/predict)를 호출해 탐지 결과를 받아오는 구현을 위한 인터페이스 정의.
"""

from typing import Protocol

from src.schemas.detection import Detection


class InferenceError(Exception):
    """추론 요청 실패 (요청 단위, 재시도 가능)"""

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


class InferenceTransportError(InferenceError):
    """응답 없음 (연결 실패, 타임아웃 등)"""


class InferenceBackendError(InferenceError):
    """게이트웨이가 non-2xx 응답"""

    def __init__(self, status_code: int, message: str):
        self.status_code = status_code
        super().__init__(message)


class MalformedResponseError(InferenceError):
    """JSON 파싱 실패 또는 detections 필드 누락/불일치"""


class InferenceClient(Protocol):
    """객체 탐지 요청 인터페이스

    구현체:
    - HttpInferenceClient: 게이트웨이 HTTP 호출
    """

    async def detect(
        self, content: bytes, content_type: str, filename: str = "image"
    ) -> list[Detection]:
        """이미지에서 객체 탐지

        Args:
            content: 이미지 바이너리
            content_type: 이미지 media type (예: image/jpeg)
            filename: multipart 파일명

        Returns:
            list[Detection]: 백엔드가 반환한 순서 그대로 (정렬/필터링 없음)

        Raises:
            InferenceError: 전송/백엔드/응답 형식 오류
        """
        ...
