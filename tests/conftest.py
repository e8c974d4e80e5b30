from collections.abc import Callable, Generator
from io import BytesIO
from typing import Any

import httpx
import pytest
from fastapi.testclient import TestClient
from PIL import Image

from src.config import get_settings
from src.infra.http import set_http_client
from src.main import app

BACKEND_URL = "http://backend.test"


def make_test_image(width: int = 800, height: int = 600, fmt: str = "JPEG") -> BytesIO:
    """테스트용 실제 이미지 바이트 생성"""
    img = Image.new("RGB", (width, height), color="red")
    buf = BytesIO()
    img.save(buf, format=fmt)
    buf.seek(0)
    return buf


class FakeBackend:
    """백엔드 추론 서버 mock (httpx.MockTransport 핸들러)

    사용법:
        fake_backend.respond(500, json={"error": "oom"})
        fake_backend.fail(httpx.ConnectError("down"))
    """

    def __init__(self) -> None:
        self.requests: list[httpx.Request] = []
        self._response: Callable[[], httpx.Response] = lambda: httpx.Response(
            200, json={"detections": []}
        )

    @property
    def call_count(self) -> int:
        return len(self.requests)

    def respond(self, status_code: int, **kwargs: Any) -> None:
        self._response = lambda: httpx.Response(status_code, **kwargs)

    def fail(self, error: Exception) -> None:
        def _raise() -> httpx.Response:
            raise error

        self._response = _raise

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        return self._response()


@pytest.fixture
def fake_backend(monkeypatch: pytest.MonkeyPatch) -> Generator[FakeBackend, None, None]:
    backend = FakeBackend()
    monkeypatch.setattr(get_settings(), "api_url", BACKEND_URL)
    set_http_client(httpx.AsyncClient(transport=httpx.MockTransport(backend.handler)))
    yield backend
    set_http_client(None)


@pytest.fixture
def client(fake_backend: FakeBackend) -> TestClient:
    return TestClient(app)
