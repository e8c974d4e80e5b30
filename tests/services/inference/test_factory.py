"""Inference 팩토리 테스트"""

from unittest.mock import patch

import pytest

from src.schemas.detection import Detection
from src.services.inference import get_inference, set_inference
from src.services.inference.http import HttpInferenceClient


class TestGetInference:
    def setup_method(self) -> None:
        set_inference(None)

    def teardown_method(self) -> None:
        set_inference(None)

    def test_default_returns_http_client(self) -> None:
        client = get_inference()
        assert isinstance(client, HttpInferenceClient)

    def test_cached_instance(self) -> None:
        assert get_inference() is get_inference()

    def test_set_inference_overrides_factory(self) -> None:
        mock = MockInferenceClient()
        set_inference(mock)
        assert get_inference() is mock

    def test_unknown_provider_raises(self) -> None:
        with patch("src.services.inference.get_settings") as mock_settings:
            mock_settings.return_value.inference_provider = "unknown"
            with pytest.raises(ValueError, match="Unknown inference provider"):
                get_inference()


class MockInferenceClient:
    async def detect(
        self, content: bytes, content_type: str, filename: str = "image"
    ) -> list[Detection]:
        return []
