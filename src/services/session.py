"""Detection 세션: 이미지 선택 → 탐지 요청 → 상태 반영

비동기 지점은 두 곳뿐 (이미지 디코딩, 게이트웨이 왕복).
응답은 요청 시작 시점의 generation으로 태깅해 store에 전달하며,
그 사이 이미지가 바뀌었다면 store가 폐기한다.
"""

import asyncio
import base64
import io
import logging

from PIL import Image, UnidentifiedImageError

from src.services.detection_store import (
    DetectionFailed,
    DetectionRequested,
    DetectionState,
    DetectionStore,
    DetectionSucceeded,
    SelectedSource,
    SourceSelected,
)
from src.services.geometry import ImageGeometry
from src.services.inference import InferenceClient, InferenceError, get_inference
from src.services.overlay import OverlayItem, OverlayRenderer, create_renderer

logger = logging.getLogger(__name__)

REQUEST_ABORTED_MESSAGE = "탐지 요청이 중단되었습니다"


class InvalidImageError(Exception):
    pass


def _decode_source(content: bytes, content_type: str, filename: str) -> SelectedSource:
    """이미지 헤더만 읽어 원본 크기 확인 + data URL 생성

    Raises:
        InvalidImageError: 이미지로 인식할 수 없는 경우
    """
    try:
        with Image.open(io.BytesIO(content)) as img:
            width, height = img.size
    except (UnidentifiedImageError, OSError) as e:
        raise InvalidImageError(f"이미지를 읽을 수 없습니다: {filename}") from e

    encoded = base64.b64encode(content).decode()
    return SelectedSource(
        content=content,
        content_type=content_type,
        filename=filename,
        data_url=f"data:{content_type};base64,{encoded}",
        natural_width=width,
        natural_height=height,
    )


class DetectionSession:
    def __init__(
        self,
        client: InferenceClient,
        store: DetectionStore | None = None,
        renderer: OverlayRenderer | None = None,
    ) -> None:
        self.client = client
        self.store = store or DetectionStore()
        self.renderer = renderer or OverlayRenderer()

    @property
    def state(self) -> DetectionState:
        return self.store.state

    def overlay(self, geometry: ImageGeometry, now_ms: float) -> list[OverlayItem]:
        """현재 상태를 화면 좌표로 렌더링 (로드/리사이즈/애니메이션 프레임마다 호출)"""
        return self.renderer.render(self.store.state, geometry, now_ms)

    async def select_file(
        self, content: bytes, content_type: str, filename: str = "image"
    ) -> DetectionState:
        """이미지 선택. 이전 탐지 결과는 즉시 제거되고 idle로 복귀"""
        source = await asyncio.to_thread(_decode_source, content, content_type, filename)
        return self.store.dispatch(SourceSelected(source=source))

    async def run_detection(self) -> DetectionState:
        """탐지 실행. 이미지가 없거나 이미 요청 중이면 아무것도 하지 않음"""
        previous = self.store.state
        state = self.store.dispatch(DetectionRequested())
        if state is previous or state.source is None:
            return state

        generation = state.generation
        source = state.source

        try:
            detections = await self.client.detect(
                source.content, source.content_type, source.filename
            )
        except InferenceError as e:
            logger.warning(f"탐지 실패 ({type(e).__name__}): {e.message}")
            return self.store.dispatch(DetectionFailed(generation=generation, message=e.message))
        except (Exception, asyncio.CancelledError) as e:
            # loading에 고정되지 않도록 error로 전환 후 전파
            logger.error(f"탐지 중단 ({type(e).__name__}): {e}")
            self.store.dispatch(
                DetectionFailed(generation=generation, message=REQUEST_ABORTED_MESSAGE)
            )
            raise

        logger.info(f"탐지 완료: {len(detections)}개 객체")
        return self.store.dispatch(
            DetectionSucceeded(generation=generation, detections=detections)
        )


def create_session() -> DetectionSession:
    """설정 기반 inference 클라이언트/렌더러로 세션 구성"""
    return DetectionSession(get_inference(), renderer=create_renderer())
