"""Overlay 렌더링: 탐지 박스/라벨을 화면 좌표로 배치

- 렌더 패스마다 박스 좌표는 탐지 1건당 1회만 계산하고 박스/라벨이 공유
- 새 탐지 목록이 처음 나타날 때 목록 순서대로 stagger_delay_ms 간격으로 등장
- 라벨 색상은 index % 팔레트 크기로 결정 (같은 목록이면 항상 같은 색)
"""

from typing import Literal

from pydantic import BaseModel, ConfigDict

from src.config import get_settings
from src.constants import Overlay
from src.schemas.detection import Detection
from src.services.detection_store import DetectionState
from src.services.geometry import DisplayBox, ImageGeometry, map_box

ConfidenceTier = Literal["high", "medium", "low"]
Emphasis = Literal["strong", "medium", "weak"]

EMPHASIS: dict[ConfidenceTier, Emphasis] = {
    "high": "strong",
    "medium": "medium",
    "low": "weak",
}


def confidence_tier(confidence: float) -> ConfidenceTier:
    if confidence >= Overlay.HIGH_CONFIDENCE:
        return "high"
    if confidence >= Overlay.MEDIUM_CONFIDENCE:
        return "medium"
    return "low"


def label_color(index: int) -> str:
    return Overlay.PALETTE[index % len(Overlay.PALETTE)]


def format_confidence(confidence: float) -> str:
    return f"{confidence * 100:.1f}%"


class LabelChip(BaseModel):
    """박스 좌상단 바로 위에 붙는 라벨"""

    model_config = ConfigDict(frozen=True)

    text: str
    left: float
    top: float
    color: str


class OverlayItem(BaseModel):
    model_config = ConfigDict(frozen=True)

    index: int
    detection: Detection
    box: DisplayBox
    label: LabelChip
    color: str
    visible: bool

    @property
    def opacity(self) -> float:
        return 1.0 if self.visible else 0.0

    @property
    def scale(self) -> float:
        return 1.0 if self.visible else Overlay.HIDDEN_SCALE

    def style(self) -> dict[str, str]:
        """박스 CSS 스타일. 좌표를 모르면 빈 dict"""
        style = self.box.to_style()
        if not style:
            return {}
        return {
            **style,
            "borderColor": self.color,
            "opacity": str(self.opacity),
            "transform": f"scale({self.scale})",
        }


class ResultRow(BaseModel):
    """결과 목록 한 줄"""

    model_config = ConfigDict(frozen=True)

    label: str
    color: str
    confidence_text: str
    tier: ConfidenceTier
    emphasis: Emphasis
    delay_ms: int


class OverlayRenderer:
    """DetectionState + ImageGeometry → 화면에 그릴 OverlayItem 목록

    박스 좌표 캐시는 (generation, geometry) 단위. 리사이즈로 geometry가
    바뀌면 재계산하지만 등장 애니메이션은 다시 시작하지 않는다.
    """

    def __init__(self, stagger_delay_ms: int = 70, label_offset: int = 24) -> None:
        self.stagger_delay_ms = stagger_delay_ms
        self.label_offset = label_offset
        self._reveal_generation: int | None = None
        self._reveal_start_ms = 0.0
        self._frame_key: tuple[int, ImageGeometry] | None = None
        self._frame_boxes: list[DisplayBox] = []

    def render(
        self, state: DetectionState, geometry: ImageGeometry, now_ms: float
    ) -> list[OverlayItem]:
        if state.status != "success" or not state.detections:
            return []

        if state.generation != self._reveal_generation:
            self._reveal_generation = state.generation
            self._reveal_start_ms = now_ms

        boxes = self._display_boxes(state, geometry)
        elapsed = now_ms - self._reveal_start_ms

        items: list[OverlayItem] = []
        for i, (detection, box) in enumerate(zip(state.detections, boxes, strict=True)):
            color = label_color(i)
            items.append(
                OverlayItem(
                    index=i,
                    detection=detection,
                    box=box,
                    label=LabelChip(
                        text=detection.label,
                        left=box.left,
                        top=box.top - self.label_offset,
                        color=color,
                    ),
                    color=color,
                    visible=elapsed >= i * self.stagger_delay_ms,
                )
            )
        return items

    def reveal_complete(self, state: DetectionState, now_ms: float) -> bool:
        """마지막 박스까지 등장했는지 (애니메이션 프레임 요청 중단 판단용)"""
        if state.generation != self._reveal_generation or not state.detections:
            return False
        last_delay = (len(state.detections) - 1) * self.stagger_delay_ms
        return now_ms - self._reveal_start_ms >= last_delay

    def result_rows(self, state: DetectionState) -> list[ResultRow]:
        rows: list[ResultRow] = []
        for i, detection in enumerate(state.detections):
            tier = confidence_tier(detection.confidence)
            rows.append(
                ResultRow(
                    label=detection.label,
                    color=label_color(i),
                    confidence_text=format_confidence(detection.confidence),
                    tier=tier,
                    emphasis=EMPHASIS[tier],
                    delay_ms=i * self.stagger_delay_ms,
                )
            )
        return rows

    def _display_boxes(self, state: DetectionState, geometry: ImageGeometry) -> list[DisplayBox]:
        key = (state.generation, geometry)
        if key != self._frame_key:
            self._frame_boxes = [map_box(d.box, geometry) for d in state.detections]
            self._frame_key = key
        return self._frame_boxes


def create_renderer() -> OverlayRenderer:
    settings = get_settings()
    return OverlayRenderer(
        stagger_delay_ms=settings.stagger_delay_ms,
        label_offset=settings.label_offset,
    )
