"""Detection 상태 머신

현재 이미지, 탐지 결과, 요청 상태를 하나의 불변 상태 객체로 관리한다.
상태 변경은 transition()으로만 가능.

    idle ──(요청, 이미지 있음)──> loading ──(성공)──> success
      ^                             │                   │
      └──────(이미지 선택)──────────┴──(실패)──> error ──┘

generation은 이미지 선택/요청 시작마다 증가하며, 응답 적용 시 요청 시작 시점의
generation과 다르면 폐기한다 (이미지 교체 후 도착한 응답이 새 이미지에 그려지는 것 방지).
"""

import logging
from typing import Literal, Self

from pydantic import BaseModel, ConfigDict, model_validator

from src.schemas.detection import Detection

logger = logging.getLogger(__name__)

Status = Literal["idle", "loading", "success", "error"]


class SelectedSource(BaseModel):
    """사용자가 선택한 이미지 (원본 바이트 + 표시용 data URL)"""

    model_config = ConfigDict(frozen=True)

    content: bytes
    content_type: str
    filename: str
    data_url: str
    natural_width: int
    natural_height: int


class DetectionState(BaseModel):
    model_config = ConfigDict(frozen=True)

    status: Status = "idle"
    source: SelectedSource | None = None
    detections: tuple[Detection, ...] = ()
    error: str | None = None
    generation: int = 0

    @model_validator(mode="after")
    def check_consistency(self) -> Self:
        """불가능한 조합 차단 (예: error + detections)"""
        if self.detections and self.status != "success":
            raise ValueError(f"{self.status} 상태는 detections를 가질 수 없음")
        if (self.status == "error") != (self.error is not None):
            raise ValueError("error 메시지는 error 상태에서만 존재")
        if self.status == "loading" and self.source is None:
            raise ValueError("이미지 없이 loading 상태 불가")
        return self


# Events


class SourceSelected(BaseModel):
    source: SelectedSource


class DetectionRequested(BaseModel):
    pass


class DetectionSucceeded(BaseModel):
    generation: int
    detections: list[Detection]


class DetectionFailed(BaseModel):
    generation: int
    message: str


Event = SourceSelected | DetectionRequested | DetectionSucceeded | DetectionFailed


def transition(state: DetectionState, event: Event) -> DetectionState:
    """상태 전이 (순수 함수). 허용되지 않는 전이는 state를 그대로 반환"""
    if isinstance(event, SourceSelected):
        return DetectionState(source=event.source, generation=state.generation + 1)

    if isinstance(event, DetectionRequested):
        if state.source is None or state.status == "loading":
            return state
        return DetectionState(
            status="loading", source=state.source, generation=state.generation + 1
        )

    # 응답 이벤트: 현재 진행 중인 요청의 것만 반영
    if state.status != "loading" or event.generation != state.generation:
        return state

    if isinstance(event, DetectionSucceeded):
        return state.model_copy(
            update={"status": "success", "detections": tuple(event.detections)}
        )
    return DetectionState(
        status="error",
        source=state.source,
        error=event.message,
        generation=state.generation,
    )


class DetectionStore:
    """현재 상태를 보관하고 이벤트를 적용하는 단일 진실 공급원"""

    def __init__(self, state: DetectionState | None = None) -> None:
        self._state = state or DetectionState()

    @property
    def state(self) -> DetectionState:
        return self._state

    @property
    def can_trigger(self) -> bool:
        """탐지 버튼 활성 여부 (이미지 있음 + 요청 중 아님)"""
        return self._state.source is not None and self._state.status != "loading"

    def dispatch(self, event: Event) -> DetectionState:
        new_state = transition(self._state, event)
        if new_state is self._state and isinstance(event, DetectionSucceeded | DetectionFailed):
            logger.info(
                f"stale 응답 폐기: generation={event.generation}, "
                f"current={self._state.generation}"
            )
        self._state = new_state
        return new_state
