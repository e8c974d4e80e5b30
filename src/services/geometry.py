"""원본 좌표 → 화면 좌표 변환

탐지 결과는 원본 이미지(px) 기준이므로, 화면에 축소/확대되어 표시된
이미지 위에 그리려면 매 렌더마다 현재 표시 크기로 다시 투영해야 한다.
"""

from pydantic import BaseModel, ConfigDict

from src.schemas.detection import Box


class ImageGeometry(BaseModel):
    """원본(natural) 크기와 화면 표시(displayed) 크기

    scale은 저장하지 않고 접근할 때마다 계산한다 (리사이즈 후 stale 방지).
    """

    model_config = ConfigDict(frozen=True)

    natural_width: float
    natural_height: float
    displayed_width: float
    displayed_height: float

    @property
    def is_degenerate(self) -> bool:
        """디코딩 전 등 원본 크기를 모르는 상태"""
        return self.natural_width <= 0 or self.natural_height <= 0

    @property
    def scale(self) -> tuple[float, float]:
        """(sx, sy). degenerate인 경우 (0, 0)"""
        if self.is_degenerate:
            return (0.0, 0.0)
        return (
            self.displayed_width / self.natural_width,
            self.displayed_height / self.natural_height,
        )


class DisplayBox(BaseModel):
    """화면 좌표계 박스 (px)"""

    model_config = ConfigDict(frozen=True)

    left: float
    top: float
    width: float
    height: float

    @property
    def is_empty(self) -> bool:
        return self.width <= 0 and self.height <= 0 and self.left == 0 and self.top == 0

    def to_style(self) -> dict[str, str]:
        """CSS 절대 위치 스타일. 빈 박스는 빈 dict (no-op 스타일)"""
        if self.is_empty:
            return {}
        return {
            "left": f"{self.left}px",
            "top": f"{self.top}px",
            "width": f"{self.width}px",
            "height": f"{self.height}px",
        }


EMPTY_BOX = DisplayBox(left=0.0, top=0.0, width=0.0, height=0.0)


def map_box(box: Box, geometry: ImageGeometry) -> DisplayBox:
    """원본 좌표 박스를 화면 좌표로 투영 (순수 함수)

    Args:
        box: (xmin, ymin, xmax, ymax) 원본 이미지 기준 px
        geometry: 현재 이미지 원본/표시 크기

    Returns:
        DisplayBox: 화면 기준 px. 원본 크기를 모르면 EMPTY_BOX
    """
    if geometry.is_degenerate:
        return EMPTY_BOX

    sx, sy = geometry.scale
    xmin, ymin, xmax, ymax = box
    return DisplayBox(
        left=xmin * sx,
        top=ymin * sy,
        width=(xmax - xmin) * sx,
        height=(ymax - ymin) * sy,
    )
