"""Detection 스키마

게이트웨이(/predict) 응답과 뷰어 상태에서 공통으로 사용.
모든 좌표는 원본 이미지 기준 절대 좌표(px), 원점은 좌상단.
"""

from pydantic import BaseModel, ConfigDict, Field, field_validator

Box = tuple[float, float, float, float]


class Detection(BaseModel):
    """탐지된 객체 하나

    wire 필드명(class_name, bounding_box)은 alias로 유지하고
    코드에서는 label, box로 접근한다.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True, allow_inf_nan=False)

    label: str = Field(alias="class_name")
    confidence: float = Field(ge=0.0, le=1.0)
    box: Box = Field(alias="bounding_box")

    @field_validator("box")
    @classmethod
    def normalize_box(cls, box: Box) -> Box:
        """xmin <= xmax, ymin <= ymax 보장 (역전된 경우 자동 정렬)"""
        xmin, ymin, xmax, ymax = box
        if xmin > xmax:
            xmin, xmax = xmax, xmin
        if ymin > ymax:
            ymin, ymax = ymax, ymin
        return (xmin, ymin, xmax, ymax)

    def to_wire(self) -> dict[str, object]:
        return self.model_dump(mode="json", by_alias=True)


class DetectionsResponse(BaseModel):
    detections: list[Detection]


class ErrorResponse(BaseModel):
    error: str
