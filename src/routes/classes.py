from fastapi import APIRouter

from src.constants import COCO_CLASSES
from src.schemas.classes import ClassesResponse

router = APIRouter(prefix="/classes", tags=["classes"])


@router.get("", response_model=ClassesResponse)
def list_classes() -> ClassesResponse:
    """탐지 가능한 클래스 목록 (안내 패널용)"""
    return ClassesResponse(classes=list(COCO_CLASSES))
