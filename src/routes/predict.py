"""Predict API 라우트

업로드된 이미지를 백엔드 추론 서버로 중계하는 게이트웨이 엔드포인트.

NOTE: 응답 본문은 {detections} 또는 {error} 그대로 반환 (HTTPException의 detail 래핑 없음).
"""

from fastapi import APIRouter, Request, status
from fastapi.responses import JSONResponse
from starlette.datastructures import UploadFile
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.formparsers import MultiPartException

from src.constants import ErrorMessage
from src.schemas.detection import DetectionsResponse, ErrorResponse
from src.services import proxy as proxy_service

router = APIRouter(prefix="/predict", tags=["predict"])


async def _has_file(request: Request) -> bool:
    """multipart 본문에 file 필드가 있는지 확인"""
    try:
        form = await request.form()
    except (MultiPartException, StarletteHTTPException):
        return False

    try:
        return isinstance(form.get("file"), UploadFile)
    finally:
        await form.close()


@router.post(
    "",
    response_model=DetectionsResponse,
    responses={400: {"model": ErrorResponse}, 502: {"model": ErrorResponse}},
)
async def predict(request: Request) -> JSONResponse:
    """이미지 객체 탐지 (백엔드 중계)"""
    # body()를 먼저 읽어 캐시해야 form() 파싱 후에도 원문 전달 가능
    body = await request.body()

    if not await _has_file(request):
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content={"error": ErrorMessage.NO_FILE},
        )

    result = await proxy_service.relay_prediction(
        body, request.headers.get("content-type", "")
    )
    return JSONResponse(status_code=result.status_code, content=result.body)
