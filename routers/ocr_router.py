import logging
from typing import Annotated, Optional

from fastapi import APIRouter, Depends, File, Request, UploadFile, status
from fastapi.responses import JSONResponse

from core.exceptions import OCRServiceError, UploadTooLargeError
from schemas.ocr_schema import OCRErrorResponse, OCRSuccessResponse, UploadedImage
from services.ocr_pipeline import OCRPipeline

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/api",
    tags=["ocr"],
)


def get_pipeline(request: Request) -> OCRPipeline:
    """The pipeline built at startup and stored on app.state."""
    return request.app.state.pipeline

pipeline_dependency = Annotated[OCRPipeline, Depends(get_pipeline)]


def error_response(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content=OCRErrorResponse(error=message).model_dump(),
    )


@router.post(
    "/ocr",
    response_model=OCRSuccessResponse,
    responses={400: {"model": OCRErrorResponse}, 413: {"model": OCRErrorResponse}, 500: {"model": OCRErrorResponse}},
)
async def run_ocr(pipeline: pipeline_dependency, image: Optional[UploadFile] = File(None)):
    """
    Uploads the image to S3, extracts its text as markdown with the vision
    model, saves the markdown next to it and returns both keys.
    """
    logger.info("Received OCR request")
    filename = image.filename if image is not None else None

    try:
        uploaded = None
        if image is not None:
            content = await image.read()
            # Chunked bodies carry no Content-Length for the middleware to check
            if len(content) > pipeline.settings.MAX_UPLOAD_BYTES:
                raise UploadTooLargeError(pipeline.settings.MAX_UPLOAD_BYTES)
            uploaded = UploadedImage(
                filename=image.filename or "image",
                content_type=image.content_type or "application/octet-stream",
                content=content,
            )

        data = await pipeline.run(uploaded)
        return OCRSuccessResponse(data=data)

    except OCRServiceError as e:
        logger.error("OCR request failed at stage=%s file=%s: %s", e.stage, filename, e.message)
        return error_response(e.status_code, e.message)
    except Exception as e:
        logger.exception("Unexpected error processing OCR for file=%s", filename)
        return error_response(status.HTTP_500_INTERNAL_SERVER_ERROR, str(e) or "Failed to process image")
