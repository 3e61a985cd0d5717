import logging
import os
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exception_handlers import request_validation_exception_handler
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles

from core.config import Settings, settings as default_settings
from core.exceptions import MissingFileError, UploadTooLargeError
from routers import health_router, ocr_router
from services.inference_service import build_extractor
from services.ocr_pipeline import OCRPipeline
from services.storage_service import S3BlobStore, build_s3_client

logger = logging.getLogger(__name__)

# Room for multipart boundaries and part headers on top of the file itself
MULTIPART_OVERHEAD = 64 * 1024

OCR_PATH = "/api/ocr"


def build_pipeline(settings: Settings) -> OCRPipeline:
    """Creates the S3 and inference clients once for the whole process."""
    store = S3BlobStore(build_s3_client(settings))
    return OCRPipeline(settings, store, build_extractor(settings))


def log_startup(settings: Settings) -> None:
    summary = settings.summary()
    logger.info("OCR-to-Markdown Server Started!")
    logger.info("Server running on port %s", summary["port"])
    logger.info("Access at: http://localhost:%s", summary["port"])
    logger.info("Environment:")
    logger.info("  - Region: %s", summary["region"])
    logger.info("  - S3 Bucket: %s", summary["bucket"])
    logger.info("  - Together API Key: %s", summary["together_api_key"])
    logger.info("  - Model: %s (%s images)", summary["model"], summary["image_mode"])


@asynccontextmanager
async def lifespan(app: FastAPI):
    # --- STARTUP ---
    log_startup(app.state.settings)
    yield
    # --- SHUTDOWN ---
    logger.info("Stopping OCR-to-Markdown server")


def create_application(settings: Settings | None = None, pipeline: OCRPipeline | None = None) -> FastAPI:
    """
    Creates and configures the FastAPI application instance.

    Tests pass their own settings and a pipeline wired with test doubles.
    """
    settings = settings or default_settings

    # Configure logging
    logging.basicConfig(
        level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO),
        format="%(asctime)s | %(levelname)s | %(name)s | %(message)s",
    )

    app = FastAPI(title=settings.PROJECT_NAME, lifespan=lifespan)
    app.state.settings = settings
    app.state.pipeline = pipeline or build_pipeline(settings)

    # 1. Reject oversized uploads before the body is parsed
    @app.middleware("http")
    async def limit_upload_size(request: Request, call_next):
        if request.method == "POST":
            declared = request.headers.get("content-length")
            if declared and declared.isdigit() and int(declared) > settings.MAX_UPLOAD_BYTES + MULTIPART_OVERHEAD:
                error = UploadTooLargeError(settings.MAX_UPLOAD_BYTES)
                logger.warning("Rejected upload of %s bytes to %s", declared, request.url.path)
                return ocr_router.error_response(error.status_code, error.message)
        return await call_next(request)

    # 2. CORS Middleware, added last so it wraps every response (413s included)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # 3. An 'image' part sent as plain text is a missing file, not a 422
    @app.exception_handler(RequestValidationError)
    async def ocr_validation_error(request: Request, exc: RequestValidationError):
        if request.url.path == OCR_PATH:
            error = MissingFileError()
            logger.error("OCR request failed at stage=%s: %s", error.stage, exc.errors())
            return ocr_router.error_response(error.status_code, error.message)
        return await request_validation_exception_handler(request, exc)

    # 4. Include Routers
    app.include_router(health_router.router)
    app.include_router(ocr_router.router)

    # 5. Bundled web UI, mounted last so the API routes take precedence
    if os.path.isdir(settings.STATIC_DIR):
        app.mount("/", StaticFiles(directory=settings.STATIC_DIR, html=True), name="static")
    else:
        logger.info("Static directory %s not found; web UI disabled", settings.STATIC_DIR)

    return app
