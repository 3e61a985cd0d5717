import logging
from typing import Callable, Optional

from fastapi.concurrency import run_in_threadpool

from core.config import Settings
from core.exceptions import (
    MissingBucketConfigError,
    MissingCredentialError,
    MissingFileError,
)
from helper.keys import build_storage_keys, now_ms
from helper.staging import staged_image
from helper.timing import format_elapsed
from schemas.ocr_schema import OCRData, UploadedImage
from services.inference_service import MarkdownExtractor
from services.storage_service import S3BlobStore

logger = logging.getLogger(__name__)

MARKDOWN_CONTENT_TYPE = "text/markdown"


class OCRPipeline:
    """
    Per-request flow: validate -> upload image -> OCR -> upload markdown.

    Stages run strictly in order and the first failure ends the request.
    Nothing is retried and nothing already written is rolled back, so an
    inference failure leaves the uploaded image in the bucket with no
    markdown next to it.
    """

    def __init__(self, settings: Settings, store: S3BlobStore, extractor: MarkdownExtractor,
                 clock: Callable[[], int] = now_ms):
        self.settings = settings
        self.store = store
        self.extractor = extractor
        self.clock = clock

    def validate(self, image: Optional[UploadedImage]) -> str:
        """
        Checks preconditions before any network call. Returns the bucket name.

        :raises MissingFileError: No file, or an empty one.
        :raises MissingCredentialError: TOGETHER_API_KEY is not configured.
        :raises MissingBucketConfigError: BUCKET_NAME is not configured.
        """
        if image is None or not image.content:
            raise MissingFileError()
        if not self.settings.TOGETHER_API_KEY:
            raise MissingCredentialError()
        if not self.settings.BUCKET_NAME:
            raise MissingBucketConfigError()
        return self.settings.BUCKET_NAME

    async def run(self, image: Optional[UploadedImage]) -> OCRData:
        bucket = self.validate(image)
        logger.info("Processing image: %s (%d bytes)", image.filename, image.size)

        image_key, markdown_key = build_storage_keys(image.filename, self.clock())
        await run_in_threadpool(self.store.put, bucket, image_key, image.content, image.content_type)
        logger.info("Uploaded to S3: %s", image_key)

        logger.info("Running OCR with %s", self.settings.OCR_MODEL)
        start = self.clock()
        markdown = await self._extract(image)
        end = self.clock()
        processing_time = format_elapsed(start, end)
        logger.info("OCR completed in %s, markdown length: %d", processing_time, len(markdown))

        await run_in_threadpool(self.store.put, bucket, markdown_key, markdown, MARKDOWN_CONTENT_TYPE)
        logger.info("Saved markdown to S3: %s", markdown_key)

        return OCRData(
            inputFile=image_key,
            outputFile=markdown_key,
            markdown=markdown,
            bucket=bucket,
            processingTime=processing_time,
        )

    async def _extract(self, image: UploadedImage) -> str:
        if self.settings.OCR_IMAGE_MODE == "staged":
            with staged_image(image.content, self.settings.TEMP_DIR, image.filename, self.clock) as local_path:
                return await run_in_threadpool(
                    self.extractor.extract_markdown_file, local_path, image.content_type
                )
        return await run_in_threadpool(self.extractor.extract_markdown, image.content, image.content_type)
