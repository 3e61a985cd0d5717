"""Errors raised by the OCR pipeline, each carrying the HTTP status it maps to."""

from fastapi import status


class OCRServiceError(Exception):
    """Base exception for OCR-to-Markdown errors."""

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(self, message: str, stage: str | None = None):
        super().__init__(message)
        self.message = message
        self.stage = stage


class ClientInputError(OCRServiceError):
    """Raised when the caller sent something we cannot process."""

    status_code = status.HTTP_400_BAD_REQUEST


class MissingFileError(ClientInputError):
    def __init__(self):
        super().__init__("No image file provided. Please upload an image.", stage="validate")


class UploadTooLargeError(ClientInputError):
    status_code = 413  # Payload Too Large

    def __init__(self, limit: int):
        super().__init__(f"File too large. Maximum upload size is {limit} bytes.", stage="validate")
        self.limit = limit


class ConfigurationError(OCRServiceError):
    """Raised when a required server setting is missing."""


class MissingCredentialError(ConfigurationError):
    def __init__(self):
        super().__init__("Server configuration error: TOGETHER_API_KEY not set", stage="validate")


class MissingBucketConfigError(ConfigurationError):
    def __init__(self):
        super().__init__("Server configuration error: BUCKET_NAME not set", stage="validate")


class StorageError(OCRServiceError):
    """Raised when writing to the object store fails."""


class InferenceError(OCRServiceError):
    """Raised when the vision model call fails."""
