from dataclasses import dataclass
from typing import Literal

from pydantic import BaseModel


@dataclass(frozen=True)
class UploadedImage:
    """The parsed multipart file, alive for one request."""
    filename: str
    content_type: str
    content: bytes

    @property
    def size(self) -> int:
        return len(self.content)

class OCRData(BaseModel):
    inputFile: str
    outputFile: str
    markdown: str
    bucket: str
    processingTime: str

class OCRSuccessResponse(BaseModel):
    success: Literal[True] = True
    message: str = "OCR processing completed successfully"
    data: OCRData

class OCRErrorResponse(BaseModel):
    success: Literal[False] = False
    error: str

class HealthResponse(BaseModel):
    status: str
    service: str
    timestamp: str
