from datetime import datetime, timezone

from fastapi import APIRouter

from schemas.ocr_schema import HealthResponse

# Reported by /health regardless of PROJECT_NAME, which only titles the API docs
SERVICE_NAME = "OCR-to-Markdown"

router = APIRouter(tags=["health"])


@router.get("/health", response_model=HealthResponse)
async def health():
    """Health check endpoint"""
    return HealthResponse(
        status="healthy",
        service=SERVICE_NAME,
        timestamp=datetime.now(timezone.utc).isoformat().replace("+00:00", "Z"),
    )
