from pydantic_settings import BaseSettings, SettingsConfigDict
from dotenv import load_dotenv

# Load environment variables from .env file
load_dotenv()

# Use Pydantic BaseSettings for robust settings management
# Pydantic will automatically read from environment variables.
class Settings(BaseSettings):
    model_config = SettingsConfigDict(extra="ignore")

    # Core App Settings
    PROJECT_NAME: str = "OCR-to-Markdown"
    CORS_ORIGINS: list[str] = ["*"]
    HOST: str = "0.0.0.0"
    PORT: int = 3000
    LOG_LEVEL: str = "INFO"
    STATIC_DIR: str = "public"
    MAX_UPLOAD_BYTES: int = 10 * 1024 * 1024

    # Object storage (S3 or any S3-compatible endpoint)
    BUCKET_NAME: str | None = None
    AWS_REGION: str = "us-east-1"
    S3_ENDPOINT_URL: str | None = None

    # Together AI (OpenAI-compatible chat completions)
    TOGETHER_API_KEY: str | None = None
    TOGETHER_BASE_URL: str = "https://api.together.xyz/v1"

    # OCR request shaping
    OCR_MODEL: str = "meta-llama/Llama-4-Maverick-17B-128E-Instruct-FP8"
    OCR_MAX_TOKENS: int = 4096
    OCR_TEMPERATURE: float = 0.1
    OCR_IMAGE_MODE: str = "inline"  # 'inline' or 'staged'
    TEMP_DIR: str = "./temp_uploads"

    def summary(self) -> dict:
        """Resolved configuration, safe to log (the API key is only reported as present or not)."""
        return {
            "port": self.PORT,
            "region": self.AWS_REGION,
            "bucket": self.BUCKET_NAME or "NOT SET",
            "together_api_key": "SET" if self.TOGETHER_API_KEY else "NOT SET",
            "model": self.OCR_MODEL,
            "image_mode": self.OCR_IMAGE_MODE,
        }

settings = Settings()
