import base64
import logging
from typing import Any, Optional

from openai import OpenAI, OpenAIError

from core.config import Settings
from core.exceptions import InferenceError
from helper.prompts import NO_TEXT_PLACEHOLDER, OCR_MARKDOWN_PROMPT

logger = logging.getLogger(__name__)


def to_data_url(content: bytes, mime_type: str) -> str:
    encoded = base64.b64encode(content).decode("ascii")
    return f"data:{mime_type};base64,{encoded}"


def build_messages(image_url: str) -> list[dict[str, Any]]:
    """Single user turn: the fixed instruction followed by the image."""
    return [
        {
            "role": "user",
            "content": [
                {"type": "text", "text": OCR_MARKDOWN_PROMPT},
                {"type": "image_url", "image_url": {"url": image_url}},
            ],
        }
    ]


def extract_content(response: Any) -> str:
    """First choice's text, or the placeholder when the model returned nothing."""
    try:
        content = response.choices[0].message.content
    except (IndexError, AttributeError, TypeError):
        content = None
    if not isinstance(content, str) or not content:
        return NO_TEXT_PLACEHOLDER
    return content


class MarkdownExtractor:
    """
    Sends an image to a hosted vision-language model and returns markdown.

    The provider speaks the OpenAI chat completions protocol, so the stock
    OpenAI client is pointed at its base URL. The client is created on first
    use, which lets the server start (and report a configuration error per
    request) without an API key.
    """

    def __init__(self, settings: Settings, client: Optional[OpenAI] = None):
        self.settings = settings
        self._client = client

    @property
    def client(self) -> OpenAI:
        if self._client is None:
            self._client = OpenAI(
                api_key=self.settings.TOGETHER_API_KEY,
                base_url=self.settings.TOGETHER_BASE_URL,
                max_retries=0,
            )
        return self._client

    def extract_markdown(self, content: bytes, mime_type: str) -> str:
        """
        Runs OCR on in-memory image bytes.

        :param content: The raw image bytes.
        :param mime_type: The declared MIME type, used in the data URL.
        :return: The markdown text, or the placeholder if the model returned none.
        :raises InferenceError: On any provider or transport failure (timeout, auth, rate limit).
        """
        image_url = to_data_url(content, mime_type)
        try:
            response = self.client.chat.completions.create(
                model=self.settings.OCR_MODEL,
                messages=build_messages(image_url),
                max_tokens=self.settings.OCR_MAX_TOKENS,
                temperature=self.settings.OCR_TEMPERATURE,
            )
        except OpenAIError as e:
            raise InferenceError(f"OCR inference failed: {e}", stage="inference") from e
        except Exception as e:
            # Not raised by the provider API itself (e.g. a malformed response body)
            raise InferenceError(f"Unexpected error calling the OCR model: {e}", stage="inference") from e

        return extract_content(response)

    def extract_markdown_file(self, local_path: str, mime_type: str) -> str:
        """Runs OCR on an image staged on local disk."""
        with open(local_path, "rb") as f:
            content = f.read()
        return self.extract_markdown(content, mime_type)


def build_extractor(settings: Settings) -> MarkdownExtractor:
    return MarkdownExtractor(settings)
