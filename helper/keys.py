import posixpath
import time

UPLOAD_PREFIX = "uploads"


def now_ms() -> int:
    """Current unix time in milliseconds."""
    return int(time.time() * 1000)


def build_storage_keys(filename: str, timestamp_ms: int) -> tuple[str, str]:
    """
    Builds the object keys for an uploaded image and its markdown result.

    :param filename: The client-provided filename (e.g., 'receipt.png').
    :param timestamp_ms: Unix timestamp in milliseconds used as the key prefix.
    :return: (image_key, markdown_key), e.g. ('uploads/1700000000000-receipt.png', 'uploads/1700000000000-receipt.md')
    """
    # Browsers may send 'C:\\fakepath\\x.png' or a relative path; keep only the name
    name = posixpath.basename(filename.replace("\\", "/")) or "image"
    image_key = f"{UPLOAD_PREFIX}/{timestamp_ms}-{name}"

    stem, ext = posixpath.splitext(image_key)
    # No extension: append instead of replacing so the image is never overwritten
    markdown_key = f"{stem}.md" if ext else f"{image_key}.md"
    return image_key, markdown_key
