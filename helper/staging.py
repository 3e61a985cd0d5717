import logging
import os
from contextlib import contextmanager
from typing import Callable, Iterator

from helper.keys import now_ms

logger = logging.getLogger(__name__)


@contextmanager
def staged_image(content: bytes, temp_dir: str, filename: str,
                 clock: Callable[[], int] = now_ms) -> Iterator[str]:
    """
    Writes the image to a request-scoped temporary file and yields its path.

    The file is removed on every exit path. A failed removal is logged and
    never raised, so cleanup cannot fail the request.
    """
    os.makedirs(temp_dir, exist_ok=True)
    name = os.path.basename(filename) or "image"
    local_path = os.path.join(temp_dir, f"temp-{clock()}-{name}")

    try:
        with open(local_path, "wb") as f:
            f.write(content)
        yield local_path
    finally:
        try:
            os.remove(local_path)
            logger.debug("Cleaned up temporary file: %s", local_path)
        except OSError as e:
            logger.warning("Could not remove temporary file %s: %s", local_path, e)
