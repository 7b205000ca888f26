import base64
import binascii
import logging
import os
import time
from concurrent.futures import ThreadPoolExecutor
from io import BytesIO
from urllib.parse import unquote, unquote_to_bytes, urlparse

import requests
from PIL import Image, UnidentifiedImageError
from requests.exceptions import RequestException

from .config import (
    CONNECT_TIMEOUT,
    CORS_RELAYS,
    LOAD_RETRIES,
    READ_TIMEOUT,
    RETRY_DELAY,
    USER_AGENT,
)
from .errors import ImageLoadError

logger = logging.getLogger(__name__)


class LoadResult:
    def __init__(self, source, image=None, error=None, attempts=0, fetched_from=None):
        self.source = source
        self.image = image
        self.error = error
        self.attempts = attempts
        self.fetched_from = fetched_from

    @property
    def ok(self):
        return self.image is not None


def is_embedded(source):
    """True for sources that never go through a relay (data/blob URIs and local files)."""
    if source.startswith(("data:", "blob:", "file:")):
        return True
    return os.path.isfile(source)


def decode_image(data):
    """Fully decode image bytes with Pillow; raises ImageLoadError if they are not an image."""
    try:
        img = Image.open(BytesIO(data))
        img.load()
    except (UnidentifiedImageError, Image.DecompressionBombError, OSError, ValueError, SyntaxError) as e:
        raise ImageLoadError(f"Could not decode image: {e}") from e
    return flatten_on_white(img)


def flatten_on_white(img):
    """RGB copy of img with any transparency composited onto white, as it prints on paper."""
    if img.mode == "RGB":
        return img
    if img.mode in ("RGBA", "LA", "PA") or (img.mode == "P" and "transparency" in img.info):
        rgba = img.convert("RGBA")
        background = Image.new("RGB", img.size, "#ffffff")
        background.paste(rgba, mask=rgba.getchannel("A"))
        return background
    return img.convert("RGB")


def read_embedded(source):
    """Return the raw bytes behind a data URI, file URI or local path."""
    if source.startswith("blob:"):
        raise ImageLoadError("blob: references cannot be resolved outside a browser")

    if source.startswith("data:"):
        header, sep, payload = source.partition(",")
        if not sep:
            raise ImageLoadError("Malformed data URI")
        try:
            if header.endswith(";base64"):
                return base64.b64decode(payload, validate=True)
            return unquote_to_bytes(payload)
        except (binascii.Error, ValueError) as e:
            raise ImageLoadError(f"Malformed data URI: {e}") from e

    path = unquote(urlparse(source).path) if source.startswith("file:") else source
    try:
        with open(path, "rb") as f:
            return f.read()
    except OSError as e:
        raise ImageLoadError(f"Could not read {path}: {e}") from e


def fetch_bytes(url):
    try:
        response = requests.get(
            url,
            headers={"User-Agent": USER_AGENT},
            timeout=(CONNECT_TIMEOUT, READ_TIMEOUT)
        )
        response.raise_for_status()
    except RequestException as e:
        raise ImageLoadError(f"Error downloading image from {url}: {e}") from e
    return response.content


def probe_image(url):
    """Download a URL directly and decode it fully, raising ImageLoadError on any failure."""
    return decode_image(fetch_bytes(url))


def load_image(source, retries=LOAD_RETRIES, delay=RETRY_DELAY, relays=CORS_RELAYS, sleep=time.sleep):
    """
    Load the image behind a card source.

    Embedded sources are decoded directly. Remote URLs are fetched through the relay
    list: the first attempt uses relays[0], every failure rotates to the next relay and
    waits `delay` seconds, up to `retries` retries. Never raises for fetch or decode
    failures; the last error is carried in the returned LoadResult.
    """
    if is_embedded(source):
        try:
            return LoadResult(source, image=decode_image(read_embedded(source)), attempts=1, fetched_from=source)
        except ImageLoadError as e:
            logger.warning("Image not loaded: %s", e)
            return LoadResult(source, error=e, attempts=1)

    if not relays:
        relays = (lambda url: url,)

    relay_index = 0
    last_error = None
    for attempt in range(retries + 1):
        if attempt:
            relay_index = (relay_index + 1) % len(relays)
            sleep(delay)
        target = relays[relay_index](source)
        logger.debug("Loading %s via %s (attempt %d)", source, target, attempt + 1)
        try:
            image = decode_image(fetch_bytes(target))
            return LoadResult(source, image=image, attempts=attempt + 1, fetched_from=target)
        except ImageLoadError as e:
            last_error = e

    logger.warning("Image not loaded after %d attempts: %s", retries + 1, source)
    return LoadResult(source, error=ImageLoadError(f"Image not loaded: {source} ({last_error})"),
                      attempts=retries + 1)


def load_images(sources, max_workers=8, **kwargs):
    """Load every source concurrently and return results in input order once all are done."""
    if not sources:
        return []
    with ThreadPoolExecutor(max_workers=max(1, min(max_workers, len(sources)))) as pool:
        futures = [pool.submit(load_image, source, **kwargs) for source in sources]
        return [future.result() for future in futures]
