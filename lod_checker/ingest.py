"""Image ingestion: turn an uploaded screenshot into a preview data URL and a base64 payload."""

import base64
import binascii
import hashlib
import io
import logging
from typing import BinaryIO, Optional, Union

from PIL import Image, ImageOps, UnidentifiedImageError

from lod_checker.errors import ImageDecodeError
from lod_checker.models import EncodedImage

logger = logging.getLogger(__name__)

DEFAULT_MIME = "image/png"

ImageSource = Union[bytes, bytearray, BinaryIO]


def read_source(source: ImageSource) -> bytes:
    """Read all bytes from raw data or a file-like upload, leaving the upload rewound."""
    if isinstance(source, (bytes, bytearray)):
        return bytes(source)
    try:
        source.seek(0)
        data = source.read()
        source.seek(0)
    except (OSError, ValueError) as e:
        raise ImageDecodeError(f"cannot read upload: {e}") from e
    return data


def file_hash(data: bytes) -> str:
    return hashlib.md5(data).hexdigest()


def _detect_mime(data: bytes) -> Optional[str]:
    try:
        with Image.open(io.BytesIO(data)) as img:
            img.verify()
            fmt = img.format
    except (UnidentifiedImageError, OSError, SyntaxError, ValueError) as e:
        raise ImageDecodeError(f"not a decodable image: {e}") from e
    return Image.MIME.get(fmt) if fmt else None


def encode_image(source: ImageSource, mime_type: Optional[str] = None) -> EncodedImage:
    """
    Encode an image for display and transmission.

    The image only has to be decodable; size and content are not checked.
    The MIME type comes from the decoded format, then the caller's hint.
    """
    data = read_source(source)
    if not data:
        raise ImageDecodeError("empty file")
    detected = _detect_mime(data)
    encoded = EncodedImage(
        payload=base64.b64encode(data).decode("ascii"),
        mime_type=detected or mime_type or DEFAULT_MIME,
        digest=file_hash(data),
        size=len(data),
    )
    logger.debug("encoded %d bytes as %s (%s)", encoded.size, encoded.mime_type, encoded.digest)
    return encoded


def decode_payload(payload: str) -> bytes:
    try:
        return base64.b64decode(payload, validate=True)
    except (binascii.Error, ValueError) as e:
        raise ImageDecodeError(f"invalid base64 payload: {e}") from e


def data_url_to_bytes(data_url: str) -> bytes:
    header, sep, payload = data_url.partition(",")
    if not sep or not header.startswith("data:") or ";base64" not in header:
        raise ImageDecodeError("not a base64 data URL")
    return decode_payload(payload)


def preview_image(encoded: EncodedImage, max_pixels: int = 1024) -> Image.Image:
    """Decoded, auto-rotated and downscaled copy for display."""
    img = Image.open(io.BytesIO(decode_payload(encoded.payload)))
    img = ImageOps.exif_transpose(img)
    img = img.convert("RGB")
    w, h = img.size
    max_dim = max(w, h)
    if max_dim > max_pixels:
        scale = max_pixels / max_dim
        img = img.resize((int(w * scale), int(h * scale)))
    return img
