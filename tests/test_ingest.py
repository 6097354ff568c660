import base64
import io

import pytest

from lod_checker.errors import ImageDecodeError
from lod_checker.ingest import (
    data_url_to_bytes,
    decode_payload,
    encode_image,
    file_hash,
    preview_image,
)
from tests.helpers import make_image_bytes


def test_preview_and_payload_decode_to_original_bytes(png_bytes):
    encoded = encode_image(png_bytes)
    assert decode_payload(encoded.payload) == png_bytes
    assert data_url_to_bytes(encoded.data_url) == png_bytes


def test_payload_has_no_data_url_prefix(png_bytes):
    encoded = encode_image(png_bytes)
    assert not encoded.payload.startswith("data:")
    assert encoded.data_url == "data:image/png;base64," + encoded.payload


def test_mime_type_comes_from_decoded_format(jpeg_bytes):
    # the caller's hint is wrong; the decoded format wins
    encoded = encode_image(jpeg_bytes, mime_type="image/png")
    assert encoded.mime_type == "image/jpeg"


def test_file_like_upload_is_rewound(png_bytes):
    upload = io.BytesIO(png_bytes)
    upload.read()
    encoded = encode_image(upload)
    assert encoded.size == len(png_bytes)
    assert upload.tell() == 0
    assert encoded.digest == file_hash(png_bytes)


def test_any_decodable_image_is_accepted():
    big = make_image_bytes("PNG", size=(1, 2000))
    assert encode_image(big).size == len(big)


@pytest.mark.parametrize("data", [b"", b"not an image at all"])
def test_undecodable_input_raises(data):
    with pytest.raises(ImageDecodeError):
        encode_image(data)


def test_bad_payloads_raise():
    with pytest.raises(ImageDecodeError):
        decode_payload("!!!not base64!!!")
    with pytest.raises(ImageDecodeError):
        data_url_to_bytes("https://example.com/beam.png")


def test_preview_image_is_downscaled():
    encoded = encode_image(make_image_bytes("PNG", size=(2048, 1024)))
    img = preview_image(encoded, max_pixels=1024)
    assert img.size == (1024, 512)
    assert img.mode == "RGB"


def test_same_bytes_same_digest(png_bytes):
    assert encode_image(png_bytes).digest == encode_image(base64.b64decode(base64.b64encode(png_bytes))).digest
