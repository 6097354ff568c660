"""Test doubles and image builders shared by the test modules and conftest fixtures."""

import io

from PIL import Image


def make_image_bytes(fmt="PNG", size=(4, 3), color=(200, 30, 30)):
    buf = io.BytesIO()
    Image.new("RGB", size, color).save(buf, format=fmt)
    return buf.getvalue()


class FailingClient:
    name = "failing"

    def __init__(self, exc=None):
        self.exc = exc or RuntimeError("service unreachable")
        self.calls = 0

    async def analyze(self, image, target_lod, element_type=None, context=None, mime_type="image/png"):
        self.calls += 1
        raise self.exc
