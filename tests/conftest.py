from copy import deepcopy
from types import SimpleNamespace

import pytest

from lod_checker.mock_client import SAMPLE_REPORT
from tests.helpers import FailingClient, make_image_bytes


@pytest.fixture
def png_bytes():
    return make_image_bytes("PNG")


@pytest.fixture
def jpeg_bytes():
    return make_image_bytes("JPEG", size=(8, 8))


@pytest.fixture
def report_dict():
    return deepcopy(SAMPLE_REPORT)


class FakeModels:
    """Stands in for genai.Client().aio.models."""

    def __init__(self, text=None, exc=None):
        self.text = text
        self.exc = exc
        self.calls = []

    async def generate_content(self, **kwargs):
        self.calls.append(kwargs)
        if self.exc is not None:
            raise self.exc
        return SimpleNamespace(text=self.text)


class FakeGenaiClient:
    def __init__(self, text=None, exc=None):
        self.models = FakeModels(text, exc)
        self.aio = SimpleNamespace(models=self.models)


@pytest.fixture
def fake_genai():
    return FakeGenaiClient


@pytest.fixture
def failing_client():
    return FailingClient()
