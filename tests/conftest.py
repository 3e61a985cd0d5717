import itertools
import os
from types import SimpleNamespace

import pytest
from fastapi.testclient import TestClient

from core.config import Settings
from core.init_app import create_application
from services.ocr_pipeline import OCRPipeline

FIXED_TS = 1700000000000
ROOT_DIR = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))


class FakeStore:
    """Records every put; optionally fails on keys with a given suffix."""

    def __init__(self, fail_on_suffix=None, error=None):
        self.puts = []
        self.fail_on_suffix = fail_on_suffix
        self.error = error

    def put(self, bucket, key, content, content_type):
        if self.fail_on_suffix and key.endswith(self.fail_on_suffix):
            raise self.error
        self.puts.append((bucket, key, content, content_type))

    @property
    def keys(self):
        return [key for _, key, _, _ in self.puts]


class FakeExtractor:
    def __init__(self, markdown="# Title", error=None):
        self.markdown = markdown
        self.error = error
        self.calls = []

    def extract_markdown(self, content, mime_type):
        self.calls.append((content, mime_type))
        if self.error is not None:
            raise self.error
        return self.markdown

    def extract_markdown_file(self, local_path, mime_type):
        with open(local_path, "rb") as f:
            return self.extract_markdown(f.read(), mime_type)


class FakeCompletions:
    def __init__(self, response=None, error=None):
        self.response = response
        self.error = error
        self.calls = []

    def create(self, **kwargs):
        self.calls.append(kwargs)
        if self.error is not None:
            raise self.error
        return self.response


class FakeOpenAI:
    """Just enough of openai.OpenAI for client.chat.completions.create."""

    def __init__(self, response=None, error=None):
        self.completions = FakeCompletions(response, error)
        self.chat = SimpleNamespace(completions=self.completions)


def chat_response(content):
    return SimpleNamespace(choices=[SimpleNamespace(message=SimpleNamespace(content=content))])


def sequence_clock(*values):
    """Returns the given timestamps in order, then keeps repeating the last one."""
    it = itertools.chain(values, itertools.repeat(values[-1]))
    return lambda: next(it)


def make_settings(**overrides):
    values = {
        "TOGETHER_API_KEY": "test-key",
        "BUCKET_NAME": "test-bucket",
        "STATIC_DIR": os.path.join(ROOT_DIR, "public"),
    }
    values.update(overrides)
    return Settings(**values)


def make_client(settings=None, store=None, extractor=None, clock=None):
    settings = settings or make_settings()
    pipeline = OCRPipeline(
        settings,
        store if store is not None else FakeStore(),
        extractor if extractor is not None else FakeExtractor(),
        clock or sequence_clock(FIXED_TS, 0, 2000),
    )
    return TestClient(create_application(settings, pipeline=pipeline))


def png_upload(name="a.png", content=b"\x89PN"):
    return {"image": (name, content, "image/png")}


@pytest.fixture()
def store():
    return FakeStore()


@pytest.fixture()
def extractor():
    return FakeExtractor()
