# tests/conftest.py
import os
import pathlib
import sys

import httplib2
import pytest
from googleapiclient.errors import HttpError

# Add the repository root to sys.path so the flat modules import under pytest
ROOT = pathlib.Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

# Tests always run the summarizer in mock mode unless they inject a model
os.environ.pop("GOOGLE_CLOUD_PROJECT", None)


def http_error(status, content=b""):
    """Builds the HttpError a discovery client raises for a non-2xx status."""
    return HttpError(httplib2.Response({"status": status}), content)


class FakeRequest:
    def __init__(self, api, method, kwargs):
        self.api = api
        self.method = method
        self.kwargs = kwargs

    def execute(self):
        return self.api._next(self.method, self.kwargs)


class FakeResource:
    def __init__(self, api, name):
        self.api = api
        self.name = name

    def __getattr__(self, method):
        def call(**kwargs):
            return FakeRequest(self.api, f"{self.name}.{method}", kwargs)
        return call


class FakeGoogleApi:
    """
    Stands in for the docs, drive and slides discovery clients at once.
    Replays canned results in order and records every executed call;
    an exception in the results is raised instead of returned.
    """

    def __init__(self, *results):
        self.results = list(results)
        self.calls = []

    @property
    def docs(self):
        return self

    @property
    def drive(self):
        return self

    @property
    def slides(self):
        return self

    def documents(self):
        return FakeResource(self, "documents")

    def files(self):
        return FakeResource(self, "files")

    def presentations(self):
        return FakeResource(self, "presentations")

    def _next(self, method, kwargs):
        self.calls.append({"method": method, **kwargs})
        if not self.results:
            raise AssertionError(f"Unexpected call {method}")
        result = self.results.pop(0)
        if isinstance(result, Exception):
            raise result
        return result


class FakeModel:
    """Stands in for GeminiClient and returns a fixed text."""

    def __init__(self, text):
        self.text = text
        self.prompts = []

    def generate(self, prompt):
        self.prompts.append(prompt)
        return self.text


@pytest.fixture
def fake_google():
    return FakeGoogleApi


@pytest.fixture
def make_http_error():
    return http_error


@pytest.fixture
def fake_model():
    return FakeModel
