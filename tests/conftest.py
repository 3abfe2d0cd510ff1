import asyncio
import json

import httpx
import pytest

from app.core.config import PipelineConfig
from app.models.pipeline import SourceImage
from app.services.pipeline_service import PipelineService


def candidate(text):
    """A generateContent response whose first candidate holds `text`"""
    return {"candidates": [{"content": {"parts": [{"text": text}]}}]}


class FakeGemini:
    """Mock transport handler that records requests and replays queued responses.

    A queued dict is returned as a 200 JSON body, an httpx.Response as is,
    and an exception is raised.
    """

    def __init__(self, *responses):
        self.responses = list(responses)
        self.requests = []

    def __call__(self, request):
        self.requests.append(request)
        response = self.responses.pop(0)
        if isinstance(response, Exception):
            raise response
        if isinstance(response, httpx.Response):
            return response
        return httpx.Response(200, json=response)

    @property
    def payloads(self):
        return [json.loads(r.content) for r in self.requests]

    def prompt(self, index):
        return self.payloads[index]["contents"][0]["parts"][0]["text"]


@pytest.fixture
def config():
    return PipelineConfig(api_key="test-key", api_base_url="https://api.test/v1beta", model="test-model")


@pytest.fixture
def image():
    return SourceImage(data=b"\x89PNG\r\n\x1a\nfake", mime_type="image/png", filename="sign.png")


@pytest.fixture
def make_pipeline(config):
    http_clients = []

    def _make(fake, **kwargs):
        http_client = httpx.AsyncClient(transport=httpx.MockTransport(fake))
        http_clients.append(http_client)
        return PipelineService(config, http_client=http_client, **kwargs)

    yield _make

    for http_client in http_clients:
        asyncio.run(http_client.aclose())
