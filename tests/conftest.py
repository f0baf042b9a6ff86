from __future__ import annotations

import pytest

from imageproxy.http import HttpClient
from imageproxy.image_generation import OpenAIImageGeneration, XAIImageGeneration
from imageproxy.platforms import OpenAISettings, XAISettings
from imageproxy.proxy import ImageGenerationProxy
from tests.constants import OPENAI_API_BASE, XAI_API_BASE


@pytest.fixture(autouse=True)
def _isolate_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in (
        'OPENAI_API_KEY',
        'OPENAI_API_BASE',
        'MONADICONS_KEY',
        'XAI_API_KEY',
        'XAI_API_BASE',
        'IMAGEPROXY_PROVIDER',
        'IMAGEPROXY_MODEL',
        'IMAGEPROXY_MODERATION',
        'IMAGEPROXY_IMAGE_ENCODING',
        'IMAGEPROXY_TIMEOUT',
        'AVATAR_API_BASE',
    ):
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def openai_settings() -> OpenAISettings:
    return OpenAISettings(api_key='sk-test', api_base=OPENAI_API_BASE)


@pytest.fixture
def xai_settings() -> XAISettings:
    return XAISettings(api_key='xai-test', api_base=XAI_API_BASE)


@pytest.fixture
def http_client() -> HttpClient:
    return HttpClient()


@pytest.fixture
def openai_proxy(openai_settings: OpenAISettings, http_client: HttpClient) -> ImageGenerationProxy:
    return ImageGenerationProxy(adapter=OpenAIImageGeneration(settings=openai_settings), http_client=http_client)


@pytest.fixture
def xai_proxy(xai_settings: XAISettings, http_client: HttpClient) -> ImageGenerationProxy:
    return ImageGenerationProxy(adapter=XAIImageGeneration(settings=xai_settings), http_client=http_client)
