import anyio
import httpx
import pytest
import respx

from imageproxy.exception import ConfigurationError
from imageproxy.http import UnexpectedResponseError
from imageproxy.moderation import ModerationOutput, OpenAIModeration
from imageproxy.platforms import OpenAISettings
from tests.constants import OPENAI_MODERATION_URL


@respx.mock
def test_classify(openai_settings: OpenAISettings) -> None:
    respx.post(OPENAI_MODERATION_URL).mock(
        return_value=httpx.Response(
            200,
            json={'id': 'modr-1', 'results': [{'flagged': True, 'categories': {'hate': False, 'self-harm': True}}]},
        )
    )

    output = OpenAIModeration(settings=openai_settings).classify('prompt')

    assert output.flagged is True
    assert output.categories == ['self-harm']
    assert output.model_info.model_id == 'openai/omni-moderation-latest'


@respx.mock
def test_async_classify(openai_settings: OpenAISettings) -> None:
    respx.post(OPENAI_MODERATION_URL).mock(return_value=httpx.Response(200, json={'results': [{'flagged': False}]}))
    moderation = OpenAIModeration(settings=openai_settings)

    async def main() -> ModerationOutput:
        return await moderation.async_classify('prompt')

    output = anyio.run(main)

    assert output.flagged is False
    assert output.categories == []


@respx.mock
def test_classify_unexpected_response(openai_settings: OpenAISettings) -> None:
    respx.post(OPENAI_MODERATION_URL).mock(return_value=httpx.Response(200, json={'results': []}))

    with pytest.raises(UnexpectedResponseError):
        OpenAIModeration(settings=openai_settings).classify('prompt')


def test_classify_without_key() -> None:
    with pytest.raises(ConfigurationError, match='OPENAI_API_KEY'):
        OpenAIModeration(settings=OpenAISettings(api_key=None)).classify('prompt')


@pytest.mark.parametrize(
    'payload',
    [
        {'results': {'flagged': True}},
        {'results': [['flagged']]},
        {'results': [{'flagged': True, 'categories': ['violence']}]},
        ['results'],
    ],
)
@respx.mock
def test_classify_malformed_payload(openai_settings: OpenAISettings, payload: object) -> None:
    respx.post(OPENAI_MODERATION_URL).mock(return_value=httpx.Response(200, json=payload))

    with pytest.raises(UnexpectedResponseError):
        OpenAIModeration(settings=openai_settings).classify('prompt')
