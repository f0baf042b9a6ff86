from __future__ import annotations

from typing_extensions import override

from imageproxy.http import HttpxPostKwargs
from imageproxy.image_generation.base import ImageGenerationAdapter
from imageproxy.image_generation.extraction import inline, url
from imageproxy.image_generation.model_output import GenerationRequest
from imageproxy.image_generation.size import DiscreteSizePolicy, SizePolicy
from imageproxy.model import ModelParameters
from imageproxy.platforms.xai import XAISettings

XAI_SIZE_POLICY = DiscreteSizePolicy(choices=(256, 512, 1024))


class XAIImageGenerationParameters(ModelParameters):
    pass


class XAIImageGeneration(ImageGenerationAdapter):
    model_type = 'xai'
    provider_name = 'xAI'
    extraction_strategies = (
        inline('data', 'b64_json'),
        inline('data', 'b64_data'),
        inline('images', 'b64_json'),
        inline('images', 'b64_data'),
        url('data'),
        url('images'),
    )

    parameters: XAIImageGenerationParameters
    settings: XAISettings

    def __init__(
        self,
        model: str = 'grok-2-image',
        parameters: XAIImageGenerationParameters | None = None,
        settings: XAISettings | None = None,
    ) -> None:
        parameters = parameters or XAIImageGenerationParameters()
        settings = settings or XAISettings()
        super().__init__(model=model, parameters=parameters, settings=settings)

    @property
    @override
    def size_policy(self) -> SizePolicy:
        return XAI_SIZE_POLICY

    @override
    def build_request(self, request: GenerationRequest) -> HttpxPostKwargs:
        json_data = {
            'model': self.model,
            'prompt': request.prompt,
            'size': request.size,
            'n': 1,
            'response_format': 'b64_json',
        }
        return {
            'url': self._get_url('images/generations'),
            'json': json_data,
            'headers': self._get_headers(),
        }
