from __future__ import annotations

from typing import Dict, Literal, Optional, Sequence, Tuple

from typing_extensions import override

from imageproxy.http import HttpxPostKwargs
from imageproxy.image_generation.base import ImageGenerationAdapter
from imageproxy.image_generation.extraction import inline, url
from imageproxy.image_generation.model_output import GenerationRequest
from imageproxy.image_generation.size import DiscreteSizePolicy, RangeSizePolicy, SizePolicy
from imageproxy.model import ModelParameters
from imageproxy.platforms.openai import OpenAISettings

# gpt-image-1 takes free-form sizes inside a range, dall-e-2 only square presets.
# dall-e-3 also takes 1792x1024 and 1024x1792, which a per-dimension policy cannot
# produce without also producing 1792x1792, so it is pinned to 1024x1024.
OPENAI_SIZE_POLICIES: Dict[str, SizePolicy] = {
    'gpt-image-1': RangeSizePolicy(minimum=64, maximum=2048),
    'dall-e-2': DiscreteSizePolicy(choices=(256, 512, 1024)),
    'dall-e-3': DiscreteSizePolicy(choices=(1024,)),
}
# request fields each model accepts, anything else is dropped before the call
OPENAI_PARAMETER_FIELDS: Dict[str, Tuple[str, ...]] = {
    'gpt-image-1': ('quality', 'user'),
    'dall-e-2': ('user',),
    'dall-e-3': ('quality', 'style', 'user'),
}
DEFAULT_SIZE_POLICY = RangeSizePolicy(minimum=64, maximum=2048)


class OpenAIImageGenerationParameters(ModelParameters):
    quality: Optional[Literal['low', 'medium', 'high', 'auto', 'hd', 'standard']] = None
    style: Optional[Literal['vivid', 'natural']] = None
    user: Optional[str] = None


class OpenAIImageGeneration(ImageGenerationAdapter):
    model_type = 'openai'
    provider_name = 'OpenAI'
    extraction_strategies = (
        inline('data', 'b64_json'),
        url('data'),
    )

    parameters: OpenAIImageGenerationParameters
    settings: OpenAISettings

    def __init__(
        self,
        model: str = 'gpt-image-1',
        parameters: OpenAIImageGenerationParameters | None = None,
        settings: OpenAISettings | None = None,
    ) -> None:
        parameters = parameters or OpenAIImageGenerationParameters()
        settings = settings or OpenAISettings()
        super().__init__(model=model, parameters=parameters, settings=settings)

    @property
    @override
    def size_policy(self) -> SizePolicy:
        return OPENAI_SIZE_POLICIES.get(self.model, DEFAULT_SIZE_POLICY)

    @property
    @override
    def parameter_fields(self) -> Sequence[str]:
        return OPENAI_PARAMETER_FIELDS.get(self.model, super().parameter_fields)

    @override
    def build_request(self, request: GenerationRequest) -> HttpxPostKwargs:
        parameters = self.resolve_parameters(request.extras)
        json_data = {
            'model': self.model,
            'prompt': request.prompt,
            'size': request.size,
        }
        json_data.update({k: v for k, v in parameters.custom_model_dump().items() if k in self.parameter_fields})
        # gpt-image-1 always answers with b64_json and rejects the field
        if self.model.startswith('dall-e'):
            json_data['response_format'] = 'b64_json'
        return {
            'url': self._get_url('images/generations'),
            'json': json_data,
            'headers': self._get_headers(),
        }
