from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import Any, ClassVar, Dict, Sequence, Tuple, get_type_hints

from typing_extensions import Self

from imageproxy.exception import UpstreamShapeError
from imageproxy.http import Headers, HttpxPostKwargs
from imageproxy.image_generation.extraction import ExtractionStrategy, extract_image
from imageproxy.image_generation.model_output import GenerationRequest, ImagePayload
from imageproxy.image_generation.size import SizePolicy
from imageproxy.model import ModelInfo, ModelParameters
from imageproxy.platforms.base import PlatformSettings

logger = logging.getLogger(__name__)


class ImageGenerationAdapter(ABC):
    """
    Translates between the proxy and one image generation provider.

    An adapter never touches the network: ``build_request`` produces the keyword arguments
    for ``HttpClient.post`` and ``parse_response`` locates the image in the decoded JSON.
    """

    model_task: ClassVar[str] = 'image_generation'
    model_type: ClassVar[str]
    provider_name: ClassVar[str]
    extraction_strategies: ClassVar[Tuple[ExtractionStrategy, ...]]

    settings: PlatformSettings
    parameters: ModelParameters

    def __init__(self, model: str, parameters: ModelParameters, settings: PlatformSettings) -> None:
        self.model = model
        self.parameters = parameters
        self.settings = settings

    @property
    @abstractmethod
    def size_policy(self) -> SizePolicy:
        ...

    @abstractmethod
    def build_request(self, request: GenerationRequest) -> HttpxPostKwargs:
        ...

    def parse_response(self, payload: Any) -> ImagePayload:
        image_payload = extract_image(payload, self.extraction_strategies)
        if image_payload is None:
            raise UpstreamShapeError(f'Unexpected response from {self.provider_name}', details=payload)
        logger.debug(f'{self.model_id} image found at {image_payload.path}')
        return image_payload

    @property
    def parameter_fields(self) -> Sequence[str]:
        return tuple(type(self.parameters).model_fields)

    def resolve_parameters(self, extras: Dict[str, Any]) -> ModelParameters:
        return self.parameters.clone_with_changes(**extras)

    def _get_headers(self) -> Headers:
        if self.settings.api_key is None:
            raise ValueError(f'{self.provider_name} api key is not configured')
        return {
            'Content-Type': 'application/json',
            'Authorization': f'Bearer {self.settings.api_key.get_secret_value()}',
        }

    def _get_url(self, endpoint: str) -> str:
        return self.settings.api_base.rstrip('/') + '/' + endpoint

    @property
    def name(self) -> str:
        return self.model

    @property
    def model_info(self) -> ModelInfo:
        return ModelInfo(task=self.model_task, type=self.model_type, name=self.name)

    @property
    def model_id(self) -> str:
        return self.model_info.model_id

    @classmethod
    def from_name(cls, name: str) -> Self:
        return cls(model=name)  # type: ignore

    @classmethod
    def how_to_settings(cls) -> str:
        return f'{cls.__name__} Settings\n\n' + get_type_hints(cls)['settings'].how_to_settings()
