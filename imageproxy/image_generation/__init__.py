from __future__ import annotations

from typing import Dict, Optional, Tuple, Type

from imageproxy.image_generation.base import ImageGenerationAdapter
from imageproxy.image_generation.extraction import ExtractionStrategy, extract_image
from imageproxy.image_generation.model_output import GenerationRequest, GenerationResult, ImagePayload
from imageproxy.image_generation.models import (
    OpenAIImageGeneration,
    OpenAIImageGenerationParameters,
    XAIImageGeneration,
    XAIImageGenerationParameters,
)
from imageproxy.image_generation.size import DiscreteSizePolicy, RangeSizePolicy, SizePolicy, snap_to_nearest
from imageproxy.model import ModelParameters

ImageGenerationAdapters: list[Tuple[Type[ImageGenerationAdapter], Type[ModelParameters]]] = [
    (OpenAIImageGeneration, OpenAIImageGenerationParameters),
    (XAIImageGeneration, XAIImageGenerationParameters),
]

ImageGenerationAdapterRegistry: Dict[str, Tuple[Type[ImageGenerationAdapter], Type[ModelParameters]]] = {
    adapter_cls.model_type: (adapter_cls, parameter_cls) for adapter_cls, parameter_cls in ImageGenerationAdapters
}


def load_image_generation_adapter(provider: str, model: Optional[str] = None) -> ImageGenerationAdapter:
    if provider not in ImageGenerationAdapterRegistry:
        raise ValueError(f'Unknown image generation provider {provider}, available: {list(ImageGenerationAdapterRegistry)}')
    adapter_cls = ImageGenerationAdapterRegistry[provider][0]
    if model is None:
        return adapter_cls()  # type: ignore
    return adapter_cls.from_name(model)


__all__ = [
    'ImageGenerationAdapter',
    'ImageGenerationAdapterRegistry',
    'load_image_generation_adapter',
    'GenerationRequest',
    'GenerationResult',
    'ImagePayload',
    'ExtractionStrategy',
    'extract_image',
    'SizePolicy',
    'RangeSizePolicy',
    'DiscreteSizePolicy',
    'snap_to_nearest',
    'OpenAIImageGeneration',
    'OpenAIImageGenerationParameters',
    'XAIImageGeneration',
    'XAIImageGenerationParameters',
]
