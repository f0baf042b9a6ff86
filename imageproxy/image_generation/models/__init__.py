from imageproxy.image_generation.models.openai import OpenAIImageGeneration, OpenAIImageGenerationParameters
from imageproxy.image_generation.models.xai import XAIImageGeneration, XAIImageGenerationParameters

__all__ = [
    'OpenAIImageGeneration',
    'OpenAIImageGenerationParameters',
    'XAIImageGeneration',
    'XAIImageGenerationParameters',
]
