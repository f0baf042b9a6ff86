from imageproxy.avatar import AvatarClient, AvatarParameters, AvatarSettings, build_avatar_url, build_embed_tag
from imageproxy.exception import (
    ConfigurationError,
    InvalidInput,
    MethodNotAllowed,
    PolicyRejected,
    ProviderError,
    ProxyError,
    RemoteFetchError,
    UpstreamError,
    UpstreamShapeError,
)
from imageproxy.http import HttpClient, RetryStrategy
from imageproxy.image_generation import (
    DiscreteSizePolicy,
    GenerationRequest,
    GenerationResult,
    ImageGenerationAdapter,
    OpenAIImageGeneration,
    OpenAIImageGenerationParameters,
    RangeSizePolicy,
    XAIImageGeneration,
    XAIImageGenerationParameters,
    load_image_generation_adapter,
)
from imageproxy.moderation import ModerationOutput, OpenAIModeration
from imageproxy.platforms import OpenAISettings, XAISettings
from imageproxy.proxy import ImageGenerationProxy, ProxyResponse
from imageproxy.settings import ProxySettings
from imageproxy.version import __version__

__all__ = [
    'ImageGenerationProxy',
    'ProxyResponse',
    'ProxySettings',
    'ImageGenerationAdapter',
    'OpenAIImageGeneration',
    'OpenAIImageGenerationParameters',
    'XAIImageGeneration',
    'XAIImageGenerationParameters',
    'load_image_generation_adapter',
    'GenerationRequest',
    'GenerationResult',
    'RangeSizePolicy',
    'DiscreteSizePolicy',
    'OpenAIModeration',
    'ModerationOutput',
    'OpenAISettings',
    'XAISettings',
    'HttpClient',
    'RetryStrategy',
    'AvatarClient',
    'AvatarParameters',
    'AvatarSettings',
    'build_avatar_url',
    'build_embed_tag',
    'ProxyError',
    'InvalidInput',
    'MethodNotAllowed',
    'ConfigurationError',
    'PolicyRejected',
    'ProviderError',
    'UpstreamError',
    'UpstreamShapeError',
    'RemoteFetchError',
    '__version__',
]
