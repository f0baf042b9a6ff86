from imageproxy.platforms.base import PlatformSettings
from imageproxy.platforms.openai import OpenAISettings
from imageproxy.platforms.xai import XAISettings

__all__ = [
    'PlatformSettings',
    'OpenAISettings',
    'XAISettings',
]
