from typing import Optional

from pydantic import SecretStr
from pydantic_settings import SettingsConfigDict

from imageproxy.platforms.base import PlatformSettings


class XAISettings(PlatformSettings):
    model_config = SettingsConfigDict(extra='ignore', env_prefix='xai_', env_file='.env')

    api_key: Optional[SecretStr] = None
    api_base: str = 'https://api.x.ai/v1'
    platform_url: str = 'https://docs.x.ai/docs/guides/image-generations'
