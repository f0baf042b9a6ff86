from typing import Literal, Optional

from pydantic_settings import BaseSettings, SettingsConfigDict

from imageproxy.types import ImageEncoding


class ProxySettings(BaseSettings):
    model_config = SettingsConfigDict(extra='ignore', env_prefix='imageproxy_', env_file='.env', protected_namespaces=())

    provider: Literal['openai', 'xai'] = 'openai'
    model: Optional[str] = None
    moderation: bool = False
    image_encoding: ImageEncoding = 'base64'
    timeout: Optional[int] = 60
