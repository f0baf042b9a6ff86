from typing import Optional

from pydantic import AliasChoices, Field, SecretStr
from pydantic_settings import SettingsConfigDict

from imageproxy.platforms.base import PlatformSettings


class OpenAISettings(PlatformSettings):
    model_config = SettingsConfigDict(extra='ignore', env_prefix='openai_', env_file='.env', populate_by_name=True)

    # MONADICONS_KEY is the variable name used by the first deployments
    api_key: Optional[SecretStr] = Field(default=None, validation_alias=AliasChoices('openai_api_key', 'monadicons_key'))
    api_base: str = 'https://api.openai.com/v1'
    platform_url: str = 'https://platform.openai.com/docs/api-reference/images'
