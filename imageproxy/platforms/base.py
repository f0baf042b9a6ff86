from __future__ import annotations

from typing import Optional

from pydantic import AliasChoices, SecretStr
from pydantic_settings import BaseSettings


class PlatformSettings(BaseSettings):
    platform_url: str
    api_key: Optional[SecretStr] = None
    api_base: str

    @property
    def has_api_key(self) -> bool:
        return self.api_key is not None and bool(self.api_key.get_secret_value().strip())

    @classmethod
    def env_var_name(cls, field_name: str) -> str:
        alias = cls.model_fields[field_name].validation_alias
        if isinstance(alias, AliasChoices):
            return str(alias.choices[0]).upper()
        if isinstance(alias, str):
            return alias.upper()
        prefix = cls.model_config.get('env_prefix', '')
        return (prefix + field_name).upper()

    @classmethod
    def how_to_settings(cls) -> str:
        settings_fileds = cls.model_fields
        platform_url = settings_fileds['platform_url'].default
        required_keys = [name for name, field in settings_fileds.items() if field.is_required() or name == 'api_key']
        optional_keys = [name for name in settings_fileds if name not in required_keys and name != 'platform_url']
        platform_name = cls.__name__.replace('Settings', '')
        return f"""# Platform
{platform_name}

# Required Environment Variables
{[cls.env_var_name(name) for name in required_keys]}

# Optional Environment Variables
{[cls.env_var_name(name) for name in optional_keys]}

You can get more information from this link: {platform_url}

tips: You can also set these variables in the .env file, and imageproxy will automatically load them."""
