from __future__ import annotations

import html
import logging
import random
import re
from typing import Literal, Tuple
from urllib.parse import quote

import httpx
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict
from typing_extensions import Annotated, Unpack

from imageproxy.http import HttpClient
from imageproxy.model import ModelParameters, ModelParametersDict

logger = logging.getLogger(__name__)

SAMPLE_SEEDS: Tuple[str, ...] = (
    'aurora',
    'lumen',
    'nova',
    'zephyr',
    'sol',
    'aero',
    'pixel',
    'nebula',
    'miso',
    'sora',
    'echo',
    'boreal',
)
_SCRIPT_ELEMENT = re.compile(r'<script[\s\S]*?>[\s\S]*?</script>', re.IGNORECASE)


class AvatarSettings(BaseSettings):
    model_config = SettingsConfigDict(extra='ignore', env_prefix='avatar_', env_file='.env')

    api_base: str = 'https://api.dicebear.com/9.x'


class AvatarParameters(ModelParameters):
    style: str = 'identicon'
    seed: str = 'anon'
    size: Annotated[int, Field(gt=0)] = 512
    background_type: Literal['transparent', 'solid'] = 'transparent'
    background_color: str = 'ffffff'

    @field_validator('seed', mode='before')
    @classmethod
    def _default_seed(cls, value: object) -> object:
        if value is None or value == '':
            return 'anon'
        return value

    @field_validator('background_color')
    @classmethod
    def _strip_hash(cls, value: str) -> str:
        return value.lstrip('#')


class AvatarParametersDict(ModelParametersDict, total=False):
    style: str
    seed: str
    size: int
    background_type: Literal['transparent', 'solid']
    background_color: str


class AvatarFetchError(Exception):
    def __init__(self, url: str, status_code: int | None, *args: object) -> None:
        super().__init__(f'Failed to fetch avatar svg from {url} (status {status_code})', *args)
        self.url = url
        self.status_code = status_code


def build_avatar_url(parameters: AvatarParameters, api_base: str) -> str:
    url = f'{api_base.rstrip("/")}/{parameters.style}/svg?seed={quote(parameters.seed, safe="")}&size={parameters.size}'
    if parameters.background_type == 'solid':
        url += f'&backgroundType=solid&backgroundColor={parameters.background_color}'
    return url


def build_embed_tag(parameters: AvatarParameters, api_base: str) -> str:
    url = build_avatar_url(parameters, api_base)
    return (
        f'<img src="{html.escape(url)}" alt="{html.escape(parameters.seed)}" '
        f'width="{parameters.size}" height="{parameters.size}" />'
    )


def strip_scripts(svg: str) -> str:
    return _SCRIPT_ELEMENT.sub('', svg)


def sample_seeds() -> Tuple[str, ...]:
    return SAMPLE_SEEDS


def random_seed(rng: random.Random | None = None) -> str:
    rng = rng or random.Random()
    return f'{rng.choice(SAMPLE_SEEDS)}-{rng.randrange(9999)}'


class AvatarClient:
    """
    Client for a public avatar (identicon) API that answers ``GET {base}/{style}/svg``.

    Args:
        parameters (AvatarParameters | None): Default avatar parameters, overridable per call.
        settings (AvatarSettings | None): Holds the API base URL.
        http_client (HttpClient | None): Client used for the GET requests.
    """

    def __init__(
        self,
        parameters: AvatarParameters | None = None,
        settings: AvatarSettings | None = None,
        http_client: HttpClient | None = None,
    ) -> None:
        self.parameters = parameters or AvatarParameters()
        self.settings = settings or AvatarSettings()
        self.http_client = http_client or HttpClient()

    def url(self, **kwargs: Unpack[AvatarParametersDict]) -> str:
        return build_avatar_url(self.parameters.clone_with_changes(**kwargs), self.settings.api_base)

    def embed_tag(self, **kwargs: Unpack[AvatarParametersDict]) -> str:
        return build_embed_tag(self.parameters.clone_with_changes(**kwargs), self.settings.api_base)

    def fetch_svg(self, **kwargs: Unpack[AvatarParametersDict]) -> str:
        url = self.url(**kwargs)
        try:
            response = self.http_client.get({'url': url})
        except httpx.HTTPStatusError as e:
            raise AvatarFetchError(url, e.response.status_code) from e
        except httpx.HTTPError as e:
            raise AvatarFetchError(url, None) from e
        return strip_scripts(response.text)

    async def async_fetch_svg(self, **kwargs: Unpack[AvatarParametersDict]) -> str:
        url = self.url(**kwargs)
        try:
            response = await self.http_client.async_get({'url': url})
        except httpx.HTTPStatusError as e:
            raise AvatarFetchError(url, e.response.status_code) from e
        except httpx.HTTPError as e:
            raise AvatarFetchError(url, None) from e
        return strip_scripts(response.text)
