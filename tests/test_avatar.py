from __future__ import annotations

import random

import anyio
import httpx
import pytest
import respx

from imageproxy.avatar import (
    AvatarClient,
    AvatarFetchError,
    AvatarParameters,
    AvatarSettings,
    build_avatar_url,
    build_embed_tag,
    random_seed,
    sample_seeds,
    strip_scripts,
)
from imageproxy.http import HttpClient, RetryStrategy

API_BASE = 'https://api.dicebear.com/9.x'


def test_build_avatar_url() -> None:
    parameters = AvatarParameters(style='bottts', seed='nova', size=256)
    assert build_avatar_url(parameters, API_BASE) == 'https://api.dicebear.com/9.x/bottts/svg?seed=nova&size=256'


def test_build_avatar_url_solid_background() -> None:
    parameters = AvatarParameters(seed='a b/c', background_type='solid', background_color='#ff8800')
    assert build_avatar_url(parameters, API_BASE + '/') == (
        'https://api.dicebear.com/9.x/identicon/svg?seed=a%20b%2Fc&size=512&backgroundType=solid&backgroundColor=ff8800'
    )


def test_empty_seed_is_anon() -> None:
    assert AvatarParameters(seed='').seed == 'anon'
    assert AvatarParameters().clone_with_changes(seed='').seed == 'anon'


def test_build_embed_tag() -> None:
    parameters = AvatarParameters(seed='echo', size=128, background_type='solid', background_color='000000')
    assert build_embed_tag(parameters, API_BASE) == (
        '<img src="https://api.dicebear.com/9.x/identicon/svg?seed=echo&amp;size=128'
        '&amp;backgroundType=solid&amp;backgroundColor=000000" alt="echo" width="128" height="128" />'
    )


def test_strip_scripts() -> None:
    svg = '<svg><script type="text/javascript">alert(1)</script><rect/><SCRIPT>x</SCRIPT></svg>'
    assert strip_scripts(svg) == '<svg><rect/></svg>'


def test_random_seed() -> None:
    seed = random_seed(random.Random(7))
    name, number = seed.rsplit('-', 1)
    assert name in sample_seeds()
    assert 0 <= int(number) < 9999


@respx.mock
def test_fetch_svg() -> None:
    route = respx.get('https://avatars.test/identicon/svg', params={'seed': 'sol', 'size': '64'}).mock(
        return_value=httpx.Response(200, text='<svg><script>bad()</script><circle/></svg>')
    )
    client = AvatarClient(settings=AvatarSettings(api_base='https://avatars.test'))

    assert client.fetch_svg(seed='sol', size=64) == '<svg><circle/></svg>'
    assert route.call_count == 1


@respx.mock
def test_fetch_svg_error() -> None:
    respx.get('https://avatars.test/identicon/svg').mock(return_value=httpx.Response(404))
    client = AvatarClient(settings=AvatarSettings(api_base='https://avatars.test'))

    with pytest.raises(AvatarFetchError) as exc_info:
        client.fetch_svg(seed='sol')
    assert exc_info.value.status_code == 404


@respx.mock
def test_fetch_svg_with_retry() -> None:
    route = respx.get('https://avatars.test/identicon/svg').mock(
        side_effect=[httpx.Response(503), httpx.Response(200, text='<svg/>')]
    )
    retry = RetryStrategy(min_wait_seconds=0, max_wait_seconds=0, max_attempt=2)
    client = AvatarClient(settings=AvatarSettings(api_base='https://avatars.test'), http_client=HttpClient(retry=retry))

    assert client.fetch_svg() == '<svg/>'
    assert route.call_count == 2


@respx.mock
def test_async_fetch_svg() -> None:
    route = respx.get('https://avatars.test/bottts/svg').mock(
        return_value=httpx.Response(200, text='<svg><SCRIPT src="x"></SCRIPT></svg>')
    )
    client = AvatarClient(AvatarParameters(style='bottts'), settings=AvatarSettings(api_base='https://avatars.test'))

    async def main() -> str:
        return await client.async_fetch_svg(seed='aero', background_type='solid', background_color='#000000')

    assert anyio.run(main) == '<svg></svg>'
    assert route.calls.last.request.url.params['backgroundColor'] == '000000'


@respx.mock
def test_async_fetch_svg_transport_error() -> None:
    respx.get('https://avatars.test/identicon/svg').mock(side_effect=httpx.ConnectError('down'))
    client = AvatarClient(settings=AvatarSettings(api_base='https://avatars.test'))

    async def main() -> str:
        return await client.async_fetch_svg()

    with pytest.raises(AvatarFetchError) as exc_info:
        anyio.run(main)
    assert exc_info.value.status_code is None


def test_settings_from_env(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv('AVATAR_API_BASE', 'https://avatars.internal/7.x')
    assert AvatarClient().url(seed='x') == 'https://avatars.internal/7.x/identicon/svg?seed=x&size=512'
