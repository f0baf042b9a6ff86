import logging

import anyio
import httpx
import pytest
import respx

from imageproxy.http import HttpClient, RetryStrategy

URL = 'https://api.example.com/v1/things'


@respx.mock
def test_post_without_retry_fails_once() -> None:
    route = respx.post(URL).mock(return_value=httpx.Response(500))
    client = HttpClient()

    with pytest.raises(httpx.HTTPStatusError):
        client.post({'url': URL, 'json': {}, 'headers': {}})
    assert route.call_count == 1


@respx.mock
def test_post_with_retry() -> None:
    route = respx.post(URL).mock(side_effect=[httpx.Response(500), httpx.Response(500), httpx.Response(200, json={'ok': True})])
    client = HttpClient(retry=RetryStrategy(min_wait_seconds=0, max_wait_seconds=0, max_attempt=3))

    response = client.post({'url': URL, 'json': {}, 'headers': {}})

    assert response.json() == {'ok': True}
    assert route.call_count == 3


@respx.mock
def test_async_get_with_retry_gives_up() -> None:
    route = respx.get(URL).mock(return_value=httpx.Response(502))
    client = HttpClient(retry=RetryStrategy(min_wait_seconds=0, max_wait_seconds=0, max_attempt=2))

    async def main() -> None:
        await client.async_get({'url': URL})

    with pytest.raises(httpx.HTTPStatusError):
        anyio.run(main)
    assert route.call_count == 2


@respx.mock
def test_authorization_is_not_logged(caplog: pytest.LogCaptureFixture) -> None:
    respx.post(URL).mock(return_value=httpx.Response(200))
    client = HttpClient()

    with caplog.at_level(logging.DEBUG, logger='imageproxy.http'):
        client.post({'url': URL, 'json': {'a': 1}, 'headers': {'Authorization': 'Bearer sk-secret'}})

    assert 'sk-secret' not in caplog.text
    assert URL in caplog.text


def test_retry_setter() -> None:
    client = HttpClient()
    assert client.retry is None
    client.retry = True
    assert client.retry == RetryStrategy()
    client.retry = False
    assert client.retry is None
