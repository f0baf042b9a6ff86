from __future__ import annotations

import logging
from typing import Any, Dict, Literal, Mapping, Optional, Sequence, Union, overload

import httpx
from httpx import Limits, Response
from pydantic import BaseModel
from tenacity import retry, stop_after_attempt, wait_random_exponential
from typing_extensions import Required, TypedDict

from imageproxy.types import PrimitiveData

logger = logging.getLogger(__name__)
ResponseValue = Dict[str, Any]
QueryParams = Mapping[str, Union[PrimitiveData, Sequence[PrimitiveData]]]
Headers = Dict[str, str]


class RetryStrategy(BaseModel):
    min_wait_seconds: int = 2
    max_wait_seconds: int = 20
    max_attempt: int = 3


class HttpGetKwargs(TypedDict, total=False):
    url: Required[str]
    params: QueryParams
    headers: Headers
    timeout: Optional[int]


class HttpxPostKwargs(TypedDict, total=False):
    url: Required[str]
    json: Required[Any]
    headers: Required[Headers]
    params: QueryParams
    timeout: Optional[int]


class UnexpectedResponseError(Exception):
    """
    Exception raised when an unexpected response is received from the server.

    Attributes:
        response (dict[str, Any]): The response from the server.
    """

    def __init__(self, response: ResponseValue, *args: Any) -> None:
        super().__init__(response, *args)
        self.response = response


class HttpClient:
    """
    A class representing an HTTP client.

    Args:
        retry (bool | RetryStrategy, optional): Whether to enable retry for failed requests. Defaults to False.
        timeout (int | None, optional): The timeout value for requests in seconds. Defaults to 60.
        proxy (str | None, optional): The proxy URL to be used for requests. Defaults to None.
        limits (Limits | None, optional): The limits for the HTTP client. Defaults to None.
    """

    def __init__(
        self,
        retry: bool | RetryStrategy = False,
        timeout: int | None = 60,
        proxy: str | None = None,
        limits: Limits | None = None,
    ) -> None:
        self._timeout = timeout
        self._limits = limits or Limits(max_connections=100, max_keepalive_connections=20, keepalive_expiry=600)
        if isinstance(retry, RetryStrategy):
            self._retry = retry
        else:
            self._retry = RetryStrategy() if retry else None
        self._proxy = proxy
        self.client = self.create_httpx_client(is_async=False)
        self.async_client = self.create_httpx_client(is_async=True)

    @property
    def timeout(self) -> int | None:
        return self._timeout

    @property
    def retry(self) -> RetryStrategy | None:
        return self._retry

    @retry.setter
    def retry(self, retry: bool | RetryStrategy) -> None:
        if isinstance(retry, RetryStrategy):
            self._retry = retry
        else:
            self._retry = RetryStrategy() if retry else None

    @overload
    def create_httpx_client(self, is_async: Literal[False]) -> httpx.Client:
        ...

    @overload
    def create_httpx_client(self, is_async: Literal[True]) -> httpx.AsyncClient:
        ...

    def create_httpx_client(self, is_async: bool) -> httpx.AsyncClient | httpx.Client:
        if is_async:
            return httpx.AsyncClient(proxy=self._proxy, timeout=self._timeout, limits=self._limits)
        return httpx.Client(proxy=self._proxy, timeout=self._timeout, limits=self._limits)

    def get(self, request_parameters: HttpGetKwargs) -> Response:
        if self.retry is None:
            return self._get(request_parameters)

        wait = wait_random_exponential(min=self.retry.min_wait_seconds, max=self.retry.max_wait_seconds)
        stop = stop_after_attempt(self.retry.max_attempt)
        return retry(wait=wait, stop=stop, reraise=True)(self._get)(request_parameters)

    async def async_get(self, request_parameters: HttpGetKwargs) -> Response:
        if self.retry is None:
            return await self._async_get(request_parameters)

        wait = wait_random_exponential(min=self.retry.min_wait_seconds, max=self.retry.max_wait_seconds)
        stop = stop_after_attempt(self.retry.max_attempt)
        return await retry(wait=wait, stop=stop, reraise=True)(self._async_get)(request_parameters)

    def post(self, request_parameters: HttpxPostKwargs) -> Response:
        if self.retry is None:
            return self._post(request_parameters)

        wait = wait_random_exponential(min=self.retry.min_wait_seconds, max=self.retry.max_wait_seconds)
        stop = stop_after_attempt(self.retry.max_attempt)
        return retry(wait=wait, stop=stop, reraise=True)(self._post)(request_parameters)

    async def async_post(self, request_parameters: HttpxPostKwargs) -> Response:
        if self.retry is None:
            return await self._async_post(request_parameters)

        wait = wait_random_exponential(min=self.retry.min_wait_seconds, max=self.retry.max_wait_seconds)
        stop = stop_after_attempt(self.retry.max_attempt)
        return await retry(wait=wait, stop=stop, reraise=True)(self._async_post)(request_parameters)

    def close(self) -> None:
        self.client.close()

    async def aclose(self) -> None:
        await self.async_client.aclose()

    def _post(self, request_parameters: HttpxPostKwargs) -> Response:
        logger.debug(f'POST {_redact(request_parameters)}')
        http_response = self.client.post(**request_parameters)  # type: ignore
        http_response.raise_for_status()
        logger.debug(f'Response {http_response}')
        return http_response

    async def _async_post(self, request_parameters: HttpxPostKwargs) -> Response:
        logger.debug(f'POST {_redact(request_parameters)}')
        http_response = await self.async_client.post(**request_parameters)  # type: ignore
        http_response.raise_for_status()
        logger.debug(f'Response {http_response}')
        return http_response

    def _get(self, request_parameters: HttpGetKwargs) -> Response:
        logger.debug(f'GET {request_parameters["url"]}')
        http_response = self.client.get(**request_parameters)
        http_response.raise_for_status()
        return http_response

    async def _async_get(self, request_parameters: HttpGetKwargs) -> Response:
        logger.debug(f'GET {request_parameters["url"]}')
        http_response = await self.async_client.get(**request_parameters)
        http_response.raise_for_status()
        return http_response


def _redact(request_parameters: HttpxPostKwargs) -> dict[str, Any]:
    headers = {k: ('***' if k.lower() == 'authorization' else v) for k, v in request_parameters['headers'].items()}
    return {**request_parameters, 'headers': headers}
