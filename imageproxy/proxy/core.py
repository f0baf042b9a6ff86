from __future__ import annotations

import logging
from typing import Any, ClassVar, Dict, List, Optional

import httpx
from httpx import Response
from pydantic import BaseModel, ValidationError
from typing_extensions import Self

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
from imageproxy.http import HttpClient, HttpxPostKwargs, UnexpectedResponseError
from imageproxy.image_generation import ImageGenerationAdapter, load_image_generation_adapter
from imageproxy.image_generation.model_output import GenerationRequest, GenerationResult, ImagePayload
from imageproxy.moderation import ModerationOutput, OpenAIModeration
from imageproxy.proxy.request import build_generation_request, parse_request_body
from imageproxy.settings import ProxySettings
from imageproxy.types import ImageEncoding

logger = logging.getLogger(__name__)


class ProxyResponse(BaseModel):
    status_code: int
    body: Dict[str, Any]
    headers: Dict[str, str] = {}


def _response_body(response: Response) -> Any:
    try:
        return response.json()
    except ValueError:
        return response.text


def _validation_details(error: ValidationError) -> List[Dict[str, Any]]:
    return [{'loc': list(item['loc']), 'msg': item['msg']} for item in error.errors()]


class ImageGenerationProxy:
    """
    One image generation handler, parameterized by a provider adapter.

    Each call of ``handle``/``async_handle`` is a single request-response cycle:
    method check, body normalization, credential check, optional moderation, one
    generation call and, when the provider answers with a URL, one fetch of that URL.
    Every failure is converted into a JSON error envelope.
    """

    allowed_method: ClassVar[str] = 'POST'

    def __init__(
        self,
        adapter: ImageGenerationAdapter,
        http_client: HttpClient | None = None,
        moderation: OpenAIModeration | None = None,
        image_encoding: ImageEncoding = 'base64',
    ) -> None:
        self.adapter = adapter
        self.http_client = http_client or HttpClient()
        if self.http_client.retry is not None:
            raise ValueError('the proxy makes exactly one upstream attempt, pass an HttpClient without retry')
        self.moderation = moderation
        self.image_encoding = image_encoding

    @classmethod
    def from_settings(
        cls,
        settings: ProxySettings | None = None,
        provider: Optional[str] = None,
        http_client: HttpClient | None = None,
    ) -> Self:
        settings = settings or ProxySettings()
        http_client = http_client or HttpClient(timeout=settings.timeout)
        adapter = load_image_generation_adapter(provider or settings.provider, settings.model)
        moderation = OpenAIModeration(http_client=http_client) if settings.moderation else None
        return cls(adapter=adapter, http_client=http_client, moderation=moderation, image_encoding=settings.image_encoding)

    @property
    def provider(self) -> str:
        return self.adapter.model_type

    def handle(self, method: str, body: Any = None) -> ProxyResponse:
        logger.info(f'invocation {method}', extra={'provider': self.provider, 'method': method})
        try:
            self._check_method(method)
            request = self.prepare(body)
            result = self.generate(request)
        except ProxyError as e:
            return self._error_response(e)
        except Exception as e:
            return self._unexpected_error_response(e)
        return self._success_response(result)

    async def async_handle(self, method: str, body: Any = None) -> ProxyResponse:
        logger.info(f'invocation {method}', extra={'provider': self.provider, 'method': method})
        try:
            self._check_method(method)
            request = self.prepare(body)
            result = await self.async_generate(request)
        except ProxyError as e:
            return self._error_response(e)
        except Exception as e:
            return self._unexpected_error_response(e)
        return self._success_response(result)

    def prepare(self, body: Any) -> GenerationRequest:
        parsed_body = parse_request_body(body)
        request = build_generation_request(parsed_body, self.adapter.size_policy, self.adapter.parameter_fields)
        try:
            self.adapter.resolve_parameters(request.extras)
        except ValidationError as e:
            raise InvalidInput('Invalid image generation parameters.', details=_validation_details(e)) from e
        logger.debug(f'request prompt={bool(request.prompt)} size={request.size} extras={request.extras}')
        return request

    def generate(self, request: GenerationRequest) -> GenerationResult:
        self._check_credentials()
        if self.moderation is not None:
            self._check_moderation(self._classify(request.prompt))
        request_parameters = self.adapter.build_request(request)
        logger.info(f'calling {self.adapter.model_id} with size {request.size}', extra={'provider': self.provider})
        try:
            response = self.http_client.post(request_parameters=request_parameters)
        except httpx.HTTPError as e:
            raise self._upstream_error(e) from e
        image_payload = self._parse_generation_response(response)
        if image_payload.kind == 'inline-base64':
            return self._inline_result(image_payload)
        try:
            image_response = self.http_client.get({'url': image_payload.value})
        except httpx.HTTPError as e:
            raise self._remote_fetch_error(image_payload.value, e) from e
        return self._fetched_result(image_payload.value, image_response)

    async def async_generate(self, request: GenerationRequest) -> GenerationResult:
        self._check_credentials()
        if self.moderation is not None:
            self._check_moderation(await self._async_classify(request.prompt))
        request_parameters = self.adapter.build_request(request)
        logger.info(f'calling {self.adapter.model_id} with size {request.size}', extra={'provider': self.provider})
        try:
            response = await self.http_client.async_post(request_parameters=request_parameters)
        except httpx.HTTPError as e:
            raise self._upstream_error(e) from e
        image_payload = self._parse_generation_response(response)
        if image_payload.kind == 'inline-base64':
            return self._inline_result(image_payload)
        try:
            image_response = await self.http_client.async_get({'url': image_payload.value})
        except httpx.HTTPError as e:
            raise self._remote_fetch_error(image_payload.value, e) from e
        return self._fetched_result(image_payload.value, image_response)

    def _check_method(self, method: str) -> None:
        if method.upper() != self.allowed_method:
            raise MethodNotAllowed(method.upper(), self.allowed_method)

    def _check_credentials(self) -> None:
        if not self.adapter.settings.has_api_key:
            env_var = type(self.adapter.settings).env_var_name('api_key')
            raise ConfigurationError(f'{self.adapter.provider_name} key not configured. Set env var {env_var}.')

    def _classify(self, prompt: str) -> Optional[ModerationOutput]:
        try:
            return self.moderation.classify(prompt)  # type: ignore
        except (httpx.HTTPError, UnexpectedResponseError, ConfigurationError, ValueError) as e:
            self._log_moderation_unavailable(e)
            return None

    async def _async_classify(self, prompt: str) -> Optional[ModerationOutput]:
        try:
            return await self.moderation.async_classify(prompt)  # type: ignore
        except (httpx.HTTPError, UnexpectedResponseError, ConfigurationError, ValueError) as e:
            self._log_moderation_unavailable(e)
            return None

    def _log_moderation_unavailable(self, error: Exception) -> None:
        logger.warning(
            f'moderation unavailable, generating without it: {error!r}',
            extra={'stage': 'moderation', 'provider': self.provider},
        )

    def _check_moderation(self, output: Optional[ModerationOutput]) -> None:
        if output is None or not output.flagged:
            return
        raise PolicyRejected('Prompt rejected by moderation.', details={'categories': output.categories})

    def _upstream_error(self, error: httpx.HTTPError) -> UpstreamError:
        if isinstance(error, httpx.HTTPStatusError):
            provider_error = ProviderError(
                http_status=error.response.status_code,
                provider_message=_response_body(error.response),
                stage='generation',
            )
        else:
            provider_error = ProviderError(provider_message=repr(error), stage='generation')
        return UpstreamError(f'{self.adapter.provider_name} API error', provider_error)

    def _remote_fetch_error(self, url: str, error: httpx.HTTPError) -> RemoteFetchError:
        status = error.response.status_code if isinstance(error, httpx.HTTPStatusError) else None
        provider_error = ProviderError(http_status=status, provider_message=repr(error), stage='fetch-remote-image')
        return RemoteFetchError('Failed to fetch image URL', provider_error, url=url)

    def _parse_generation_response(self, response: Response) -> ImagePayload:
        try:
            payload = response.json()
        except ValueError as e:
            raise UpstreamShapeError(f'Unexpected response from {self.adapter.provider_name}', details=response.text) from e
        return self.adapter.parse_response(payload)

    def _inline_result(self, image_payload: ImagePayload) -> GenerationResult:
        logger.info(f'got inline base64 image from {image_payload.path}', extra={'provider': self.provider})
        return GenerationResult(
            model_info=self.adapter.model_info,
            image_base64=image_payload.value,
            source_format='inline-base64',
        )

    def _fetched_result(self, url: str, response: Response) -> GenerationResult:
        logger.info(f'fetched image url ({len(response.content)} bytes)', extra={'provider': self.provider})
        return GenerationResult.from_bytes(
            response.content,
            model_info=self.adapter.model_info,
            source_format='fetched-url',
            url=url,
        )

    def _success_response(self, result: GenerationResult) -> ProxyResponse:
        image = result.to_data_url() if self.image_encoding == 'data_url' else result.image_base64
        return ProxyResponse(status_code=200, body={'image': image, 'mime': result.mime})

    def _error_response(self, error: ProxyError) -> ProxyResponse:
        level = logging.ERROR if error.status_code >= 500 else logging.WARNING
        logger.log(
            level,
            f'{error.stage} failed: {error.message}',
            extra={'stage': error.stage, 'status': error.status_code, 'provider': self.provider, 'details': error.details},
        )
        return ProxyResponse(status_code=error.status_code, body=error.to_body(), headers=error.headers)

    def _unexpected_error_response(self, error: Exception) -> ProxyResponse:
        logger.exception('server error', extra={'stage': 'unexpected', 'status': 500, 'provider': self.provider})
        return ProxyResponse(status_code=500, body={'error': 'Server error', 'details': str(error)})
