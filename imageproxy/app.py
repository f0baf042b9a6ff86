from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator, Awaitable, Callable, Dict

from fastapi import FastAPI, Request
from fastapi.exception_handlers import http_exception_handler
from fastapi.responses import JSONResponse, Response
from starlette.concurrency import run_in_threadpool
from starlette.exceptions import HTTPException as StarletteHTTPException

from imageproxy.http import HttpClient
from imageproxy.proxy import ImageGenerationProxy
from imageproxy.settings import ProxySettings

logger = logging.getLogger(__name__)

ProxyFactory = Callable[[str], ImageGenerationProxy]

PROVIDER_ROUTES: Dict[str, str] = {
    'openai': '/api/generate-image-openai',
    'xai': '/api/generate-image-xai',
}
PROVIDER_BY_PATH: Dict[str, str] = {path: provider for provider, path in PROVIDER_ROUTES.items()}


def create_app(
    proxy_factory: ProxyFactory | None = None,
    settings: ProxySettings | None = None,
    http_client: HttpClient | None = None,
) -> FastAPI:
    """
    Build the FastAPI application with one image generation handler per provider.

    Unless ``proxy_factory`` is given, every request builds its proxy from freshly read
    settings. Only the HTTP connection pool is shared between requests, and its timeout
    is read once, here.
    """
    if http_client is None:
        http_client = HttpClient(timeout=(settings or ProxySettings()).timeout)

    def default_proxy_factory(provider: str) -> ImageGenerationProxy:
        return ImageGenerationProxy.from_settings(settings or ProxySettings(), provider=provider, http_client=http_client)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        yield
        await http_client.aclose()
        http_client.close()

    app = FastAPI(title='Image Generation Proxy', lifespan=lifespan)
    app.state.http_client = http_client
    app.state.proxy_factory = proxy_factory or default_proxy_factory

    @app.get('/health')
    async def health() -> Dict[str, str]:
        return {'status': 'ok'}

    for provider, path in PROVIDER_ROUTES.items():
        app.add_api_route(path, _generate_image_endpoint(provider), methods=['POST'], name=f'generate_image_{provider}')

    # any other verb on a provider path is answered by the proxy itself
    @app.exception_handler(StarletteHTTPException)
    async def method_not_allowed(request: Request, exc: StarletteHTTPException) -> Response:
        provider = PROVIDER_BY_PATH.get(request.url.path)
        if exc.status_code == 405 and provider is not None:
            return await _generate_image_endpoint(provider)(request)
        return await http_exception_handler(request, exc)

    return app


def _generate_image_endpoint(provider: str) -> Callable[[Request], Awaitable[JSONResponse]]:
    async def generate_image(request: Request) -> JSONResponse:
        try:
            proxy = await run_in_threadpool(request.app.state.proxy_factory, provider)
        except Exception as e:
            logger.exception(f'failed to build {provider} proxy', extra={'stage': 'configuration', 'provider': provider})
            return JSONResponse(status_code=500, content={'error': 'Server misconfigured', 'details': str(e)})
        body = await request.body()
        response = await proxy.async_handle(request.method, body)
        return JSONResponse(status_code=response.status_code, content=response.body, headers=response.headers)

    return generate_image
