from __future__ import annotations

from typing import Any, ClassVar, Dict, Optional

from pydantic import BaseModel

from imageproxy.types import FailureStage


class ProviderError(BaseModel):
    http_status: Optional[int] = None
    provider_message: Any = None
    stage: FailureStage


class ProxyError(Exception):
    """
    Base class of every failure the proxy turns into a JSON error envelope.

    Attributes:
        status_code (int): HTTP status returned to the caller.
        stage (str): Pipeline stage the failure belongs to, used for logging.
        message (str): Human readable message, sent as ``error``.
        details (Any): Opaque diagnostic, sent as ``details`` when present.
    """

    status_code: ClassVar[int] = 500
    stage: ClassVar[str] = 'request'

    def __init__(self, message: str, details: Any = None, *args: object) -> None:
        super().__init__(message, *args)
        self.message = message
        self.details = details

    @property
    def headers(self) -> Dict[str, str]:
        return {}

    def to_body(self) -> Dict[str, Any]:
        body: Dict[str, Any] = {'error': self.message}
        if self.details is not None:
            body['details'] = self.details
        return body


class InvalidInput(ProxyError):
    status_code = 400
    stage = 'input'


class MethodNotAllowed(ProxyError):
    status_code = 405
    stage = 'input'

    def __init__(self, method: str, allowed_method: str = 'POST') -> None:
        super().__init__(f'Method {method} not allowed. Use {allowed_method}.')
        self.allowed_method = allowed_method

    @property
    def headers(self) -> Dict[str, str]:
        return {'Allow': self.allowed_method}


class ConfigurationError(ProxyError):
    status_code = 500
    stage = 'configuration'


class PolicyRejected(ProxyError):
    status_code = 400
    stage = 'moderation'


class UpstreamError(ProxyError):
    status_code = 502
    stage = 'generation'

    def __init__(self, message: str, provider_error: ProviderError) -> None:
        details = {'status': provider_error.http_status, 'response': provider_error.provider_message}
        super().__init__(message, details)
        self.provider_error = provider_error


class UpstreamShapeError(ProxyError):
    status_code = 500
    stage = 'generation'


class RemoteFetchError(UpstreamError):
    stage = 'fetch-remote-image'

    def __init__(self, message: str, provider_error: ProviderError, url: Optional[str] = None) -> None:
        super().__init__(message, provider_error)
        self.details = {'url': url, 'status': provider_error.http_status}
