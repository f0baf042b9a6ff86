from imageproxy.proxy.core import ImageGenerationProxy, ProxyResponse
from imageproxy.proxy.request import build_generation_request, coerce_int, parse_request_body

__all__ = [
    'ImageGenerationProxy',
    'ProxyResponse',
    'build_generation_request',
    'coerce_int',
    'parse_request_body',
]
