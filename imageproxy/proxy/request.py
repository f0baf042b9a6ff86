from __future__ import annotations

import json
import logging
import math
import re
from typing import Any, Dict, Mapping, Optional, Sequence

from imageproxy.exception import InvalidInput
from imageproxy.image_generation.model_output import GenerationRequest
from imageproxy.image_generation.size import SizePolicy

logger = logging.getLogger(__name__)

DEFAULT_DIMENSION = 512
WIDTH_FIELDS = ('width', 'w', 'size')
HEIGHT_FIELDS = ('height', 'h', 'size')
_LEADING_INT = re.compile(r'^\s*([+-]?\d+)')
_SIZE_PAIR = re.compile(r'^\s*(\d+)\s*[xX]\s*(\d+)\s*$')


def parse_request_body(body: Any) -> Dict[str, Any]:
    """
    Turn an inbound body into a dict without ever failing the request.

    ``body`` may be an already parsed mapping, raw JSON text or raw bytes. Anything that
    cannot be read as a JSON object is logged and treated as an empty body.
    """
    if body is None:
        return {}
    if isinstance(body, Mapping):
        return dict(body)
    if isinstance(body, (bytes, bytearray)):
        try:
            body = bytes(body).decode('utf-8')
        except UnicodeDecodeError as e:
            logger.warning(f'request body is not utf-8, treating it as empty: {e}', extra={'stage': 'input'})
            return {}
    if not isinstance(body, str):
        logger.warning(f'unsupported request body type {type(body).__name__}, treating it as empty', extra={'stage': 'input'})
        return {}
    if not body.strip():
        return {}
    try:
        parsed = json.loads(body)
    except json.JSONDecodeError as e:
        logger.warning(f'request body parse failed, treating it as empty: {e}', extra={'stage': 'input'})
        return {}
    if not isinstance(parsed, dict):
        logger.warning(
            f'request body is a JSON {type(parsed).__name__}, not an object, treating it as empty', extra={'stage': 'input'}
        )
        return {}
    return parsed


def coerce_int(value: Any) -> Optional[int]:
    """Lenient integer parsing: ``512``, ``512.7``, ``'512'`` and ``'512px'`` all give 512."""
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        return int(value) if math.isfinite(value) else None
    if isinstance(value, str):
        match = _LEADING_INT.match(value)
        return int(match.group(1)) if match else None
    return None


def _requested_dimension(body: Mapping[str, Any], fields: Sequence[str], axis: int) -> Optional[int]:
    # the first non-empty field decides, even when it does not parse
    for field in fields:
        value = body.get(field)
        if not value:
            continue
        if field == 'size' and isinstance(value, str):
            pair = _SIZE_PAIR.match(value)
            if pair:
                return int(pair.group(axis + 1))
        return coerce_int(value)
    return None


def build_generation_request(
    body: Mapping[str, Any],
    size_policy: SizePolicy,
    extra_fields: Sequence[str] = (),
) -> GenerationRequest:
    prompt = str(body.get('prompt') or '').strip()
    if not prompt:
        raise InvalidInput('Missing `prompt` in request body.')

    width = _requested_dimension(body, WIDTH_FIELDS, 0) or DEFAULT_DIMENSION
    height = _requested_dimension(body, HEIGHT_FIELDS, 1) or width
    width, height = size_policy.resolve(width, height)

    extras = {field: body[field] for field in extra_fields if body.get(field) is not None}
    return GenerationRequest(prompt=prompt, width=width, height=height, extras=extras)
